"""YAML configuration loading for filjwt."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from filjwt.constants import CRV_HEADER, CURVE, NETWORKS

logger = logging.getLogger(__name__)


@dataclass
class AddressConfig:
    network: str = "testnet"


@dataclass
class TokenConfig:
    headers: dict = field(default_factory=lambda: {CRV_HEADER: CURVE})
    leeway: float = 0.0  # seconds of clock skew accepted when verifying
    verify_claims: bool = True


@dataclass
class FilJWTConfig:
    address: AddressConfig = field(default_factory=AddressConfig)
    token: TokenConfig = field(default_factory=TokenConfig)
    log_level: str = "INFO"


def load_config(path: Path) -> FilJWTConfig:
    """Load configuration from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a YAML mapping")

    config = FilJWTConfig()

    if "address" in raw:
        a = raw["address"] or {}
        config.address = AddressConfig(network=a.get("network", "testnet"))

    if "token" in raw:
        t = raw["token"] or {}
        config.token = TokenConfig(
            headers=t.get("headers", {CRV_HEADER: CURVE}) or {},
            leeway=t.get("leeway", 0.0),
            verify_claims=t.get("verify_claims", True),
        )

    config.log_level = raw.get("log_level", "INFO")
    get_network_prefix(config.address)
    logger.debug("Loaded config from %s", path)
    return config


def get_network_prefix(config: AddressConfig) -> str:
    """Resolve the address prefix ('f' or 't') for the configured network."""
    try:
        return NETWORKS[config.network]
    except KeyError:
        raise ValueError(
            f"Unknown network '{config.network}'; "
            f"expected one of {', '.join(sorted(NETWORKS))}"
        ) from None


def get_decode_options(config: TokenConfig) -> dict:
    """Keyword arguments for ``decode_token`` derived from the token config."""
    kwargs = {"leeway": config.leeway}
    if not config.verify_claims:
        kwargs["options"] = {"verify_exp": False, "verify_nbf": False, "verify_iat": False}
    return kwargs

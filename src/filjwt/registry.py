"""Process-wide table of filjwt signing methods.

The table is built once by ``init_registry`` and is read-only afterwards.
The same algorithm instances are registered with PyJWT's global JWS object
so plain ``jwt.encode`` / ``jwt.decode`` calls can use them.
"""

from __future__ import annotations
import logging
import threading
from types import MappingProxyType
from typing import Mapping, Optional

import jwt
from jwt.algorithms import Algorithm

from filjwt.constants import ALGORITHM
from filjwt.errors import UnknownAlgorithm
from filjwt.es256kr import ES256KRAlgorithm

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()
_registry: Optional[Mapping[str, Algorithm]] = None


def init_registry() -> Mapping[str, Algorithm]:
    """Build the signing-method table and register it with PyJWT.

    Safe to call any number of times from any thread; only the first call
    does any work.
    """
    global _registry
    if _registry is not None:
        return _registry
    with _init_lock:
        if _registry is None:
            methods = {ALGORITHM: ES256KRAlgorithm()}
            for alg, method in methods.items():
                jwt.register_algorithm(alg, method)
                logger.debug("Registered JWT signing method %s", alg)
            _registry = MappingProxyType(methods)
    return _registry


def get_signing_method(alg: str) -> Algorithm:
    """Look up a signing method by its JWT 'alg' identifier."""
    registry = init_registry()
    try:
        return registry[alg]
    except KeyError:
        raise UnknownAlgorithm(f"No signing method registered for {alg!r}") from None


def registered_algorithms() -> tuple[str, ...]:
    return tuple(init_registry())

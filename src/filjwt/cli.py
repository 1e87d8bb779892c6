"""Click CLI for filjwt."""

import json as json_mod
import logging
import sys
from pathlib import Path

import click
import jwt

from filjwt.config import (
    FilJWTConfig,
    get_decode_options,
    get_network_prefix,
    load_config,
)
from filjwt.errors import FilJWTError
from filjwt.tokens import decode_token, encode_token, inspect_token
from filjwt.wallet import (
    address_of,
    decode_lotus_export,
    encode_lotus_export,
    generate_private_key,
)


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record):
        return json_mod.dumps({
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str, json_log: bool = False) -> None:
    if json_log:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            handlers=[handler],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def parse_pairs(pairs, option: str) -> dict:
    """Parse repeated key=value options. Values are JSON when they parse as JSON."""
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.UsageError(f"{option} expects key=value, got '{pair}'.")
        try:
            result[key] = json_mod.loads(value)
        except ValueError:
            result[key] = value
    return result


def _read_export(export: str) -> str:
    if export == "-":
        export = sys.stdin.read()
    return export.strip()


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True),
              default=None, help="Path to config YAML file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-log", is_flag=True, help="Output logs in structured JSON format")
@click.pass_context
def cli(ctx, config_path, verbose, json_log):
    """filjwt: ES256K-R JWTs signed with Filecoin secp256k1 wallet keys."""
    ctx.ensure_object(dict)

    if config_path:
        try:
            config = load_config(Path(config_path))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--config")
    else:
        config = FilJWTConfig()

    if verbose:
        config.log_level = "DEBUG"

    setup_logging(config.log_level, json_log=json_log)
    ctx.obj["config"] = config
    ctx.obj["network"] = get_network_prefix(config.address)


# --- Keys ---

@cli.command("address")
@click.argument("export", default="-")
@click.pass_context
def address_cmd(ctx, export):
    """Print the wallet address of a Lotus key export (reads stdin for '-')."""
    try:
        addr, _ = decode_lotus_export(_read_export(export), network=ctx.obj["network"])
    except FilJWTError as e:
        _fail(str(e))
    click.echo(str(addr))


@cli.command("keygen")
@click.pass_context
def keygen(ctx):
    """Generate a new secp256k1 key in Lotus export format."""
    private_key = generate_private_key()
    addr = address_of(private_key, network=ctx.obj["network"])
    click.echo(f"Address: {addr}")
    click.echo(f"Export:  {encode_lotus_export(private_key)}")


# --- Tokens ---

@cli.command("sign")
@click.option("--export", "-e", prompt=True, hide_input=True,
              help="Hex-encoded Lotus wallet export")
@click.option("--claim", "claims", multiple=True,
              help="Claim as key=value (repeatable; JSON values allowed)")
@click.option("--claims-json", default=None, help="Claims as a JSON object")
@click.option("--header", "headers", multiple=True,
              help="Extra header as key=value (repeatable)")
@click.pass_context
def sign(ctx, export, claims, claims_json, headers):
    """Sign claims into an ES256K-R token."""
    config = ctx.obj["config"]

    payload = {}
    if claims_json:
        try:
            payload = json_mod.loads(claims_json)
        except ValueError as e:
            raise click.UsageError(f"--claims-json is not valid JSON: {e}")
        if not isinstance(payload, dict):
            raise click.UsageError("--claims-json must be a JSON object.")
    payload.update(parse_pairs(claims, "--claim"))

    extra_headers = dict(config.token.headers)
    extra_headers.update(parse_pairs(headers, "--header"))

    try:
        addr, private_key = decode_lotus_export(export, network=ctx.obj["network"])
        token = encode_token(payload, private_key, address=addr, headers=extra_headers)
    except FilJWTError as e:
        _fail(str(e))
    click.echo(token)


@cli.command("verify")
@click.argument("token")
@click.option("--address", "-a", default=None,
              help="Expected signer address (default: the token's 'kid' header)")
@click.pass_context
def verify(ctx, token, address):
    """Verify an ES256K-R token and print its claims."""
    config = ctx.obj["config"]
    try:
        claims = decode_token(token, key=address, **get_decode_options(config.token))
    except (FilJWTError, jwt.PyJWTError) as e:
        _fail(f"Token is invalid: {e}")
    click.echo(json_mod.dumps(claims, indent=2, sort_keys=True))


@cli.command("inspect")
@click.argument("token")
@click.pass_context
def inspect(ctx, token):
    """Show a token's header, claims and recovered signer without verifying it."""
    try:
        info = inspect_token(token, network=ctx.obj["network"])
    except (FilJWTError, jwt.PyJWTError) as e:
        _fail(str(e))
    info["signer"] = str(info["signer"])
    click.echo(json_mod.dumps(info, indent=2, sort_keys=True))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()

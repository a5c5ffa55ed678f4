"""Command line access to a configured object store."""

import contextlib
import logging
import shutil
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any, Iterator

import click
import yaml
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .common.logging_config import setup_colored_logging
from .plugin import new_object_store, registered_object_stores
from .storage.base import ObjectStore
from .storage.exceptions import StorageError

log = logging.getLogger(__name__)


class _StoreContext:
    """Defers loading the store until a command needs it."""

    def __init__(self, config_path: str, provider: str):
        self.config_path = config_path
        self.provider = provider
        self._store: ObjectStore | None = None

    def store(self) -> ObjectStore:
        if self._store is None:
            config = load_config_file(self.config_path)
            with storage_errors():
                self._store = new_object_store(self.provider, config)
        return self._store


def load_config_file(path: str) -> dict[str, str]:
    """Read a YAML mapping of config keys. Null values are treated as absent."""
    try:
        raw = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read config file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise click.ClickException(f"Config file {path} must contain a mapping of config keys")
    return {str(key): str(value) for key, value in raw.items() if value is not None}


@contextlib.contextmanager
def storage_errors() -> Iterator[None]:
    try:
        yield
    except StorageError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__, "-v", "--version", help="Show the CLI version and exit.")
@click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    envvar="BACKUP_BLOB_STORE_CONFIG",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with the object store config keys.",
)
@click.option(
    "--provider",
    default="azure",
    show_default=True,
    type=click.Choice(registered_object_stores()),
    help="Registered object store to load.",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.option(
    "-u",
    "--system-env",
    is_flag=True,
    default=False,
    help="Use system environment variables only; do not load .env file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str, provider: str, verbose: bool, system_env: bool):
    """Manage backup artifacts in an object store."""
    setup_colored_logging(level=logging.DEBUG if verbose else logging.WARNING, stream=sys.stderr)

    if not system_env:
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(dotenv_path=env_path, override=True)
            log.debug("Loaded environment from %s", env_path)

    ctx.obj = _StoreContext(config_path, provider)


@cli.command()
@click.argument("bucket")
@click.argument("key")
@click.argument("source", type=click.File("rb"))
@click.pass_obj
def put(obj: _StoreContext, bucket: str, key: str, source: Any):
    """Upload SOURCE (or '-' for stdin) to BUCKET/KEY."""
    with storage_errors():
        obj.store().put_object(bucket, key, source)


@cli.command()
@click.argument("bucket")
@click.argument("key")
@click.argument("destination", type=click.File("wb"), default="-")
@click.pass_obj
def get(obj: _StoreContext, bucket: str, key: str, destination: Any):
    """Download BUCKET/KEY to DESTINATION (stdout by default)."""
    with storage_errors():
        with obj.store().get_object(bucket, key) as reader:
            shutil.copyfileobj(reader, destination)


@cli.command()
@click.argument("bucket")
@click.argument("key")
@click.pass_obj
def exists(obj: _StoreContext, bucket: str, key: str):
    """Print whether BUCKET/KEY exists."""
    with storage_errors():
        found = obj.store().object_exists(bucket, key)
    click.echo("true" if found else "false")


@cli.command(name="ls")
@click.argument("bucket")
@click.option("--prefix", default="", help="Only list keys starting with this prefix.")
@click.option("--delimiter", default=None, help="List common prefixes one segment below --prefix.")
@click.pass_obj
def list_keys(obj: _StoreContext, bucket: str, prefix: str, delimiter: str | None):
    """List keys (or common prefixes) in BUCKET."""
    with storage_errors():
        store = obj.store()
        if delimiter:
            names = store.list_common_prefixes(bucket, prefix, delimiter)
        else:
            names = store.list_objects(bucket, prefix)
    for name in names:
        click.echo(name)


@cli.command(name="rm")
@click.argument("bucket")
@click.argument("key")
@click.pass_obj
def remove(obj: _StoreContext, bucket: str, key: str):
    """Delete BUCKET/KEY and its snapshots."""
    with storage_errors():
        obj.store().delete_object(bucket, key)


@cli.command()
@click.argument("bucket")
@click.argument("key")
@click.option("--ttl", default=3600, show_default=True, type=click.IntRange(min=1), help="Lifetime in seconds.")
@click.pass_obj
def sign(obj: _StoreContext, bucket: str, key: str, ttl: int):
    """Print a read-only signed URL for BUCKET/KEY."""
    with storage_errors():
        url = obj.store().create_signed_url(bucket, key, timedelta(seconds=ttl))
    click.echo(url)


def main():
    cli()


if __name__ == "__main__":
    main()

"""Typer application and CLI entry point for respcache.

The CLI drives the same :class:`~respcache.client.CachedClient` that library
users embed, configured from ``config.json`` (see :mod:`respcache.config`):

* ``get`` / ``request`` -- fetch through the cache and print the payload.
* ``revalidate`` / ``clear`` -- drop entries.
* ``hash`` -- show the physical key for a logical key.
* ``config show|init|path`` -- inspect and create the config file.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional, TypeVar

import httpx
import typer

from respcache import __version__
from respcache.client import CachedClient, create_cached_client
from respcache.exceptions import RespcacheError
from respcache.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INTERRUPTED,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)
from respcache.keys import hash_key
from respcache.models import AppConfig, CacheOptions

T = TypeVar("T")

app = typer.Typer(
    name="respcache",
    help="Fetch HTTP resources through a persistent response cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Inspect and create the configuration file.", no_args_is_help=True)
app.add_typer(config_app, name="config")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"respcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (default: XDG config dir)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    output_file: Optional[str] = typer.Option(None, "-o", "--output", help="Output file path."),
) -> None:
    """Root callback: set up output and logging, stash shared options in ``ctx.obj``."""
    from respcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _load(ctx: typer.Context) -> AppConfig:
    """Load the config file named by --config, exiting on errors."""
    from respcache.config import load_config
    from respcache.output import error

    try:
        return load_config((ctx.obj or {}).get("config_path"))
    except RespcacheError as exc:
        error(str(exc))
        raise typer.Exit(exc.exit_code) from exc


@asynccontextmanager
async def _cached_client(config: AppConfig) -> AsyncIterator[CachedClient]:
    """Open an httpx client plus cache as described by *config*."""
    from respcache.config import resolve_storage_config

    req = config.request
    async with httpx.AsyncClient(
        base_url=req.base_url or "",
        timeout=req.timeout,
        verify=req.verify_ssl,
        headers=req.headers,
        follow_redirects=True,
    ) as http:
        async with create_cached_client(
            http, resolve_storage_config(config), config.defaults
        ) as client:
            yield client


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro* and translate failures into exit codes."""
    from respcache.output import error

    try:
        return asyncio.run(coro)
    except RespcacheError as exc:
        error(str(exc))
        raise typer.Exit(exc.exit_code) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        error(f"HTTP {status} {exc.response.reason_phrase or ''}".rstrip())
        raise typer.Exit(EXIT_NOT_FOUND if status == 404 else EXIT_HTTP_ERROR) from exc
    except httpx.TransportError as exc:
        error(f"Request failed: {exc}")
        raise typer.Exit(EXIT_CONNECTION_ERROR) from exc


def _parse_pairs(items: Optional[list[str]], sep: str, what: str) -> dict[str, str]:
    """Parse ``k<sep>v`` strings into a dict."""
    pairs: dict[str, str] = {}
    for item in items or []:
        name, found, value = item.partition(sep)
        if not found or not name.strip():
            from respcache.output import error

            error(f"Invalid {what} {item!r}; expected NAME{sep}VALUE")
            raise typer.Exit(EXIT_INVALID_USAGE)
        pairs[name.strip()] = value.strip()
    return pairs


def _parse_body(body: Optional[str]) -> Any:  # noqa: ANN401
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return body


# ------------------------------------------------------------------ #
# Request commands
# ------------------------------------------------------------------ #


@app.command("get")
def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Absolute URL or path relative to base_url."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Explicit cache key."),
    stale_time: Optional[int] = typer.Option(
        None, "--stale-time", "-s", min=-1, help="Staleness window in ms (-1: never)."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the cache for this call."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-p", help="Query parameter NAME=VALUE."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header NAME:VALUE."),
) -> None:
    """GET a resource through the cache and print its payload."""
    from respcache.client.response import format_api_response

    config = _load(ctx)
    options = CacheOptions(key=key, stale_time=stale_time, use_cache=False if no_cache else None)
    params = _parse_pairs(param, "=", "parameter")
    headers = _parse_pairs(header, ":", "header")

    async def _go() -> Any:
        async with _cached_client(config) as client:
            return await client.get(
                url, cache_options=options, params=params or None, headers=headers or None
            )

    format_api_response(_run(_go()))


@app.command("request")
def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(..., help="HTTP method."),
    url: str = typer.Argument(..., help="Absolute URL or path relative to base_url."),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="Request body (JSON or text)."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Explicit cache key."),
    stale_time: Optional[int] = typer.Option(
        None, "--stale-time", "-s", min=-1, help="Staleness window in ms (-1: never)."
    ),
    use_cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Force caching on or off for this call."
    ),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header NAME:VALUE."),
) -> None:
    """Send any HTTP method through the cache and print the payload."""
    from respcache.client.response import format_api_response

    config = _load(ctx)
    options = CacheOptions(key=key, stale_time=stale_time, use_cache=use_cache)
    headers = _parse_pairs(header, ":", "header")
    parsed = _parse_body(body)
    body_kwargs: dict[str, Any] = {}
    if isinstance(parsed, (dict, list)):
        body_kwargs["json"] = parsed
    elif parsed is not None:
        body_kwargs["content"] = parsed

    async def _go() -> Any:
        async with _cached_client(config) as client:
            return await client.request(
                method, url, cache_options=options, headers=headers or None, **body_kwargs
            )

    format_api_response(_run(_go()))


# ------------------------------------------------------------------ #
# Cache management commands
# ------------------------------------------------------------------ #


@app.command("revalidate")
def revalidate_command(
    ctx: typer.Context,
    keys: list[str] = typer.Argument(..., help="Logical cache keys (usually URLs)."),
) -> None:
    """Drop the cache entries for KEYS."""
    from respcache.output import success

    config = _load(ctx)

    async def _go() -> None:
        async with _cached_client(config) as client:
            await client.revalidate(*keys)

    _run(_go())
    success(f"Revalidated {len(keys)} key(s)")


@app.command("clear")
def clear_command(ctx: typer.Context) -> None:
    """Drop every entry in the configured namespace."""
    from respcache.output import success

    config = _load(ctx)

    async def _go() -> None:
        async with _cached_client(config) as client:
            await client.clear_cache()

    _run(_go())
    success(f"Cleared namespace '{config.storage.namespace}'")


@app.command("hash")
def hash_command(text: str = typer.Argument(..., help="Logical cache key.")) -> None:
    """Print the 8-character physical key for TEXT."""
    from respcache.output import print_data

    print_data(hash_key(text))


# ------------------------------------------------------------------ #
# Config commands
# ------------------------------------------------------------------ #


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    from respcache.output import format_response

    config = _load(ctx)
    format_response(config.model_dump(mode="json", by_alias=True))


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a default config file."""
    from respcache.config import default_config_path, save_config
    from respcache.output import error, success, suggest

    path = (ctx.obj or {}).get("config_path") or default_config_path()
    if path.exists() and not force:
        error(f"Config already exists at {path}")
        suggest("Pass --force to overwrite it")
        raise typer.Exit(EXIT_INVALID_USAGE)
    save_config(AppConfig(), path)
    success(f"Wrote {path}")
    suggest("Set request.base_url and storage.type to suit your API")


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Print the config file location."""
    from respcache.config import default_config_path
    from respcache.output import print_data

    print_data(str((ctx.obj or {}).get("config_path") or default_config_path()))


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``respcache`` console script.

    Unhandled :class:`~respcache.exceptions.RespcacheError` instances exit
    with the error's ``exit_code``; anything else exits with
    :data:`~respcache.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from respcache.output import error

        if isinstance(exc, RespcacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)

"""Check-domain command for feedclean CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


def check_domain(
    host: Annotated[
        str,
        typer.Argument(help="Hostname or URL to check"),
    ],
    https_domains: Annotated[
        list[str] | None,
        typer.Option("--https-domain", "-d", help="Forced-HTTPS domain (repeatable)"),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config JSON file providing https_domains"),
    ] = None,
) -> None:
    """Show whether HTTPS is forced for a host.

    Exits with code 0 if the host matches a forced-HTTPS domain, 2 if it
    does not, and 1 on errors.

    Args:
        host: Hostname, or a URL whose host is checked
        https_domains: Forced-HTTPS domains, added to those from the config file
        config: Config JSON file

    Example:
        feedclean check-domain img.example.com -d example.com
        feedclean check-domain http://example.com/x.png --config feed.json
    """
    from urllib.parse import urlsplit

    from feedclean.config import ConfigLoadError, load_config_dict
    from feedclean.domains import HttpsDomainTree

    domains: list[str] = []
    if config:
        try:
            domains.extend(load_config_dict(config).get("https_domains", []))
        except ConfigLoadError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from None
    domains.extend(https_domains or [])

    if not domains:
        typer.echo("Error: No forced-HTTPS domains given (use --https-domain or --config)", err=True)
        raise typer.Exit(1)

    tree = HttpsDomainTree(domains)
    hostname = urlsplit(host).hostname if "://" in host else host

    if tree.is_forced_https(hostname):
        typer.echo(f"{hostname}: HTTPS forced")
        if "://" in host:
            typer.echo(f"  {tree.https_url(host)}")
        return

    typer.echo(f"{hostname}: not forced")
    raise typer.Exit(2)

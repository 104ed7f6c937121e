"""Sanitize command for feedclean CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from feedclean.config import ConfigLoadError, ConfigurationError


def sanitize(
    input_file: Annotated[
        Path,
        typer.Argument(help="File holding the fragment ('-' for stdin)"),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output filename (default: stdout)"),
    ] = None,
    base: Annotated[
        str,
        typer.Option("--base", "-b", help="Base URI for relative URLs"),
    ] = "",
    content_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Content type: html, xhtml, text, iri or maybe-html"),
    ] = "html",
    base64: Annotated[
        bool,
        typer.Option("--base64", help="Content is base64-encoded"),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config JSON file overriding defaults"),
    ] = None,
    https_domains: Annotated[
        list[str] | None,
        typer.Option("--https-domain", "-d", help="Forced-HTTPS domain (repeatable)"),
    ] = None,
    encode: Annotated[
        bool,
        typer.Option("--encode", help="HTML-encode stripped tags instead of removing them"),
    ] = False,
    keep_div: Annotated[
        bool,
        typer.Option("--keep-div", help="Keep a bare <div> wrapper around the output"),
    ] = False,
    strip_comments: Annotated[
        bool,
        typer.Option("--strip-comments", help="Remove HTML comments"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log sanitizer decisions to stderr"),
    ] = False,
) -> None:
    """Sanitize a feed fragment.

    Strips dangerous tags and attributes, resolves relative URLs against
    --base and upgrades http:// URLs on forced-HTTPS domains.

    Args:
        input_file: File holding the fragment, or '-' for stdin
        output: Output filename (default: stdout)
        base: Base URI for relative URLs
        content_type: Content type name
        base64: Content is base64-encoded
        config: Config JSON file overriding defaults
        https_domains: Forced-HTTPS domains, added to those from the config
        encode: Encode stripped tags instead of removing them
        keep_div: Keep a bare <div> wrapper around the output
        strip_comments: Remove HTML comments
        verbose: Log sanitizer decisions to stderr

    Example:
        feedclean sanitize item.html --base https://example.com/feed
        feedclean sanitize item.html -o clean.html -d example.com
        feedclean sanitize summary.txt --type text
        cat item.html | feedclean sanitize - --encode
    """
    from feedclean.config import load_config
    from feedclean.constructs import ContentType
    from feedclean.sanitization import ParserUnavailableError, Sanitizer

    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        flags = ContentType.from_name(content_type)
    except ValueError:
        typer.echo(f"Error: Unknown content type: {content_type}", err=True)
        raise typer.Exit(1) from None
    if base64:
        flags |= ContentType.BASE64

    if str(input_file) == "-":
        data = sys.stdin.read()
    else:
        if not input_file.exists():
            typer.echo(f"Error: File not found: {input_file}", err=True)
            raise typer.Exit(1)
        try:
            data = input_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            typer.echo(f"Error: I/O error: {e}", err=True)
            raise typer.Exit(1) from None

    try:
        settings = load_config(config)
        changes = {}
        if https_domains:
            changes["https_domains"] = (*settings.https_domains, *https_domains)
        if encode:
            changes["encode_instead_of_strip"] = True
        if keep_div:
            changes["remove_div"] = False
        if strip_comments:
            changes["strip_comments"] = True
        if changes:
            settings = settings.replace(**changes)
    except ConfigLoadError as e:
        typer.echo(f"Error: Failed to load config: {e}", err=True)
        raise typer.Exit(1) from None
    except ConfigurationError as e:
        typer.echo(f"Error: Invalid configuration: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        result = Sanitizer(settings).sanitize(data, flags, base)
    except ParserUnavailableError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if output is None:
        typer.echo(result)
        return

    try:
        output.write_text(result + "\n", encoding=settings.output_encoding)
    except OSError as e:
        typer.echo(f"Error: I/O error: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Sanitized: {output}", err=True)

"""Main CLI entry point for feedclean.

Provides commands for:
- sanitize: Sanitize an HTML/XHTML/text fragment from a file or stdin
- check-domain: Show whether a host gets its URLs upgraded to HTTPS
"""

from __future__ import annotations

try:
    import typer
except ImportError as e:
    raise ImportError("CLI dependencies not installed. Install with: pip install feedclean[cli]") from e

from feedclean.cli.check_domain import check_domain
from feedclean.cli.sanitize import sanitize

app = typer.Typer(
    name="feedclean",
    help="Sanitize HTML fragments from syndication feeds.",
    no_args_is_help=True,
)

app.command()(sanitize)
app.command(name="check-domain", help="Check whether a host is a forced-HTTPS domain")(check_domain)


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version flag was provided
    """
    if value:
        from feedclean import __version__

        typer.echo(f"feedclean {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    r"""Sanitize HTML fragments from syndication feeds.

    \b
    Examples:
        feedclean sanitize item.html --base https://example.com/feed
        feedclean sanitize item.html -o clean.html --https-domain example.com
        cat item.txt | feedclean sanitize - --type maybe-html
        feedclean check-domain img.example.com -d example.com
    """


if __name__ == "__main__":
    app()

"""
Main CLI entry point for vidprobe.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vidprobe import __version__
from vidprobe.cli.constants import (
    DESCRIPTION_PREVIEW_LENGTH,
    FAILURE_KIND_STYLES,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    MESSAGE_PREVIEW_LENGTH,
    STRATEGY_KIND_LABELS,
)
from vidprobe.config.settings import Settings, get_settings
from vidprobe.exceptions import (
    EXIT_CODE_EXTRACTION_FAILED,
    EXIT_CODE_UNSUPPORTED_PLATFORM,
    ExtractionFailedError,
    UnsupportedPlatformError,
)
from vidprobe.models.video import VideoMetadata
from vidprobe.services.detection import detect_platform, extract_platform_id
from vidprobe.services.resolver import VideoResolver
from vidprobe.services.strategies import DEFAULT_CHAIN_CLASSES, CredentialedStrategy

console = Console()

app = typer.Typer(
    name="vidprobe",
    help="Resolve YouTube, TikTok and Instagram URLs into video metadata",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_console_handler: Optional[logging.Handler] = None


def _configure_logging(settings: Settings, verbose: bool) -> None:
    """
    Attach a console handler to the ``vidprobe`` logger.

    Parameters
    ----------
    settings : Settings
        Provides the default log level.
    verbose : bool
        If True, log at DEBUG regardless of settings.
    """
    global _console_handler

    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    root_logger = logging.getLogger("vidprobe")
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler()
    _console_handler.setLevel(log_level)
    _console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger.addHandler(_console_handler)
    root_logger.setLevel(log_level)


async def _resolve(url: str, settings: Settings) -> VideoMetadata:
    async with VideoResolver(settings=settings) as resolver:
        return await resolver.resolve_video(url)


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _metadata_panel(metadata: VideoMetadata) -> Panel:
    """Render a resolved record as a rich panel."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold cyan", no_wrap=True)
    table.add_column("Value", style="white")

    author = metadata.author
    engagement = metadata.engagement
    author_label = escape(f"@{author.handle}") if author.handle else "-"
    if author.display_name:
        author_label += escape(f" ({author.display_name})")
    if author.verified:
        author_label += " [blue]✓[/blue]"

    table.add_row("Platform", metadata.platform.value)
    table.add_row("Author", author_label)
    if author.follower_count:
        table.add_row("Followers", f"{author.follower_count:,}")
    table.add_row("Published", metadata.published_at)
    table.add_row("Duration", f"{metadata.duration_seconds}s")
    table.add_row("Views", f"{engagement.views:,}")
    table.add_row("Likes", f"{engagement.likes:,}")
    table.add_row("Comments", f"{engagement.comments:,}")
    table.add_row("Shares", f"{engagement.shares:,}")
    table.add_row("Rating", "★" * metadata.rating + "☆" * (5 - metadata.rating))
    if metadata.hashtags:
        table.add_row("Hashtags", escape(" ".join(metadata.hashtags)))
    if metadata.description:
        table.add_row(
            "Description", escape(_truncate(metadata.description, DESCRIPTION_PREVIEW_LENGTH))
        )

    provenance = metadata.provenance
    source_style = "green" if provenance.is_authentic else "yellow"
    table.add_row(
        "Source",
        f"[{source_style}]{escape(provenance.data_source)}[/{source_style}] "
        f"({provenance.extraction_method.value})",
    )

    return Panel(
        table,
        title=f"[bold]{escape(metadata.title)}[/bold]",
        border_style=source_style,
    )


def _failure_table(error: ExtractionFailedError) -> Table:
    """Render per-strategy failure reasons in priority order."""
    table = Table(
        title=f"{error.platform.value} strategies tried",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("#", style="dim", width=3)
    table.add_column("Strategy", style="cyan")
    table.add_column("Failure", style="white")
    table.add_column("Status", style="dim", width=6)
    table.add_column("Message", style="white")

    for position, reason in enumerate(error.reasons, start=1):
        style = FAILURE_KIND_STYLES.get(reason.kind, "white")
        table.add_row(
            str(position),
            reason.strategy_id.value,
            f"[{style}]{reason.kind.value}[/{style}]",
            str(reason.status_code) if reason.status_code is not None else "-",
            escape(_truncate(reason.message, MESSAGE_PREVIEW_LENGTH)),
        )
    return table


@app.command()
def resolve(
    url: str = typer.Argument(..., help="YouTube, TikTok or Instagram video URL"),
    json_output: bool = typer.Option(
        False, "--json", help="Print the record as JSON instead of a panel"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Log every strategy attempt"
    ),
) -> None:
    """Resolve a video URL into a metadata record."""
    settings = get_settings()
    _configure_logging(settings, verbose)

    try:
        metadata = asyncio.run(_resolve(url, settings))
    except UnsupportedPlatformError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        console.print("[dim]Supported platforms: YouTube, TikTok, Instagram[/dim]")
        raise typer.Exit(code=EXIT_CODE_UNSUPPORTED_PLATFORM)
    except ExtractionFailedError as e:
        if json_output:
            failure = {
                "error": e.message,
                "url": e.url,
                "platform": e.platform.value,
                "reasons": [reason.to_dict() for reason in e.reasons],
            }
            typer.echo(json.dumps(failure, indent=2, ensure_ascii=False))
            raise typer.Exit(code=EXIT_CODE_EXTRACTION_FAILED)
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        console.print(_failure_table(e))
        if e.all_missing_credentials:
            console.print(
                "[yellow]![/yellow] No API credentials configured; set "
                "YOUTUBE_API_KEY, RAPIDAPI_KEY or RAPIDAPI_KEY_TIKTOK"
            )
        raise typer.Exit(code=EXIT_CODE_EXTRACTION_FAILED)

    if json_output:
        typer.echo(json.dumps(metadata.to_json_dict(), indent=2, ensure_ascii=False))
    else:
        console.print(_metadata_panel(metadata))


@app.command()
def detect(
    url: str = typer.Argument(..., help="Video URL to classify"),
) -> None:
    """Show which platform a URL belongs to, without any network call."""
    try:
        platform = detect_platform(url)
    except UnsupportedPlatformError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(code=EXIT_CODE_UNSUPPORTED_PLATFORM)

    platform_id = extract_platform_id(platform, url)
    console.print(f"[bold]Platform:[/bold] {platform.value}")
    console.print(f"[bold]Video ID:[/bold] {platform_id or '[dim]unknown[/dim]'}")


@app.command()
def strategies() -> None:
    """List every platform's strategy chain in priority order."""
    settings = get_settings()
    credentials = settings.configured_credentials

    for platform, classes in DEFAULT_CHAIN_CLASSES.items():
        table = Table(
            title=f"{platform.value} strategy chain",
            show_header=True,
            header_style="bold blue",
        )
        table.add_column("#", style="dim", width=3)
        table.add_column("Strategy", style="cyan")
        table.add_column("Kind", style="white")
        table.add_column("Authentic", style="white")
        table.add_column("Credential", style="white")

        for position, cls in enumerate(classes, start=1):
            strategy_id = cls.strategy_id
            if issubclass(cls, CredentialedStrategy):
                credential = (
                    f"[green]✓[/green] {cls.credential_setting.upper()}"
                    if credentials[cls.credential_setting]
                    else f"[red]✗[/red] {cls.credential_setting.upper()}"
                )
            else:
                credential = "[dim]not required[/dim]"
            table.add_row(
                str(position),
                strategy_id.value,
                STRATEGY_KIND_LABELS[strategy_id.kind],
                "yes" if strategy_id.is_authentic else "no",
                credential,
            )
        console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]vidprobe[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    vidprobe - Multi-source video metadata resolution.

    Detects the platform of a YouTube, TikTok or Instagram URL and tries
    official APIs, proxy APIs, oEmbed and page scraping in order until one
    returns data.
    """
    if version:
        console.print(f"vidprobe v{__version__}")
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'vidprobe --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

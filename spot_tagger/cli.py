"""
Command-line interface for spot-tagger.

This module implements the CLI using Click, with rich-click for help
and error formatting.

Commands:
    spot-tag resolve <ref>                 Show what a URI/URL points at
    spot-tag expand <ref>                  List every track behind a reference
    spot-tag search <query>                Search the catalog for tracks
    spot-tag tag <file> <track-ref>        Write a track's metadata into a file

References:
    Any of spotify:<kind>:<id> or https://open.spotify.com/<kind>/<id>.

Configuration:
    Reads config.yaml from the current directory (or --config):
    Spotify credentials, optional market, tagging and catalog options.

Exit Codes:
    0   success
    1   configuration or unexpected error
    2   invalid reference or unsupported audio format
    3   Spotify Web API failure
    4   tag encoding or file write failure
    130 interrupted
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100

from spot_tagger import __version__
from spot_tagger.core import (
    Config,
    ConfigError,
    InvalidReferenceError,
    RemoteServiceError,
    SpotTaggerError,
    TagEncodingError,
    UnsupportedFormatError,
    get_logger,
    load_config,
    log_tag_failure,
    setup_logging,
    shutdown_logging,
)
from spot_tagger.spotify import (
    CatalogExpander,
    MetadataClient,
    ReferenceKind,
    TrackRecord,
    create_spotify_session,
    parse_uri,
)
from spot_tagger.tag import AudioFormat
from spot_tagger.tag.embedder import MetadataEmbedder

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml (default: ./config.yaml)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug output on the console"
)
@click.version_option(__version__, prog_name="spot-tagger")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """
    Resolve Spotify references, expand them into tracks, and tag audio files.

    [bold]Examples:[/bold]

        spot-tag resolve "https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy"

        spot-tag expand spotify:artist:4tZwfgrHOc3mvqYlEYSvVi

        spot-tag tag song.mp3 spotify:track:4cOdK2wGLETKBW3PvgPWqT
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("reference")
@click.pass_context
def resolve(ctx: click.Context, reference: str) -> None:
    """Show the kind and name of the object a reference points at."""
    _run_command(ctx.obj, _resolve, reference)


@cli.command()
@click.argument("reference")
@click.option(
    "--all-pages",
    is_flag=True,
    help="Follow every page of a playlist (same as catalog.paginate_playlists)"
)
@click.pass_context
def expand(ctx: click.Context, reference: str, all_pages: bool) -> None:
    """List every track behind a track, playlist, album or artist."""
    _run_command(ctx.obj, _expand, reference, all_pages)


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Search the catalog for tracks (up to 50 results)."""
    _run_command(ctx.obj, _search, query)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("reference")
@click.option(
    "--format", "audio_format",
    type=click.Choice([fmt.value for fmt in AudioFormat], case_sensitive=False),
    default=None,
    help="Audio container of FILE (default: from the extension)"
)
@click.option(
    "--id3-v24",
    is_flag=True,
    help="Write ID3v2.4 instead of v2.3 for MP3 files (same as tagging.id3_v24)"
)
@click.option(
    "--no-cover",
    is_flag=True,
    help="Do not download and embed album art"
)
@click.pass_context
def tag(
    ctx: click.Context,
    file: Path,
    reference: str,
    audio_format: str | None,
    id3_v24: bool,
    no_cover: bool
) -> None:
    """Write the metadata of a Spotify track into FILE (mp3 or ogg)."""
    fmt = AudioFormat(audio_format.lower()) if audio_format else None
    _run_command(ctx.obj, _tag, file, reference, fmt, id3_v24, no_cover)


# =========================================================================
# Command Implementations
# =========================================================================

async def _resolve(config: Config, client: MetadataClient, reference: str) -> None:
    parsed = parse_uri(reference)
    item = await client.resolve(parsed)
    click.echo(f"{parsed.kind.value}: {item.name}")
    click.echo(parsed.uri)


async def _expand(
    config: Config,
    client: MetadataClient,
    reference: str,
    all_pages: bool
) -> None:
    parsed = parse_uri(reference)
    paginate = config.catalog.paginate_playlists or all_pages
    expander = CatalogExpander(client, paginate_playlists=paginate, show_progress=True)

    tracks = await expander.expand(parsed)
    _print_tracks(tracks)
    logger.info(f"{len(tracks)} tracks from {parsed.uri}")


async def _search(config: Config, client: MetadataClient, query: str) -> None:
    tracks = await client.search(query)
    if not tracks:
        click.echo("No tracks found.")
        return
    _print_tracks(tracks)


async def _tag(
    config: Config,
    client: MetadataClient,
    file: Path,
    reference: str,
    audio_format: AudioFormat | None,
    id3_v24: bool,
    no_cover: bool
) -> None:
    parsed = parse_uri(reference)
    if parsed.kind is not ReferenceKind.TRACK:
        raise InvalidReferenceError(
            f"'tag' needs a track reference, got {parsed.kind.value}: {parsed.uri}",
            details={"reference": parsed.uri}
        )

    record = TrackRecord.from_spotify_api(await client.track(parsed.id))

    embedder = MetadataEmbedder(
        separator=config.tagging.separator,
        id3_v24=config.tagging.id3_v24 or id3_v24,
        embed_cover=config.tagging.embed_cover and not no_cover
    )
    try:
        await asyncio.to_thread(embedder.embed_metadata, file, record, audio_format)
    except (TagEncodingError, UnsupportedFormatError) as e:
        log_tag_failure(logger, file, parsed.uri, e.message)
        raise

    click.echo(f"Tagged {file.name}: {record.artist} - {record.name}")


def _print_tracks(tracks: list[TrackRecord]) -> None:
    width = len(str(len(tracks)))
    for index, track in enumerate(tracks, start=1):
        artists = ", ".join(track.artists)
        click.echo(f"{index:>{width}}. {artists} - {track.name}  {track.uri}")


# =========================================================================
# Orchestration
# =========================================================================

def _run_command(
    options: dict[str, Any],
    action: Callable[..., Awaitable[None]],
    *args: Any
) -> None:
    """
    Load configuration, set up logging and a Spotify session, then run
    one async command.

    Raises:
        SystemExit: On any failure, with the exit code for its category.
    """
    try:
        config = load_config(options.get("config_path"))
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    try:
        setup_logging(config.logging.directory, verbose=options.get("verbose", False))
        session = create_spotify_session(config.spotify)
        client = MetadataClient(session, market=config.spotify.market)

        asyncio.run(action(config, client, *args))

    except (InvalidReferenceError, UnsupportedFormatError) as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.debug(f"Rejected input: {e.details}")
        sys.exit(2)

    except RemoteServiceError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check your client_id and client_secret in config.yaml", err=True)
        if e.is_rate_limit:
            click.echo("Spotify is rate limiting requests; try again later", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(3)

    except TagEncodingError as e:
        click.echo(f"Tagging error: {e.message}", err=True)
        logger.error(f"Tagging error: {e.message}", exc_info=True)
        sys.exit(4)

    except SpotTaggerError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    finally:
        shutdown_logging()


def main() -> None:
    """Entry point for the `spot-tag` console script."""
    cli()


if __name__ == "__main__":
    main()

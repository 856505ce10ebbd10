#!/usr/bin/env python3
import sys
import logging

from rich.console import Console
from rich.table import Table

from media_resolver.cli import parse_arguments
from media_resolver.config_manager import ConfigManager, ConfigHelper
from media_resolver.log_setup import level_from_name, setup_logging
from media_resolver.options import DefaultArguments
from media_resolver.service import ResolverService
from media_resolver.exceptions import ResolverError, SeasonOutOfBounds

log = logging.getLogger("media_resolver")


def run_episodes(service: ResolverService, args, console: Console) -> int:
    episodes = service.fetch_episode_list({'query': args.show_query}, season=args.season)
    if not episodes:
        console.print(f"[yellow]No episodes listed for '{args.show_query}'.[/yellow]")
        return 1
    table = Table(title=f"{episodes[0].series_name} ({len(episodes)} episodes)")
    table.add_column("Season", justify="right")
    table.add_column("Episode", justify="right")
    table.add_column("Title")
    for episode in episodes:
        table.add_row(episode.season_number, episode.episode_number, episode.title)
    console.print(table)
    return 0


def run_movie(service: ResolverService, args, console: Console) -> int:
    movie = service.detect_movie(args.file)
    if movie is None:
        console.print(f"[yellow]No movie match for '{args.file.name}'.[/yellow]")
        return 1
    console.print(f"[green]{movie}[/green] [dim](id {movie.movie_id})[/dim]")
    return 0


def run_episode(service: ResolverService, args, console: Console) -> int:
    episode = service.detect_episode(args.file)
    if episode is None:
        console.print(f"[yellow]No episode match for '{args.file.name}'.[/yellow]")
        return 1
    console.print(f"[green]{episode}[/green]")
    return 0


def run_match_movie(service: ResolverService, args, console: Console) -> int:
    movie = service.match_movie(args.name)
    if movie is None:
        console.print(f"[yellow]No movie match for '{args.name}'.[/yellow]")
        return 1
    console.print(f"[green]{movie}[/green] [dim](id {movie.movie_id})[/dim]")
    return 0


COMMANDS = {
    'episodes': run_episodes,
    'movie': run_movie,
    'episode': run_episode,
    'match-movie': run_match_movie,
}


def main(argv=None) -> int:
    args = parse_arguments(argv)
    console = Console()
    err_console = Console(stderr=True)

    try:
        cfg = ConfigHelper(ConfigManager(args.config), args)
        setup_logging(level_from_name(args.log_level or cfg('log_level', 'INFO')), cfg('log_file'))

        service = ResolverService.from_config(cfg, DefaultArguments.from_namespace(args))
        return COMMANDS[args.command](service, args, console)
    except SeasonOutOfBounds as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        if e.max_known:
            err_console.print(f"Choose a season between 1 and {e.max_known}.")
        return 1
    except ResolverError as e:
        log.debug(f"{type(e).__name__} while running '{args.command}'", exc_info=True)
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())

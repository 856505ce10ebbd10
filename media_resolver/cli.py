import argparse
from pathlib import Path
from . import __version__

def create_parser():
    parser = argparse.ArgumentParser(
        description=f"Media metadata resolver (v{__version__}).",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', type=Path, help='Path to TOML config file (overrides default search).')
    parser.add_argument('--profile', type=str, default='default', help='Configuration profile to use.')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default=None, help='Console logging level (overrides config).')
    parser.add_argument('--lang', type=str, default=None, help='Language for metadata lookups (e.g., "de", overrides config/env).')
    parser.add_argument('--non-strict', action='store_true', default=False, help='Accept low-confidence movie matches.')

    # --- Default option values ---
    defaults_group = parser.add_argument_group('option defaults')
    defaults_group.add_argument('--action', type=str, default=None, help='Rename action: move, copy, keeplink, symlink, hardlink, test.')
    defaults_group.add_argument('--conflict', type=str, default=None, help='Conflict resolution: skip, override, fail.')
    defaults_group.add_argument('--query', type=str, default=None, help='Default search query.')
    defaults_group.add_argument('--filter', type=str, default=None, help='Default filter expression.')
    defaults_group.add_argument('--format', type=str, default=None, help='Default naming format.')
    defaults_group.add_argument('--db', type=str, default=None, help='Default metadata database.')
    defaults_group.add_argument('--order', type=str, default=None, help='Default episode order.')
    defaults_group.add_argument('--output', type=str, default=None, help='Default output folder.')
    defaults_group.add_argument('--encoding', type=str, default=None, help='Default output encoding.')

    subparsers = parser.add_subparsers(dest='command', required=True, help='Action to perform')

    parser_episodes = subparsers.add_parser('episodes', help='Search a show and list its episodes.')
    parser_episodes.add_argument('show_query', type=str, help='Show name to search for.')
    parser_episodes.add_argument('--season', type=int, default=None, help='Only list episodes of this season.')

    parser_movie = subparsers.add_parser('movie', help='Detect the movie a file contains.')
    parser_movie.add_argument('file', type=Path, help='Movie file.')

    parser_episode = subparsers.add_parser('episode', help='Identify the show and episode a file contains.')
    parser_episode.add_argument('file', type=Path, help='Episode file.')

    parser_match = subparsers.add_parser('match-movie', help='Match a movie by name.')
    parser_match.add_argument('name', type=str, help='Movie name.')

    return parser

def parse_arguments(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    if not getattr(args, 'profile', None):
        args.profile = 'default'
    # --lang doubles as the TMDB language override
    if args.lang is not None:
        args.tmdb_language = args.lang
    return args

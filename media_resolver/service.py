# media_resolver/service.py

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from .api_clients import get_tmdb_client, initialize_api_clients
from .cache import ResultCache, create_result_cache
from .config_manager import ConfigHelper
from .enums import Option
from . import episode_detection
from .episode_client import DEFAULT_HOST, EpisodeCatalogClient
from .exceptions import ConfigError, ShowNotFound
from .fetcher import DocumentFetcher, HttpDocumentFetcher
from .models import Episode, MovieIdentity, ShowIdentity
from .movie_index import LocalMovieIndex
from .movie_resolver import DEFAULT_MAX_DEPTH, MovieIdentityResolver
from .movie_search import MovieSearchService, TmdbMovieSearch
from .options import DefaultArguments, resolve_options
from .retry import retry
from .tag_store import TagStore, XattrTagStore

log = logging.getLogger(__name__)

T = TypeVar('T')

class ResolverService:
    """Entry point for scripts: movie detection and episode list lookups with option defaults applied."""

    def __init__(self, episode_client: EpisodeCatalogClient, movie_resolver: MovieIdentityResolver, defaults: DefaultArguments):
        self.episode_client = episode_client
        self.movie_resolver = movie_resolver
        self.defaults = defaults

    @classmethod
    def from_config(cls, cfg_helper: ConfigHelper, defaults: Optional[DefaultArguments] = None,
                    cache: Optional[ResultCache] = None, fetcher: Optional[DocumentFetcher] = None,
                    tag_store: Optional[TagStore] = None, search_service: Optional[MovieSearchService] = None) -> 'ResolverService':
        if search_service is None:
            initialize_api_clients(cfg_helper)
            search_service = TmdbMovieSearch.from_config(get_tmdb_client(), cfg_helper)

        index_path = cfg_helper.get_path('movie_index_path')
        index = LocalMovieIndex.from_file(index_path) if index_path else None

        episode_client = EpisodeCatalogClient(
            fetcher or HttpDocumentFetcher.from_config(cfg_helper),
            cache if cache is not None else create_result_cache(cfg_helper),
            host=str(cfg_helper('episode_list_host', DEFAULT_HOST)),
        )
        movie_resolver = MovieIdentityResolver(
            tag_store or XattrTagStore(),
            search_service,
            index=index,
            locale=str(cfg_helper('tmdb_language', 'en')),
            max_depth=int(cfg_helper('movie_match_max_depth', DEFAULT_MAX_DEPTH)),
        )
        return cls(episode_client, movie_resolver, defaults or DefaultArguments())

    def detect_movie(self, file_path: Union[str, Path], strict: Optional[bool] = None) -> Optional[MovieIdentity]:
        if strict is None:
            strict = not self.defaults.non_strict
        return self.movie_resolver.detect_movie(file_path, strict)

    def match_movie(self, name: str) -> Optional[MovieIdentity]:
        return self.movie_resolver.match_by_name(name)

    def detect_series_name(self, files: Union[str, Path, Iterable[Union[str, Path]]]) -> Optional[str]:
        return episode_detection.detect_series_name(files)

    @staticmethod
    def parse_episode_number(name: Union[str, Path]) -> Optional[Tuple[Optional[int], int]]:
        return episode_detection.parse_episode_number(name)

    def detect_episode(self, file_path: Union[str, Path]) -> Optional[Episode]:
        """Series name and SxE from the file name, looked up in that season's catalog."""
        path = Path(file_path)
        series_name = self.detect_series_name(path)
        numbers = self.parse_episode_number(path)
        if not series_name or numbers is None or numbers[0] is None:
            log.info(f"No series name or season/episode number in '{path.name}'.")
            return None
        season, episode = numbers
        show = self.search_show(series_name)
        for candidate in self.episode_client.fetch_season_catalog(show, season):
            try:
                if int(candidate.episode_number) == episode:
                    return candidate
            except ValueError:
                continue
        log.info(f"{show.name} season {season} has no episode {episode}.")
        return None

    def search_show(self, query: str) -> ShowIdentity:
        results = self.episode_client.search(query)
        if not results:
            raise ShowNotFound(f"No show found for query '{query}'.")
        log.debug(f"Using first of {len(results)} search results for '{query}': {results[0]}")
        return results[0]

    def fetch_episode_list(self, parameters: Mapping[str, Any], season: Optional[int] = None) -> List[Episode]:
        """Looks up the show named by the 'query' option and returns its episodes, optionally for one season."""
        options = resolve_options(parameters, self.defaults)
        query = options.get_str(Option.QUERY)
        if not query:
            raise ConfigError("Option 'query' is required to fetch an episode list.")

        show = self.search_show(query)
        if season is None:
            return self.episode_client.fetch_full_catalog(show)
        return self.episode_client.fetch_season_catalog(show, season)

    def episode_list_link(self, show: ShowIdentity, season: Optional[int] = None) -> str:
        return self.episode_client.build_deep_link(show, season)

    @staticmethod
    def retry(max_attempts: int, wait_millis: int, operation: Callable[[], T]) -> T:
        return retry(max_attempts, wait_millis, operation)

# media_resolver/movie_resolver.py

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from guessit import guessit

from .models import MovieIdentity
from .movie_index import LocalMovieIndex
from .movie_search import MovieSearchService
from .tag_store import TagStore

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 4

def guess_title_and_year(name: str) -> Tuple[Optional[str], Optional[int]]:
    guess = guessit(name, {'type': 'movie'})
    title = guess.get('title')
    year = guess.get('year')
    return (str(title) if title else None), (int(year) if isinstance(year, int) else None)


class MovieStrategy:
    """One stage of movie detection. `try_resolve` returns a match or None."""
    name = "strategy"
    # failures inside a fallback stage mean "nothing found"
    swallow_errors = True

    def try_resolve(self, file_path: Path, strict: bool) -> Optional[MovieIdentity]:
        raise NotImplementedError


class SidecarTagStrategy(MovieStrategy):
    name = "sidecar"
    swallow_errors = False

    def __init__(self, tag_store: TagStore):
        self.tag_store = tag_store

    def try_resolve(self, file_path: Path, strict: bool) -> Optional[MovieIdentity]:
        meta = self.tag_store.read_sidecar_metadata(file_path)
        if isinstance(meta, MovieIdentity):
            return meta
        if meta is not None:
            log.debug(f"Ignoring sidecar metadata of type {type(meta).__name__} on '{file_path.name}'.")
        return None


class ExactFilenameStrategy(MovieStrategy):
    """Looks the file name and up to `max_depth` parent folder names up in the local index."""
    name = "exact-filename"

    def __init__(self, index: Optional[LocalMovieIndex], max_depth: int = DEFAULT_MAX_DEPTH):
        self.index = index
        self.max_depth = max_depth

    def candidate_names(self, file_path: Path) -> List[str]:
        names = [file_path.stem]
        for parent in list(file_path.parents)[:self.max_depth]:
            # skip folders directly below the root (/home, /media)
            if not parent.name or (parent.anchor and len(parent.parts) <= 2):
                continue
            names.append(parent.name)
        return names

    def try_resolve(self, file_path: Path, strict: bool) -> Optional[MovieIdentity]:
        if self.index is None:
            log.debug("No local movie index configured. Skipping exact filename match.")
            return None
        for name in self.candidate_names(file_path):
            title, year = guess_title_and_year(name)
            if not title:
                continue
            match = self.index.match(title, year)
            if match:
                log.debug(f"Exact match for '{name}': {match}")
                return match
        return None


class FuzzySearchStrategy(MovieStrategy):
    name = "fuzzy-search"

    def __init__(self, search_service: MovieSearchService, locale: str = 'en'):
        self.search_service = search_service
        self.locale = locale

    def search_name(self, name: str, year: Optional[int] = None, strict: bool = True) -> Optional[MovieIdentity]:
        options = self.search_service.search_movie(name, year, self.locale, strict)
        return options[0] if options else None

    def try_resolve(self, file_path: Path, strict: bool) -> Optional[MovieIdentity]:
        title, year = guess_title_and_year(file_path.name)
        return self.search_name(title or file_path.stem, year, strict)


class MovieIdentityResolver:
    """
    Identifies the movie a file contains by trying, in order, previously stored
    sidecar metadata, an exact filename match against the local index and a
    fuzzy remote search. The first stage that finds something wins; finding
    nothing at all returns None.
    """

    def __init__(self, tag_store: TagStore, search_service: MovieSearchService,
                 index: Optional[LocalMovieIndex] = None, locale: str = 'en', max_depth: int = DEFAULT_MAX_DEPTH):
        self.fuzzy_search = FuzzySearchStrategy(search_service, locale)
        self.strategies: List[MovieStrategy] = [
            SidecarTagStrategy(tag_store),
            ExactFilenameStrategy(index, max_depth),
            self.fuzzy_search,
        ]

    def _attempt(self, strategy: MovieStrategy, call, *args) -> Optional[MovieIdentity]:
        try:
            return call(*args)
        except Exception as e:
            if not strategy.swallow_errors:
                raise
            log.warning(f"Movie detection stage '{strategy.name}' failed: {type(e).__name__}: {e}")
            return None

    def detect_movie(self, file_path: Union[str, Path], strict: bool = True) -> Optional[MovieIdentity]:
        file_path = Path(file_path)
        for strategy in self.strategies:
            match = self._attempt(strategy, strategy.try_resolve, file_path, strict)
            if match is not None:
                log.info(f"Detected movie for '{file_path.name}' via {strategy.name}: {match}")
                return match
        log.info(f"No movie match for '{file_path.name}'.")
        return None

    def match_by_name(self, name: str) -> Optional[MovieIdentity]:
        return self._attempt(self.fuzzy_search, self.fuzzy_search.search_name, name)

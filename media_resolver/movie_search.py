# media_resolver/movie_search.py

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

import dateutil.parser
import requests
from tenacity import Retrying, stop_after_attempt, wait_fixed, retry_if_exception
from thefuzz import fuzz
from tmdbv3api import Movie
from tmdbv3api.as_obj import AsObj
from tmdbv3api.exceptions import TMDbException

from .exceptions import LookupFailed
from .fetcher import should_retry_request
from .models import MovieIdentity

log = logging.getLogger(__name__)

@runtime_checkable
class MovieSearchService(Protocol):
    def search_movie(self, query: str, year: Optional[int], locale: str, strict: bool) -> List[MovieIdentity]:
        """Candidates for `query`, best first. Raises LookupFailed on transport errors."""
        ...


def year_from_date(date_str: Optional[str]) -> Optional[int]:
    if not date_str: return None
    try:
        if len(date_str) == 4 and date_str.isdigit(): return int(date_str)
        return dateutil.parser.parse(date_str).year
    except (ValueError, OverflowError):
        log.debug(f"Could not parse release date '{date_str}'.")
        return None


def _results_to_dicts(results: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    dict_list: List[Dict[str, Any]] = []
    for item in results or ():
        if isinstance(item, AsObj):
            item_dict = {'id': getattr(item, 'id', None), 'title': getattr(item, 'title', None), 'release_date': getattr(item, 'release_date', None)}
        elif isinstance(item, dict):
            item_dict = {'id': item.get('id'), 'title': item.get('title'), 'release_date': item.get('release_date')}
        else:
            log.warning(f"Skipping unexpected item type in TMDB results: {type(item)}")
            continue
        if item_dict['id'] is None or not item_dict['title']:
            log.debug(f"Skipping TMDB result due to missing id or title: {item_dict}")
            continue
        dict_list.append(item_dict)
    return dict_list


class TmdbMovieSearch:
    """
    Movie search against TMDB.

    Results are year-filtered within `year_tolerance` and ranked by fuzzy title
    similarity. In strict mode candidates scoring below `fuzzy_cutoff` are dropped
    and a year filter that removes everything yields no candidates.
    """

    def __init__(self, tmdb_client, year_tolerance: int = 1, fuzzy_cutoff: int = 70,
                 retry_attempts: int = 3, retry_wait_seconds: float = 2.0):
        self.tmdb = tmdb_client
        self.year_tolerance = year_tolerance
        self.fuzzy_cutoff = fuzzy_cutoff
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait_seconds = retry_wait_seconds

    @classmethod
    def from_config(cls, tmdb_client, cfg_helper) -> 'TmdbMovieSearch':
        return cls(
            tmdb_client,
            year_tolerance=int(cfg_helper('api_year_tolerance', 1)),
            fuzzy_cutoff=int(cfg_helper('movie_fuzzy_cutoff', 70)),
            retry_attempts=int(cfg_helper('api_retry_attempts', 3)),
            retry_wait_seconds=float(cfg_helper('api_retry_wait_seconds', 2.0)),
        )

    def _remote_search(self, query: str, locale: str) -> List[Dict[str, Any]]:
        if self.tmdb is None:
            raise LookupFailed("TMDB client not configured (missing TMDB_API_KEY).")
        self.tmdb.language = locale
        retryer = Retrying(stop=stop_after_attempt(self.retry_attempts), wait=wait_fixed(self.retry_wait_seconds),
                           retry=retry_if_exception(should_retry_request), reraise=True)
        try:
            return _results_to_dicts(retryer(Movie().search, query))
        except (TMDbException, requests.exceptions.RequestException) as e:
            raise LookupFailed(f"TMDB movie search failed for '{query}': {e}") from e

    def _filter_by_year(self, results: List[Dict[str, Any]], year: int, strict: bool) -> List[Dict[str, Any]]:
        filtered = []
        for r in results:
            result_year = year_from_date(r.get('release_date'))
            if result_year is not None and abs(result_year - year) <= self.year_tolerance:
                filtered.append(r)
        if not filtered and not strict:
            log.debug("Year filtering removed all results, using original list.")
            return results
        return filtered

    def search_movie(self, query: str, year: Optional[int], locale: str, strict: bool) -> List[MovieIdentity]:
        log.debug(f"TMDB movie search: '{query}' (year: {year}, lang: {locale}, strict: {strict})")
        results = self._remote_search(query, locale)
        if year is not None and results:
            results = self._filter_by_year(results, year, strict)

        scored: List[Tuple[int, Dict[str, Any]]] = [(fuzz.token_sort_ratio(query, str(r['title'])), r) for r in results]
        if strict:
            rejected = [r['title'] for score, r in scored if score < self.fuzzy_cutoff]
            if rejected:
                log.debug(f"Strict mode rejected low-confidence matches for '{query}': {rejected}")
            scored = [(score, r) for score, r in scored if score >= self.fuzzy_cutoff]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        return [MovieIdentity(title=str(r['title']), year=year_from_date(r.get('release_date')), movie_id=int(r['id']))
                for _, r in scored]

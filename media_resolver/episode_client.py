# media_resolver/episode_client.py

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional, Union
from urllib.parse import quote_plus

from .cache import KeyedLock, ResultCache
from .exceptions import FormatError, LookupFailed, SeasonOutOfBounds, TransportError
from .fetcher import DocumentFetcher
from .models import Episode, ShowIdentity

log = logging.getLogger(__name__)

DEFAULT_HOST = "www.tvrage.com"
ALL_SEASONS = "all"

def _child_text(node: ET.Element, tag: str) -> str:
    return (node.findtext(tag) or '').strip()


class EpisodeCatalogClient:
    """
    Searches a TVRage-style XML feed for shows and retrieves their episode lists.

    Full episode lists are kept in the result cache under the episode list URL and are
    trusted for the lifetime of the cache. Concurrent first fetches of the same show
    are serialized per key so the remote list is downloaded once.
    """

    name = "TVRage"
    has_single_season_support = True

    def __init__(self, fetcher: DocumentFetcher, cache: ResultCache, host: str = DEFAULT_HOST):
        self.fetcher = fetcher
        self.cache = cache
        self.host = host
        self._key_locks = KeyedLock()

    def _search_url(self, query: str) -> str:
        return f"http://{self.host}/feeds/full_search.php?show={quote_plus(query)}"

    def episode_list_url(self, show: ShowIdentity) -> str:
        """Fully qualified episode list URL, also used as the cache key."""
        return f"http://{self.host}/feeds/episode_list.php?sid={show.show_id}"

    def _fetch(self, url: str) -> ET.Element:
        try:
            return self.fetcher.fetch(url)
        except (TransportError, FormatError) as e:
            raise LookupFailed(f"{self.name} request failed: {e}") from e

    def search(self, query: str) -> List[ShowIdentity]:
        dom = self._fetch(self._search_url(query))

        results: List[ShowIdentity] = []
        for node in dom.findall('show'):
            try:
                show_id = int(_child_text(node, 'showid'))
            except ValueError as e:
                raise LookupFailed(f"Illegal show id in {self.name} search results for '{query}': {e}") from e
            results.append(ShowIdentity(name=_child_text(node, 'name'), show_id=show_id, link=_child_text(node, 'link')))

        log.debug(f"{self.name} search '{query}' returned {len(results)} results.")
        return results

    def fetch_full_catalog(self, show: ShowIdentity) -> List[Episode]:
        cache_key = self.episode_list_url(show)

        cached = self.cache.get(cache_key)
        if cached is not None:
            log.debug(f"Cache HIT for key: {cache_key}")
            return cached

        with self._key_locks.hold(cache_key):
            # another thread may have populated the entry while we waited
            cached = self.cache.get(cache_key)
            if cached is not None:
                log.debug(f"Cache HIT after wait for key: {cache_key}")
                return cached

            log.debug(f"Cache MISS for key: {cache_key}")
            episodes = self._parse_episode_list(self._fetch(cache_key))
            self.cache.put(cache_key, episodes)
            log.info(f"Fetched {len(episodes)} episodes for '{show.name}'.")
            return episodes

    def _parse_episode_list(self, dom: ET.Element) -> List[Episode]:
        series_name = _child_text(dom, 'name')
        episodes: List[Episode] = []
        # season number lives on the enclosing Season element
        for season_node in dom.findall('Episodelist/Season'):
            season_number = season_node.get('no')
            if season_number is None:
                raise LookupFailed(f"Season element without 'no' attribute in episode list of '{series_name}'.")
            for node in season_node.findall('episode'):
                title = _child_text(node, 'title').replace('&amp;', '&')
                episodes.append(Episode(series_name, season_number.strip(), _child_text(node, 'seasonnum'), title))
        return episodes

    def fetch_season_catalog(self, show: ShowIdentity, season: int) -> List[Episode]:
        episodes: List[Episode] = []
        max_season = 0

        for episode in self.fetch_full_catalog(show):
            try:
                season_number = int(episode.season_number)
            except ValueError:
                log.warning(f"Illegal season number '{episode.season_number}' for '{episode}'. Skipping.")
                continue
            if season_number == season:
                episodes.append(episode)
            max_season = max(max_season, season_number)

        if not episodes:
            raise SeasonOutOfBounds(show.name, season, max_season)
        return episodes

    def build_deep_link(self, show: ShowIdentity, season: Optional[Union[int, str]] = None) -> str:
        season_token = ALL_SEASONS if season is None else str(season)
        return f"{show.link}/episode_list/{season_token}"

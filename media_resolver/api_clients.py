# media_resolver/api_clients.py

import logging
from typing import Optional

from tmdbv3api import TMDb

log = logging.getLogger(__name__)

# Shared TMDb configuration. tmdbv3api keeps api_key/language on TMDb, and every
# Movie() created afterwards reads them from there.
_tmdb_client: Optional[TMDb] = None
_clients_initialized = False


def initialize_api_clients(cfg_helper) -> bool:
    """Sets up the TMDb client once per process. Returns True if movie search is available."""
    global _tmdb_client, _clients_initialized
    if _clients_initialized:
        log.debug("API clients already initialized.")
        return _tmdb_client is not None

    _clients_initialized = True
    api_key = cfg_helper.get_api_key('tmdb')
    if not api_key:
        log.warning("TMDB API Key not found. Remote movie search disabled.")
        return False

    language = cfg_helper('tmdb_language', 'en')
    client = TMDb()
    client.api_key = api_key
    client.language = language
    _tmdb_client = client
    log.info(f"TMDB API Client initialized (Lang: {language}).")
    return True


def get_tmdb_client() -> Optional[TMDb]:
    if not _clients_initialized:
        log.warning("Attempted to get TMDB client before initialization.")
        return None
    return _tmdb_client

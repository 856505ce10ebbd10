# tests/test_movie_resolver.py
import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from media_resolver.exceptions import LookupFailed
from media_resolver.models import MovieIdentity
from media_resolver.movie_index import LocalMovieIndex
from media_resolver.movie_resolver import ExactFilenameStrategy, MovieIdentityResolver
from media_resolver.tag_store import XattrTagStore

MATRIX = MovieIdentity("The Matrix", 1999, 603)
MATRIX_RELOADED = MovieIdentity("The Matrix Reloaded", 2003, 604)
ALIEN = MovieIdentity("Alien", 1979, 348)

# Titles/years guessit would extract from the names used below
GUESSES = {
    "The.Matrix.1999.1080p.BluRay.x264.mkv": {'title': 'The Matrix', 'year': 1999},
    "The.Matrix.1999.1080p.BluRay.x264": {'title': 'The Matrix', 'year': 1999},
    "movie.mkv": {'title': 'movie'},
    "movie": {'title': 'movie'},
    "Alien (1979)": {'title': 'Alien', 'year': 1979},
    "Sci-Fi": {'title': 'Sci-Fi'},
    "Movies": {'title': 'Movies'},
    "media": {'title': 'media'},
    "data": {'title': 'data'},
    "srv": {'title': 'srv'},
}

@pytest.fixture(autouse=True)
def mock_guessit(mocker):
    return mocker.patch('media_resolver.movie_resolver.guessit', side_effect=lambda name, options=None: dict(GUESSES.get(name, {})))

@pytest.fixture
def tag_store():
    store = MagicMock(name="TagStore")
    store.read_sidecar_metadata.return_value = None
    return store

@pytest.fixture
def search_service():
    service = MagicMock(name="MovieSearchService")
    service.search_movie.return_value = []
    return service

@pytest.fixture
def index():
    return LocalMovieIndex([MATRIX, MATRIX_RELOADED, ALIEN])

def make_resolver(tag_store, search_service, index=None, **kwargs):
    return MovieIdentityResolver(tag_store, search_service, index=index, **kwargs)

# --- stage order ---

def test_sidecar_metadata_short_circuits_other_stages(tag_store, search_service, mocker):
    tag_store.read_sidecar_metadata.return_value = MATRIX
    resolver = make_resolver(tag_store, search_service)
    exact_spy = mocker.spy(resolver.strategies[1], 'try_resolve')

    result = resolver.detect_movie("/media/Movies/whatever.mkv")

    assert result is MATRIX
    tag_store.read_sidecar_metadata.assert_called_once_with(Path("/media/Movies/whatever.mkv"))
    assert exact_spy.call_count == 0
    search_service.search_movie.assert_not_called()

def test_sidecar_metadata_of_other_type_is_ignored(tag_store, search_service):
    tag_store.read_sidecar_metadata.return_value = {'type': 'episode', 'title': 'Pilot'}
    search_service.search_movie.return_value = [ALIEN]
    assert make_resolver(tag_store, search_service).detect_movie("/media/movie.mkv") is ALIEN

def test_exact_match_skips_remote_search(tag_store, search_service, index):
    resolver = make_resolver(tag_store, search_service, index)
    assert resolver.detect_movie("/media/The.Matrix.1999.1080p.BluRay.x264.mkv") == MATRIX
    search_service.search_movie.assert_not_called()

def test_exact_match_uses_parent_folder_names(tag_store, search_service, index):
    resolver = make_resolver(tag_store, search_service, index)
    assert resolver.detect_movie("/srv/Movies/Alien (1979)/movie.mkv") == ALIEN
    search_service.search_movie.assert_not_called()

def test_exact_match_respects_max_depth(tag_store, search_service, index):
    resolver = make_resolver(tag_store, search_service, index, max_depth=1)
    # 'Alien (1979)' is two folders up
    assert resolver.detect_movie("/srv/Alien (1979)/Sci-Fi/movie.mkv") is None
    search_service.search_movie.assert_called_once()

def test_exact_match_failure_falls_through_to_search(tag_store, search_service, mocker, caplog):
    broken_index = MagicMock()
    broken_index.match.side_effect = RuntimeError("index corrupted")
    search_service.search_movie.return_value = [MATRIX]
    resolver = make_resolver(tag_store, search_service, broken_index)

    with caplog.at_level(logging.WARNING, logger="media_resolver.movie_resolver"):
        result = resolver.detect_movie("/media/The.Matrix.1999.1080p.BluRay.x264.mkv")

    assert result is MATRIX
    assert any("exact-filename" in r.message and "index corrupted" in r.message for r in caplog.records)

def test_fuzzy_search_uses_guessed_title_year_locale_and_strict(tag_store, search_service):
    search_service.search_movie.return_value = [MATRIX, MATRIX_RELOADED]
    resolver = make_resolver(tag_store, search_service, locale='de')

    assert resolver.detect_movie("/media/The.Matrix.1999.1080p.BluRay.x264.mkv", strict=False) is MATRIX
    search_service.search_movie.assert_called_once_with('The Matrix', 1999, 'de', False)

def test_fuzzy_search_failure_returns_none(tag_store, search_service, caplog):
    search_service.search_movie.side_effect = LookupFailed("TMDB down")
    resolver = make_resolver(tag_store, search_service)

    with caplog.at_level(logging.WARNING, logger="media_resolver.movie_resolver"):
        assert resolver.detect_movie("/media/movie.mkv") is None
    assert any("fuzzy-search" in r.message for r in caplog.records)

def test_no_match_anywhere_returns_none(tag_store, search_service, index):
    assert make_resolver(tag_store, search_service, index).detect_movie("/media/movie.mkv") is None

def test_sidecar_errors_propagate(tag_store, search_service):
    tag_store.read_sidecar_metadata.side_effect = PermissionError("denied")
    with pytest.raises(PermissionError):
        make_resolver(tag_store, search_service).detect_movie("/media/movie.mkv")

# --- match_by_name ---

def test_match_by_name_returns_first_candidate(tag_store, search_service):
    search_service.search_movie.return_value = [MATRIX, MATRIX_RELOADED]
    resolver = make_resolver(tag_store, search_service)

    assert resolver.match_by_name("The Matrix") is MATRIX
    search_service.search_movie.assert_called_once_with("The Matrix", None, 'en', True)
    tag_store.read_sidecar_metadata.assert_not_called()

def test_match_by_name_empty_result_returns_none(tag_store, search_service):
    assert make_resolver(tag_store, search_service).match_by_name("The Matrix") is None

def test_match_by_name_failure_returns_none(tag_store, search_service):
    search_service.search_movie.side_effect = LookupFailed("offline")
    assert make_resolver(tag_store, search_service).match_by_name("The Matrix") is None

# --- candidate names ---

def test_candidate_names_walk_up_parents():
    strategy = ExactFilenameStrategy(index=None, max_depth=4)
    names = strategy.candidate_names(Path("/data/media/Movies/Alien (1979)/movie.mkv"))
    assert names == ["movie", "Alien (1979)", "Movies", "media"]

def test_candidate_names_keep_top_folder_of_relative_path():
    strategy = ExactFilenameStrategy(index=None, max_depth=4)
    assert strategy.candidate_names(Path("Alien (1979)/movie.mkv")) == ["movie", "Alien (1979)"]

def test_root_level_folder_is_not_an_exact_match(tag_store, search_service, mock_guessit):
    home = MovieIdentity("Home", 2015, 228161)
    mock_guessit.side_effect = lambda name, options=None: {'title': 'Home'} if name == "home" else {}
    resolver = make_resolver(tag_store, search_service, LocalMovieIndex([home]))

    assert resolver.detect_movie("/home/clip.mkv") is None
    search_service.search_movie.assert_called_once()

def test_exact_strategy_without_index_finds_nothing():
    assert ExactFilenameStrategy(index=None).try_resolve(Path("/media/The.Matrix.1999.mkv"), True) is None

def test_malformed_sidecar_record_falls_through_to_search(search_service, mocker):
    raw = json.dumps({'type': 'movie', 'title': 'X', 'year': 'unknown'}).encode('utf-8')
    mocker.patch('media_resolver.tag_store.os.getxattr', create=True, return_value=raw)
    store = XattrTagStore()
    store.supported = True

    assert make_resolver(store, search_service).detect_movie("/m/x.mkv") is None
    search_service.search_movie.assert_called_once()

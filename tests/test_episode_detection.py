# tests/test_episode_detection.py
import logging
from pathlib import Path

import pytest

from media_resolver.episode_detection import detect_series_name, guess_series_title, parse_episode_number

# What guessit reports for the names used below
GUESSES = {
    "Buffy.the.Vampire.Slayer.S02E01.DVDRip.avi": {'title': 'Buffy the Vampire Slayer', 'season': 2, 'episode': 1},
    "Buffy.the.Vampire.Slayer.S02E02.DVDRip.avi": {'title': 'Buffy the Vampire Slayer', 'season': 2, 'episode': 2},
    "Buffy.S02E03.avi": {'title': 'Buffy', 'season': 2, 'episode': 3},
    "Angel.1x01.avi": {'title': 'Angel', 'season': 1, 'episode': 1},
    "Firefly.S01E01E02.mkv": {'title': 'Firefly', 'season': 1, 'episode': [1, 2]},
    "One Piece - 105.mkv": {'title': 'One Piece', 'episode': 105},
    "Trailer.mkv": {'title': 'Trailer'},
    "02x05.avi": {'season': 2, 'episode': 5},
    "Dollhouse": {'title': 'Dollhouse'},
}

@pytest.fixture(autouse=True)
def mock_guessit(mocker):
    return mocker.patch('media_resolver.episode_detection.guessit',
                        side_effect=lambda name, options=None: dict(GUESSES.get(name, {})))

# --- parse_episode_number ---

@pytest.mark.parametrize("name, expected", [
    ("Buffy.the.Vampire.Slayer.S02E01.DVDRip.avi", (2, 1)),
    ("Angel.1x01.avi", (1, 1)),
    ("Firefly.S01E01E02.mkv", (1, 1)),
    ("One Piece - 105.mkv", (None, 105)),
    ("Trailer.mkv", None),
])
def test_parse_episode_number(name, expected):
    assert parse_episode_number(name) == expected

def test_parse_episode_number_uses_file_name_of_path(mock_guessit):
    assert parse_episode_number(Path("/tv/Angel/Angel.1x01.avi")) == (1, 1)
    assert mock_guessit.call_args.args[0] == "Angel.1x01.avi"
    assert mock_guessit.call_args.args[1] == {'type': 'episode'}

# --- detect_series_name ---

def test_detect_series_name_single_file():
    assert detect_series_name("/tv/Buffy.the.Vampire.Slayer.S02E01.DVDRip.avi") == "Buffy the Vampire Slayer"

def test_detect_series_name_majority_vote():
    files = [
        "/tv/Buffy.S02E03.avi",
        "/tv/Buffy.the.Vampire.Slayer.S02E01.DVDRip.avi",
        "/tv/Buffy.the.Vampire.Slayer.S02E02.DVDRip.avi",
    ]
    assert detect_series_name(files) == "Buffy the Vampire Slayer"

def test_detect_series_name_tie_goes_to_first_file():
    assert detect_series_name(["/tv/Angel.1x01.avi", "/tv/Buffy.S02E03.avi"]) == "Angel"

def test_detect_series_name_falls_back_to_folder():
    assert detect_series_name([Path("/tv/Dollhouse/02x05.avi")]) == "Dollhouse"

def test_detect_series_name_nothing_found(caplog):
    with caplog.at_level(logging.DEBUG, logger="media_resolver"):
        assert detect_series_name(["/02x05.avi"]) is None
    assert "No series name" in caplog.text

def test_detect_series_name_empty_input():
    assert detect_series_name([]) is None

def test_guess_series_title_missing():
    assert guess_series_title("02x05.avi") is None

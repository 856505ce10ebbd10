# media_resolver/episode_detection.py

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from guessit import guessit

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _first_int(value) -> Optional[int]:
    # guessit reports multi-episode files as a list
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, int) else None


def guess_series_title(name: str) -> Optional[str]:
    title = guessit(name, {'type': 'episode'}).get('title')
    return str(title) if title else None


def parse_episode_number(name: Union[str, Path]) -> Optional[Tuple[Optional[int], int]]:
    """
    (season, episode) for names like 'Show.S02E05' or '2x05'. Season is None for
    absolute numbering ('Show - 105'). None if the name carries no episode number.
    """
    guess = guessit(Path(name).name if isinstance(name, Path) else str(name), {'type': 'episode'})
    episode = _first_int(guess.get('episode'))
    if episode is None:
        return None
    return _first_int(guess.get('season')), episode


def detect_series_name(files: Union[PathLike, Iterable[PathLike]]) -> Optional[str]:
    """
    The series name most of `files` agree on. Each file votes with the title guessed
    from its name, or from its folder when the name has none. Ties go to the first seen.
    """
    if isinstance(files, (str, Path)):
        files = [files]
    votes: Counter = Counter()
    for file in files:
        path = Path(file)
        title = guess_series_title(path.name) or (guess_series_title(path.parent.name) if path.parent.name else None)
        if title:
            votes[title] += 1
        else:
            log.debug(f"No series name in '{path}'.")
    if not votes:
        return None
    name, count = votes.most_common(1)[0]
    log.debug(f"Detected series '{name}' ({count} of {sum(votes.values())} files).")
    return name

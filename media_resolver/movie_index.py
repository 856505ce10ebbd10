# media_resolver/movie_index.py

import logging
import re
import unicodedata
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .exceptions import ConfigError
from .models import MovieIdentity

log = logging.getLogger(__name__)

def normalize_name(name: str) -> str:
    """Lowercase, accent-free, punctuation-free form of a title used for exact comparisons."""
    decomposed = unicodedata.normalize('NFKD', name)
    ascii_name = ''.join(c for c in decomposed if not unicodedata.combining(c))
    ascii_name = ascii_name.lower().replace('&', ' and ')
    ascii_name = re.sub(r"['`´]", '', ascii_name)
    return re.sub(r'[\W_]+', ' ', ascii_name).strip()


class LocalMovieIndex:
    """Offline list of known movies, looked up by normalized title."""

    def __init__(self, movies: Iterable[MovieIdentity] = ()):
        self._by_name: Dict[str, List[MovieIdentity]] = defaultdict(list)
        for movie in movies:
            self.add(movie)

    def add(self, movie: MovieIdentity) -> None:
        self._by_name[normalize_name(movie.title)].append(movie)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_name.values())

    @classmethod
    def from_file(cls, index_path: Path) -> 'LocalMovieIndex':
        """Loads a tab separated index: id, title, year (year may be empty). Lines starting with '#' are ignored."""
        index = cls()
        try:
            lines = Path(index_path).read_text(encoding='utf-8').splitlines()
        except OSError as e:
            raise ConfigError(f"Failed to read movie index '{index_path}': {e}") from e

        for line_no, line in enumerate(lines, start=1):
            if not line.strip() or line.startswith('#'):
                continue
            fields = line.split('\t')
            try:
                movie_id, title = int(fields[0]), fields[1].strip()
                year = int(fields[2]) if len(fields) > 2 and fields[2].strip() else None
            except (IndexError, ValueError):
                log.warning(f"Skipping malformed line {line_no} in movie index '{index_path}': {line!r}")
                continue
            index.add(MovieIdentity(title=title, year=year, movie_id=movie_id))

        log.info(f"Loaded {len(index)} movies from index '{index_path}'.")
        return index

    def match(self, title: str, year: Optional[int] = None) -> Optional[MovieIdentity]:
        candidates = self._by_name.get(normalize_name(title), [])
        if year is not None:
            candidates = [m for m in candidates if m.year == year]
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            log.debug(f"Ambiguous index match for '{title}' ({year}): {len(candidates)} candidates.")
        return None

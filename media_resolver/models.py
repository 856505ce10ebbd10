# models.py
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Iterator, Mapping, Union

from .enums import Option


@dataclass(frozen=True)
class ShowIdentity:
    """A television series as returned by a catalog search."""
    name: str
    show_id: int
    link: str # canonical page on the catalog site, used for deep links

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Episode:
    """One catalog entry. Season/episode numbers stay textual, specials may be non-numeric."""
    series_name: str
    season_number: str
    episode_number: str
    title: str

    def __str__(self):
        return f"{self.series_name} - {self.season_number}x{self.episode_number} - {self.title}"


@dataclass(frozen=True)
class MovieIdentity:
    """Canonical movie record. A resolver returning None means 'no confident match'."""
    title: str
    year: Optional[int]
    movie_id: int

    def __str__(self):
        return f"{self.title} ({self.year})" if self.year else self.title


@dataclass(frozen=True)
class OptionSet(Mapping[Option, Any]):
    """
    Fully populated option values for one invocation.
    Lookups accept an Option member or any key Option.from_key understands.
    """
    entries: Dict[Option, Any] = field(default_factory=dict)

    def __getitem__(self, key: Union[Option, str]) -> Any:
        option = Option.from_key(key)
        if option is None:
            raise KeyError(key)
        return self.entries[option]

    def __iter__(self) -> Iterator[Option]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get_str(self, key: Union[Option, str]) -> Optional[str]:
        value = self[key]
        return None if value is None else str(value)

    def get_bool(self, key: Union[Option, str]) -> bool:
        value = self[key]
        if isinstance(value, str):
            return value.strip().lower() in ('true', 'yes', '1', 'on')
        return bool(value)

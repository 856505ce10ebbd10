# media_resolver/enums.py
from enum import Enum
from typing import Optional


class Option(Enum):
    """
    Closed vocabulary of script-level options understood by the option resolver.
    The value is the parameter name callers use in their mapping.
    """
    ACTION = 'action'
    CONFLICT = 'conflict'
    QUERY = 'query'
    FILTER = 'filter'
    FORMAT = 'format'
    DB = 'db'
    ORDER = 'order'
    LANG = 'lang'
    OUTPUT = 'output'
    ENCODING = 'encoding'
    STRICT = 'strict'
    FORCE_EXTRACT_ALL = 'forceExtractAll'

    @property
    def attribute_name(self) -> str:
        # Field name on DefaultArguments that backs this option
        return self.name.lower()

    @classmethod
    def from_key(cls, key: object) -> Optional['Option']:
        """Maps a caller key ('forceExtractAll', 'force_extract_all' or an Option) to an Option, or None."""
        if isinstance(key, cls):
            return key
        if not isinstance(key, str):
            return None
        for member in cls:
            if key == member.value or key == member.attribute_name:
                return member
        return None

    def __str__(self):
        return self.value


class StandardRenameAction(Enum):
    """Predefined rename actions that can be selected by name."""
    MOVE = 'move'
    COPY = 'copy'
    KEEPLINK = 'keeplink'
    SYMLINK = 'symlink'
    HARDLINK = 'hardlink'
    TEST = 'test'

    @classmethod
    def for_name(cls, name: str) -> 'StandardRenameAction':
        normalized = name.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Illegal rename action: {name!r}")

    @property
    def can_revert(self) -> bool:
        return self is not StandardRenameAction.TEST

    def __str__(self):
        return self.name

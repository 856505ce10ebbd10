# media_resolver/rename_actions.py

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol, Union, runtime_checkable

from .enums import StandardRenameAction
from .exceptions import ConfigError

log = logging.getLogger(__name__)

@runtime_checkable
class RenameSink(Protocol):
    """Performs a predefined rename action on the file system."""

    def perform(self, action: StandardRenameAction, source: Path, destination: Path) -> Path: ...


class RenameAction:
    can_revert = False

    def rename(self, source: Path, destination: Path) -> Path:
        raise NotImplementedError


@dataclass(frozen=True)
class ByName(RenameAction):
    action: StandardRenameAction
    sink: RenameSink

    @property
    def can_revert(self) -> bool:
        return self.action.can_revert

    def rename(self, source: Path, destination: Path) -> Path:
        return self.sink.perform(self.action, source, destination)

    def __str__(self):
        return str(self.action)


@dataclass(frozen=True)
class Callback(RenameAction):
    """User supplied function. A non-path return value means the proposed destination."""
    function: Callable[[Path, Path], Any]

    def rename(self, source: Path, destination: Path) -> Path:
        value = self.function(source, destination)
        if isinstance(value, (str, os.PathLike)):
            return Path(value)
        log.debug(f"Rename callback returned {type(value).__name__}, using proposed destination '{destination}'.")
        return destination

    def __str__(self):
        return "CALLBACK"


@dataclass(frozen=True)
class NoOp(RenameAction):
    def rename(self, source: Path, destination: Path) -> Path:
        log.info(f"[TEST] Would rename '{source}' to '{destination}'")
        return destination

    def __str__(self):
        return "NOOP"


def get_rename_function(obj: Union[RenameAction, StandardRenameAction, str, Callable, None], sink: RenameSink) -> RenameAction:
    """Resolves an action given by name, enum, callable or None (no-op) into a RenameAction."""
    if obj is None:
        return NoOp()
    if isinstance(obj, RenameAction):
        return obj
    if isinstance(obj, str):
        try:
            obj = StandardRenameAction.for_name(obj)
        except ValueError as e:
            raise ConfigError(str(e)) from e
    if isinstance(obj, StandardRenameAction):
        # test runs never touch the file system
        return NoOp() if obj is StandardRenameAction.TEST else ByName(obj, sink)
    if callable(obj):
        return Callback(obj)
    raise ConfigError(f"Cannot use {type(obj).__name__} as a rename action.")

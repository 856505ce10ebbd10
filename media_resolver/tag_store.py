# media_resolver/tag_store.py
import errno
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

from .models import MovieIdentity

log = logging.getLogger(__name__)

METADATA_ATTRIBUTE = "user.media_resolver.metadata"

# errors meaning "no attribute here" rather than a real failure
_ABSENT_ERRNOS = {errno.ENODATA, errno.ENOTSUP, errno.ENOENT, getattr(errno, 'ENOATTR', errno.ENODATA)}

@runtime_checkable
class TagStore(Protocol):
    def read_sidecar_metadata(self, file_path: Path) -> Optional[Any]: ...


def encode_metadata(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, MovieIdentity):
        return {'type': 'movie', 'title': obj.title, 'year': obj.year, 'id': obj.movie_id}
    raise TypeError(f"Cannot store metadata of type {type(obj).__name__}")


def decode_metadata(payload: Dict[str, Any]) -> Optional[Any]:
    """Rebuilds a stored record. Raises ValueError if a movie record has a missing or malformed field."""
    if payload.get('type') == 'movie' and payload.get('title'):
        if payload.get('id') is None:
            raise ValueError("movie record without 'id'")
        year = payload.get('year')
        try:
            return MovieIdentity(title=str(payload['title']), year=int(year) if year else None, movie_id=int(payload['id']))
        except TypeError as e:
            raise ValueError(str(e)) from e
    log.debug(f"Unrecognized sidecar metadata payload: {payload}")
    return payload


class XattrTagStore:
    """Sidecar metadata kept as JSON in a user extended attribute of the media file."""

    def __init__(self, attribute: str = METADATA_ATTRIBUTE):
        self.attribute = attribute
        self.supported = hasattr(os, 'getxattr')
        if not self.supported:
            log.debug("Extended attributes not supported on this platform. Sidecar metadata disabled.")

    def read_sidecar_metadata(self, file_path: Union[str, Path]) -> Optional[Any]:
        if not self.supported:
            return None
        try:
            raw = os.getxattr(str(file_path), self.attribute)
        except OSError as e:
            if e.errno not in _ABSENT_ERRNOS:
                log.warning(f"Failed to read sidecar metadata from '{file_path}': {e}")
            return None
        try:
            payload = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            log.warning(f"Ignoring unreadable sidecar metadata on '{file_path}': {e}")
            return None
        if not isinstance(payload, dict):
            return payload
        try:
            return decode_metadata(payload)
        except ValueError as e:
            log.warning(f"Ignoring malformed sidecar metadata on '{file_path}': {e}")
            return None

    def write_sidecar_metadata(self, file_path: Union[str, Path], obj: Any) -> None:
        if not self.supported:
            log.debug(f"Not writing sidecar metadata for '{file_path}': unsupported platform.")
            return
        os.setxattr(str(file_path), self.attribute, json.dumps(encode_metadata(obj)).encode('utf-8'))
        log.debug(f"Stored sidecar metadata on '{file_path}'.")

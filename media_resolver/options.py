# media_resolver/options.py

import argparse
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from .enums import Option
from .exceptions import ConfigError
from .models import OptionSet

log = logging.getLogger(__name__)

class DefaultArguments(BaseModel):
    """Option defaults taken from the command line the process was started with."""
    action: Optional[str] = 'move'
    conflict: Optional[str] = 'skip'
    query: Optional[str] = None
    filter: Optional[str] = None
    format: Optional[str] = None
    db: Optional[str] = None
    order: Optional[str] = None
    lang: Optional[str] = 'en'
    output: Optional[str] = None
    encoding: Optional[str] = None
    non_strict: bool = False

    model_config = {'frozen': True}

    @classmethod
    def from_namespace(cls, args_ns: argparse.Namespace) -> 'DefaultArguments':
        values = {key: getattr(args_ns, key) for key in cls.model_fields if getattr(args_ns, key, None) is not None}
        return cls(**values)


def resolve_options(parameters: Mapping[Any, Any], defaults: Any) -> OptionSet:
    """
    Merges caller parameters with `defaults` into an OptionSet holding every Option.

    Unrecognized parameter keys are ignored. Missing options come from the attribute of the
    same name on `defaults`, except forceExtractAll (False) and strict (not defaults.non_strict).
    """
    options: Dict[Option, Any] = {}
    for key, value in parameters.items():
        option = Option.from_key(key)
        if option is None:
            log.debug(f"Ignoring unknown option '{key}'.")
            continue
        options[option] = value

    for missing in (o for o in Option if o not in options):
        try:
            if missing is Option.FORCE_EXTRACT_ALL:
                options[missing] = False
            elif missing is Option.STRICT:
                options[missing] = not getattr(defaults, 'non_strict')
            else:
                options[missing] = getattr(defaults, missing.attribute_name)
        except AttributeError as e:
            raise ConfigError(f"No default value available for option '{missing}': {e}") from e

    return OptionSet(options)

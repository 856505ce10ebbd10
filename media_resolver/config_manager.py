# media_resolver/config_manager.py

import os
import logging
import argparse
from pathlib import Path
from typing import Optional, Dict, Any, Iterator, List, Union

import platformdirs
import pytomlpp
from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

log = logging.getLogger(__name__)
APP_NAME = "media_resolver"
DEFAULT_CONFIG_FILENAME = "config.toml"

# settings that may come from the environment / .env, keyed by setting name
ENV_VARIABLES = {
    'tmdb_api_key': "TMDB_API_KEY",
    'tmdb_language': "TMDB_LANGUAGE",
}
CACHE_BACKENDS = ('memory', 'disk')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


class ResolverSettings(BaseModel):
    # Episode catalog
    episode_list_host: Optional[str] = Field(default="www.tvrage.com", description="Host serving the show search and episode list feeds.")
    http_timeout_seconds: Optional[float] = Field(default=20.0, gt=0.0, description="Timeout (seconds) for a single document fetch.")

    # Remote requests
    api_rate_limit_delay: Optional[float] = Field(default=0.5, ge=0.0, description="Minimum delay (seconds) between remote requests.")
    api_retry_attempts: Optional[int] = Field(default=3, ge=1, description="Attempts per remote request before transient errors are given up on.")
    api_retry_wait_seconds: Optional[float] = Field(default=2.0, ge=0.0, description="Wait (seconds) between remote request attempts.")

    # Movie detection
    api_year_tolerance: Optional[int] = Field(default=1, ge=0, description="Allowed difference between guessed and released year.")
    movie_fuzzy_cutoff: Optional[int] = Field(default=70, ge=0, le=100, description="Minimum title similarity for a strict movie match.")
    tmdb_language: Optional[str] = Field(default='en', description="Locale used for movie searches.")
    movie_index_path: Optional[str] = Field(default=None, description="TSV file (id, title, year) used for exact filename matches.")
    movie_match_max_depth: Optional[int] = Field(default=4, ge=0, description="Parent folders considered for exact filename matches.")

    # Caching
    cache_backend: Optional[str] = Field(default='memory', description="Result cache backend: 'memory' or 'disk'.")
    cache_directory: Optional[str] = Field(default=None, description="Directory of the 'disk' cache (default: user cache dir).")

    # Logging
    log_file: Optional[str] = Field(default=None, description="Append log output to this file.")
    log_level: Optional[str] = Field(default='INFO', description="Console log level: DEBUG, INFO, WARNING, ERROR.")

    @field_validator('cache_backend', mode='before')
    @classmethod
    def _known_cache_backend(cls, v: Any) -> str:
        if v is None:
            return 'memory'
        if str(v).lower() not in CACHE_BACKENDS:
            raise ValueError(f"cache_backend must be one of {', '.join(CACHE_BACKENDS)}")
        return str(v).lower()

    @field_validator('log_level', mode='before')
    @classmethod
    def _known_log_level(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if str(v).upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return str(v).upper()


class RootConfigModel(BaseModel):
    """TOML layout: a [default] table plus any number of named profile tables."""
    default: ResolverSettings = Field(default_factory=ResolverSettings)
    model_config = {'extra': 'allow'}


def _candidate_config_paths() -> List[Path]:
    return [
        Path.cwd() / DEFAULT_CONFIG_FILENAME,
        Path(platformdirs.user_config_dir(APP_NAME, ensure_exists=False)) / DEFAULT_CONFIG_FILENAME,
    ]


class ConfigManager:
    """Settings from a TOML file (profiles layered over [default]) and API keys from the environment."""

    def __init__(self, config_path_override: Optional[Path] = None):
        self.config_path = self._resolve_config_path(config_path_override)
        self._config = self._load_config()
        self._env = self._load_env()

    def _resolve_config_path(self, config_path_override: Optional[Path]) -> Path:
        if config_path_override:
            return Path(config_path_override).resolve()
        candidates = _candidate_config_paths()
        for candidate in candidates:
            if candidate.is_file():
                log.debug(f"Found config file: {candidate}")
                return candidate.resolve()
        log.debug(f"No config file in {[str(c.parent) for c in candidates]}.")
        return candidates[0].resolve()

    def _read_toml(self) -> Dict[str, Any]:
        try:
            text = self.config_path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Failed to read config file '{self.config_path}': {e}") from e
        if not text.strip():
            log.warning(f"Config file '{self.config_path}' is empty. Using internal defaults.")
            return {}
        try:
            return pytomlpp.loads(text)
        except pytomlpp.DecodeError as e:
            raise ConfigError(f"Failed to parse TOML config '{self.config_path}': {e}") from e

    def _load_config(self) -> Dict[str, Any]:
        if not self.config_path.is_file():
            log.info(f"No config file at '{self.config_path}'. Using internal defaults.")
            return RootConfigModel().model_dump()

        raw = self._read_toml()
        try:
            validated = RootConfigModel.model_validate(raw)
        except ValidationError as e:
            problems = "\n".join(f"  - Field `{' -> '.join(map(str, err['loc']))}`: {err['msg']}" for err in e.errors())
            summary = f"Config file '{self.config_path}' validation failed:\n{problems}"
            log.error(summary)
            raise ConfigError(summary) from e
        log.info(f"Loaded configuration from '{self.config_path}'")
        return validated.model_dump()

    def _load_env(self) -> Dict[str, Optional[str]]:
        env_path = find_dotenv(usecwd=True)
        if env_path:
            log.debug(f"Loading environment variables from: {env_path}")
            load_dotenv(dotenv_path=env_path)
        values = {name: os.getenv(var) for name, var in ENV_VARIABLES.items()}
        if not values['tmdb_api_key']:
            log.debug("TMDB_API_KEY is not set.")
        return values

    def _sections(self, profile: str) -> Iterator[Dict[str, Any]]:
        names = [profile] if profile == 'default' else [profile, 'default']
        for name in names:
            section = self._config.get(name)
            if isinstance(section, dict):
                yield section
            elif section is not None:
                log.warning(f"Profile '{name}' in config is not a table. Ignoring it.")

    def get_value(self, key: str, profile: str = 'default', command_line_value: Any = None, default_value: Any = None) -> Any:
        """Command line, then environment, then the profile, then [default], then the model default."""
        if command_line_value is not None:
            return command_line_value
        if key in ENV_VARIABLES and self._env.get(key):
            return self._env[key]
        for section in self._sections(profile):
            if section.get(key) is not None:
                return section[key]
        if default_value is None and key in ResolverSettings.model_fields:
            return ResolverSettings.model_fields[key].default
        return default_value

    def get_api_key(self, service_name: str) -> Optional[str]:
        return self._env.get(f"{service_name.lower()}_api_key")

    def get_profile_settings(self, profile: str = 'default') -> Dict[str, Any]:
        merged = ResolverSettings().model_dump()
        for section in reversed(list(self._sections(profile))):
            merged.update({k: v for k, v in section.items() if v is not None})
        return merged


class ConfigHelper:
    """Binds a ConfigManager to the parsed command line and its --profile."""

    def __init__(self, config_manager: ConfigManager, args_ns: Optional[argparse.Namespace] = None):
        self.manager = config_manager
        self.args = args_ns if args_ns is not None else argparse.Namespace()
        self.profile = getattr(self.args, 'profile', None) or 'default'

    def __call__(self, key: str, default_value: Any = None, arg_value: Any = None) -> Any:
        if arg_value is None:
            arg_value = getattr(self.args, key, None)
        return self.manager.get_value(key, self.profile, arg_value, default_value)

    def get_api_key(self, service_name: str) -> Optional[str]:
        return self.manager.get_api_key(service_name)

    def get_path(self, key: str) -> Optional[Path]:
        value: Union[str, Path, None] = self(key)
        return Path(value).expanduser() if value else None

"""
Config - application options and server settings.

``CreateOptions`` is what the application factory consumes.
``ServerSettings`` is read from the environment and ``.env`` files with
precedence: overrides > environment variables > .env file > defaults.
"""

import json
import os
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from dotenv import dotenv_values

from .engine.base import ErrorHook, Hook, Plugin, ResponseHook


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


# camelCase spellings accepted by CreateOptions.from_mapping
_OPTION_ALIASES = {
    "beforeStart": "before_start",
}


@dataclass
class CreateOptions:
    """
    Options of ``ArdeaFactory.create``.

    Attributes:
        cors: CORS plugin config (``True`` for engine defaults)
        swagger: Docs plugin config (``True`` for engine defaults)
        auth: Authentication hook installed on non-public routes
        response: Response hook installed on non-streaming routes
        error: Error hook receiving ``(ctx, error)``
        plugins: Extra engine plugins, applied in order
        before_start: Callbacks awaited in order before anything else
    """
    cors: Union[bool, Dict[str, Any], None] = None
    swagger: Union[bool, Dict[str, Any], None] = None
    auth: Optional[Hook] = None
    response: Optional[ResponseHook] = None
    error: Optional[ErrorHook] = None
    plugins: List[Plugin] = field(default_factory=list)
    before_start: List[Callable[[], Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "CreateOptions":
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown application option: {key}")
            kwargs[name] = value

        for name in ("plugins", "before_start"):
            if kwargs.get(name) is None:
                kwargs.pop(name, None)
            else:
                kwargs[name] = list(kwargs[name])

        return cls(**kwargs)


@dataclass
class ServerSettings:
    """
    Runtime settings of ``ardea serve``.

    Environment variables use the prefix, e.g. ``ARDEA_PORT=8080``.
    """
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    token_secret: Optional[str] = None

    @classmethod
    def load(
        cls,
        env_file: Optional[str] = None,
        prefix: str = "ARDEA_",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ServerSettings":
        """
        Load settings from an optional ``.env`` file, the environment and
        explicit overrides (``None`` override values are ignored).
        """
        raw: Dict[str, Any] = {}

        if env_file:
            if not os.path.exists(env_file):
                raise ConfigError(f"Env file not found: {env_file}")
            raw.update(_strip_prefix(dotenv_values(env_file), prefix))

        raw.update(_strip_prefix(os.environ, prefix))
        raw = {key: value for key, value in raw.items() if value is not None}

        if overrides:
            raw.update({key: value for key, value in overrides.items() if value is not None})

        kwargs = {}
        for f in fields(cls):
            if f.name not in raw:
                continue
            value = raw[f.name]
            # string settings are taken verbatim
            if isinstance(value, str) and not _is_text(f.default):
                value = _parse_value(value)
            kwargs[f.name] = _coerce(f.name, value, f.default)
        return cls(**kwargs)


def _strip_prefix(values: Mapping[str, Optional[str]], prefix: str) -> Dict[str, Optional[str]]:
    return {
        key[len(prefix):].lower(): value
        for key, value in values.items()
        if key.startswith(prefix)
    }


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    # Boolean
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    # Number
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    # JSON
    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _is_text(default: Any) -> bool:
    return isinstance(default, str) or default is None


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Setting '{name}' must be an integer, got {value!r}") from None
    if _is_text(default):
        return value if value is None else str(value)
    return value

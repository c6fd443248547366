"""Persistent AniMatch settings.

Settings live in ``~/.config/animatch/config.toml`` (``$XDG_CONFIG_HOME`` is
respected). TOML is parsed with tomli and written with tomli-w.

Recognised keys::

    [search]
    source = "anilist"        # or "catalog"
    per_page = 25
    timeout = 10.0
    catalog_path = "/path/to/catalog.json"
"""

from pathlib import Path
from typing import Any, Optional, TypeVar, cast
import contextlib
import os

import tomli
import tomli_w

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
CONFIG_DIR = _xdg_config_home / "animatch"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_SEARCH_SOURCE = "anilist"
_TRUTHY = {"1", "true", "yes", "on"}

T = TypeVar("T")


def _read_config_file() -> dict[str, Any]:
    """Read the TOML config file if it exists, returning a (nested) dict."""
    if not CONFIG_FILE.exists():
        return {}
    with CONFIG_FILE.open("rb") as f:
        return tomli.load(f)


def _write_config_file(data: dict[str, Any]) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with CONFIG_FILE.open("wb") as f:
        tomli_w.dump(data, f)


def _lookup_nested(data: dict[str, Any], dotted_key: str) -> Any | None:
    """Retrieve ``data["a"]["b"]`` for ``"a.b"``, or None if any level is missing."""
    current: Any = data
    for part in dotted_key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _make_env_var_name(dotted_key: str, prefix: str = "ANIMATCH_") -> str:
    """Convert a dotted key path to an env var name.

    Example: "search.per_page" -> "ANIMATCH_SEARCH_PER_PAGE".
    """
    return prefix + dotted_key.replace(".", "_").upper()


def _coerce(raw: Any, default: T) -> T:
    """Coerce *raw* (from env or file) to the type of *default*.

    Values that cannot be converted fall back to *default*.
    """
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return cast(T, raw)
        if isinstance(raw, str):
            return cast(T, raw.strip().lower() in _TRUTHY)
        return default
    if isinstance(default, int):
        if isinstance(raw, int) and not isinstance(raw, bool):
            return cast(T, raw)
        with contextlib.suppress(TypeError, ValueError):
            return cast(T, int(str(raw)))
        return default
    if isinstance(default, float):
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cast(T, float(raw))
        with contextlib.suppress(TypeError, ValueError):
            return cast(T, float(str(raw)))
        return default
    if default is None and isinstance(raw, str):
        # Unknown target type: infer numbers, otherwise keep the string.
        if raw.isdigit():
            return cast(T, int(raw))
        with contextlib.suppress(ValueError):
            return cast(T, float(raw))
    if isinstance(default, str):
        return cast(T, str(raw))
    return cast(T, raw)


def resolve_setting(
    key: str,
    *,
    default: T,
    cli_value: T | None = None,
) -> T:
    """Resolve a configuration *key* using precedence CLI > env > config > default.

    Args:
        key: Dotted key path, e.g. ``"search.source"``.
        default: Value to fall back to; its type drives coercion.
        cli_value: Value passed from a CLI option (``None`` when not provided).

    Returns:
        The resolved value.
    """
    if cli_value is not None:
        return cli_value

    env_var = _make_env_var_name(key)
    if env_var in os.environ:
        return _coerce(os.environ[env_var], default)

    file_val = _lookup_nested(_read_config_file(), key)
    if file_val is not None:
        return _coerce(file_val, default)

    return default


def get_default_search_source() -> str:
    """Return the configured default search source name."""
    return resolve_setting("search.source", default=DEFAULT_SEARCH_SOURCE)


def set_default_search_source(name: str) -> None:
    """Persist *name* as ``search.source`` in config.toml."""
    data = _read_config_file()
    data.setdefault("search", {})["source"] = name
    _write_config_file(data)


def get_catalog_path(cli_value: Optional[Path] = None) -> Optional[Path]:
    """Return the catalogue path from CLI, env or config (None when unset)."""
    raw = resolve_setting("search.catalog_path", default=None, cli_value=cli_value)
    return Path(raw) if raw is not None else None

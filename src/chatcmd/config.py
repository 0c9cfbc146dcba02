from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    prefix: str
    option_prefix: str
    flush_trailing: bool
    log_level: str
    profile_path: Optional[Path]


def _env_bool(name: str, default: str) -> bool:
    raw = os.getenv(name, default).strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _env_char(name: str, default: str) -> str:
    # No strip: a space is a legal (if unwise) prefix.
    value = os.getenv(name, default)
    if len(value) != 1:
        raise ValueError(f"{name} must be exactly one character (got {value!r})")
    return value


def load_settings() -> Settings:
    load_dotenv(override=False)

    prefix = _env_char("CHATCMD_PREFIX", "!")
    option_prefix = _env_char("CHATCMD_OPTION_PREFIX", "-")
    flush_trailing = _env_bool("CHATCMD_FLUSH_TRAILING", "0")
    log_level = os.getenv("CHATCMD_LOG_LEVEL", "INFO").strip().upper()
    profile = os.getenv("CHATCMD_PROFILE", "").strip()

    return Settings(
        prefix=prefix,
        option_prefix=option_prefix,
        flush_trailing=flush_trailing,
        log_level=log_level,
        profile_path=Path(profile) if profile else None,
    )

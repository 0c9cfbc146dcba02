from __future__ import annotations

import importlib.resources as importlib_resources
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from chatcmd.config import Settings
from chatcmd.parser import SPACE, Parser
from chatcmd.profile_schema import ParserProfile

logger = logging.getLogger(__name__)

_BUILTIN_PROFILE: Dict[str, Any] = {"profile": {"name": "builtin", "version": 1}}


def _read_profile_yaml(path: Optional[Path]) -> Dict[str, Any]:
    """Read raw profile YAML with fallbacks.

    Order:
    1) Explicit path arg (must exist)
    2) CHATCMD_PROFILE env var (if set + exists)
    3) CWD-relative chatcmd.yaml
    4) Packaged default (chatcmd/resources/default_profile.yaml)
    5) Built-in minimal profile

    The CLI only passes explicit paths; the implicit chain is for embedders
    calling `load_profile()` directly.
    """
    if path is not None:
        if not path.exists():
            raise ValueError(f"Profile not found: {path}")
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    env_path = os.getenv("CHATCMD_PROFILE", "").strip()
    if env_path:
        p = Path(env_path)
        if p.exists():
            return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        logger.warning("CHATCMD_PROFILE=%s does not exist, falling back", env_path)

    local = Path("chatcmd.yaml")
    if local.exists():
        return yaml.safe_load(local.read_text(encoding="utf-8")) or {}

    try:
        txt = importlib_resources.files("chatcmd").joinpath("resources/default_profile.yaml").read_text(encoding="utf-8")
        return yaml.safe_load(txt) or dict(_BUILTIN_PROFILE)
    except (OSError, ModuleNotFoundError, TypeError, ValueError, yaml.YAMLError) as e:
        logger.debug("packaged profile unavailable (%s), using built-in", e)
        return dict(_BUILTIN_PROFILE)


def load_profile(path: Optional[Path] = None) -> ParserProfile:
    """Load + validate a parser profile.

    Validation:
    - Pydantic schema validation (one-char prefixes, no quote option prefix)
    - Unique command names
    """
    raw = _read_profile_yaml(path)
    try:
        return ParserProfile.model_validate(raw)
    except ValidationError as e:
        # Re-raise with a cleaner message for CLI usage
        raise ValueError(f"Invalid parser profile YAML: {path or '(default)'}\n{e}") from e


def _warn_unsafe(prefix: str, option_prefix: str) -> None:
    if prefix == SPACE or option_prefix == SPACE:
        logger.warning("space used as a prefix character; leading spaces are often trimmed upstream")


def parser_from_profile(profile: ParserProfile) -> Parser:
    p = profile.parser
    _warn_unsafe(p.prefix, p.option_prefix)
    return Parser(p.prefix, p.option_prefix, flush_trailing=p.flush_trailing)


def parser_from_settings(settings: Settings) -> Parser:
    _warn_unsafe(settings.prefix, settings.option_prefix)
    return Parser(settings.prefix, settings.option_prefix, flush_trailing=settings.flush_trailing)

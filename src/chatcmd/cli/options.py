from __future__ import annotations

import argparse
import logging
from pathlib import Path

from chatcmd.config import Settings
from chatcmd.parser import Parser
from chatcmd.profile_loader import load_profile, parser_from_profile, parser_from_settings

logger = logging.getLogger(__name__)


def add_parser_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--prefix", default=None, help="Command prefix character (default from env / profile)")
    p.add_argument("--option-prefix", default=None, help="Option prefix character (default from env / profile)")
    p.add_argument("--flush-trailing", action="store_true", help="Keep an unterminated trailing token")
    p.add_argument("--profile", default="", help="Optional path to a parser profile YAML")


def build_parser(args: argparse.Namespace, s: Settings) -> Parser:
    """Resolve parser config.

    A profile (flag or CHATCMD_PROFILE) replaces the CHATCMD_PREFIX / OPTION_PREFIX /
    FLUSH_TRAILING settings as a whole; explicit CLI flags override either.
    """
    profile_path = Path(args.profile) if args.profile else s.profile_path
    if profile_path is not None:
        base = parser_from_profile(load_profile(profile_path))
        logger.debug("using profile %s, env parser settings ignored", profile_path)
    else:
        base = parser_from_settings(s)

    prefix = args.prefix if args.prefix is not None else base.prefix
    option_prefix = args.option_prefix if args.option_prefix is not None else base.option_prefix
    for flag, value in (("--prefix", prefix), ("--option-prefix", option_prefix)):
        if len(value) != 1:
            raise ValueError(f"{flag} must be exactly one character (got {value!r})")
    return Parser(prefix, option_prefix, flush_trailing=args.flush_trailing or base.flush_trailing)

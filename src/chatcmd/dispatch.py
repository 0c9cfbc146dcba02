from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from chatcmd.command import Command
from chatcmd.errors import CommandNameError, EscapeError, PrefixError
from chatcmd.parser import Parser
from chatcmd.profile_schema import ParserProfile

logger = logging.getLogger(__name__)

# ==== Dispatch error codes (frozen) ====
E_UNKNOWN_CMD = "E_UNKNOWN_CMD"
E_BAD_ARGS = "E_BAD_ARGS"
E_BAD_SYNTAX = "E_BAD_SYNTAX"
E_INTERNAL = "E_INTERNAL"

Handler = Callable[[Command], Optional[Dict[str, Any]]]


@dataclass(frozen=True)
class Response:
    ok: bool
    error_code: Optional[str]
    message: str
    data: Dict[str, Any]
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "ok": self.ok,
            "error_code": self.error_code,
            "message": self.message,
            "data": self.data,
        }
        if self.meta is not None:
            d["meta"] = self.meta
        return d


def ok(data: Optional[Dict[str, Any]] = None, *, cmd: Optional[str] = None) -> Dict[str, Any]:
    return Response(True, None, "OK", data or {}, meta={"cmd": cmd} if cmd else None).to_dict()


def err(code: str, message: str, *, cmd: Optional[str] = None) -> Dict[str, Any]:
    return Response(False, code, message, {}, meta={"cmd": cmd} if cmd else None).to_dict()


@dataclass(frozen=True)
class Registration:
    name: str
    handler: Handler
    usage: str = ""
    description: str = ""
    min_args: int = 0
    max_args: Optional[int] = None


class Dispatcher:
    """Route parsed lines to handlers keyed by command name.

    `handle_line` returns:
    - None when the line is not a command at all (wrong prefix)
    - an `err(...)` dict for syntax errors, unknown commands, bad arity
      or a failing handler
    - `ok(data)` with whatever dict the handler returned
    """

    def __init__(self, parser: Parser, *, with_help: bool = True) -> None:
        self.parser = parser
        self._commands: Dict[str, Registration] = {}
        if with_help:
            self.register(
                "help",
                self._help,
                usage=f"{parser.prefix}help",
                description="List available commands",
                max_args=0,
            )

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        usage: str = "",
        description: str = "",
        min_args: int = 0,
        max_args: Optional[int] = None,
    ) -> None:
        self._commands[name] = Registration(name, handler, usage, description, min_args, max_args)

    def describe(
        self,
        name: str,
        *,
        usage: str = "",
        description: str = "",
        min_args: int = 0,
        max_args: Optional[int] = None,
    ) -> None:
        """Update help/arity metadata of an already registered command."""
        if name not in self._commands:
            raise KeyError(f"Unknown command: {name}")
        handler = self._commands[name].handler
        self._commands[name] = Registration(name, handler, usage, description, min_args, max_args)

    def apply_profile(self, profile: ParserProfile) -> List[str]:
        """Copy usage/arity from a profile onto registered commands.

        Returns profile command names that have no registered handler.
        """
        missing: List[str] = []
        for entry in profile.commands:
            if entry.name not in self._commands:
                missing.append(entry.name)
                continue
            self.describe(
                entry.name,
                usage=entry.usage,
                description=entry.description,
                min_args=entry.min_args,
                max_args=entry.max_args,
            )
        if missing:
            logger.warning("profile commands without handlers: %s", ", ".join(missing))
        return missing

    @property
    def names(self) -> List[str]:
        return sorted(self._commands)

    def handle_line(self, raw: str) -> Optional[Dict[str, Any]]:
        try:
            cmd = self.parser.parse(raw)
        except PrefixError:
            return None
        except (CommandNameError, EscapeError) as e:
            return err(E_BAD_SYNTAX, str(e), cmd="(parse)")
        return self.dispatch(cmd)

    def dispatch(self, cmd: Command) -> Dict[str, Any]:
        reg = self._commands.get(cmd.name)
        if reg is None:
            logger.info("unknown command: %s", cmd.name)
            return err(E_UNKNOWN_CMD, f"Unknown command: {cmd.name}", cmd=cmd.name)

        n = len(cmd.arguments)
        if n < reg.min_args or (reg.max_args is not None and n > reg.max_args):
            usage = reg.usage or f"{cmd.prefix}{reg.name}"
            return err(E_BAD_ARGS, f"Usage: {usage}", cmd=cmd.name)

        try:
            data = reg.handler(cmd)
        except Exception as e:
            logger.exception("handler for %s failed", cmd.name)
            return err(E_INTERNAL, f"{type(e).__name__}: {e}", cmd=cmd.name)
        return ok(data, cmd=cmd.name)

    def _help(self, cmd: Command) -> Dict[str, Any]:
        return {
            "commands": [
                {"name": r.name, "usage": r.usage or f"{cmd.prefix}{r.name}", "description": r.description}
                for _, r in sorted(self._commands.items())
            ]
        }

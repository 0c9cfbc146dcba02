from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from chatcmd.command import Command
from chatcmd.errors import CommandNameError, EscapeError, ParseError, PrefixError

logger = logging.getLogger(__name__)

SPACE = " "
QUOTE = '"'
BACKSLASH = "\\"
CONNECTOR = ":"

ESCAPABLE = (QUOTE, BACKSLASH)


class State(Enum):
    PREFIX = "prefix"
    NAME = "name"
    DEFAULT = "default"
    ARGUMENT = "argument"
    LONG_ARGUMENT = "long_argument"
    ESCAPE_LONG_ARGUMENT = "escape_long_argument"
    OPTION = "option"
    PARAM_CONNECTOR = "param_connector"
    PARAM_VALUE = "param_value"
    PARAM_LONG_VALUE = "param_long_value"
    ESCAPE_LONG_PARAM_VALUE = "escape_long_param_value"


class _Scan:
    """Per-call accumulator: current state, token buffers and committed parts.

    One instance lives for exactly one `Parser.parse` call.
    """

    def __init__(self, prefix: str, option_prefix: str) -> None:
        self.prefix = prefix
        self.option_prefix = option_prefix
        self.state = State.PREFIX

        self.name: List[str] = []
        self.arguments: List[str] = []
        self.options: Set[str] = set()
        self.parameters: Dict[str, str] = {}

        self.buffer: List[str] = []
        self.key = ""

        self._handlers: Dict[State, Callable[[int, str], None]] = {
            State.PREFIX: self._on_prefix,
            State.NAME: self._on_name,
            State.DEFAULT: self._on_default,
            State.ARGUMENT: self._on_argument,
            State.LONG_ARGUMENT: self._on_long_argument,
            State.ESCAPE_LONG_ARGUMENT: self._on_escape_long_argument,
            State.OPTION: self._on_option,
            State.PARAM_CONNECTOR: self._on_param_connector,
            State.PARAM_VALUE: self._on_param_value,
            State.PARAM_LONG_VALUE: self._on_param_long_value,
            State.ESCAPE_LONG_PARAM_VALUE: self._on_escape_long_param_value,
        }

    # ---- buffer helpers ----

    def _take(self) -> str:
        s = "".join(self.buffer)
        self.buffer = []
        return s

    def _flush_argument(self) -> None:
        self.arguments.append(self._take())
        self.state = State.DEFAULT

    def _flush_option(self) -> None:
        self.options.add(self._take())
        self.state = State.DEFAULT

    def _commit_parameter(self) -> None:
        self.parameters[self.key] = self._take()
        self.key = ""
        self.state = State.DEFAULT

    def _escape(self, i: int, c: str, back_to: State) -> None:
        if c not in ESCAPABLE:
            raise EscapeError(i, c)
        self.buffer.append(c)
        self.state = back_to

    # ---- transitions ----

    def step(self, i: int, c: str) -> None:
        self._handlers[self.state](i, c)

    def _on_prefix(self, i: int, c: str) -> None:
        if c != self.prefix:
            raise PrefixError(i, c)
        self.state = State.NAME

    def _on_name(self, i: int, c: str) -> None:
        if c == SPACE:
            if not self.name:
                raise CommandNameError(i, c)
            self.state = State.DEFAULT
        else:
            self.name.append(c)

    def _on_default(self, i: int, c: str) -> None:
        if c == SPACE:
            return
        if c == QUOTE:
            self.state = State.LONG_ARGUMENT
        elif c == self.option_prefix:
            self.state = State.OPTION
        else:
            self.buffer.append(c)
            self.state = State.ARGUMENT

    def _on_argument(self, i: int, c: str) -> None:
        if c == SPACE:
            self._flush_argument()
        else:
            self.buffer.append(c)

    def _on_long_argument(self, i: int, c: str) -> None:
        if c == QUOTE:
            self._flush_argument()
        elif c == BACKSLASH:
            self.state = State.ESCAPE_LONG_ARGUMENT
        else:
            self.buffer.append(c)

    def _on_escape_long_argument(self, i: int, c: str) -> None:
        self._escape(i, c, State.LONG_ARGUMENT)

    def _on_option(self, i: int, c: str) -> None:
        if c == SPACE:
            self._flush_option()
        elif c == CONNECTOR:
            self.key = self._take()
            self.state = State.PARAM_CONNECTOR
        else:
            self.buffer.append(c)

    def _on_param_connector(self, i: int, c: str) -> None:
        if c == SPACE:
            self._commit_parameter()
        elif c == QUOTE:
            self.state = State.PARAM_LONG_VALUE
        else:
            self.buffer.append(c)
            self.state = State.PARAM_VALUE

    def _on_param_value(self, i: int, c: str) -> None:
        if c == SPACE:
            self._commit_parameter()
        else:
            self.buffer.append(c)

    def _on_param_long_value(self, i: int, c: str) -> None:
        if c == QUOTE:
            self._commit_parameter()
        elif c == BACKSLASH:
            self.state = State.ESCAPE_LONG_PARAM_VALUE
        else:
            self.buffer.append(c)

    def _on_escape_long_param_value(self, i: int, c: str) -> None:
        self._escape(i, c, State.PARAM_LONG_VALUE)

    # ---- end of input ----

    def finish(self, end: int, *, flush_trailing: bool) -> Command:
        if self.state is State.PREFIX:
            raise PrefixError(end, "")
        if self.state is State.NAME and not self.name:
            raise CommandNameError(end, "")

        if flush_trailing:
            if self.state is State.ARGUMENT:
                self._flush_argument()
            elif self.state is State.OPTION:
                self._flush_option()
            elif self.state in (State.PARAM_CONNECTOR, State.PARAM_VALUE):
                self._commit_parameter()
        # Anything still buffered (unterminated quotes, dangling escapes,
        # or unflushed bare tokens) is dropped here.

        return Command(
            prefix=self.prefix,
            option_prefix=self.option_prefix,
            name="".join(self.name),
            arguments=tuple(self.arguments),
            options=frozenset(self.options),
            parameters=self.parameters,
        )


class Parser:
    """Single-pass tokenizer turning a chat line into a `Command`.

    No validation happens at construction. A space as either prefix, or `"` as
    the option prefix, is accepted but will not parse usefully.

    `flush_trailing` controls what happens to an unquoted argument, flag or
    parameter that is still open when the line ends:
    - False (default): it is dropped (`!foo -opt` has no options)
    - True: it is committed as if a trailing space followed it
    """

    def __init__(self, prefix: str, option_prefix: str, *, flush_trailing: bool = False) -> None:
        self.prefix = prefix
        self.option_prefix = option_prefix
        self.flush_trailing = flush_trailing

    def __repr__(self) -> str:
        return (
            f"Parser(prefix={self.prefix!r}, option_prefix={self.option_prefix!r}, "
            f"flush_trailing={self.flush_trailing!r})"
        )

    def parse(self, raw: str) -> Command:
        """Parse one line. Raises a `ParseError` subclass on the first violation."""
        scan = _Scan(self.prefix, self.option_prefix)
        try:
            for i, c in enumerate(raw):
                scan.step(i, c)
            cmd = scan.finish(len(raw), flush_trailing=self.flush_trailing)
        except ParseError as e:
            logger.debug("parse failed: %r on %r", e, raw)
            raise
        logger.debug("parsed %r -> %s", raw, cmd.name)
        return cmd

    def try_parse(self, raw: str) -> Tuple[Optional[Command], Optional[ParseError]]:
        """Like `parse`, but returns `(command, None)` or `(None, error)`."""
        try:
            return self.parse(raw), None
        except ParseError as e:
            return None, e

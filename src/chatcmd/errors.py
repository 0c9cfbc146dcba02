from __future__ import annotations

from typing import Any, Dict

# ==== Error taxonomy (frozen) ====
E_PREFIX = "E_PREFIX"
E_NAME = "E_NAME"
E_ESCAPE = "E_ESCAPE"


class ParseError(ValueError):
    """Raised on the first structural violation in a command line.

    `position` is the zero-based character index of the offending character,
    `char` the character itself ("" when the line ended too early).
    """

    code = "E_PARSE"
    what = "parse command"

    def __init__(self, position: int, char: str) -> None:
        self.position = position
        self.char = char
        super().__init__(f"failed to {self.what} at position {position} (found {char!r})")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.position, self.char) == (other.position, other.char)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.position, self.char))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.position!r}, {self.char!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.code,
            "position": self.position,
            "char": self.char,
            "message": str(self),
        }


class PrefixError(ParseError):
    """The line does not open with the configured prefix."""

    code = E_PREFIX
    what = "parse prefix"


class CommandNameError(ParseError):
    """The command name is empty (prefix followed by a space or nothing)."""

    code = E_NAME
    what = "parse command name"


class EscapeError(ParseError):
    """A backslash inside quotes is followed by something other than `"` or `\\`."""

    code = E_ESCAPE
    what = "escape character"

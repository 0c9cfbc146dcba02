from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Command:
    """A parsed chat command.

    Layout of the source line:

        <prefix><name> <arg> "<long arg>" <option_prefix><flag> <option_prefix><key>:<value>

    - arguments keep input order (duplicates allowed)
    - options are a set (duplicates collapse)
    - parameters are a read-only mapping (last write wins)
    """

    prefix: str
    option_prefix: str
    name: str
    arguments: Tuple[str, ...] = ()
    options: FrozenSet[str] = frozenset()
    parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # Accept any iterable/mapping from callers, store immutable forms.
        object.__setattr__(self, "arguments", tuple(self.arguments))
        object.__setattr__(self, "options", frozenset(self.options))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def __hash__(self) -> int:
        return hash(
            (
                self.prefix,
                self.option_prefix,
                self.name,
                self.arguments,
                self.options,
                frozenset(self.parameters.items()),
            )
        )

    def has_option(self, option: str) -> bool:
        return option in self.options

    def get_parameter(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.parameters.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prefix": self.prefix,
            "option_prefix": self.option_prefix,
            "name": self.name,
            "arguments": list(self.arguments),
            "options": sorted(self.options),
            "parameters": dict(self.parameters),
        }

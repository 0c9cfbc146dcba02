from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ProfileMeta(BaseModel):
    name: str
    version: int = 1


class ParserSection(BaseModel):
    prefix: str = Field(default="!", min_length=1, max_length=1)
    option_prefix: str = Field(default="-", min_length=1, max_length=1)
    flush_trailing: bool = False

    @field_validator("option_prefix")
    @classmethod
    def _not_quote(cls, v: str) -> str:
        if v == '"':
            raise ValueError('option_prefix cannot be the quote character \'"\'')
        return v

    @model_validator(mode="after")
    def _distinct(self) -> "ParserSection":
        if self.prefix == self.option_prefix:
            raise ValueError("parser: prefix and option_prefix must differ")
        return self


class CommandEntry(BaseModel):
    name: str = Field(min_length=1)
    usage: str = ""
    description: str = ""
    min_args: int = Field(ge=0, default=0)
    max_args: Optional[int] = Field(ge=0, default=None)

    @field_validator("name")
    @classmethod
    def _no_space(cls, v: str) -> str:
        if " " in v:
            raise ValueError(f"command name cannot contain spaces: {v!r}")
        return v

    @model_validator(mode="after")
    def _arg_range(self) -> "CommandEntry":
        if self.max_args is not None and self.min_args > self.max_args:
            raise ValueError(f"command {self.name}: min_args > max_args")
        return self


class ParserProfile(BaseModel):
    profile: ProfileMeta
    parser: ParserSection = Field(default_factory=ParserSection)
    commands: List[CommandEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_command_names(self) -> "ParserProfile":
        names = [c.name for c in self.commands]
        if len(names) != len(set(names)):
            raise ValueError("duplicate command names found")
        return self

"""
Per-parse state for one command level.

A Session is created every time a command starts scanning tokens and is
dropped once the command has resolved its operands. It holds everything a
parse mutates, so the declaration tree itself stays untouched and can be
parsed again.

An Outcome is the frozen result of one level: the command, its option values
(every declared option, defaulted when not given) and its resolved operands.
"""
from types import MappingProxyType
from typing import Any, NamedTuple


class Outcome(NamedTuple):
    command: Any
    options: MappingProxyType
    operands: MappingProxyType


class Session:
    __slots__ = ("command", "options", "buffer", "literal")

    def __init__(self, command, /):
        self.command = command
        # Seeded with defaults; Option.update overwrites per occurrence.
        self.options = {option.name: option.default for option in command.options}
        # Classified tokens waiting for operand distribution.
        self.buffer = []
        # Set once a bare "--" was seen.
        self.literal = False

    def conclude(self, operands, /):
        return Outcome(
            self.command,
            MappingProxyType(dict(self.options)),
            MappingProxyType(dict(operands)),
        )

    def __repr__(self):
        return f"session(command={self.command.name!r}, options={self.options!r}, buffer={[token.text for token in self.buffer]!r}, literal={self.literal!r})"


__all__ = (
    "Session",
    "Outcome",
)

"""
Argtree faults and their rendering.

Scope
- FaultCode: stable numeric identifiers for every parse-time failure, grouped
  by domain (routing, options, operands).
- CommandException: base type carrying a message plus render options; knows
  how to render itself with rich and how to surface itself (__trigger__).
- BuildError: raised while declaring a command tree (duplicate names,
  clashing flags, several unbounded operands). Never rendered, always raised.
- trigger(): central entry point to surface a fault with runtime options.
- getdoc(): optional documentation line for a code, provided by the host.

Every parse-time fault is fatal. With shell=False the exception is raised to
the caller (library use); with shell=True it is printed on stderr and the
process exits with status 1.

Host customization (read from __main__)
- __styles__: palette overrides for the keys used in __rich__.
- __codes__: FaultCode → label mapping used in headers.
- __docs__: FaultCode → documentation line.
- __prog__: program name shown in headers.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - options (1111x): UNKNOWN_OPTION, FLAG_ASSIGNMENT, MISSING_OPTION_VALUE
    - operands and leftovers (1112x): UNRESOLVED_TOKEN, INVALID_OPTION_VALUE,
      OPERAND_COUNT, INVALID_OPERAND_VALUE
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101

    # --- option errors ---
    UNKNOWN_OPTION              = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_OPTION_VALUE        = 11117

    # --- operand errors ---
    UNRESOLVED_TOKEN            = 11121
    INVALID_OPTION_VALUE        = 11124
    OPERAND_COUNT               = 11125
    INVALID_OPERAND_VALUE       = 11126

    def normalize(self):
        """
        return the host label for this code, or its numeric value as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class BuildError(ValueError):
    """
    invalid command tree declaration (raised at build time, never at parse time).
    """


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "underline #00E5FF dim",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        try:
            name = self.options["tool"].root.name
        except KeyError:
            name = "argtree"
        prog = text(getattr(main, "__prog__", name), styler("prog-name"))

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if docs := self.options.get("docs"):
            renders.append(text(docs, styler("docs")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException): ...
class UnknownOptionError(CommandException): ...
class FlagAssignmentError(CommandException): ...
class MissingOptionValueError(CommandException): ...
class InvalidOptionValueError(CommandException): ...
class UnresolvedTokenError(CommandException): ...
class OperandCountError(CommandException): ...
class InvalidOperandValueError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see CommandException).
    - options are merged into the fault via copy.replace before triggering.
    - in shell mode the fault is printed and the process exits; otherwise it is raised.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, plus context such as
      token/index/argument for callers inspecting the exception.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation line for a fault code from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "BuildError",
    "CommandException",
    "UnknownCommandError",
    "UnknownOptionError",
    "FlagAssignmentError",
    "MissingOptionValueError",
    "InvalidOptionValueError",
    "UnresolvedTokenError",
    "OperandCountError",
    "InvalidOperandValueError",
    "trigger",
    "getdoc",
)

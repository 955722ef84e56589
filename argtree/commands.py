"""
Argtree command layer: declare a tree of commands and parse argv against it.

What this module provides
- Command: a node of the command tree. Owns an ordered list of Option, an
  ordered list of Operand, a name → Command mapping of children and an
  action called with the resolved values of its level.
- invoke(command, prompt): convenience runner accepting a shell-like string,
  an iterable of tokens, or nothing (sys.argv[1:]).

Quick start
    from argtree import Command, invoke

    tool = Command("tool")
    tool.add_option("verbose", "-v | --verbose")
    build = tool.add_command("build", help="compile sources")
    build.add_option("jobs", "-j | --jobs", True, type=int, default=1)
    build.add_operand("sources", "*")

    @build.set_action
    def run(options, operands):
        print(options["jobs"], operands["sources"])

    invoke(tool, "-v build -j 4 a.c b.c")

Parsing, one command level at a time
- Tokens are consumed from the front of a shared TokenStream.
- "--" switches the level to operands-only: every later token is buffered
  verbatim, even "--help".
- Flag-shaped tokens ("-x", "-xvf", "--name", "--name=value") are options.
  Combined short tokens are handled letter by letter; a value-taking letter
  takes the next token as its value.
- Bare tokens fill the operand buffer while the level still has operand
  capacity; past that, a bare token naming a child resolves this level
  (operands + action) and hands the rest of the stream to the child.
- When the stream runs out, the level resolves its operands and runs its action.

Operand distribution
- The buffered count must lie within the aggregate (min, max) of the level.
- Operands are filled left to right. Fixed operands take exactly their arity;
  the unbounded operand takes whatever is left after reserving the minimum of
  every operand declared after it.

Every fault is fatal (see argtree.faults): with shell=False it is raised,
with shell=True it is printed and the process exits.
"""
import difflib
import functools
import inspect
import logging
import operator
import os.path
import re
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .arguments import Option, Operand
from .faults import *
from .sessions import Session
from .tokens import TokenKind, TokenStream
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass giving commands read-only properties and stable reprs.

    - __typename__ is derived from the class name ("Command" → "command").
    - every name listed in __introspectable__ becomes a property mirroring
      the private "_<name>" field (lists and dicts are returned as copies).
    - __rich_repr__ lists __displayable__ when set, __introspectable__ otherwise.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _attach_to_parent(self, parent):
    """
    Register self under parent, enforcing unique child names.
    """
    if parent is Unset:
        return
    if parent._children.setdefault(self.name, self) is self:
        return

    typeof = "subcommand" if parent.parent else "command"
    raise BuildError(f"{type(self).__typename__} {typeof} name {self.name!r} is already in use under {parent.route!r}")


@functools.cache
def _ordinal(number):
    """
    Human-friendly ordinal for a 1-based position ("first", ..., "tenth", "11th").
    """
    words = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")
    if 1 <= number <= len(words):
        return words[number - 1]

    # 11th, 12th, 13th, 111th, ...
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Command(metaclass=CommandType):
    """
    A node of the command tree.

    Lifecycle
    - The whole tree is declared first (add_option/add_operand/add_command).
      Declaration errors raise BuildError immediately.
    - parse(tokens) then walks the tree. Parsing never mutates declarations:
      each visited level gets a fresh Session, so a tree can be parsed again.

    Runtime flags
    - shell: print faults and exit instead of raising them.
    - fancy: render faults inside a panel.
    - colorful: style rendered output.
    Each flag is inherited from the parent when left unset.
    """

    __introspectable__ = (
        "name",
        "description",
        "help",
        "action",
        "parent",
        "children",
        "options",
        "operands",
        "shell",
        "fancy",
        "colorful",
    )

    # The parent is left out so reprs do not loop through the tree.
    __displayable__ = (
        "name",
        "description",
        "children",
        "options",
        "operands",
    )

    @property
    def root(self):
        """
        The topmost command of the tree this command belongs to.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Commands from the root down to self, as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """
        Space-separated names from the root down to self ("tool build").
        """
        return " ".join(step.name for step in self.path)

    @property
    def bounds(self):
        """
        Aggregate (min, max) number of operand tokens; max is math.inf when
        one operand is unbounded.
        """
        minimum = maximum = 0
        for operand in self._operands:
            low, high = operand.expected
            minimum += low
            maximum += high
        return minimum, maximum

    def __init__(
            self,
            name=Unset,
            parent=Unset,
            /,
            *,
            description=Unset,
            help=Unset,
            action=Unset,
            shell=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")

        name = coalesce(name, os.path.basename(sys.argv[0]) or "prog")
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\s-]\S*", name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' must be a single word not starting with '-', got {name!r}")

        for field, object in (("description", description), ("help", help)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{type(self).__typename__} {field!r} must be a string")
            elif isinstance(object, str) and not object.strip():
                raise ValueError(f"{type(self).__typename__} {field!r} cannot be empty")

        if not callable(action) and action is not Unset:
            raise TypeError(f"{type(self).__typename__} 'action' must be callable")

        self._name = name
        self._description = coalesce(description and description.strip())
        self._help = coalesce(help and help.strip())
        self._action = coalesce(action)
        self._parent = coalesce(parent)
        self._children = {}
        self._options = []
        self._operands = []
        # Runtime flags are inherited from the parent when left unset.
        self._shell = bool(coalesce(shell, getattr(parent, "shell", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))

        _attach_to_parent(self, parent)

    def set_description(self, description, /):
        if not isinstance(description, str):
            raise TypeError(f"{type(self).__typename__} description must be a string")
        self._description = description.strip() or None
        return self

    def set_action(self, action, /):
        """
        Bind the callback run with (options, operands) once this level is resolved.

        Returns the command itself, so it also works as a decorator that
        keeps the command bound to the decorated name.
        """
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        self._action = action
        return self

    def add_option(self, name, flags, takes_value=False, /, **settings):
        """
        Declare an option on this command and return it.

        settings are forwarded to Option (default, type, validate, action, help).
        """
        option = Option(name, flags, takes_value, **settings)

        if any(existing.name == option.name for existing in self._options):
            raise BuildError(f"{type(self).__typename__} {self.route!r} already has an option named {option.name!r}")
        for flag in option.flags:
            if existing := self.get_option(flag):
                raise BuildError(f"{type(self).__typename__} {self.route!r} flag {flag!r} is already used by option {existing.name!r}")

        self._options.append(option)
        return option

    def add_operand(self, name, arity=1, /, **settings):
        """
        Declare the next positional operand of this command and return it.

        settings are forwarded to Operand (type, validate, help).
        """
        operand = Operand(name, arity, **settings)

        if any(existing.name == operand.name for existing in self._operands):
            raise BuildError(f"{type(self).__typename__} {self.route!r} already has an operand named {operand.name!r}")
        if operand.unbounded and any(existing.unbounded for existing in self._operands):
            raise BuildError(f"{type(self).__typename__} {self.route!r} cannot declare more than one unbounded operand")

        self._operands.append(operand)
        return operand

    def add_command(self, name, /, **settings):
        """
        Declare a child command and return it.
        """
        return Command(name, self, **settings)

    def command(self, source=Unset, /, **settings):
        """
        Decorator form of add_command: the decorated function becomes the
        child's action, its name the child's name and its docstring the
        child's description (unless given in settings).

            @tool.command(help="remove build outputs")
            def clean(options, operands): ...
        """
        @rename("command")
        def wrapper(callback, /):
            if not callable(callback):
                raise TypeError("@command() must be applied to a callable")
            options = {"description": inspect.getdoc(callback) or Unset} | settings
            return self.add_command(options.pop("name", callback.__name__), action=callback, **options)

        return wrapper(source) if source is not Unset else wrapper

    def get_option(self, flag, /):
        """
        First option declaring flag, or None.
        """
        for option in self._options:
            if option.is_flag(flag):
                return option
        return None

    def get_command(self, name, /):
        """
        Child command called name, or None.
        """
        return self._children.get(name)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags.
        """
        trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _helpline(self):
        # How the user can ask for usage of this level, when the tree offers a way.
        root = self.root
        if self is root and root.get_option("--help"):
            return "%s --help" % root.name
        if (helper := root.get_command("help")) and self is not helper:
            return " ".join([root.name, "help", *(step.name for step in self.path[1:])])
        return None

    def _hint(self, lead=""):
        if helpline := self._helpline():
            return lead + "run '%s' to see the expected usage" % helpline
        return lead + "check the options and operands declared for '%s'" % self.route

    def parse(self, tokens, /):
        """
        Parse tokens against this command and its descendants.

        Every action along the resolved path is invoked in order (root first).
        Returns the Outcome of every visited level, root first.
        """
        if isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        stream = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
        return self._parse(stream)

    def _parse(self, stream):
        session = Session(self)
        _, maximum = self.bounds

        while stream:
            token = stream.next()

            if session.literal:
                session.buffer.append(token)
                continue

            match token.kind:
                case TokenKind.TERMINATOR:
                    session.literal = True
                case TokenKind.SHORT | TokenKind.LONG:
                    self._consume(session, token, stream)
                case _ if len(session.buffer) < maximum:
                    session.buffer.append(token)
                case _ if token.text in self._children:
                    outcome = self._conclude(session)
                    logger.debug("%s: dispatching to %r at position %d", self.route, token.text, token.index)
                    return (outcome,) + self._children[token.text]._parse(stream)
                case _:
                    typeof = "subcommand" if self._children else "argument"
                    self.trigger(UnresolvedTokenError(
                        "too many arguments for %r at %s position: %r is neither an operand nor a %s" % (
                            self.route, _ordinal(token.index), token.text, typeof
                        ),
                        title="unresolved argument",
                        code=FaultCode.UNRESOLVED_TOKEN,
                        token=token.text,
                        index=token.index,
                        hint=self._hint("remove the extra value or "),
                        docs=getdoc(FaultCode.UNRESOLVED_TOKEN),
                    ))

        return (self._conclude(session),)

    def _consume(self, session, token, stream):
        """
        Apply one flag-shaped token (possibly several combined short flags).
        """
        for flag in token.flags:
            if not (option := self.get_option(flag)):
                suggestions = difflib.get_close_matches(
                    flag, [name for option in self._options for name in option.flags], 5
                )
                try:
                    hint = "did you mean %r? " % suggestions[0] + self._hint("you can also ")
                except IndexError:
                    hint = self._hint()
                self.trigger(UnknownOptionError(
                    "unknown option %r at %s position" % (flag, _ordinal(token.index)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    token=token.text,
                    flag=flag,
                    index=token.index,
                    suggestions=suggestions,
                    hint=hint,
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                ))
                continue

            if not option.takes_value:
                if token.value is not None:
                    self.trigger(FlagAssignmentError(
                        "option %r at %s position does not take a value" % (flag, _ordinal(token.index)),
                        title="option cannot take a value",
                        code=FaultCode.FLAG_ASSIGNMENT,
                        token=token.text,
                        flag=flag,
                        index=token.index,
                        argument=option,
                        hint="remove everything from '=' (for example: %s)" % flag,
                        docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                    ))
                    continue
                option.update(session.options)
                continue

            # An empty inline value ("--name=") counts as no value at all.
            if token.value:
                value, index = token.value, token.index
            elif token.value is None and stream:
                value, index = stream.pop(), stream.index
            else:
                self.trigger(MissingOptionValueError(
                    "value missing for option %r at %s position" % (flag, _ordinal(token.index)),
                    title="missing option value",
                    code=FaultCode.MISSING_OPTION_VALUE,
                    token=token.text,
                    flag=flag,
                    index=token.index,
                    argument=option,
                    hint="pass a value inline (%s=<value>) or as the next argument" % flag
                    if flag.startswith("--") else "pass a value as the next argument (%s <value>)" % flag,
                    docs=getdoc(FaultCode.MISSING_OPTION_VALUE),
                ))
                continue

            if not option.is_valid(value):
                self.trigger(InvalidOptionValueError(
                    "invalid value %r for option %r at %s position" % (value, flag, _ordinal(index)),
                    title="invalid option value",
                    code=FaultCode.INVALID_OPTION_VALUE,
                    token=token.text,
                    flag=flag,
                    value=value,
                    index=index,
                    argument=option,
                    hint=option.help and "expected: %s" % option.help or self._hint(),
                    docs=getdoc(FaultCode.INVALID_OPTION_VALUE),
                ))
                continue

            option.update(session.options, value)

    def _reserve(self, start, /):
        """
        Sum of the minimum token counts of the operands from position start on.
        """
        return sum(operand.expected[0] for operand in self._operands[start:])

    def _distribute(self, tokens):
        """
        Assign buffered tokens to the declared operands; returns name → value.
        """
        minimum, maximum = self.bounds

        if len(tokens) < minimum:
            self.trigger(OperandCountError(
                "not enough arguments for %r -- available %d, expected %s%d" % (
                    self.route, len(tokens), "at least " * (maximum != minimum), minimum
                ),
                title="not enough arguments",
                code=FaultCode.OPERAND_COUNT,
                available=len(tokens),
                expected=(minimum, maximum),
                hint=self._hint("add the missing values or "),
                docs=getdoc(FaultCode.OPERAND_COUNT),
            ))
        elif len(tokens) > maximum:
            self.trigger(OperandCountError(
                "too many arguments for %r -- available %d, expected %s%d" % (
                    self.route, len(tokens), "at most " * (maximum != minimum), maximum
                ),
                title="too many arguments",
                code=FaultCode.OPERAND_COUNT,
                available=len(tokens),
                expected=(minimum, maximum),
                hint=self._hint("remove the extra values or "),
                docs=getdoc(FaultCode.OPERAND_COUNT),
            ))

        values = {}
        pending = deque(tokens)

        for position, operand in enumerate(self._operands):
            if operand.unbounded:
                count = len(pending) - self._reserve(position + 1)
            else:
                count = operand.arity

            for _ in range(count):
                token = pending.popleft()
                if not operand.is_valid(token.text):
                    self.trigger(InvalidOperandValueError(
                        "invalid value %r for operand %r at %s position" % (
                            token.text, operand.name, _ordinal(token.index)
                        ),
                        title="invalid operand value",
                        code=FaultCode.INVALID_OPERAND_VALUE,
                        token=token.text,
                        index=token.index,
                        argument=operand,
                        hint=operand.help and "expected: %s" % operand.help or self._hint(),
                        docs=getdoc(FaultCode.INVALID_OPERAND_VALUE),
                    ))
                    continue
                operand.update(values, token.text)

        return {operand.name: operand.get_data(values) for operand in self._operands}

    def _conclude(self, session):
        """
        Resolve the buffered operands of a level and run its action.
        """
        outcome = session.conclude(self._distribute(session.buffer))
        logger.debug("%s: resolved options=%r operands=%r", self.route, dict(outcome.options), dict(outcome.operands))

        if self._action is not None:
            self._action(dict(outcome.options), dict(outcome.operands))
        return outcome

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt: Unset (sys.argv[1:]), a shell-like string (shlex.split)
        or an iterable of strings. Returns the outcomes of parse().
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        return self.parse(tokens)


def invoke(object, prompt=Unset, /):
    """
    Run anything implementing __invoke__ (Command, Program) with a prompt.

    - Unset: read sys.argv[1:].
    - str: split with shlex.split.
    - Iterable[str]: used as tokens.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "invoke",
)

# The metaclass stays out of star-imports.
del CommandType

r"""
Argtree argument declarations.

Overview
- Option: a named flag owned by a command. Either boolean (presence sets it
  to True) or value-taking (the value comes from "--name=value" or from the
  next token). Declares one or more flags, e.g. "-o", "--output", written as
  separate strings or as a single "-o | --output" string.
- Operand: a positional slot owned by a command, with an exact arity
  (0, 1, 2, ...) or the unbounded marker "*" (zero or more).

Declarations are immutable once built: every public field is a read-only
property (see ArgumentType). Parsing never stores values on them; the values
of one parse live in a plain mapping that the caller passes in:

    >>> values = {}
    >>> option = Option("output", "-o | --output", True, type=str)
    >>> option.update(values, "out.txt")
    'out.txt'
    >>> option.get_value(values)
    'out.txt'

Hooks
- validate: predicate over the raw string; False rejects the value.
- type: coercer applied to the raw string (str by default). Raising
  ValueError or TypeError also rejects the value, so coercers should be pure.
- action: option side-effect, called with no argument for boolean options
  and with the coerced value for value-taking ones.

Validation highlights
- Names must be non-empty identifiers (letters, digits, "_" and "-").
- Flags must be "-x" (one alnum) or "--name" (letter, then alnum or "-").
- Flags cannot repeat within a declaration.
- Operand arity must be a non-negative integer or "*".
"""
import functools
import math
import operator
import re

from .tokens import isflag
from .utils import *

UNBOUNDED = "*"


class ArgumentType(type):
    """
    Metaclass giving declarations read-only properties and stable reprs.

    - __typename__ is derived from the class name ("Option" → "option") and
      used in build-time error messages.
    - every name listed in __introspectable__ becomes a property mirroring
      the private "_<name>" field.
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the fields shared by Option and Operand.

    Mutates metadata in place (name is trimmed, help is trimmed or None).
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d][\w-]*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty identifier, got {name!r}")
    metadata["name"] = name

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if not callable(validate := metadata["validate"]) and validate is not Unset:
        raise TypeError(f"{cls.__typename__} 'validate' must be callable")
    metadata["validate"] = coalesce(validate)


def _sanitize_flags(cls, metadata, /):
    """
    Internal: normalize an option's flags into an ordered tuple.

    Accepts one string (split on "|"), or an iterable of strings.
    """
    flags = metadata["flags"]
    if isinstance(flags, str):
        flags = flags.split("|")

    try:
        flags = [flag.strip() if isinstance(flag, str) else flag for flag in flags]
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'flags' must be a string or an iterable of strings") from None

    if not flags:
        raise TypeError(f"{cls.__typename__} must specify at least one flag")

    sanitized = []
    for flag in flags:
        if not isinstance(flag, str):
            raise TypeError(f"{cls.__typename__} flags must be strings")
        elif not isflag(flag):
            raise ValueError(f"{cls.__typename__} flag {flag!r} must look like '-x' or '--name'")
        elif flag in sanitized:
            raise ValueError(f"{cls.__typename__} flags cannot contain duplicates")
        sanitized.append(flag)

    metadata["flags"] = tuple(sanitized)


def _conforms(argument, raw, /):
    # Shared by Option.is_valid and Operand.is_valid.
    if not isinstance(raw, str):
        return False
    if argument.validate is not None and not argument.validate(raw):
        return False
    try:
        argument.type(raw)
    except (TypeError, ValueError):
        return False
    return True


class Option(metaclass=ArgumentType):
    """
    Named flag declaration.

    Properties
    - name: key of the option in the values mapping handed to actions.
    - flags: tuple of surface flags; the option matches if any of them does.
    - takes_value: True for "--name value" options, False for booleans.
    - default: initial value (False for booleans, None otherwise unless given).
    - type, validate, action, help: see the module docstring.
    """

    __introspectable__ = (
        "name",
        "flags",
        "takes_value",
        "default",
        "type",
        "validate",
        "action",
        "help",
    )

    def __init__(
            self,
            name,
            flags,
            takes_value=False,
            /,
            *,
            default=Unset,
            type=str,
            validate=Unset,
            action=Unset,
            help=Unset
    ):
        metadata = {
            "name": name,
            "flags": flags,
            "takes_value": bool(takes_value),
            "default": default,
            "type": type,
            "validate": validate,
            "action": action,
            "help": help,
        }
        _sanitize_metadata(Option, metadata)
        _sanitize_flags(Option, metadata)

        if not callable(action) and action is not Unset:
            raise TypeError(f"{Option.__typename__} 'action' must be callable")
        metadata["action"] = coalesce(action)

        if metadata["takes_value"]:
            metadata["default"] = coalesce(default)
        else:
            if default is not Unset:
                raise TypeError(f"boolean {Option.__typename__} cannot specify a 'default'")
            metadata["default"] = False

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def set_action(self, action, /):
        """
        Bind the side-effect called whenever the option is matched.

        Returns the option itself so declarations can be chained.
        """
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        self._action = action
        return self

    def is_flag(self, token, /):
        """
        Return True if token is one of this option's flags.
        """
        return token in self._flags

    def is_valid(self, raw, /):
        """
        Return True if raw passes the validator and the coercer.
        """
        return _conforms(self, raw)

    def update(self, values, raw=Unset, /):
        """
        Record one occurrence of this option into values and run its action.

        Value-taking options store type(raw); boolean ones store True.
        Repeated occurrences overwrite, so the last one wins.
        """
        if self._takes_value:
            if raw is Unset:
                raise TypeError(f"{type(self).__typename__} {self._name!r} requires a value")
            values[self._name] = value = self._type(raw)
            if self._action is not None:
                self._action(value)
        else:
            if raw is not Unset:
                raise TypeError(f"{type(self).__typename__} {self._name!r} does not take a value")
            values[self._name] = value = True
            if self._action is not None:
                self._action()
        return value

    def get_value(self, values, /):
        return values.get(self._name, self._default)


class Operand(metaclass=ArgumentType):
    """
    Positional slot declaration.

    Properties
    - name: key of the operand in the values mapping handed to actions.
    - arity: exact count (int >= 0) or "*" for zero or more.
    - type, validate, help: see the module docstring.

    An operand with arity 1 resolves to a scalar; any other arity resolves
    to a list (possibly empty).
    """

    __introspectable__ = (
        "name",
        "arity",
        "type",
        "validate",
        "help",
    )

    def __init__(
            self,
            name,
            arity=1,
            /,
            *,
            type=str,
            validate=Unset,
            help=Unset
    ):
        metadata = {
            "name": name,
            "arity": arity,
            "type": type,
            "validate": validate,
            "help": help,
        }
        _sanitize_metadata(Operand, metadata)

        if isinstance(arity, bool) or not isinstance(arity, int | str):
            raise TypeError(f"{Operand.__typename__} 'arity' must be an integer or '*'")
        if isinstance(arity, str) and arity != UNBOUNDED:
            raise ValueError(f"{Operand.__typename__} 'arity' string must be '*'")
        if isinstance(arity, int) and arity < 0:
            raise ValueError(f"{Operand.__typename__} 'arity' must be a non-negative integer")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def unbounded(self):
        return self._arity == UNBOUNDED

    @property
    def expected(self):
        """
        (min, max) number of tokens this operand accepts; max is math.inf when unbounded.
        """
        if self.unbounded:
            return 0, math.inf
        return self._arity, self._arity

    def is_valid(self, raw, /):
        """
        Return True if raw passes the validator and the coercer.
        """
        return _conforms(self, raw)

    def update(self, values, raw, /):
        """
        Store (arity 1) or append (any other arity) type(raw) into values.
        """
        value = self._type(raw)
        if self._arity == 1:
            values[self._name] = value
        else:
            values.setdefault(self._name, []).append(value)
        return value

    def get_data(self, values, /):
        if self._arity == 1:
            return values.get(self._name)
        return values.get(self._name, [])


__all__ = (
    "Option",
    "Operand",
    "UNBOUNDED",
)

# The metaclass stays out of star-imports.
del ArgumentType

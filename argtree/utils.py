"""
Argtree utilities (small helpers shared by the declaration layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, kept apart from None because
    None is a legitimate option default.
- coalesce(value, default=None)
  • Materialize Unset into a concrete default; falsey values pass through.
- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated helpers.
- mirror("attr")
  • Read-only property that exposes a private backing field (self._attr).
    Lists and dicts are returned as copies so callers cannot reach into a
    declaration and mutate it.

Names not listed in __all__ are internal.
"""
import builtins
import functools
from collections.abc import Mapping
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters the caller did not provide.

    - bool(Unset) is False, but Unset is neither None nor 0.
    - repr(Unset) is "Unset".
    - UnsetType() always returns the same instance and cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    None, 0, "" and [] are preserved; only the sentinel is replaced.

    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Assign __name__/__qualname__ to a callable, or build a decorator doing so.

    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    # Shallow copies are enough: declarations only hold flat containers.
    if isinstance(object, list):
        return list(object)
    elif isinstance(object, Mapping):
        return dict(object)
    return object


def mirror(name, /):
    """
    Define a read-only property reading self._{name}.

    Containers are copied on every access, so mutating the returned object
    never changes the declaration it came from.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
The only UnsetType instance.

Use it as a default when None is meaningful to the caller, and materialize a
fallback with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)

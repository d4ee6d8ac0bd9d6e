"""
Declopt utilities (internal helpers).

- Unset: the "not declared" marker for option metadata. None stays a legitimate
  default, so it cannot play that role. Unset is falsy and can be combined with
  types in isinstance() checks: isinstance(value, str | Unset).
- coalesce(value, fallback): Unset -> fallback, anything else unchanged.
- rename("name"): decorator fixing __name__/__qualname__ of generated callables.
- mirror("attr"): read-only property over self._attr.

Names not in __all__ are internal and may change without notice.
"""
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker. There is exactly one instance.
    """

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = object.__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' cannot be subclassed")

    # UnsetType stands in for the instance inside type unions.
    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(value, fallback=None, /):
    """
    Return `value`, or `fallback` when `value` is Unset.

        coalesce("-f")     -> "-f"
        coalesce(Unset, 1) -> 1
        coalesce(None, 1)  -> None
    """
    return fallback if value is Unset else value


def rename(name, /):
    """
    Decorator giving a generated callable a stable __name__ and __qualname__.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str) or not name:
        raise TypeError("rename() argument must be a non-empty string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    decorator.__name__ = decorator.__qualname__ = "rename"
    return decorator


def _snapshot(value):
    # Hand out containers as copies; declared metadata stays untouched.
    match value:
        case str() | bytes():
            return value
        case Set():
            return frozenset(value)
        case Sequence():
            return tuple(value)
        case Mapping():
            return dict(value)
    return value


def mirror(name, /):
    """
    Build a read-only property exposing the private attribute "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, attribute))

    return property(getter, doc=f"Read-only view of {attribute}.")


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)

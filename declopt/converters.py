"""
Value converters: turn a raw argument string into a field's declared type.

converter_for(annotation) picks the converter once, when the schema is built;
the parser only calls it. Supported annotations:
- str, int, float: the builtin constructors.
- bool: case-insensitive true/false, yes/no, on/off, 1/0.
- Enum subclasses: member name first, then member value.
- Optional[T] / T | None: converted as T.
- any other callable: used as-is (it receives the raw string).

Parameterized generics such as list[int] are rejected, since a value is a
single token. Converters signal a bad value by raising ValueError or TypeError.
"""
import enum
import types
import typing

from .faults import UnsupportedTypeError
from .utils import rename

# Longest raw value accepted for any field.
MAX_VALUE_LENGTH = 128

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def boolean(raw, /):
    """
    Convert a raw string into a bool.

    Raises ValueError for anything outside the accepted words.
    """
    if not isinstance(raw, str):
        raise TypeError("boolean() argument must be a string")
    if (word := raw.strip().lower()) in _TRUTHY:
        return True
    if word in _FALSY:
        return False
    raise ValueError("invalid literal for boolean(): %r" % raw)


def enumeration(cls, /):
    """
    Build a converter looking up members of `cls` by name, then by value.
    """

    @rename(cls.__name__)
    def converter(raw, /):
        try:
            return cls[raw]
        except KeyError:
            pass
        for member in cls:
            if str(member.value) == raw:
                return member
        raise ValueError("%r is not a valid %s" % (raw, cls.__name__))

    return converter


def converter_for(annotation, /):
    """
    Return the converter for a declared annotation.

    Raises UnsupportedTypeError when no converter can be derived (for example an
    unresolved forward reference, or a union of several concrete types).
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        members = [member for member in typing.get_args(annotation) if member is not types.NoneType]
        if len(members) != 1:
            raise UnsupportedTypeError(f"cannot derive a converter for {annotation!r}")
        return converter_for(members[0])
    if typing.get_origin(annotation) is not None:
        # parameterized generics (list[int], dict[str, int]) take more than one token
        raise UnsupportedTypeError(f"cannot derive a converter for {annotation!r}")

    if annotation is bool:
        return boolean
    if annotation is typing.Any:
        return str
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return enumeration(annotation)
    if isinstance(annotation, str) or not callable(annotation):
        raise UnsupportedTypeError(f"cannot derive a converter for {annotation!r}")
    return annotation


def typename(annotation, /):
    """
    Short, human-readable name of an annotation for messages and usage.
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return " | ".join(typename(member) for member in typing.get_args(annotation))
    if annotation is types.NoneType:
        return "None"
    return getattr(annotation, "__name__", None) or repr(annotation)


__all__ = (
    "MAX_VALUE_LENGTH",
    "boolean",
    "enumeration",
    "converter_for",
    "typename",
)

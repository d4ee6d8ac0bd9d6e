r"""
Declopt option declarations and field descriptors.

Overview
- Option: the declaration marker placed on a configuration class.
    class Settings:
        filename: str = Option("--filename", "-f", help="where to write")
  It is a non-data descriptor: on the class it returns itself (so the schema can
  find it), on an instance it returns the declared default until the instance
  gets a value of its own.

- OptionField: the immutable, bound descriptor a schema keeps for each option.
  It resolves the value type (explicit type= first, then the class annotation,
  then str), picks the converter, and knows how to write the coerced value into
  a configuration instance.

Metadata (sanitized on construction)
- flag: required primary flag, e.g. "--filename".
- short: optional short flag, e.g. "-f". An empty string means "no short flag".
- type: Unset | Callable | Optional[T] (converter or annotation-like type).
- default: any value; None when not declared.
- help: Unset | str | Text, non-empty when provided; None when not declared.
- metavar: Unset | str, non-empty when provided.
- hidden: bool (suppresses the option from usage output).

Validation highlights
- Flags must match r"--?[^\W\d_][^\W_]*(-[^\W_]+)*" (MalformedFlagError otherwise).
- flag and short must differ (FlagCollisionError otherwise).
"""
import builtins
import copy
import re
import types
import typing

from rich.text import Text

from .converters import converter_for, typename
from .faults import FlagCollisionError, MalformedFlagError
from .utils import *

_FLAG_PATTERN = re.compile(r"--?[^\W\d_][^\W_]*(-[^\W_]+)*")


def _kebab(name):
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()


class FieldType(type):
    """
    Metaclass for declarations and fields.

    Every name in __introspectable__ becomes a read-only property over "_{name}",
    and __typename__ ("OptionField" -> "option-field") is used in messages.
    """

    def __new__(cls, name, bases, namespace, **options):
        mirrors = {key: mirror(key) for key in namespace.get("__introspectable__", ())}
        return super().__new__(cls, name, bases, namespace | mirrors | {"__typename__": _kebab(name)}, **options)


class _Described(metaclass=FieldType):
    # Shared repr: the __displayable__ names (or all __introspectable__ ones).
    __introspectable__ = ()
    __displayable__ = Unset

    def __rich_repr__(self):
        cls = type(self)
        for key in coalesce(cls.__displayable__, cls.__introspectable__):
            yield key, getattr(self, key)

    def __repr__(self):
        pairs = ", ".join(f"{key}={value!r}" for key, value in self.__rich_repr__())
        return f"{type(self).__typename__}({pairs})"


def _sanitize_flags(cls, metadata, /):
    """
    Internal: validate the primary and short flag of a declaration.

    - flag: required string matching the shell-style flag grammar.
    - short: Unset or a string; an empty string is normalized to Unset.
    - the two flags must differ.
    """
    if not isinstance(flag := metadata["flag"], str):
        raise TypeError(f"{cls.__typename__} 'flag' must be a string")
    elif not _FLAG_PATTERN.fullmatch(flag := flag.strip()):
        raise MalformedFlagError(f"{cls.__typename__} flag {flag!r} is not a valid shell-style flag")
    metadata["flag"] = flag

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (short := short.strip()):
        if not _FLAG_PATTERN.fullmatch(short):
            raise MalformedFlagError(f"{cls.__typename__} flag {short!r} is not a valid shell-style flag")
        if short == flag:
            raise FlagCollisionError(f"{cls.__typename__} flag {flag!r} is declared twice")
    metadata["short"] = short or Unset


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate type/help/metavar of a declaration.
    """
    if metadata["type"] is not Unset and not (
        callable(metadata["type"]) or typing.get_origin(metadata["type"]) in (typing.Union, types.UnionType)
    ):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if not isinstance(help := metadata["help"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = help

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = metavar


class Option(_Described):
    """
    Declaration of a bindable option on a configuration class.

    Attributes that are not Option instances are plain data and are ignored
    by the schema.
    """

    __introspectable__ = (
        "name",
        "flag",
        "short",
        "type",
        "default",
        "help",
        "metavar",
        "hidden",
    )
    __displayable__ = (
        "name",
        "flag",
        "short",
        "type",
        "default",
        "help",
    )

    def __init__(
            self,
            flag,
            short=Unset,
            /,
            *,
            type=Unset,
            default=Unset,
            help=Unset,
            metavar=Unset,
            hidden=False
    ):
        metadata = {
            "flag": flag,
            "short": short,
            "type": type,
            "default": default,
            "help": help,
            "metavar": metavar,
            "hidden": bool(hidden),
        }
        _sanitize_flags(builtins.type(self), metadata)
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._name = Unset  # Bound by __set_name__.

    @property
    def flags(self):
        """
        The declared flags, primary first.
        """
        return (self._flag,) if self._short is Unset else (self._flag, self._short)

    def __set_name__(self, owner, name):
        if self._name is not Unset and self._name != name:
            raise TypeError(f"{type(self).__typename__} {self._flag!r} is already bound to attribute {self._name!r}")
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return coalesce(self._default)


class OptionField(_Described):
    """
    Immutable descriptor of one option inside a schema.

    Built by the schema from an Option and the class annotation of its attribute;
    flags always holds the primary flag and, when declared, the short flag.
    """

    __introspectable__ = (
        "name",
        "type",
        "flags",
        "flag",
        "short",
        "default",
        "help",
        "metavar",
        "hidden",
    )
    __displayable__ = (
        "name",
        "type",
        "flags",
        "default",
        "help",
    )

    def __init__(self, name, option, annotation=Unset, /):
        if not isinstance(option, Option):
            raise TypeError(f"{type(self).__typename__} 'option' must be an option declaration")
        if not isinstance(name, str) or not name.isidentifier():
            raise TypeError(f"{type(self).__typename__} 'name' must be an identifier")

        self._name = name
        self._type = coalesce(option.type, coalesce(annotation, str))
        self._converter = converter_for(self._type)
        self._flag = option.flag
        self._short = coalesce(option.short)
        self._flags = frozenset(option.flags)
        self._default = coalesce(option._default)
        self._help = coalesce(option.help)
        self._metavar = coalesce(option.metavar)
        self._hidden = option.hidden

    @property
    def typename(self):
        return typename(self._type)

    def convert(self, raw, /):
        """
        Coerce a raw string into this field's type; ValueError/TypeError on failure.
        """
        return self._converter(raw)

    def assign(self, instance, value, /):
        """
        Write `value` into the field of a configuration instance.
        """
        setattr(instance, self._name, value)

    def initial(self):
        """
        A fresh copy of the declared default, for a new configuration instance.
        """
        return copy.copy(self._default)

    def read(self, instance, /):
        return getattr(instance, self._name)

    def __setattr__(self, name, value, /):
        if hasattr(self, "_hidden"):
            raise AttributeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'OptionField' is not an acceptable base type")


__all__ = (
    "Option",
    "OptionField",
)

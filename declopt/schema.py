"""
Declopt schema registry: flag string -> option field, built once per class.

What this module provides
- Schema: an immutable Mapping[str, OptionField] derived from the Option
  declarations of a configuration class. Primary and short flags both map to
  the same field.
- schema(cls): memoized builder, so every class gets exactly one Schema.
- @options: class decorator building the schema eagerly, so a malformed
  declaration fails when the class is defined instead of on first parse.

Build rules
- Every attribute holding an Option (along the MRO, subclasses win) is an option.
  Everything else on the class is plain data and ignored.
- A class without options is rejected (EmptySchemaError).
- Two fields claiming the same flag are rejected (FlagCollisionError).
"""
import functools
import inspect
import logging
import typing
from collections.abc import Mapping
from types import MappingProxyType

from .faults import EmptySchemaError, FlagCollisionError
from .fields import Option, OptionField
from .utils import *

logger = logging.getLogger(__name__)


def _collect(target):
    """
    Gather Option declarations of `target` in declaration order, bases first.
    """
    declared = {}
    for klass in reversed(target.__mro__):
        for name, object in vars(klass).items():
            if isinstance(object, Option):
                declared[name] = object
            elif name in declared:
                # a subclass replaced the option with plain data
                del declared[name]
    return declared


def _annotations(target):
    """
    Resolve the annotations of `target`, falling back to the raw ones when a
    forward reference cannot be evaluated.
    """
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError):
        annotations = {}
        for klass in reversed(target.__mro__):
            annotations |= inspect.get_annotations(klass)
        return annotations


class Schema(Mapping):
    """
    Read-only registry of the options declared by a configuration class.

    Queries
    - contains(flag): whether the flag is registered (same as `flag in schema`).
    - resolve(flag): the OptionField for a registered flag; KeyError otherwise.
    - fields: distinct fields in declaration order.
    - instantiate(): a fresh, default-initialized configuration instance.
    """

    __slots__ = ("_target", "_fields", "_registry")

    def __init__(self, target, /):
        if not isinstance(target, type):
            raise TypeError("schema() argument must be a class")

        declared = _collect(target)
        if not declared:
            raise EmptySchemaError(f"schema {target.__qualname__!r} declares no options")

        annotations = _annotations(target)
        registry = {}
        fields = []
        for name, option in declared.items():
            field = OptionField(name, option, annotations.get(name, Unset))
            for flag in option.flags:
                if flag in registry:
                    raise FlagCollisionError(
                        f"schema {target.__qualname__!r} flag {flag!r} of field {name!r}"
                        f" is already claimed by field {registry[flag].name!r}"
                    )
                registry[flag] = field
            fields.append(field)

        self._target = target
        self._fields = tuple(fields)
        self._registry = MappingProxyType(registry)
        logger.debug("built schema for %s: %d fields, %d flags", target.__qualname__, len(fields), len(registry))

    @property
    def target(self):
        return self._target

    @property
    def fields(self):
        return self._fields

    def contains(self, flag, /):
        return flag in self._registry

    def resolve(self, flag, /):
        return self._registry[flag]

    def instantiate(self):
        """
        Build a configuration instance with every option at its default.

        Values the class's own __init__ assigns are kept.
        """
        instance = self._target()
        for field in self._fields:
            if field.name not in getattr(instance, "__dict__", ()):
                field.assign(instance, field.initial())
        return instance

    def __getitem__(self, flag, /):
        return self._registry[flag]

    def __iter__(self):
        return iter(self._registry)

    def __len__(self):
        return len(self._registry)

    def __contains__(self, flag, /):
        return flag in self._registry

    def __setattr__(self, name, value, /):
        if hasattr(self, "_registry"):
            raise AttributeError("schema is read-only")
        super().__setattr__(name, value)

    def __repr__(self):
        return f"schema({self._target.__qualname__}, {list(self._registry)!r})"

    def __rich_repr__(self):
        yield "target", self._target
        yield "fields", self._fields


@functools.cache
def schema(target, /):
    """
    Return the Schema of a configuration class, building it on first use.
    """
    return Schema(target)


def options(target=Unset, /):
    """
    Class decorator: build the schema eagerly and expose it as __schema__.

    Usage
        @options
        class Settings:
            filename: str = Option("--filename", "-f")
    """

    @rename("options")
    def wrapper(target, /):
        if not isinstance(target, type):
            raise TypeError("@options() must be applied to a class")
        target.__schema__ = schema(target)
        return target

    return wrapper(target) if target is not Unset else wrapper


__all__ = (
    "Schema",
    "schema",
    "options",
)

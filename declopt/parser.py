"""
Declopt argument parser: flag/value pairs -> configuration instance.

The argument list is consumed strictly in non-overlapping pairs: position 1 is
a flag, position 2 its value, position 3 the next flag, and so on. Every pair
is one transition of a small state machine:

    SCANNING -> SCANNING | SUCCEEDED | UNKNOWN_FLAG | MISSING_VALUE | COERCION_ERROR

SCANNING is the only non-terminal state. A failed transition surfaces exactly
one fault (UnknownFlagError, MissingValueError, CoercionError or its
OversizedValueError subclass) and the instance under construction is dropped,
so callers never see a half-populated configuration.

A repeated flag is not an error: the last value wins.

Quick example
    >>> @options
    ... class Settings:
    ...     filename: str = Option("--filename")
    ...     iterations: int = Option("--iterations", "-i", default=1)
    ...
    >>> parse(Settings, ["--filename", "out.txt", "-i", "5"]).iterations
    5
"""
import difflib
import logging
import shlex
import sys
from collections.abc import Iterable
from enum import Enum

from .converters import MAX_VALUE_LENGTH
from .faults import *
from .schema import Schema, schema
from .utils import *

logger = logging.getLogger(__name__)


class ParseState(Enum):
    SCANNING = "scanning"
    SUCCEEDED = "succeeded"
    UNKNOWN_FLAG = "unknown-flag"
    MISSING_VALUE = "missing-value"
    COERCION_ERROR = "coercion-error"


_ORDINALS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


def _ordinal(number):
    """
    Human-friendly ordinal for a 1-based position: "first" ... "tenth", then "11th", "22nd".
    """
    if 1 <= number <= len(_ORDINALS):
        return _ORDINALS[number - 1]
    suffix = "th" if number % 100 in (11, 12, 13) else {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def _tokenize(arguments):
    """
    Normalize the accepted argument forms into a list of strings.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used as given (empty strings are legitimate values).
    """
    if arguments is Unset:
        return sys.argv[1:]
    if isinstance(arguments, str):
        return shlex.split(arguments)
    if isinstance(arguments, Iterable):
        tokens = list(arguments)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() arguments must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() arguments must be a string or an iterable of strings")


class Parser:
    """
    Parse argument lists against one schema.

    Parameters
    - target: configuration class or Schema.
    - limit: longest accepted raw value (characters).
    - shell: print faults with rich and exit(1) instead of raising them.
    - fancy: render faults inside a panel.
    - colorful: style fault output.

    A Parser keeps no per-parse state, so one instance may serve concurrent parses.
    """

    def __init__(self, target, /, *, limit=MAX_VALUE_LENGTH, shell=False, fancy=False, colorful=True):
        if isinstance(target, Schema):
            self.schema = target
        elif isinstance(target, type):
            self.schema = schema(target)
        else:
            raise TypeError("parser 'target' must be a configuration class or a schema")

        if not isinstance(limit, int) or isinstance(limit, bool):
            raise TypeError("parser 'limit' must be an integer")
        elif limit < 1:
            raise ValueError("parser 'limit' must be a positive integer")

        self.limit = limit
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    def trigger(self, fault, /):
        logger.debug("parse of %s failed: %s", self.schema.target.__qualname__, fault.code.name.lower())
        trigger(fault, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _unknown(self, flag, index):
        suggestions = difflib.get_close_matches(flag, list(self.schema), 3)
        try:
            hint = "did you mean %r? valid flags are %s" % (suggestions[0], ", ".join(sorted(self.schema)))
        except IndexError:
            hint = "valid flags are %s" % ", ".join(sorted(self.schema))
        return UnknownFlagError(
            "unknown flag %r at %s position" % (flag, _ordinal(index)),
            title="unknown flag",
            code=FaultCode.UNKNOWN_FLAG,
            flag=flag,
            index=index,
            suggestions=tuple(suggestions),
            hint=hint,
        )

    def _transition(self, instance, tokens, index):
        """
        Consume the pair starting at tokens[index]; return (state, fault).
        """
        flag = tokens[index]
        position = index + 1

        if not self.schema.contains(flag):
            return ParseState.UNKNOWN_FLAG, self._unknown(flag, position)

        field = self.schema.resolve(flag)
        metavar = field.metavar or "<%s>" % field.name

        if index + 1 >= len(tokens):
            return ParseState.MISSING_VALUE, MissingValueError(
                "flag %r at %s position is missing its value" % (flag, _ordinal(position)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                flag=flag,
                index=position,
                field=field.name,
                hint="pass a value after the flag (for example: %s %s)" % (flag, metavar),
            )

        raw = tokens[index + 1]

        if len(raw) > self.limit:
            logger.warning("rejected %d-character value for %s (limit %d)", len(raw), flag, self.limit)
            return ParseState.COERCION_ERROR, OversizedValueError(
                "value for flag %r at %s position is longer than %d characters" % (flag, _ordinal(position + 1), self.limit),
                title="value too long",
                code=FaultCode.OVERSIZED_VALUE,
                flag=flag,
                index=position + 1,
                value=raw[:self.limit],
                field=field.name,
                hint="shorten the value to at most %d characters" % self.limit,
            )

        try:
            value = field.convert(raw)
        except (ValueError, TypeError, ArithmeticError) as exception:
            return ParseState.COERCION_ERROR, CoercionError(
                "value %r for flag %r at %s position is not a valid %s" % (raw, flag, _ordinal(position + 1), field.typename),
                title="invalid value",
                code=FaultCode.COERCION_ERROR,
                flag=flag,
                index=position + 1,
                value=raw,
                field=field.name,
                reason=str(exception),
                hint="field %r expects a %s value (for example: %s %s)" % (field.name, field.typename, flag, metavar),
            )

        field.assign(instance, value)
        return ParseState.SCANNING, None

    def parse(self, arguments=Unset, /):
        """
        Parse `arguments` into a fresh configuration instance.

        Returns the populated instance; raises a ParseError subclass otherwise
        (or prints it and exits with status 1 in shell mode).
        """
        tokens = _tokenize(arguments)
        instance = self.schema.instantiate()

        state, fault = ParseState.SCANNING, None
        for index in range(0, len(tokens), 2):
            state, fault = self._transition(instance, tokens, index)
            if state is not ParseState.SCANNING:
                break
        else:
            state = ParseState.SUCCEEDED

        if state is ParseState.SUCCEEDED:
            return instance

        self.trigger(fault)
        raise RuntimeError("unreachable")

    __call__ = parse


def parse(target, arguments=Unset, /, **options):
    """
    Parse `arguments` against the schema of `target`.

    Parameters
    - target: configuration class or Schema.
    - arguments:
      • Unset: read sys.argv[1:].
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized arguments.
    - **options: forwarded to Parser (limit, shell, fancy, colorful).

    Returns
    - the populated configuration instance.

    Raises
    - UnknownFlagError, MissingValueError, CoercionError (OversizedValueError).
    """
    return Parser(target, **options).parse(arguments)


__all__ = (
    "ParseState",
    "Parser",
    "parse",
)

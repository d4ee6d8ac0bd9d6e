"""
Declopt faults (schema errors, parse errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault, grouped by domain so
  logs and searches stay predictable.
- SchemaError family: raised while a configuration class is being declared or
  its schema is being built. These are programming errors in the declaration.
- ParseError family: raised while an argument list is parsed against a schema.
  They carry the message plus read-only options (flag, index, value, field, hint)
  and know how to render themselves with rich.
- trigger(): central entry point to surface a parse fault (raise, or print and
  exit when running in shell mode).

UX goals
- Position-first messages ("unknown flag '--x' at first position").
- One sentence per message, a single actionable hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
import os.path
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

# Fault palette; entries can be overridden through __styles__ in __main__.
_PALETTE = {
    "fault-prog": "bold #F5F5F5",
    "fault-code": "bold #38BDF8",
    "fault-title": "bold #F43F5E",
    "fault-message": "#D4D4D8",
    "fault-arrow": "dim #86EFAC",
    "fault-hint": "italic #86EFAC",
}


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - parse errors (11xxx): UNKNOWN_FLAG, MISSING_VALUE, COERCION_ERROR, OVERSIZED_VALUE
    - schema errors (21xxx): EMPTY_SCHEMA, FLAG_COLLISION, MALFORMED_FLAG, UNSUPPORTED_TYPE
    """
    # --- parse errors (11xxx) ---
    UNKNOWN_FLAG                = 11112
    MISSING_VALUE               = 11117
    COERCION_ERROR              = 11131
    OVERSIZED_VALUE             = 11132

    # --- schema errors (21xxx) ---
    EMPTY_SCHEMA                = 21101
    FLAG_COLLISION              = 21102
    MALFORMED_FLAG              = 21103
    UNSUPPORTED_TYPE            = 21104

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SchemaError(TypeError):
    """
    a configuration class declares its options incorrectly.

    raised at declaration or schema-build time, never while parsing.
    """
    code = None

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message


class EmptySchemaError(SchemaError):
    code = FaultCode.EMPTY_SCHEMA


class FlagCollisionError(SchemaError):
    code = FaultCode.FLAG_COLLISION


class MalformedFlagError(SchemaError, ValueError):
    code = FaultCode.MALFORMED_FLAG


class UnsupportedTypeError(SchemaError):
    code = FaultCode.UNSUPPORTED_TYPE


class ParseError(Exception):
    """
    an argument list does not match the schema it is parsed against.

    options carried (all optional)
    - code, title, hint: rendering metadata.
    - flag, index, value, field: where the fault happened (index is 1-based).
    - prog, shell, fancy, colorful: runtime presentation, merged in by trigger().
    """

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    @property
    def flag(self):
        return self.options.get("flag")

    @property
    def index(self):
        return self.options.get("index")

    @property
    def value(self):
        return self.options.get("value")

    @property
    def field(self):
        return self.options.get("field")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        palette = _PALETTE | getattr(main, "__styles__", {})

        def paint(fragment, key):
            if isinstance(fragment, Text) and colorful:
                return fragment
            return Text(str(fragment or ""), palette.get(key, "") if colorful else "")

        prog = getattr(main, "__prog__", None) or self.options.get("prog") or os.path.basename(sys.argv[0])
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"
        title = str(self.options.get("title", "parse error")).title()

        header = Text.assemble(
            "[ ", paint(prog, "fault-prog"),
            " — ", paint(code, "fault-code"),
            " | ", paint(title, "fault-title"), " ]",
        )
        body = [paint(str(self), "fault-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(paint(" → ", "fault-arrow"), paint(hint, "fault-hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
            sys.exit(1)
        raise self from None

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **(dict(self.options) | overrides))


class UnknownFlagError(ParseError): ...
class MissingValueError(ParseError): ...
class CoercionError(ParseError): ...
class OversizedValueError(CoercionError): ...


def trigger(fault, /, **options):
    """
    surface a parse fault, merging the runtime options (shell, fancy, colorful,
    prog) into it first.

    in shell mode the fault is rendered to stderr and the process exits with 1;
    otherwise it is raised.
    """
    for hook in ("__replace__", "__trigger__"):
        if not callable(getattr(fault, hook, None)):
            raise TypeError(f"trigger() argument must implement {hook}()")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "SchemaError",
    "EmptySchemaError",
    "FlagCollisionError",
    "MalformedFlagError",
    "UnsupportedTypeError",
    "ParseError",
    "UnknownFlagError",
    "MissingValueError",
    "CoercionError",
    "OversizedValueError",
    "trigger",
)

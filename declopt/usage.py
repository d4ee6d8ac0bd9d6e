"""
Usage rendering for a schema (rich-based, color-aware).

usage(target) builds a renderable listing a one-line synopsis followed by one
row per visible option: its flags, its value placeholder, and its help text
(with the default when one was declared). print_usage(target) prints it.

Palette keys
- usage-label, usage-prog, usage-flag, usage-metavar, usage-help, usage-default

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- Define __prog__ in __main__ to override the program name.
"""
import os.path
import sys

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .schema import Schema, schema

_PALETTE = {
    "usage-label": "bold #38BDF8",
    "usage-prog": "bold #F43F5E",
    "usage-flag": "bold #4ADE80",
    "usage-metavar": "#FACC15",
    "usage-help": "#A1A1AA",
    "usage-default": "italic #71717A",
}


def _resolve(target):
    if isinstance(target, Schema):
        return target
    if isinstance(target, type):
        return schema(target)
    raise TypeError("usage() argument must be a configuration class or a schema")


def usage(target, /, *, prog=None, colorful=True, fancy=False):
    main = __import__("__main__")
    registry = _resolve(target)
    palette = _PALETTE | getattr(main, "__styles__", {})

    def paint(fragment, key):
        if isinstance(fragment, Text) and colorful:
            return fragment
        return Text(str(fragment or ""), palette.get(key, "") if colorful else "")

    prog = prog or getattr(main, "__prog__", None) or os.path.basename(sys.argv[0])
    fields = [field for field in registry.fields if not field.hidden]

    def flags(field):
        # short flag first, then the primary one
        names = sorted(field.flags, key=lambda name: (name.startswith("--"), len(name)))
        return Text(" | ").join(paint(name, "usage-flag") for name in names)

    def metavar(field):
        return paint(field.metavar or "<%s>" % field.name, "usage-metavar")

    synopsis = Text.assemble(paint("usage:", "usage-label"), " ", paint(prog, "usage-prog"))
    for field in fields:
        synopsis.append_text(Text.assemble(" [", flags(field), " ", metavar(field), "]"))

    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column(no_wrap=True)
    table.add_column()
    for field in fields:
        description = paint(field.help, "usage-help")
        if field.default is not None:
            description = Text.assemble(description, " " if field.help else "", paint("(default: %r)" % (field.default,), "usage-default"))
        table.add_row(flags(field), metavar(field), description)

    if fancy:
        return Panel(Group(synopsis, Text(""), table), title=paint(prog, "usage-prog"), title_align="left")
    return Group(synopsis, Text(""), table)


def print_usage(target, /, *, console=None, **options):
    (console or Console()).print(usage(target, **options))


__all__ = (
    "usage",
    "print_usage",
)

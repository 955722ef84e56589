"""
Help and version rendering (rich-based).

- render_help(command): usage line, description, sub-command table, options
  and operands of one command.
- render_version(settings): the "version_string" template of a program,
  formatted against its settings.
- substitute(template, settings): "${key}" replacement; keys missing from
  settings are left verbatim.

Palette keys can be overridden through a __styles__ mapping in __main__.
When colorful is False no style is applied.
"""
import re
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute(template, settings, /):
    """
    Replace every ${key} in template with str(settings[key]).

    >>> substitute("${name} ${version} ${missing}", {"name": "tool", "version": "1.2"})
    'tool 1.2 ${missing}'
    """
    if not isinstance(template, str):
        raise TypeError("substitute() first argument must be a string")

    def replace(match):
        key = match[1]
        return str(settings[key]) if key in settings else match[0]

    return _PLACEHOLDER.sub(replace, template)


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _metavar(operand):
    name = "<%s>" % operand.name
    match operand.arity:
        case "*":
            return "[%s ...]" % name
        case int() as arity:
            return " ".join([name] * arity)


def render_help(command, /, *, console=Unset):
    """
    Print the help of command.

    Sections
    - usage: route, options, operands and "<command>" when children exist.
    - description (when set).
    - commands/subcommands table (when the command has children).
    - options and operands, one per line with their help text.
    """
    console = coalesce(console, Console())
    styles = _palette({
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "argument-description": "#9CA3AF",
        "children-title": "bold #FFFFFF",
        "children-table": "#4B5563",
        "children": "bold #36C5F0",
        "children-description": "#9CA3AF",
        "panel-title": "bold #FF4D94",
    })

    def styler(style):
        return styles[style] if command.colorful else ""

    renders = []

    # usage: <route> [-h | --help] [--name <name>] <operand> [<rest> ...] <command>
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(command.route, styler("program-name"))
    for option in command.options:
        usage.append(" [")
        usage.append(" | ".join(option.flags), styler("option-name"))
        if option.takes_value:
            usage.append(" ").append("<%s>" % option.name, styler("metavar"))
        usage.append("]")
    for operand in command.operands:
        if metavar := _metavar(operand):
            usage.append(" ").append(metavar, styler("metavar"))
    if command.children:
        usage.append(" ").append("<command>", styler("metavar"))
    renders.append(usage)

    if command.description:
        renders.append(Text("\n").append(command.description, styler("description-section")))

    if command.children:
        typeof = "subcommands" if command.parent else "commands"
        table = Table(
            "name", "help",
            title=Text(typeof, styler("children-title")),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for name, child in command.children.items():
            descr = child.help or (child.description or "").partition("\n")[0]
            table.add_row(
                Text(name, styler("children")),
                Text(descr or "no description", styler("children-description")),
            )
        renders.append(Text(""))
        renders.append(table)

    for label, arguments in (("options", command.options), ("operands", command.operands)):
        if not arguments:
            continue
        grid = Table.grid(padding=(0, 2))
        grid.add_column(no_wrap=True)
        grid.add_column()
        for argument in arguments:
            if label == "options":
                names = Text(" | ".join(argument.flags), styler("option-name"))
                if argument.takes_value:
                    names.append(" ").append("<%s>" % argument.name, styler("metavar"))
            else:
                names = Text(_metavar(argument) or "<%s>" % argument.name, styler("metavar"))
            grid.add_row(Text("  ").append(names), Text(argument.help or "", styler("argument-description")))
        renders.append(Text("\n").append(label, styler("group-label")).append(":"))
        renders.append(grid)

    renderable = Group(*renders)

    if command.fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{command.name} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    console.print(renderable)


def render_version(settings, /, *, colorful=False, fancy=False, console=Unset):
    """
    Print settings["version_string"] formatted against settings.
    """
    console = coalesce(console, Console())
    styles = _palette({
        "program-version": "bold #00E6FF",
        "panel-title": "bold #FF4D94",
    })

    def styler(style):
        return styles[style] if colorful else ""

    renderable = Text(substitute(settings["version_string"], settings), styler("program-version"))

    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{settings.get('name', '')} VERSION".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    console.print(renderable)


__all__ = (
    "render_help",
    "render_version",
    "substitute",
)

"""
Argtree program driver: the root command of a command-line application.

Program is a Command that also takes care of the process-level glue:

- implicit options on the root: "--version" prints the version string and
  "-h | --help" prints the root help; both exit the process with status 0.
- an implicit "help" subcommand, added together with the first subcommand:
  "prog help build test" prints the help of "prog build test".
- a default action, run after parsing when the argument vector was empty.
- shell mode on by default: a parse fault is printed on stderr and the
  process exits with status 1 instead of raising.

Settings
- name, version ("0.0.0") and version_string ("${name} ${version}") plus any
  extra keyword given at construction. The version string is formatted
  against the whole settings mapping; unknown ${keys} are printed verbatim.

Example
    program = Program("tool", version="1.4.0", version_string="${name} v${version} (${channel})", channel="beta")
    program.add_option("verbose", "-v | --verbose")

    @program.command
    def build(options, operands):
        \"""Compile the project.\"""

    program.parse()
"""
import sys

from rich.console import Console

from .commands import Command
from .faults import *
from .renderers import render_help, render_version
from .utils import *


class Program(Command):
    """
    Root command plus version/help/default-action handling.
    """

    __introspectable__ = Command.__introspectable__ + (
        "settings",
        "default_action",
    )

    def __init__(
            self,
            name=Unset,
            /,
            *,
            version="0.0.0",
            version_string="${name} ${version}",
            default_action=Unset,
            description=Unset,
            shell=True,
            fancy=Unset,
            colorful=Unset,
            console=Unset,
            **settings
    ):
        super().__init__(name, description=description, shell=shell, fancy=fancy, colorful=colorful)

        if not isinstance(version, str):
            raise TypeError(f"{type(self).__typename__} 'version' must be a string")
        if not isinstance(version_string, str):
            raise TypeError(f"{type(self).__typename__} 'version_string' must be a string")
        if not callable(default_action) and default_action is not Unset:
            raise TypeError(f"{type(self).__typename__} 'default_action' must be callable")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a rich console")

        self._settings = {
            "name": self.name,
            "version": version,
            "version_string": version_string,
        } | settings
        self._default_action = coalesce(default_action)
        self._console = coalesce(console, Console())

        self.add_option("version", "--version", help="Print version info.", action=self.print_version)
        self.add_option("help", "-h | --help", help="Print help information.", action=self.print_help)

    def set_version(self, version, /):
        if not isinstance(version, str):
            raise TypeError(f"{type(self).__typename__} version must be a string")
        self._settings["version"] = version
        return self

    def get_version(self):
        return self._settings["version"]

    def set_default_action(self, action, /):
        """
        Bind the callback run (without arguments) when parse() got no tokens.
        """
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} default action must be callable")
        self._default_action = action
        return self

    def print_version(self):
        render_version(self._settings, colorful=self.colorful, fancy=self.fancy, console=self._console)
        sys.exit(0)

    def print_help(self, command=Unset, /):
        """
        Print the help of command (the program itself by default) and exit.
        """
        if not isinstance(command, Command | Unset):
            raise TypeError("print_help() argument must be a command")
        render_help(coalesce(command, self), console=self._console)
        sys.exit(0)

    def add_command(self, name, /, **settings):
        if name != "help" and "help" not in self._children:
            helper = super().add_command(
                "help",
                help="Display help for a subcommand.",
                action=self._help_action,
            )
            helper.add_operand("command", "*", help="Command to get help for.")
        return super().add_command(name, **settings)

    def _help_action(self, options, operands):
        # Resolve "help a b c" into the command at route "a b c".
        command = self
        walked = []
        for name in operands["command"]:
            walked.append(name)
            if (child := command.get_command(name)) is None:
                self.trigger(UnknownCommandError(
                    "unknown command %r" % " -> ".join(walked),
                    title="unknown command",
                    code=FaultCode.UNKNOWN_COMMAND,
                    walked=tuple(walked),
                    hint="run '%s help' to see the available commands" % self.name,
                    docs=getdoc(FaultCode.UNKNOWN_COMMAND),
                ))
                return
            command = child
        self.print_help(command)

    def parse(self, argv=Unset, /):
        """
        Parse argv (sys.argv[1:] by default), then run the default action
        when argv was empty. Returns the outcomes of Command.parse.
        """
        tokens = sys.argv[1:] if argv is Unset else argv
        if isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        tokens = list(tokens)

        outcomes = super().parse(tokens)

        if not tokens and self._default_action is not None:
            self._default_action()
        return outcomes


__all__ = (
    "Program",
)

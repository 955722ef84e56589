"""
Help and version rendering tests.

Scope
- substitute(): ${key} replacement, unknown keys left verbatim.
- render_help(): usage line, description, sub-command table, options and
  operands sections.
- render_version(): version template formatting, plain and fancy.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argtree import Command, render_help, render_version, substitute


def capture():
    buffer = io.StringIO()
    return buffer, Console(file=buffer, width=100, color_system=None)


class TestSubstitute(TestCase):
    """Behavioral tests for substitute()."""

    def testKnownKeys(self):
        self.assertEqual(substitute("${name} ${version}", {"name": "tool", "version": "1.2"}), "tool 1.2")

    def testUnknownKeysVerbatim(self):
        self.assertEqual(substitute("${name} ${missing}", {"name": "tool"}), "tool ${missing}")

    def testNonStringValues(self):
        self.assertEqual(substitute("build ${build}", {"build": 42}), "build 42")

    def testNoPlaceholders(self):
        self.assertEqual(substitute("plain $name {name}", {"name": "tool"}), "plain $name {name}")

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            substitute(42, {})


class TestRenderHelp(TestCase):
    """Behavioral tests for render_help()."""

    def setUp(self):
        self.tool = Command("tool", description="Build and test things.")
        self.tool.add_option("verbose", "-v | --verbose", help="Print every step.")
        self.build = self.tool.add_command("build", help="Compile sources.")
        self.build.add_option("jobs", "-j | --jobs", True, help="Parallel jobs.")
        self.build.add_operand("target")
        self.build.add_operand("sources", "*", help="Files to compile.")
        self.build.add_command("clean")
        self.tool.add_command("test", description="Run the test suite.\nSlowly.")
        self.tool.add_command("lint")

    def testRootHelp(self):
        buffer, console = capture()
        render_help(self.tool, console=console)
        output = buffer.getvalue()
        self.assertIn("usage: tool [-v | --verbose] <command>", output)
        self.assertIn("Build and test things.", output)
        self.assertIn("commands", output)
        self.assertIn("Compile sources.", output)
        self.assertIn("Run the test suite.", output)
        self.assertNotIn("Slowly.", output)
        self.assertIn("no description", output)
        self.assertIn("options:", output)
        self.assertIn("Print every step.", output)
        self.assertNotIn("operands:", output)

    def testSubcommandHelp(self):
        buffer, console = capture()
        render_help(self.build, console=console)
        output = buffer.getvalue()
        self.assertIn("usage: tool build [-j | --jobs <jobs>] <target> [<sources> ...] <command>", output)
        self.assertIn("subcommands", output)
        self.assertIn("clean", output)
        self.assertIn("operands:", output)
        self.assertIn("Files to compile.", output)

    def testLeafHelp(self):
        buffer, console = capture()
        render_help(self.tool.get_command("lint"), console=console)
        output = buffer.getvalue()
        self.assertIn("usage: tool lint", output)
        self.assertNotIn("commands", output)
        self.assertNotIn("options:", output)

    def testFancy(self):
        tool = Command("tool", fancy=True)
        buffer, console = capture()
        render_help(tool, console=console)
        self.assertIn("TOOL HELP", buffer.getvalue())


class TestRenderVersion(TestCase):
    """Behavioral tests for render_version()."""

    def testPlain(self):
        buffer, console = capture()
        render_version({"name": "tool", "version": "1.2.0", "version_string": "${name} ${version}"}, console=console)
        self.assertEqual(buffer.getvalue().strip(), "tool 1.2.0")

    def testFancy(self):
        buffer, console = capture()
        render_version({"name": "tool", "version": "1.2.0", "version_string": "${version}"}, fancy=True, console=console)
        output = buffer.getvalue()
        self.assertIn("TOOL VERSION", output)
        self.assertIn("1.2.0", output)


if __name__ == '__main__':
    unittest.main()

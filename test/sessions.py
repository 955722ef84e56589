"""
Session and Outcome tests.

Scope
- A Session is seeded with every declared option default.
- conclude() freezes the values into an Outcome.
"""
import unittest
from unittest import TestCase

from argtree import Command, Session, Outcome


class TestSession(TestCase):
    """Behavioral tests for per-level parse state."""

    def setUp(self):
        self.tool = Command("tool")
        self.tool.add_option("verbose", "-v")
        self.tool.add_option("jobs", "-j", True, type=int, default=2)

    def testSeededWithDefaults(self):
        session = Session(self.tool)
        self.assertEqual(session.options, {"verbose": False, "jobs": 2})
        self.assertEqual(session.buffer, [])
        self.assertFalse(session.literal)

    def testConclude(self):
        session = Session(self.tool)
        session.options["verbose"] = True
        outcome = session.conclude({"files": ["a"]})
        self.assertIsInstance(outcome, Outcome)
        self.assertIs(outcome.command, self.tool)
        self.assertEqual(dict(outcome.options), {"verbose": True, "jobs": 2})
        self.assertEqual(dict(outcome.operands), {"files": ["a"]})

    def testOutcomeIsDetached(self):
        session = Session(self.tool)
        outcome = session.conclude({})
        session.options["jobs"] = 8
        self.assertEqual(outcome.options["jobs"], 2)
        with self.assertRaises(TypeError):
            outcome.options["jobs"] = 8

    def testSlots(self):
        with self.assertRaises(AttributeError):
            Session(self.tool).extra = True

    def testRepr(self):
        self.assertTrue(repr(Session(self.tool)).startswith("session(command='tool'"))


if __name__ == '__main__':
    unittest.main()

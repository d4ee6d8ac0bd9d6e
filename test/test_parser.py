"""
Parser behavioral tests (pairwise walk, last-write-wins, faults).

Scope
- Successful parses populate every mentioned field with the coerced value.
- Unknown flags, missing values and bad values each raise their own fault,
  carrying flag/position/field/value context.
- Shell mode renders the fault and exits with status 1.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (options, Option, parse, Parser).
"""
import io
import sys
import unittest
from enum import Enum
from unittest import TestCase, mock

from rich.console import Console

from declopt import (
    Option,
    options,
    parse,
    schema,
    Parser,
    ParseError,
    UnknownFlagError,
    MissingValueError,
    CoercionError,
    OversizedValueError,
    MAX_VALUE_LENGTH,
)
from declopt import faults


@options
class Settings:
    filename: str = Option("--filename")
    iterations: int = Option("--iterations", "-i")
    help: bool = Option("--help", "-h")


class Level(Enum):
    LOW = "low"
    HIGH = "high"


@options
class Tuning:
    ratio: float = Option("--ratio", "-r")
    level: Level = Option("--level")


class TestScenarios(TestCase):
    """The reference scenarios for the filename/iterations/help schema."""

    def testFilenameAndShortIterations(self):
        settings = parse(Settings, ["--filename", "out.txt", "-i", "5"])
        self.assertEqual(settings.filename, "out.txt")
        self.assertEqual(settings.iterations, 5)
        self.assertIsNone(settings.help)

    def testBadFlag(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(Settings, ["--badflag", "x"])
        self.assertEqual(context.exception.flag, "--badflag")
        self.assertEqual(context.exception.index, 1)

    def testNotANumber(self):
        with self.assertRaises(CoercionError) as context:
            parse(Settings, ["-i", "notanumber"])
        self.assertEqual(context.exception.field, "iterations")
        self.assertEqual(context.exception.value, "notanumber")
        self.assertEqual(context.exception.flag, "-i")

    def testMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(Settings, ["--filename"])
        self.assertEqual(context.exception.flag, "--filename")
        self.assertEqual(context.exception.field, "filename")


class TestPairwiseWalk(TestCase):
    """Behavioral tests for the flag/value pairing rules."""

    def testEmptyArgumentsYieldDefaults(self):
        settings = parse(Settings, [])
        self.assertIsNone(settings.filename)
        self.assertIsNone(settings.iterations)
        self.assertIsNone(settings.help)

    def testBooleanValueIsRequired(self):
        settings = parse(Settings, ["--help", "true"])
        self.assertIs(settings.help, True)

    def testLastWriteWins(self):
        settings = parse(Settings, ["-i", "1", "--iterations", "7", "--filename", "a", "--filename", "b"])
        self.assertEqual(settings.iterations, 7)
        self.assertEqual(settings.filename, "b")

    def testOddLengthIsMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            parse(Settings, ["--filename", "a.txt", "-i"])
        self.assertEqual(context.exception.flag, "-i")
        self.assertEqual(context.exception.index, 3)

    def testFloatValue(self):
        self.assertEqual(parse(Tuning, ["--ratio", "2.5"]).ratio, 2.5)
        self.assertEqual(parse(Tuning, ["-r", "1e-3"]).ratio, 0.001)

    def testFloatCoercionError(self):
        with self.assertRaises(CoercionError) as context:
            parse(Tuning, ["--ratio", "abc"])
        self.assertEqual(context.exception.field, "ratio")
        self.assertEqual(context.exception.value, "abc")
        self.assertIn("not a valid float", str(context.exception))

    def testBooleanCoercionError(self):
        with self.assertRaises(CoercionError) as context:
            parse(Settings, ["--help", "maybe"])
        self.assertEqual(context.exception.field, "help")
        self.assertEqual(context.exception.value, "maybe")

    def testEnumValue(self):
        self.assertIs(parse(Tuning, ["--level", "HIGH"]).level, Level.HIGH)
        with self.assertRaises(CoercionError) as context:
            parse(Tuning, ["--level", "medium"])
        self.assertEqual(context.exception.field, "level")

    def testEarlierBadValueWinsOverTrailingFlag(self):
        # pairs are checked in order, so the bad value is reported first
        with self.assertRaises(CoercionError) as context:
            parse(Settings, ["-i", "x", "--filename"])
        self.assertEqual(context.exception.field, "iterations")

    def testValuesLookingLikeFlagsAreValues(self):
        settings = parse(Settings, ["--filename", "-i"])
        self.assertEqual(settings.filename, "-i")

    def testEmptyStringIsAValue(self):
        settings = parse(Settings, ["--filename", ""])
        self.assertEqual(settings.filename, "")

    def testUnknownFlagStopsProcessing(self):
        # the bad value after the unknown flag is never looked at
        with self.assertRaises(UnknownFlagError):
            parse(Settings, ["--badflag", "x", "-i", "zz"])

    def testUnknownFlagInTrailingPosition(self):
        with self.assertRaises(UnknownFlagError):
            parse(Settings, ["--filename", "a", "--nope"])

    def testFaultPositionIsReported(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(Settings, ["--filename", "a", "--bad", "x"])
        self.assertEqual(context.exception.index, 3)
        self.assertIn("third position", str(context.exception))

    def testLatePositionsUseNumericOrdinals(self):
        arguments = ["-i", "1"] * 5 + ["--bad", "x"]
        with self.assertRaises(UnknownFlagError) as context:
            parse(Settings, arguments)
        self.assertEqual(context.exception.index, 11)
        self.assertIn("11th position", str(context.exception))

    def testCoercionPositionPointsAtValue(self):
        with self.assertRaises(CoercionError) as context:
            parse(Settings, ["--filename", "a", "-i", "x"])
        self.assertEqual(context.exception.index, 4)

    def testUnknownFlagSuggestsNearMatch(self):
        with self.assertRaises(UnknownFlagError) as context:
            parse(Settings, ["--filenam", "a"])
        self.assertIn("--filename", context.exception.options["suggestions"])
        self.assertIn("--filename", context.exception.options["hint"])

    def testFaultsAreParseErrors(self):
        for arguments in (["--x", "1"], ["-i"], ["-i", "x"]):
            with self.assertRaises(ParseError):
                parse(Settings, arguments)


class TestValueLimit(TestCase):
    """Behavioral tests for the bounded value length."""

    def testValueAtLimitIsAccepted(self):
        settings = parse(Settings, ["--filename", "x" * MAX_VALUE_LENGTH])
        self.assertEqual(len(settings.filename), MAX_VALUE_LENGTH)

    def testOversizedValueRejected(self):
        with self.assertRaises(OversizedValueError) as context:
            parse(Settings, ["--filename", "x" * (MAX_VALUE_LENGTH + 1)])
        self.assertIsInstance(context.exception, CoercionError)
        self.assertEqual(context.exception.field, "filename")
        self.assertEqual(len(context.exception.value), MAX_VALUE_LENGTH)

    def testCustomLimit(self):
        with self.assertRaises(OversizedValueError):
            parse(Settings, ["--filename", "abcdef"], limit=5)
        self.assertEqual(parse(Settings, ["--filename", "abcde"], limit=5).filename, "abcde")

    def testLimitMustBePositiveInteger(self):
        with self.assertRaises(ValueError):
            Parser(Settings, limit=0)
        with self.assertRaises(TypeError):
            Parser(Settings, limit="10")
        with self.assertRaises(TypeError):
            Parser(Settings, limit=True)


class TestArgumentForms(TestCase):
    """Behavioral tests for the accepted argument containers."""

    def testStringIsShellSplit(self):
        settings = parse(Settings, "--filename 'my file.txt' -i 3")
        self.assertEqual(settings.filename, "my file.txt")
        self.assertEqual(settings.iterations, 3)

    def testTupleAndGenerator(self):
        self.assertEqual(parse(Settings, ("-i", "2")).iterations, 2)
        self.assertEqual(parse(Settings, (token for token in ["-i", "3"])).iterations, 3)

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            parse(Settings, ["-i", 3])

    def testNonIterableRejected(self):
        with self.assertRaises(TypeError):
            parse(Settings, 42)

    def testDefaultsToSysArgv(self):
        with mock.patch.object(sys, "argv", ["prog", "--filename", "argv.txt"]):
            settings = parse(Settings)
        self.assertEqual(settings.filename, "argv.txt")

    def testTargetMustBeClassOrSchema(self):
        with self.assertRaises(TypeError):
            parse(Settings(), ["-i", "1"])

    def testSchemaTarget(self):
        settings = parse(schema(Settings), ["-i", "9"])
        self.assertIsInstance(settings, Settings)
        self.assertEqual(settings.iterations, 9)


class TestParserObject(TestCase):
    """Behavioral tests for the reusable Parser."""

    def testEachParseBuildsAFreshInstance(self):
        parser = Parser(Settings)
        first = parser(["-i", "1"])
        second = parser(["-i", "2"])
        self.assertIsNot(first, second)
        self.assertEqual((first.iterations, second.iterations), (1, 2))

    def testParseDoesNotTouchSchema(self):
        registry = schema(Settings)
        before = dict(registry)
        with self.assertRaises(UnknownFlagError):
            parse(Settings, ["--extra", "1"])
        parse(Settings, ["-i", "4"])
        self.assertEqual(dict(registry), before)

    def testFailedParseLeavesNoInstance(self):
        created = []

        @options
        class Tracked:
            count: int = Option("--count")

            def __init__(self):
                created.append(self)

        with self.assertRaises(CoercionError):
            parse(Tracked, ["--count", "1", "--count", "x"])
        # the only instance ever built stayed inside the parser
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].count, 1)


class TestShellMode(TestCase):
    """Shell mode prints the fault with rich and exits with status 1."""

    def setUp(self):
        self.buffer = io.StringIO()
        patcher = mock.patch.object(faults, "console", Console(file=self.buffer, width=200, color_system=None))
        patcher.start()
        self.addCleanup(patcher.stop)

    def testUnknownFlagExits(self):
        with self.assertRaises(SystemExit) as context:
            parse(Settings, ["--badflag", "x"], shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown flag '--badflag' at first position", self.buffer.getvalue())

    def testFancyPanel(self):
        with self.assertRaises(SystemExit):
            parse(Settings, ["-i", "x"], shell=True, fancy=True, colorful=False)
        output = self.buffer.getvalue()
        self.assertIn("Invalid Value", output)
        self.assertIn("expects a int value", output)

    def testSuccessPrintsNothing(self):
        parse(Settings, ["-i", "1"], shell=True)
        self.assertEqual(self.buffer.getvalue(), "")


if __name__ == "__main__":
    unittest.main()

import io
import unittest

from lox.lang.error import ErrorHandler, EvalError, LoxError, ParseError, ResolveError, ScanError


class LoxErrorTestCase(unittest.TestCase):

    def test_messages(self):
        error = ParseError(["Line 1 at 'a': first", "Line 2 at end: second"], line=1)
        self.assertEqual("Line 1 at 'a': first", error.msg)
        self.assertEqual(2, len(error.messages))
        self.assertEqual(1, error.line)

        error = EvalError("Undefined variable a at line 3", line=3)
        self.assertEqual(["Undefined variable a at line 3"], error.messages)
        self.assertFalse(error.internal)

    def test_stages(self):
        cases = {
            ScanError: "scan error",
            ParseError: "syntax error",
            ResolveError: "resolve error",
            EvalError: "runtime error",
        }
        for error_type, stage in cases.items():
            self.assertTrue(issubclass(error_type, LoxError))
            self.assertEqual(stage, error_type.stage)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()

    def test_non_fatal(self):
        handler = ErrorHandler(fatal=False, stream=self.stream)
        handler.register_line("<in>", "print a;", 4)

        with handler:
            raise EvalError("Undefined variable a at line 4", line=4)

        report = self.stream.getvalue()
        self.assertIn("File '<in>', line 4:", report)
        self.assertIn("runtime error", report)
        self.assertIn("Undefined variable a at line 4", report)
        self.assertEqual({"<in>": (None, None)}, handler.traceback)

    def test_fatal(self):
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=self.stream):
                raise ScanError("Line 1: Unexpected character '@'", line=1)

        self.assertEqual(1, context.exception.code)
        self.assertIn("Unexpected character '@'", self.stream.getvalue())

    def test_every_message_reported(self):
        with ErrorHandler(fatal=False, stream=self.stream):
            raise ParseError(["Line 1 at ';': Expected expression", "Line 3 at end: Expected ';' after expression"])

        lines = self.stream.getvalue().splitlines()
        self.assertEqual(2, len(lines))
        self.assertIn("Expected expression", lines[0])
        self.assertIn("Expected ';' after expression", lines[1])

    def test_unknown_error(self):
        with self.assertRaises(ValueError):
            with ErrorHandler(fatal=False, stream=self.stream):
                raise ValueError("bad")

        report = self.stream.getvalue()
        self.assertIn("[internal]", report)
        self.assertIn("unknown error: 'ValueError: bad'", report)

    def test_interrupts(self):
        with ErrorHandler(fatal=False, stream=self.stream):
            raise KeyboardInterrupt
        self.assertIn("keyboard interrupt", self.stream.getvalue())

        with ErrorHandler(fatal=False, stream=self.stream):
            raise RecursionError
        self.assertIn("maximum recursion depth exceeded", self.stream.getvalue())

        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False, stream=self.stream):
                raise SystemExit(0)

    def test_diagnose(self):
        handler = ErrorHandler(fatal=False, stream=self.stream)
        handler.register_file("prog.lox", "var a = 1;\n  print b;\n")

        diagnosis = handler.diagnose(EvalError("Undefined variable b at line 2", line=2))
        self.assertIn("2 | ", diagnosis)
        self.assertIn("print b;", diagnosis)

        should_fail = [
            EvalError("no line"),
            EvalError("past the end", line=10),
            LoxError("internal", line=1, internal=True),
        ]
        for case in should_fail:
            self.assertEqual("", handler.diagnose(case), case.msg)

    def test_traceback(self):
        handler = ErrorHandler(fatal=False, stream=self.stream)
        handler.register_line("main.lox", "f();", 7)
        handler.register_line("<in>", "g();", 2)

        report = handler.format(EvalError("boom"))
        self.assertTrue(report.startswith("Traceback:\n"))
        self.assertIn("File 'main.lox', line 7:\n    f();", report)
        self.assertIn("File '<in>', line 2:\n    g();", report)

        handler.remove_line("main.lox")
        self.assertFalse(handler.format(EvalError("boom")).startswith("Traceback:"))


if __name__ == '__main__':
    unittest.main()

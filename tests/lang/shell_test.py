import io
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        sess = Session(ErrorHandler(stream=self.stderr), Session.SH_FILE, cmd_line=True, out=self.stdout)
        self.shell = Shell(sess, stdout=self.stdout)

    def feed(self, *lines):
        for line in lines:
            self.assertFalse(self.shell.onecmd(line), line)
        return self.stdout.getvalue()

    def test_echo(self):
        self.assertEqual("2\n", self.feed("var a = 1;", "a + 1;"))
        self.assertEqual("2\nab\n", self.feed('"a" + "b";', "nil;"))

    def test_print(self):
        self.assertEqual("1 2 \n", self.feed("print 1, 2;"))
        self.assertEqual("1 2 \n", self.feed("var print_me = 3;"))

    def test_continuation(self):
        self.feed("fun f(x) {")
        self.assertEqual(". ", self.shell.prompt)

        self.feed("", "  return x * 2;")
        self.assertEqual(". ", self.shell.prompt)

        self.feed("}")
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("", self.stdout.getvalue())

        self.assertEqual("<fn f>\n10\n", self.feed("f;", "f(5);"))

    def test_errors_do_not_end_session(self):
        self.feed("1;", "print missing;")

        report = self.stderr.getvalue()
        self.assertIn("File '<in>', line 2:", report)
        self.assertIn("Undefined variable missing at line 2", report)

        self.feed("print ;", "fun g() {", "return nope;", "}", "g();")
        report = self.stderr.getvalue()
        self.assertIn("Line 3 at ';': Expected expression", report)
        self.assertIn("Undefined variable nope at line 5", report)

        self.assertEqual("1\n3\n", self.feed("1 + 2;"))

    def test_continuation_line_numbers(self):
        self.feed("fun h() {", "", "return oops;", "}", "h();")
        self.assertIn("Undefined variable oops at line 3", self.stderr.getvalue())

    def test_commands(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("  exit "))
        self.assertFalse(self.shell.onecmd(""))

        self.shell.onecmd("help")
        self.assertIn("Welcome to the lox interpreter!", self.stdout.getvalue())

    def test_eof(self):
        self.assertTrue(self.shell.onecmd("EOF"))
        self.assertEqual("\n", self.stdout.getvalue())

    def test_eof_during_continuation(self):
        self.feed("fun f() {", "print 1;")
        self.assertEqual(". ", self.shell.prompt)

        self.assertTrue(self.shell.onecmd("EOF"))
        self.assertEqual("> ", self.shell.prompt)
        self.assertEqual("", self.shell._tmp_line)

    def test_cmdloop_ends_on_unbalanced_input(self):
        should_pass = ["fun f() {\n", "{ {\nprint 1;\n", "print 1;\n"]
        for case in should_pass:
            stdout = io.StringIO()
            sess = Session(ErrorHandler(stream=io.StringIO()), Session.SH_FILE, cmd_line=True, out=stdout)
            shell = Shell(sess, stdin=io.StringIO(case), stdout=stdout)
            shell.use_rawinput = False
            shell.intro = ""

            shell.cmdloop()
            self.assertTrue(stdout.getvalue().endswith("\n"), case)


if __name__ == '__main__':
    unittest.main()

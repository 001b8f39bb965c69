import contextlib
import io
import os
import sys
import tempfile
import unittest

from lox.main import main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        limit = sys.getrecursionlimit()
        self.addCleanup(sys.setrecursionlimit, limit)

    def run_file(self, source, *args):
        file = tempfile.NamedTemporaryFile("w", suffix=".lox", delete=False)
        with file:
            file.write(source)
        self.addCleanup(os.remove, file.name)

        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            main([file.name, *args])
        return stdout.getvalue(), stderr.getvalue()

    def test_file(self):
        source = "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }\nprint fib(10);\n"
        self.assertEqual(("55 \n", ""), self.run_file(source))

    def test_recursion_limit(self):
        self.run_file("print 1;", "--recursion-limit", "5000")
        self.assertEqual(5000, sys.getrecursionlimit())

    def test_errors_exit(self):
        with self.assertRaises(SystemExit) as context:
            self.run_file("print 1;\nprint missing;\n")
        self.assertEqual(1, context.exception.code)

        with self.assertRaises(SystemExit):
            self.run_file("var = 1;")


if __name__ == '__main__':
    unittest.main()

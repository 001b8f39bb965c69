"""Error handling for the lox language. Only LoxErrors should be encountered while running a program: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class LoxError(Exception):
    """Base of every error the engine raises on bad user input. Carries one or more messages (scanning and parsing batch
    their errors) and, when known, the source line the first message refers to.
    """
    stage = "error"

    def __init__(self, messages, line=None, internal=False):
        if isinstance(messages, str):
            messages = [messages]

        super().__init__(messages[0] if messages else "")
        self.messages = list(messages)
        self.line = line
        self.internal = internal

    @property
    def msg(self):
        """The primary (first) message."""
        return self.messages[0]


class ScanError(LoxError):
    """Lexical errors: invalid characters, malformed numbers, unterminated strings."""
    stage = "scan error"


class ParseError(LoxError):
    """Syntax errors, batched across statements."""
    stage = "syntax error"


class ResolveError(LoxError):
    """Static errors found before execution."""
    stage = "resolve error"


class EvalError(LoxError):
    """Runtime errors: undefined variables, operand types, arity, non-callable callees."""
    stage = "runtime error"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report lox errors instead."""
    ERROR = "red"
    SOURCE = "yellow"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.traceback = {}
        self.sources = {}

    def register_file(self, path, source=None):
        """Registers path in traceback. source is the full text of path, used to show offending lines."""
        self.traceback[path] = (None, None)
        if source is not None:
            self.sources[path] = source.splitlines()

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def _source_line(self, line_num):
        """Returns the source line line_num of the first registered file that has one, or None."""
        for lines in self.sources.values():
            if 0 < line_num <= len(lines):
                return lines[line_num - 1]
        return None

    def diagnose(self, error):
        """Returns the offending source line of error, highlighted, or an empty string if it is unknown."""
        if error.internal or error.line is None:
            return ""

        source = self._source_line(error.line)
        if source is None or not source.strip():
            return ""

        return f"  {error.line} | " + colored(source.strip(), ErrorHandler.SOURCE, attrs=["bold"])

    def format(self, error):
        """Builds the full report for error using self.traceback."""
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        prefix = colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"]) if error.internal else ""
        label = colored(f"{error.stage}: ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += "\n".join(prefix + label + msg for msg in error.messages)

        diagnosis = self.diagnose(error)
        if diagnosis:
            error_msg += "\n" + diagnosis

        return error_msg

    def throw(self, error):
        """Reports error, which must be a LoxError. Exits if self.fatal, otherwise resets the traceback so the next
        input starts clean.
        """
        print(self.format(error), file=self.stream if self.stream is not None else sys.stderr)

        if self.fatal:
            sys.exit(1)
        self.traceback = {file: (None, None) for file in self.traceback}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LoxError("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(EvalError("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, LoxError):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LoxError(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit

"""Session control for the lox language. Drives the engine (scan, parse, resolve, execute) to run a lox file or the
lines typed in command-line mode, keeping globals and functions alive between inputs.
"""

from lox.core.interpreter import Interpreter
from lox.core.parser import parse
from lox.core.resolver import Resolver
from lox.core.scanner import scan
from lox.lang.error import LoxError


class Session:
    """Governs a lox session: one global environment shared by every input added to it."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, out=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode

        self.resolver = Resolver()
        self.interpreter = Interpreter(out)

        self.to_exec = []  # (statements, slots, source, line_num) resolved and waiting for run
        self.results = []  # value of the last top-level expression statement of each run input

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise LoxError(f"'{path}' could not be opened")

            self.error_handler.register_file(path, source)
            self.add(source)

        elif not cmd_line:
            raise LoxError("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line):
        """Preprocesses (possibly multi-line) input from the command-line. Returns it without trailing whitespace, and
        whether it still has unclosed braces, in which case more lines are needed before it can be added.
        """
        line = line.rstrip()
        return line, line.count("{") > line.count("}")

    def add(self, source, line_num=1):
        """Scans, parses and resolves source, which starts at line line_num, and queues it for run. Nothing is executed
        until run is called.
        """
        if self.cmd_line:
            self.error_handler.register_line(self.path, source, line_num)  # in case error is raised

        statements = parse(scan(source, line_num))
        slots = self.resolver.resolve(statements)
        self.to_exec.append((statements, slots, source, line_num))

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Executes queued inputs in order. Will raise any errors that are encountered; inputs not yet run are dropped
        in that case.
        """
        try:
            while self.to_exec:
                statements, slots, source, line_num = self.to_exec.pop(0)
                if self.cmd_line:
                    self.error_handler.register_line(self.path, source, line_num)

                self.interpreter.resolve(slots)
                self.results.append(self.interpreter.interpret(statements))
                self.error_handler.remove_line(self.path)
        finally:
            self.to_exec = []

    def pop(self):
        """Returns the most recent result."""
        return self.results.pop()

"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd

from lox.core.interpreter import stringify


class Shell(cmd.Cmd):
    """lox interpreter shell."""
    intro = "lox interpreter :: Python backend\nType 'help' for more information, 'exit' to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._tmp_line_num = 0
        self.line_num = 0

    def onecmd(self, line):
        """Everything that is not exactly a shell command is lox source, including lines cmd would treat as commands
        because of their first word (print, var, ...).
        """
        command = line.strip()
        if command == "EOF":
            # end of input drops an unfinished continuation
            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            return super().onecmd(command)
        if not self._tmp_line and command in ("help", "exit"):
            return super().onecmd(command)
        if not command and not self._tmp_line:
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Executes arbitrary lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._tmp_line_num = self.line_num

            source, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line += line + "\n"
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(source, self._tmp_line_num)
                self.sess.run()

                result = self.sess.pop()
                if result is not None:
                    print(stringify(result), file=self.stdout)

    def do_help(self, arg):
        """Prints a short introduction to the language instead of command docs."""
        print("Welcome to the lox interpreter!\n\n"
              "lox is a small dynamically-typed scripting language with C-like syntax: variables, \n"
              "if/while/for, functions and closures. Statements end with ';'. Unclosed braces \n"
              "continue on the next line.\n\n"
              "Try it out by typing 'fun add(a, b) { return a + b; }'. Next, try typing \n"
              "'print add(1, 2);'. This will print 3. Typing a bare expression such as \n"
              "'add(1, 2);' shows its value.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True

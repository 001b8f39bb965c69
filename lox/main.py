"""Uses the lox engine to interpret .lox files or run in command-line mode. Also uses error handling context manager.
Called from the lox console script.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.shell import Shell
from lox.lang.session import Session

RECURSION_LIMIT = 10000  # every lox call nests several Python frames


def main(argv=None):
    """Runs lox interpreter. Called from lox console script."""
    assert sys.version_info >= (3, 7), "lox cannot be run with python < 3.7"

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lox")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--recursion-limit", type=int, default=RECURSION_LIMIT,
                            help=f"host recursion limit, bounds lox call depth (default: {RECURSION_LIMIT})")
        args = parser.parse_args(argv)

        sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()

"""Lexical analysis for lox. The scanner makes a single forward pass over the source with one character of lookahead
beyond the current position, producing tokens that end with a single EOF token.

Bad characters do not stop the scan: every lexical error is collected and raised together once the end of the source is
reached, so the caller sees all of them at once.
"""

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import ScanError


SINGLE_CHARS = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

# operator: (type if followed by "=", type otherwise)
EQUAL_PAIRS = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
}


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Scanner:
    """Converts source text into a list of Tokens."""
    EOF = "\0"

    def __init__(self, source, line=1):
        self.source = source
        self.tokens = []
        self.errors = []
        self._first_error_line = None

        self.start = 0    # first character of the lexeme being scanned
        self.current = 0  # character about to be consumed
        self.line = line

    def scan_tokens(self):
        """Scans the whole source. Raises a ScanError holding every error found, if there were any."""
        while not self.at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))

        if self.errors:
            raise ScanError(self.errors, line=self._first_error_line)
        return self.tokens

    def at_end(self):
        return self.current >= len(self.source)

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def peek(self):
        if self.at_end():
            return Scanner.EOF
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return Scanner.EOF
        return self.source[self.current + 1]

    def match(self, expected):
        """Consumes the next character only if it is expected."""
        if self.peek() != expected:
            return False
        self.current += 1
        return True

    def eat_while(self, predicate):
        while not self.at_end() and predicate(self.peek()):
            if self.advance() == "\n":
                self.line += 1

    def scan_token(self):
        char = self.advance()

        if char == "\n":
            self.line += 1
        elif char.isspace():
            return
        elif char in SINGLE_CHARS:
            self.add_token(SINGLE_CHARS[char])
        elif char in EQUAL_PAIRS:
            matched, unmatched = EQUAL_PAIRS[char]
            self.add_token(matched if self.match("=") else unmatched)
        elif char == "/":
            if self.match("/"):
                self.eat_while(lambda c: c != "\n")
            else:
                self.add_token(TokenType.SLASH)
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error(f"Unexpected character '{char}'")

    def add_token(self, token_type, literal=None):
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, lexeme, literal, self.line))

    def error(self, message, line=None):
        if self._first_error_line is None:
            self._first_error_line = line if line is not None else self.line
        self.errors.append(f"Line {line if line is not None else self.line}: {message}")

    def string(self):
        start_line = self.line
        self.eat_while(lambda c: c != '"')

        if self.at_end():
            self.error("Unterminated string", line=start_line)
            return

        self.advance()  # closing "
        value = self.source[self.start + 1:self.current - 1]
        self.tokens.append(Token(TokenType.STRING, self.source[self.start:self.current], value, start_line))

    def number(self):
        self.eat_while(is_digit)

        # a "." only belongs to the number if a digit follows it: 1234.call is a number, a dot and an identifier
        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            self.eat_while(is_digit)

        if is_alpha(self.peek()):
            self.eat_while(is_alphanumeric)
            self.error(f"Invalid number '{self.source[self.start:self.current]}'")
            return

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        self.eat_while(is_alphanumeric)

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))


def scan(source, line=1):
    """Returns the tokens of source, ending with an EOF token. line is the line number source starts at. Raises
    ScanError listing every lexical error.
    """
    return Scanner(source, line).scan_tokens()

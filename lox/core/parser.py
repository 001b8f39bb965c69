"""Recursive-descent parser for lox. Grammar, from statements down to the tightest-binding expressions:

```
<program>     ::= <declaration>* EOF
<declaration> ::= "fun" IDENTIFIER "(" <parameters>? ")" <block>
                | "var" IDENTIFIER ( "=" <expression> )? ";"
                | <statement>
<statement>   ::= <expression> ";"
                | "print" <expression> ( "," <expression> )* ";"
                | "if" "(" <expression> ")" <statement> ( "else" <statement> )?
                | "while" "(" <expression> ")" <statement>
                | "for" "(" ( <var decl> | <expression> ";" | ";" ) <expression>? ";" <expression>? ")" <statement>
                | "return" <expression>? ";"
                | <block>
<block>       ::= "{" <declaration>* "}"

<expression>  ::= <assignment>
<assignment>  ::= IDENTIFIER "=" <assignment> | <logic or>     ; right-associative
<logic or>    ::= <logic and> ( "or" <logic and> )*
<logic and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" )*
<primary>     ::= NUMBER | STRING | "true" | "false" | "nil" | IDENTIFIER | "(" <expression> ")"
```

Declarations are only accepted where a list of statements is expected, never as the lone body of if/else/while/for.
for loops are desugared into blocks and while loops, so later passes never see them.

On a syntax error the parser skips ahead to the next statement boundary and keeps going; every error found is raised
together in a single ParseError.
"""

from lox.core import syntax
from lox.core.tokens import TokenType
from lox.lang.error import ParseError


class _SyntaxError(Exception):
    """Unwinds the parser back to the enclosing declaration after a syntax error."""


# tokens that start a statement, where parsing can safely resume after an error
SYNC_TOKENS = {
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
}


class Parser:
    """Builds statement nodes from a token list ending in EOF."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.current = 0
        self.errors = []
        self._first_error_line = None

    def parse(self):
        """Parses every declaration. Raises ParseError listing all syntax errors, if there were any."""
        statements = []
        while not self.at_end():
            statements.append(self.declaration())

        if self.errors:
            raise ParseError(self.errors, line=self._first_error_line)
        return statements

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def at_end(self):
        return self.peek().type is TokenType.EOF

    def advance(self):
        if not self.at_end():
            self.current += 1
        return self.previous()

    def check(self, token_type):
        return self.peek().type is token_type

    def match(self, *token_types):
        """Consumes and returns the next token if it is one of token_types, else returns None."""
        for token_type in token_types:
            if self.check(token_type):
                return self.advance()
        return None

    def consume(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token, message):
        """Records a syntax error at token and returns the exception that unwinds to the enclosing declaration."""
        if token.type is TokenType.EOF:
            self.errors.append(f"Line {token.line} at end: {message}")
        else:
            self.errors.append(f"Line {token.line} at '{token}': {message}")

        if self._first_error_line is None:
            self._first_error_line = token.line
        return _SyntaxError(message)

    def synchronize(self):
        """Discards tokens until the start of the next statement."""
        self.advance()
        while not self.at_end():
            if self.previous().type is TokenType.SEMICOLON or self.peek().type in SYNC_TOKENS:
                return
            self.advance()

    def declaration(self):
        try:
            if self.match(TokenType.FUN):
                return self.function()
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except _SyntaxError:
            self.synchronize()
            return None

    def statement(self):
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.LEFT_BRACE):
            return syntax.Block(self.block())
        if self.check(TokenType.VAR) or self.check(TokenType.FUN):
            raise self.error(self.peek(), "Declaration is not allowed here, wrap it in a block")
        return self.expression_statement()

    def block(self):
        """Parses declarations up to and including the closing brace. The opening brace is already consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end():
            statements.append(self.declaration())

        self.consume(TokenType.RIGHT_BRACE, "Expected '}' after block")
        return tuple(statements)

    def function(self):
        name = self.consume(TokenType.IDENTIFIER, "Expected function name after 'fun'")
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after function name")

        parameters = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                parameters.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name").lexeme)
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after function parameters")

        self.consume(TokenType.LEFT_BRACE, "Expected '{' before function body")
        body = self.block()

        return syntax.Function(name.lexeme, tuple(parameters), body, name.line)

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expected variable name after 'var'")

        initializer = syntax.Literal(None)
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after variable declaration")
        return syntax.Var(name.lexeme, name.line, initializer)

    def print_statement(self):
        expressions = [self.expression()]
        while self.match(TokenType.COMMA):
            expressions.append(self.expression())

        self.consume(TokenType.SEMICOLON, "Expected ';' after print statement")
        return syntax.Print(tuple(expressions))

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'if'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after if condition")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenType.ELSE) else None

        return syntax.If(condition, then_branch, else_branch)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'while'")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after while condition")

        return syntax.While(condition, self.statement())

    def for_statement(self):
        """Desugars `for (init; cond; incr) body` into `{ init; while (cond) { body; incr; } }`."""
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'for'")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = syntax.Literal(True)
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after for condition")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after for clauses")

        body = [self.statement()]
        if increment is not None:
            body.append(syntax.Expression(increment))

        loop = syntax.While(condition, syntax.Block(tuple(body)))
        if initializer is None:
            return syntax.Block((loop,))
        return syntax.Block((initializer, loop))

    def return_statement(self):
        keyword = self.previous()

        value = syntax.Literal(None)
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after return value")
        return syntax.Return(value, keyword.line)

    def expression_statement(self):
        expression = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after expression")
        return syntax.Expression(expression)

    def expression(self):
        return self.assignment()

    def assignment(self):
        expression = self.logical_or()

        equals = self.match(TokenType.EQUAL)
        if equals:
            value = self.assignment()
            if isinstance(expression, syntax.Variable):
                return syntax.Assignment(expression.name, expression.line, value)
            raise self.error(equals, "Invalid assignment target")

        return expression

    def _left_associative(self, operand, *operators):
        """Parses `operand (operator operand)*` into left-nested Binary nodes."""
        expression = operand()
        operator = self.match(*operators)
        while operator:
            expression = syntax.Binary(expression, operator, operand())
            operator = self.match(*operators)
        return expression

    def logical_or(self):
        return self._left_associative(self.logical_and, TokenType.OR)

    def logical_and(self):
        return self._left_associative(self.equality, TokenType.AND)

    def equality(self):
        return self._left_associative(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self._left_associative(
            self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL
        )

    def term(self):
        return self._left_associative(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self._left_associative(self.unary, TokenType.SLASH, TokenType.STAR)

    def unary(self):
        operator = self.match(TokenType.BANG, TokenType.MINUS)
        if operator is None:
            return self.call()

        operand = self.unary()
        if operator.type is TokenType.BANG:
            return syntax.LogicalNot(operand, operator.line)
        return syntax.UnaryNegate(operand, operator.line)

    def call(self):
        expression = self.primary()

        paren = self.match(TokenType.LEFT_PAREN)
        while paren:
            arguments = []
            if not self.check(TokenType.RIGHT_PAREN):
                while True:
                    arguments.append(self.expression())
                    if not self.match(TokenType.COMMA):
                        break
            self.consume(TokenType.RIGHT_PAREN, "Expected ')' after call arguments")

            expression = syntax.Call(expression, paren.line, tuple(arguments))
            paren = self.match(TokenType.LEFT_PAREN)

        return expression

    def primary(self):
        token = self.peek()

        if self.match(TokenType.FALSE):
            return syntax.Literal(False)
        if self.match(TokenType.TRUE):
            return syntax.Literal(True)
        if self.match(TokenType.NIL):
            return syntax.Literal(None)
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return syntax.Literal(token.literal)
        if self.match(TokenType.IDENTIFIER):
            return syntax.Variable(token.lexeme, token.line)
        if self.match(TokenType.LEFT_PAREN):
            expression = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expected ')' after expression")
            return syntax.Grouping(expression)

        raise self.error(token, "Expected expression")


def parse(tokens):
    """Returns the statements of tokens. Raises ParseError listing every syntax error."""
    return Parser(tokens).parse()

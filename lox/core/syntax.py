"""Expression and statement nodes built by the parser.

Nodes are immutable and compared by identity, which lets later passes key side tables (such as the resolver's slot
annotations) on the nodes themselves. str() of a node gives a parenthesized, Lisp-like rendering that is handy for
tests and debugging:

```
var a = 1 + 2 * 3;   ->  (var a (+ 1 (* 2 3)))
f(a)(b);             ->  (; (call (call f a) b))
```
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from lox.core.tokens import Token


def _literal_str(value):
    if value is None:
        return "nil"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return f'"{value}"'


def _parenthesize(name, *parts):
    return "(" + " ".join([name] + [str(part) for part in parts]) + ")"


class Expr:
    """Base for expression nodes."""


class Stmt:
    """Base for statement nodes."""


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: object  # float, str, bool or None (nil)

    def __str__(self):
        return _literal_str(self.value)


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

    def __str__(self):
        return _parenthesize(self.operator.lexeme, self.left, self.right)


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr

    def __str__(self):
        return _parenthesize("group", self.expression)


@dataclass(frozen=True, eq=False)
class LogicalNot(Expr):
    operand: Expr
    line: int

    def __str__(self):
        return _parenthesize("!", self.operand)


@dataclass(frozen=True, eq=False)
class UnaryNegate(Expr):
    operand: Expr
    line: int

    def __str__(self):
        return _parenthesize("-", self.operand)


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: str
    line: int

    def __str__(self):
        return self.name


@dataclass(frozen=True, eq=False)
class Assignment(Expr):
    target: str
    line: int
    value: Expr

    def __str__(self):
        return _parenthesize("=", self.target, self.value)


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    line: int
    arguments: Tuple[Expr, ...]

    def __str__(self):
        return _parenthesize("call", self.callee, *self.arguments)


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr

    def __str__(self):
        return _parenthesize(";", self.expression)


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expressions: Tuple[Expr, ...]

    def __str__(self):
        return _parenthesize("print", *self.expressions)


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]

    def __str__(self):
        if self.else_branch is None:
            return _parenthesize("if", self.condition, self.then_branch)
        return _parenthesize("if-else", self.condition, self.then_branch, self.else_branch)


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: Tuple[Stmt, ...]

    def __str__(self):
        return _parenthesize("block", *self.statements)


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: str
    line: int
    initializer: Expr

    def __str__(self):
        return _parenthesize("var", self.name, self.initializer)


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt

    def __str__(self):
        return _parenthesize("while", self.condition, self.body)


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    """A function declaration. The same node is shared by every closure created from it."""
    name: str
    parameters: Tuple[str, ...]
    body: Tuple[Stmt, ...]
    line: int

    @property
    def arity(self):
        return len(self.parameters)

    def __str__(self):
        return _parenthesize("fun", self.name, "(" + " ".join(self.parameters) + ")", *self.body)


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    value: Expr
    line: int

    def __str__(self):
        return _parenthesize("return", self.value)

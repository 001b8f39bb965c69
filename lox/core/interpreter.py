"""Tree-walking evaluator for lox.

Runtime values map onto Python values: numbers are floats, strings are strs, booleans are bools, nil is None and
functions are LoxFunctions.

Top-level declarations live in the interpreter's global Environment and are always looked up by name. Everything else
runs inside a local Environment: a top-level block gets a fresh one, a function call gets an activation environment
built from the function's captured environment. Variable reads and assignments that the resolver annotated with a
slot go straight to that slot of the current local environment.

Statement execution returns None to continue, or a Returned holding the value of a `return` statement, which every
enclosing block, if and while hands straight back up until the call that is returning is reached.
"""

import math
import sys
from dataclasses import dataclass

from lox.core import syntax
from lox.core.environment import Environment
from lox.core.tokens import TokenType
from lox.lang.error import EvalError


@dataclass(frozen=True)
class Returned:
    """Completion of a statement that hit `return`."""
    value: object


class LoxFunction:
    """A closure: a function declaration plus the environment captured where it was declared (None for functions
    declared at top level, which only see globals).

    A function never holds a reference to itself. Recursion works because every call binds the function's own name in
    the call's activation environment, which is thrown away when the call returns.
    """

    def __init__(self, declaration, closure=None, slots=None):
        self.declaration = declaration
        self.closure = closure
        self.slots = slots if slots is not None else {}  # slot table of the input that declared it

    @property
    def name(self):
        return self.declaration.name

    @property
    def arity(self):
        return self.declaration.arity

    def call(self, interpreter, arguments):
        if self.closure is not None:
            activation = Environment.new_capture_env(self.closure)
        else:
            activation = Environment()

        activation.define_var(self.name, self)
        for parameter, argument in zip(self.declaration.parameters, arguments):
            activation.define_var(parameter, argument)

        outer_slots, interpreter.slots = interpreter.slots, self.slots
        try:
            result = interpreter.execute_many(self.declaration.body, activation)
        finally:
            interpreter.slots = outer_slots
        return result.value if result is not None else None

    def __str__(self):
        return f"<fn {self.name}>"

    def __repr__(self):
        return f"LoxFunction({self.name!r}, arity={self.arity})"


def is_truthy(value):
    """nil, false, 0 and "" are false; everything else is true."""
    if value is None:
        return False
    elif isinstance(value, bool):
        return value
    elif isinstance(value, float):
        return value != 0
    elif isinstance(value, str):
        return value != ""
    return True


def stringify(value):
    """Renders value the way print shows it."""
    if value is None:
        return "nil"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, float):
        if value == 0 and math.copysign(1, value) < 0:
            return "-0"
        elif value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def _divide(left, right):
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1, right)
    return left / right


ARITHMETIC = {
    TokenType.MINUS: lambda l, r: l - r,
    TokenType.STAR: lambda l, r: l * r,
    TokenType.SLASH: _divide,
}

COMPARISON = {
    TokenType.LESS: lambda l, r: l < r,
    TokenType.LESS_EQUAL: lambda l, r: l <= r,
    TokenType.GREATER: lambda l, r: l > r,
    TokenType.GREATER_EQUAL: lambda l, r: l >= r,
    TokenType.EQUAL_EQUAL: lambda l, r: l == r,
    TokenType.BANG_EQUAL: lambda l, r: l != r,
}


class Interpreter:
    """Executes resolved statements. Keeps its globals across calls to interpret, so a session can feed it one input
    at a time. Only the slot table of the input being run is held; functions keep the table of the input that
    declared them.
    """

    def __init__(self, out=None):
        self.globals = Environment()
        self.slots = {}
        self.out = out

    def resolve(self, slots):
        """Sets the resolver slot table of the statements about to be interpreted."""
        self.slots = slots

    def interpret(self, statements):
        """Runs top-level statements. Returns the value of the last top-level expression statement, or None."""
        last_value = None
        for stmt in statements:
            if isinstance(stmt, syntax.Expression):
                last_value = self.evaluate(stmt.expression, None)
            elif self.execute(stmt, None) is not None:
                break
        return last_value

    def _write(self, text):
        print(text, end="", file=self.out if self.out is not None else sys.stdout)

    def execute_many(self, statements, env):
        for stmt in statements:
            result = self.execute(stmt, env)
            if result is not None:
                return result
        return None

    def execute(self, stmt, env):
        """Executes stmt in env (None at top level). Returns a Returned if a return statement was hit."""
        if isinstance(stmt, syntax.Expression):
            self.evaluate(stmt.expression, env)

        elif isinstance(stmt, syntax.Print):
            for expression in stmt.expressions:
                self._write(stringify(self.evaluate(expression, env)) + " ")
            self._write("\n")

        elif isinstance(stmt, syntax.If):
            if is_truthy(self.evaluate(stmt.condition, env)):
                return self.execute(stmt.then_branch, env)
            elif stmt.else_branch is not None:
                return self.execute(stmt.else_branch, env)

        elif isinstance(stmt, syntax.Block):
            return self.execute_block(stmt, env)

        elif isinstance(stmt, syntax.Var):
            value = self.evaluate(stmt.initializer, env)
            (env if env is not None else self.globals).define_var(stmt.name, value)

        elif isinstance(stmt, syntax.While):
            while is_truthy(self.evaluate(stmt.condition, env)):
                result = self.execute(stmt.body, env)
                if result is not None:
                    return result

        elif isinstance(stmt, syntax.Function):
            closure = Environment.new_capture_env(env) if env is not None else None
            function = LoxFunction(stmt, closure, self.slots)
            (env if env is not None else self.globals).define_var(stmt.name, function)

        elif isinstance(stmt, syntax.Return):
            return Returned(self.evaluate(stmt.value, env))

        else:
            raise TypeError(f"unknown statement node {stmt!r}")

        return None

    def execute_block(self, block, env):
        if env is None:
            return self.execute_many(block.statements, Environment())

        env.push_scope()
        try:
            return self.execute_many(block.statements, env)
        finally:
            env.pop_scope()

    def evaluate(self, expr, env):
        """Returns the value of expr in env (None at top level)."""
        if isinstance(expr, syntax.Literal):
            return expr.value

        elif isinstance(expr, syntax.Grouping):
            return self.evaluate(expr.expression, env)

        elif isinstance(expr, syntax.Binary):
            return self.evaluate_binary(expr, env)

        elif isinstance(expr, syntax.LogicalNot):
            return not is_truthy(self.evaluate(expr.operand, env))

        elif isinstance(expr, syntax.UnaryNegate):
            operand = self.evaluate(expr.operand, env)
            if not isinstance(operand, float):
                raise EvalError(f"Operand must be a number at line {expr.line}", line=expr.line)
            return -operand

        elif isinstance(expr, syntax.Variable):
            return self.lookup(expr, env)

        elif isinstance(expr, syntax.Assignment):
            return self.assign(expr, env)

        elif isinstance(expr, syntax.Call):
            return self.call(expr, env)

        raise TypeError(f"unknown expression node {expr!r}")

    def evaluate_binary(self, expr, env):
        operator = expr.operator.type
        line = expr.operator.line

        if operator is TokenType.AND or operator is TokenType.OR:
            left = self.evaluate(expr.left, env)
            if is_truthy(left) == (operator is TokenType.OR):
                return left
            return self.evaluate(expr.right, env)

        left = self.evaluate(expr.left, env)
        right = self.evaluate(expr.right, env)

        if operator is TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            elif isinstance(left, str) and isinstance(right, str):
                return left + right
            raise EvalError(f"Operands must be numbers or strings at line {line}", line=line)

        if not (isinstance(left, float) and isinstance(right, float)):
            raise EvalError(f"Operands must be numbers at line {line}", line=line)

        if operator in COMPARISON:
            return COMPARISON[operator](left, right)
        elif operator in ARITHMETIC:
            return ARITHMETIC[operator](left, right)

        raise TypeError(f"unsupported binary operator {expr.operator!r}")

    def lookup(self, expr, env):
        slot = self.slots.get(expr)
        if slot is not None:
            return env.get_slot(slot)

        cell = self.globals.get_var(expr.name)
        if cell is None:
            raise EvalError(f"Undefined variable {expr.name} at line {expr.line}", line=expr.line)
        return cell.value

    def assign(self, expr, env):
        value = self.evaluate(expr.value, env)

        slot = self.slots.get(expr)
        if slot is not None:
            env.set_slot(slot, value)
        elif self.globals.get_var(expr.target) is not None:
            self.globals.set_var(expr.target, value)
        else:
            raise EvalError(f"Undefined variable {expr.target} at line {expr.line}", line=expr.line)

        return value

    def call(self, expr, env):
        callee = self.evaluate(expr.callee, env)
        arguments = [self.evaluate(argument, env) for argument in expr.arguments]

        if not isinstance(callee, LoxFunction):
            msg = f"Can only call functions, not {stringify(callee)} at line {expr.line}"
            raise EvalError(msg, line=expr.line)

        if len(arguments) != callee.arity:
            msg = f"Expected {callee.arity} arguments but got {len(arguments)} at line {expr.line}"
            raise EvalError(msg, line=expr.line)

        return callee.call(self, arguments)

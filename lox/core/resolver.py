"""Static scope resolution. Walks the statements before they run, mirroring exactly how the interpreter will grow and
shrink its environments, and works out for every variable read and assignment whether the name is a local (and at which
slot of the local environment it will live) or must be looked up by name among the globals at runtime.

The mirror is kept with environment templates: one Environment per enclosing function (or top-level block), holding
names only. Blocks push and pop scopes on the active template, declarations define names in it, and a function gets a
template captured from the enclosing one with its own name followed by its parameters defined first, which is the
layout of the activation environment a call builds. Slots computed here therefore match runtime positions.

Also rejects `return` outside of a function and functions that repeat a parameter name.
"""

from lox.core import syntax
from lox.core.environment import Environment
from lox.lang.error import ResolveError


class Resolver:
    """Computes local slots for a list of statements. One Resolver may resolve many inputs of a session in turn."""

    def __init__(self):
        self.templates = []      # environment templates, innermost last; empty at top level
        self.function_depth = 0
        self.slots = {}          # Variable/Assignment node: slot

    def resolve(self, statements):
        """Resolves statements and returns the slot table for their Variable and Assignment nodes. Raises ResolveError
        at the first error found.
        """
        self.slots = {}
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.slots

    def _bind(self, node, name):
        """Records the slot of name for node if name is a local of the active template."""
        if not self.templates:
            return

        slot = self.templates[-1].slot_of(name)
        if slot is not None:
            assert node not in self.slots, f"{node} resolved twice"
            self.slots[node] = slot

    def _declare(self, name):
        if self.templates:
            self.templates[-1].define_var(name, None)

    def resolve_stmt(self, stmt):
        if isinstance(stmt, syntax.Expression):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, syntax.Print):
            for expression in stmt.expressions:
                self.resolve_expr(expression)

        elif isinstance(stmt, syntax.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, syntax.Block):
            self.resolve_block(stmt)

        elif isinstance(stmt, syntax.Var):
            # the initializer is resolved before the name exists, so `var a = a;` reads the enclosing a
            self.resolve_expr(stmt.initializer)
            self._declare(stmt.name)

        elif isinstance(stmt, syntax.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)

        elif isinstance(stmt, syntax.Function):
            self.resolve_function(stmt)
            self._declare(stmt.name)

        elif isinstance(stmt, syntax.Return):
            if self.function_depth == 0:
                raise ResolveError(f"Cannot return from top-level code at line {stmt.line}", line=stmt.line)
            self.resolve_expr(stmt.value)

        else:
            raise TypeError(f"unknown statement node {stmt!r}")

    def resolve_block(self, block):
        if not self.templates:
            self.templates.append(Environment())
            try:
                for stmt in block.statements:
                    self.resolve_stmt(stmt)
            finally:
                self.templates.pop()
        else:
            self.templates[-1].push_scope()
            try:
                for stmt in block.statements:
                    self.resolve_stmt(stmt)
            finally:
                self.templates[-1].pop_scope()

    def resolve_function(self, function):
        seen = set()
        for parameter in function.parameters:
            if parameter in seen:
                msg = f"Duplicate parameter '{parameter}' in function '{function.name}' at line {function.line}"
                raise ResolveError(msg, line=function.line)
            seen.add(parameter)

        if self.templates:
            template = Environment.new_capture_env(self.templates[-1])
        else:
            template = Environment()

        # same layout as the activation environment of a call: the function itself, then its parameters
        template.define_var(function.name, None)
        for parameter in function.parameters:
            template.define_var(parameter, None)

        self.templates.append(template)
        self.function_depth += 1
        try:
            for stmt in function.body:
                self.resolve_stmt(stmt)
        finally:
            self.function_depth -= 1
            self.templates.pop()

    def resolve_expr(self, expr):
        if isinstance(expr, syntax.Literal):
            return

        elif isinstance(expr, syntax.Binary):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, syntax.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, (syntax.LogicalNot, syntax.UnaryNegate)):
            self.resolve_expr(expr.operand)

        elif isinstance(expr, syntax.Variable):
            self._bind(expr, expr.name)

        elif isinstance(expr, syntax.Assignment):
            self.resolve_expr(expr.value)
            self._bind(expr, expr.target)

        elif isinstance(expr, syntax.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        else:
            raise TypeError(f"unknown expression node {expr!r}")


def resolve(statements):
    """Returns the slot table of statements. Raises ResolveError at the first error."""
    return Resolver().resolve(statements)

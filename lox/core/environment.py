"""Runtime variable bindings.

An Environment is a flat, ordered list of (name, Cell) bindings plus a stack of scope boundaries (offsets into that
list). Lookups walk the list from the end, so the most recently defined name wins; popping a scope truncates the list
back to where the scope started. Because the layout is deterministic, the resolver can compute, ahead of time, the
position ("slot") a local variable will occupy at runtime, and the interpreter can then read it without searching.

Cells are shared, never copied: a closure captures an environment by copying the binding list (not the cells), so a
variable mutated after capture is seen by the closure and by its defining scope alike.
"""


class Cell:
    """Mutable box holding one variable's value."""
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"Cell({self.value!r})"


class Environment:
    """Scoped variable bindings. See module docstring."""

    def __init__(self, bindings=None, scopes=None):
        self.bindings = bindings if bindings is not None else []  # list of [name, Cell]
        self.scopes = scopes if scopes is not None else []         # start offset of each open scope

    @classmethod
    def new_capture_env(cls, enclosing):
        """Returns an environment that sees every binding currently in enclosing (sharing their cells) and opens its
        own scope at the end of them, so declarations made in it never reach enclosing.
        """
        bindings = list(enclosing.bindings)
        return cls(bindings, [len(bindings)])

    @property
    def bottom(self):
        """Offset where the active scope starts."""
        return self.scopes[-1] if self.scopes else 0

    def __len__(self):
        return len(self.bindings)

    def _find(self, name, bottom=0):
        """Returns the slot of the innermost binding of name at or above bottom, or None."""
        for slot in range(len(self.bindings) - 1, bottom - 1, -1):
            if self.bindings[slot][0] == name:
                return slot
        return None

    def define_var(self, name, value):
        """Binds name in the active scope, replacing an existing binding of name in that scope. Returns its slot."""
        slot = self._find(name, self.bottom)
        if slot is not None:
            self.bindings[slot] = [name, Cell(value)]
            return slot

        self.bindings.append([name, Cell(value)])
        return len(self.bindings) - 1

    def set_var(self, name, value):
        """Assigns to the innermost binding of name in any scope, in place. If name is not bound at all, a new binding
        is appended.
        """
        slot = self._find(name)
        if slot is None:
            self.bindings.append([name, Cell(value)])
        else:
            self.bindings[slot][1].value = value

    def get_var(self, name):
        """Returns the Cell of the innermost binding of name, or None if name is unbound. nil values are stored as
        None, hence the Cell rather than the bare value.
        """
        slot = self._find(name)
        if slot is None:
            return None
        return self.bindings[slot][1]

    def slot_of(self, name):
        """Returns the slot of the innermost binding of name, or None."""
        return self._find(name)

    def get_slot(self, slot):
        return self.bindings[slot][1].value

    def set_slot(self, slot, value):
        self.bindings[slot][1].value = value

    def push_scope(self):
        self.scopes.append(len(self.bindings))

    def pop_scope(self):
        """Drops every binding made since the matching push_scope."""
        del self.bindings[self.scopes.pop():]

    def __repr__(self):
        return f"Environment({[name for name, __ in self.bindings]}, scopes={self.scopes})"

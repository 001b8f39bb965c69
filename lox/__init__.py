"""lox: a scanner, parser, scope resolver and tree-walking interpreter for a small C-like scripting language."""

__version__ = "0.1.0"

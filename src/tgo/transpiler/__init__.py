"""Go code generation for analyzed tgo files."""

from .transpile import Transpiler as Transpiler, transpile as transpile

"""
Render reproducer ASTs as Solidity.

A FunctionDeclaration becomes a public test function; every call inside it is
one indented statement. Calls back into the test contract are followed by a
blank line so each step of the sequence (cheats, then the property call)
reads as its own paragraph.
"""

from __future__ import annotations

from forgery.nodes import SELF_TARGET, Ast, Call, FunctionDeclaration

INDENT = " " * 4


class Emitter:
    """Accumulate the Solidity source of the nodes passed to `emit()`."""

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def emit(self, node: Ast) -> None:
        if isinstance(node, FunctionDeclaration):
            self._emit_function(node)
        elif isinstance(node, Call):
            self._emit_call(node)
        else:
            raise TypeError(f"Unknown AST node: {type(node).__name__}")

    def get_emitted(self) -> str:
        return "".join(self._chunks)

    def _emit_function(self, function: FunctionDeclaration) -> None:
        self._chunks.append(f"function {function.name}() public {{\n")
        for child in function.children:
            self.emit(child)
        self._chunks.append("}\n")

    def _emit_call(self, call: Call) -> None:
        statement = INDENT
        if call.target is not None:
            statement += f"{call.target}."
        statement += call.function_name
        if call.value is not None:
            statement += f"{{ value: {call.value} }}"
        statement += f"({', '.join(call.arguments)});\n"
        self._chunks.append(statement)

        if call.target == SELF_TARGET:
            self._chunks.append("\n")


def render(node: Ast) -> str:
    """Return the Solidity source for a single AST root."""
    emitter = Emitter()
    emitter.emit(node)
    return emitter.get_emitted()

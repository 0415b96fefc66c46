"""
The reproducer AST.

Only the slice of Solidity that a reproducer needs is modeled: a root
`FunctionDeclaration` holding `Statement` children. Calls are statements, not
expressions, since their return values are never used.

`Ast` is a closed union. Consumers dispatch with isinstance() over every
variant and treat anything else as a bug; new kinds of statements are added as
new variants of `Statement` rather than subclasses of `Call`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from forgery.errors import ProtocolStateError

# Receiver of the forge-std cheatcodes.
CHEATCODE_TARGET = "vm"
# Receiver of a call back into the test contract itself.
SELF_TARGET = "this"


@dataclass(frozen=True)
class Call:
    """A call statement.

    `target` is None for an internal call, otherwise the name of the contract
    the call goes through. `arguments` are already formatted Solidity and are
    emitted verbatim.
    """

    function_name: str
    target: str | None = None
    value: int | None = None
    arguments: tuple[str, ...] = ()


Statement = Call


@dataclass
class FunctionDeclaration:
    """A public, argument-less test function; the root of a reproducer."""

    name: str
    children: list[Ast] = field(default_factory=list)
    sealed: bool = False

    def add_child(self, child: Ast) -> None:
        """Append a child node. Sealed declarations can't be changed."""
        if self.sealed:
            raise ProtocolStateError(f"Cannot add a statement to sealed function {self.name}")
        self.children.append(child)

    def seal(self) -> None:
        self.sealed = True


Ast = FunctionDeclaration | Statement


def new_roll(block_to_roll: int) -> Call:
    return Call("roll", target=CHEATCODE_TARGET, arguments=(str(block_to_roll),))


def new_warp(timestamp_to_warp_to: int) -> Call:
    return Call("warp", target=CHEATCODE_TARGET, arguments=(str(timestamp_to_warp_to),))


def new_prank(caller_to_prank: str) -> Call:
    return Call("prank", target=CHEATCODE_TARGET, arguments=(f"address({caller_to_prank})",))


def new_contract_call(
    target: str | None,
    function_name: str,
    value: int | None,
    arguments: list[str] | tuple[str, ...],
) -> Call:
    """Build a call to a property or any other contract function."""
    return Call(function_name, target=target, value=value, arguments=tuple(arguments))

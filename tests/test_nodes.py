#!/usr/bin/env python3
"""
Unit tests for forgery/nodes.py
"""

import unittest

from forgery.errors import ProtocolStateError
from forgery.nodes import (
    Call,
    FunctionDeclaration,
    new_contract_call,
    new_prank,
    new_roll,
    new_warp,
)


class TestCheatCalls(unittest.TestCase):
    """Test the constructors of the synthetic cheat calls."""

    def test_roll(self):
        self.assertEqual(new_roll(10429), Call("roll", target="vm", arguments=("10429",)))

    def test_warp(self):
        self.assertEqual(new_warp(19960), Call("warp", target="vm", arguments=("19960",)))

    def test_prank_wraps_address(self):
        call = new_prank("0x0000000000000000000000000000000000050000")
        self.assertEqual(call.target, "vm")
        self.assertEqual(
            call.arguments, ("address(0x0000000000000000000000000000000000050000)",)
        )
        self.assertIsNone(call.value)

    def test_contract_call_freezes_arguments(self):
        arguments = ["1, 2"]
        call = new_contract_call("this", "prop_x", 5, arguments)
        arguments.append("3")
        self.assertEqual(call.arguments, ("1, 2",))
        self.assertEqual(call.value, 5)

    def test_internal_call_has_no_target(self):
        self.assertIsNone(new_contract_call(None, "helper", None, []).target)


class TestFunctionDeclaration(unittest.TestCase):
    def test_children_keep_insertion_order(self):
        function = FunctionDeclaration("test_prop_x")
        function.add_child(new_roll(1))
        function.add_child(new_warp(2))
        self.assertEqual([c.function_name for c in function.children], ["roll", "warp"])

    def test_declarations_do_not_share_children(self):
        first = FunctionDeclaration("test_a")
        second = FunctionDeclaration("test_b")
        first.add_child(new_roll(1))
        self.assertEqual(second.children, [])

    def test_sealed_declaration_is_immutable(self):
        function = FunctionDeclaration("test_prop_x")
        function.seal()
        with self.assertRaises(ProtocolStateError):
            function.add_child(new_roll(1))
        self.assertEqual(function.children, [])


if __name__ == "__main__":
    unittest.main()

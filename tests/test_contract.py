#!/usr/bin/env python3
"""
Unit tests for forgery/contract.py
"""

import tempfile
import unittest
from pathlib import Path

from forgery.contract import (
    ReproducerContract,
    base_contract_for,
    find_first_unused_filename,
    write_reproducer_contract,
)

REPRODUCERS = (
    "function test_prop_X() public {\n"
    "    vm.roll(1);\n"
    "    this.prop_X(1);\n"
    "\n"
    "}\n"
    "\n"
)


class TestBaseContract(unittest.TestCase):
    def test_forge_test_entry_point(self):
        self.assertEqual(
            base_contract_for(Path("test/FuzzTest.t.sol")), ("FuzzTest", "./FuzzTest.t.sol")
        )

    def test_plain_solidity_entry_point(self):
        self.assertEqual(
            base_contract_for(Path("src/Properties.sol")), ("Properties", "./Properties.sol")
        )

    def test_no_entry_point_uses_forge_std(self):
        self.assertEqual(base_contract_for(None), ("Test", "forge-std/Test.sol"))

    def test_output_dir_next_to_entry_point(self):
        self.assertEqual(
            base_contract_for(Path("/proj/test/FuzzTest.t.sol"), Path("/proj/test")),
            ("FuzzTest", "./FuzzTest.t.sol"),
        )

    def test_output_dir_elsewhere(self):
        self.assertEqual(
            base_contract_for(Path("/proj/test/FuzzTest.t.sol"), Path("/proj/out")),
            ("FuzzTest", "../test/FuzzTest.t.sol"),
        )

    def test_output_dir_above_entry_point(self):
        self.assertEqual(
            base_contract_for(Path("/proj/test/fuzz/FuzzTest.t.sol"), Path("/proj")),
            ("FuzzTest", "./test/fuzz/FuzzTest.t.sol"),
        )


class TestReproducerContract(unittest.TestCase):
    def test_render_indents_reproducers(self):
        contract = ReproducerContract(
            REPRODUCERS, contract_name="ForgeReproducer1", base_name="FuzzTest", base_import="./FuzzTest.t.sol"
        )
        expected = (
            "// SPDX-License-Identifier: UNLICENSED\n"
            "pragma solidity ^0.8.0;\n"
            "\n"
            'import {FuzzTest} from "./FuzzTest.t.sol";\n'
            "\n"
            "/// @notice Reproducers of the properties broken during a medusa run\n"
            "contract ForgeReproducer1 is FuzzTest {\n"
            "    function test_prop_X() public {\n"
            "        vm.roll(1);\n"
            "        this.prop_X(1);\n"
            "\n"
            "    }\n"
            "}\n"
        )
        self.assertEqual(contract.render(), expected)


class TestWriteReproducerContract(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_first_unused_filename(self):
        self.assertEqual(
            find_first_unused_filename(self.temp_path), self.temp_path / "ForgeReproducer.t.sol"
        )
        (self.temp_path / "ForgeReproducer.t.sol").touch()
        (self.temp_path / "ForgeReproducer1.t.sol").touch()
        self.assertEqual(
            find_first_unused_filename(self.temp_path), self.temp_path / "ForgeReproducer2.t.sol"
        )

    def test_writes_new_files_without_overwriting(self):
        first = write_reproducer_contract(REPRODUCERS, self.temp_path)
        second = write_reproducer_contract(REPRODUCERS, self.temp_path)
        self.assertEqual(first.name, "ForgeReproducer.t.sol")
        self.assertEqual(second.name, "ForgeReproducer1.t.sol")
        self.assertIn("contract ForgeReproducer is Test {", first.read_text())
        self.assertIn("contract ForgeReproducer1 is Test {", second.read_text())

    def test_inherits_entry_point(self):
        path = write_reproducer_contract(
            REPRODUCERS, self.temp_path / "test", self.temp_path / "test" / "FuzzTest.t.sol"
        )
        content = path.read_text()
        self.assertIn('import {FuzzTest} from "./FuzzTest.t.sol";', content)
        self.assertIn("contract ForgeReproducer is FuzzTest {", content)

    def test_import_resolves_from_other_output_dir(self):
        entry_point = self.temp_path / "test" / "FuzzTest.t.sol"
        out_dir = self.temp_path / "out"
        path = write_reproducer_contract(REPRODUCERS, out_dir, entry_point)
        self.assertIn('import {FuzzTest} from "../test/FuzzTest.t.sol";', path.read_text())
        self.assertEqual((out_dir / "../test/FuzzTest.t.sol").resolve(), entry_point.resolve())


if __name__ == "__main__":
    unittest.main()

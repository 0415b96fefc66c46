"""
Wrap rendered reproducers into a Foundry test contract and save it.

The generated contract inherits the fuzzing entry point so that `this.<prop>`
reaches the properties medusa was fuzzing, and `vm` the forge-std cheatcodes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent, indent

logger = logging.getLogger(__name__)

DEFAULT_CONTRACT_NAME = "ForgeReproducer"
TEST_FILE_SUFFIX = ".t.sol"
SOLIDITY_PRAGMA = "^0.8.0"

# Used when no fuzzing entry point is known.
FORGE_STD_TEST = ("Test", "forge-std/Test.sol")

CONTRACT_TEMPLATE = dedent(
    """\
    // SPDX-License-Identifier: UNLICENSED
    pragma solidity {pragma};

    import {{{base_name}}} from "{base_import}";

    /// @notice Reproducers of the properties broken during a medusa run
    contract {contract_name} is {base_name} {{
    {body}}}
    """
)


def base_contract_for(
    entry_point: Path | None, output_dir: Path | None = None
) -> tuple[str, str]:
    """
    Return the (contract name, import path) the reproducer contract inherits.

    `test/FuzzTest.t.sol` gives ("FuzzTest", "./FuzzTest.t.sol") when the
    reproducer sits next to the entry point. With `output_dir`, the import is
    the entry point's path relative to that directory, e.g. "../test/FuzzTest.t.sol".
    """
    if entry_point is None:
        return FORGE_STD_TEST
    name = entry_point.name
    for suffix in (TEST_FILE_SUFFIX, ".sol"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    if output_dir is None:
        return name, f"./{entry_point.name}"

    import_path = Path(os.path.relpath(entry_point, output_dir)).as_posix()
    if not import_path.startswith("../"):
        import_path = f"./{import_path}"
    return name, import_path


def find_first_unused_filename(directory: Path, base_name: str = DEFAULT_CONTRACT_NAME) -> Path:
    """Return the first of Base.t.sol, Base1.t.sol, Base2.t.sol, ... not present in `directory`."""
    index = 0
    while True:
        stem = base_name if index == 0 else f"{base_name}{index}"
        candidate = directory / f"{stem}{TEST_FILE_SUFFIX}"
        if not candidate.exists():
            return candidate
        index += 1


@dataclass
class ReproducerContract:
    """A test contract holding the rendered reproducer functions."""

    reproducers: str
    contract_name: str = DEFAULT_CONTRACT_NAME
    base_name: str = FORGE_STD_TEST[0]
    base_import: str = FORGE_STD_TEST[1]

    def render(self) -> str:
        body = indent(self.reproducers.rstrip("\n") + "\n", " " * 4)
        return CONTRACT_TEMPLATE.format(
            pragma=SOLIDITY_PRAGMA,
            base_name=self.base_name,
            base_import=self.base_import,
            contract_name=self.contract_name,
            body=body,
        )


def write_reproducer_contract(
    reproducers: str,
    output_dir: Path,
    entry_point: Path | None = None,
) -> Path:
    """
    Save `reproducers` as a new test contract in `output_dir` and return its path.

    An existing file is never overwritten: the first free ForgeReproducerN name
    is used, and the file is opened in exclusive-create mode.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    path = find_first_unused_filename(output_dir)
    base_name, base_import = base_contract_for(entry_point, output_dir)
    contract = ReproducerContract(
        reproducers=reproducers,
        contract_name=path.name[: -len(TEST_FILE_SUFFIX)],
        base_name=base_name,
        base_import=base_import,
    )

    with open(path, "x", encoding="utf-8") as f:
        f.write(contract.render())

    logger.info(f"[+] Reproducers written to {path}")
    return path

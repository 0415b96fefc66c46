"""
This module turns a medusa trace into reproducer ASTs.

Medusa's console output is not a formal grammar, so lines are classified by
content: a "[FAILED]" line opens a reproducer for the broken property, each
numbered line of the call sequence that follows becomes cheat calls plus the
property call, and the "[Execution Trace]" header that medusa prints after the
sequence closes the reproducer.

Example call line:

    1) FuzzTest.prop_x(uint256,uint256)(1, 1) (block=43494, time=315910, gas=12500000, gasprice=1, value=0, sender=0x0000000000000000000000000000000000060000)
"""

from __future__ import annotations

import logging
import re
from enum import Enum, auto

from forgery.errors import CallLineError, CheatsDataError, PropertyNameError, ProtocolStateError
from forgery.nodes import (
    SELF_TARGET,
    Call,
    FunctionDeclaration,
    new_contract_call,
    new_prank,
    new_roll,
    new_warp,
)
from forgery.types import CheatsData

logger = logging.getLogger(__name__)

FAILURE_MARKER = "FAILED"
TERMINATOR_MARKER = "[Execution Trace]"

# A call line starts with the (1-based) index of the call in the sequence.
CALL_LINE_REGEX = re.compile(r"^\s*[0-9]")

DECIMAL_REGEX = re.compile(r"[0-9]+")
ADDRESS_REGEX = re.compile(r"0x[0-9a-fA-F]{40}")

MAX_UINT256 = 2**256 - 1

# Keys of the trailing annotation group that the reproducer needs.
BLOCK_KEY = "block"
TIME_KEY = "time"
SENDER_KEY = "sender"
VALUE_KEY = "value"

# Medusa prints empty bytes/strings as nothing between separators.
EMPTY_FIELD_FIXUPS = (
    (",,", ",'',"),
    (",)", ",'')"),
    ("(,", "('',"),
)


class ParserState(Enum):
    """Whether a reproducer is currently being built."""

    IDLE = auto()  # No pending reproducer; call lines are ignored.
    BUILDING = auto()  # A "[FAILED]" line opened a reproducer.


def extract_property_name(line: str) -> str:
    """
    Return the text between the first '.' and the following '('.

    "⇾ [FAILED] Assertion Test: FuzzTest.prop_x(uint256,uint256)" gives "prop_x".
    Raise PropertyNameError when the line has no such fragment.
    """
    _, dot, after_dot = line.partition(".")
    name, paren, _ = after_dot.partition("(")
    if not dot or not paren or not name:
        raise PropertyNameError(line)
    return name


def _parse_decimal(key: str, raw_value: str, upper_bound: int | None = None) -> int:
    if not DECIMAL_REGEX.fullmatch(raw_value):
        raise CheatsDataError(f"'{key}' is not a decimal number: {raw_value!r}", key, raw_value)
    number = int(raw_value)
    if upper_bound is not None and number > upper_bound:
        raise CheatsDataError(f"'{key}' is out of range: {raw_value}", key, raw_value)
    return number


def _parse_address(key: str, raw_value: str) -> str:
    if not ADDRESS_REGEX.fullmatch(raw_value):
        raise CheatsDataError(f"'{key}' is not an address: {raw_value!r}", key, raw_value)
    return raw_value


def parse_cheats_data(line: str) -> CheatsData:
    """
    Parse block, timestamp, sender and value out of the last '(...)' group.

    The group is located with a last-'(' / last-')' scan, which works because
    medusa always prints it last and never nests anything in it. Every key is
    required; there are no defaults.
    """
    start = line.rfind("(")
    end = line.rfind(")")
    if start == -1 or end < start:
        raise CheatsDataError(f"No trailing '(key=value, ...)' group in line: {line!r}")

    pairs: dict[str, str] = {}
    for piece in line[start + 1 : end].split(","):
        key, equals, value = piece.partition("=")
        if equals:
            pairs[key.strip()] = value.strip()

    for key in (BLOCK_KEY, TIME_KEY, SENDER_KEY, VALUE_KEY):
        if key not in pairs:
            raise CheatsDataError(f"Missing '{key}' in call annotations", key)

    return CheatsData(
        block_to_roll=_parse_decimal(BLOCK_KEY, pairs[BLOCK_KEY]),
        timestamp_to_warp_to=_parse_decimal(TIME_KEY, pairs[TIME_KEY]),
        caller_to_prank=_parse_address(SENDER_KEY, pairs[SENDER_KEY]),
        value=_parse_decimal(VALUE_KEY, pairs[VALUE_KEY], MAX_UINT256),
    )


def parse_call_arguments(line: str) -> list[str]:
    """
    Return the argument values of a call line as a single opaque string.

    "prop_x(uint256,(uint256,bytes))(1, (2, )) (block=...)" gives ["1, (2, '')"].

    The first half of the '(' in the line belong to the type signature, so the
    values start at the '(' with index count // 2. This holds as long as the
    signature and the values nest tuples the same way, plus the one trailing
    annotation group. Empty fields are restored in a single pass of each fixup,
    so three or more consecutive empty fields are only partly restored.
    """
    # TODO: split into one argument per value once nested tuples are parsed properly
    paren_positions = [index for index, char in enumerate(line) if char == "("]
    boundary = len(paren_positions) // 2
    values = line[paren_positions[boundary] :] if paren_positions else ""

    for empty, placeholder in EMPTY_FIELD_FIXUPS:
        values = values.replace(empty, placeholder)

    annotation_start = values.rfind(" (")
    if annotation_start != -1:
        values = values[:annotation_start]

    if values.startswith("(") and values.endswith(")"):
        values = values[1:-1]

    return [values]


def parse_property_call(line: str, value: int) -> Call:
    """Build the call of the property on the test contract itself."""
    return new_contract_call(
        SELF_TARGET,
        extract_property_name(line),
        value or None,
        parse_call_arguments(line),
    )


class TraceParser:
    """
    Build reproducer ASTs from a medusa trace, one line at a time.

    The parser holds at most one pending reproducer. Completed ones are
    accumulated until `drain()` is called, usually once the trace ends.
    Test names are made unique per parser: the second failure of `prop_x`
    becomes `test_prop_x2`, the third `test_prop_x3`, and so on.
    """

    def __init__(self) -> None:
        # Occurrences of each property name, keyed by the exact name.
        self.name_counter: dict[str, int] = {}
        self.pending: FunctionDeclaration | None = None
        self.reproducers: list[FunctionDeclaration] = []
        self.counters: dict[str, int] = {
            "lines": 0,
            "failures": 0,
            "calls": 0,
            "ignored_calls": 0,
            "completed": 0,
            "discarded": 0,
        }

    @property
    def state(self) -> ParserState:
        return ParserState.IDLE if self.pending is None else ParserState.BUILDING

    def process_line(self, line: str) -> None:
        """Dispatch a line based on its content; unrecognized lines are ignored."""
        self.counters["lines"] += 1

        if FAILURE_MARKER in line:
            self._process_failed_property(line)
        elif CALL_LINE_REGEX.match(line):
            self._process_call_line(line)
        elif TERMINATOR_MARKER in line:
            self._finalize_pending()

    def drain(self) -> list[FunctionDeclaration]:
        """Return the completed reproducers and forget them."""
        reproducers, self.reproducers = self.reproducers, []
        return reproducers

    def finish(self) -> list[FunctionDeclaration]:
        """Drop any unterminated reproducer, then drain the completed ones."""
        if self.pending is not None:
            logger.warning(
                f"[!] Trace ended before the sequence of {self.pending.name} was complete, discarding it."
            )
            self.counters["discarded"] += 1
            self.pending = None
        return self.drain()

    def unique_test_name(self, property_name: str) -> str:
        """Return `test_<name>`, suffixed with the occurrence count from the second one on."""
        count = self.name_counter.get(property_name, 0) + 1
        self.name_counter[property_name] = count
        if count > 1:
            return f"test_{property_name}{count}"
        return f"test_{property_name}"

    def _process_failed_property(self, line: str) -> None:
        property_name = extract_property_name(line)
        test_name = self.unique_test_name(property_name)

        if self.pending is not None:
            logger.warning(
                f"[!] New failure before the sequence of {self.pending.name} ended, discarding it."
            )
            self.counters["discarded"] += 1

        self.pending = FunctionDeclaration(test_name)
        self.counters["failures"] += 1
        logger.debug(f"[*] Building reproducer {test_name} for failed property {property_name}")

    def _process_call_line(self, line: str) -> None:
        if self.pending is None:
            self.counters["ignored_calls"] += 1
            return

        try:
            cheats_data = parse_cheats_data(line)
        except CheatsDataError as e:
            raise CallLineError("cheats data", line) from e

        try:
            property_call = parse_property_call(line, cheats_data.value)
        except PropertyNameError as e:
            raise CallLineError("property call", line) from e

        self._append_to_pending(
            new_roll(cheats_data.block_to_roll),
            new_warp(cheats_data.timestamp_to_warp_to),
            new_prank(cheats_data.caller_to_prank),
            property_call,
        )
        self.counters["calls"] += 1
        logger.debug(f"  -> {property_call.function_name} added to {self.pending.name}")

    def _append_to_pending(self, *statements: Call) -> None:
        if self.pending is None:
            raise ProtocolStateError("No reproducer is being built")
        for statement in statements:
            self.pending.add_child(statement)

    def _finalize_pending(self) -> None:
        if self.pending is None:
            return
        reproducer, self.pending = self.pending, None
        reproducer.seal()
        self.reproducers.append(reproducer)
        self.counters["completed"] += 1
        logger.debug(f"[+] Reproducer {reproducer.name} complete ({len(reproducer.children)} statements)")

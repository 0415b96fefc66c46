"""Shared record types for forgery.

`CheatsData` is the execution context medusa records after every call of a
sequence. It only lives long enough to be expanded into cheat calls, so it is
a frozen dataclass rather than part of the AST.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheatsData:
    """Block, timestamp, caller and msg.value under which a call was made."""

    block_to_roll: int
    timestamp_to_warp_to: int
    caller_to_prank: str
    value: int

"""
Feed a trace to the parser and render what it finds.

A trace either comes from a saved log file or is piped live from
`medusa fuzz`, in which case it is consumed as it is produced.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, TextIO

from forgery.emitter import render
from forgery.nodes import FunctionDeclaration
from forgery.parser import TraceParser

logger = logging.getLogger(__name__)


def iter_trace_lines(stream: TextIO) -> Iterator[str]:
    """Yield each line of `stream` without its line terminator."""
    for line in stream:
        yield line.rstrip("\r\n")


def parse_trace(
    stream: TextIO,
    echo: TextIO | None = None,
    parser: TraceParser | None = None,
) -> list[FunctionDeclaration]:
    """
    Parse a whole trace and return its completed reproducers.

    If `echo` is given, every line is written to it as soon as it is read,
    so a live medusa run stays visible while being parsed. A reproducer
    whose sequence never ended is dropped.
    """
    if parser is None:
        parser = TraceParser()

    for line in iter_trace_lines(stream):
        if echo is not None:
            echo.write(line + "\n")
            echo.flush()
        parser.process_line(line)

    reproducers = parser.finish()
    logger.info(f"[*] Parsed {parser.counters['lines']} lines, found {len(reproducers)} reproducer(s).")
    return reproducers


def parse_trace_file(path: Path, parser: TraceParser | None = None) -> list[FunctionDeclaration]:
    """Parse a trace saved to disk."""
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return parse_trace(f, parser=parser)


def render_reproducers(reproducers: list[FunctionDeclaration]) -> str:
    """Render every reproducer, each followed by an empty line."""
    return "".join(render(reproducer) + "\n" for reproducer in reproducers)


def process_input(stream: TextIO, writer: TextIO) -> int:
    """Write the Solidity of every reproducer in `stream` to `writer`.

    Return the number of reproducers written.
    """
    reproducers = parse_trace(stream)
    writer.write(render_reproducers(reproducers))
    return len(reproducers)

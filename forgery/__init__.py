"""
forgery turns a medusa fuzzing trace into Foundry reproducer tests.

The pipeline reads the trace line by line with `TraceParser`, which builds one
`FunctionDeclaration` per failing property, and renders each of them into
Solidity with `render`.
"""

from forgery.emitter import Emitter, render
from forgery.errors import (
    CallLineError,
    CheatsDataError,
    ConfigError,
    ForgeryError,
    PropertyNameError,
    ProtocolStateError,
)
from forgery.nodes import Ast, Call, FunctionDeclaration, Statement
from forgery.parser import TraceParser
from forgery.reader import parse_trace, parse_trace_file, process_input

__version__ = "0.1.0"

__all__ = [
    "Ast",
    "Call",
    "CallLineError",
    "CheatsDataError",
    "ConfigError",
    "Emitter",
    "ForgeryError",
    "FunctionDeclaration",
    "PropertyNameError",
    "ProtocolStateError",
    "Statement",
    "TraceParser",
    "parse_trace",
    "parse_trace_file",
    "process_input",
    "render",
]

"""Minsky: interpreter and state-elimination transpiler for Minsky machines.

A Minsky machine has a finite set of control states and a fixed number of
non-negative counters ("tapes"). A program is an ordered list of rules; each
rule fires in one state, moves to another, and adjusts every tape by a signed
amount. Negative amounts are guards (the tape must hold at least that much),
non-negative amounts are actions.

Pipeline:
    .m3 SOURCE -> PARSE -> VALIDATE -> PROGRAM -> INTERPRET -> (steps, MACHINE)
                                          |
                                          +-> TRANSPILE -> single-state PROGRAM

Modules:
    machine: Rule, Program, TapeState and Machine value types
    validation: Structural checks run before interpretation/transpilation
    interpreter: First-applicable, restart-from-top execution under fuel
    transpiler: Rewrites any program into an equivalent one-state program
    parser: `.m3` text reader/writer
    library: Hand-built arithmetic programs and their registry
"""

__version__ = "0.1.0"
__author__ = "Minsky Project"

from .machine import Machine, Program, Rule, RuleOutcome, TapeState
from .validation import StructuralError, validate_machine, validate_program
from .interpreter import DEFAULT_FUEL, Interpreter, OutOfFuel, interpret
from .transpiler import transpile, transpile_machine
from .parser import ParseError, format_program, parse_program, read_program

__all__ = [
    "Machine", "Program", "Rule", "RuleOutcome", "TapeState",
    "StructuralError", "validate_machine", "validate_program",
    "DEFAULT_FUEL", "Interpreter", "OutOfFuel", "interpret",
    "transpile", "transpile_machine",
    "ParseError", "format_program", "parse_program", "read_program",
]

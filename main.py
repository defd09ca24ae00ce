#!/usr/bin/env python3
"""Minsky Machine Command Line Interface.

Run `.m3` programs with the Minsky machine interpreter, optionally through
the state-elimination transpiler.

Usage:
    python main.py --program programs/adder.m3 --tapes 3,4
    python main.py --program programs/mult.m3 --tapes 0,7,0,10 --transpile
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from minsky import (
    DEFAULT_FUEL,
    Interpreter,
    Machine,
    OutOfFuel,
    ParseError,
    StructuralError,
    format_program,
    parse_program,
    transpile,
    transpile_machine,
)
from minsky.library import get_registry
from minsky.transpiler import emulated_state, transpiled_fuel


def parse_tapes(text: str) -> list:
    """Parse a comma/space separated list of initial counters."""
    return [int(t) for t in text.replace(",", " ").split()]


def main():
    registry = get_registry()

    parser = argparse.ArgumentParser(
        description="Minsky: Minsky machine interpreter and transpiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Add 3 and 4
    python main.py --program programs/adder.m3 --tapes 3,4

    # Multiply 7 by 11 with full trace output
    python main.py --program programs/6-rule-mult.m3 --tapes 0,7,11,0 --trace

    # Run the single-state translation of a program
    python main.py --program programs/mult.m3 --tapes 0,7,0,10 --transpile

    # Print the single-state translation without running it
    python main.py --program programs/mult.m3 --emit

    # Run a built-in program on inputs x, y
    python main.py --example six_rule_mult --inputs 7,11
        """
    )

    parser.add_argument(
        "--program", "-p",
        type=str,
        help="Path to program file (.m3)"
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline program (separate lines with ;;)"
    )
    parser.add_argument(
        "--example", "-e",
        choices=sorted(registry.get_valid_keys()),
        help="Built-in library program"
    )
    parser.add_argument(
        "--inputs",
        type=str,
        default="0,0",
        help="Inputs x,y for --example. Default: 0,0"
    )
    parser.add_argument(
        "--tapes",
        type=str,
        help="Initial counters, e.g. 3,4 (default: all zero)"
    )
    parser.add_argument(
        "--state", "-s",
        type=int,
        default=0,
        help="Initial machine state. Default: 0"
    )
    parser.add_argument(
        "--fuel", "-f",
        type=int,
        default=DEFAULT_FUEL,
        help=f"Maximum rule firings (safety limit). Default: {DEFAULT_FUEL}"
    )
    parser.add_argument(
        "--transpile",
        action="store_true",
        help="Run the single-state translation of the program"
    )
    parser.add_argument(
        "--emit",
        action="store_true",
        help="Print the single-state translation and exit"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (final tapes only)"
    )

    args = parser.parse_args()
    if args.emit:
        args.quiet = True

    sources = [args.program, args.inline, args.example]
    if sum(s is not None for s in sources) != 1:
        parser.error("Exactly one of --program, --inline or --example is required")

    if args.fuel < 0:
        parser.error("--fuel must be non-negative")

    # Load program
    try:
        if args.program:
            program_path = Path(args.program)
            if not program_path.exists():
                print(f"Error: Program file not found: {args.program}")
                sys.exit(1)
            program = parse_program(program_path.read_text())
            if not args.quiet:
                print(f"Loading program: {args.program}")
        elif args.inline:
            program = parse_program(args.inline.replace(";;", "\n"))
            if not args.quiet:
                print("Running inline program")
        else:
            program = registry.build(args.example)
            if not args.quiet:
                print(f"Running library program: {args.example}")
    except (ParseError, StructuralError) as e:
        print(f"Program error: {e}")
        sys.exit(1)

    if args.emit:
        print(format_program(transpile(program)), end="")
        return

    # Initial machine
    try:
        if args.example:
            x, y = parse_tapes(args.inputs)
            machine = registry.initial_machine(args.example, x, y)
        elif args.tapes:
            machine = Machine(args.state, parse_tapes(args.tapes))
        else:
            machine = Machine(args.state, [0] * program.num_tapes)
    except ValueError as e:
        print(f"Invalid tapes: {e}")
        sys.exit(1)

    fuel = args.fuel
    original = program
    try:
        if args.transpile:
            machine = transpile_machine(machine, program)
            program = transpile(program)
            fuel = transpiled_fuel(fuel)
            if not args.quiet:
                print(f"Transpiled to {program.num_tapes} tapes, {program.num_rules} rules")

        interpreter = Interpreter(program, fuel=fuel, record_trace=args.trace)
        interpreter.load_machine(machine)
    except StructuralError as e:
        print(f"Machine error: {e}")
        sys.exit(1)

    # Run
    if not args.quiet:
        print("-" * 60)
        print("Executing...")
        print("-" * 60)

    exit_code = 0
    try:
        interpreter.run()
    except OutOfFuel as e:
        print(f"Execution error: {e}")
        exit_code = 2
    except OverflowError as e:
        print(f"Execution error: {e}")
        exit_code = 3

    # Output
    if args.trace:
        interpreter.print_trace()
    elif not args.quiet:
        print()
        summary = interpreter.get_summary()
        print(f"Steps: {summary['steps']}")
        print(f"Halted: {summary['halted']}")
        print(f"State: {summary['state']}")
        print(f"Tapes: {summary['tapes']}")
        if args.transpile:
            print(f"Original tapes: {summary['tapes'][:original.num_tapes]}")
            print(f"Emulated state: {emulated_state(interpreter.machine, original)}")
    else:
        # Quiet mode - just print final tapes
        print(" ".join(str(t) for t in interpreter.dump_tapes()))

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

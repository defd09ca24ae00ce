"""Structural validation for programs and machines.

Programs are checked once, before they reach the interpreter or the
transpiler. Any problem found here is fatal to the program and is reported
with enough detail (rule index, expected vs. actual width) to fix the source.
"""

from typing import List, Optional

from .machine import INT32_MAX, INT32_MIN, Machine, Program


class StructuralError(ValueError):
    """A program or machine is malformed.

    Attributes:
        message: Human-readable description
        rule_index: Index of the offending rule (None for program/machine level)
        expected: Expected value (e.g. tape count), if applicable
        actual: Actual value found, if applicable
    """

    def __init__(
        self,
        message: str,
        rule_index: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None
    ):
        if rule_index is not None:
            message = f"Rule {rule_index}: {message}"
        super().__init__(message)
        self.message = message
        self.rule_index = rule_index
        self.expected = expected
        self.actual = actual


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid count or adjustment
    return isinstance(value, int) and not isinstance(value, bool)


def find_structural_errors(program: Program) -> List[StructuralError]:
    """Collect every structural problem in a program.

    Checks:
        - num_tapes is a non-negative integer
        - every rule has exactly num_tapes adjustments
        - adjustments are integers within 32-bit signed bounds
        - states are non-negative integers

    Args:
        program: Program to check

    Returns:
        List of errors, empty if the program is well formed
    """
    errors: List[StructuralError] = []

    if not _is_int(program.num_tapes) or program.num_tapes < 0:
        errors.append(StructuralError(f"Invalid tape count: {program.num_tapes!r}"))
        return errors

    for index, rule in enumerate(program.rules):
        if len(rule) != program.num_tapes:
            errors.append(StructuralError(
                f"expected {program.num_tapes} tape adjustments, found {len(rule)}",
                rule_index=index,
                expected=program.num_tapes,
                actual=len(rule)
            ))

        for name in ("cur_state", "next_state"):
            state = getattr(rule, name)
            if not _is_int(state) or state < 0:
                errors.append(StructuralError(
                    f"invalid {name}: {state!r}",
                    rule_index=index
                ))

        for tape, amt in enumerate(rule.adjustments):
            if not _is_int(amt):
                errors.append(StructuralError(
                    f"adjustment for tape {tape} is not an integer: {amt!r}",
                    rule_index=index
                ))
            elif amt < INT32_MIN or amt > INT32_MAX:
                errors.append(StructuralError(
                    f"adjustment for tape {tape} out of 32-bit range: {amt}",
                    rule_index=index
                ))

    return errors


def validate_program(program: Program) -> None:
    """Reject a malformed program.

    Raises:
        StructuralError: The first problem found by find_structural_errors
    """
    errors = find_structural_errors(program)
    if errors:
        raise errors[0]


def validate_machine(machine: Machine, program: Program) -> None:
    """Check that a machine can be run against a program.

    Raises:
        StructuralError: If the tape count differs from the program's, a
            counter is negative or out of range, or the state is invalid
    """
    if machine.num_tapes != program.num_tapes:
        raise StructuralError(
            f"Machine has {machine.num_tapes} tapes, program expects {program.num_tapes}",
            expected=program.num_tapes,
            actual=machine.num_tapes
        )

    if not _is_int(machine.machine_state) or machine.machine_state < 0:
        raise StructuralError(f"Invalid machine state: {machine.machine_state!r}")

    for tape, pos in enumerate(machine.tape_state.counters):
        if not _is_int(pos):
            raise StructuralError(f"Tape {tape} holds a non-integer value: {pos!r}")
        if pos < 0 or pos > INT32_MAX:
            raise StructuralError(f"Tape {tape} out of range: {pos}")

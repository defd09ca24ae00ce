"""Machine: data model for Minsky machines.

This module defines the value types shared by the interpreter and the
transpiler.

Components:
    - Rule: (cur_state, next_state, adjustments), one signed entry per tape
    - Program: number of tapes plus an ordered tuple of rules (order = priority)
    - TapeState: one non-negative counter per tape
    - Machine: current control state plus tape state (the execution cursor)

A negative adjustment is a guard: the rule only fires if the counter holds at
least that many units, which are then removed. A non-negative adjustment is an
action added to the counter when the rule fires.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Set, Tuple


# 32-bit signed integer bounds
INT32_MIN = -(2**31)
INT32_MAX = (2**31) - 1

# Machine states are non-negative integers
State = int

# Tapes are identified by non-negative integers
TapeId = int


class RuleOutcome(Enum):
    """Result of trying a single rule against a machine.

    Only APPLIED changes the machine. The other two values are diagnostics;
    both simply mean "this rule does not fire now".
    """
    APPLIED = "applied"
    WRONG_STATE = "wrong_state"
    GUARD_NOT_SAT = "guard_not_sat"


@dataclass(frozen=True)
class Rule:
    """Immutable transition rule.

    Attributes:
        cur_state: State the rule fires in
        next_state: State the machine moves to after firing
        adjustments: Signed per-tape adjustments (negative = guard, else action)
    """
    cur_state: State
    next_state: State
    adjustments: Tuple[int, ...]

    def __post_init__(self):
        # Accept any sequence but always store a tuple
        object.__setattr__(self, "adjustments", tuple(self.adjustments))

    def __len__(self) -> int:
        return len(self.adjustments)

    def __iter__(self) -> Iterator[int]:
        return iter(self.adjustments)

    def is_self_loop(self) -> bool:
        """Check if the rule leaves the machine state unchanged."""
        return self.cur_state == self.next_state

    def __str__(self) -> str:
        adjs = ", ".join(str(a) for a in self.adjustments)
        return f"{self.cur_state} [{adjs}] {self.next_state}"


@dataclass(frozen=True)
class Program:
    """Immutable Minsky machine program.

    Attributes:
        num_tapes: Number of tapes every rule must address
        rules: Rules in priority order (earlier rules win)
    """
    num_tapes: int
    rules: Tuple[Rule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __getitem__(self, index: int) -> Rule:
        return self.rules[index]

    @property
    def num_rules(self) -> int:
        return len(self.rules)

    def states(self) -> Set[State]:
        """Get every state mentioned by any rule (current or next)."""
        found: Set[State] = set()
        for rule in self.rules:
            found.add(rule.cur_state)
            found.add(rule.next_state)
        return found

    def __str__(self) -> str:
        lines = [f"tapes: {self.num_tapes}"]
        lines.extend(str(rule) for rule in self.rules)
        return "\n".join(lines)


class TapeState:
    """Tape head positions, one non-negative counter per tape."""

    def __init__(self, counters: Sequence[int]):
        self.counters: List[int] = list(counters)

    def __len__(self) -> int:
        return len(self.counters)

    def __getitem__(self, tape: TapeId) -> int:
        return self.counters[tape]

    def __eq__(self, other) -> bool:
        if isinstance(other, TapeState):
            return self.counters == other.counters
        return NotImplemented

    def __repr__(self) -> str:
        return f"TapeState({self.counters!r})"

    def can_apply(self, rule: Rule) -> bool:
        """Check whether every guard of a rule is satisfied.

        Assumes the rule width equals the number of tapes; a mismatch is a
        structural bug that validation should have rejected.

        Args:
            rule: Rule to test

        Returns:
            True if every guarded counter holds at least the guard amount
        """
        assert len(self.counters) == len(rule), "rule width does not match tape count"
        return all(
            amt >= 0 or pos >= -amt
            for pos, amt in zip(self.counters, rule.adjustments)
        )

    def apply(self, rule: Rule) -> None:
        """Add a rule's adjustments to every counter.

        `can_apply` must have returned True for this rule. The whole counter
        list is replaced at once.

        Raises:
            OverflowError: If a counter would exceed INT32_MAX; the counters
                are left unchanged
        """
        counters = [pos + amt for pos, amt in zip(self.counters, rule.adjustments)]
        for tape, pos in enumerate(counters):
            if pos > INT32_MAX:
                raise OverflowError(f"Tape {tape} overflows 32-bit range: {pos}")
        self.counters = counters
        assert self.is_valid(), "tape moved below zero"

    def is_valid(self) -> bool:
        """Check that all tape positions are non-negative."""
        return all(pos >= 0 for pos in self.counters)

    def copy(self) -> "TapeState":
        return TapeState(self.counters)


@dataclass
class Machine:
    """Mutable execution cursor threaded through interpretation.

    Attributes:
        machine_state: Current control state
        tape_state: Current counters
    """
    machine_state: State = 0
    tape_state: TapeState = field(default_factory=lambda: TapeState([]))

    def __post_init__(self):
        if not isinstance(self.tape_state, TapeState):
            self.tape_state = TapeState(self.tape_state)

    @property
    def num_tapes(self) -> int:
        return len(self.tape_state)

    def tape_pos(self, tape: TapeId) -> int:
        """Get the counter of one tape.

        Raises:
            IndexError: If the tape does not exist
        """
        return self.tape_state[tape]

    def dump_tapes(self) -> List[int]:
        """Get a copy of all counters."""
        return list(self.tape_state.counters)

    def try_rule(self, rule: Rule) -> RuleOutcome:
        """Try to fire a rule against this machine.

        If the machine is in the rule's current state and every guard holds,
        move the tapes and switch to the rule's next state. Otherwise nothing
        changes.

        Args:
            rule: Rule to try

        Returns:
            RuleOutcome describing what happened
        """
        if self.machine_state != rule.cur_state:
            return RuleOutcome.WRONG_STATE
        if not self.tape_state.can_apply(rule):
            return RuleOutcome.GUARD_NOT_SAT
        self.tape_state.apply(rule)
        self.machine_state = rule.next_state
        return RuleOutcome.APPLIED

    def apply_rule(self, rule: Rule) -> bool:
        """Fire a rule if it applies.

        Returns:
            True if the rule fired
        """
        return self.try_rule(rule) is RuleOutcome.APPLIED

    def copy(self) -> "Machine":
        """Create an independent copy of this machine."""
        return Machine(self.machine_state, self.tape_state.copy())

    def snapshot(self) -> dict:
        """Create a plain snapshot of the machine for tracing."""
        return {
            "state": self.machine_state,
            "tapes": self.dump_tapes(),
        }

    def __str__(self) -> str:
        tapes = " ".join(f"T{i}={v}" for i, v in enumerate(self.tape_state.counters))
        return f"[State {self.machine_state}] {tapes}"

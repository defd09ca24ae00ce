"""Library: hand-built arithmetic programs and a frozen program registry.

Programs:
    adder: 2 tapes, 1 rule; [x, y] -> tape 0 = x + y
    mult: 4 tapes, 4 rules, states {0, 1}; [0, x, 0, y-1] -> tape 0 = x * y
    six_rule_mult: 4 tapes, 6 rules, states {0, 1, 2}; [0, x, y, 0] -> tape 0 = x * y

Each builder returns a fresh Program. The run helpers (adder, mult,
six_rule_mult) interpret the program with a budget that is always enough
and return tape 0.
"""

from typing import Callable, Dict, List, Optional, Tuple

from .interpreter import interpret
from .machine import Machine, Program, Rule


def adder_program() -> Program:
    """Adder: moves tape 1 onto tape 0 one unit at a time."""
    return Program(2, [Rule(0, 0, [1, -1])])


# Multiplier machine trajectory:
#
# 0: 0   x   0   y-1  --> rule0
# 0: 1   x-1 1   y-1  --> rule0
# 0: ...              --> ...
# 0: x   0   x   y-1  --> rule0 doesn't apply, rule1 fires st' = 1
# 1: x   0   x   y-1  --> rule2
# 1: x   1   x-1 y-1  --> rule2
# 1: ...              --> ...
# 1: x   x   0   y-1  --> rule2 doesn't apply, rule3 resets st' = 0
# 0: x   x   0   y-2
# .. ...
# 1: x*y x   0   0    --> HALT
def mult_program() -> Program:
    """4-rule multiplier over tapes [acc, x, scratch, y-1]."""
    return Program(4, [
        Rule(0, 0, [1, -1, 1, 0]),
        Rule(0, 1, [0, 0, 0, 0]),
        Rule(1, 1, [0, 1, -1, 0]),
        Rule(1, 0, [0, 0, 0, -1]),
    ])


def six_rule_mult_program() -> Program:
    """6-rule multiplier over tapes [acc, x, y, scratch].

    State 0 takes one unit of y per round, state 1 drains x into acc and
    scratch, state 2 restores x from scratch. Once y is empty the last rule
    clears x.
    """
    return Program(4, [
        Rule(0, 1, [0, 0, -1, 0]),
        Rule(1, 1, [1, -1, 0, 1]),
        Rule(1, 2, [0, 0, 0, 0]),
        Rule(2, 2, [0, 1, 0, -1]),
        Rule(2, 0, [0, 0, 0, 0]),
        Rule(0, 0, [0, -1, 0, 0]),
    ])


def _check_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


def adder(x: int, y: int) -> int:
    """Add two non-negative integers with the adder machine."""
    _check_non_negative(x=x, y=y)
    # the rule fires y times
    _, end_machine = interpret(Machine(0, [x, y]), adder_program(), 2 * y)
    return end_machine.tape_pos(0)


def mult(x: int, y: int) -> int:
    """Multiply with the 4-rule machine.

    Raises:
        ValueError: If x < 0 or y < 1 (tape 3 starts at y - 1)
    """
    _check_non_negative(x=x)
    if y < 1:
        raise ValueError(f"y must be at least 1, got {y}")
    _, end_machine = interpret(
        Machine(0, [0, x, 0, y - 1]), mult_program(), 2 * (x + 1) * y
    )
    return end_machine.tape_pos(0)


def six_rule_mult(x: int, y: int) -> int:
    """Multiply with the 6-rule machine."""
    _check_non_negative(x=x, y=y)
    _, end_machine = interpret(
        Machine(0, [0, x, y, 0]), six_rule_mult_program(), (2 * x + 3) * y + x + 1
    )
    return end_machine.tape_pos(0)


# Maps a key to (builder, initial-tapes factory for inputs x, y)
ProgramEntry = Tuple[Callable[[], Program], Callable[[int, int], List[int]]]


class ProgramRegistry:
    """Registry of named example programs.

    The registry is frozen after initialization so no entries can be added
    at runtime.

    Attributes:
        _programs: Dictionary mapping keys to (builder, tape factory) pairs
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        """Initialize registry with all library programs."""
        self._programs: Dict[str, ProgramEntry] = {}
        self._frozen = False
        self._register_all_programs()
        self.freeze()

    def _register_all_programs(self) -> None:
        self.register("adder", adder_program, lambda x, y: [x, y])
        self.register("mult", mult_program, lambda x, y: [0, x, 0, y - 1])
        self.register("six_rule_mult", six_rule_mult_program, lambda x, y: [0, x, y, 0])

    def register(
        self,
        key: str,
        builder: Callable[[], Program],
        tapes: Callable[[int, int], List[int]]
    ) -> None:
        """Register a program builder.

        Args:
            key: Program name (e.g., "adder")
            builder: Zero-argument function returning a Program
            tapes: Function mapping inputs (x, y) to initial tapes

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If key already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register programs: registry is frozen")
        if key in self._programs:
            raise ValueError(f"Program already registered: {key}")
        self._programs[key] = (builder, tapes)

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications."""
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if registry is frozen."""
        return self._frozen

    def get_valid_keys(self) -> set:
        """Get set of all registered program names."""
        return set(self._programs.keys())

    def build(self, key: str) -> Program:
        """Build a registered program.

        Raises:
            KeyError: If key not in registry
        """
        if key not in self._programs:
            raise KeyError(f"Unknown program: {key}")
        builder, _ = self._programs[key]
        return builder()

    def initial_machine(self, key: str, x: int, y: int) -> Machine:
        """Build the initial machine of a registered program for inputs x, y.

        Raises:
            KeyError: If key not in registry
        """
        if key not in self._programs:
            raise KeyError(f"Unknown program: {key}")
        _, tapes = self._programs[key]
        return Machine(0, tapes(x, y))


# Singleton registry instance
_registry: Optional[ProgramRegistry] = None


def get_registry() -> ProgramRegistry:
    """Get the singleton program registry instance.

    Returns:
        The frozen ProgramRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = ProgramRegistry()
    return _registry

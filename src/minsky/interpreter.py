"""Interpreter: executes a Minsky machine program under a step budget.

Execution follows a first-applicable, restart-from-top discipline:

    scan rules in order -> fire the first that applies -> restart at rule 0

When a full scan fires nothing the machine halts normally. Every firing
consumes one unit of fuel; running out of fuel aborts the run with
OutOfFuel. A firing that would overflow a 32-bit counter raises
OverflowError.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .machine import Machine, Program, Rule
from .validation import validate_machine, validate_program


DEFAULT_FUEL = 10000


class OutOfFuel(RuntimeError):
    """The step budget ran out before the machine halted.

    The caller may retry from the original initial machine with more fuel.

    Attributes:
        fuel: Budget that was exhausted
        steps: Rule firings performed before aborting
    """

    def __init__(self, fuel: int, steps: int):
        super().__init__(f"Out of fuel ({fuel}) after {steps} steps")
        self.fuel = fuel
        self.steps = steps


@dataclass
class TraceEntry:
    """Single rule firing in the execution trace.

    Attributes:
        step: Step number (0-indexed)
        rule_index: Position of the fired rule in the program
        rule: The fired rule
        pre_state: Machine snapshot before firing
        post_state: Machine snapshot after firing
    """
    step: int
    rule_index: int
    rule: Rule
    pre_state: dict
    post_state: dict


class Interpreter:
    """Step-by-step executor for one program.

    Attributes:
        program: Validated program being run
        fuel: Maximum number of rule firings
        record_trace: Whether to keep a TraceEntry per firing
        machine: Current machine (None until load_machine)
        trace: Recorded firings
    """

    def __init__(
        self,
        program: Program,
        fuel: int = DEFAULT_FUEL,
        record_trace: bool = True
    ):
        """Initialize the interpreter.

        Args:
            program: Program to execute
            fuel: Maximum number of rule firings before OutOfFuel
            record_trace: Keep a trace entry for every firing

        Raises:
            StructuralError: If the program is malformed
            ValueError: If fuel is negative
        """
        validate_program(program)
        if fuel < 0:
            raise ValueError(f"fuel must be non-negative, got {fuel}")

        self.program = program
        self.fuel = fuel
        self.record_trace = record_trace
        self.machine: Optional[Machine] = None
        self.trace: List[TraceEntry] = []
        self._steps = 0
        self._halted = False

    def load_machine(self, machine: Machine) -> None:
        """Load an initial machine, resetting counters and trace.

        The machine is copied so the caller's instance stays untouched.

        Raises:
            StructuralError: If the machine does not fit the program
        """
        validate_machine(machine, self.program)
        self.machine = machine.copy()
        self.trace = []
        self._steps = 0
        self._halted = False

    def step(self) -> Optional[TraceEntry]:
        """Fire the first applicable rule, scanning from the top.

        Returns:
            TraceEntry for the fired rule, or None if nothing fired (halted)

        Raises:
            RuntimeError: If no machine is loaded
            OutOfFuel: If this firing reaches the fuel budget, or an earlier
                firing already did
            OverflowError: If a counter would leave the 32-bit range
        """
        if self.machine is None:
            raise RuntimeError("No machine loaded")

        if self._halted:
            return None

        if self._steps and self._steps >= self.fuel:
            raise OutOfFuel(self.fuel, self._steps)

        pre_state = self.machine.snapshot() if self.record_trace else {}
        for index, rule in enumerate(self.program.rules):
            if self.machine.apply_rule(rule):
                entry = TraceEntry(
                    step=self._steps,
                    rule_index=index,
                    rule=rule,
                    pre_state=pre_state,
                    post_state=self.machine.snapshot() if self.record_trace else {}
                )
                self._steps += 1
                if self.record_trace:
                    self.trace.append(entry)
                if self._steps >= self.fuel:
                    raise OutOfFuel(self.fuel, self._steps)
                return entry

        self._halted = True
        return None

    def run(self) -> List[TraceEntry]:
        """Run until no rule applies.

        Returns:
            Execution trace (empty if record_trace is False)

        Raises:
            RuntimeError: If no machine is loaded
            OutOfFuel: If the step count reaches the fuel budget
            OverflowError: If a counter would leave the 32-bit range
        """
        if self.machine is None:
            raise RuntimeError("No machine loaded")

        while self.step() is not None:
            pass

        return self.trace

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def halted(self) -> bool:
        return self._halted

    def dump_tapes(self) -> List[int]:
        """Get all counter values.

        Returns:
            List of counters, tape 0 first
        """
        if self.machine is None:
            raise RuntimeError("No machine loaded")
        return self.machine.dump_tapes()

    def print_trace(self) -> None:
        """Print execution trace in human-readable format."""
        print("=" * 70)
        print("MINSKY MACHINE EXECUTION TRACE")
        print("=" * 70)

        for entry in self.trace:
            print(f"\n[Step {entry.step}] rule {entry.rule_index}: {entry.rule}")

            pre_tapes = entry.pre_state.get("tapes", [])
            post_tapes = entry.post_state.get("tapes", [])
            changes = [
                f"T{i}: {before} → {after}"
                for i, (before, after) in enumerate(zip(pre_tapes, post_tapes))
                if before != after
            ]
            if changes:
                print(f"  Changes: {', '.join(changes)}")

            pre_st = entry.pre_state.get("state")
            post_st = entry.post_state.get("state")
            if pre_st != post_st:
                print(f"  State: {pre_st} → {post_st}")

        print("\n" + "=" * 70)
        print("FINAL STATE")
        print("=" * 70)
        if self.machine:
            print(f"  State: {self.machine.machine_state}")
            print(f"  Tapes: {self.dump_tapes()}")
            print(f"  Steps: {self.steps}")
            print(f"  Halted: {self.halted}")

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with execution statistics and final state
        """
        return {
            "steps": self.steps,
            "halted": self.halted,
            "state": self.machine.machine_state if self.machine else None,
            "tapes": self.dump_tapes() if self.machine else [],
            "fuel": self.fuel,
            "trace_length": len(self.trace),
        }


def interpret(
    initial_machine: Machine,
    program: Program,
    fuel: int = DEFAULT_FUEL
) -> Tuple[int, Machine]:
    """Interpret a program starting from an initial machine.

    Rules are tried in program order. When one fires, scanning restarts at
    the first rule. When no rule fires, the machine halts.

    Args:
        initial_machine: Starting state and counters (not modified)
        program: Program to run
        fuel: Maximum number of rule firings

    Returns:
        Tuple of (steps taken, final machine)

    Raises:
        StructuralError: If the program or machine is malformed
        OutOfFuel: If the machine has not halted when fuel runs out
    """
    interpreter = Interpreter(program, fuel=fuel, record_trace=False)
    interpreter.load_machine(initial_machine)
    interpreter.run()
    return interpreter.steps, interpreter.machine

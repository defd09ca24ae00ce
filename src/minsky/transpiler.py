"""Transpiler: eliminates control states from a Minsky machine program.

A multi-state ("magnificent") program A with `n` tapes and `m` states is
rewritten into a single-state ("marvellous") program B with `n + 2m` tapes.
Original states are relabeled densely: collect every state mentioned by a
rule, sort ascending, number them 0..m-1. Remapped state `s` owns two
auxiliary tapes:

    n + 2s      active flag: 1 while B emulates state s
    n + 2s + 1  relay: holds the flag for one micro-step of a self-loop

Each rule of A firing in `s` and moving to `t` keeps its first `n`
adjustments and is guarded by -1 on the active flag of `s`:

    s != t   one rule, +1 on the active flag of `t`

             0 [1, 1] 1   ->   0 [1, 1, -1, 0, 1, 0] 0

    s == t   rule alpha, +1 on the relay of `s`, followed by rule beta that
             moves the relay back to the active flag

             0 [-1, 2] 0  ->   0 [-1, 2, -1, 1, 0, 0] 0
                               0 [ 0, 0,  1, -1, 0, 0] 0

Translations are emitted in the order of the original rules, so B's
first-applicable scan replays exactly the firings of A. The initial tapes of
B copy those of A and set the active flag of A's initial state.
"""

from typing import Dict, List, Optional

from .machine import Machine, Program, Rule, State
from .validation import StructuralError, validate_machine, validate_program


# The unique state of a transpiled program
MARV_STATE: State = 0

# Action adjustment for emulated-state tapes
ACTION_ADJ = 1

# Guard adjustment for emulated-state tapes
GUARD_ADJ = -1


def compute_state_map(program: Program) -> Dict[State, State]:
    """Map original states to dense states 0..m-1.

    States are sorted by value, so the mapping does not depend on rule order
    or set iteration order.
    """
    return {state: new for new, state in enumerate(sorted(program.states()))}


def active_tape(num_orig_tapes: int, emulated: State) -> int:
    """Index of the active-flag tape for a remapped state."""
    return num_orig_tapes + 2 * emulated


def relay_tape(num_orig_tapes: int, emulated: State) -> int:
    """Index of the relay tape for a remapped state."""
    return num_orig_tapes + 2 * emulated + 1


def translate_rule(
    rule: Rule,
    state_map: Dict[State, State],
    num_orig_tapes: int,
    num_tapes: int
) -> List[Rule]:
    """Translate one original rule into one or two single-state rules.

    Args:
        rule: Rule of the original program
        state_map: Output of compute_state_map
        num_orig_tapes: Tape count of the original program
        num_tapes: Tape count of the transpiled program

    Returns:
        [alpha, beta] for a self-loop, [rule] for a state change
    """
    cur = state_map[rule.cur_state]

    new_adj = [0] * num_tapes
    new_adj[:num_orig_tapes] = rule.adjustments
    new_adj[active_tape(num_orig_tapes, cur)] = GUARD_ADJ

    if rule.is_self_loop():
        new_adj[relay_tape(num_orig_tapes, cur)] = ACTION_ADJ

        # sends the machine back to the active flag of rule.cur_state
        aux_adj = [0] * num_tapes
        aux_adj[active_tape(num_orig_tapes, cur)] = ACTION_ADJ
        aux_adj[relay_tape(num_orig_tapes, cur)] = GUARD_ADJ

        return [
            Rule(MARV_STATE, MARV_STATE, new_adj),
            Rule(MARV_STATE, MARV_STATE, aux_adj),
        ]

    nxt = state_map[rule.next_state]
    new_adj[active_tape(num_orig_tapes, nxt)] = ACTION_ADJ
    return [Rule(MARV_STATE, MARV_STATE, new_adj)]


def transpile(program: Program) -> Program:
    """Rewrite a program into an equivalent single-state program.

    The input is not modified.

    Raises:
        StructuralError: If the input program is malformed
    """
    validate_program(program)

    state_map = compute_state_map(program)
    num_tapes = program.num_tapes + 2 * len(state_map)

    new_rules: List[Rule] = []
    for rule in program.rules:
        new_rules.extend(translate_rule(rule, state_map, program.num_tapes, num_tapes))

    return Program(num_tapes, new_rules)


def transpile_machine(machine: Machine, program: Program) -> Machine:
    """Build the initial machine of the transpiled program.

    The first tapes copy the original counters. The active flag of the
    original initial state is 1 and every other auxiliary tape is 0. An
    initial state that no rule mentions gets no flag; both programs then
    halt immediately.

    Args:
        machine: Initial machine for the original program
        program: Original (not transpiled) program

    Raises:
        StructuralError: If the machine does not fit the program
    """
    validate_program(program)
    validate_machine(machine, program)

    state_map = compute_state_map(program)
    tapes = machine.dump_tapes() + [0] * (2 * len(state_map))
    if machine.machine_state in state_map:
        tapes[active_tape(program.num_tapes, state_map[machine.machine_state])] = 1

    return Machine(MARV_STATE, tapes)


def emulated_state(machine: Machine, program: Program) -> Optional[State]:
    """Recover the original state a transpiled machine is emulating.

    A set relay counts as its own state, since the pending micro-step returns
    to it.

    Args:
        machine: Machine running the transpiled program
        program: Original (not transpiled) program

    Returns:
        Original state, or None if no auxiliary flag is set

    Raises:
        StructuralError: If the machine has the wrong number of tapes or
            more than one flag set
    """
    state_map = compute_state_map(program)
    expected = program.num_tapes + 2 * len(state_map)
    if machine.num_tapes != expected:
        raise StructuralError(
            f"Machine has {machine.num_tapes} tapes, transpiled program expects {expected}",
            expected=expected,
            actual=machine.num_tapes
        )

    found = [
        orig
        for orig, new in state_map.items()
        if machine.tape_pos(active_tape(program.num_tapes, new))
        or machine.tape_pos(relay_tape(program.num_tapes, new))
    ]
    if len(found) > 1:
        raise StructuralError(f"Multiple emulated states are set: {sorted(found)}")
    return found[0] if found else None


def transpiled_fuel(fuel: int) -> int:
    """Fuel for a transpiled program that suffices whenever the original
    halts within `fuel` (a self-loop firing costs two micro-steps)."""
    return 2 * fuel

"""Integration tests for library and example programs."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from minsky import Machine, interpret, read_program, transpile, transpile_machine
from minsky.library import (
    adder,
    adder_program,
    get_registry,
    mult,
    mult_program,
    six_rule_mult,
    six_rule_mult_program,
)
from minsky.transpiler import transpiled_fuel


PROGRAMS_DIR = Path(__file__).parent.parent / "programs"


class TestAdder:
    """Test the one-rule adder."""

    def test_add_x_y(self):
        """x + y for small inputs, including zeros."""
        for x in range(0, 6):
            for y in range(0, 6):
                assert adder(x, y) == x + y

    def test_scenarios(self):
        """1 + 1 and 100 + 11."""
        assert adder(1, 1) == 2
        assert adder(100, 11) == 111

    def test_negative_input(self):
        """Negative inputs are rejected."""
        with pytest.raises(ValueError, match="x must be non-negative"):
            adder(-1, 2)


class TestMultipliers:
    """Test the 4-rule and 6-rule multipliers."""

    def test_mult_x_y(self):
        """Both multipliers compute x * y and agree."""
        for x in range(0, 6):
            for y in range(1, 6):
                assert mult(x, y) == x * y
                assert six_rule_mult(x, y) == x * y

    def test_seven_times_eleven(self):
        """Both constructions give 77."""
        assert mult(7, 11) == 77
        assert six_rule_mult(7, 11) == 77

    def test_six_rule_mult_by_zero(self):
        """The 6-rule machine accepts y = 0."""
        assert six_rule_mult(9, 0) == 0

    def test_mult_needs_positive_y(self):
        """The 4-rule machine stores y - 1, so y must be at least 1."""
        with pytest.raises(ValueError, match="y must be at least 1, got 0"):
            mult(3, 0)
        with pytest.raises(ValueError, match="x must be non-negative"):
            mult(-1, 2)

    def test_big_mult(self):
        """100 * 100 within 20201 steps."""
        steps, end_machine = interpret(Machine(0, [0, 100, 0, 99]), mult_program(), 20201)
        assert end_machine.tape_pos(0) == 10_000
        assert steps <= 20201
        assert mult(100, 100) == 10_000

    def test_six_rule_mult_clears_x(self):
        """After the last round the 6-rule machine empties tape 1."""
        _, end_machine = interpret(Machine(0, [0, 7, 11, 0]), six_rule_mult_program(), 1000)
        assert end_machine.dump_tapes() == [77, 0, 0, 0]
        assert end_machine.machine_state == 0


class TestProgramFiles:
    """Test the .m3 example programs."""

    def test_adder_file(self):
        """adder.m3 matches the library adder."""
        program = read_program(PROGRAMS_DIR / "adder.m3")
        assert program == adder_program()
        _, end_machine = interpret(Machine(0, [1, 3]), program, 100)
        assert end_machine.tape_pos(0) == 4

    def test_mult_file(self):
        """mult.m3 computes 2 * 3."""
        program = read_program(PROGRAMS_DIR / "mult.m3")
        assert program == mult_program()
        _, end_machine = interpret(Machine(0, [0, 2, 0, 2]), program, 100)
        assert end_machine.tape_pos(0) == 6

    def test_six_rule_mult_file(self):
        """6-rule-mult.m3 computes 7 * 11."""
        program = read_program(PROGRAMS_DIR / "6-rule-mult.m3")
        assert program == six_rule_mult_program()
        _, end_machine = interpret(Machine(0, [0, 7, 11, 0]), program, 1000)
        assert end_machine.tape_pos(0) == 77

    def test_marvellous_mult_file(self):
        """marvellous-mult.m3 is the translation of mult.m3 and computes 7 * 13."""
        program = read_program(PROGRAMS_DIR / "marvellous-mult.m3")
        assert program == transpile(read_program(PROGRAMS_DIR / "mult.m3"))

        x, y = 7, 13
        _, end_machine = interpret(Machine(0, [0, x, 0, y - 1, 1, 0, 0, 0]), program, 1000)
        assert end_machine.tape_pos(0) == x * y

    def test_transpiled_six_rule_mult(self):
        """The 3-state multiplier survives state elimination."""
        program = six_rule_mult_program()
        machine = Machine(0, [0, 7, 11, 0])
        _, end_machine = interpret(
            transpile_machine(machine, program), transpile(program), transpiled_fuel(1000)
        )
        assert end_machine.dump_tapes()[:4] == [77, 0, 0, 0]


class TestProgramRegistry:
    """Test the frozen program registry."""

    @pytest.fixture
    def registry(self):
        return get_registry()

    def test_singleton(self, registry):
        """get_registry always returns the same instance."""
        assert get_registry() is registry

    def test_keys(self, registry):
        """All library programs are registered."""
        assert registry.get_valid_keys() == {"adder", "mult", "six_rule_mult"}

    def test_frozen(self, registry):
        """No programs can be added after initialization."""
        assert registry.is_frozen() is True
        with pytest.raises(RuntimeError, match="frozen"):
            registry.register("noop", lambda: adder_program(), lambda x, y: [x, y])

    def test_build(self, registry):
        """build returns a fresh program."""
        assert registry.build("mult") == mult_program()

    def test_unknown_key(self, registry):
        """Unknown programs raise KeyError."""
        with pytest.raises(KeyError):
            registry.build("divide")
        with pytest.raises(KeyError):
            registry.initial_machine("divide", 1, 2)

    @pytest.mark.parametrize("key", ["adder", "mult", "six_rule_mult"])
    def test_initial_machine(self, registry, key):
        """Registered initial tapes compute the expected result."""
        x, y = 6, 4
        expected = x + y if key == "adder" else x * y
        _, end_machine = interpret(registry.initial_machine(key, x, y), registry.build(key), 1000)
        assert end_machine.tape_pos(0) == expected

"""Tests for the gradio demo's run function."""

import sys
from pathlib import Path

import pytest

gr = pytest.importorskip("gradio")

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent / "demo"))

from gradio_app import EXAMPLE_PROGRAMS, run_program


ADDER_SOURCE = "tapes: 2\n0 [1, -1] 0\n"


class TestRunProgram:
    """Test run_program as the web form calls it."""

    def test_adder(self):
        """3 + 4 runs to completion."""
        summary, trace, transpiled = run_program(ADDER_SOURCE, "3,4", 0, 100, False)
        assert "Tapes: [7, 0]" in summary
        assert "Halted: Yes" in summary
        assert "Step 3" in trace
        assert transpiled == ""

    def test_transpiled_adder(self):
        """The translated run reports the original tapes and emulated state."""
        summary, _, transpiled = run_program(ADDER_SOURCE, "3,4", 0, 100, True)
        assert "Original tapes: [7, 0]" in summary
        assert "Emulated state: 0" in summary
        assert transpiled.startswith("tapes: 4")

    def test_cleared_state_field(self):
        """An empty Number field arrives as None and is reported, not raised."""
        summary, trace, transpiled = run_program(ADDER_SOURCE, "3,4", None, 100, False)
        assert summary.startswith("Error:")
        assert trace == ""
        assert transpiled == ""

    def test_bad_tapes(self):
        """Non-numeric tapes are reported."""
        summary, _, _ = run_program(ADDER_SOURCE, "3,x", 0, 100, False)
        assert summary.startswith("Error:")

    def test_out_of_fuel(self):
        """Fuel exhaustion shows up in the summary."""
        summary, _, _ = run_program(ADDER_SOURCE, "0,50", 0, 10, False)
        assert "Out of fuel" in summary

    def test_overflow(self):
        """A counter overflow shows up in the summary."""
        source = "tapes: 2\n0 [2147483647, -1] 0\n"
        summary, _, _ = run_program(source, "0,2", 0, 100, False)
        assert "overflows 32-bit range" in summary

    def test_examples_run(self):
        """Every bundled example halts within the default slider range."""
        for name, (source, tapes) in EXAMPLE_PROGRAMS.items():
            summary, _, _ = run_program(source, tapes, 0, 10000, False)
            assert "Halted: Yes" in summary, name

"""Minsky Machine Interactive Demo.

A Gradio web interface for running and transpiling Minsky machine programs.

Usage:
    cd /path/to/minsky
    python demo/gradio_app.py

Features:
    - Write or load `.m3` programs
    - Run them directly or through the single-state transpiler
    - See the step-by-step rule firing trace
    - Inspect the transpiled program text
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from minsky import (
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


# =============================================================================
# Example Programs
# =============================================================================

TRACE_LIMIT = 100


def _example_programs() -> dict:
    registry = get_registry()
    examples = {}
    for key, inputs in (("adder", (3, 4)), ("mult", (7, 11)), ("six_rule_mult", (7, 11))):
        machine = registry.initial_machine(key, *inputs)
        examples[key] = (format_program(registry.build(key)), ",".join(map(str, machine.dump_tapes())))
    examples["Custom"] = ("tapes: 1\n", "0")
    return examples


EXAMPLE_PROGRAMS = _example_programs()


# =============================================================================
# Execution Functions
# =============================================================================

def run_program(source: str, tapes: str, state: int, fuel: int, use_transpiler: bool) -> tuple:
    """Execute a program and return results.

    Args:
        source: `.m3` program text
        tapes: Comma separated initial counters
        state: Initial machine state
        fuel: Maximum rule firings
        use_transpiler: Run the single-state translation instead

    Returns:
        Tuple of (summary_text, trace_text, transpiled_text)
    """
    if not source.strip():
        return "Error: No program provided", "", ""

    try:
        program = parse_program(source)
        machine = Machine(int(state), [int(t) for t in tapes.replace(",", " ").split()])
    except (ParseError, StructuralError, ValueError, TypeError) as e:
        return f"Error: {e}", "", ""

    original = program
    fuel = int(fuel)
    transpiled_text = ""
    try:
        if use_transpiler:
            machine = transpile_machine(machine, program)
            program = transpile(program)
            fuel = transpiled_fuel(fuel)
            transpiled_text = format_program(program)

        interpreter = Interpreter(program, fuel=fuel)
        interpreter.load_machine(machine)
    except StructuralError as e:
        return f"Error: {e}", "", transpiled_text

    try:
        trace = interpreter.run()
        error_msg = None
    except (OutOfFuel, OverflowError) as e:
        trace = interpreter.trace
        error_msg = str(e)

    # Format summary
    summary = interpreter.get_summary()
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Steps: {summary['steps']}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"State: {summary['state']}",
        f"Tapes: {summary['tapes']}",
    ]
    if use_transpiler and error_msg is None:
        summary_lines.append(f"Original tapes: {summary['tapes'][:original.num_tapes]}")
        summary_lines.append(f"Emulated state: {emulated_state(interpreter.machine, original)}")
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")
    summary_text = "\n".join(summary_lines)

    # Format trace
    trace_lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    for entry in trace[:TRACE_LIMIT]:
        trace_lines.append(f"\n--- Step {entry.step} (state {entry.pre_state['state']}) ---")
        trace_lines.append(f"Rule {entry.rule_index}: {entry.rule}")

        changes = [
            f"T{i}: {before} -> {after}"
            for i, (before, after) in enumerate(zip(entry.pre_state["tapes"], entry.post_state["tapes"]))
            if before != after
        ]
        if changes:
            trace_lines.append(f"Changes: {', '.join(changes)}")

    if len(trace) > TRACE_LIMIT:
        trace_lines.append(f"\n... ({len(trace) - TRACE_LIMIT} more entries)")

    return summary_text, "\n".join(trace_lines), transpiled_text


def load_example(example_name: str) -> tuple:
    """Load an example program and its initial tapes."""
    return EXAMPLE_PROGRAMS.get(example_name, ("", ""))


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="Minsky Machine Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # Minsky Machines

        Run counter-machine programs with a first-applicable, restart-from-top
        interpreter, or translate them into an equivalent single-state program.

        **Pipeline**: `source -> parse -> validate -> interpret | transpile -> interpret`
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="mult",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["mult"][0],
                    label="Source (.m3)",
                    lines=12,
                    placeholder="tapes: 2\n0 [1, -1] 0"
                )

                tapes_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["mult"][1],
                    label="Initial Tapes"
                )

                gr.Markdown("### Settings")

                with gr.Row():
                    state_input = gr.Number(value=0, precision=0, label="Initial State")
                    fuel_slider = gr.Slider(
                        minimum=100,
                        maximum=100000,
                        value=10000,
                        step=100,
                        label="Fuel"
                    )

                transpile_checkbox = gr.Checkbox(
                    value=False,
                    label="Run single-state translation"
                )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                summary_output = gr.Textbox(
                    label="Summary",
                    lines=10,
                    interactive=False
                )
                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )
                transpiled_output = gr.Textbox(
                    label="Transpiled Program",
                    lines=10,
                    interactive=False
                )

        with gr.Accordion("Format Reference", open=False):
            gr.Markdown("""
            | Line | Meaning |
            |------|---------|
            | `tapes: N` | Number of counters (must come first) |
            | `s [a1, ..., aN] t` | In state `s`, adjust tapes, move to state `t` |
            | `# ...` or `; ...` | Comment |

            A negative entry is a **guard**: the tape must hold at least that much,
            which is then subtracted. A non-negative entry is an **action** added on firing.
            Rules earlier in the file have priority; after every firing scanning restarts
            from the first rule.
            """)

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input, tapes_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[program_input, tapes_input, state_input, fuel_slider, transpile_checkbox],
            outputs=[summary_output, trace_output, transpiled_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )

"""Parser: reads and writes Minsky machine programs in `.m3` text form.

Format:
    # comments start with '#' or ';'
    tapes: 3
    0 [1, -1, 2] 1
    1 [0 1 0] 2

The header declares the number of tapes. Each following line is one rule:
current state, bracketed adjustments (separated by commas and/or
whitespace), next state. Rule order in the file is rule priority.

Parsing is purely syntactic; the result is then handed to validation, so a
rule with the wrong number of adjustments raises StructuralError naming the
rule index.
"""

import re
from pathlib import Path
from typing import List, Optional, Union

from .machine import Program, Rule
from .validation import validate_program


HEADER_RE = re.compile(r'^tapes\s*:\s*(\d+)$', re.IGNORECASE)
RULE_RE = re.compile(r'^(\d+)\s*\[([^\]]*)\]\s*(\d+)$')
ENTRY_SPLIT_RE = re.compile(r'[\s,]+')


class ParseError(ValueError):
    """Syntax error in `.m3` source.

    Attributes:
        line_number: 1-based line of the error (None if not line-specific)
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


def _strip_comment(line: str) -> str:
    return re.sub(r'[;#].*$', '', line).strip()


def _parse_adjustments(body: str, line_number: int) -> List[int]:
    entries = [e for e in ENTRY_SPLIT_RE.split(body.strip()) if e]
    try:
        return [int(e) for e in entries]
    except ValueError:
        raise ParseError(f"Invalid tape adjustment in [{body}]", line_number)


def parse_program(source: str) -> Program:
    """Parse `.m3` source into a validated Program.

    Args:
        source: Program text

    Returns:
        Parsed Program

    Raises:
        ParseError: On a missing/duplicate header or a malformed rule line
        StructuralError: If a rule's width differs from the declared tapes
    """
    num_tapes = None
    rules: List[Rule] = []

    for line_number, raw_line in enumerate(source.split("\n"), start=1):
        line = _strip_comment(raw_line)
        if not line:
            continue

        header_match = HEADER_RE.match(line)
        if header_match:
            if num_tapes is not None:
                raise ParseError("Duplicate tapes header", line_number)
            num_tapes = int(header_match.group(1))
            continue

        if num_tapes is None:
            raise ParseError("Expected 'tapes: N' header before rules", line_number)

        rule_match = RULE_RE.match(line)
        if not rule_match:
            raise ParseError(f"Unknown rule format: {line}", line_number)

        rules.append(Rule(
            cur_state=int(rule_match.group(1)),
            next_state=int(rule_match.group(3)),
            adjustments=_parse_adjustments(rule_match.group(2), line_number)
        ))

    if num_tapes is None:
        raise ParseError("Missing 'tapes: N' header")

    program = Program(num_tapes, rules)
    validate_program(program)
    return program


def read_program(path: Union[str, Path]) -> Program:
    """Read and parse a `.m3` file."""
    return parse_program(Path(path).read_text())


def format_program(program: Program) -> str:
    """Render a program as `.m3` source.

    Adjustment columns are right-aligned so guards and actions line up.
    """
    width = max(
        (len(str(a)) for rule in program.rules for a in rule.adjustments),
        default=1
    )
    lines = [f"tapes: {program.num_tapes}"]
    for rule in program.rules:
        adjs = ", ".join(str(a).rjust(width) for a in rule.adjustments)
        lines.append(f"{rule.cur_state} [{adjs}] {rule.next_state}")
    return "\n".join(lines) + "\n"

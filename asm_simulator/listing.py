"""
Static listing and program check.

Execution decodes lazily, so a typo on a line that is never reached is
never reported by a run. These helpers decode every line up front for
inspection; they do not execute anything.
"""

from __future__ import annotations
from typing import List, Sequence

from .decoder import decode_line
from .errors import SimulatorError, UnknownLabel
from .labels import build_label_table
from .lexer import LABEL_RE, is_blank_or_comment


def check_program(lines: Sequence[str]) -> List[SimulatorError]:
    """Return every error a full decode of the program finds.

    Label-table errors (missing @MAIN, duplicates) come first, followed by
    per-line decode errors and jumps to labels that are never defined.
    """
    errors: List[SimulatorError] = []
    labels = None
    try:
        labels = build_label_table(lines)
    except SimulatorError as e:
        errors.append(e)

    for index, line in enumerate(lines):
        try:
            instr = decode_line(line, index + 1)
        except SimulatorError as e:
            if not any(prev.line_num == e.line_num for prev in errors):
                errors.append(e)
            continue
        label = getattr(instr, 'label', None)
        if label is not None and labels is not None and label not in labels:
            errors.append(UnknownLabel(f"Undefined label @{label}", index + 1, line))
    return errors


def get_listing(lines: Sequence[str]) -> str:
    """One row per source line: number, decoded instruction, or the error.

    Label definitions are shown as "@NAME:", blank/comment lines as "-".
    """
    rows: List[str] = []
    for index, line in enumerate(lines):
        line_num = index + 1
        stripped = line.strip()
        if is_blank_or_comment(line):
            text = "-"
        elif LABEL_RE.match(stripped):
            text = f"{stripped}:"
        else:
            try:
                text = f"    {decode_line(line, line_num)}"
            except SimulatorError as e:
                text = f"!!  {e.kind}: {e.message}"
        rows.append(f"{line_num:5d}  {text}")
    return "\n".join(rows)

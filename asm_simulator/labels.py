"""
Label table builder.

Labels may be used before they are defined (forward jumps) and MAIN may
sit anywhere in the file, so the whole program is indexed once before
execution starts. This is the first half of a two-pass scheme: the scan
here only records where each @NAME lives, instruction lines are decoded
later, one at a time, by the executor.
"""

from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Dict, Mapping, Sequence

from .errors import DuplicateLabel, MalformedLine, MissingEntryLabel
from .lexer import tokenize_line

__all__ = ['ENTRY_LABEL', 'build_label_table']

logger = logging.getLogger(__name__)

ENTRY_LABEL = "MAIN"


def build_label_table(lines: Sequence[str]) -> Mapping[str, int]:
    """Map every label name to the 0-based index of its defining line.

    Raises MalformedLine for a label line with anything after @NAME,
    DuplicateLabel on a second definition, MissingEntryLabel when no
    @MAIN exists.
    """
    table: Dict[str, int] = {}

    for index, line in enumerate(lines):
        if not line.lstrip().startswith('@'):
            continue

        line_num = index + 1
        tokens = tokenize_line(line, line_num)
        if len(tokens) != 1:
            raise MalformedLine(
                f"Label definition @{tokens[0].value} must stand alone on its line",
                line_num, line)

        name = tokens[0].value
        if name in table:
            raise DuplicateLabel(
                f"Label @{name} already defined at line {table[name] + 1}",
                line_num, line)
        table[name] = index

    if ENTRY_LABEL not in table:
        raise MissingEntryLabel(f"Program has no @{ENTRY_LABEL} entry label")

    logger.info("Resolved %d label(s); entry @%s at line %d",
                len(table), ENTRY_LABEL, table[ENTRY_LABEL] + 1)
    return MappingProxyType(table)

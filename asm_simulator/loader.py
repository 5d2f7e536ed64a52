"""
Program loading.

A program is an immutable, 0-indexed tuple of raw text lines. Line
order is the only addressing scheme: blank and comment lines keep their
index, nothing is renumbered.
"""

from __future__ import annotations
from pathlib import Path
from typing import Tuple, Union

from .errors import LoadError

Program = Tuple[str, ...]


def split_lines(source: str) -> Program:
    """Split source text into program lines (a trailing newline adds no line)."""
    raw_lines = source.split('\n')
    if raw_lines and raw_lines[-1] == '':
        raw_lines.pop()
    return tuple(line.rstrip('\r') for line in raw_lines)


def load_program(path: Union[str, Path]) -> Program:
    """Read a program file from disk.

    Any I/O or decoding failure is reported as LoadError, before the
    label scan ever sees the text.
    """
    p = Path(path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise LoadError(f"File not found: {p}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Cannot read {p}: {e}") from e
    return split_lines(source)

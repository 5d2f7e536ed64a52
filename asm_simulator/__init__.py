"""
asm_simulator — line-oriented assembly interpreter
==================================================
Runs programs written in a small register-machine assembly language:
32 signed 32-bit registers ($0 hardwired to zero), an operand stack,
labelled jumps and integer printing.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌──────────┐    ┌──────────┐
    │ Program  │───>│  Labels  │───>│ Tokenizer │───>│ Decoder  │───>│ Executor │
    │ (lines)  │    │ (1 scan) │    │ (per line)│    │ (instr)  │    │ (loop)   │
    └──────────┘    └──────────┘    └───────────┘    └──────────┘    └──────────┘

    - loader.py:       file -> immutable tuple of lines
    - labels.py:       one linear scan, @NAME -> line index, requires @MAIN
    - lexer.py:        regex tokenizer for a single line
    - decoder.py:      operand format table -> Instruction dataclasses
    - instructions.py: one frozen dataclass per opcode
    - machine.py:      register file, operand stack, instruction pointer
    - executor.py:     fetch/decode/execute loop, stop reasons, trace
    - listing.py:      eager decode of every line for listings and checks

The label scan runs once before execution; tokenizing and decoding
happen lazily, one line at a time, as the executor fetches them.
"""

__version__ = "0.2.0"

from .errors import (
    SimulatorError, LoadError, MissingEntryLabel, DuplicateLabel, MalformedLine,
    UnknownOpcode, ArityMismatch, InvalidOperandKind, RegisterOutOfRange,
    UnknownLabel, DivisionByZero, StackUnderflow,
)
from .loader import Program, load_program, split_lines
from .lexer import Token, TokenType, tokenize_line
from .labels import ENTRY_LABEL, build_label_table
from .decoder import decode, decode_line
from .machine import Machine, OperandStack, RegisterFile, NUM_REGISTERS
from .executor import DEFAULT_MAX_STEPS, Executor, StopReason
from .listing import check_program, get_listing


def run_program(lines, *, sink=None, max_steps=None) -> Executor:
    """Run a program to completion and return the finished Executor.

    Args:
        lines: Program text as a sequence of lines (or one str, which is
            split on newlines).
        sink: Optional callable receiving each PRINTed integer.
        max_steps: Instruction budget (default DEFAULT_MAX_STEPS, 0 = none).

    Returns:
        The Executor; check .stop_reason for EXIT, END or TIMEOUT, and
        .output / .machine for results.

    Raises:
        SimulatorError: the load-time or run-time error that stopped the
            program. The executor state at the failure is discarded.
    """
    if isinstance(lines, str):
        lines = split_lines(lines)
    executor = Executor(lines, sink=sink)
    reason = executor.run(max_steps=max_steps)
    if reason is StopReason.ERROR:
        raise executor.error
    return executor

"""
Decoder: tokenized line -> Instruction.

Decoding is total over token lists: every input either yields an
Instruction or raises one of UnknownOpcode, ArityMismatch,
InvalidOperandKind or RegisterOutOfRange. Nothing defaults silently.

The operand format table below is the single source of truth for the
instruction set; adding an opcode means adding one row here, one class
in instructions.py and one handler in the executor.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple, Type

from . import instructions as ins
from .errors import ArityMismatch, InvalidOperandKind, RegisterOutOfRange, UnknownOpcode
from .lexer import Token, TokenType, tokenize_line
from .machine import NUM_REGISTERS

__all__ = ['OPERAND_FORMATS', 'decode', 'decode_line']

REG = TokenType.REGISTER
IMM = TokenType.IMMEDIATE
LBL = TokenType.LABEL

_KIND_NAMES = {
    REG: "register",
    IMM: "immediate",
    LBL: "label",
    TokenType.OPCODE: "opcode",
}


# ──────────────────────────────────────────────
# Opcode format table
# ──────────────────────────────────────────────
# Format: { 'MNEMONIC': (instruction class, operand kinds) }

OPERAND_FORMATS: Dict[str, Tuple[Type, Tuple[TokenType, ...]]] = {}


def _fmt(cls: Type, *kinds: TokenType):
    OPERAND_FORMATS[cls.mnemonic] = (cls, kinds)


_fmt(ins.LoadImmediate, REG, IMM)
_fmt(ins.Move,          REG, REG)
_fmt(ins.Add,           REG, REG, REG)
_fmt(ins.Sub,           REG, REG, REG)
_fmt(ins.Mul,           REG, REG, REG)
_fmt(ins.Div,           REG, REG, REG)
_fmt(ins.Rem,           REG, REG, REG)
_fmt(ins.Print,         REG)
_fmt(ins.Jump,          LBL)
_fmt(ins.Beq,           REG, REG, LBL)
_fmt(ins.Bne,           REG, REG, LBL)
_fmt(ins.Blt,           REG, REG, LBL)
_fmt(ins.Ble,           REG, REG, LBL)
_fmt(ins.Bgt,           REG, REG, LBL)
_fmt(ins.Bge,           REG, REG, LBL)
_fmt(ins.Exit)
_fmt(ins.Skip)
_fmt(ins.Push,          REG)
_fmt(ins.Pop,           REG)


def _describe(kinds: Sequence[TokenType]) -> str:
    return " ".join(_KIND_NAMES[k] for k in kinds) or "no operands"


def _a(kind: TokenType) -> str:
    name = _KIND_NAMES[kind]
    return f"an {name}" if name[0] in "aeiou" else f"a {name}"


def decode(tokens: List[Token], line_num: int = 0, line_text: str = "") -> ins.Instruction:
    """Turn one line's tokens into an Instruction.

    An empty token list (blank/comment line) and a lone label definition
    both decode to Skip: those lines keep their index but do nothing.
    """
    if not tokens:
        return ins.Skip()

    head, operands = tokens[0], tokens[1:]

    if head.type is LBL:
        if operands:
            raise ArityMismatch(
                f"Label definition @{head.value} takes no operands", line_num, line_text)
        return ins.Skip()

    fmt = OPERAND_FORMATS.get(head.value)
    if fmt is None:
        raise UnknownOpcode(f"Unknown opcode '{head.value}'", line_num, line_text)
    cls, kinds = fmt

    if len(operands) != len(kinds):
        raise ArityMismatch(
            f"{head.value} expects {len(kinds)} operand(s) ({_describe(kinds)}), "
            f"got {len(operands)}", line_num, line_text)

    values = []
    for position, (tok, kind) in enumerate(zip(operands, kinds), 1):
        if tok.type is not kind:
            raise InvalidOperandKind(
                f"{head.value} operand {position} must be {_a(kind)}, "
                f"got {_a(tok.type)} {tok.text!r}", line_num, line_text)
        if kind is REG and tok.value >= NUM_REGISTERS:
            raise RegisterOutOfRange(
                f"Register {tok.text} out of range ($0-${NUM_REGISTERS - 1})",
                line_num, line_text)
        values.append(tok.value)

    return cls(*values)


def decode_line(line: str, line_num: int = 0) -> ins.Instruction:
    """Tokenize and decode one source line."""
    return decode(tokenize_line(line, line_num), line_num, line)

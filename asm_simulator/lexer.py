"""
Line tokenizer for the assembly simulator.

Splits a single source line into lexemes: the opcode keyword followed by
zero or more operands. Operand shapes:

    $n      register reference      $0 .. $31 (range checked by the decoder)
    -12     immediate integer       optionally signed decimal, 32-bit
    @NAME   label reference         uppercase letters A-Z only

A line whose first lexeme is @NAME is a label definition. Blank lines
and full-line // comments tokenize to an empty list (they behave like
SKIP). Inline comments are not supported: anything after the operands
that is not itself a valid operand raises MalformedLine.
"""

from __future__ import annotations
import enum
import re
from dataclasses import dataclass
from typing import List, Union

from .errors import MalformedLine

__all__ = ['TokenType', 'Token', 'tokenize_line', 'is_blank_or_comment']

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


# ──────────────────────────────────────────────
# Token types
# ──────────────────────────────────────────────

class TokenType(enum.Enum):
    OPCODE = "OPCODE"
    REGISTER = "REGISTER"
    IMMEDIATE = "IMMEDIATE"
    LABEL = "LABEL"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Union[str, int]
    text: str
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, C{self.col})"


# ──────────────────────────────────────────────
# Lexeme patterns
# ──────────────────────────────────────────────

LEXEME_RE = re.compile(r'\S+')
COMMENT_RE = re.compile(r'^\s*(?://.*)?$')
OPCODE_RE = re.compile(r'^[A-Za-z]+$')
REGISTER_RE = re.compile(r'^\$(\d+)$')
IMMEDIATE_RE = re.compile(r'^[+-]?\d+$')
LABEL_RE = re.compile(r'^@([A-Z]+)$')


def is_blank_or_comment(line: str) -> bool:
    return COMMENT_RE.match(line) is not None


def _label_token(text: str, col: int, line_num: int, line: str) -> Token:
    m = LABEL_RE.match(text)
    if not m:
        raise MalformedLine(
            f"Bad label {text!r} (labels are @ followed by uppercase letters A-Z)",
            line_num, line)
    return Token(TokenType.LABEL, m.group(1), text, col)


def _operand_token(text: str, col: int, line_num: int, line: str) -> Token:
    m = REGISTER_RE.match(text)
    if m:
        return Token(TokenType.REGISTER, int(m.group(1)), text, col)

    if IMMEDIATE_RE.match(text):
        value = int(text)
        if not INT32_MIN <= value <= INT32_MAX:
            raise MalformedLine(
                f"Immediate {text} does not fit in a signed 32-bit word",
                line_num, line)
        return Token(TokenType.IMMEDIATE, value, text, col)

    if text.startswith('@'):
        return _label_token(text, col, line_num, line)

    if text.startswith('//'):
        raise MalformedLine(
            f"Unexpected trailing text at column {col} (inline comments are not supported)",
            line_num, line)
    raise MalformedLine(f"Unrecognized operand {text!r} at column {col}", line_num, line)


def tokenize_line(line: str, line_num: int = 0) -> List[Token]:
    """Tokenize one source line.

    Returns [] for blank/comment lines. line_num is only used to
    position errors.
    """
    if is_blank_or_comment(line):
        return []

    tokens: List[Token] = []
    for m in LEXEME_RE.finditer(line):
        text, col = m.group(0), m.start() + 1

        if not tokens:
            # Leading lexeme: label definition or opcode keyword
            if text.startswith('@'):
                tokens.append(_label_token(text, col, line_num, line))
            elif OPCODE_RE.match(text):
                tokens.append(Token(TokenType.OPCODE, text, text, col))
            else:
                raise MalformedLine(
                    f"Expected an opcode or label definition, got {text!r}",
                    line_num, line)
            continue

        tokens.append(_operand_token(text, col, line_num, line))

    return tokens

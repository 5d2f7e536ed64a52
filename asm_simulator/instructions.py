"""
Instruction definitions for the assembly simulator.

One frozen dataclass per opcode, grouped by operand shape. The decoder
produces these from tokenized lines and the executor dispatches on their
mnemonic. Register fields hold plain indices, label fields hold the
label name without the leading @.

    LI    $rd imm           rd <- imm
    MOVE  $rd $rs           rd <- rs
    ADD   $rd $rs $rt       rd <- rs + rt      (also SUB MUL DIV REM)
    PRINT $rs               emit rs
    JUMP  @L                ip <- L
    BEQ   $rs $rt @L        if rs == rt: ip <- L (also BNE BLT BLE BGT BGE)
    EXIT                    halt
    SKIP                    no-op
    PUSH  $rs               stack.push(rs)
    POP   $rd               rd <- stack.pop()
"""

from __future__ import annotations
import operator
from dataclasses import dataclass
from typing import Callable, ClassVar, Union


# ──────────────────────────────────────────────
# Operand-shape base classes
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class NoOperandInstr:
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return self.mnemonic


@dataclass(frozen=True)
class RegImmInstr:
    rd: int
    imm: int
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} ${self.rd} {self.imm}"


@dataclass(frozen=True)
class OneRegInstr:
    reg: int
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} ${self.reg}"


@dataclass(frozen=True)
class TwoRegInstr:
    rd: int
    rs: int
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} ${self.rd} ${self.rs}"


@dataclass(frozen=True)
class ArithmeticInstr:
    """rd <- rs <op> rt"""
    rd: int
    rs: int
    rt: int
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} ${self.rd} ${self.rs} ${self.rt}"


@dataclass(frozen=True)
class JumpInstr:
    label: str
    mnemonic: ClassVar[str] = ""

    def __str__(self) -> str:
        return f"{self.mnemonic} @{self.label}"


@dataclass(frozen=True)
class BranchInstr:
    """Conditional jump to label when relation(rs, rt) holds (signed)."""
    rs: int
    rt: int
    label: str
    mnemonic: ClassVar[str] = ""
    relation: ClassVar[Callable[[int, int], bool]] = staticmethod(operator.eq)

    def __str__(self) -> str:
        return f"{self.mnemonic} ${self.rs} ${self.rt} @{self.label}"

    def taken(self, a: int, b: int) -> bool:
        return self.relation(a, b)


# ──────────────────────────────────────────────
# Concrete instructions
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class LoadImmediate(RegImmInstr):
    mnemonic: ClassVar[str] = "LI"


@dataclass(frozen=True)
class Move(TwoRegInstr):
    mnemonic: ClassVar[str] = "MOVE"


@dataclass(frozen=True)
class Add(ArithmeticInstr):
    mnemonic: ClassVar[str] = "ADD"


@dataclass(frozen=True)
class Sub(ArithmeticInstr):
    mnemonic: ClassVar[str] = "SUB"


@dataclass(frozen=True)
class Mul(ArithmeticInstr):
    mnemonic: ClassVar[str] = "MUL"


@dataclass(frozen=True)
class Div(ArithmeticInstr):
    mnemonic: ClassVar[str] = "DIV"


@dataclass(frozen=True)
class Rem(ArithmeticInstr):
    mnemonic: ClassVar[str] = "REM"


@dataclass(frozen=True)
class Print(OneRegInstr):
    mnemonic: ClassVar[str] = "PRINT"


@dataclass(frozen=True)
class Jump(JumpInstr):
    mnemonic: ClassVar[str] = "JUMP"


@dataclass(frozen=True)
class Beq(BranchInstr):
    mnemonic: ClassVar[str] = "BEQ"
    relation = staticmethod(operator.eq)


@dataclass(frozen=True)
class Bne(BranchInstr):
    mnemonic: ClassVar[str] = "BNE"
    relation = staticmethod(operator.ne)


@dataclass(frozen=True)
class Blt(BranchInstr):
    mnemonic: ClassVar[str] = "BLT"
    relation = staticmethod(operator.lt)


@dataclass(frozen=True)
class Ble(BranchInstr):
    mnemonic: ClassVar[str] = "BLE"
    relation = staticmethod(operator.le)


@dataclass(frozen=True)
class Bgt(BranchInstr):
    mnemonic: ClassVar[str] = "BGT"
    relation = staticmethod(operator.gt)


@dataclass(frozen=True)
class Bge(BranchInstr):
    mnemonic: ClassVar[str] = "BGE"
    relation = staticmethod(operator.ge)


@dataclass(frozen=True)
class Exit(NoOperandInstr):
    mnemonic: ClassVar[str] = "EXIT"


@dataclass(frozen=True)
class Skip(NoOperandInstr):
    mnemonic: ClassVar[str] = "SKIP"


@dataclass(frozen=True)
class Push(OneRegInstr):
    mnemonic: ClassVar[str] = "PUSH"


@dataclass(frozen=True)
class Pop(OneRegInstr):
    mnemonic: ClassVar[str] = "POP"


Instruction = Union[
    LoadImmediate, Move, Add, Sub, Mul, Div, Rem, Print, Jump,
    Beq, Bne, Blt, Ble, Bgt, Bge, Exit, Skip, Push, Pop,
]

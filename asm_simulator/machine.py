"""
Machine state: register file, operand stack, instruction pointer.

Register model:
  $0        — hardwired zero. Writes are accepted and discarded, so
              "LI $0 5" is a no-op and $0 always reads 0.
  $1..$31   — general purpose, signed 32-bit.

All register writes wrap to a signed 32-bit word (two's complement),
so ADD/SUB/MUL overflow wraps around instead of growing a Python int.
"""

from __future__ import annotations
from typing import List, Tuple

from .errors import RegisterOutOfRange, StackUnderflow

NUM_REGISTERS = 32
WORD_BITS = 32

_WORD_MASK = (1 << WORD_BITS) - 1
_SIGN_BIT = 1 << (WORD_BITS - 1)


def wrap32(value: int) -> int:
    """Wrap an int to a signed 32-bit value."""
    value &= _WORD_MASK
    return value - (1 << WORD_BITS) if value & _SIGN_BIT else value


class RegisterFile:
    """32 signed integer registers, $0 fixed at zero."""

    __slots__ = ('_values',)

    def __init__(self):
        self._values: List[int] = [0] * NUM_REGISTERS

    def _check(self, index: int):
        if not 0 <= index < NUM_REGISTERS:
            raise RegisterOutOfRange(
                f"Register ${index} out of range ($0-${NUM_REGISTERS - 1})")

    def read(self, index: int) -> int:
        self._check(index)
        return self._values[index]

    def write(self, index: int, value: int):
        """Store value (wrapped to 32 bits). Writes to $0 are discarded."""
        self._check(index)
        if index != 0:
            self._values[index] = wrap32(value)

    def __getitem__(self, index: int) -> int:
        return self.read(index)

    def __setitem__(self, index: int, value: int):
        self.write(index, value)

    def snapshot(self) -> Tuple[int, ...]:
        return tuple(self._values)

    def reset(self):
        self._values = [0] * NUM_REGISTERS

    def display(self) -> str:
        """Non-zero registers, e.g. "$1=5 $2=3" (or "all zero")."""
        parts = [f"${i}={v}" for i, v in enumerate(self._values) if v]
        return " ".join(parts) if parts else "all zero"


class OperandStack:
    """LIFO stack of signed integers. Popping an empty stack is fatal."""

    __slots__ = ('_items',)

    def __init__(self):
        self._items: List[int] = []

    def push(self, value: int):
        self._items.append(wrap32(value))

    def pop(self) -> int:
        if not self._items:
            raise StackUnderflow("POP on empty operand stack")
        return self._items.pop()

    def peek(self) -> int:
        if not self._items:
            raise StackUnderflow("Operand stack is empty")
        return self._items[-1]

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> Tuple[int, ...]:
        """Stack contents, bottom first."""
        return tuple(self._items)

    def reset(self):
        self._items.clear()


class Machine:
    """Runtime aggregate mutated by the executor.

    ip is the 0-based line index of the next instruction to execute.
    """

    __slots__ = ('ip', 'regs', 'stack', 'steps')

    def __init__(self, ip: int = 0):
        self.ip: int = ip
        self.regs = RegisterFile()
        self.stack = OperandStack()
        self.steps: int = 0     # instructions executed so far

    def display(self) -> str:
        stack = ", ".join(str(v) for v in self.stack.snapshot())
        return (f"ip={self.ip} steps={self.steps} regs[{self.regs.display()}] "
                f"stack[{stack}]")

    def reset(self, ip: int = 0):
        self.ip = ip
        self.regs.reset()
        self.stack.reset()
        self.steps = 0

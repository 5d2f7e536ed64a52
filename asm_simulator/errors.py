"""
Error taxonomy for the assembly simulator.

Every failure the simulator can report is a SimulatorError subclass.
None of them are recoverable: the loader, the label scan and the
executor stop on the first one they hit.

Load-time errors (raised before any instruction runs):
  LoadError           — program file missing or unreadable
  MissingEntryLabel   — no @MAIN definition
  DuplicateLabel      — the same @NAME defined twice

Run-time errors (raised by the instruction that triggers them):
  MalformedLine       — a lexeme matches no operand shape
  UnknownOpcode       — opcode word not in the instruction set
  ArityMismatch       — wrong number of operands
  InvalidOperandKind  — right count, wrong kind (e.g. JUMP 5)
  RegisterOutOfRange  — $n with n outside 0..31
  UnknownLabel        — jump/branch to a label that was never defined
  DivisionByZero      — DIV/REM with a zero divisor register
  StackUnderflow      — POP on an empty operand stack
"""

from __future__ import annotations

__all__ = [
    'SimulatorError', 'LoadError', 'MissingEntryLabel', 'DuplicateLabel',
    'MalformedLine', 'UnknownOpcode', 'ArityMismatch', 'InvalidOperandKind',
    'RegisterOutOfRange', 'UnknownLabel', 'DivisionByZero', 'StackUnderflow',
]


class SimulatorError(Exception):
    """Base class for every simulator failure.

    line_num is 1-based (0 when the error is not tied to a source line).
    """

    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.message = message
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def at_line(self, line_num: int, line_text: str = "") -> SimulatorError:
        """Attach a source position if the error does not carry one yet."""
        if not self.line_num:
            self.line_num = line_num
            self.line_text = line_text
            self.args = (f"Line {line_num}: {self.message}",)
        return self


class LoadError(SimulatorError):
    pass


class MissingEntryLabel(SimulatorError):
    pass


class DuplicateLabel(SimulatorError):
    pass


class MalformedLine(SimulatorError):
    pass


class UnknownOpcode(SimulatorError):
    pass


class ArityMismatch(SimulatorError):
    pass


class InvalidOperandKind(SimulatorError):
    pass


class RegisterOutOfRange(SimulatorError):
    pass


class UnknownLabel(SimulatorError):
    pass


class DivisionByZero(SimulatorError):
    pass


class StackUnderflow(SimulatorError):
    pass

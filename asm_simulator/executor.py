"""
Executor — the fetch/decode/execute loop.

Integrates:
  - label table (labels.py), built once before the first step
  - line decoder (decoder.py), applied lazily at fetch time
  - machine state (machine.py)

Execution model, per step:
  1. Fetch the source line at ip
  2. Decode it (decoded instructions are cached per line index)
  3. Execute the handler for its mnemonic -> registers / stack / output
  4. Pick the next ip: ip + 1, a label's line, or stop

Stop reasons:
  - EXIT:     EXIT instruction executed                 (halted)
  - END:      ip ran past the last line                 (halted)
  - TIMEOUT:  step budget exhausted, run() can be called again
  - BREAK:    breakpoint line reached, run() resumes past it
  - ERROR:    SimulatorError raised, kept in .error     (failed)

There is no built-in instruction budget in the language itself, so a
program like "@MAIN / JUMP @MAIN" only ever stops through TIMEOUT.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Set

from . import instructions as ins
from .decoder import decode_line
from .errors import DivisionByZero, SimulatorError, UnknownLabel
from .labels import ENTRY_LABEL, build_label_table
from .machine import Machine

__all__ = ['StopReason', 'Executor', 'DEFAULT_MAX_STEPS']

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10_000_000


class StopReason(Enum):
    EXIT = 'EXIT'
    END = 'END'
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'
    ERROR = 'ERROR'


_HALTED = (StopReason.EXIT, StopReason.END)
_TERMINAL = (StopReason.EXIT, StopReason.END, StopReason.ERROR)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero (Python's // floors)."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _trunc_rem(a: int, b: int) -> int:
    """Remainder with the sign of the dividend, pairs with _trunc_div."""
    return a - b * _trunc_div(a, b)


class Executor:
    """Runs one program on one Machine.

    Usage:
        ex = Executor(lines, sink=print)
        reason = ex.run(max_steps=100_000)
        if reason is StopReason.ERROR:
            print(ex.error)

    Load-time errors (MissingEntryLabel, DuplicateLabel, malformed label
    lines) raise from the constructor. Everything after that is reported
    through StopReason.ERROR with the machine state left as it was when
    the failing instruction was fetched.
    """

    DEFAULT_MAX_STEPS = DEFAULT_MAX_STEPS

    def __init__(self, lines: Sequence[str], sink: Optional[Callable[[int], None]] = None):
        self.lines = tuple(lines)
        self.labels = build_label_table(self.lines)
        self.entry = self.labels[ENTRY_LABEL]
        self.machine = Machine(self.entry)

        # PRINT side effects: every value is recorded, and handed to sink if set
        self.sink = sink
        self.output: List[int] = []

        self.stop_reason: Optional[StopReason] = None
        self.error: Optional[SimulatorError] = None

        self._decoded: Dict[int, ins.Instruction] = {}
        self._breakpoints: Set[int] = set()
        self._break_at: Optional[int] = None

        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # State
    # ══════════════════════════════════════════════

    @property
    def halted(self) -> bool:
        return self.stop_reason in _HALTED

    @property
    def failed(self) -> bool:
        return self.stop_reason is StopReason.ERROR

    def _stop(self, reason: StopReason) -> StopReason:
        self.stop_reason = reason
        if reason is StopReason.ERROR:
            logger.debug("Failed at line %d: %s", self.machine.ip + 1, self.error)
        else:
            logger.info("Stopped (%s) at ip=%d after %d step(s)",
                        reason.value, self.machine.ip, self.machine.steps)
        return reason

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if self.stop_reason in _TERMINAL:
            return self.stop_reason

        m = self.machine
        ip = m.ip

        if ip >= len(self.lines):
            return self._stop(StopReason.END)

        # Breakpoint check (stop once, resume past it on the next call)
        if ip in self._breakpoints and self._break_at != ip:
            self._break_at = ip
            return self._stop(StopReason.BREAK)
        self._break_at = None

        instr = None
        try:
            instr = self._fetch(ip)
            target = self._dispatch[instr.mnemonic](instr)
        except _ExitProgram:
            m.steps += 1
            self._record(ip, instr)
            return self._stop(StopReason.EXIT)
        except SimulatorError as e:
            self.error = e.at_line(ip + 1, self.lines[ip])
            return self._stop(StopReason.ERROR)

        m.steps += 1
        self._record(ip, instr)
        m.ip = ip + 1 if target is None else target

        if m.ip >= len(self.lines):
            return self._stop(StopReason.END)
        return None

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Run until a stop condition.

        Args:
            max_steps: Instruction budget for this call (default
                DEFAULT_MAX_STEPS); 0 or less runs without a budget.

        Returns:
            StopReason indicating why execution stopped
        """
        if max_steps is None:
            max_steps = self.DEFAULT_MAX_STEPS

        logger.info("Running %d line(s) from @%s (line %d)",
                    len(self.lines), ENTRY_LABEL, self.entry + 1)

        executed = 0
        while max_steps <= 0 or executed < max_steps:
            reason = self.step()
            if reason is not None:
                return reason
            executed += 1

        return self._stop(StopReason.TIMEOUT)

    def _fetch(self, ip: int) -> ins.Instruction:
        instr = self._decoded.get(ip)
        if instr is None:
            instr = decode_line(self.lines[ip], ip + 1)
            self._decoded[ip] = instr
        return instr

    def _resolve(self, label: str) -> int:
        target = self.labels.get(label)
        if target is None:
            raise UnknownLabel(f"Undefined label @{label}")
        return target

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr) -> next ip, or None for ip + 1

    def _build_dispatch(self) -> Dict[str, Callable]:
        """Build mnemonic -> handler dispatch table."""
        return {
            # ── Data transfer ──
            'LI':    self._op_li,
            'MOVE':  self._op_move,

            # ── Arithmetic ──
            'ADD':   self._op_add,
            'SUB':   self._op_sub,
            'MUL':   self._op_mul,
            'DIV':   self._op_div,
            'REM':   self._op_rem,

            # ── Output ──
            'PRINT': self._op_print,

            # ── Control flow ──
            'JUMP':  self._op_jump,
            'BEQ':   self._op_branch,
            'BNE':   self._op_branch,
            'BLT':   self._op_branch,
            'BLE':   self._op_branch,
            'BGT':   self._op_branch,
            'BGE':   self._op_branch,
            'EXIT':  self._op_exit,
            'SKIP':  self._op_skip,

            # ── Stack ──
            'PUSH':  self._op_push,
            'POP':   self._op_pop,
        }

    def _op_li(self, i: ins.LoadImmediate):
        self.machine.regs.write(i.rd, i.imm)

    def _op_move(self, i: ins.Move):
        regs = self.machine.regs
        regs.write(i.rd, regs.read(i.rs))

    def _op_add(self, i: ins.Add):
        regs = self.machine.regs
        regs.write(i.rd, regs.read(i.rs) + regs.read(i.rt))

    def _op_sub(self, i: ins.Sub):
        regs = self.machine.regs
        regs.write(i.rd, regs.read(i.rs) - regs.read(i.rt))

    def _op_mul(self, i: ins.Mul):
        regs = self.machine.regs
        regs.write(i.rd, regs.read(i.rs) * regs.read(i.rt))

    def _divisor(self, i: ins.ArithmeticInstr) -> int:
        divisor = self.machine.regs.read(i.rt)
        if divisor == 0:
            raise DivisionByZero(f"{i.mnemonic} by zero (${i.rt} is 0)")
        return divisor

    def _op_div(self, i: ins.Div):
        divisor = self._divisor(i)
        regs = self.machine.regs
        regs.write(i.rd, _trunc_div(regs.read(i.rs), divisor))

    def _op_rem(self, i: ins.Rem):
        divisor = self._divisor(i)
        regs = self.machine.regs
        regs.write(i.rd, _trunc_rem(regs.read(i.rs), divisor))

    def _op_print(self, i: ins.Print):
        value = self.machine.regs.read(i.reg)
        self.output.append(value)
        if self.sink is not None:
            self.sink(value)

    def _op_jump(self, i: ins.Jump) -> int:
        return self._resolve(i.label)

    def _op_branch(self, i: ins.BranchInstr) -> Optional[int]:
        target = self._resolve(i.label)
        regs = self.machine.regs
        if i.taken(regs.read(i.rs), regs.read(i.rt)):
            return target
        return None

    def _op_exit(self, i: ins.Exit):
        raise _ExitProgram()

    def _op_skip(self, i: ins.Skip):
        pass

    def _op_push(self, i: ins.Push):
        self.machine.stack.push(self.machine.regs.read(i.reg))

    def _op_pop(self, i: ins.Pop):
        self.machine.regs.write(i.reg, self.machine.stack.pop())

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, line_index: int):
        """Stop before executing the 0-based line index."""
        self._breakpoints.add(line_index)

    def remove_breakpoint(self, line_index: int):
        self._breakpoints.discard(line_index)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def _record(self, ip: int, instr: ins.Instruction):
        if self._trace or logger.isEnabledFor(logging.DEBUG):
            entry = f"{ip + 1:5d}: {str(instr):24s} {self.machine.regs.display()}"
            logger.debug(entry)
            if self._trace:
                self._trace_output.append(entry)

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Start over from @MAIN with a fresh machine (breakpoints are kept)."""
        self.machine.reset(self.entry)
        self.output.clear()
        self.stop_reason = None
        self.error = None
        self._break_at = None
        self._trace_output.clear()


# Internal exception for flow control
class _ExitProgram(Exception):
    pass

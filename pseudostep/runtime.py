# -*- coding: utf-8 -*-
"""
Step-driven runtime for pseudocode programs.

The program counter, the variable environment and the frame stack are plain
attributes of PseudoRuntime, so a host can run a program one statement per
step() call and look at the state in between.  Only user function calls use
Python recursion, and a call always finishes inside the step that made it.
"""

import copy
import logging
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Type

from .blocks import FunctionDef, build_function_table, match_end
from .errors import CallDepthError, EvaluationError
from .evaluator import Evaluator, coerce_input, format_value, normalize_number
from .frames import CallFrame, ExecutionState, ForFrame, Frame, IfFrame, WhileFrame
from .statements import ProgramLine, Stmt, tokenize

log = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 50
RETURN_SLOT = '__return__'
DEFAULT_PROMPT = 'Enter value for {name}:'
MAX_LIST_LENGTH = 1_000_000

OutputSink = Callable[[str], None]
InputProvider = Callable[[str], Optional[str]]


class PseudoRuntime:
    def __init__(self, source: str, output: Optional[OutputSink] = None,
                 input_provider: Optional[InputProvider] = None, *,
                 max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> None:
        self.lines: List[ProgramLine] = tokenize(source)
        self.statements: List[Stmt] = [pl.stmt for pl in self.lines]
        self.functions: Dict[str, FunctionDef] = build_function_table(self.statements)
        self.output: OutputSink = output if output is not None else (lambda _text: None)
        self.input_provider = input_provider
        self.max_call_depth = max_call_depth
        self.evaluator = Evaluator(self.call_function)
        self._ends: Dict[tuple, int] = {}
        self.reset()

    # -----------------------------
    # host interface
    # -----------------------------
    def reset(self) -> None:
        """Back to the first statement with no variables; the parse is kept."""
        self.env: Dict[str, Any] = {}
        self.pc = 0
        self.frames: List[Frame] = []
        self.call_depth = 0
        self.finished = not self.lines

    def step(self) -> ExecutionState:
        if self.finished or self.pc >= len(self.lines):
            self.finished = True
            return self.snapshot()
        ln = self.pc
        self.exec_stmt(ln, self.statements[ln])
        if self.pc >= len(self.lines):
            self.finished = True
        return self.snapshot()

    def run(self, max_steps: Optional[int] = None) -> ExecutionState:
        """Step until finished, or until ``max_steps`` steps have been taken."""
        state = self.snapshot()
        steps = 0
        while not state.finished:
            if max_steps is not None and steps >= max_steps:
                log.info("stopped after %d steps", steps)
                break
            state = self.step()
            steps += 1
        return state

    def snapshot(self) -> ExecutionState:
        source_line = self.lines[self.pc].source_line if self.pc < len(self.lines) else None
        return ExecutionState(
            variables=copy.deepcopy(self.env),
            current_line=self.pc,
            source_line=source_line,
            finished=self.finished,
            call_stack=tuple(copy.deepcopy(self.frames)),
        )

    def statement_counts(self) -> Dict[str, int]:
        return dict(Counter(st[0] for st in self.statements))

    # -----------------------------
    # dispatcher
    # -----------------------------
    def exec_stmt(self, ln: int, st: Stmt) -> None:
        typ = st[0]
        log.debug("%d: %s", ln, self.lines[ln].text)

        if typ == 'COMMENT':
            self._jump(ln + 1)

        elif typ == 'ASSIGN':
            _, name, index_text, expr = st
            if index_text is None:
                # lists are values: never alias another variable's list
                self.env[name] = copy.deepcopy(self.evaluate(expr))
            else:
                index = self.evaluate(index_text)
                self._store_item(name, index, self.evaluate(expr))
            self._jump(ln + 1)

        elif typ == 'OUTPUT':
            self.output(format_value(self.evaluate(st[1])))
            self._jump(ln + 1)

        elif typ == 'INPUT':
            _, name, prompt_text = st
            if prompt_text:
                prompt = format_value(self.evaluate(prompt_text))
            else:
                prompt = DEFAULT_PROMPT.format(name=name)
            reply = self.input_provider(prompt) if self.input_provider else None
            if reply is not None:
                self.env[name] = coerce_input(reply)
            self._jump(ln + 1)

        elif typ == 'IF_HDR':
            mid = self._match('IF', ln)
            has_else = mid < len(self.statements) and self.statements[mid][0] == 'ELSE'
            if self.condition(st[1]):
                self.frames.append(IfFrame(ln))
                self._jump(ln + 1)
            elif has_else:
                self.frames.append(IfFrame(ln))
                self._jump(mid + 1)
            else:
                self._jump(mid + 1)

        elif typ == 'IF_INLINE':
            _, cond, then_stmt, else_stmt = st
            branch = then_stmt if self.condition(cond) else else_stmt
            if branch is None:
                self._jump(ln + 1)
            else:
                self.exec_stmt(ln, branch)

        elif typ == 'ELSE':
            # end of the THEN part: go to the END IF, which pops the frame
            self._jump(self._match('IF', ln))

        elif typ == 'END_IF':
            if self.frames and isinstance(self.frames[-1], IfFrame):
                self.frames.pop()
            self._jump(ln + 1)

        elif typ == 'WHILE':
            frame = self._open_frame(WhileFrame, ln)
            if self.condition(st[1]):
                if frame is None:
                    self.frames.append(WhileFrame(ln))
                self._jump(ln + 1)
            else:
                if frame is not None:
                    self._drop(frame)
                self._jump(self._match('WHILE', ln) + 1)

        elif typ == 'END_WHILE':
            top = self.frames[-1] if self.frames else None
            if isinstance(top, WhileFrame):
                self._jump(top.line)
            else:
                self._jump(ln + 1)

        elif typ == 'FOR':
            _, var, start, end, step = st
            frame = self._open_frame(ForFrame, ln)
            if frame is None:
                self.env[var] = self.evaluate(start)
                self.frames.append(ForFrame(ln, var=var, end=self.evaluate(end),
                                            step=self._for_step(step)))
                self._jump(ln + 1)
            elif self._in_range(frame):
                self._jump(ln + 1)
            else:
                self._drop(frame)
                self._jump(self._match('FOR', ln) + 1)

        elif typ == 'NEXT':
            top = self.frames[-1] if self.frames else None
            if isinstance(top, ForFrame):
                self._next(top, ln)
            else:
                self._jump(ln + 1)

        elif typ == 'DEF_FN':
            # a definition met by falling through is skipped, not run
            self._jump(self._match(st[1], ln) + 1)

        elif typ == 'RETURN':
            frame = self._current_call()
            if frame is None:
                self._jump(ln + 1)
            else:
                value = self.evaluate(st[1]) if st[1] else None
                self._finish_call(frame, value)

        elif typ == 'CALL':
            self.evaluate(st[1])
            self._jump(ln + 1)

        else:
            # FNEND by fall-through, UNKNOWN
            if typ == 'UNKNOWN':
                log.debug("skipping unrecognized statement %r", st[1])
            self._jump(ln + 1)

    # -----------------------------
    # function calls
    # -----------------------------
    def call_function(self, name: str, args: List[Any]) -> Any:
        """Run a user FUNCTION/PROCEDURE to completion and return its value.

        The caller's environment and resume line are kept on the CallFrame
        and put back when the call ends, however it ends.
        """
        fn = self.functions.get(name)
        if fn is None:
            raise EvaluationError(f"{name} is not a function")
        if self.call_depth >= self.max_call_depth:
            log.warning("call to %s refused: depth limit %d reached", name, self.max_call_depth)
            raise CallDepthError(name, self.max_call_depth)

        frame = CallFrame(fn.start, name=name, resume_line=self.pc, saved_env=self.env)
        self.env = {param: (copy.deepcopy(args[i]) if i < len(args) else None)
                    for i, param in enumerate(fn.params)}
        self.frames.append(frame)
        self.pc = fn.start + 1
        self.call_depth += 1
        log.debug("call %s%r", name, tuple(args))
        try:
            while not frame.returned and fn.start < self.pc < min(fn.end, len(self.lines)):
                ln = self.pc
                self.exec_stmt(ln, self.statements[ln])
        finally:
            self.call_depth -= 1
            if not frame.returned:
                # fell off the end of the body
                self._finish_call(frame, None)
        return frame.value

    def _finish_call(self, frame: CallFrame, value: Any) -> None:
        self._drop(frame)
        frame.returned = True
        frame.value = value
        self.env = frame.saved_env
        if value is not None:
            self.env[RETURN_SLOT] = value
        self._jump(frame.resume_line)
        log.debug("return from %s: %r", frame.name, value)

    def _current_call(self) -> Optional[CallFrame]:
        for frame in reversed(self.frames):
            if isinstance(frame, CallFrame):
                return frame
        return None

    # -----------------------------
    # helpers
    # -----------------------------
    def evaluate(self, text: str):
        return self.evaluator.evaluate(text, self.env)

    def condition(self, text: str) -> bool:
        return self.evaluator.evaluate_condition(text, self.env)

    def _jump(self, target: int) -> None:
        self.pc = min(target, len(self.lines))

    def _match(self, kind: str, line: int) -> int:
        key = (kind, line)
        if key not in self._ends:
            self._ends[key] = match_end(self.statements, kind, line)
        return self._ends[key]

    def _open_frame(self, cls: Type[Frame], line: int) -> Optional[Frame]:
        """Frame of type ``cls`` opened at ``line`` in the current call, if any."""
        for frame in reversed(self.frames):
            if isinstance(frame, CallFrame):
                return None
            if isinstance(frame, cls) and frame.line == line:
                return frame
        return None

    def _drop(self, frame: Frame) -> None:
        """Pop ``frame`` and everything above it."""
        for i in range(len(self.frames) - 1, -1, -1):
            if self.frames[i] is frame:
                del self.frames[i:]
                return

    def _store_item(self, name: str, index: Any, value: Any) -> None:
        index = normalize_number(index)
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            log.warning("ignoring assignment to %s[%r]: bad index", name, index)
            return
        if index >= MAX_LIST_LENGTH:
            log.warning("ignoring assignment to %s[%d]: index past %d", name, index, MAX_LIST_LENGTH)
            return
        target = self.env.get(name)
        if not isinstance(target, list):
            target = self.env[name] = []
        if index >= len(target):
            target.extend([None] * (index + 1 - len(target)))
        target[index] = copy.deepcopy(value)

    def _for_step(self, text: Optional[str]):
        if not text:
            return 1
        step = self.evaluate(text)
        if isinstance(step, bool) or not isinstance(step, (int, float)):
            log.warning("FOR step %r is not a number; using 1", step)
            return 1
        return step

    def _in_range(self, frame: ForFrame) -> bool:
        value = self.env.get(frame.var)
        try:
            if frame.step < 0:
                return value >= frame.end
            return value <= frame.end
        except TypeError:
            log.warning("FOR %s: cannot compare %r with %r; leaving the loop",
                        frame.var, value, frame.end)
            return False

    def _next(self, frame: ForFrame, ln: int) -> None:
        value = self.env.get(frame.var)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            log.warning("FOR %s: %r is not a number; leaving the loop", frame.var, value)
            self._drop(frame)
            self._jump(ln + 1)
            return
        self.env[frame.var] = normalize_number(value + frame.step)
        self._jump(frame.line)

# -*- coding: utf-8 -*-
"""Control-flow frames and the execution snapshot handed to hosts."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple


@dataclass
class Frame:
    line: int                   # opening line of the block, header line for calls
    kind: ClassVar[str] = ''


@dataclass
class IfFrame(Frame):
    kind: ClassVar[str] = 'IF'


@dataclass
class WhileFrame(Frame):
    kind: ClassVar[str] = 'WHILE'


@dataclass
class ForFrame(Frame):
    var: str = ''
    end: Any = None
    step: Any = 1
    kind: ClassVar[str] = 'FOR'


@dataclass
class CallFrame(Frame):
    name: str = ''
    resume_line: int = 0
    saved_env: Dict[str, Any] = field(default_factory=dict)
    # return slot, filled by RETURN
    returned: bool = False
    value: Any = None
    kind: ClassVar[str] = 'FUNCTION_CALL'


@dataclass(frozen=True)
class ExecutionState:
    """Point-in-time copy of the runtime state; changing it changes nothing."""
    variables: Dict[str, Any]
    current_line: int
    source_line: Optional[int]
    finished: bool
    call_stack: Tuple[Frame, ...] = ()

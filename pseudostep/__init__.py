# -*- coding: utf-8 -*-
"""
pseudostep: a step-driven interpreter for block-structured teaching pseudocode.

    from pseudostep import PseudoRuntime

    rt = PseudoRuntime(source, output=print)
    while not rt.step().finished:
        pass
"""

import logging

from .blocks import FunctionDef, build_function_table, match_end
from .errors import CallDepthError, EvaluationError, PseudoError
from .evaluator import Evaluator, format_value
from .frames import CallFrame, ExecutionState, ForFrame, Frame, IfFrame, WhileFrame
from .runtime import DEFAULT_MAX_CALL_DEPTH, RETURN_SLOT, PseudoRuntime
from .statements import ProgramLine, classify, tokenize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "PseudoRuntime", "ExecutionState",
    "Frame", "IfFrame", "WhileFrame", "ForFrame", "CallFrame",
    "Evaluator", "format_value",
    "FunctionDef", "build_function_table", "match_end",
    "ProgramLine", "classify", "tokenize",
    "PseudoError", "EvaluationError", "CallDepthError",
    "DEFAULT_MAX_CALL_DEPTH", "RETURN_SLOT",
]

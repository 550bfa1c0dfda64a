# -*- coding: utf-8 -*-
"""Exceptions raised inside the engine.

None of these ever reach the host: the evaluator turns them into its
fail-soft results (literal text for expressions, False for conditions).
"""


class PseudoError(Exception):
    """Base class for engine errors."""


class EvaluationError(PseudoError):
    """An expression could not be evaluated (unbound name, bad index, ...)."""


class CallDepthError(EvaluationError):
    """A user function call would exceed the configured recursion bound."""

    def __init__(self, name: str, depth: int) -> None:
        super().__init__(f"call depth {depth} exceeded calling {name}")
        self.name = name
        self.depth = depth

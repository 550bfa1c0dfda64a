# -*- coding: utf-8 -*-
"""
Expression / condition evaluation over a variable environment.

Both entry points are best effort: they never raise.  A failed expression
evaluates to its own (stripped) text, a failed condition to False.
"""

import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional

from lark.exceptions import LarkError

from .errors import EvaluationError
from .grammar import Node, parse_expression

log = logging.getLogger(__name__)

Env = Dict[str, Any]
CallFunction = Callable[[str, List[Any]], Any]

UNDEFINED_TEXT = "undefined"
EXPONENT_THRESHOLD = 1e21

# numbers accepted from INPUT: the expression grammar's NUMBER with a sign
_DECIMAL = re.compile(r'^[+-]?\d+(\.\d+)?([eE][+-]?\d+)?$')
_INTEGER = re.compile(r'^[+-]?\d+$')
_EXPONENT = re.compile(r'e([+-])0*(?=\d)')

# anything a malformed expression can raise while being parsed or walked
FAILURES = (EvaluationError, LarkError, TypeError, ValueError, ArithmeticError,
            IndexError, KeyError, RecursionError)


def _length(*args):
    if args and isinstance(args[0], list):
        return len(args[0])
    return 0


BUILTINS = {
    'LENGTH': _length,
    'LEN': _length,
    'SIZE': _length,
}


# -----------------------------
# value helpers
# -----------------------------
def normalize_number(value):
    """Integral floats collapse to int, so 10 / 2 prints as 5.

    Magnitudes from 1e21 up stay floats and print in exponent form.
    """
    if isinstance(value, float) and value.is_integer() and abs(value) < EXPONENT_THRESHOLD:
        return int(value)
    return value


def _float_text(value: float) -> str:
    # 1.5e-07 -> 1.5e-7
    return _EXPONENT.sub(r'e\1', repr(value))


def format_value(value) -> str:
    """String form used for output and string concatenation."""
    if value is None:
        return UNDEFINED_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        value = normalize_number(value)
        return _float_text(value) if isinstance(value, float) else str(value)
    if isinstance(value, list):
        return ",".join(format_value(item) for item in value)
    return str(value)


def coerce_input(text: str):
    """Numbers typed at an INPUT prompt become numbers, anything else stays text."""
    s = text.strip()
    if not _DECIMAL.match(s):
        return text
    if _INTEGER.match(s):
        return int(s)
    return normalize_number(float(s))


def split_top_level(text: str, sep: str = '+') -> List[str]:
    """Split on ``sep`` outside quotes, parentheses and brackets."""
    parts = []
    buf = []
    quote = None
    depth = 0
    for ch in text:
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif ch in '([':
            depth += 1
        elif ch in ')]':
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(''.join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    parts.append(''.join(buf).strip())
    return parts


def _is_number(value):
    return isinstance(value, (int, float))


def _numbers(a, b, op):
    if not (_is_number(a) and _is_number(b)):
        raise EvaluationError(f"{op} needs numbers, got {a!r} and {b!r}")


def _modulo(a, b):
    # sign follows the dividend
    if isinstance(a, int) and isinstance(b, int):
        r = abs(a) % abs(b)
        return r if a >= 0 else -r
    return normalize_number(math.fmod(a, b))


def _item(target, idx):
    if isinstance(idx, float) and idx.is_integer():
        idx = int(idx)
    if isinstance(idx, bool) or not isinstance(idx, int):
        raise EvaluationError(f"bad index {idx!r}")
    if not isinstance(target, (list, str)):
        raise EvaluationError(f"cannot index {target!r}")
    if idx < 0:
        raise IndexError(idx)
    return target[idx]


# -----------------------------
# evaluator
# -----------------------------
class Evaluator:
    """Evaluates expression and condition text against an environment.

    ``call_function(name, args)`` runs a user-defined function; it is supplied
    by the runtime and raises EvaluationError for unknown names.
    """

    def __init__(self, call_function: Optional[CallFunction] = None) -> None:
        self.call_function = call_function

    def evaluate(self, text: str, env: Env):
        text = text.strip()
        if '"' in text or "'" in text:
            parts = split_top_level(text)
            if len(parts) > 1:
                return ''.join(format_value(self.evaluate(part, env)) for part in parts)
        try:
            return self.eval_node(parse_expression(text), env)
        except FAILURES as exc:
            log.warning("could not evaluate %r (%s); using the text as is", text, exc)
            return text

    def evaluate_condition(self, text: str, env: Env) -> bool:
        text = text.strip()
        try:
            return bool(self.eval_node(parse_expression(text), env))
        except FAILURES as exc:
            log.warning("could not evaluate condition %r (%s); treating it as false", text, exc)
            return False

    def eval_node(self, node: Node, env: Env):
        typ = node[0]
        if typ in ('NUM', 'STR', 'BOOL'):
            return node[1]
        if typ == 'VAR':
            name = node[1]
            if name not in env:
                raise EvaluationError(f"{name} is not defined")
            return env[name]
        if typ == 'LIST':
            return [self.eval_node(item, env) for item in node[1]]
        if typ == 'INDEX':
            return _item(self.eval_node(node[1], env), self.eval_node(node[2], env))
        if typ == 'CALL':
            return self._call(node[1], node[2], env)
        if typ == 'UN':
            v = self.eval_node(node[2], env)
            if not _is_number(v):
                raise EvaluationError(f"unary {node[1]} needs a number, got {v!r}")
            return -v if node[1] == '-' else +v
        if typ == 'NOT':
            return not self.eval_node(node[1], env)
        if typ == 'AND':
            return bool(self.eval_node(node[1], env)) and bool(self.eval_node(node[2], env))
        if typ == 'OR':
            return bool(self.eval_node(node[1], env)) or bool(self.eval_node(node[2], env))
        if typ == 'BIN':
            return self._binary(node[1], self.eval_node(node[2], env), self.eval_node(node[3], env))
        if typ == 'POW':
            a, b = self.eval_node(node[1], env), self.eval_node(node[2], env)
            _numbers(a, b, '^')
            result = a ** b
            if isinstance(result, complex):
                raise EvaluationError(f"{a} ^ {b} is not real")
            return normalize_number(result)
        if typ == 'CMP':
            return self._compare(node[1], self.eval_node(node[2], env), self.eval_node(node[3], env))
        raise EvaluationError(f"unknown expression node {typ}")

    def _binary(self, op, a, b):
        if op == '+':
            if isinstance(a, str) or isinstance(b, str):
                return format_value(a) + format_value(b)
            if isinstance(a, list) and isinstance(b, list):
                return a + b
            _numbers(a, b, op)
            return normalize_number(a + b)
        _numbers(a, b, op)
        if op == '-': return normalize_number(a - b)
        if op == '*': return normalize_number(a * b)
        if op == '/': return normalize_number(a / b)
        if op == 'MOD': return _modulo(a, b)
        raise EvaluationError(f"unknown operator {op}")

    def _compare(self, op, a, b):
        if op == '=':  return a == b
        if op == '<>': return a != b
        if op == '<':  return a < b
        if op == '<=': return a <= b
        if op == '>':  return a > b
        if op == '>=': return a >= b
        raise EvaluationError(f"unknown comparison {op}")

    def _call(self, name, arg_nodes, env):
        builtin = BUILTINS.get(name.upper())
        if builtin is not None:
            return builtin(*[self._soft(arg, env) for arg in arg_nodes])
        args = [self.eval_node(arg, env) for arg in arg_nodes]
        if self.call_function is None:
            raise EvaluationError(f"{name} is not a function")
        return self.call_function(name, args)

    def _soft(self, node, env):
        # built-ins see a failed argument as no value
        try:
            return self.eval_node(node, env)
        except FAILURES:
            return None

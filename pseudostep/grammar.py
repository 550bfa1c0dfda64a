# -*- coding: utf-8 -*-
"""
Expression grammar (lark, LALR) and the Transformer that turns a parse into
the tuple AST walked by evaluator.Evaluator.

    ('NUM', 3)  ('STR', 'hi')  ('BOOL', True)  ('VAR', 'x')
    ('LIST', [node, ...])  ('INDEX', target, index)  ('CALL', name, [node, ...])
    ('UN', '-', node)  ('NOT', node)  ('BIN', op, a, b)  ('POW', a, b)
    ('CMP', op, a, b)  ('AND', a, b)  ('OR', a, b)

Binding, loosest first: OR, AND, relational, + -, * / MOD, unary (- + NOT), ^,
indexing.  Keywords are case-insensitive, identifiers are not.
"""

import logging
from functools import lru_cache
from typing import Any, Tuple

from lark import Lark, Token, Transformer, v_args

log = logging.getLogger(__name__)

Node = Tuple[Any, ...]

# -----------------------------
# 1) Lark grammar (lexer="basic")
# -----------------------------
GRAMMAR = r"""
?start: disjunction

// ----- logic -----
?disjunction: disjunction _OR conjunction      -> or_
            | disjunction "||" conjunction     -> or_
            | conjunction
?conjunction: conjunction _AND comparison      -> and_
            | conjunction "&&" comparison      -> and_
            | comparison

// ----- relational -----
?comparison: comparison COMPOP sum             -> compare
           | sum

// ----- arithmetic -----
?sum: sum "+" product          -> add
    | sum "-" product          -> sub
    | product
?product: product "*" unary    -> mul
        | product "/" unary    -> div
        | product _MOD unary   -> mod
        | product "%" unary    -> mod
        | unary
?unary: "-" unary              -> neg
      | "+" unary              -> pos
      | _NOT unary             -> not_
      | "!" unary              -> not_
      | power
?power: postfix "^" unary      -> pow
      | postfix
?postfix: postfix "[" disjunction "]"   -> index
        | primary

?primary: NUMBER               -> number
        | STRING               -> string
        | TRUE                 -> true
        | FALSE                -> false
        | NAME "(" [args] ")"  -> call
        | NAME                 -> var
        | "[" [args] "]"       -> list_
        | "(" disjunction ")"

args: disjunction ("," disjunction)*

// ----- tokens -----
// longest operators first: the alternation is tried in order
COMPOP: "<=" | ">=" | "<>" | "!=" | "==" | "=" | "<" | ">" | "≤" | "≥" | "≠"

_OR.2: /or\b/i
_AND.2: /and\b/i
_NOT.2: /not\b/i
_MOD.2: /mod\b/i
TRUE.2: /true\b/i
FALSE.2: /false\b/i

NUMBER: /\d+(\.\d+)?([eE][+-]?\d+)?/
NAME: /[A-Za-z_][A-Za-z0-9_]*/
STRING: /"[^"]*"/ | /'[^']*'/

%import common.WS
%ignore WS
"""

# spellings -> canonical relational operator
COMPARISONS = {
    '=': '=', '==': '=',
    '<>': '<>', '!=': '<>', '≠': '<>',
    '<': '<', '<=': '<=', '≤': '<=',
    '>': '>', '>=': '>=', '≥': '>=',
}


# -----------------------------
# 2) Transformer (tuple AST)
# -----------------------------
@v_args(inline=True)
class ExprTransformer(Transformer):
    # literals
    def number(self, tok):
        return ('NUM', _num(tok))

    def string(self, tok):
        # quotes are kept by the lexer
        return ('STR', str(tok)[1:-1])

    def true(self, _tok):  return ('BOOL', True)
    def false(self, _tok): return ('BOOL', False)
    def var(self, name):   return ('VAR', str(name))

    # calls / lists / indexing
    def call(self, name, args=None):
        return ('CALL', str(name), args or [])

    def list_(self, args=None):
        return ('LIST', args or [])

    def args(self, *items):
        return list(items)

    def index(self, target, idx):
        return ('INDEX', target, idx)

    # arithmetic
    def add(self, a, b): return ('BIN', '+', a, b)
    def sub(self, a, b): return ('BIN', '-', a, b)
    def mul(self, a, b): return ('BIN', '*', a, b)
    def div(self, a, b): return ('BIN', '/', a, b)
    def mod(self, a, b): return ('BIN', 'MOD', a, b)
    def pow(self, a, b): return ('POW', a, b)
    def neg(self, x):    return ('UN', '-', x)
    def pos(self, x):    return ('UN', '+', x)

    # relational / logic
    def compare(self, a, op, b):
        return ('CMP', COMPARISONS[str(op)], a, b)

    def and_(self, a, b): return ('AND', a, b)
    def or_(self, a, b):  return ('OR', a, b)
    def not_(self, x):    return ('NOT', x)


def _num(tok):
    s = tok.value if isinstance(tok, Token) else str(tok)
    if any(c in s for c in ('.', 'E', 'e')):
        return float(s)
    return int(s)


_parser = Lark(GRAMMAR, parser="lalr", lexer="basic", start="start",
               transformer=ExprTransformer())


@lru_cache(maxsize=2048)
def parse_expression(text: str) -> Node:
    """Parse ``text`` into a tuple AST.

    Raises ``lark.exceptions.LarkError`` on malformed input; only successful
    parses are cached.
    """
    log.debug("parsing expression %r", text)
    return _parser.parse(text)

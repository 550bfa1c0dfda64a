# -*- coding: utf-8 -*-
"""
Block pairing over classified statements, and the function table built on it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from .statements import Stmt

log = logging.getLogger(__name__)

# block kind -> (opening tag, closing tag)
BLOCKS = {
    'IF': ('IF_HDR', 'END_IF'),
    'WHILE': ('WHILE', 'END_WHILE'),
    'FOR': ('FOR', 'NEXT'),
    'FUNCTION': ('DEF_FN', 'FNEND'),
    'PROCEDURE': ('DEF_FN', 'FNEND'),
}


def _tag(stmt: Stmt) -> str:
    return stmt[0] if isinstance(stmt, tuple) and stmt else str(type(stmt))


def _is(stmt: Stmt, tag: str, kind: str) -> bool:
    if _tag(stmt) != tag:
        return False
    # DEF_FN / FNEND carry FUNCTION or PROCEDURE as their second element
    if tag in ('DEF_FN', 'FNEND'):
        return stmt[1] == kind
    return True


def match_end(statements: Sequence[Stmt], kind: str, open_line: int) -> int:
    """Index of the statement closing the ``kind`` block opened at ``open_line``.

    Nested blocks of the same kind are skipped by depth counting.  For IF an
    ELSE at depth 1 is returned as soon as it is seen; callers that need the
    real END IF call again from the ELSE line.  An unclosed block runs to the
    end of the program, so len(statements) is returned.
    """
    opener, closer = BLOCKS[kind]
    depth = 1
    for i in range(open_line + 1, len(statements)):
        st = statements[i]
        if _is(st, opener, kind):
            depth += 1
        elif _is(st, closer, kind):
            depth -= 1
            if depth == 0:
                return i
        elif kind == 'IF' and depth == 1 and _tag(st) == 'ELSE':
            return i
    return len(statements)


@dataclass(frozen=True)
class FunctionDef:
    name: str
    kind: str                 # FUNCTION | PROCEDURE
    params: Tuple[str, ...]
    start: int                # header line
    end: int                  # ENDFUNCTION / ENDPROCEDURE line


def build_function_table(statements: Sequence[Stmt]) -> Dict[str, FunctionDef]:
    table: Dict[str, FunctionDef] = {}
    for i, st in enumerate(statements):
        if _tag(st) != 'DEF_FN':
            continue
        _, kind, name, params = st
        if name in table:
            log.debug("%s redefined at line %d", name, i)
        table[name] = FunctionDef(name, kind, tuple(params), i, match_end(statements, kind, i))
    return table

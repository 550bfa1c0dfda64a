# -*- coding: utf-8 -*-
"""
Source text -> program lines -> classified statements.

Statement recognition is pattern based: every trimmed line is matched against
an ordered table of regular expressions and becomes a tuple whose first
element is its tag:

    ('COMMENT',)
    ('ASSIGN', name, index_text | None, expr_text)
    ('OUTPUT', expr_text)
    ('INPUT', name, prompt_text | None)
    ('IF_HDR', cond)            ('ELSE',)      ('END_IF',)
    ('IF_INLINE', cond, then_stmt, else_stmt | None)
    ('WHILE', cond)             ('END_WHILE',)
    ('FOR', var, start, end, step | None)      ('NEXT',)
    ('DEF_FN', kind, name, params)             ('FNEND', kind)
    ('RETURN', expr_text | None)
    ('CALL', call_text)
    ('UNKNOWN', text)

Expressions stay as text here; evaluator.Evaluator parses them on demand.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

Stmt = Tuple[Any, ...]

IDENT = r'[A-Za-z_][A-Za-z0-9_]*'
ARROW = r'(?:←|<-)'

# statements allowed after THEN / ELSE on a single-line IF
INLINE_TAGS = {'ASSIGN', 'OUTPUT', 'INPUT', 'CALL', 'RETURN'}


@dataclass(frozen=True)
class ProgramLine:
    index: int          # address used by the program counter
    source_line: int    # 1-based line in the source text
    text: str
    stmt: Stmt


# -----------------------------
# 1) patterns (order matters)
# -----------------------------
_I = re.IGNORECASE

_END_IF = re.compile(r'^END\s*IF$', _I)
_ELSE = re.compile(r'^ELSE$', _I)
_END_WHILE = re.compile(r'^END\s*WHILE$', _I)
_NEXT = re.compile(r'^(?:NEXT(?:\s+' + IDENT + r')?|END\s*FOR)$', _I)
_FNEND = re.compile(r'^END\s*(FUNCTION|PROCEDURE)$', _I)
_DEF = re.compile(r'^(FUNCTION|PROCEDURE)\s+(' + IDENT + r')\s*(?:\((.*?)\))?'
                  r'(?:\s+RETURNS\s+\w+)?$', _I)
_IF = re.compile(r'^IF\s+(.+?)\s+THEN(?:\s+(.*))?$', _I)
_WHILE = re.compile(r'^WHILE\s+(.+?)(?:\s+DO)?$', _I)
_FOR = re.compile(
    r'^FOR\s+(' + IDENT + r')(?:\s*' + ARROW + r'\s*|\s*=\s*|\s+FROM\s+)'
    r'(.+?)\s+TO\s+(.+?)(?:\s+STEP\s+(.+?))?(?:\s+DO)?$', _I)
_RETURN = re.compile(r'^RETURN(?:\s+(.+))?$', _I)
_CALL = re.compile(r'^CALL\s+(.+)$', _I)
_OUTPUT = re.compile(r'^(?:OUTPUT|PRINT)(?:\s+(.*))?$', _I)
_INPUT = re.compile(r'^INPUT\s+(' + IDENT + r')(?:\s+WITH\s+(.+))?$', _I)
_SET = re.compile(r'^SET\s+(.+?)\s+TO\s+(.+)$', _I)
_ASSIGN = re.compile(r'^(' + IDENT + r'\s*(?:\[.*?\])?)\s*' + ARROW + r'\s*(.+)$')
_TARGET = re.compile(r'^(' + IDENT + r')\s*(?:\[(.+)\])?$')
_CALL_LIKE = re.compile(r'^' + IDENT + r'\s*\(.*\)$')
_TRAILING_ENDIF = re.compile(r'\s+END\s*IF$', _I)


def _assignment(target: str, expr: str) -> Stmt:
    m = _TARGET.match(target.strip())
    if not m:
        return ('UNKNOWN', f"{target} <- {expr}")
    return ('ASSIGN', m.group(1), m.group(2), expr.strip())


def _params(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [p.strip() for p in text.split(',') if p.strip()]


def classify(text: str) -> Stmt:
    """Classify one trimmed, comment-free line."""
    if _END_IF.match(text):
        return ('END_IF',)
    if _ELSE.match(text):
        return ('ELSE',)
    if _END_WHILE.match(text):
        return ('END_WHILE',)
    if _NEXT.match(text):
        return ('NEXT',)

    m = _FNEND.match(text)
    if m:
        return ('FNEND', m.group(1).upper())
    m = _DEF.match(text)
    if m:
        return ('DEF_FN', m.group(1).upper(), m.group(2), _params(m.group(3)))

    m = _IF.match(text)
    if m:
        cond, tail = m.group(1), m.group(2)
        if not tail:
            return ('IF_HDR', cond)
        return _inline_if(cond, tail)

    m = _WHILE.match(text)
    if m:
        return ('WHILE', m.group(1))
    m = _FOR.match(text)
    if m:
        return ('FOR', m.group(1), m.group(2), m.group(3), m.group(4))
    m = _RETURN.match(text)
    if m:
        return ('RETURN', m.group(1))

    m = _CALL.match(text)
    if m:
        call = m.group(1).strip()
        return ('CALL', call if call.endswith(')') else call + '()')
    m = _INPUT.match(text)
    if m:
        return ('INPUT', m.group(1), m.group(2))
    m = _OUTPUT.match(text)
    if m:
        return ('OUTPUT', m.group(1) or '')
    m = _SET.match(text)
    if m:
        return _assignment(m.group(1), m.group(2))
    m = _ASSIGN.match(text)
    if m:
        return _assignment(m.group(1), m.group(2))
    if _CALL_LIKE.match(text):
        return ('CALL', text)
    return ('UNKNOWN', text)


def _inline_if(cond: str, tail: str) -> Stmt:
    tail = _TRAILING_ENDIF.sub('', tail)
    if tail.upper() in ('ENDIF', 'END IF'):
        tail = ''
    then_text, else_text = _split_else(tail)
    return ('IF_INLINE', cond, _inline_branch(then_text), _inline_branch(else_text))


def _inline_branch(text: Optional[str]) -> Optional[Stmt]:
    if not text:
        return None
    stmt = classify(text)
    if stmt[0] not in INLINE_TAGS:
        return ('UNKNOWN', text)
    return stmt


def _split_else(text: str) -> Tuple[str, Optional[str]]:
    """Split "a ELSE b" at the first ELSE keyword outside string literals."""
    quote = None
    upper = text.upper()
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
            continue
        if upper.startswith('ELSE', i) and _word_at(text, i, 4):
            return text[:i].strip(), text[i + 4:].strip()
    return text.strip(), None


def _word_at(text: str, i: int, n: int) -> bool:
    before = text[i - 1] if i > 0 else ' '
    after = text[i + n] if i + n < len(text) else ' '
    return not (before.isalnum() or before == '_') and not (after.isalnum() or after == '_')


# -----------------------------
# 2) comments / tokenized program
# -----------------------------
def strip_comment(text: str) -> str:
    """Drop a trailing ``#`` or ``//`` comment that is outside string literals."""
    quote = None
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif ch == '#' or text.startswith('//', i):
            return text[:i].rstrip()
    return text


def is_comment(text: str) -> bool:
    return text.startswith('#') or text.startswith('//')


def tokenize(source: str) -> List[ProgramLine]:
    """Source text -> ordered, non-blank program lines with their statements."""
    lines: List[ProgramLine] = []
    for lineno, raw in enumerate(source.splitlines(), start=1):
        text = raw.strip()
        if not text:
            continue
        if is_comment(text):
            lines.append(ProgramLine(len(lines), lineno, text, ('COMMENT',)))
            continue
        text = strip_comment(text)
        if not text:
            continue
        lines.append(ProgramLine(len(lines), lineno, text, classify(text)))
    return lines

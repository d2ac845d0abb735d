"""
Instruction Decoder — one source line in, (MNEMONIC, [operands]) out.

Line grammar (deliberately simple, not a general tokenizer):

    [label:] MNEMONIC op1, op2, ...   # comment
    [label:] MNEMONIC op1, op2, ...   // comment

  - '#' and '//' both start a comment that runs to end of line.
  - The mnemonic is the first whitespace-separated token, upper-cased.
  - Every remaining token is glued back together with whitespace removed
    and then split on ',' so "a0, 0x5" and "a0,0x5" decode the same,
    and operands can never contain embedded spaces or commas.

A line with a single token decodes only when that token looks like an
instruction (RET, NOP, ...). A bare label ("loop:") or a bare directive
(".text") returns None; the machine's symbol pass deals with those.
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import re

__all__ = ['decode', 'strip_comment', 'split_label', 'is_comment_or_blank',
           'Decoded']

Decoded = Tuple[str, List[str]]

COMMENT_MARKERS = ('#', '//')

_WS = re.compile(r'\s+')


def is_comment_or_blank(line: str) -> bool:
    """True for empty lines and lines whose first content is a comment."""
    text = line.strip()
    return not text or text.startswith(COMMENT_MARKERS)


def strip_comment(line: str) -> str:
    """Cut the line at the first '#' or '//' and trim what is left."""
    text = line
    for marker in COMMENT_MARKERS:
        pos = text.find(marker)
        if pos >= 0:
            text = text[:pos]
    return text.strip()


def split_label(line: str) -> Tuple[Optional[str], str]:
    """Split a leading 'name:' off a line.

    Returns (label, rest). label is None when the first token does not end
    with ':'. The comment is stripped from the result either way.

        >>> split_label("loop:  LI a0, 1  # init")
        ('loop', 'LI a0, 1')
        >>> split_label("LI a0, 1")
        (None, 'LI a0, 1')
    """
    text = strip_comment(line)
    if not text:
        return None, ""
    parts = text.split(None, 1)
    head = parts[0]
    if head.endswith(':') and len(head) > 1:
        rest = parts[1].strip() if len(parts) > 1 else ""
        return head[:-1], rest
    return None, text


def decode(line: str) -> Optional[Decoded]:
    """Decode one line into (MNEMONIC, operands) or None.

    Pure function: the same input always yields the same output.
    """
    if is_comment_or_blank(line):
        return None

    code = strip_comment(line)
    if not code:
        return None

    parts = _WS.split(code)
    mnemonic = parts[0].upper()

    if len(parts) < 2:
        # labels and operand-less directives are not instructions
        if mnemonic.endswith(':') or mnemonic.startswith('.'):
            return None
        return mnemonic, []

    operands = ''.join(parts[1:]).split(',')
    return mnemonic, operands

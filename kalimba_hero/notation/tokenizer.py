"""Tablature tokenizer.

Splits tab text into tokens and classifies them:

- rest:  ``-``, ``_``, ``r``, ``R``
- chord: ``(1 3 5)``, kept as one token even with spaces inside
- run:   ``467`` or ``1°2``, several single notes written without spaces
- note:  a digit 1-7 followed by octave markers

Octave markers ``°``, ``*`` and ``'`` are synonyms and are rewritten to
``°`` here, so nothing downstream sees the other glyphs.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..core.constants import MARKER_SYNONYMS, OCTAVE_MARKER, REST_TOKENS

_NOTE_RE = re.compile(r"^[1-7]" + OCTAVE_MARKER + r"*$")
_RUN_RE = re.compile(r"^(?:[1-7]" + OCTAVE_MARKER + r"*){2,}$")
_RUN_PART_RE = re.compile(r"[1-7]" + OCTAVE_MARKER + r"*")


class TokenKind(Enum):
    NOTE = "note"
    RUN = "run"
    CHORD = "chord"
    REST = "rest"
    UNKNOWN = "unknown"


@dataclass
class Token:
    """One notation token occupying a single grid step (runs: several)."""

    kind: TokenKind
    text: str  # Source text as written
    line: int  # 1-based line number
    column: int  # 1-based column of the first character
    labels: List[str] = field(default_factory=list)  # Canonical note labels
    invalid: List[str] = field(default_factory=list)  # Unparseable chord members


def normalize_markers(text: str) -> str:
    """Rewrite every octave-marker synonym to the canonical glyph."""
    for glyph in MARKER_SYNONYMS:
        text = text.replace(glyph, OCTAVE_MARKER)
    return text


def split_line(line: str) -> List[tuple]:
    """
    Split a line into raw (text, column) pieces.

    Whitespace separates pieces except inside parentheses. An opening
    parenthesis always starts a new piece; an unclosed group runs to the
    end of the line. Nested groups flatten into the outer chord.
    """
    pieces = []
    current = ""
    start = 0
    depth = 0

    for i, char in enumerate(line):
        if char == "(":
            depth += 1
            if depth > 1:
                continue
            if current.strip():
                pieces.append((current.strip(), start + 1))
            current = "("
            start = i
        elif char == ")" and depth:
            depth -= 1
            if depth:
                continue
            pieces.append((current + ")", start + 1))
            current = ""
        elif char.isspace() and not depth:
            if current.strip():
                pieces.append((current.strip(), start + 1))
            current = ""
        else:
            if not current:
                start = i
            current += char

    if current.strip():
        pieces.append((current.strip(), start + 1))

    return pieces


def split_run(text: str) -> Optional[List[str]]:
    """Split a compact run like '46°7' into ['4', '6°', '7']; None if not a run."""
    if not _RUN_RE.match(text):
        return None
    return _RUN_PART_RE.findall(text)


def classify(text: str, line: int = 1, column: int = 1) -> Token:
    """Classify one raw piece into a Token."""
    if text in REST_TOKENS:
        return Token(TokenKind.REST, text, line, column)

    if text.startswith("("):
        body = text[1:-1] if text.endswith(")") else text[1:]
        token = Token(TokenKind.CHORD, text, line, column)
        for member in body.split():
            normalized = normalize_markers(member)
            if member in REST_TOKENS:
                continue
            if _NOTE_RE.match(normalized):
                token.labels.append(normalized)
                continue
            parts = split_run(normalized)
            if parts is not None:
                token.labels.extend(parts)
            else:
                token.invalid.append(member)
        return token

    normalized = normalize_markers(text)
    if _NOTE_RE.match(normalized):
        return Token(TokenKind.NOTE, text, line, column, labels=[normalized])

    parts = split_run(normalized)
    if parts is not None:
        return Token(TokenKind.RUN, text, line, column, labels=parts)

    return Token(TokenKind.UNKNOWN, text, line, column)


def tokenize(text: str) -> List[Token]:
    """Tokenize a whole tab. Blank lines produce no tokens."""
    tokens = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        for piece, column in split_line(line):
            tokens.append(classify(piece, line_no, column))
    return tokens

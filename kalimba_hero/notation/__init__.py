"""Notation layer - kalimba tablature.

Compiles tab text into timed key events and renders events back into
tab text. Both directions share the layout's label tables and the
notation grid.
"""

from .tokenizer import Token, TokenKind, tokenize, normalize_markers, split_run
from .parser import NotationParser, ParseResult, SkippedToken, parse, create_song_from_notation
from .serializer import NotationSerializer, serialize

__all__ = [
    "Token",
    "TokenKind",
    "tokenize",
    "normalize_markers",
    "split_run",
    "NotationParser",
    "ParseResult",
    "SkippedToken",
    "parse",
    "create_song_from_notation",
    "NotationSerializer",
    "serialize",
]

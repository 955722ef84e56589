r"""
Argtree token grammar and token stream.

Grammar (one raw argv item at a time)
- short:      "-" + one alnum + zero or more alnum       → -x, -xvf (combined)
- long:       "--" + letter + (alnum | "-")*, "=value"?   → --help, --name=foo
- terminator: the literal "--"                           → everything after is an operand
- bare:       anything else                              → operand or sub-command name

Combined short tokens are expanded up front into one flag per letter
(expand("-xvf") == ["-x", "-v", "-f"]), so the parser handles each letter as
an independent occurrence.

TokenStream is the FIFO queue the parser consumes. It counts every token it
hands out, which gives each Token a 1-based position for diagnostics.
"""
import re
from collections import deque
from enum import Enum
from typing import NamedTuple

TERMINATOR = "--"

SHORT_PATTERN = re.compile(r"-(?P<head>[A-Za-z0-9])(?P<tail>[A-Za-z0-9]*)")
LONG_PATTERN = re.compile(r"(?P<flag>--[A-Za-z][A-Za-z0-9-]*)(?:=(?P<value>.*))?", re.DOTALL)

# Declared flags are single occurrences: one short letter, or one long name.
FLAG_PATTERN = re.compile(r"-[A-Za-z0-9]|--[A-Za-z][A-Za-z0-9-]*")


class TokenKind(Enum):
    SHORT = "short"
    LONG = "long"
    TERMINATOR = "terminator"
    BARE = "bare"


class Token(NamedTuple):
    """
    A classified argv item.

    - kind: TokenKind of the raw text.
    - text: the raw text, untouched.
    - index: 1-based position in the stream (0 when classified standalone).
    - flags: the flag occurrences carried by the token; one per letter for
      combined short tokens, one for long tokens, none otherwise.
    - value: the inline "=value" of a long token, or None when absent.
    """
    kind: TokenKind
    text: str
    index: int = 0
    flags: tuple[str, ...] = ()
    value: str | None = None


def expand(text, /):
    """
    Split a (possibly combined) short token into single-letter flags.

    >>> expand("-xvf")
    ['-x', '-v', '-f']
    """
    if not SHORT_PATTERN.fullmatch(text):
        raise ValueError("expand() argument must be a short flag token, got %r" % text)
    return ["-" + letter for letter in text[1:]]


def classify(text, /, index=0):
    """
    Classify one raw argv item into a Token.
    """
    if not isinstance(text, str):
        raise TypeError("classify() argument must be a string")

    if text == TERMINATOR:
        return Token(TokenKind.TERMINATOR, text, index)

    if SHORT_PATTERN.fullmatch(text):
        return Token(TokenKind.SHORT, text, index, tuple(expand(text)))

    if match := LONG_PATTERN.fullmatch(text):
        return Token(TokenKind.LONG, text, index, (match["flag"],), match["value"])

    return Token(TokenKind.BARE, text, index)


def isflag(text, /):
    """
    Return True if text is a single declarable flag ("-x" or "--name").
    """
    return isinstance(text, str) and FLAG_PATTERN.fullmatch(text) is not None


class TokenStream:
    """
    Front-consumed queue of raw tokens with position tracking.

    The stream is shared by every command level of one parse: a parent hands
    its stream to the child it dispatches to, and the child keeps counting
    positions from where the parent stopped.
    """

    def __init__(self, tokens=(), /):
        self._queue = deque()
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("token stream items must be strings")
            self._queue.append(token)
        self._index = 0

    @property
    def index(self):
        """
        Position of the most recently consumed token (0 before the first pop).
        """
        return self._index

    def pop(self):
        """
        Consume the next token and return its raw text.
        """
        token = self._queue.popleft()
        self._index += 1
        return token

    def next(self):
        """
        Consume the next token and return it classified.
        """
        text = self.pop()
        return classify(text, self._index)

    def peek(self):
        """
        Return the next raw token without consuming it (None when empty).
        """
        return self._queue[0] if self._queue else None

    def remaining(self):
        return list(self._queue)

    def __len__(self):
        return len(self._queue)

    def __bool__(self):
        return bool(self._queue)

    def __repr__(self):
        return f"token-stream(index={self._index!r}, remaining={list(self._queue)!r})"


__all__ = (
    "TERMINATOR",
    "TokenKind",
    "Token",
    "TokenStream",
    "classify",
    "expand",
    "isflag",
)

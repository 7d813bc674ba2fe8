"""Comment/string scanner and lexical helpers.

`scan_source` removes Pascal comments while leaving string literals exactly as
written and keeping every newline, so a line number computed on the scanned
text is the line number in the original unit.

Comment shapes (Normal state only):
- `// ...` to end of line (the newline itself is kept)
- `{ ... }` non-nesting, ends at the first `}`
- `(* ... *)` non-nesting, ends at the first `*)`

Inside a string literal `''` is an escaped quote, not a terminator. Pascal
literals cannot span lines, so an unterminated literal ends at the newline.

The remaining helpers read balanced call arguments and expressions out of
scanned text without a grammar: they only need to know about quotes,
parentheses and brackets.
"""

from dataclasses import dataclass, field

from .config import LITERAL_RUN_PATTERN

_OPENERS = {"(": ")", "[": "]"}
_CLOSERS = {")", "]"}


@dataclass
class ScannedSource:
    """Comment-free text plus a map back to the original source.

    `offsets[i]` is the index in `original` of `text[i]`.
    """

    original: str
    text: str
    offsets: list[int] = field(default_factory=list)

    def original_span(self, start: int, end: int) -> str:
        """Return the unmodified source text behind scanned range [start, end)."""
        if start < 0 or start >= end or not self.offsets:
            return ""
        end = min(end, len(self.offsets))
        return self.original[self.offsets[start] : self.offsets[end - 1] + 1]


def scan_source(source: str) -> ScannedSource:
    """Strip comments from unit text, preserving strings and newlines."""
    out: list[str] = []
    offsets: list[int] = []
    i = 0
    n = len(source)
    in_string = False

    def emit(index: int) -> None:
        out.append(source[index])
        offsets.append(index)

    while i < n:
        ch = source[i]

        if in_string:
            emit(i)
            if ch == "'":
                if i + 1 < n and source[i + 1] == "'":
                    emit(i + 1)
                    i += 2
                    continue
                in_string = False
            elif ch == "\n":
                in_string = False
            i += 1
            continue

        if ch == "'":
            in_string = True
            emit(i)
            i += 1
        elif ch == "/" and i + 1 < n and source[i + 1] == "/":
            while i < n and source[i] != "\n":
                i += 1
        elif ch == "{":
            i = _skip_block(source, i + 1, "}", emit)
        elif ch == "(" and i + 1 < n and source[i + 1] == "*":
            i = _skip_block(source, i + 2, "*)", emit)
        else:
            emit(i)
            i += 1

    return ScannedSource(original=source, text="".join(out), offsets=offsets)


def _skip_block(source: str, i: int, closer: str, emit) -> int:
    """Skip a block comment, emitting only its newlines. Returns the resume index."""
    end = source.find(closer, i)
    stop = len(source) if end == -1 else end
    for j in range(i, stop):
        if source[j] == "\n":
            emit(j)
    return len(source) if end == -1 else end + len(closer)


def strip_comments(source: str) -> str:
    """Return `source` with comments removed (see module docstring)."""
    return scan_source(source).text


def line_at(text: str, position: int, base_line: int = 1) -> int:
    """Line number of `position` in `text`, counting from `base_line`."""
    return base_line + text.count("\n", 0, max(position, 0))


def skip_string(text: str, i: int) -> int:
    """Given `text[i] == "'"`, return the index just past the literal."""
    n = len(text)
    i += 1
    while i < n:
        ch = text[i]
        if ch == "'":
            if i + 1 < n and text[i + 1] == "'":
                i += 2
                continue
            return i + 1
        if ch == "\n":
            return i
        i += 1
    return n


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket closing `text[open_index]`, or -1 if unbalanced."""
    depth = 0
    i = open_index
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "'":
            i = skip_string(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i
        elif ch == ";" and depth > 0:
            # A statement separator inside an open call means the call is broken
            return -1
        i += 1
    return -1


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on a one-character separator outside strings and brackets."""
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "'":
            i = skip_string(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return parts


def read_call_arguments(text: str, open_index: int) -> tuple[list[str], int] | None:
    """Read the argument list of a call whose `(` is at `open_index`.

    Returns:
        (stripped arguments, index just past the closing paren), or None when
        the parentheses never balance
    """
    close = find_closing(text, open_index)
    if close == -1:
        return None
    inner = text[open_index + 1 : close]
    if not inner.strip():
        return [], close + 1
    return [arg.strip() for arg in split_top_level(inner, ",")], close + 1


def read_expression(text: str, start: int) -> tuple[str, int]:
    """Read an expression up to the next top-level `;`.

    Stops early at a top-level `end`/`else` keyword, which also terminates a
    Pascal statement. Returns (stripped expression, end index).
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "'":
            i = skip_string(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if depth == 0:
                break
            depth -= 1
        elif ch == ";" and depth == 0:
            break
        elif depth == 0 and ch.isalpha() and (i == 0 or not (text[i - 1].isalnum() or text[i - 1] == "_")):
            word_end = i
            while word_end < n and (text[word_end].isalnum() or text[word_end] == "_"):
                word_end += 1
            if text[i:word_end].lower() in ("end", "else", "until"):
                break
            i = word_end
            continue
        i += 1
    return text[start:i].strip(), i


def unescape_literal(content: str) -> str:
    """Collapse doubled quotes inside literal contents."""
    return content.replace("''", "'")


def parse_literal_run(expression: str) -> str | None:
    """Decode `'abc'#13#10'def'` style literal runs.

    Returns the decoded text, or None when `expression` is anything other
    than quoted literals and character codes.
    """
    expression = expression.strip()
    if not expression:
        return None
    pieces: list[str] = []
    pos = 0
    while pos < len(expression):
        match = LITERAL_RUN_PATTERN.match(expression, pos)
        if not match:
            return None
        if match.group("literal") is not None:
            pieces.append(unescape_literal(match.group("literal")))
        else:
            code = match.group("char")
            value = int(code[1:], 16) if code.startswith("$") else int(code)
            if value > 0x10FFFF:
                return None
            pieces.append(chr(value))
        pos = match.end()
        while pos < len(expression) and expression[pos].isspace():
            pos += 1
    return "".join(pieces)

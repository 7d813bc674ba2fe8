"""Method body locator.

Finds every method implementation header (`procedure TFoo.Bar(...);`,
`function TFoo.Baz: Integer;`, constructors, destructors, class methods) in
scanned unit text and isolates the body that follows it.

The body starts at the first standalone `begin` after the header and before
the next header. Two strategies find where it ends:

- BlockTracking.STACK (default): `begin`, `case`, `try`, `asm` and `record`
  push a block, `end` pops one, and the body closes when the `begin` pushed at
  body start is popped.
- BlockTracking.COUNTER: every `begin` increments a depth counter and every
  `end` directly followed by `;` decrements it; the body closes at the `end;`
  that brings the counter back to zero. This counter cannot tell a block's
  `end;` from the `end;` of a `case` statement or a `try` block, so bodies
  containing those close early. The mode reproduces the legacy heuristic.

Keywords inside string literals and member accesses (`Range.End`) never count.
A body that never closes runs to the end of the text.
"""

from collections.abc import Iterator

from pasdb.utils.logging import logger

from .config import BEGIN_KEYWORD, BLOCK_OPENERS, END_KEYWORD, METHOD_HEADER_PATTERN
from .models import BlockTracking, MethodBody
from .scanner import line_at, skip_string

_LOCAL_ROUTINE_KEYWORDS = frozenset({"procedure", "function"})
_BODYLESS_DIRECTIVES = frozenset({"forward", "external"})


def iter_words(text: str, start: int = 0, end: int | None = None) -> Iterator[tuple[str, int, int]]:
    """Yield (lower-cased word, start, end) for identifiers outside string literals.

    Words reached through a `.` (member access) or `&` (escaped identifier)
    are skipped; they can never be block keywords.
    """
    end = len(text) if end is None else end
    i = start
    while i < end:
        ch = text[i]
        if ch == "'":
            i = skip_string(text, i)
            continue
        if ch.isalpha() or ch == "_":
            j = i + 1
            while j < end and (text[j].isalnum() or text[j] == "_"):
                j += 1
            prev = text[i - 1] if i > 0 else ""
            if prev not in (".", "&") and not prev.isdigit():
                yield text[i:j].lower(), i, j
            i = j
            continue
        i += 1


def _followed_by_semicolon(text: str, index: int) -> int:
    """Return the index past `;` if only whitespace separates it from `index`, else -1."""
    n = len(text)
    while index < n and text[index] in " \t\r\n":
        index += 1
    if index < n and text[index] == ";":
        return index + 1
    return -1


def find_body_end(text: str, begin_index: int, tracking: BlockTracking = BlockTracking.STACK) -> tuple[int, bool]:
    """Find where the body opened by the `begin` at `begin_index` closes.

    Returns:
        (end offset, terminated). The end offset includes the closing `end`
        and its `;` when present. `terminated` is False when the text ran out
        first, in which case the end offset is `len(text)`.
    """
    words = iter_words(text, begin_index)
    first = next(words, None)
    if first is None or first[0] != BEGIN_KEYWORD:
        return len(text), False

    if tracking is BlockTracking.COUNTER:
        depth = 1
        for word, _start, word_end in words:
            if word == BEGIN_KEYWORD:
                depth += 1
            elif word == END_KEYWORD:
                after = _followed_by_semicolon(text, word_end)
                if after == -1:
                    continue
                depth -= 1
                if depth == 0:
                    return after, True
        return len(text), False

    stack = [BEGIN_KEYWORD]
    for word, _start, word_end in words:
        if word in BLOCK_OPENERS:
            stack.append(word)
        elif word == END_KEYWORD:
            stack.pop()
            if not stack:
                after = _followed_by_semicolon(text, word_end)
                return (after if after != -1 else word_end), True
    return len(text), False


def _find_begin(text: str, start: int, limit: int) -> int:
    """Offset of the method's own `begin` in [start, limit), or -1.

    Nested local routines declared before the body are skipped whole.
    Procedural types (`TCallback = procedure(...)`) have no body and are
    not local routines.
    """
    pending_locals = 0
    position = start
    while position < limit:
        for word, word_start, _end in iter_words(text, position, limit):
            if word in _LOCAL_ROUTINE_KEYWORDS and not _is_procedural_type(text, word_start):
                pending_locals += 1
            elif word in _BODYLESS_DIRECTIVES and pending_locals:
                pending_locals -= 1
            elif word == BEGIN_KEYWORD:
                if not pending_locals:
                    return word_start
                pending_locals -= 1
                position, _ = find_body_end(text, word_start, BlockTracking.STACK)
                break
        else:
            return -1
    return -1


def _is_procedural_type(text: str, index: int) -> bool:
    """True when the keyword at `index` follows `=`, `:` or `reference to`."""
    prefix = text[max(0, index - 32) : index].rstrip().lower()
    return prefix.endswith(("=", ":", " to", "\tto", "\nto"))


def locate_methods(text: str, tracking: BlockTracking = BlockTracking.STACK) -> list[MethodBody]:
    """Locate every method implementation in scanned unit text.

    Args:
        text: Comment-free unit text (see scanner.scan_source)
        tracking: Strategy used to find the closing `end;`

    Returns:
        MethodBody records in header order. Headers without a reachable
        `begin` are returned with an empty body.
    """
    headers = list(METHOD_HEADER_PATTERN.finditer(text))
    methods: list[MethodBody] = []

    for index, header in enumerate(headers):
        limit = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        method = MethodBody(
            kind=header.group("kind").lower(),
            class_name=header.group("class_name"),
            method_name=header.group("method_name"),
            header_line=line_at(text, header.start("kind")),
        )

        begin = _find_begin(text, header.end(), limit)
        if begin == -1:
            logger.debug(f"No body for {method.qualified_name} (forward or external declaration)")
            methods.append(method)
            continue

        end, terminated = find_body_end(text, begin, tracking)
        if not terminated:
            logger.debug(f"Body of {method.qualified_name} never closes; running to end of unit")

        method.body = text[begin:end]
        method.body_start = begin
        method.body_end = end
        method.start_line = line_at(text, begin)
        method.terminated = terminated
        methods.append(method)

    return methods

"""Concatenation parser - turns Pascal string expressions into SQL templates.

    'SELECT * FROM T WHERE ID = ' + IntToStr(ID)
        -> SELECT * FROM T WHERE ID = :ID

The expression is split into top-level `+` operands. Literal operands
(`'...'` with doubled-quote escapes, `#13#10` character codes, `sLineBreak`)
are decoded into the template verbatim. Every other operand is reduced to a
bind-parameter name and becomes a `:Name` placeholder:

1. single-argument calls are unwrapped (`IntToStr(ID)` -> `ID`), repeatedly
2. dotted member access keeps the trailing member (`edtName.Text` -> `Text`)
3. anything else is used as written (non-word characters folded to `_`)

`Format('... %d ...', [Value])` calls are expanded the same way, one
placeholder per format specifier. A placeholder that lands between two quotes
(`'''' + Name + ''''`) is a quoted value slot and loses the quotes.

The conversion function unwrapped in step 1 is remembered as a type hint for
parameter inference.
"""

from dataclasses import dataclass, field

from .config import (
    CONVERSION_HINTS,
    FORMAT_CALL_PATTERN,
    FORMAT_SPECIFIER_PATTERN,
    FUNCTION_CALL_PATTERN,
    IDENTIFIER_PATTERN,
    LINE_BREAK_CONSTANTS,
    MEMBER_ACCESS_PATTERN,
    NON_WORD_PATTERN,
    NUMERIC_LITERAL_PATTERN,
    PLACEHOLDER_SLOT_PATTERN,
)
from .scanner import find_closing, parse_literal_run, read_call_arguments, split_top_level

_MARK = "\x01"
_CONSTANT_WORDS = frozenset({"true", "false", "nil"})


@dataclass
class ConcatTemplate:
    """A parameterized SQL template built from a string expression."""

    text: str
    parameters: list[str] = field(default_factory=list)
    hints: dict[str, str] = field(default_factory=dict)
    literal_parts: int = 0

    @property
    def is_dynamic(self) -> bool:
        return bool(self.parameters)


class _TemplateBuilder:
    """Accumulates template pieces; placeholders are kept as marks until build()."""

    def __init__(self):
        self.pieces: list[str] = []
        self.parameters: list[str] = []
        self.hints: dict[str, str] = {}
        self.literal_parts = 0

    def add_expression(self, expression: str) -> None:
        for operand in split_top_level(expression, "+"):
            self.add_operand(operand.strip())

    def add_operand(self, operand: str) -> None:
        if not operand:
            return

        literal = parse_literal_run(operand)
        if literal is not None:
            self.pieces.append(literal)
            self.literal_parts += 1
            return

        line_break = LINE_BREAK_CONSTANTS.get(operand.lower())
        if line_break is not None:
            self.pieces.append(line_break)
            return

        if operand.startswith("(") and find_closing(operand, 0) == len(operand) - 1:
            self.add_expression(operand[1:-1])
            return

        if FORMAT_CALL_PATTERN.match(operand) and self.add_format_call(operand):
            return

        name, wrapper = core_parameter_name(operand)
        self.add_placeholder(name, wrapper)

    def add_placeholder(self, name: str, wrapper: str | None = None) -> None:
        self.pieces.append(f"{_MARK}{name}{_MARK}")
        if name not in self.parameters:
            self.parameters.append(name)
        if wrapper:
            self.hints.setdefault(name, wrapper)

    def add_format_call(self, expression: str) -> bool:
        """Expand a Format() call in place. Returns False if it is not one."""
        match = FORMAT_CALL_PATTERN.match(expression)
        parsed = read_call_arguments(expression, match.end() - 1)
        if parsed is None:
            return False
        args, end = parsed
        if expression[end:].strip() or not args:
            return False

        pattern = _TemplateBuilder()
        pattern.add_expression(args[0])
        if not pattern.literal_parts:
            return False
        self.literal_parts += pattern.literal_parts
        for name in pattern.parameters:
            if name not in self.parameters:
                self.parameters.append(name)
        for name, wrapper in pattern.hints.items():
            self.hints.setdefault(name, wrapper)

        values: list[str] = []
        if len(args) > 1:
            array = args[1].strip()
            if array.startswith("[") and array.endswith("]"):
                values = [v.strip() for v in split_top_level(array[1:-1], ",") if v.strip()]

        format_text = "".join(pattern.pieces)
        cursor = 0
        position = 0
        for spec in FORMAT_SPECIFIER_PATTERN.finditer(format_text):
            self.pieces.append(format_text[position : spec.start()])
            position = spec.end()
            if spec.group(0) == "%%":
                self.pieces.append("%")
                continue
            index = spec.group("index")
            if index and index.isdigit():
                cursor = int(index)
            value = values[cursor] if cursor < len(values) else None
            cursor += 1
            if value is None:
                self.add_placeholder(f"Param{cursor}")
                continue
            constant = parse_literal_run(value)
            if constant is not None:
                self.pieces.append(constant)
            elif NUMERIC_LITERAL_PATTERN.fullmatch(value):
                self.pieces.append(value)
            else:
                name, wrapper = core_parameter_name(value)
                self.add_placeholder(name, wrapper)
        self.pieces.append(format_text[position:])
        return True

    def build(self) -> ConcatTemplate:
        text = PLACEHOLDER_SLOT_PATTERN.sub(_render_slot, "".join(self.pieces))
        return ConcatTemplate(
            text=text,
            parameters=list(self.parameters),
            hints=dict(self.hints),
            literal_parts=self.literal_parts,
        )


def _render_slot(match) -> str:
    """`'<mark>Name<mark>'` -> `:Name`; an unquoted mark -> `:Name`."""
    open_quote, name, close_quote = match.group(1), match.group(2), match.group(3)
    if open_quote and close_quote:
        return f":{name}"
    return f"{open_quote or ''}:{name}{close_quote or ''}"


def _is_constant(expression: str) -> bool:
    return (
        parse_literal_run(expression) is not None
        or NUMERIC_LITERAL_PATTERN.fullmatch(expression) is not None
        or expression.lower() in _CONSTANT_WORDS
    )


def _unwrap_parens(expression: str) -> str:
    while expression.startswith("(") and find_closing(expression, 0) == len(expression) - 1:
        expression = expression[1:-1].strip()
    return expression


def core_parameter_name(expression: str) -> tuple[str, str | None]:
    """Reduce a non-literal operand to a bind-parameter name.

    Args:
        expression: Operand text, e.g. `IntToStr(Customer.ID)`

    Returns:
        (name, conversion function) where the conversion function is the
        innermost known converter that was unwrapped, or None
    """
    expr = expression.strip()
    wrapper = None

    while True:
        expr = _unwrap_parens(expr)
        if expr.endswith("()"):
            expr = expr[:-2].rstrip()
        call = FUNCTION_CALL_PATTERN.match(expr)
        if not call or find_closing(expr, call.start("args") - 1) != len(expr) - 1:
            break
        args = [a.strip() for a in split_top_level(call.group("args"), ",")]
        variable_args = [a for a in args if a and not _is_constant(a)]
        if len(variable_args) != 1:
            break
        function = call.group("function").split(".")[-1].strip()
        if function.lower() in CONVERSION_HINTS:
            wrapper = function
        expr = variable_args[0]

    if MEMBER_ACCESS_PATTERN.match(expr):
        expr = expr.split(".")[-1].strip()

    if IDENTIFIER_PATTERN.match(expr):
        return expr, wrapper

    name = NON_WORD_PATTERN.sub("_", expr).strip("_")
    if not name or not IDENTIFIER_PATTERN.match(name):
        name = f"P_{name}" if name else "Param"
    return name, wrapper


def parse_concatenation(expression: str) -> ConcatTemplate:
    """Build a template from an additive string expression."""
    builder = _TemplateBuilder()
    builder.add_expression(expression)
    return builder.build()


def parse_format_call(expression: str) -> ConcatTemplate | None:
    """Build a template from a `Format('...', [...])` call, or None if it is not one."""
    expression = expression.strip()
    if not FORMAT_CALL_PATTERN.match(expression):
        return None
    builder = _TemplateBuilder()
    if not builder.add_format_call(expression):
        return None
    return builder.build()


def has_concatenation(expression: str) -> bool:
    """True when the expression is built at runtime (top-level `+` or Format())."""
    expression = expression.strip()
    return len(split_top_level(expression, "+")) > 1 or FORMAT_CALL_PATTERN.match(expression) is not None


def template_from_expression(expression: str, allow_bare: bool = False) -> ConcatTemplate | None:
    """Turn any right-hand side into a template.

    Args:
        expression: Pascal string expression
        allow_bare: Accept expressions with no literal part at all (a lone
            variable); such templates consist of a placeholder only

    Returns:
        ConcatTemplate, or None when the expression carries no SQL text
    """
    expression = expression.strip()
    if not expression:
        return None
    literal = parse_literal_run(expression)
    if literal is not None:
        return ConcatTemplate(text=literal, literal_parts=1)
    template = parse_concatenation(expression)
    if not template.literal_parts and not allow_bare:
        return None
    if not template.text.strip():
        return None
    return template

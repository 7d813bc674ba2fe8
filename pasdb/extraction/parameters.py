"""Parameter extraction and type inference.

Parameter names come from three places:
- `:Name` placeholders in the extracted SQL, outside string literals
- `ParamByName('Name')` calls anywhere in the method body
- `Params['Name']` / `ParamValues['Name']` indexed access

Names are matched case-insensitively through their PascalCase form, so
`ParamByName('PATIENT_ID')` and `:PatientId` are the same parameter. The
first spelling found is the one emitted, SQL placeholders first.

Type inference, per name:
1. the first typed accessor in source order (`ParamByName('X').AsInteger`)
2. the conversion function that wrapped the value in a concatenation
   (`IntToStr(X)`)
3. opaque, with source type `Variant`
"""

from collections.abc import Mapping

from .config import (
    ACCESSOR_TYPES,
    CONVERSION_HINTS,
    DEFAULT_SOURCE_TYPE,
    PARAM_BY_NAME_PATTERN,
    PARAMS_INDEX_PATTERN,
    PLACEHOLDER_PATTERN,
    SQL_STRING_PATTERN,
    TYPED_PARAM_ACCESS_PATTERN,
)
from .models import ScalarType, SqlParameter
from .normalizer import _mask, pascal_case


def parameter_key(name: str) -> str:
    """Identity of a parameter name (case- and separator-insensitive)."""
    return pascal_case(name.strip()).lower()


def collect_parameter_names(sql: str, body: str) -> list[str]:
    """Distinct parameter names in discovery order.

    Placeholders inside SQL string literals are text, not parameters.
    """
    sql = _mask(sql, SQL_STRING_PATTERN, [])
    names: dict[str, str] = {}
    for pattern, group in (
        (PLACEHOLDER_PATTERN, "name"),
        (PARAM_BY_NAME_PATTERN, "name"),
        (PARAMS_INDEX_PATTERN, "name"),
    ):
        source = sql if pattern is PLACEHOLDER_PATTERN else body
        for match in pattern.finditer(source):
            name = match.group(group).strip()
            if name:
                names.setdefault(parameter_key(name), name)
    return list(names.values())


def typed_accessors(body: str) -> dict[str, str]:
    """Parameter key -> first typed accessor used on it (`AsInteger`, `Value`, ...)."""
    accessors: dict[str, str] = {}
    for match in TYPED_PARAM_ACCESS_PATTERN.finditer(body):
        name = match.group("by_name") or match.group("by_index")
        accessor = match.group("accessor")
        if accessor.lower() not in ACCESSOR_TYPES:
            continue
        accessors.setdefault(parameter_key(name), accessor)
    return accessors


def infer_parameter_type(
    name: str,
    accessors: Mapping[str, str],
    hints: Mapping[str, str] | None = None,
) -> tuple[str, ScalarType]:
    """Source type tag and scalar kind for one parameter name.

    Args:
        name: Parameter name as emitted
        accessors: Output of typed_accessors() for the method body
        hints: Parameter key -> conversion function from the concatenation parser

    Returns:
        (source type, inferred scalar type)
    """
    key = parameter_key(name)
    accessor = accessors.get(key)
    if accessor:
        return accessor, ScalarType(ACCESSOR_TYPES[accessor.lower()])
    wrapper = (hints or {}).get(key)
    if wrapper and wrapper.lower() in CONVERSION_HINTS:
        return wrapper, ScalarType(CONVERSION_HINTS[wrapper.lower()])
    return DEFAULT_SOURCE_TYPE, ScalarType.OPAQUE


def extract_parameters(sql: str, body: str, hints: Mapping[str, str] | None = None) -> list[SqlParameter]:
    """Bound parameters of one statement, unique by name.

    Args:
        sql: Normalized statement text
        body: Comment-free method body the statement came from
        hints: Placeholder name -> conversion function (any spelling)

    Returns:
        SqlParameter list in discovery order
    """
    keyed_hints = {parameter_key(name): wrapper for name, wrapper in (hints or {}).items()}
    accessors = typed_accessors(body)
    parameters = []
    for name in collect_parameter_names(sql, body):
        source_type, inferred = infer_parameter_type(name, accessors, keyed_hints)
        parameters.append(SqlParameter(name=name, source_type=source_type, inferred_type=inferred))
    return parameters

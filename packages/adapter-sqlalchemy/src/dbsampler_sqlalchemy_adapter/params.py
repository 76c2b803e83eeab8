import re
from typing import Any, Dict, Sequence, Tuple

from sqlalchemy import TextClause, text

from dbsampler_adapter_sdk import ParameterMismatchError

# Literals, quoted identifiers and comments are matched first so placeholders inside them are left alone.
_PLACEHOLDER = re.compile(
    r"'(?:[^']|'')*'"
    r"|\"(?:[^\"]|\"\")*\""
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|\$(\d+)(::)?",
    re.DOTALL,
)

# Any ":name" that text() would read as a bind parameter.
_NAMED_BIND = re.compile(r"(?<![:\w\\]):(?=\w)")


def bind_positional(sql: str, params: Sequence[Any]) -> Tuple[TextClause, Dict[str, Any]]:
    """
    Rewrites ``$1..$n`` placeholders into SQLAlchemy named binds.

    Colons already in the SQL are escaped so ``text()`` sends them verbatim;
    only the generated ``:pN`` binds are bound.

    Args:
        sql: SQL text using 1-indexed positional placeholders.
        params: Values bound by position.

    Returns:
        The compiled ``TextClause`` and the bind values keyed ``p1..pn``.

    Raises:
        ParameterMismatchError: If the highest placeholder index differs from
            the number of supplied parameters.
    """
    highest = 0

    def _replace(match: "re.Match[str]") -> str:
        nonlocal highest
        index = match.group(1)
        if index is None:
            return match.group(0)
        position = int(index)
        if position < 1:
            raise ParameterMismatchError(f"Invalid placeholder ${index}; placeholders start at $1")
        highest = max(highest, position)
        if match.group(2):
            # text() does not treat ":p1::int" as a bind; parenthesize before casts.
            return f"(:p{position})::"
        return f":p{position}"

    rewritten = _PLACEHOLDER.sub(_replace, _NAMED_BIND.sub(r"\\:", sql))

    if highest != len(params):
        raise ParameterMismatchError(
            f"Query references {highest} parameter(s) but {len(params)} were supplied"
        )

    binds = {f"p{position}": value for position, value in enumerate(params, start=1)}
    return text(rewritten), binds

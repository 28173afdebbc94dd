"""JSONPath queries over a JSON response body."""

import json

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse

from api_workbench.errors import DecodeError, QueryError


def query_json(text: str, expression: str) -> str:
    """Evaluate ``expression`` against ``text`` and pretty-print the result.

    One match prints as its value, several as a list, none as ``[]``.
    """
    if not expression.strip():
        raise QueryError("Please enter a JSONPath expression.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    try:
        matches = parse(expression).find(data)
    except JSONPathError as e:
        raise QueryError(f"JSONPath error: {e}") from e

    values = [m.value for m in matches]
    result = values[0] if len(values) == 1 else values
    return json.dumps(result, indent=2, ensure_ascii=False)

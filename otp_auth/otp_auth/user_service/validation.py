"""
Request payload validation helpers.

FastAPI validates bodies against the models in ``schemas`` before a route
handler runs; the exception handler in ``main`` renders failures with
``format_validation_errors`` so every route reports errors the same way.
"""
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Request sections as FastAPI names them in error locations
LOCATION_LABELS = {
    "body": "Invalid body",
    "query": "Invalid query",
    "path": "Invalid params",
}


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """
    Collapse pydantic error entries to one message per field path.

    The first error reported for a path wins. A leading request section
    (``body``, ``query``, ``path``) is dropped from the path.
    """
    formatted: Dict[str, str] = {}
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in LOCATION_LABELS:
            loc = loc[1:]
        path = ".".join(str(part) for part in loc)
        if path not in formatted:
            formatted[path] = error.get("msg", "Invalid value")
    return formatted


def error_label(errors: Iterable[Dict[str, Any]]) -> str:
    """Pick the envelope message from the section of the first error."""
    for error in errors:
        loc = error.get("loc", ())
        if loc and loc[0] in LOCATION_LABELS:
            return LOCATION_LABELS[loc[0]]
        break
    return "Validation failed"


def validate(schema: Type[ModelT], data: Any) -> Tuple[Optional[ModelT], Dict[str, str]]:
    """
    Validate ``data`` against ``schema`` without raising.

    Returns:
        Tuple of (parsed, errors)
        - parsed: the validated model, or None on failure
        - errors: field path -> first failing rule message (empty on success)
    """
    try:
        return schema.model_validate(data), {}
    except ValidationError as exc:
        return None, format_validation_errors(exc.errors())

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

# key used when the body itself is not an object
ROOT_PATH = "body"


@dataclass
class ParseResult(Generic[T]):
    """Outcome of :func:`safe_parse`: either ``value`` or a field-path -> messages map."""

    ok: bool
    value: Optional[T] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)


def flatten_errors(exc: ValidationError) -> Dict[str, List[str]]:
    details: Dict[str, List[str]] = {}
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or ROOT_PATH
        details.setdefault(path, []).append(err["msg"])
    return details


def safe_parse(schema: Type[T], data: Any) -> ParseResult[T]:
    try:
        value = schema.model_validate(data)
    except ValidationError as e:
        return ParseResult(ok=False, errors=flatten_errors(e))
    return ParseResult(ok=True, value=value)

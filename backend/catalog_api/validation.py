"""
Validation layer.

Turns raw payloads (multipart form fields arrive as strings) into typed
schema objects, or raises ``ValidationError`` with every violation found.
Nothing here touches the database or the filesystem.
"""

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog_api.core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off", ""}
REQUEST_LOCATIONS = {"body", "query", "path", "form", "header"}
_IDENTIFIER_RE = re.compile(r"^\d+$")


# --- Coercion helpers (forms transmit strings) ---


def coerce_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return default


def coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    return int(number)


def parse_price(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError("Invalid price")
    if not price.is_finite():
        raise ValueError("Invalid price")
    return price


def parse_json_object(value: Any) -> Dict[str, Any]:
    """Parse the attribute bag, sent as a JSON string by multipart clients."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError("Invalid machine data format")
        if isinstance(parsed, dict):
            return parsed
    raise ValueError("Invalid machine data format")


def parse_id_list(value: Any) -> Optional[List[int]]:
    """
    Accept ``[1, 2]``, ``["1", "2"]`` (repeated form fields), ``"[1, 2]"``
    or ``"1,2"``. Entries that are not numbers are dropped.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and len(value) == 1 and isinstance(value[0], str):
        value = value[0]

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                items = json.loads(text)
            except json.JSONDecodeError:
                raise ValueError("Invalid category IDs format")
            if not isinstance(items, list):
                raise ValueError("Invalid category IDs format")
        else:
            items = text.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    elif isinstance(value, int) and not isinstance(value, bool):
        items = [value]
    else:
        raise ValueError("Invalid category IDs format")

    ids: List[int] = []
    for item in items:
        if isinstance(item, bool):
            continue
        try:
            ids.append(int(str(item).strip()))
        except ValueError:
            continue
    return list(dict.fromkeys(ids))


# --- Schema validation ---


def format_errors(errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into ``{path, message}`` entries."""
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"path": ".".join(loc), "message": message})
    return details


def validate_payload(schema: Type[SchemaT], payload: Mapping[str, Any]) -> SchemaT:
    """
    Validate ``payload`` against ``schema``.

    Raises:
        ValidationError: with one detail per violated field.
    """
    try:
        return schema.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(format_errors(exc.errors()))


def parse_identifier(raw: Any, entity: str) -> int:
    """Reject non-numeric path identifiers before they reach the services."""
    text = str(raw).strip()
    if not _IDENTIFIER_RE.match(text):
        raise ValidationError.single("id", f"Invalid {entity} ID format")
    return int(text)

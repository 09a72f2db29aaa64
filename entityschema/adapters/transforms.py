"""
Type-driven value conversion shared by all adapters.

Adapters compose these functions instead of inheriting them. A field's
custom transform always takes precedence over the type-driven default.
Dates are encoded the same way on every dialect, selected by the field's
declared TimestampFormat.
"""
import json
import re
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable

from ..core.enums import FieldType, TimestampFormat
from ..core.schema_models import FieldDescriptor

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TRUE_STRINGS = {'1', 't', 'true', 'y', 'yes', 'on'}
FALSE_STRINGS = {'0', 'f', 'false', 'n', 'no', 'off', ''}

# ISO text without a time part, as written for a plain date
DATE_ONLY = re.compile(r'^\d{4}-\d{2}-\d{2}$')

Converter = Callable[[Any, FieldDescriptor], Any]


# Booleans

def parse_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return value


def encode_boolean(value: Any, native: bool) -> Any:
    parsed = parse_boolean(value)
    if not isinstance(parsed, bool):
        parsed = bool(parsed)
    if native:
        return parsed
    return 1 if parsed else 0


# Dates

def _as_utc(value: datetime) -> datetime:
    # naive values are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Any:
    """Best-effort conversion of a stored or supplied value to datetime"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return datetime.fromisoformat(text)
    return value


def encode_date(value: Any, fmt: TimestampFormat) -> Any:
    if fmt == TimestampFormat.ISO:
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (EPOCH + timedelta(seconds=value)).isoformat()
        return value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # already in storage units
        return int(value)
    moment = _as_utc(parse_datetime(value))
    unit = timedelta(seconds=1) if fmt == TimestampFormat.UNIX else timedelta(milliseconds=1)
    return (moment - EPOCH) // unit


def decode_date(value: Any, fmt: TimestampFormat, naive: bool = False) -> Any:
    """
    Stored value -> datetime (or date for date-only ISO text).

    Epoch values decode to UTC; with naive=True the tzinfo is dropped so
    naive input written through encode_date reads back equal.
    """
    if isinstance(value, date):
        return value
    if isinstance(value, str) and fmt != TimestampFormat.ISO:
        stripped = value.strip()
        if stripped.lstrip('-').isdigit():
            value = int(stripped)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        if fmt == TimestampFormat.UNIX_MS:
            moment = EPOCH + timedelta(milliseconds=int(value))
        else:
            moment = EPOCH + timedelta(seconds=int(value))
        return moment.replace(tzinfo=None) if naive else moment
    if isinstance(value, str) and DATE_ONLY.match(value.strip()):
        return date.fromisoformat(value.strip())
    try:
        return parse_datetime(value)
    except ValueError:
        # unparseable stored value is handed back unchanged
        return value


# JSON

def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(value: Any) -> Any:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=_json_default)


def decode_json(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    if not isinstance(value, str):
        # driver already decoded it (psycopg JSONB, MySQL JSON)
        return value
    try:
        return json.loads(value)
    except (ValueError, TypeError):
        return value


# UUID

def encode_uuid(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def decode_uuid(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return str(uuid.UUID(bytes=bytes(value)))
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


# Numbers

def parse_numeric_string(value: Any) -> Any:
    """'42' -> 42, '4.2' -> 4.2; anything else unchanged"""
    if not isinstance(value, str):
        return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


# Pipeline

def encode_value(value: Any, field: FieldDescriptor, native_boolean: bool = False) -> Any:
    """Type-driven application -> storage conversion"""
    field_type = field.field_type
    if field_type == FieldType.BOOLEAN:
        return encode_boolean(value, native_boolean)
    if field_type == FieldType.DATE:
        return encode_date(value, field.format)
    if field_type.is_json_like:
        return encode_json(value)
    if field_type == FieldType.UUID:
        return encode_uuid(value)
    return value


def decode_value(value: Any, field: FieldDescriptor) -> Any:
    """Type-driven storage -> application conversion"""
    field_type = field.field_type
    if field_type == FieldType.BOOLEAN:
        return parse_boolean(value)
    if field_type == FieldType.DATE:
        return decode_date(value, field.format, naive=not field.hints.has_timezone)
    if field_type.is_json_like:
        return decode_json(value)
    if field_type == FieldType.UUID:
        return decode_uuid(value)
    return value


def to_database(value: Any, field: FieldDescriptor, encode: Converter) -> Any:
    if field.transform is not None and field.transform.input is not None:
        return field.transform.input(value)
    if value is None:
        return None
    return encode(value, field)


def from_database(value: Any, field: FieldDescriptor, decode: Converter) -> Any:
    if field.transform is not None and field.transform.output is not None:
        return field.transform.output(value)
    if value is None:
        return None
    return decode(value, field)

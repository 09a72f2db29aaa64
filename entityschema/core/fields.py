"""
Field factories for the common field shapes.

Each factory returns a plain FieldDescriptor so the result can be
inspected, copied with dataclasses.replace, or overridden by config.
"""
import secrets
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from .enums import FieldType, TimestampFormat
from .schema_models import DialectHints, FieldDescriptor, Generated, Static, Transform, as_default


NANOID_ALPHABET = string.ascii_letters + string.digits + "_-"
DEFAULT_NANOID_SIZE = 21

ID_STRATEGIES = ('uuid', 'nanoid', 'prefixed', 'incremental', 'custom')


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    return str(uuid.uuid4())


def generate_nanoid(size: int = DEFAULT_NANOID_SIZE) -> str:
    """URL-safe random identifier"""
    return ''.join(secrets.choice(NANOID_ALPHABET) for _ in range(size))


def _descriptor(field_type: FieldType, required: bool = False, default: Any = None,
                validator: Any = None, transform: Optional[Transform] = None,
                description: Optional[str] = None, primary_key: bool = False,
                format: TimestampFormat = TimestampFormat.ISO, **hint_kwargs) -> FieldDescriptor:
    hints = DialectHints(**{k: v for k, v in hint_kwargs.items() if v is not None})
    return FieldDescriptor(
        field_type=field_type,
        required=required,
        default=as_default(default),
        validator=validator,
        transform=transform,
        primary_key=primary_key,
        hints=hints,
        description=description,
        format=format,
    )


# Scalars

def string_field(required: bool = False, default: Any = None, max_size: Optional[int] = None,
                 indexed: bool = False, unique: bool = False, **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.STRING, required=required, default=default,
                       max_size=max_size, indexed=indexed, unique=unique, **kwargs)


def email_field(required: bool = True, unique: bool = True, **kwargs) -> FieldDescriptor:
    return string_field(required=required, max_size=255, unique=unique, indexed=unique, **kwargs)


def url_field(required: bool = False, **kwargs) -> FieldDescriptor:
    return string_field(required=required, max_size=2048, **kwargs)


def slug_field(required: bool = True, unique: bool = True, **kwargs) -> FieldDescriptor:
    return string_field(required=required, max_size=100, unique=unique, indexed=True, **kwargs)


def number_field(required: bool = False, default: Any = None, integer: bool = False,
                 precision: Optional[int] = None, scale: Optional[int] = None,
                 indexed: bool = False, **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.NUMBER, required=required, default=default, integer=integer,
                       precision=precision, scale=scale, indexed=indexed, **kwargs)


def boolean_field(required: bool = False, default: Any = None, **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.BOOLEAN, required=required, default=default, **kwargs)


# Identifiers

def id_field(strategy: str = 'uuid', prefix: Optional[str] = None, size: int = DEFAULT_NANOID_SIZE,
             start_from: Optional[int] = None, generator: Optional[Callable[[], Any]] = None,
             description: Optional[str] = None) -> FieldDescriptor:
    """
    Primary key field.

    Args:
        strategy: One of uuid, nanoid, prefixed, incremental, custom
        prefix: Required for the prefixed strategy, e.g. "usr" -> "usr_V1StGXR8..."
        size: Length of the random part for nanoid/prefixed ids
        start_from: First value for incremental ids
        generator: Zero-argument callable for the custom strategy
    """
    if strategy not in ID_STRATEGIES:
        raise ValueError(f"Unknown id strategy '{strategy}'. Expected one of: {', '.join(ID_STRATEGIES)}")

    if strategy == 'uuid':
        return _descriptor(FieldType.UUID, required=True, primary_key=True,
                           default=Generated(generate_uuid, label='uuid'), description=description)

    if strategy == 'nanoid':
        return _descriptor(FieldType.STRING, required=True, primary_key=True, max_size=size,
                           default=Generated(lambda: generate_nanoid(size), label='nanoid'),
                           description=description)

    if strategy == 'prefixed':
        if not prefix:
            raise ValueError("prefix is required for prefixed ids")
        return _descriptor(FieldType.STRING, required=True, primary_key=True,
                           max_size=len(prefix) + 1 + size,
                           default=Generated(lambda: f"{prefix}_{generate_nanoid(size)}", label='prefixed'),
                           description=description)

    if strategy == 'incremental':
        # Assigned by the database; never filled by the application
        return _descriptor(FieldType.INCREMENTAL_ID, primary_key=True, integer=True,
                           increment_start=start_from, description=description)

    if generator is None:
        raise ValueError("generator is required for custom ids")
    return _descriptor(FieldType.STRING, required=True, primary_key=True,
                       default=Generated(generator, label='custom'), description=description)


def uuid_field(**kwargs) -> FieldDescriptor:
    return id_field('uuid', **kwargs)


def prefixed_id_field(prefix: str, **kwargs) -> FieldDescriptor:
    return id_field('prefixed', prefix=prefix, **kwargs)


def incremental_id_field(start_from: Optional[int] = None, **kwargs) -> FieldDescriptor:
    return id_field('incremental', start_from=start_from, **kwargs)


# Timestamps

def timestamp_field(format: TimestampFormat = TimestampFormat.ISO, required: bool = False,
                    default: Any = None, has_timezone: bool = False, indexed: bool = False,
                    **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.DATE, required=required, default=default, format=format,
                       has_timezone=has_timezone, indexed=indexed, **kwargs)


date_field = timestamp_field


def created_at_field(format: TimestampFormat = TimestampFormat.ISO, **kwargs) -> FieldDescriptor:
    return timestamp_field(format=format, required=True, default=Generated(now_utc, label='now'), **kwargs)


def updated_at_field(format: TimestampFormat = TimestampFormat.ISO, **kwargs) -> FieldDescriptor:
    return timestamp_field(format=format, required=True, default=Generated(now_utc, label='now'), **kwargs)


def deleted_at_field(format: TimestampFormat = TimestampFormat.ISO, **kwargs) -> FieldDescriptor:
    """Soft-delete marker; NULL while the row is live"""
    return timestamp_field(format=format, indexed=True, **kwargs)


def expires_at_field(ttl: Optional[timedelta] = None, format: TimestampFormat = TimestampFormat.ISO,
                     **kwargs) -> FieldDescriptor:
    default = None
    if ttl is not None:
        default = Generated(lambda: now_utc() + ttl, label='expires', builtin=False)
    return timestamp_field(format=format, default=default, indexed=True, **kwargs)


# Structured values

def json_field(required: bool = False, default: Any = None, **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.JSON, required=required, default=default, **kwargs)


def metadata_field(**kwargs) -> FieldDescriptor:
    return json_field(default=Static({}), **kwargs)


def settings_field(defaults: Optional[Dict[str, Any]] = None, **kwargs) -> FieldDescriptor:
    return json_field(default=Static(dict(defaults or {})), **kwargs)


def array_field(required: bool = False, default: Any = None, **kwargs) -> FieldDescriptor:
    return _descriptor(FieldType.ARRAY, required=required, default=default, **kwargs)


def string_array_field(default: Optional[List[str]] = None, **kwargs) -> FieldDescriptor:
    return array_field(default=Static(list(default or [])), **kwargs)


def number_array_field(default: Optional[List[float]] = None, **kwargs) -> FieldDescriptor:
    return array_field(default=Static(list(default or [])), **kwargs)

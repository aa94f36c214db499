"""Alias-aware dict conversion for vault documents.

Reading accepts a field's attribute name or the capitalized alias the
service sends; writing always uses attribute names.
"""

import re
import typing
from dataclasses import MISSING, field, fields
from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID

from ..crypto.cipher_string import CipherString
from ..crypto.exceptions import InvalidCipherStringError

_FRACTION = re.compile(r"\.(\d+)")
_NONE_TYPE = type(None)


class WireFormatError(ValueError):
    """Raised when a document does not match the model it is read into."""


def wire_field(
    alias: Optional[str] = None,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    persist: bool = True,
    compare: bool = True,
    repr: bool = True,
) -> Any:
    """Dataclass field carrying its service alias. persist=False keeps it out of documents."""
    kwargs: dict[str, Any] = {
        "metadata": {"alias": alias, "persist": persist},
        "compare": compare,
        "repr": repr,
    }
    if default is not MISSING:
        kwargs["default"] = default
    if default_factory is not MISSING:
        kwargs["default_factory"] = default_factory
    return field(**kwargs)


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Parse a service timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"expected timestamp string, got {type(value).__name__}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime(value: datetime) -> str:
    """Format a datetime as ISO-8601 with an explicit offset."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner type, is_optional) for Optional[X]."""
    if typing.get_origin(tp) is Union:
        args = [a for a in typing.get_args(tp) if a is not _NONE_TYPE]
        optional = len(args) != len(typing.get_args(tp))
        if len(args) == 1:
            return args[0], optional
        return Union[tuple(args)], optional
    return tp, False


def _decode(tp: Any, value: Any) -> Any:
    tp, optional = _unwrap_optional(tp)

    if value is None:
        if optional or tp is Any:
            return None
        raise TypeError("value is required but was null")

    if tp is Any:
        return value

    origin = typing.get_origin(tp)
    if origin is list:
        if not isinstance(value, list):
            raise TypeError(f"expected list, got {type(value).__name__}")
        (item_type,) = typing.get_args(tp) or (Any,)
        return [_decode(item_type, item) for item in value]

    if origin is dict or tp is dict:
        if not isinstance(value, dict):
            raise TypeError(f"expected object, got {type(value).__name__}")
        return value

    if isinstance(tp, type) and issubclass(tp, WireModel):
        if not isinstance(value, dict):
            raise TypeError(f"expected object, got {type(value).__name__}")
        return tp.from_dict(value)

    if tp is UUID:
        return value if isinstance(value, UUID) else UUID(str(value))

    if tp is datetime:
        return parse_datetime(value)

    if tp is CipherString:
        return value if isinstance(value, CipherString) else CipherString.parse(value)

    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected boolean, got {type(value).__name__}")
        return value

    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected integer, got {type(value).__name__}")
        return value

    if tp is str:
        if not isinstance(value, str):
            raise TypeError(f"expected string, got {type(value).__name__}")
        return value

    return value


def _encode(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, WireModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(item) for item in value]
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, CipherString):
        return value.raw
    return value


class WireModel:
    """Mixin giving a dataclass alias-aware ``from_dict`` / ``to_dict``."""

    @classmethod
    def _wire_fields(cls):
        hints = typing.get_type_hints(cls)
        for f in fields(cls):
            if f.metadata.get("persist", True):
                yield f, hints[f.name]

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a model from a document, raising WireFormatError on a mismatch."""
        if not isinstance(data, dict):
            raise WireFormatError(f"{cls.__name__}: expected object, got {type(data).__name__}")

        kwargs: dict[str, Any] = {}
        for f, tp in cls._wire_fields():
            alias = f.metadata.get("alias")
            if f.name in data:
                raw = data[f.name]
            elif alias and alias in data:
                raw = data[alias]
            elif f.default is not MISSING or f.default_factory is not MISSING:
                continue
            else:
                key = f"{f.name!r} (alias {alias!r})" if alias else repr(f.name)
                raise WireFormatError(f"{cls.__name__}: missing field {key}")

            try:
                kwargs[f.name] = _decode(tp, raw)
            except WireFormatError:
                raise
            except (TypeError, ValueError, InvalidCipherStringError) as e:
                raise WireFormatError(f"{cls.__name__}.{f.name}: {e}") from e

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary with canonical names for JSON serialization."""
        return {f.name: _encode(getattr(self, f.name)) for f, _ in self._wire_fields()}

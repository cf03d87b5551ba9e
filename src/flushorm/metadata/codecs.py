"""
Value codecs translating attribute values to and from driver parameters.

Codecs are looked up along the value type's MRO, so registering a codec for
a base class covers its subclasses unless a more specific codec exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from threading import Lock
from typing import Any, Callable, Dict, Optional


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class Codec:
    encode: Callable[[Any], Any] = _identity
    decode: Callable[[Any], Any] = _identity


def _decode_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in {"1", "t", "true"}
    return bool(value)


def _decode_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return datetime.fromisoformat(str(value))


def _decode_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return date.fromisoformat(str(value))


def _decode_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class CodecRegistry:
    """
    Mapping from Python types to encode/decode strategies.
    """

    def __init__(self, codecs: Optional[Dict[type, Codec]] = None) -> None:
        self._codecs: Dict[type, Codec] = dict(codecs or {})
        self._lock = Lock()

    def register(self, python_type: type, codec: Codec) -> None:
        with self._lock:
            codecs = dict(self._codecs)
            codecs[python_type] = codec
            self._codecs = codecs

    def lookup(self, python_type: type) -> Codec | None:
        codecs = self._codecs
        for klass in python_type.__mro__:
            codec = codecs.get(klass)
            if codec is not None:
                return codec
        return None

    def encode(self, value: Any) -> Any:
        if value is None:
            return None
        codec = self.lookup(type(value))
        if codec is None:
            raise TypeError(f"Unsupported parameter type: {type(value).__name__}")
        return codec.encode(value)

    def decode(self, value: Any, python_type: type) -> Any:
        if value is None:
            return None
        codec = self.lookup(python_type)
        if codec is None:
            return value
        return codec.decode(value)


_NATIVE = Codec()


def default_codecs(backend: str = "sqlite") -> CodecRegistry:
    """
    Build the codec table for a backend. SQLite has no native date, decimal
    or boolean storage so those travel as text/integers; the PostgreSQL and
    MySQL drivers adapt them natively.
    """
    registry = CodecRegistry(
        {
            str: _NATIVE,
            int: _NATIVE,
            float: _NATIVE,
            bytes: _NATIVE,
            bool: Codec(decode=_decode_bool),
            datetime: Codec(decode=_decode_datetime),
            date: Codec(decode=_decode_date),
            Decimal: Codec(decode=_decode_decimal),
        }
    )
    if backend == "sqlite":
        registry.register(bool, Codec(encode=int, decode=_decode_bool))
        registry.register(datetime, Codec(encode=lambda value: value.isoformat(), decode=_decode_datetime))
        registry.register(date, Codec(encode=lambda value: value.isoformat(), decode=_decode_date))
        registry.register(Decimal, Codec(encode=str, decode=_decode_decimal))
    return registry

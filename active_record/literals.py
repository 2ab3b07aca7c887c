import datetime
import decimal
import typing
from functools import singledispatch

from active_record import schema


NULL = "NULL"

_TRUTHY = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSY = frozenset({"", "0", "f", "false", "n", "no", "off"})
_NUMERIC_BOOLEAN_DIALECTS = frozenset({"sqlite", "mysql", "mssql"})


def quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


@singledispatch
def to_literal(value: typing.Any, dialect: str) -> str:
    return quote(str(value))


@to_literal.register(type(None))
def _(value: None, dialect: str) -> str:
    return NULL


@to_literal.register(bool)
def _(value: bool, dialect: str) -> str:
    if dialect in _NUMERIC_BOOLEAN_DIALECTS:
        return "1" if value else "0"
    return "TRUE" if value else "FALSE"


@to_literal.register(int)
def _(value: int, dialect: str) -> str:
    return str(value)


@to_literal.register(float)
def _(value: float, dialect: str) -> str:
    return repr(value)


@to_literal.register(decimal.Decimal)
def _(value: decimal.Decimal, dialect: str) -> str:
    return str(value)


@to_literal.register(bytes)
def _(value: bytes, dialect: str) -> str:
    if dialect == "postgresql":
        return f"'\\x{value.hex()}'::bytea"
    return f"X'{value.hex()}'"


@to_literal.register(datetime.date)
def _(value: datetime.date, dialect: str) -> str:
    return quote(value.isoformat())


@to_literal.register(datetime.datetime)
def _(value: datetime.datetime, dialect: str) -> str:
    return quote(value.isoformat(sep=" "))


@to_literal.register(datetime.time)
def _(value: datetime.time, dialect: str) -> str:
    return quote(value.isoformat())


def to_boolean(value: typing.Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ValueError(f"Not a boolean value - {value!r}")
    return bool(value)


def coerce(column_type: str, value: typing.Any) -> typing.Any:
    """Bring a Python value to the representation expected by ``column_type``."""
    if value is None:
        return None
    if column_type == schema.INTEGER:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, (float, decimal.Decimal)) and value != int(value):
            raise ValueError(f"Not a whole number - {value!r}")
        return int(value)
    if column_type == schema.FLOAT:
        if isinstance(value, (int, float, decimal.Decimal)) and not isinstance(value, bool):
            return value
        return decimal.Decimal(str(value).strip())
    if column_type == schema.BOOLEAN:
        return to_boolean(value)
    if column_type == schema.BLOB:
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)
    if column_type in schema.TEXT_TYPES:
        return value if isinstance(value, str) else str(value)
    return value


def encode(column_type: str, value: typing.Any, dialect: str, operator: typing.Optional[str] = None) -> str:
    literal = to_literal(coerce(column_type, value), dialect)
    if operator is None:
        return literal
    if literal == NULL:
        if operator == "=":
            return "IS NULL"
        if operator in ("!=", "<>"):
            return "IS NOT NULL"
    return f"{operator} {literal}"


def decode_boolean(value: typing.Any) -> typing.Optional[bool]:
    if value is None:
        return None
    return to_boolean(value)


def decode_blob(value: typing.Any) -> typing.Optional[bytes]:
    if value is None or isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)

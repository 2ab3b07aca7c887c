import abc
import typing

import attr
from sqlalchemy import CHAR, Boolean, Column, Date, DateTime, Float, Integer, LargeBinary, MetaData, Numeric
from sqlalchemy import String, Table, Text, Time

from active_record.exceptions import ProgrammerError


INTEGER = "integer"
FLOAT = "float"
BOOLEAN = "boolean"
VARCHAR = "varchar"
CHAR_TYPE = "char"
TEXT = "text"
DATE = "date"
TIME = "time"
TIMESTAMP = "timestamp"
BLOB = "blob"

TEXT_TYPES = frozenset({VARCHAR, CHAR_TYPE, TEXT})
DATE_TYPES = frozenset({DATE, TIME, TIMESTAMP})
NUMERIC_TYPES = frozenset({INTEGER, FLOAT})

MANY_TO_ONE = "many-to-one"
ONE_TO_MANY = "one-to-many"
MANY_TO_MANY = "many-to-many"

# order matters, more specific classes first
mapping = [
    (Boolean, BOOLEAN),
    (Integer, INTEGER),
    (Float, FLOAT),
    (Numeric, FLOAT),
    (DateTime, TIMESTAMP),
    (Date, DATE),
    (Time, TIME),
    (LargeBinary, BLOB),
    (Text, TEXT),
    (CHAR, CHAR_TYPE),
    (String, VARCHAR),
]


def convert(column_type: typing.Any) -> str:
    for sa_type, name in mapping:
        if isinstance(column_type, sa_type):
            return name
    raise TypeError(f"Unsupported type - {column_type!r}")


@attr.s(auto_attribs=True, frozen=True)
class ColumnInfo:
    name: str
    type: str
    auto_increment: bool = False
    not_null: bool = False
    has_default: bool = False
    max_length: typing.Optional[int] = None


@attr.s(auto_attribs=True, frozen=True)
class Relationship:
    kind: str
    table: str
    column: str
    related_table: str
    related_column: str
    join_table: typing.Optional[str] = None
    join_column: typing.Optional[str] = None
    join_related_column: typing.Optional[str] = None


class SchemaProvider(abc.ABC):
    @abc.abstractmethod
    def column_info(self, table: str) -> typing.Dict[str, ColumnInfo]:
        pass

    @abc.abstractmethod
    def primary_key_columns(self, table: str) -> typing.List[str]:
        pass

    @abc.abstractmethod
    def relationships(self, table: str, kind: typing.Optional[str] = None) -> typing.List[Relationship]:
        pass


class SqlAlchemySchema(SchemaProvider):
    """Schema metadata read from SQLAlchemy ``Table`` objects.

    Tables may be declared by hand on a ``MetaData`` or reflected from a live
    database with :meth:`reflect`.
    """

    def __init__(self, metadata: MetaData) -> None:
        self._metadata = metadata

    @classmethod
    def reflect(cls, bind: typing.Any) -> "SqlAlchemySchema":
        metadata = MetaData()
        metadata.reflect(bind=bind)
        return cls(metadata)

    def _table(self, table: str) -> Table:
        try:
            return self._metadata.tables[table]
        except KeyError:
            raise ProgrammerError(f"Unknown table - {table}") from None

    def column_info(self, table: str) -> typing.Dict[str, ColumnInfo]:
        sa_table = self._table(table)
        return {column.name: self._describe(sa_table, column) for column in sa_table.columns}

    def primary_key_columns(self, table: str) -> typing.List[str]:
        return [column.name for column in self._table(table).primary_key.columns]

    def relationships(self, table: str, kind: typing.Optional[str] = None) -> typing.List[Relationship]:
        found: typing.List[Relationship] = []
        sa_table = self._table(table)

        for foreign_key in sa_table.foreign_keys:
            found.append(
                Relationship(
                    kind=MANY_TO_ONE,
                    table=table,
                    column=foreign_key.parent.name,
                    related_table=foreign_key.column.table.name,
                    related_column=foreign_key.column.name,
                )
            )

        for other in self._metadata.sorted_tables:
            if other is sa_table:
                continue
            if _is_join_table(other):
                found.extend(_many_to_many(sa_table, other))
                continue
            for foreign_key in other.foreign_keys:
                if foreign_key.column.table is sa_table:
                    found.append(
                        Relationship(
                            kind=ONE_TO_MANY,
                            table=table,
                            column=foreign_key.column.name,
                            related_table=other.name,
                            related_column=foreign_key.parent.name,
                        )
                    )

        if kind is None:
            return found
        return [relationship for relationship in found if relationship.kind == kind]

    @staticmethod
    def _describe(sa_table: Table, column: Column) -> ColumnInfo:
        column_type = convert(column.type)
        primary_key = list(sa_table.primary_key.columns)
        auto_increment = column.autoincrement is True or (
            column.autoincrement == "auto"
            and len(primary_key) == 1
            and column is primary_key[0]
            and column_type == INTEGER
            and not column.foreign_keys
        )
        return ColumnInfo(
            name=column.name,
            type=column_type,
            auto_increment=bool(auto_increment) and column.primary_key,
            not_null=not column.nullable,
            has_default=column.default is not None or column.server_default is not None,
            max_length=getattr(column.type, "length", None) if column_type in TEXT_TYPES else None,
        )


def _is_join_table(table: Table) -> bool:
    foreign_keys = list(table.foreign_keys)
    return len(foreign_keys) == 2 and all(column.primary_key for column in table.columns)


def _many_to_many(sa_table: Table, join_table: Table) -> typing.List[Relationship]:
    first, second = sorted(join_table.foreign_keys, key=lambda foreign_key: foreign_key.parent.name)
    found = []
    for own, other in ((first, second), (second, first)):
        if own.column.table is not sa_table:
            continue
        found.append(
            Relationship(
                kind=MANY_TO_MANY,
                table=sa_table.name,
                column=own.column.name,
                related_table=other.column.table.name,
                related_column=other.column.name,
                join_table=join_table.name,
                join_column=own.parent.name,
                join_related_column=other.parent.name,
            )
        )
    return found

import abc
import logging
import typing

import attr
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from active_record import literals
from active_record.exceptions import NotFound, StorageError
from active_record.schema import SchemaProvider, SqlAlchemySchema


logger = logging.getLogger(__name__)

Row = typing.Dict[str, typing.Any]


@attr.s(auto_attribs=True)
class Result:
    """Outcome of one statement.

    An empty ``rows`` list is a successful query that matched nothing; a failed
    query never produces a ``Result`` and raises ``StorageError`` instead.
    """

    rows: typing.List[Row] = attr.Factory(list)
    auto_increment: typing.Any = None
    affected_rows: int = 0
    fetch_auto_increment: typing.Optional[typing.Callable[[], typing.Any]] = None

    @property
    def empty(self) -> bool:
        return not self.rows

    def current(self) -> Row:
        if self.empty:
            raise NotFound("The result does not contain any rows")
        return self.rows[0]

    def auto_incremented_value(self) -> typing.Any:
        if self.auto_increment is None and self.fetch_auto_increment is not None:
            self.auto_increment = self.fetch_auto_increment()
        return self.auto_increment


class Database(abc.ABC):
    dialect: str = "default"

    def __init__(self, schema: SchemaProvider) -> None:
        self.schema = schema

    @abc.abstractmethod
    def execute(self, sql: str) -> Result:
        pass

    @abc.abstractmethod
    def begin(self) -> None:
        pass

    @abc.abstractmethod
    def commit(self) -> None:
        pass

    @abc.abstractmethod
    def rollback(self) -> None:
        pass

    def close(self) -> None:
        pass

    def encode_literal(self, table: str, column: str, value: typing.Any, operator: typing.Optional[str] = None) -> str:
        column_type = self.schema.column_info(table)[column].type
        return literals.encode(column_type, value, self.dialect, operator)

    def decode_boolean(self, value: typing.Any) -> typing.Optional[bool]:
        return literals.decode_boolean(value)

    def decode_blob(self, value: typing.Any) -> typing.Optional[bytes]:
        return literals.decode_blob(value)


class SqlAlchemyDatabase(Database):
    def __init__(self, connection: Connection, schema: SchemaProvider, owns_connection: bool = False) -> None:
        super().__init__(schema)
        self._connection = connection
        self._owns_connection = owns_connection
        self.dialect = connection.dialect.name

    @classmethod
    def from_url(
        cls, url: str, schema: typing.Optional[SchemaProvider] = None, echo: bool = False
    ) -> "SqlAlchemyDatabase":
        connection = create_engine(url, echo=echo).connect()
        if schema is None:
            schema = SqlAlchemySchema.reflect(connection)
            connection.commit()
        return cls(connection, schema, owns_connection=True)

    @property
    def connection(self) -> Connection:
        return self._connection

    def execute(self, sql: str) -> Result:
        try:
            cursor = self._connection.exec_driver_sql(sql, execution_options={"no_parameters": True})
            if cursor.returns_rows:
                return Result(rows=[dict(row) for row in cursor.mappings()])
            result = Result(affected_rows=cursor.rowcount)
            if sql.lstrip()[:6].upper() == "INSERT":
                if self.dialect == "postgresql":
                    # lastval() errors out unless the insert advanced a sequence, so ask lazily
                    result.fetch_auto_increment = self._last_sequence_value
                else:
                    result.auto_increment = cursor.lastrowid
            return result
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def _last_sequence_value(self) -> typing.Any:
        try:
            return self._connection.exec_driver_sql("SELECT lastval()").scalar()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def begin(self) -> None:
        try:
            if not self._connection.in_transaction():
                self._connection.begin()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def commit(self) -> None:
        try:
            self._connection.commit()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def rollback(self) -> None:
        try:
            self._connection.rollback()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def close(self) -> None:
        if self._owns_connection:
            logger.debug("Closing connection to %s", self._connection.engine.url)
            self._connection.close()

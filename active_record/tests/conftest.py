import typing

import pytest
from _pytest.config.argparsing import Parser
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, LargeBinary, MetaData, String
from sqlalchemy import Table, Text

from active_record import Database, Result, SqlAlchemySchema, StorageError, UnitOfWork


def pytest_addoption(parser: Parser) -> None:
    parser.addoption("--sqlalchemy-url", action="store", default="sqlite://")


class RecordingDatabase(Database):
    """Keeps every statement it was asked to run, transaction control included."""

    dialect = "sqlite"

    def __init__(self, schema: SqlAlchemySchema) -> None:
        super().__init__(schema)
        self.statements: typing.List[str] = []
        self.selects: typing.List[Result] = []
        self.fail_on: typing.Optional[str] = None
        self.next_id = 42

    def execute(self, sql: str) -> Result:
        self.statements.append(sql)
        if self.fail_on and sql.startswith(self.fail_on):
            raise StorageError(f"{self.fail_on} failed")
        if sql.startswith("SELECT"):
            return self.selects.pop(0) if self.selects else Result()
        if sql.startswith("INSERT"):
            return Result(auto_increment=self.next_id, affected_rows=1)
        return Result(affected_rows=1)

    def begin(self) -> None:
        self.statements.append("BEGIN")

    def commit(self) -> None:
        self.statements.append("COMMIT")

    def rollback(self) -> None:
        self.statements.append("ROLLBACK")


@pytest.fixture()
def metadata() -> MetaData:
    metadata = MetaData()
    Table(
        "users",
        metadata,
        Column("user_id", Integer, primary_key=True),
        Column("name", String(50), nullable=False),
        Column("email", String(100)),
        Column("is_active", Boolean),
        Column("born_on", Date),
        Column("last_login", DateTime),
        Column("avatar", LargeBinary),
        Column("score", Float),
    )
    Table(
        "groups",
        metadata,
        Column("group_id", Integer, primary_key=True),
        Column("name", String(50), nullable=False),
    )
    Table(
        "users_groups",
        metadata,
        Column("user_id", Integer, ForeignKey("users.user_id"), primary_key=True),
        Column("group_id", Integer, ForeignKey("groups.group_id"), primary_key=True),
    )
    Table(
        "translations",
        metadata,
        Column("locale", String(5), primary_key=True),
        Column("message_key", String(50), primary_key=True),
        Column("body", Text),
    )
    return metadata


@pytest.fixture()
def schema(metadata: MetaData) -> SqlAlchemySchema:
    return SqlAlchemySchema(metadata)


@pytest.fixture()
def database(schema: SqlAlchemySchema) -> RecordingDatabase:
    return RecordingDatabase(schema)


@pytest.fixture()
def unit_of_work(database: RecordingDatabase, schema: SqlAlchemySchema) -> UnitOfWork:
    return UnitOfWork(database, schema)


@pytest.fixture()
def user_row() -> typing.Dict[str, typing.Any]:
    return {
        "user_id": 1,
        "name": "John",
        "email": "john@example.com",
        "is_active": 1,
        "born_on": "1990-05-17",
        "last_login": "2021-03-04 05:06:07",
        "avatar": b"\x89PNG",
        "score": 4.5,
    }

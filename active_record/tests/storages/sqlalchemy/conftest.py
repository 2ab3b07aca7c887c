from typing import Generator

import pytest
from _pytest.fixtures import SubRequest
from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Connection, Engine

from active_record import SqlAlchemyDatabase, SqlAlchemySchema, UnitOfWork


@pytest.fixture()
def engine(request: SubRequest) -> Engine:
    return create_engine(request.config.getoption("--sqlalchemy-url", default="sqlite://"))


@pytest.fixture()
def connection(engine: Engine, metadata: MetaData) -> Generator[Connection, None, None]:
    with engine.connect() as connection:
        metadata.drop_all(connection)
        metadata.create_all(connection)
        connection.commit()
        yield connection
        connection.rollback()
        metadata.drop_all(connection)
        connection.commit()


@pytest.fixture()
def sa_database(connection: Connection, schema: SqlAlchemySchema) -> SqlAlchemyDatabase:
    return SqlAlchemyDatabase(connection, schema)


@pytest.fixture()
def sa_unit_of_work(sa_database: SqlAlchemyDatabase, schema: SqlAlchemySchema) -> UnitOfWork:
    return UnitOfWork(sa_database, schema)

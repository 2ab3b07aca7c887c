import logging
import typing
from contextlib import contextmanager

from active_record.database import Database


logger = logging.getLogger(__name__)

Values = typing.Mapping[str, typing.Any]


def primary_key_where_clause(
    database: Database, table: str, primary_keys: typing.Sequence[str], values: Values, old_values: Values
) -> str:
    conditions = []
    for column in primary_keys:
        # a changed key is still matched by the value the row was stored under
        value = old_values.get(column)
        if value is None or value == "":
            value = values[column]
        conditions.append(f"{column} {database.encode_literal(table, column, value, '=')}")
    return " AND ".join(conditions)


def select_sql(table: str, where: str) -> str:
    return f"SELECT * FROM {table} WHERE {where}"


def insert_sql(table: str, sql_values: typing.Mapping[str, str]) -> str:
    columns = ", ".join(sql_values)
    values = ", ".join(sql_values.values())
    return f"INSERT INTO {table} ({columns}) VALUES ({values})"


def update_sql(table: str, sql_values: typing.Mapping[str, str], where: str) -> str:
    assignments = ", ".join(f"{column} = {sql_value}" for column, sql_value in sql_values.items())
    return f"UPDATE {table} SET {assignments} WHERE {where}"


def delete_sql(table: str, where: str) -> str:
    return f"DELETE FROM {table} WHERE {where}"


@contextmanager
def transaction(database: Database, enabled: bool = True) -> typing.Generator[None, None, None]:
    if not enabled:
        yield
        return

    database.begin()
    try:
        yield
        database.commit()
    except BaseException:
        try:
            database.rollback()
        except Exception:
            logger.exception("Rollback failed, re-raising the error that caused it")
        raise

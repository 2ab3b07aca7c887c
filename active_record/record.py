import logging
import typing
from collections.abc import Mapping

import inflection

from active_record import literals, persister, schema
from active_record.database import Result
from active_record.exceptions import InvalidKeyShape, MissingCollaborator, NotFound, NotPersisted, ProgrammerError
from active_record.exceptions import UnknownColumn
from active_record.formatting import prepare
from active_record.identity_map import PrimaryKey, ValueStorage
from active_record.schema import ColumnInfo


logger = logging.getLogger(__name__)


def _is_scalar(value: typing.Any) -> bool:
    return not isinstance(value, (Mapping, list, tuple, set, frozenset))


class ActiveRecord:
    """One row of a table.

    Subclasses map to the table named after the pluralized, underscored class
    name (``UserGroup`` -> ``user_groups``) unless ``__table__`` is set.
    Column values are reached through dynamically resolved accessors::

        user = User(unit_of_work, 1)
        user.set_email("john@example.com")
        user.get_email()
        user.format_created_at("%d.%m.%Y")
        user.store()

    ``find_``, ``link_``, ``create_`` and ``form_`` calls are handed over to
    the unit of work's related data handler.
    """

    __table__: typing.Optional[str] = None

    def __init__(self, unit_of_work: typing.Any, primary_key: typing.Any = None) -> None:
        self.unit_of_work = unit_of_work
        self._accessors = unit_of_work.accessors(type(self))
        self._storage = ValueStorage(values=dict.fromkeys(self._column_info()), debug=unit_of_work.debug)

        if isinstance(primary_key, Result):
            if self._load_from_identity_map(primary_key):
                return
            self.load_by_result(primary_key)
            return

        if primary_key is None:
            return

        if self._load_from_identity_map(primary_key):
            return

        primary_keys = self._primary_keys()
        if len(primary_keys) > 1:
            if not isinstance(primary_key, Mapping) or set(primary_key) != set(primary_keys):
                raise InvalidKeyShape(f"An invalidly formatted primary key was passed to {type(self).__name__}")
            for column in primary_keys:
                self._storage.values[column] = primary_key[column]
        else:
            if not _is_scalar(primary_key):
                raise InvalidKeyShape(f"An invalidly formatted primary key was passed to {type(self).__name__}")
            self._storage.values[primary_keys[0]] = primary_key

        self.load()

    @classmethod
    def configure(cls, unit_of_work: typing.Any) -> None:
        """Hook run once per unit of work, before the first instance is created."""

    @classmethod
    def table_name(cls) -> str:
        return cls.__table__ or inflection.pluralize(inflection.underscore(cls.__name__))

    @classmethod
    def record_name(cls) -> str:
        return inflection.humanize(inflection.underscore(cls.__name__)).lower()

    @property
    def values(self) -> typing.Dict[str, typing.Any]:
        return self._storage.values

    @property
    def old_values(self) -> typing.Dict[str, typing.Any]:
        return self._storage.old_values

    @property
    def exists(self) -> bool:
        return self.check_if_exists()

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("_"):
            raise AttributeError(name)
        underscored = inflection.underscore(name)
        if underscored != name and hasattr(type(self), underscored):
            return getattr(self, underscored)
        return self._accessors.resolve(self, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._storage.values!r})"

    def set_debug(self, enable: bool) -> None:
        self._storage.debug = bool(enable)

    def _column_info(self) -> typing.Dict[str, ColumnInfo]:
        return self.unit_of_work.schema.column_info(self.table_name())

    def _column(self, column: str) -> ColumnInfo:
        try:
            return self._column_info()[column]
        except KeyError:
            raise UnknownColumn(f"The column {column} does not exist in {self.table_name()}") from None

    def _primary_keys(self) -> typing.List[str]:
        primary_keys = self.unit_of_work.schema.primary_key_columns(self.table_name())
        if not primary_keys:
            raise ProgrammerError(f"The table {self.table_name()} does not have a primary key")
        return primary_keys

    def _primary_key_tuple(self) -> PrimaryKey:
        return tuple(self._storage.values.get(column) for column in self._primary_keys())

    def _stored_primary_key(self) -> PrimaryKey:
        key = []
        for column in self._primary_keys():
            value = self._storage.old_values.get(column)
            if value is None or value == "":
                value = self._storage.values.get(column)
            key.append(value)
        return tuple(key)

    def _where_clause(self) -> str:
        return persister.primary_key_where_clause(
            self.unit_of_work.database,
            self.table_name(),
            self._primary_keys(),
            self._storage.values,
            self._storage.old_values,
        )

    def _execute(self, sql: str) -> Result:
        if self._storage.debug:
            logger.debug("%s: %s", type(self).__name__, sql)
        return self.unit_of_work.database.execute(sql)

    def _load_from_identity_map(self, source: typing.Any) -> bool:
        row = source.current() if isinstance(source, Result) else source
        primary_keys = self._primary_keys()

        if isinstance(row, Mapping):
            if any(column not in row for column in primary_keys):
                return False
            key = tuple(row[column] for column in primary_keys)
        elif len(primary_keys) == 1 and _is_scalar(row):
            key = (row,)
        else:
            return False

        storage = self.unit_of_work.identity_map.lookup(type(self), key)
        if storage is None:
            return False

        self._storage = storage
        return True

    def load(self) -> None:
        table = self.table_name()
        result = self._execute(persister.select_sql(table, self._where_clause()))
        if result.empty:
            raise NotFound(f"The {self.record_name()} requested could not be found")
        self.load_by_result(result)

    def load_by_result(self, result: Result) -> None:
        database = self.unit_of_work.database
        column_info = self._column_info()
        values = self._storage.values

        for column, value in result.current().items():
            info = column_info.get(column)
            if value is None or info is None:
                values[column] = value
            elif info.type == schema.BOOLEAN:
                values[column] = database.decode_boolean(value)
            elif info.type == schema.BLOB:
                values[column] = database.decode_blob(value)
            else:
                values[column] = value
        self._storage.old_values.clear()

        # the first storage registered for a key stays canonical
        key = self._primary_key_tuple()
        if all(value is not None for value in key):
            self._storage = self.unit_of_work.identity_map.register(type(self), key, self._storage)

    def retrieve_value(self, column: str) -> typing.Any:
        self._column(column)
        return self._storage.values[column]

    def prepare_value(self, column: str, formatting: typing.Optional[str] = None) -> typing.Optional[str]:
        info = self._column(column)
        value = self._storage.values[column]
        return prepare(column, info.type, value, formatting, self.unit_of_work.html_preparer)

    def assign_value(self, column: str, value: typing.Any) -> None:
        self._column(column)
        # an empty string is considered equivalent to NULL
        if isinstance(value, str) and value == "":
            value = None

        self._storage.old_values[column] = self._storage.values[column]
        self._storage.values[column] = value

    def populate(self) -> None:
        """Sets values from the unit of work's request parameters."""
        request = self.unit_of_work.request
        if request is None:
            raise MissingCollaborator(f"No request parameters are configured for {type(self).__name__}")

        for column in self._column_info():
            if request.has(column):
                self._accessors.resolve(self, f"set_{column}")(request.get(column))

        relationships = self.unit_of_work.schema.relationships(self.table_name(), schema.MANY_TO_MANY)
        for relationship in relationships:
            name = inflection.pluralize(relationship.related_column)
            if request.has(name):
                self._accessors.resolve(self, f"link_{name}")(request.get(name, list, []))

    def validate(self) -> None:
        self.unit_of_work.validator.validate(self.table_name(), self._storage.values, self._storage.old_values)

    def check_if_exists(self) -> bool:
        values, old_values = self._storage.values, self._storage.old_values
        for column in self._primary_keys():
            if (column in old_values and old_values[column] is None) or values.get(column) is None:
                return False
        return True

    def store(self, use_transaction: bool = True) -> None:
        database = self.unit_of_work.database
        table = self.table_name()
        column_info = self._column_info()
        primary_keys = self._primary_keys()
        values, old_values = self._storage.values, self._storage.old_values

        exists = self.check_if_exists()
        stored_key = self._stored_primary_key() if exists else None

        with persister.transaction(database, use_transaction):
            self.validate()

            sql_values = {column: database.encode_literal(table, column, values.get(column)) for column in column_info}

            assigns_key = False
            if not exists:
                # most databases refuse NULL for an auto incrementing primary key
                if (
                    len(primary_keys) == 1
                    and column_info[primary_keys[0]].auto_increment
                    and sql_values[primary_keys[0]] == literals.NULL
                ):
                    del sql_values[primary_keys[0]]
                    assigns_key = True
                sql = persister.insert_sql(table, sql_values)
            else:
                sql = persister.update_sql(table, sql_values, self._where_clause())

            result = self._execute(sql)

            if assigns_key:
                old_values[primary_keys[0]] = values[primary_keys[0]]
                values[primary_keys[0]] = result.auto_incremented_value()

        old_values.clear()
        self._update_identity_map(stored_key)

    def delete(self, use_transaction: bool = True) -> None:
        if not self.check_if_exists():
            raise NotPersisted("The object does not yet exist in the database, and thus can not be deleted")

        stored_key = self._stored_primary_key()
        with persister.transaction(self.unit_of_work.database, use_transaction):
            self._execute(persister.delete_sql(self.table_name(), self._where_clause()))

        self._forget(stored_key)

    def _update_identity_map(self, stored_key: typing.Optional[PrimaryKey]) -> None:
        key = self._primary_key_tuple()
        if stored_key is not None and stored_key != key:
            self._forget(stored_key)
        if all(value is not None for value in key):
            self.unit_of_work.identity_map.register(type(self), key, self._storage)

    def _forget(self, key: PrimaryKey) -> None:
        identity_map = self.unit_of_work.identity_map
        if identity_map.lookup(type(self), key) is self._storage:
            identity_map.discard(type(self), key)

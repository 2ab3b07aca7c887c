import logging
import typing

import attr

from active_record.config import Settings, get_settings
from active_record.database import Database, SqlAlchemyDatabase
from active_record.dispatch import AccessorTable
from active_record.formatting import prepare_html
from active_record.identity_map import IdentityMap
from active_record.related import RelatedData
from active_record.request import RequestParameters
from active_record.schema import SchemaProvider
from active_record.validation import SchemaValidator, Validator


logger = logging.getLogger(__name__)


@attr.s(auto_attribs=True)
class UnitOfWork:
    """Scope of one request or script run.

    Owns the identity map, so records loaded through one unit of work never
    alias records of another. Leaving the ``with`` block clears the map.
    """

    database: Database
    schema: SchemaProvider
    validator: Validator = attr.Factory(lambda self: SchemaValidator(self.schema), takes_self=True)
    identity_map: IdentityMap = attr.Factory(IdentityMap)
    request: typing.Optional[RequestParameters] = None
    related_data: typing.Optional[RelatedData] = None
    html_preparer: typing.Callable[[typing.Any], str] = prepare_html
    debug: bool = False
    _accessor_tables: typing.Dict[type, AccessorTable] = attr.ib(init=False, factory=dict)

    @classmethod
    def from_settings(cls, settings: typing.Optional[Settings] = None, **kwargs: typing.Any) -> "UnitOfWork":
        settings = settings or get_settings()
        database = SqlAlchemyDatabase.from_url(settings.database_url, echo=settings.echo_sql)
        return cls(database, database.schema, debug=settings.debug, **kwargs)

    def accessors(self, record_cls: type) -> AccessorTable:
        table = self._accessor_tables.get(record_cls)
        if table is None:
            record_cls.configure(self)
            table = AccessorTable.build(self.schema.column_info(record_cls.table_name()))
            self._accessor_tables[record_cls] = table
        return table

    def get(self, record_cls: type, primary_key: typing.Any = None) -> typing.Any:
        return record_cls(self, primary_key)

    def close(self) -> None:
        logger.debug("Closing unit of work holding %d identities", len(self.identity_map))
        self.identity_map.clear()
        self.database.close()

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, *exc_info: typing.Any) -> None:
        self.close()

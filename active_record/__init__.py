from active_record.database import Database, Result, SqlAlchemyDatabase
from active_record.exceptions import (
    ActiveRecordError,
    InvalidKeyShape,
    MissingCollaborator,
    NotFound,
    NotPersisted,
    ProgrammerError,
    StorageError,
    UnknownColumn,
    UnknownMethod,
    UnsupportedFormatting,
    UnsupportedFormattingArgument,
    ValidationError,
)
from active_record.identity_map import IdentityMap, ValueStorage
from active_record.record import ActiveRecord
from active_record.request import MappingRequest, RequestParameters
from active_record.related import RelatedData
from active_record.schema import ColumnInfo, Relationship, SchemaProvider, SqlAlchemySchema
from active_record.unit_of_work import UnitOfWork
from active_record.validation import NullValidator, SchemaValidator, Validator

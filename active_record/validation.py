import abc
import decimal
import typing

import inflection

from active_record import schema
from active_record.exceptions import ValidationError
from active_record.schema import ColumnInfo, SchemaProvider


Values = typing.Mapping[str, typing.Any]


class Validator(abc.ABC):
    @abc.abstractmethod
    def validate(self, table: str, values: Values, old_values: Values) -> None:
        pass


class NullValidator(Validator):
    def validate(self, table: str, values: Values, old_values: Values) -> None:
        pass


class SchemaValidator(Validator):
    """Checks values against the column definitions of the table.

    Every problem found is collected, a single ``ValidationError`` carries all of them.
    """

    def __init__(self, schema_provider: SchemaProvider) -> None:
        self._schema = schema_provider

    def validate(self, table: str, values: Values, old_values: Values) -> None:
        messages = []
        for column, info in self._schema.column_info(table).items():
            message = self._check(info, values.get(column))
            if message:
                messages.append(f"{inflection.humanize(column)}: {message}")
        if messages:
            raise ValidationError(messages)

    @staticmethod
    def _check(info: ColumnInfo, value: typing.Any) -> typing.Optional[str]:
        if value is None:
            if info.not_null and not info.has_default and not info.auto_increment:
                return "Please enter a value"
            return None

        if info.type == schema.INTEGER:
            try:
                if isinstance(value, bool) or int(value) != decimal.Decimal(str(value)):
                    return "Please enter a whole number"
            except (TypeError, ValueError, decimal.InvalidOperation):
                return "Please enter a whole number"

        if info.type == schema.FLOAT:
            try:
                decimal.Decimal(str(value))
            except decimal.InvalidOperation:
                return "Please enter a number"

        if info.type in schema.TEXT_TYPES and info.max_length is not None and len(str(value)) > info.max_length:
            return f"Please enter a value no longer than {info.max_length} characters"

        return None

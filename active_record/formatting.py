"""Output formatting of column values.

Transformations by column type:

* varchar, char, text: passed through the HTML preparation callable, no argument allowed
* date, time, timestamp: parsed and rendered with a ``strftime`` format
* boolean: ``"Yes"`` or ``"No"``

Numeric and binary columns never support formatting.
"""
import datetime
import html
import typing

from active_record import schema
from active_record.exceptions import UnsupportedFormatting, UnsupportedFormattingArgument


DEFAULT_FORMATS = {schema.DATE: "%Y-%m-%d", schema.TIME: "%H:%M:%S", schema.TIMESTAMP: "%Y-%m-%d %H:%M:%S"}

Temporal = typing.Union[datetime.date, datetime.datetime, datetime.time]


def prepare_html(value: typing.Any) -> str:
    if value is None:
        return ""
    return html.escape(str(value)).replace("\n", "<br />\n")


def parse_timestamp(value: typing.Any, column_type: str) -> Temporal:
    if isinstance(value, (datetime.date, datetime.time)):
        return value
    text = str(value).strip()
    if column_type == schema.TIME:
        return datetime.time.fromisoformat(text)
    return datetime.datetime.fromisoformat(text)


def prepare(
    column: str,
    column_type: str,
    value: typing.Any,
    formatting: typing.Optional[str] = None,
    html_preparer: typing.Callable[[typing.Any], str] = prepare_html,
) -> typing.Optional[str]:
    if column_type in schema.NUMERIC_TYPES or column_type == schema.BLOB:
        raise UnsupportedFormatting(
            f"The column {column} does not support formatting because it is of the type {column_type}"
        )

    if formatting is not None and column_type in schema.TEXT_TYPES:
        raise UnsupportedFormattingArgument(f"The column {column} does not support a formatting string")

    if column_type in schema.TEXT_TYPES:
        return html_preparer(value)

    if column_type in schema.DATE_TYPES:
        if value is None:
            return None
        return parse_timestamp(value, column_type).strftime(formatting or DEFAULT_FORMATS[column_type])

    if column_type == schema.BOOLEAN:
        return "Yes" if value else "No"

    raise UnsupportedFormatting(f"The column {column} of the type {column_type} can not be formatted")

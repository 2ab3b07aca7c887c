import functools
import typing

import attr
import inflection

from active_record.exceptions import MissingCollaborator, UnknownMethod
from active_record.related import RelatedData


Accessor = typing.Callable[..., typing.Any]

COLUMN_ACTIONS = ("get", "format", "set")


def _getter(column: str) -> Accessor:
    def get(record: typing.Any, *args: typing.Any) -> typing.Any:
        return record.retrieve_value(column)

    return get


def _formatter(column: str) -> Accessor:
    def format_(record: typing.Any, formatting: typing.Optional[str] = None) -> typing.Any:
        return record.prepare_value(column, formatting)

    return format_


def _setter(column: str) -> Accessor:
    def set_(record: typing.Any, value: typing.Any) -> None:
        record.assign_value(column, value)

    return set_


def _related_data(record: typing.Any) -> RelatedData:
    related_data = record.unit_of_work.related_data
    if related_data is None:
        raise MissingCollaborator(f"No related data handler is configured for {type(record).__name__}")
    return related_data


def _find(record: typing.Any, name: str) -> typing.Any:
    return _related_data(record).retrieve_values(record, record.values, name)


def _link(record: typing.Any, name: str, identifiers: typing.Sequence) -> None:
    return _related_data(record).assign_values(record, record.values, name, identifiers)


def _create(record: typing.Any, name: str) -> typing.Any:
    return _related_data(record).build_object(record, record.values, name)


def _form(record: typing.Any, name: str) -> typing.Any:
    return _related_data(record).build_set(record, name)


RELATED_ACTIONS: typing.Dict[str, Accessor] = {"find": _find, "link": _link, "create": _create, "form": _form}

_builders = {"get": _getter, "format": _formatter, "set": _setter}


@attr.s(auto_attribs=True)
class AccessorTable:
    """Column accessors of one record class, built once from its schema.

    Relationship actions are not enumerated, their name is handed over to the
    related data handler which knows the relationships.
    """

    accessors: typing.Dict[str, Accessor] = attr.Factory(dict)

    @classmethod
    def build(cls, columns: typing.Iterable[str]) -> "AccessorTable":
        accessors = {}
        for column in columns:
            for action in COLUMN_ACTIONS:
                accessors[inflection.underscore(f"{action}_{column}")] = _builders[action](column)
        return cls(accessors)

    def resolve(self, record: typing.Any, method_name: str) -> Accessor:
        name = inflection.underscore(method_name)
        accessor = self.accessors.get(name)
        if accessor is not None:
            return functools.partial(accessor, record)

        action, _, column = name.partition("_")
        if action in RELATED_ACTIONS and column:
            return functools.partial(RELATED_ACTIONS[action], record, column)

        if action in COLUMN_ACTIONS:
            raise UnknownMethod(f"Unknown method, {method_name}(), called - there is no column {column}")
        raise UnknownMethod(f"Unknown method, {method_name}(), called")

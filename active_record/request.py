import abc
import typing

import attr


class RequestParameters(abc.ABC):
    @abc.abstractmethod
    def has(self, name: str) -> bool:
        pass

    @abc.abstractmethod
    def get(self, name: str, cast: typing.Optional[type] = None, default: typing.Any = None) -> typing.Any:
        pass


@attr.s(auto_attribs=True)
class MappingRequest(RequestParameters):
    """Request parameters backed by an already parsed mapping, e.g. form data."""

    parameters: typing.Mapping[str, typing.Any] = attr.Factory(dict)

    def has(self, name: str) -> bool:
        return name in self.parameters

    def get(self, name: str, cast: typing.Optional[type] = None, default: typing.Any = None) -> typing.Any:
        if name not in self.parameters:
            return default
        value = self.parameters[name]
        if cast is None:
            return value
        if cast is list:
            if value is None or value == "":
                return []
            if isinstance(value, (list, tuple, set, frozenset)):
                return list(value)
            return [value]
        return cast(value)

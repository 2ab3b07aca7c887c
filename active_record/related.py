import abc
import typing


class RelatedData(abc.ABC):
    """Relationship handling used by ``find_``, ``link_``, ``create_`` and ``form_`` calls."""

    @abc.abstractmethod
    def retrieve_values(self, record: typing.Any, values: typing.Dict[str, typing.Any], name: str) -> typing.Any:
        pass

    @abc.abstractmethod
    def assign_values(
        self, record: typing.Any, values: typing.Dict[str, typing.Any], name: str, identifiers: typing.Sequence
    ) -> None:
        pass

    @abc.abstractmethod
    def build_object(self, record: typing.Any, values: typing.Dict[str, typing.Any], name: str) -> typing.Any:
        pass

    @abc.abstractmethod
    def build_set(self, record: typing.Any, name: str) -> typing.Any:
        pass

import typing


class ActiveRecordError(Exception):
    pass


class NotFound(ActiveRecordError):
    pass


class ProgrammerError(ActiveRecordError):
    pass


class InvalidKeyShape(ProgrammerError):
    pass


class UnknownMethod(ProgrammerError, AttributeError):
    pass


class UnknownColumn(ProgrammerError):
    pass


class UnsupportedFormatting(ProgrammerError):
    pass


class UnsupportedFormattingArgument(ProgrammerError):
    pass


class NotPersisted(ProgrammerError):
    pass


class MissingCollaborator(ProgrammerError):
    pass


class StorageError(ActiveRecordError):
    pass


class ValidationError(ActiveRecordError):
    def __init__(self, messages: typing.Sequence[str]) -> None:
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))

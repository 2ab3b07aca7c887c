import logging
import typing
from threading import RLock

import attr


logger = logging.getLogger(__name__)

PrimaryKey = typing.Tuple[typing.Any, ...]
Key = typing.Tuple[type, PrimaryKey]


@attr.s(auto_attribs=True, eq=False)
class ValueStorage:
    """Value block of one row, shared by every record handle of that row."""

    values: typing.Dict[str, typing.Any] = attr.Factory(dict)
    old_values: typing.Dict[str, typing.Any] = attr.Factory(dict)
    debug: bool = False


class IdentityMap:
    def __init__(self) -> None:
        self._entries: typing.Dict[Key, ValueStorage] = {}
        self._lock = RLock()

    def lookup(self, record_type: type, primary_key: PrimaryKey) -> typing.Optional[ValueStorage]:
        with self._lock:
            return self._entries.get((record_type, primary_key))

    def register(self, record_type: type, primary_key: PrimaryKey, storage: ValueStorage) -> ValueStorage:
        """Store ``storage`` unless the key is taken; return the storage kept in the map."""
        with self._lock:
            existing = self._entries.get((record_type, primary_key))
            if existing is not None:
                return existing
            logger.debug("Registering %s%r in identity map", record_type.__name__, primary_key)
            self._entries[(record_type, primary_key)] = storage
            return storage

    def discard(self, record_type: type, primary_key: PrimaryKey) -> None:
        with self._lock:
            self._entries.pop((record_type, primary_key), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Key) -> bool:
        with self._lock:
            return key in self._entries

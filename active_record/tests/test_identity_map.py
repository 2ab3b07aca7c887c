from active_record import IdentityMap, ValueStorage


class User:
    pass


class Group:
    pass


def test_lookup_misses_unknown_key() -> None:
    assert IdentityMap().lookup(User, (1,)) is None


def test_registered_storage_is_returned_as_is() -> None:
    identity_map = IdentityMap()
    storage = ValueStorage(values={"user_id": 1})

    assert identity_map.register(User, (1,), storage) is storage
    assert identity_map.lookup(User, (1,)) is storage
    assert (User, (1,)) in identity_map


def test_first_registration_wins() -> None:
    identity_map = IdentityMap()
    first, second = ValueStorage(values={"name": "first"}), ValueStorage(values={"name": "second"})

    identity_map.register(User, (1,), first)

    assert identity_map.register(User, (1,), second) is first
    assert identity_map.lookup(User, (1,)).values == {"name": "first"}
    assert len(identity_map) == 1


def test_keys_are_scoped_by_record_type() -> None:
    identity_map = IdentityMap()
    identity_map.register(User, (1,), ValueStorage())

    assert identity_map.lookup(Group, (1,)) is None


def test_discard_and_clear() -> None:
    identity_map = IdentityMap()
    identity_map.register(User, (1,), ValueStorage())
    identity_map.register(User, ("en", "hello"), ValueStorage())

    identity_map.discard(User, (1,))
    identity_map.discard(User, (2,))
    assert len(identity_map) == 1

    identity_map.clear()
    assert len(identity_map) == 0

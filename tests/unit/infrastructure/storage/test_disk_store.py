from learnassist.infrastructure.auth.token_store import PersistentTokenStore
from learnassist.infrastructure.storage.disk_store import DiskKeyValueStore


async def test_roundtrip_and_remove(tmp_path):
    store = DiskKeyValueStore(tmp_path / "kv")
    try:
        assert await store.get_item("missing") is None
        await store.set_item("auth_token", "abc")
        assert await store.get_item("auth_token") == "abc"
        await store.remove_item("auth_token")
        await store.remove_item("auth_token")
        assert await store.get_item("auth_token") is None
    finally:
        store.close()


async def test_token_survives_reopen(tmp_path):
    """A credential written by one process is visible to the next."""
    first = DiskKeyValueStore(tmp_path / "kv")
    await PersistentTokenStore(first).set("persisted")
    first.close()

    second = DiskKeyValueStore(tmp_path / "kv")
    try:
        assert await PersistentTokenStore(second).get() == "persisted"
    finally:
        second.close()

"""In-memory client storage for tests and ephemeral sessions."""

from storefront.storage.port import KeyValueStorage


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage. Can be configured to fail writes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.fail_writes: bool = False
        self.writes: list[str] = []

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("Storage quota exceeded")
        self.writes.append(key)
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)

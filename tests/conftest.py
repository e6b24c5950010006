from datetime import datetime, timedelta, timezone

import pytest

from runonce.store import MemoryStore


T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingStore(MemoryStore):
    """MemoryStore that logs every call as a tuple."""

    def __init__(self):
        super().__init__()
        self.actions = []

    def get_int(self, key):
        self.actions.append(("get_int", key))
        return super().get_int(key)

    def get_timestamp(self, key):
        self.actions.append(("get_timestamp", key))
        return super().get_timestamp(key)

    def set_int(self, key, value):
        self.actions.append(("set_int", key, value))
        super().set_int(key, value)

    def set_timestamp(self, key, value):
        self.actions.append(("set_timestamp", key, value))
        super().set_timestamp(key, value)

    def remove(self, key):
        self.actions.append(("remove", key))
        super().remove(key)

    def writes(self):
        return [a for a in self.actions if a[0] in {"set_int", "set_timestamp", "remove"}]


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture()
def durable():
    return RecordingStore()


@pytest.fixture()
def session():
    return RecordingStore()


@pytest.fixture()
def clock():
    return FakeClock()

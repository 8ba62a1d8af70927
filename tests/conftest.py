import pytest

from simple_session import (
    CookieTransport,
    MemorySessionBackend,
    Session,
    StaticKeyProvider,
)

START = 1_700_000_000


class FakeClock:
    """Callable clock that only moves when told to."""
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemorySessionBackend()


@pytest.fixture
def key_provider():
    return StaticKeyProvider.generate()


@pytest.fixture
def transport():
    return CookieTransport()


@pytest.fixture
def make_session(backend, key_provider, transport, clock):
    """Build sessions sharing the fixtures' backend, key and clock."""
    def _make(name="simple_session", config=None, use_this_name_first=False, **kwargs):
        kwargs.setdefault("backend", backend)
        kwargs.setdefault("transport", transport)
        kwargs.setdefault("key_provider", key_provider)
        kwargs.setdefault("clock", clock)
        return Session(name, config, use_this_name_first, **kwargs)
    return _make


@pytest.fixture
def session(make_session):
    return make_session()

import pytest
from PIL import Image

from qrthis.storage import LocalStore


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "store.json")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def background():
    """A wide two-tone image standing in for AI artwork."""
    img = Image.new("RGB", (300, 200), (40, 90, 160))
    img.paste((220, 120, 60), (150, 0, 300, 200))
    return img

# type: ignore
import pytest

from synvm.runtime.loader import words_image
from synvm.runtime.trace import CollectingTracer


@pytest.fixture
def with_tracer():
    yield CollectingTracer()


@pytest.fixture
def with_image_file(tmp_path):
    def write(words, name='program.bin'):
        path = tmp_path / name
        path.write_bytes(words_image(words))
        return path

    yield write

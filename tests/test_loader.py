import pytest

import synvm.runtime.cpu as cpu
from synvm.runtime.loader import LoaderError, load_image, image_words, words_image

from unit_utils import make_terminal
from fixtures import with_image_file  # noqa: F401


def test_load_image(with_image_file):  # noqa: F811
    path = with_image_file([9, 32768, 32769, 4])
    image = load_image(path)
    assert image == bytes([9, 0, 0, 0x80, 1, 0x80, 4, 0])
    assert image_words(image) == [9, 32768, 32769, 4]


def test_image_lands_at_address_zero(with_image_file):  # noqa: F811
    proc = cpu.CPU(make_terminal())
    proc.load(load_image(with_image_file([21, 21, 0])))
    assert [proc.peek(a) for a in range(4)] == [21, 21, 0, 0]
    assert proc.ip == 0


def test_missing_image(tmp_path):
    with pytest.raises(LoaderError):
        load_image(tmp_path / 'nothing.bin')


def test_odd_length_image(tmp_path):
    path = tmp_path / 'odd.bin'
    path.write_bytes(b'\x00\x00\x15')

    with pytest.raises(LoaderError):
        load_image(path)


def test_oversized_image():
    with pytest.raises(LoaderError):
        cpu.CPU(make_terminal()).load(words_image([0] * 32769))


def test_full_size_image_fits():
    proc = cpu.CPU(make_terminal())
    proc.load(words_image([1] * 32768))
    assert proc.peek(32767) == 1

from pathlib import Path
import logging as lg
import struct

from synvm.common.hwconf import MEMORY_SIZE, WORD_SIZE


class LoaderError(Exception):
    pass


def check_image(image: bytes):
    if len(image) % WORD_SIZE != 0:
        raise LoaderError(f'Image length {len(image)} is not a whole number of words')

    if len(image) > MEMORY_SIZE * WORD_SIZE:
        raise LoaderError(f'Image of {len(image) // WORD_SIZE} words does not fit in memory')


def image_words(image: bytes) -> list[int]:
    check_image(image)
    return list(struct.unpack(f'<{len(image) // WORD_SIZE}H', image))


def words_image(words: list[int]) -> bytes:
    return struct.pack(f'<{len(words)}H', *words)


def load_image(path: str | Path) -> bytes:
    if isinstance(path, str):
        path = Path(path)

    lg.info(f'Loading {path}')

    try:
        image = path.read_bytes()
    except OSError as e:
        raise LoaderError(f'Cannot read image {path}: {e.strerror or e}') from e

    check_image(image)
    lg.debug(f'Loaded {len(image) // WORD_SIZE} words')
    return image

# tests/test_hashing.py

import base64
import hashlib

import pytest
import imagehash
import numpy as np
from PIL import Image

from core.hashing import (
    ImageDecodeError,
    compute_content_hash,
    compute_perceptual_hash,
    content_hash_task,
    hamming_distance,
    hash_to_int,
    perceptual_hash_task,
)
from core.records import FileRecord, ImageRecord


def test_content_hash_matches_hashlib(write_file):
    content = b"hello world" * 1000
    path = write_file("a.bin", content)

    expected = base64.b64encode(hashlib.sha256(content).digest()).rstrip(b'=').decode()
    assert compute_content_hash(path) == expected
    assert not expected.endswith("=")


def test_content_hash_independent_of_chunk_size(write_file):
    path = write_file("a.bin", bytes(range(256)) * 50)

    assert compute_content_hash(path, chunk_size=7) == compute_content_hash(path)


def test_content_hash_other_algorithm(write_file):
    path = write_file("a.bin", b"abc")

    assert compute_content_hash(path, "sha1") != compute_content_hash(path, "sha256")


def test_content_hash_missing_file(tmp_path):
    with pytest.raises(OSError):
        compute_content_hash(str(tmp_path / "missing"))


def test_content_hash_task_sets_hash(write_file):
    path = write_file("a.bin", b"data")
    record = FileRecord(path, 4)

    result = content_hash_task()(record)

    assert result is record
    assert record.content_hash == compute_content_hash(path)


def test_perceptual_hash_is_64_bits(duplicate_images):
    phash = compute_perceptual_hash(duplicate_images[0])

    assert 0 <= phash < 2 ** 64


def test_perceptual_hash_matches_imagehash(duplicate_images):
    expected = imagehash.dhash(Image.open(duplicate_images[0]), hash_size=8)

    assert compute_perceptual_hash(duplicate_images[0]) == int(str(expected), 16)


def test_near_duplicates_are_close(duplicate_images):
    original, duplicate, near, different = [
        compute_perceptual_hash(p) for p in duplicate_images
    ]

    assert hamming_distance(original, duplicate) == 0
    assert hamming_distance(original, near) <= 5
    assert hamming_distance(original, different) > 5


def test_non_image_raises_decode_error(write_file):
    path = write_file("notes.jpg", b"this is not a jpeg")

    with pytest.raises(ImageDecodeError):
        compute_perceptual_hash(path)


def test_truncated_image_raises_decode_error(duplicate_images, write_file):
    with open(duplicate_images[0], 'rb') as f:
        head = f.read(100)
    path = write_file("truncated.png", head)

    with pytest.raises(ImageDecodeError):
        compute_perceptual_hash(path)


def test_missing_image_is_not_a_decode_error(tmp_path):
    with pytest.raises(OSError):
        compute_perceptual_hash(str(tmp_path / "missing.png"))


def test_perceptual_hash_task(duplicate_images):
    record = FileRecord(duplicate_images[0], 123)

    result = perceptual_hash_task()(record)

    assert isinstance(result, ImageRecord)
    assert result.path == record.path
    assert result.size == 123
    assert result.perceptual_hash == compute_perceptual_hash(record.path)


def test_hash_to_int_bit_order():
    bits = np.zeros((8, 8), dtype=bool)
    bits[0, 0] = True
    bits[7, 7] = True

    assert hash_to_int(imagehash.ImageHash(bits)) == (1 << 63) | 1


@pytest.mark.parametrize("a, b, expected", [
    (0, 0, 0),
    (0b1011, 0b0001, 2),
    (0, 2 ** 64 - 1, 64),
    (0xF0F0, 0x0F0F, 16),
])
def test_hamming_distance(a, b, expected):
    assert hamming_distance(a, b) == expected

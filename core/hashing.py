# core/hashing.py

import base64
import hashlib

import imagehash
import numpy as np
from PIL import Image, UnidentifiedImageError

from core.records import FileRecord, ImageRecord

# Set PIL image size limit to prevent memory issues
Image.MAX_IMAGE_PIXELS = 100_000_000  # 100MP limit


class ImageDecodeError(Exception):
    """
    The file is not an image Pillow can decode.

    Expected for anything fed to the image pipeline speculatively, so
    callers drop it without reporting.
    """


def compute_content_hash(path: str,
                         algorithm: str = "sha256",
                         chunk_size: int = 1024 * 1024) -> str:
    """
    Stream a file through a cryptographic digest.

    Returns the digest as unpadded standard base64. OSError from opening
    or reading the file propagates to the caller.
    """
    digest = hashlib.new(algorithm)
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(chunk_size), b''):
            digest.update(chunk)

    return base64.b64encode(digest.digest()).rstrip(b'=').decode('ascii')


def compute_perceptual_hash(path: str, hash_size: int = 8) -> int:
    """
    Difference hash of an image as an unsigned integer of hash_size**2 bits.

    Raises ImageDecodeError when the content cannot be decoded; OSError
    from opening the file propagates unchanged.
    """
    with open(path, 'rb') as f:
        try:
            img = Image.open(f)
            img.load()

            # Resize large images to speed up processing
            if img.size[0] * img.size[1] > 2_000_000:  # 2MP limit
                img.thumbnail((1000, 1000), Image.Resampling.LANCZOS)

            image_hash = imagehash.dhash(img, hash_size=hash_size)
        except (UnidentifiedImageError, Image.DecompressionBombError,
                SyntaxError, ValueError, OSError) as e:
            raise ImageDecodeError(f"{path}: {e}") from e

    return hash_to_int(image_hash)


def hash_to_int(image_hash: imagehash.ImageHash) -> int:
    """Pack the hash bits, first bit most significant"""
    bits = np.asarray(image_hash.hash, dtype=bool).flatten()
    return int.from_bytes(np.packbits(bits).tobytes(), 'big')


def hamming_distance(a: int, b: int) -> int:
    """Number of differing bits between two fingerprints"""
    return bin(a ^ b).count('1')


# Worker tasks

def content_hash_task(algorithm: str = "sha256", chunk_size: int = 1024 * 1024):
    """Build a pool task that assigns content_hash to a FileRecord"""
    def task(record: FileRecord) -> FileRecord:
        record.content_hash = compute_content_hash(record.path, algorithm, chunk_size)
        return record
    return task


def perceptual_hash_task(hash_size: int = 8):
    """Build a pool task that turns a FileRecord into an ImageRecord"""
    def task(record: FileRecord) -> ImageRecord:
        phash = compute_perceptual_hash(record.path, hash_size)
        return ImageRecord(record.path, record.size, phash)
    return task

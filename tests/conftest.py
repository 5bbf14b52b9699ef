# tests/conftest.py

import pytest
import numpy as np
import cv2


def block_image(seed: int) -> np.ndarray:
    """Random 8x9 grid of flat blocks; its difference hash is stable"""
    rng = np.random.default_rng(seed)
    small = rng.integers(0, 256, (8, 9), dtype=np.uint8)
    gray = np.kron(small, np.ones((32, 32), dtype=np.uint8))
    return np.dstack([gray, gray, gray])


@pytest.fixture
def write_file(tmp_path):
    """Create a file under tmp_path with the given bytes"""
    def _write(name: str, content: bytes) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)
    return _write


@pytest.fixture
def duplicate_images(tmp_path):
    """Create images with duplicates"""
    img1 = block_image(1)

    # Original image
    path1 = tmp_path / "original.png"
    cv2.imwrite(str(path1), img1)

    # Exact duplicate
    path2 = tmp_path / "duplicate.png"
    path2.write_bytes(path1.read_bytes())

    # Near-duplicate (same pixels, lossy format)
    path3 = tmp_path / "near_duplicate.jpg"
    cv2.imwrite(str(path3), img1, [cv2.IMWRITE_JPEG_QUALITY, 95])

    # Different image
    img2 = block_image(2)
    path4 = tmp_path / "different.png"
    cv2.imwrite(str(path4), img2)

    return [str(path1), str(path2), str(path3), str(path4)]

# core/records.py

from dataclasses import dataclass, field
from typing import List, Dict, Optional


@dataclass
class FileRecord:
    """A file observed by the walker; content_hash is set once by a worker"""
    path: str
    size: int
    content_hash: Optional[str] = None


@dataclass
class ImageRecord:
    """A decodable image with its 64-bit perceptual hash"""
    path: str
    size: int
    perceptual_hash: int


@dataclass
class SimilarImage:
    path: str
    distance: int


@dataclass
class ImageCluster:
    """
    Near-duplicate images gathered around one seed image.
    The seed is always the first member, at distance 0.
    """
    images: List[SimilarImage] = field(default_factory=list)

    @property
    def seed(self) -> SimilarImage:
        return self.images[0]

    @property
    def paths(self) -> List[str]:
        return [img.path for img in self.images]

    def __len__(self):
        return len(self.images)


@dataclass
class FileError:
    """A per-file failure reported by a worker pool"""
    path: str
    stage: str
    message: str


@dataclass
class ScanResult:
    """Final output of a scan"""
    duplicate_groups: Dict[str, List[str]] = field(default_factory=dict)
    image_clusters: List[ImageCluster] = field(default_factory=list)
    hash_map: Dict[str, List[str]] = field(default_factory=dict)
    hash_sizes: Dict[str, int] = field(default_factory=dict)
    errors: List[FileError] = field(default_factory=list)

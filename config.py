from dataclasses import dataclass, field
from typing import List, Optional
import hashlib
import logging
import yaml
from pathlib import Path


class ConfigError(ValueError):
    """Raised for invalid or unreadable configuration"""


DEFAULT_IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tiff', '.webp']


@dataclass
class EngineConfig:
    """Numeric and behavioral parameters of the detection engine"""
    hash_algorithm: str = "sha256"
    hash_threshold: int = 5  # Max Hamming distance to a cluster seed
    hash_size: int = 8  # 8x8 difference hash = 64 bits
    n_workers: Optional[int] = None  # None: number of CPUs
    chunk_size: int = 1024 * 1024
    image_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS)
    )

    @property
    def hash_bits(self) -> int:
        return self.hash_size * self.hash_size

    def validate(self):
        """Raise ConfigError if any value is out of range"""
        if self.hash_algorithm not in hashlib.algorithms_available:
            raise ConfigError(f"Unknown hash algorithm: {self.hash_algorithm}")
        # Variable length digests (shake_*) need a length at digest() time
        if hashlib.new(self.hash_algorithm).digest_size == 0:
            raise ConfigError(
                f"Hash algorithm {self.hash_algorithm} has no fixed digest size"
            )
        if self.hash_size < 2:
            raise ConfigError("hash_size must be at least 2")
        if not 0 <= self.hash_threshold <= self.hash_bits:
            raise ConfigError(
                f"hash_threshold must be between 0 and {self.hash_bits}"
            )
        if self.n_workers is not None and self.n_workers < 1:
            raise ConfigError("n_workers must be at least 1")
        if self.chunk_size < 1:
            raise ConfigError("chunk_size must be positive")


@dataclass
class CleanupConfig:
    """Configuration for snapshot files and duplicate removal"""
    from_file: Optional[str] = None
    to_file: Optional[str] = None
    delete_dupes_in: Optional[str] = None
    delete_prompt: bool = False
    move_files: Optional[str] = None
    force: bool = False  # Without it files to delete are only printed
    legacy_snapshot: bool = False


@dataclass
class SystemConfig:
    """Run-wide configuration"""
    min_size: int = 0
    verbose: bool = False
    log_level: str = "WARNING"
    log_dir: Optional[str] = None
    show_progress: bool = True

    engine: EngineConfig = field(default_factory=EngineConfig)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)

    def save(self, path: str = "config.yaml"):
        """Save configuration to YAML file"""
        config_dict = {
            'min_size': self.min_size,
            'verbose': self.verbose,
            'log_level': self.log_level,
            'log_dir': self.log_dir,
            'show_progress': self.show_progress,
            'engine': {
                'hash_algorithm': self.engine.hash_algorithm,
                'hash_threshold': self.engine.hash_threshold,
                'hash_size': self.engine.hash_size,
                'n_workers': self.engine.n_workers,
                'chunk_size': self.engine.chunk_size,
                'image_extensions': list(self.engine.image_extensions)
            },
            'cleanup': {
                'from_file': self.cleanup.from_file,
                'to_file': self.cleanup.to_file,
                'delete_dupes_in': self.cleanup.delete_dupes_in,
                'delete_prompt': self.cleanup.delete_prompt,
                'move_files': self.cleanup.move_files,
                'force': self.cleanup.force,
                'legacy_snapshot': self.cleanup.legacy_snapshot
            }
        }

        with open(path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @classmethod
    def load(cls, path: str = "config.yaml") -> 'SystemConfig':
        """Load configuration from YAML file"""
        if not Path(path).exists():
            return cls()  # Return default config

        try:
            with open(path, 'r') as f:
                config_dict = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read configuration {path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigError(f"Configuration {path} must be a mapping")

        config = cls()

        # Load system settings
        config.min_size = config_dict.get('min_size', config.min_size)
        config.verbose = config_dict.get('verbose', config.verbose)
        config.log_level = config_dict.get('log_level', config.log_level)
        config.log_dir = config_dict.get('log_dir', config.log_dir)
        config.show_progress = config_dict.get('show_progress', config.show_progress)

        # Load engine settings
        if 'engine' in config_dict:
            en = config_dict['engine']
            config.engine = EngineConfig(
                hash_algorithm=en.get('hash_algorithm', config.engine.hash_algorithm),
                hash_threshold=en.get('hash_threshold', config.engine.hash_threshold),
                hash_size=en.get('hash_size', config.engine.hash_size),
                n_workers=en.get('n_workers', config.engine.n_workers),
                chunk_size=en.get('chunk_size', config.engine.chunk_size),
                image_extensions=en.get('image_extensions', config.engine.image_extensions)
            )

        # Load cleanup settings
        if 'cleanup' in config_dict:
            cl = config_dict['cleanup']
            config.cleanup = CleanupConfig(
                from_file=cl.get('from_file', config.cleanup.from_file),
                to_file=cl.get('to_file', config.cleanup.to_file),
                delete_dupes_in=cl.get('delete_dupes_in', config.cleanup.delete_dupes_in),
                delete_prompt=cl.get('delete_prompt', config.cleanup.delete_prompt),
                move_files=cl.get('move_files', config.cleanup.move_files),
                force=cl.get('force', config.cleanup.force),
                legacy_snapshot=cl.get('legacy_snapshot', config.cleanup.legacy_snapshot)
            )

        return config

    def apply_args(self, args) -> 'SystemConfig':
        """Overlay command line arguments that were actually given"""
        if args.min_size is not None:
            self.min_size = args.min_size
        if args.verbose:
            self.verbose = True
        if args.no_progress:
            self.show_progress = False

        if args.hash_threshold is not None:
            self.engine.hash_threshold = args.hash_threshold
        if args.workers is not None:
            self.engine.n_workers = args.workers
        if args.algorithm is not None:
            self.engine.hash_algorithm = args.algorithm

        if args.from_file:
            self.cleanup.from_file = args.from_file
        if args.to_file:
            self.cleanup.to_file = args.to_file
        if args.delete_dupes_in:
            self.cleanup.delete_dupes_in = args.delete_dupes_in
        if args.delete_prompt:
            self.cleanup.delete_prompt = True
        if args.move_files:
            self.cleanup.move_files = args.move_files
        if args.force:
            self.cleanup.force = True
        if args.legacy_snapshot:
            self.cleanup.legacy_snapshot = True

        return self

    def validate(self):
        if self.min_size < 0:
            raise ConfigError("min_size must not be negative")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ConfigError(f"Unknown log level: {self.log_level}")
        self.engine.validate()

# cli.py

import argparse
import logging
import sys
from typing import List, Optional

from config import ConfigError, SystemConfig
from components.duplicate_manager import DuplicateManager
from core.engine import DuplicateFinder, result_from_snapshot
from core.progress import ProgressCounters
from core.records import ScanResult
from core.snapshot import SnapshotError, load_snapshot, save_snapshot
from utils.file_utils import format_file_size, walk_paths
from utils.logging_config import setup_logging
from utils.progress_display import TqdmProgress
from utils.system_info import get_system_info

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dupe-finder",
        description="Find duplicate files and visually similar images"
    )
    parser.add_argument('paths', nargs='*', help='Directories or files to scan')

    parser.add_argument('--from-file', metavar='PATH',
                        help='Load results file from PATH instead of scanning')
    parser.add_argument('--to-file', metavar='PATH',
                        help='Save results to PATH')
    parser.add_argument('--legacy-snapshot', action='store_true',
                        help='Save results grouped by file size')
    parser.add_argument('--delete-dupes-in', metavar='PATH',
                        help='Delete duplicates if they are contained in PATH')
    parser.add_argument('--delete-prompt', action='store_true',
                        help='Ask which file to keep for each duplicate set')
    parser.add_argument('--move-files', metavar='PATH',
                        help='Move files to PATH instead of deleting them')
    parser.add_argument('--min-size', type=int, metavar='BYTES',
                        help='Ignore files smaller than BYTES')
    parser.add_argument('--force', action='store_true',
                        help='Actually delete files. Without this option, '
                             'the files to be deleted are only printed')
    parser.add_argument('--verbose', action='store_true',
                        help='Output additional information')

    parser.add_argument('-t', '--hash-threshold', type=int,
                        help='Max perceptual hash distance for similar images')
    parser.add_argument('-w', '--workers', type=int,
                        help='Workers per hashing pool (default: CPU count)')
    parser.add_argument('--algorithm',
                        help='Content digest algorithm (default: sha256)')
    parser.add_argument('-c', '--config', metavar='PATH',
                        help='YAML configuration file')
    parser.add_argument('--no-progress', action='store_true',
                        help='Do not show progress bars')
    return parser


def print_configuration(config: SystemConfig, paths: List[str]):
    """Print settings and system info for --verbose"""
    print(f"fromFile: \"{config.cleanup.from_file or ''}\"")
    print(f"toFile: \"{config.cleanup.to_file or ''}\"")
    print(f"deleteDupesIn: \"{config.cleanup.delete_dupes_in or ''}\"")
    print(f"force: \"{str(config.cleanup.force).lower()}\"")
    print(f"minSize: {config.min_size}")
    print(f"hashThreshold: {config.engine.hash_threshold}")

    info = get_system_info()
    print(f"CPUs: {info['cpu_count_logical']}, "
          f"memory available: {info['memory_available_gb']:.1f} GB")

    print("Searching paths:")
    for path in paths:
        print("- ", path)
    print()
    print()


def print_results(result: ScanResult):
    """List duplicate groups and image clusters, one blank line apart"""
    for paths in result.duplicate_groups.values():
        for path in paths:
            print(path)
        print()

    for cluster in result.image_clusters:
        for image in cluster.images:
            print(f"{image.path} (distance {image.distance})")
        print()


def run_scan(config: SystemConfig, paths: List[str]) -> ScanResult:
    counters = ProgressCounters()
    disable = not config.show_progress or not sys.stderr.isatty()

    finder = DuplicateFinder(config.engine, progress=counters)
    with TqdmProgress(counters, disable=disable):
        result = finder.scan(walk_paths(paths, config.min_size))

    logger.info("Scanned %d files, hashed %s",
                counters['files_observed'],
                format_file_size(counters['bytes_hashed']))
    return result


def main_cli(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = SystemConfig.load(args.config) if args.config else SystemConfig()
        config.apply_args(args)
        config.validate()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    setup_logging("DEBUG" if config.verbose else config.log_level, config.log_dir)
    cleanup = config.cleanup

    if config.verbose:
        print_configuration(config, args.paths)

    if cleanup.from_file:
        print(f"Loading file {cleanup.from_file}")
        try:
            hash_map, hash_sizes = load_snapshot(cleanup.from_file)
        except SnapshotError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        result = result_from_snapshot(hash_map, hash_sizes)
    else:
        if not args.paths:
            parser.print_help()
            return 2
        result = run_scan(config, args.paths)

        if cleanup.to_file:
            save_snapshot(cleanup.to_file, result.hash_map, result.hash_sizes,
                          legacy=cleanup.legacy_snapshot)

    groups = list(result.duplicate_groups.values())
    groups.extend(cluster.paths for cluster in result.image_clusters)

    manager = DuplicateManager(force=cleanup.force, move_to=cleanup.move_files)
    if cleanup.delete_dupes_in:
        manager.delete_in(groups, cleanup.delete_dupes_in)
    elif cleanup.delete_prompt:
        for group in groups:
            manager.prompt(group)
    else:
        print_results(result)

    if result.errors:
        print(f"{len(result.errors)} files could not be processed", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main_cli())

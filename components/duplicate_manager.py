# components/duplicate_manager.py

import logging
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[H\033[2J"


def unique_files(paths: Iterable[str]) -> List[str]:
    """Drop paths that name a file already listed, keeping the first one"""
    seen = set()
    unique = []
    for path in paths:
        real = os.path.realpath(path)
        if real not in seen:
            seen.add(real)
            unique.append(path)
    return unique


def is_under(path: str, directory: str) -> bool:
    """True if path is directory itself or lies below it, by whole components"""
    path = os.path.abspath(path)
    directory = os.path.abspath(directory)
    return os.path.commonpath([path, directory]) == directory


class DuplicateManager:
    """
    Removal of duplicates with safety features.

    Nothing is touched unless ``force`` is set; otherwise every operation
    only reports what it would do. With ``move_to`` files are moved into
    that directory instead of being deleted, never overwriting anything
    already there.
    """

    def __init__(self, force: bool = False, move_to: Optional[str] = None):
        self.force = force
        self.move_to = move_to
        self.operation_log = []

    def remove(self, file_path: str) -> bool:
        """
        Delete or move one file. Returns True if the file was removed.
        """
        if not self.force:
            return False

        try:
            if self.move_to:
                destination = self.move_without_overwrite(file_path, self.move_to)
                self._log('move', file_path, destination)
            else:
                os.remove(file_path)
                self._log('delete', file_path)
            return True

        except OSError as e:
            logger.error("Error removing %s: %s", file_path, e)
            return False

    @staticmethod
    def move_without_overwrite(file_path: str, target_dir: str) -> str:
        """
        Move a file into target_dir, keeping its name if free, otherwise
        trying name.0, name.1, ... Returns the destination path.
        """
        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)

        name = Path(file_path).name
        destination = target / name
        num = 0
        while destination.exists():
            destination = target / f"{name}.{num}"
            num += 1

        shutil.move(file_path, str(destination))
        return str(destination)

    def delete_in(self,
                  groups: Iterable[List[str]],
                  prefix: str,
                  writer: TextIO = None) -> List[str]:
        """
        Remove every group member located under ``prefix``.

        Paths naming the same file count once. If a whole group lies under
        the prefix its first member is kept.
        Returns the selected paths, whether or not they were removed.
        """
        writer = writer or sys.stdout
        selected = []

        for group in groups:
            group = unique_files(group)
            if len(group) < 2:
                continue
            matches = [p for p in group if is_under(p, prefix)]

            if matches and len(matches) == len(group):
                logger.warning("All copies of %s are under %s, keeping it",
                               group[0], prefix)
                matches = matches[1:]

            for file_path in matches:
                writer.write(f"Would delete {file_path}\n")
                self.remove(file_path)
                selected.append(file_path)

        return selected

    def prompt(self,
               files: List[str],
               reader: TextIO = None,
               writer: TextIO = None) -> Optional[str]:
        """
        Ask which file of a group to keep and remove the others.

        Answer 0 keeps everything. Returns the kept path, or None when all
        files are kept or the answer is invalid.
        """
        reader = reader or sys.stdin
        writer = writer or sys.stdout

        files = unique_files(files)
        if len(files) < 2:
            return None

        if writer.isatty():
            writer.write(CLEAR_SCREEN)
        for i, file_path in enumerate(files, 1):
            writer.write(f"{i} {file_path}\n")
        writer.write("0 Keep all\n")
        writer.write("Which file to keep? ")
        writer.flush()

        answer = reader.readline().strip()
        try:
            choice = int(answer)
        except ValueError:
            writer.write("Invalid input\n")
            return None

        if choice == 0:
            return None

        if choice < 1 or choice > len(files):
            writer.write("Invalid input\n")
            return None

        keep = files[choice - 1]
        for file_path in files:
            if file_path != keep:
                self.remove(file_path)

        return keep

    def _log(self, operation: str, source: str, destination: str = None):
        entry = {
            'operation': operation,
            'source': source,
            'timestamp': datetime.now().strftime("%Y%m%d_%H%M%S")
        }
        if destination:
            entry['destination'] = destination
        self.operation_log.append(entry)
        logger.info("%s %s", operation, source)

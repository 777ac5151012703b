import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from peerless.domain.names import sanitize
from peerless.domain.torrent import DirectoryInfo

logger = logging.getLogger(__name__)


class FilesystemError(Exception):
    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause.strerror or cause}")


class Filesystem(Protocol):
    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def is_directory(self, path: Path) -> bool:
        raise NotImplementedError

    def is_symlink(self, path: Path) -> bool:
        raise NotImplementedError

    def children(self, path: Path) -> Iterable[Path]:
        raise NotImplementedError

    def size(self, path: Path) -> int:
        raise NotImplementedError

    def remove(self, path: Path):
        raise NotImplementedError

    def absolute(self, path: Path) -> Path:
        raise NotImplementedError


class DefaultFilesystem(Filesystem):
    def exists(self, path: Path) -> bool:
        # a dangling symlink still exists as an entry
        return os.path.lexists(path)

    def is_directory(self, path: Path) -> bool:
        return path.is_dir()

    def is_symlink(self, path: Path) -> bool:
        return path.is_symlink()

    def children(self, path: Path) -> Iterable[Path]:
        """Immediate entries of a directory, read eagerly so an unreadable
        directory fails here rather than halfway through iteration."""
        try:
            entries = sorted(os.listdir(path))
        except OSError as e:
            raise FilesystemError(path, e) from e
        return [path / entry for entry in entries]

    def size(self, path: Path) -> int:
        """Bytes held by the entry itself. Symlinks are measured as links,
        never through to their target."""
        try:
            info = os.lstat(path)
        except OSError as e:
            raise FilesystemError(path, e) from e
        if not stat.S_ISDIR(info.st_mode):
            return info.st_size

        errors = []
        total = 0
        for (root, _, files) in os.walk(path, onerror=errors.append):
            for file in files:
                file_path = Path(root, file)
                try:
                    total += os.lstat(file_path).st_size
                except OSError as e:
                    errors.append(e)
        if errors:
            raise FilesystemError(path, errors[0])
        return total

    def remove(self, path: Path):
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise FilesystemError(path, e) from e

    def absolute(self, path: Path) -> Path:
        try:
            return Path(os.path.abspath(path))
        except OSError as e:
            raise FilesystemError(path, e) from e


def write_lines(file: Path, lines: Iterable[str]):
    with open(file, "w", encoding="utf-8") as out:
        for line in lines:
            out.write(line + "\n")
        out.flush()
        os.fsync(out.fileno())


def write_paths(file: Path, paths: Sequence[str]):
    write_lines(file, (sanitize(path) for path in paths))
    logger.info(f"wrote {len(paths)} paths to {file}")


def write_directory_list(file: Path, directories: Sequence[DirectoryInfo]):
    write_lines(
        file,
        (
            f"{sanitize(directory.path)} ({directory.count} torrents)"
            for directory in directories
        ),
    )
    logger.info(f"wrote {len(directories)} directories to {file}")

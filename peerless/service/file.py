import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from peerless.external.filesystem import Filesystem, FilesystemError

logger = logging.getLogger(__name__)

SYSTEM_PATHS = frozenset(
    PurePath(path)
    for path in (
        "/",
        "/bin",
        "/boot",
        "/dev",
        "/etc",
        "/lib",
        "/lib64",
        "/proc",
        "/root",
        "/sbin",
        "/sys",
        "/usr",
        "/var",
        "C:\\Windows",
        "C:\\Program Files",
        "C:\\Program Files (x86)",
    )
)

ProgressCallback = Callable[[int, int, Path, int], None]


class DeletionValidationError(Exception):
    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(message)


class DeletionCancelled(Exception):
    pass


@dataclass
class FileOperation:
    path: Path
    size: int = 0
    is_dir: bool = False
    error: Optional[BaseException] = None


@dataclass
class DeletionOutcome:
    success: List[FileOperation] = field(default_factory=list)
    failed: List[FileOperation] = field(default_factory=list)
    total_size: int = 0

    @property
    def success_count(self) -> int:
        return len(self.success)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def add_success(self, operation: FileOperation):
        self.success.append(operation)
        self.total_size += operation.size

    def add_failure(self, operation: FileOperation, error: BaseException):
        operation.error = error
        self.failed.append(operation)


def _absolute(fs: Filesystem, path: Path) -> Path:
    try:
        return fs.absolute(path)
    except FilesystemError as e:
        raise DeletionValidationError(path, f"invalid path {path}: {e}") from e


def is_within(path: PurePath, directory: PurePath) -> bool:
    """Strict containment: the path must sit below the directory, not equal it."""
    if path == directory:
        return False
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def is_system_path(path: PurePath) -> bool:
    return path in SYSTEM_PATHS


def validate_deletion_paths(
    fs: Filesystem, paths: Iterable[Path], allowed_dirs: Sequence[Path] = ()
):
    """Raises DeletionValidationError on the first path that is outside the allowed
    directories or is a critical system directory. Nothing is deleted here."""
    allowed = []
    for directory in allowed_dirs:
        try:
            allowed.append(fs.absolute(directory))
        except FilesystemError:
            logger.warning(f"ignoring allowed directory {directory}")
    for path in paths:
        absolute = _absolute(fs, path)
        if allowed_dirs and not any(is_within(absolute, d) for d in allowed):
            raise DeletionValidationError(
                path, f"path {path} is not within allowed directories"
            )
        if is_system_path(absolute):
            raise DeletionValidationError(
                path, f"refusing to delete system path: {absolute}"
            )


def get_file_info(fs: Filesystem, path: Path) -> FileOperation:
    if not fs.exists(path):
        raise FilesystemError(path, FileNotFoundError(2, "No such file or directory"))
    is_dir = fs.is_directory(path) and not fs.is_symlink(path)
    operation = FileOperation(path, is_dir=is_dir)
    try:
        operation.size = fs.size(path)
    except FilesystemError as e:
        logger.debug(f"could not size {path}: {e}")
    return operation


def delete_files(
    fs: Filesystem,
    paths: Sequence[Path],
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
) -> DeletionOutcome:
    """Deletes each path independently. Every path ends up in exactly one of
    outcome.success and outcome.failed, including paths skipped after a cancel."""
    outcome = DeletionOutcome()
    total = len(paths)
    for (index, path) in enumerate(paths, start=1):
        if cancel is not None and cancel.is_set():
            outcome.add_failure(
                FileOperation(path), DeletionCancelled("deletion cancelled")
            )
            continue
        try:
            operation = get_file_info(fs, path)
        except FilesystemError as e:
            if on_progress is not None:
                on_progress(index, total, path, 0)
            logger.warning(f"cannot delete {path}: {e}")
            outcome.add_failure(FileOperation(path), e)
            continue

        if on_progress is not None:
            on_progress(index, total, path, operation.size)

        try:
            fs.remove(path)
        except FilesystemError as e:
            logger.warning(f"failed to delete {path}: {e}")
            outcome.add_failure(operation, e)
        else:
            logger.info(f"deleted {path} ({operation.size} bytes)")
            outcome.add_success(operation)
    return outcome


def calculate_total_size(fs: Filesystem, paths: Iterable[Path]) -> Tuple[int, int]:
    total = 0
    inaccessible = 0
    for path in paths:
        try:
            total += fs.size(path)
        except FilesystemError as e:
            logger.debug(f"inaccessible {path}: {e}")
            inaccessible += 1
    return total, inaccessible

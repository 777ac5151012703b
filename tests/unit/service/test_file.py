import threading
from pathlib import Path, PurePath

import pytest

from peerless.external.filesystem import FilesystemError
from peerless.service.file import (
    DeletionCancelled,
    DeletionValidationError,
    calculate_total_size,
    delete_files,
    get_file_info,
    is_system_path,
    is_within,
    validate_deletion_paths,
)
from tests.mock_fs import MockFilesystem


def test_is_within():
    assert is_within(PurePath("/data/movie"), PurePath("/data"))
    assert is_within(PurePath("/data/a/b"), PurePath("/data"))
    assert not is_within(PurePath("/data-other/movie"), PurePath("/data"))
    assert not is_within(PurePath("/data"), PurePath("/data"))


def test_is_within_dot_names():
    assert is_within(PurePath("/data/..hidden"), PurePath("/data"))


def test_is_system_path():
    assert is_system_path(PurePath("/"))
    assert is_system_path(PurePath("/etc"))
    assert not is_system_path(PurePath("/etc/cron.d"))
    assert not is_system_path(PurePath("/srv"))


def test_validate_outside_allowed():
    fs = MockFilesystem({"data": ["a"], "data-other": ["x"]})

    with pytest.raises(DeletionValidationError) as e:
        validate_deletion_paths(
            fs, [Path("/data/a"), Path("/data-other/x")], [Path("/data")]
        )

    assert e.value.path == Path("/data-other/x")
    assert str(e.value) == "path /data-other/x is not within allowed directories"
    assert fs.removed == []


def test_validate_equal_to_allowed_dir():
    fs = MockFilesystem({"data": ["a"]})

    with pytest.raises(DeletionValidationError):
        validate_deletion_paths(fs, [Path("/data")], [Path("/data")])


@pytest.mark.parametrize("path", ["/", "/etc", "/usr"])
def test_validate_system_path(path):
    fs = MockFilesystem({"etc": ["passwd"], "usr": ["bin/"]})

    with pytest.raises(DeletionValidationError) as e:
        validate_deletion_paths(fs, [Path(path)])

    assert str(e.value) == f"refusing to delete system path: {path}"


def test_validate_system_path_even_when_allowed():
    fs = MockFilesystem({"etc": ["passwd"]})

    with pytest.raises(DeletionValidationError):
        validate_deletion_paths(fs, [Path("/etc")], [Path("/")])


def test_validate_passes():
    fs = MockFilesystem({"data": ["a", "b/"]})

    validate_deletion_paths(fs, [Path("/data/a"), Path("/data/b")], [Path("/data")])


def test_get_file_info():
    fs = MockFilesystem({"data": ["a", {"b": ["c"]}]}, default_size=3)

    assert get_file_info(fs, Path("/data/a")).size == 3
    assert get_file_info(fs, Path("/data/b")).is_dir

    with pytest.raises(FilesystemError):
        get_file_info(fs, Path("/data/missing"))


def test_delete_files():
    fs = MockFilesystem(
        {"d": ["a", {"b": ["c", "e"]}]},
        sizes={Path("/d/a"): 10, Path("/d/b/c"): 5},
        default_size=1,
    )

    outcome = delete_files(fs, [Path("/d/a"), Path("/d/b")])

    assert outcome.success_count == 2
    assert outcome.failed_count == 0
    assert outcome.total_size == 16
    assert not fs.exists(Path("/d/b/c"))
    assert fs.exists(Path("/d"))


def test_delete_files_partial_failure():
    fs = MockFilesystem(
        {"d": ["a", "b"]}, default_size=2, undeletable={Path("/d/b")}
    )
    progress = []

    def _on_progress(current, total, path, size):
        progress.append((current, total, path, size))

    outcome = delete_files(
        fs, [Path("/d/a"), Path("/d/b"), Path("/d/z")], _on_progress
    )

    assert [op.path for op in outcome.success] == [Path("/d/a")]
    assert [op.path for op in outcome.failed] == [Path("/d/b"), Path("/d/z")]
    assert all(isinstance(op.error, FilesystemError) for op in outcome.failed)
    assert outcome.total_size == 2
    assert progress == [
        (1, 3, Path("/d/a"), 2),
        (2, 3, Path("/d/b"), 2),
        (3, 3, Path("/d/z"), 0),
    ]


def test_delete_files_cancel():
    fs = MockFilesystem({"d": ["a", "b", "c"]})
    cancel = threading.Event()

    def _on_progress(current, total, path, size):
        cancel.set()

    paths = [Path("/d/a"), Path("/d/b"), Path("/d/c")]
    outcome = delete_files(fs, paths, _on_progress, cancel)

    assert fs.removed == [Path("/d/a")]
    assert outcome.success_count == 1
    assert outcome.failed_count == 2
    assert all(isinstance(op.error, DeletionCancelled) for op in outcome.failed)
    assert outcome.success_count + outcome.failed_count == len(paths)


def test_calculate_total_size():
    fs = MockFilesystem(
        {"d": ["a", {"b": ["c"]}]},
        sizes={Path("/d/a"): 100, Path("/d/b/c"): 24},
    )

    result = calculate_total_size(fs, [Path("/d/a"), Path("/d/b"), Path("/d/z")])

    assert result == (124, 1)


def test_get_file_info_symlinked_directory():
    fs = MockFilesystem({"data": ["link/"]}, symlinks={Path("/data/link")})

    assert not get_file_info(fs, Path("/data/link")).is_dir

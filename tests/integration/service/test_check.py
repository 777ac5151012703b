from pathlib import Path

from peerless.domain.torrent import RemoteItem
from peerless.external.filesystem import DefaultFilesystem
from peerless.external.transmission import TransmissionApi
from peerless.service.file import delete_files, validate_deletion_paths
from peerless.service.torrent import CheckService


class StaticTransmission(TransmissionApi):
    def __init__(self, items):
        self.items = items

    def list_items(self, fields=()):
        return self.items


def test_check_and_delete_on_disk(tmp_path):
    downloads = tmp_path / "downloads"
    (downloads / "kept").mkdir(parents=True)
    (downloads / "kept" / "file").write_bytes(b"x" * 3)
    (downloads / "stray").mkdir()
    (downloads / "stray" / "file").write_bytes(b"x" * 4)
    (downloads / "loose.bin").write_bytes(b"x" * 5)
    fs = DefaultFilesystem()
    client = StaticTransmission([RemoteItem(1, "kept", str(downloads), "h1")])
    service = CheckService(client, fs)

    result = service.check_directories([downloads])

    assert result.total_found == 1
    assert result.missing_paths == [
        str(downloads / "loose.bin"),
        str(downloads / "stray"),
    ]
    assert result.total_missing_size == 9

    paths = [Path(path) for path in result.missing_paths]
    validate_deletion_paths(fs, paths, [downloads])
    outcome = delete_files(fs, paths)

    assert outcome.success_count == 2
    assert outcome.total_size == 9
    assert [p.name for p in downloads.iterdir()] == ["kept"]

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, MutableMapping, Sequence, Set

from peerless.domain.names import normalize_name, sanitize
from peerless.domain.torrent import (
    STATUS_DOWNLOADING,
    STATUS_FIELDS,
    STATUS_SEEDING,
    STATUS_STOPPED,
    DirectoryInfo,
    RemoteItem,
    SessionInfo,
    SessionStats,
)
from peerless.external.filesystem import Filesystem, FilesystemError
from peerless.external.transmission import TransmissionApi

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalEntry:
    name: str
    is_dir: bool
    found: bool = False


@dataclass
class DirectoryResult:
    path: Path
    entries: List[LocalEntry] = field(default_factory=list)
    missing_size: int = 0
    missing_paths: List[str] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return len(self.entries)

    @property
    def found_items(self) -> int:
        return sum(1 for entry in self.entries if entry.found)


@dataclass
class DirectoryCheckResult:
    torrent_count: int = 0
    directories: List[DirectoryResult] = field(default_factory=list)
    skipped: MutableMapping[Path, str] = field(default_factory=dict)

    @property
    def total_items(self) -> int:
        return sum(directory.total_items for directory in self.directories)

    @property
    def total_found(self) -> int:
        return sum(directory.found_items for directory in self.directories)

    @property
    def total_missing_size(self) -> int:
        return sum(directory.missing_size for directory in self.directories)

    @property
    def missing_paths(self) -> List[str]:
        return [path for d in self.directories for path in d.missing_paths]


@dataclass
class CompareResult:
    in_transmission_only: List[str] = field(default_factory=list)
    local_only: List[str] = field(default_factory=list)
    in_both: List[str] = field(default_factory=list)
    total_local: int = 0
    total_transmission: int = 0


def name_key(name: str) -> str:
    return normalize_name(sanitize(name))


class CheckService:
    """Cross-references local directories with the torrents Transmission knows.

    check_directories matches by (normalized) entry name, compare_local_with_transmission
    matches by exact absolute path. The two reports are kept apart on purpose: they
    answer different questions and their keys differ.
    """

    def __init__(self, client: TransmissionApi, fs: Filesystem):
        self.client = client
        self.fs = fs

    def check_directories(self, dirs: Sequence[Path]) -> DirectoryCheckResult:
        items = self.client.list_items()
        names: Set[str] = {name_key(item.name) for item in items}
        result = DirectoryCheckResult(torrent_count=len(items))
        for directory in dirs:
            try:
                result.directories.append(self._check_directory(directory, names))
            except FilesystemError as e:
                logger.warning(f"skipping directory {directory}: {e}")
                result.skipped[directory] = str(e)
        return result

    def _check_directory(self, directory: Path, names: Set[str]) -> DirectoryResult:
        result = DirectoryResult(directory)
        for child in self.fs.children(directory):
            found = name_key(child.name) in names
            result.entries.append(
                LocalEntry(child.name, self.fs.is_directory(child), found)
            )
            if not found:
                self._add_missing(result, child)
        return result

    def _add_missing(self, result: DirectoryResult, path: Path):
        try:
            absolute = self.fs.absolute(path)
        except FilesystemError as e:
            logger.debug(f"using relative path for {path}: {e}")
            absolute = path
        result.missing_paths.append(str(absolute))
        try:
            result.missing_size += self.fs.size(path)
        except FilesystemError as e:
            logger.debug(f"could not size missing entry {path}: {e}")

    def compare_local_with_transmission(self, directory: Path) -> CompareResult:
        torrent_paths = self.client.list_all_paths()
        remaining = set(torrent_paths)
        children = list(self.fs.children(directory))
        result = CompareResult(
            total_local=len(children), total_transmission=len(torrent_paths)
        )
        for child in children:
            try:
                absolute = str(self.fs.absolute(child))
            except FilesystemError:
                absolute = str(child)
            if absolute in remaining:
                result.in_both.append(absolute)
                remaining.discard(absolute)
            else:
                result.local_only.append(absolute)
        result.in_transmission_only = sorted(remaining)
        return result


@dataclass
class TorrentStatistics:
    total_torrents: int
    directories: Sequence[DirectoryInfo]


@dataclass
class DirectoryStatus:
    torrent_count: int = 0
    total_size: int = 0
    downloaded_size: int = 0
    free_space: int = 0


@dataclass
class DetailedStatus:
    session: SessionInfo
    current_stats: SessionStats
    cumulative_stats: SessionStats
    total_torrents: int = 0
    downloading_torrents: int = 0
    seeding_torrents: int = 0
    paused_torrents: int = 0
    completed_torrents: int = 0
    total_size: int = 0
    downloaded_size: int = 0
    remaining_size: int = 0
    total_download_speed: int = 0
    total_upload_speed: int = 0
    directory_breakdown: MutableMapping[str, DirectoryStatus] = field(
        default_factory=dict
    )


class StatusService:
    def __init__(self, client: TransmissionApi):
        self.client = client

    def get_all_torrent_paths(self) -> Sequence[str]:
        return self.client.list_all_paths()

    def get_torrent_statistics(self) -> TorrentStatistics:
        directories = self.client.list_directories()
        total = sum(directory.count for directory in directories)
        return TorrentStatistics(total, directories)

    def get_detailed_status(self) -> DetailedStatus:
        # the three queries are independent and share the client's session
        with ThreadPoolExecutor(max_workers=3) as executor:
            items_future = executor.submit(self.client.list_items, STATUS_FIELDS)
            session_future = executor.submit(self.client.get_session_info)
            stats_future = executor.submit(self.client.get_session_stats)
            items = items_future.result()
            session = session_future.result()
            current, cumulative = stats_future.result()

        status = DetailedStatus(session, current, cumulative)
        for item in items:
            self._add_item(status, item)
        return status

    @staticmethod
    def _add_item(status: DetailedStatus, item: RemoteItem):
        status.total_torrents += 1
        status.total_size += item.total_size
        status.downloaded_size += item.downloaded_ever
        status.remaining_size += item.left_until_done
        status.total_download_speed += item.rate_download
        status.total_upload_speed += item.rate_upload

        if item.status == STATUS_STOPPED:
            if item.percent_done >= 1.0:
                status.completed_torrents += 1
            else:
                status.paused_torrents += 1
        elif item.status == STATUS_DOWNLOADING:
            status.downloading_torrents += 1
        elif item.status == STATUS_SEEDING:
            status.seeding_torrents += 1

        directory = sanitize(item.download_dir)
        if directory not in status.directory_breakdown:
            status.directory_breakdown[directory] = DirectoryStatus(
                free_space=status.session.download_dir_free
            )
        breakdown = status.directory_breakdown[directory]
        breakdown.torrent_count += 1
        breakdown.total_size += item.total_size
        breakdown.downloaded_size += item.downloaded_ever

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

BASIC_FIELDS: Sequence[str] = ("id", "name", "downloadDir", "hashString")

STATUS_FIELDS: Sequence[str] = (
    *BASIC_FIELDS,
    "totalSize",
    "sizeWhenDone",
    "leftUntilDone",
    "rateDownload",
    "rateUpload",
    "percentDone",
    "status",
    "addedDate",
    "doneDate",
    "uploadedEver",
    "downloadedEver",
    "uploadRatio",
)

STATUS_STOPPED = 0
STATUS_DOWNLOADING = 4
STATUS_SEEDING = 6


@dataclass(frozen=True)
class RemoteItem:
    id: int
    name: str
    download_dir: str
    hash_string: str
    total_size: int = 0
    size_when_done: int = 0
    left_until_done: int = 0
    rate_download: int = 0
    rate_upload: int = 0
    percent_done: float = 0.0
    status: int = STATUS_STOPPED
    added_date: int = 0
    done_date: int = 0
    uploaded_ever: int = 0
    downloaded_ever: int = 0
    ratio: float = 0.0

    @classmethod
    def from_rpc(cls, torrent: Mapping) -> "RemoteItem":
        """Builds an item from one entry of a torrent-get response."""
        return cls(
            id=torrent.get("id", 0),
            name=torrent.get("name", ""),
            download_dir=torrent.get("downloadDir", ""),
            hash_string=torrent.get("hashString", ""),
            total_size=torrent.get("totalSize", 0),
            size_when_done=torrent.get("sizeWhenDone", 0),
            left_until_done=torrent.get("leftUntilDone", 0),
            rate_download=torrent.get("rateDownload", 0),
            rate_upload=torrent.get("rateUpload", 0),
            percent_done=torrent.get("percentDone", 0.0),
            status=torrent.get("status", STATUS_STOPPED),
            added_date=torrent.get("addedDate", 0),
            done_date=torrent.get("doneDate", 0),
            uploaded_ever=torrent.get("uploadedEver", 0),
            downloaded_ever=torrent.get("downloadedEver", 0),
            ratio=torrent.get("uploadRatio", 0.0),
        )


@dataclass(frozen=True)
class DirectoryInfo:
    path: str
    count: int


@dataclass(frozen=True)
class SessionInfo:
    download_dir: str = ""
    download_dir_free: int = 0
    peer_port: int = 0
    seed_ratio_limit: float = 0.0
    seed_ratio_limited: bool = False
    upload_speed: int = 0
    download_speed: int = 0
    alt_speed_enabled: bool = False
    alt_speed_up: int = 0
    alt_speed_down: int = 0

    @classmethod
    def from_rpc(cls, arguments: Mapping) -> "SessionInfo":
        return cls(
            download_dir=arguments.get("download-dir", ""),
            download_dir_free=arguments.get("download-dir-free", 0),
            peer_port=arguments.get("peer-port", 0),
            seed_ratio_limit=arguments.get("seedRatioLimit", 0.0),
            seed_ratio_limited=arguments.get("seedRatioLimited", False),
            upload_speed=arguments.get("uploadSpeed", 0),
            download_speed=arguments.get("downloadSpeed", 0),
            alt_speed_enabled=arguments.get("alt-speed-enabled", False),
            alt_speed_up=arguments.get("alt-speed-up", 0),
            alt_speed_down=arguments.get("alt-speed-down", 0),
        )


@dataclass(frozen=True)
class SessionStats:
    downloaded_bytes: int = 0
    uploaded_bytes: int = 0
    files_added: int = 0
    session_count: int = 0
    seconds_active: int = 0

    @classmethod
    def from_rpc(cls, stats: Optional[Mapping]) -> "SessionStats":
        if stats is None:
            return cls()
        return cls(
            downloaded_bytes=stats.get("downloadedBytes", 0),
            uploaded_bytes=stats.get("uploadedBytes", 0),
            files_added=stats.get("filesAdded", 0),
            session_count=stats.get("sessionCount", 0),
            seconds_active=stats.get("secondsActive", 0),
        )

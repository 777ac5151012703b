from dataclasses import dataclass

from texttable import Texttable

from peerless.command.command import ReportCommand, ReportOutput
from peerless.command.format import format_size, separator
from peerless.domain.names import sanitize
from peerless.service.torrent import DetailedStatus, StatusService


def _format_speed(rate: int) -> str:
    return f"{format_size(rate)}/s"


@dataclass
class StatusOutput(ReportOutput):
    status: DetailedStatus

    def display(self):
        status = self.status
        session = status.session
        print("Transmission Status")
        print(separator())
        print(
            f"Torrents: {status.total_torrents} total, "
            f"{status.downloading_torrents} downloading, "
            f"{status.seeding_torrents} seeding, "
            f"{status.paused_torrents} paused, "
            f"{status.completed_torrents} completed"
        )
        print(
            f"Size: {format_size(status.total_size)} total, "
            f"{format_size(status.downloaded_size)} downloaded, "
            f"{format_size(status.remaining_size)} remaining"
        )
        print(
            f"Speed: {_format_speed(status.total_download_speed)} down, "
            f"{_format_speed(status.total_upload_speed)} up"
        )
        print(f"Download directory: {sanitize(session.download_dir)}")
        print(f"Free space: {format_size(session.download_dir_free)}")
        print(f"Peer port: {session.peer_port}")
        print(f"Alternative speed limits: {'on' if session.alt_speed_enabled else 'off'}")
        print(
            f"Session: {format_size(status.current_stats.downloaded_bytes)} downloaded, "
            f"{format_size(status.current_stats.uploaded_bytes)} uploaded"
        )
        print(
            f"All time: {format_size(status.cumulative_stats.downloaded_bytes)} downloaded, "
            f"{format_size(status.cumulative_stats.uploaded_bytes)} uploaded"
        )
        if status.directory_breakdown:
            print()
            self.__print_breakdown()

    def __print_breakdown(self):
        table = Texttable()
        table.set_deco(Texttable.HEADER)
        table.set_cols_dtype(["t", "i", "t", "t"])
        table.set_cols_align(["l", "r", "r", "r"])
        table.set_header_align(["l", "r", "r", "r"])
        table.header(["Directory", "Torrents", "Size", "Downloaded"])
        for (path, breakdown) in sorted(self.status.directory_breakdown.items()):
            table.add_row(
                [
                    path,
                    breakdown.torrent_count,
                    format_size(breakdown.total_size),
                    format_size(breakdown.downloaded_size),
                ]
            )
        print(table.draw())


class StatusCommand(ReportCommand):
    def __init__(self, service: StatusService):
        self.service = service

    def run(self) -> StatusOutput:
        return StatusOutput(self.service.get_detailed_status())

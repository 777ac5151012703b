from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from peerless.command.command import ReportCommand, ReportOutput
from peerless.command.format import separator
from peerless.external.filesystem import write_directory_list
from peerless.service.torrent import StatusService, TorrentStatistics


@dataclass
class DirectoriesOutput(ReportOutput):
    statistics: TorrentStatistics
    written_to: Optional[Path] = None

    def display(self):
        directories = self.statistics.directories
        print(f"Download Directories in Transmission ({len(directories)} unique):")
        print(separator())
        for directory in directories:
            print(f"{directory.path} ({directory.count} torrents)")
        print(separator())
        print(f"Total: {self.statistics.total_torrents} torrents")
        if self.written_to is not None:
            print(f"Wrote {len(directories)} directories to: {self.written_to}")


class DirectoriesCommand(ReportCommand):
    def __init__(self, service: StatusService, output_file: Optional[Path] = None):
        self.service = service
        self.output_file = output_file

    def run(self) -> DirectoriesOutput:
        statistics = self.service.get_torrent_statistics()
        if self.output_file is not None:
            write_directory_list(self.output_file, statistics.directories)
            return DirectoriesOutput(statistics, self.output_file)
        return DirectoriesOutput(statistics)

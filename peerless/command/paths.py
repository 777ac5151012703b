from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from peerless.command.command import ReportCommand, ReportOutput
from peerless.external.filesystem import write_paths
from peerless.service.torrent import StatusService


@dataclass
class PathsOutput(ReportOutput):
    paths: Sequence[str]
    written_to: Optional[Path] = None

    def display(self):
        if self.written_to is not None:
            print(f"Wrote {len(self.paths)} torrent paths to: {self.written_to}")
            return
        for path in self.paths:
            print(path)


class PathsCommand(ReportCommand):
    def __init__(self, service: StatusService, output_file: Optional[Path] = None):
        self.service = service
        self.output_file = output_file

    def run(self) -> PathsOutput:
        paths = self.service.get_all_torrent_paths()
        if self.output_file is not None:
            write_paths(self.output_file, paths)
            return PathsOutput(paths, self.output_file)
        return PathsOutput(paths)

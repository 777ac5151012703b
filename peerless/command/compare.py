from dataclasses import dataclass
from pathlib import Path

from colorama import Fore

from peerless.command.command import ReportCommand, ReportOutput
from peerless.command.format import separator
from peerless.service.torrent import CheckService, CompareResult


@dataclass
class CompareOutput(ReportOutput):
    directory: Path
    result: CompareResult

    def display(self):
        result = self.result
        print(f"Comparing {self.directory} with Transmission")
        print(separator())
        print(
            f"{result.total_local} local entries, "
            f"{result.total_transmission} torrents in Transmission"
        )
        if result.in_both:
            print(f"In both ({len(result.in_both)}):")
            for path in result.in_both:
                print(Fore.GREEN + f"\N{check mark} {path}")
        if result.local_only:
            print(f"Only local ({len(result.local_only)}):")
            for path in result.local_only:
                print(Fore.RED + f"\N{ballot x} {path}")
        if result.in_transmission_only:
            print(f"Only in Transmission ({len(result.in_transmission_only)}):")
            for path in result.in_transmission_only:
                print(Fore.YELLOW + f"\N{triangular bullet} {path}")


class CompareCommand(ReportCommand):
    def __init__(self, service: CheckService, directory: Path):
        self.service = service
        self.directory = directory

    def run(self) -> CompareOutput:
        result = self.service.compare_local_with_transmission(self.directory)
        return CompareOutput(self.directory, result)

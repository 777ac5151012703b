import logging
import signal
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from colorama import Fore

from peerless.command.command import Command, CommandOutput, Confirm
from peerless.command.format import format_size, separator
from peerless.external.filesystem import Filesystem, write_paths
from peerless.service.file import (
    DeletionOutcome,
    calculate_total_size,
    delete_files,
    validate_deletion_paths,
)
from peerless.service.torrent import CheckService, DirectoryCheckResult, DirectoryResult

logger = logging.getLogger(__name__)


def _display_directory(directory: DirectoryResult):
    print(f"Directory: {directory.path}")
    print(separator())
    for entry in directory.entries:
        kind = "[DIR] " if entry.is_dir else "[FILE]"
        if entry.found:
            print(Fore.GREEN + f"\N{check mark} {kind} {entry.name}")
        else:
            print(Fore.RED + f"\N{ballot x} {kind} {entry.name}")
    print(separator())
    print(
        f"Directory Summary: {directory.found_items}/{directory.total_items} "
        f"items found in Transmission"
    )
    if directory.missing_size > 0:
        print(f"Missing items total size: {format_size(directory.missing_size)}")


@dataclass
class CheckOutput(CommandOutput):
    result: DirectoryCheckResult
    written_to: Optional[Path] = None
    pending_size: int = 0
    pending_inaccessible: int = 0

    def _display_report(self):
        print(f"Found {self.result.torrent_count} torrents in Transmission")
        print()
        for (index, directory) in enumerate(self.result.directories):
            if index > 0:
                print()
            _display_directory(directory)
        for (path, reason) in self.result.skipped.items():
            print(Fore.RED + f"Error reading directory {path}: {reason}")
        checked = len(self.result.directories) + len(self.result.skipped)
        if checked > 1:
            print()
            print(separator("="))
            print(
                f"Overall Summary: {self.result.total_found}/{self.result.total_items} "
                f"items found in Transmission across {checked} directories"
            )
            if self.result.total_missing_size > 0:
                print(
                    f"Total missing items size: {format_size(self.result.total_missing_size)}"
                )

    def display(self):
        self._display_report()
        if self.written_to is not None:
            print()
            print(
                f"Wrote {len(self.result.missing_paths)} missing item paths to: {self.written_to}"
            )

    def dry_run_display(self):
        self._display_report()
        missing = self.result.missing_paths
        print()
        if missing:
            print(
                f"Would delete {len(missing)} items ({format_size(self.pending_size)}):"
            )
            for path in missing:
                print(path)
            if self.pending_inaccessible > 0:
                print(f"{self.pending_inaccessible} items could not be measured")
        else:
            print("Nothing would be deleted.")


@dataclass
class DeletionOutput(CommandOutput):
    outcome: Optional[DeletionOutcome] = None
    aborted: bool = False
    candidates: Sequence[str] = field(default_factory=list)

    def display(self):
        print()
        if self.aborted:
            print("Deletion aborted, nothing was deleted.")
            return
        if self.outcome is None:
            print("No missing items to delete.")
            return
        print(
            f"Deleted {self.outcome.success_count} items, "
            f"freed {format_size(self.outcome.total_size)}"
        )
        if self.outcome.failed_count > 0:
            print(f"Failed to delete {self.outcome.failed_count} items:")
            for failure in self.outcome.failed:
                print(
                    Fore.RED + f"\N{ballot x} {failure.path} because: {failure.error}"
                )

    def dry_run_display(self):
        raise NotImplementedError


def confirm_with_input(message: str) -> bool:
    response = input(f"{message} [Y/N]:")
    return response.strip().lower() == "y"


def print_progress(current: int, total: int, path: Path, size: int):
    print(f"[{current}/{total}] Deleting {path} ({format_size(size)})")


class CheckCommand(Command):
    def __init__(
        self,
        service: CheckService,
        fs: Filesystem,
        dirs: Sequence[Path],
        output_file: Optional[Path] = None,
    ):
        self.service = service
        self.fs = fs
        self.dirs = dirs
        self.output_file = output_file

    def _check(self) -> DirectoryCheckResult:
        return self.service.check_directories(self.dirs)

    def run(self) -> CommandOutput:
        result = self._check()
        output = CheckOutput(result)
        if self.output_file is not None:
            write_paths(self.output_file, result.missing_paths)
            output.written_to = self.output_file
        return output

    def dry_run(self) -> CheckOutput:
        result = self._check()
        paths = [Path(path) for path in result.missing_paths]
        size, inaccessible = calculate_total_size(self.fs, paths)
        return CheckOutput(result, pending_size=size, pending_inaccessible=inaccessible)


class CheckAndDeleteCommand(CheckCommand):
    """Runs the check, then deletes every missing entry after validation and
    confirmation. The report is shown before the prompt."""

    def __init__(
        self,
        service: CheckService,
        fs: Filesystem,
        dirs: Sequence[Path],
        output_file: Optional[Path] = None,
        confirm: Confirm = confirm_with_input,
        cancel: Optional[threading.Event] = None,
    ):
        super().__init__(service, fs, dirs, output_file)
        self.confirm = confirm
        self.cancel = cancel or threading.Event()

    def run(self) -> CommandOutput:
        report: CheckOutput = super().run()
        report.display()
        candidates = report.result.missing_paths
        if not candidates:
            return DeletionOutput()

        paths = self._validate(report.result)

        size, inaccessible = calculate_total_size(self.fs, paths)
        print()
        print(f"About to delete {len(paths)} items ({format_size(size)})")
        if inaccessible > 0:
            print(f"{inaccessible} items could not be measured")
        if not self.confirm("Delete these items?"):
            logger.info("deletion declined")
            return DeletionOutput(aborted=True, candidates=candidates)

        outcome = self._delete(paths)
        return DeletionOutput(outcome, candidates=candidates)

    def dry_run(self) -> CheckOutput:
        result = self._check()
        paths = self._validate(result)
        size, inaccessible = calculate_total_size(self.fs, paths)
        return CheckOutput(result, pending_size=size, pending_inaccessible=inaccessible)

    def _validate(self, result: DirectoryCheckResult) -> List[Path]:
        # the checked directories are the only places anything may be deleted
        paths = [Path(path) for path in result.missing_paths]
        allowed = [directory.path for directory in result.directories]
        validate_deletion_paths(self.fs, paths, allowed)
        return paths

    def _delete(self, paths: Sequence[Path]) -> DeletionOutcome:
        def _interrupt(signum, frame):
            logger.info("interrupt received, stopping after current item")
            self.cancel.set()

        try:
            previous = signal.signal(signal.SIGINT, _interrupt)
        except ValueError:
            # not the main thread
            previous = None
        try:
            return delete_files(self.fs, paths, print_progress, self.cancel)
        finally:
            if previous is not None:
                signal.signal(signal.SIGINT, previous)

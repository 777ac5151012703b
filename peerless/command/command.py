from typing import Any, Callable, Mapping, Protocol, Sequence, Tuple

Confirm = Callable[[str], bool]


class CommandOutput(Protocol):
    """What a command produced; printed after the command has finished."""

    def display(self):
        raise NotImplementedError

    def dry_run_display(self):
        raise NotImplementedError


class Command(Protocol):
    """A subcommand bound to its arguments. dry_run never changes anything
    in Transmission or on disk."""

    def run(self) -> CommandOutput:
        raise NotImplementedError

    def dry_run(self) -> CommandOutput:
        raise NotImplementedError


class ReportOutput(CommandOutput):
    def dry_run_display(self):
        raise NotImplementedError


class ReportCommand(Command):
    """Read-only command, so there is no dry-run mode."""

    def dry_run(self) -> CommandOutput:
        raise NotImplementedError


CommandFactoryResult = Tuple[Command, Mapping]


class CommandFactory(Protocol):
    def __call__(
        self, argv: Sequence[str], dependencies: Mapping[str, Any]
    ) -> CommandFactoryResult:
        raise NotImplementedError

import logging
from collections import defaultdict
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, DefaultDict, Mapping, Optional, Sequence

from docopt import docopt

from peerless.command.check import (
    CheckAndDeleteCommand,
    CheckCommand,
    confirm_with_input,
)
from peerless.command.command import CommandFactory, CommandFactoryResult
from peerless.command.compare import CompareCommand
from peerless.command.directories import DirectoriesCommand
from peerless.command.other import InvalidCommand, MissingCommand
from peerless.command.paths import PathsCommand
from peerless.command.status import StatusCommand
from peerless.domain.config import Config
from peerless.service.torrent import CheckService, StatusService
from peerless.spec.shared import PathParser

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY = "."


def always_confirm(message: str) -> bool:
    return True


def _output_file(args: Mapping) -> Optional[Path]:
    raw_output = args.get("--output")
    if raw_output:
        return Path(raw_output)
    return None


def check_factory(argv: Sequence[str], dependencies: Mapping) -> CommandFactoryResult:
    client = dependencies["client"]
    fs = dependencies["fs"]
    config: Config = dependencies["config"]

    from peerless.spec import check as check_command

    args = docopt(doc=check_command.__doc__, argv=argv)
    raw_dirs = args.get("<dirs>") or [DEFAULT_DIRECTORY]
    replace(config, dirs=list(raw_dirs)).validate()
    dirs = PathParser.parse_paths(raw_dirs)

    service = CheckService(client, fs)
    output_file = _output_file(args)
    if args.get("--delete"):
        confirm = always_confirm if args.get("--yes") else confirm_with_input
        command = CheckAndDeleteCommand(service, fs, dirs, output_file, confirm)
        return command, args
    return CheckCommand(service, fs, dirs, output_file), args


def compare_factory(argv: Sequence[str], dependencies: Mapping) -> CommandFactoryResult:
    client = dependencies["client"]
    fs = dependencies["fs"]

    from peerless.spec import compare as compare_command

    args = docopt(doc=compare_command.__doc__, argv=argv)
    directory = PathParser.parse_path(args["<dir>"])
    return CompareCommand(CheckService(client, fs), directory), args


def directories_factory(
    argv: Sequence[str], dependencies: Mapping
) -> CommandFactoryResult:
    client = dependencies["client"]

    from peerless.spec import directories as directories_command

    args = docopt(doc=directories_command.__doc__, argv=argv)
    return DirectoriesCommand(StatusService(client), _output_file(args)), args


def paths_factory(argv: Sequence[str], dependencies: Mapping) -> CommandFactoryResult:
    client = dependencies["client"]

    from peerless.spec import paths as paths_command

    args = docopt(doc=paths_command.__doc__, argv=argv)
    return PathsCommand(StatusService(client), _output_file(args)), args


def status_factory(argv: Sequence[str], dependencies: Mapping) -> CommandFactoryResult:
    client = dependencies["client"]

    from peerless.spec import status as status_command

    args = docopt(doc=status_command.__doc__, argv=argv)
    return StatusCommand(StatusService(client)), args


class InvalidCommandFactory(CommandFactory):
    def __call__(
        self, argv: Sequence[str], dependencies: Mapping[str, Any]
    ) -> CommandFactoryResult:
        return InvalidCommand(), dict()


invalid_factory: Callable[[], CommandFactory] = InvalidCommandFactory

command_factories: DefaultDict[Any, CommandFactory] = defaultdict(
    invalid_factory,
    {
        "check": check_factory,
        "compare": compare_factory,
        "directories": directories_factory,
        "paths": paths_factory,
        "status": status_factory,
    },
)


class CommandCreator:
    def __init__(
        self,
        dependencies: Mapping[str, Any],
        factories: Mapping[str, CommandFactory],
    ):
        self.dependencies = dependencies
        self.factories = factories

    def get_command(self, args: Mapping) -> CommandFactoryResult:
        # subcommand argv is the command name followed by its own arguments,
        # without the global options
        command = args.get("<command>")
        if command is None:
            return MissingCommand(), dict()
        factory = self.factories[command]
        argv = [command] + args.get("<args>", [])
        logger.debug(f"creating command {command} with {argv}")
        return factory(argv, self.dependencies)

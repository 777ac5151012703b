"""Check local directories against the torrents registered in the Transmission BitTorrent client.

Usage:
    peerless [options] [-v ...] <command> [<args> ...]

Options:
    --host <host>               Transmission host (default is localhost, or $TRANSMISSION_HOST).
    --port <port>               Transmission RPC port (default is 9091, or $TRANSMISSION_PORT).
    -u <user>, --user <user>    Transmission username (or $TRANSMISSION_USER).
    -p <password>, --password <password>  Transmission password (or $TRANSMISSION_PASSWORD).
    -h, --help  Show this screen.
    -v, --verbose   Verbose terminal output (multiple -v increase verbosity).

The available peerless commands are:
    check       Find entries in local directories that no torrent in Transmission accounts for (optionally delete them).
    compare     Compare a directory with torrent locations by exact absolute path.
    directories List download directories in Transmission with torrent counts.
    paths       List absolute paths of all torrents in Transmission.
    status      Show a detailed status of Transmission.

See 'peerless <command> --help' for more information on a specific command.

"""
import logging
import sys
from pathlib import Path
from typing import Any, Mapping

from colorama import Fore, deinit, init
from docopt import docopt

from peerless.command.command import Command
from peerless.configuration import CommandCreator, command_factories
from peerless.domain.config import Config, ConfigError
from peerless.external.errors import TransmissionError
from peerless.external.filesystem import DefaultFilesystem, FilesystemError
from peerless.external.transmission import transmission_factory
from peerless.service.file import DeletionValidationError
from peerless.spec.shared import parse_config

logger = logging.getLogger(__name__)

LOG_FILE = "peerless.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def get_logging_level(verbosity: int) -> int:
    return LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]


def configure_logging(verbosity: int):
    """Without -v nothing is attached, so only warnings reach stderr through
    logging's last-resort handler. With -v the records go to peerless.log."""
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(get_logging_level(verbosity))
    if verbosity > 0:
        handler = logging.FileHandler(Path.cwd() / LOG_FILE, "w", encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def describe_transmission_error(error: TransmissionError) -> str:
    if error.is_auth_error:
        return f"{error} - check --user and --password"
    if error.is_connection_error:
        return f"{error} - is Transmission running?"
    return str(error)


def _fail(message: str) -> int:
    print(Fore.RED + message)
    return 1


class Application:
    def __init__(self, args: Mapping, dependencies: Mapping[str, Any]):
        self.args = args
        self.dependencies = dependencies

    def run(self) -> int:
        creator = CommandCreator(self.dependencies, command_factories)
        try:
            command, subcommand_args = creator.get_command(self.args)
        except ConfigError as e:
            return _fail(f"Invalid configuration: {e}")
        try:
            if subcommand_args.get("--dry-run"):
                return self._dry_run(command)
            command.run().display()
        except TransmissionError as e:
            logger.debug("transmission request failed", exc_info=True)
            return _fail(describe_transmission_error(e))
        except DeletionValidationError as e:
            return _fail(f"Refusing to delete, nothing was deleted: {e}")
        except FilesystemError as e:
            return _fail(str(e))
        return 0

    @staticmethod
    def _dry_run(command: Command) -> int:
        try:
            output = command.dry_run()
        except NotImplementedError:
            print("This command does not have a dry-run mode")
            return 1
        output.dry_run_display()
        return 0


def get_dependencies(config: Config) -> Mapping[str, Any]:
    return {
        "client": transmission_factory(config),
        "fs": DefaultFilesystem(),
        "config": config,
    }


def main():
    args = docopt(__doc__, options_first=True)
    configure_logging(int(args.get("--verbose") or 0))
    init(autoreset=True)
    try:
        config = parse_config(args)
        exit_code = Application(args, get_dependencies(config)).run()
    except ConfigError as e:
        exit_code = _fail(f"Invalid configuration: {e}")
    except KeyboardInterrupt:
        print("Cancelled")
        exit_code = 130
    except Exception as e:
        logger.exception(str(e))
        exit_code = getattr(e, "errno", None) or 1
    finally:
        deinit()
    sys.exit(exit_code)

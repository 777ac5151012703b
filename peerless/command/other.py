from peerless.command.command import CommandOutput, ReportCommand, ReportOutput


class MissingCommandOutput(ReportOutput):
    def display(self):
        print("Missing command! See 'peerless --help' for the available commands.")


class MissingCommand(ReportCommand):
    def run(self) -> CommandOutput:
        return MissingCommandOutput()


class InvalidCommandOutput(ReportOutput):
    def display(self):
        print("Invalid command! See 'peerless --help' for the available commands.")


class InvalidCommand(ReportCommand):
    def run(self) -> CommandOutput:
        return InvalidCommandOutput()

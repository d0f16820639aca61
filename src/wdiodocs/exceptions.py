"""Exception hierarchy for wdiodocs.

Every error raised on purpose by the package derives from BuildError so the
CLI can report it in one place.
"""


class BuildError(Exception):
    """Base class for all build failures."""

    pass


class CommandFailure(BuildError):
    """Raised when a subprocess exits with a nonzero status."""

    def __init__(self, command: str, exit_code: int, message: str | None = None):
        self.command = command
        self.exit_code = exit_code
        super().__init__(message or f"command '{command}' failed with exit code {exit_code}")


class FetchFailure(CommandFailure):
    """Raised when a registry lookup or archive download fails."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(
            f"GET {url}",
            1,
            message=f"command 'GET {url}' failed with exit code 1: {reason}",
        )


class ArchiveError(CommandFailure):
    """Raised when a package archive cannot be unpacked safely.

    Reported as the tar invocation it replaces, with exit code 1.
    """

    def __init__(self, archive: str, target_dir: str, reason: str):
        self.archive = archive
        self.target_dir = target_dir
        self.reason = reason
        command = f"tar -xzf {archive} --strip-components 1 -C {target_dir}"
        super().__init__(
            command,
            1,
            message=f"command '{command}' failed with exit code 1: {reason}",
        )


__all__ = ["ArchiveError", "BuildError", "CommandFailure", "FetchFailure"]

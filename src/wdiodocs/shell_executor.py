"""Shell command execution with streamed, buffered output.

Philosophy:
- Single responsibility: run one command to completion
- One trace line per invocation, nothing else
- Zero-BS: nonzero exit always raises

Public API (the "studs"):
    ShellExecutor: Runs shell command strings
    ExternalTool: Narrow run(args) -> output wrapper around one binary
"""

import codecs
import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import click

from wdiodocs.exceptions import CommandFailure

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


class ShellExecutor:
    """Run shell commands one at a time.

    Example:
        >>> executor = ShellExecutor()
        >>> executor.execute("echo hello")
        > echo hello
        hello
        'hello\\n'
    """

    def __init__(self, echo: Callable[..., None] = click.echo):
        """Initialize executor.

        Args:
            echo: Callable used for the trace line and for echoing child output
        """
        self.echo = echo

    def execute(self, command: str, silent: bool = False, cwd: Path | None = None) -> str:
        """Run command in a shell and return everything it wrote to stdout.

        Args:
            command: Shell command line
            silent: Do not echo the child's output to the terminal
            cwd: Working directory for the child

        Returns:
            Accumulated stdout, chunks concatenated in arrival order

        Raises:
            CommandFailure: If the command exits with a nonzero status
        """
        self.echo(f"> {command}")

        process = subprocess.Popen(
            command,
            shell=True,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL if silent else None,
        )

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks: list[str] = []

        try:
            while True:
                data = process.stdout.read1(CHUNK_SIZE)
                if not data:
                    break
                text = decoder.decode(data)
                if text:
                    chunks.append(text)
                    if not silent:
                        self.echo(text, nl=False)

            tail = decoder.decode(b"", final=True)
            if tail:
                chunks.append(tail)
                if not silent:
                    self.echo(tail, nl=False)
        except BaseException:
            # Interrupted mid-stream: don't leave the child running
            process.kill()
            raise
        finally:
            process.stdout.close()
            exit_code = process.wait()

        logger.debug("Command exited with %d: %s", exit_code, command)

        if exit_code != 0:
            raise CommandFailure(command, exit_code)

        return "".join(chunks)


class ExternalTool:
    """A single external binary reachable through an executor.

    Arguments are shell-quoted, so callers pass plain strings and paths.
    """

    def __init__(self, executor: ShellExecutor, binary: str):
        self.executor = executor
        self.binary = binary

    def command_line(self, args: Sequence[str | Path]) -> str:
        return " ".join([self.binary, *(shlex.quote(str(arg)) for arg in args)])

    def run(
        self, args: Sequence[str | Path], cwd: Path | None = None, silent: bool = False
    ) -> str:
        """Run the binary with args and return its stdout."""
        return self.executor.execute(self.command_line(args), silent=silent, cwd=cwd)


__all__ = ["ExternalTool", "ShellExecutor"]

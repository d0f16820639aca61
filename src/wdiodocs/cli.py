"""CLI entry point for wdiodocs.

Commands:
    wdiodocs                         # Show help
    wdiodocs build all               # Build every configured version
    wdiodocs build v3.4.0 false      # Build one version without cleaning
    wdiodocs matrix all              # Show what a build would run
    wdiodocs <command> [ARGS]...     # Run a single build step
"""

import logging
import sys

import click

from wdiodocs import __version__
from wdiodocs.command_router import CommandRouter, CommandTable
from wdiodocs.config_manager import ConfigManager
from wdiodocs.exceptions import BuildError
from wdiodocs.orchestrator import BuildOrchestrator

logger = logging.getLogger(__name__)

# Commands that only report and need no completion line
QUIET_COMMANDS = frozenset({"matrix"})


def show_help(ctx: click.Context, commands: CommandTable) -> None:
    """Print usage followed by every registered command."""
    click.echo(ctx.get_help())

    formatter = ctx.make_formatter()
    with formatter.section("Build commands"):
        formatter.write_dl(
            [(f"{command.name} {command.usage}".strip(), command.summary) for command in commands]
        )
    click.echo(formatter.getvalue().rstrip("\n"))


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    }
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    help="Config file path (default: ./wdiodocs.toml)",
)
@click.option(
    "--clean/--no-clean",
    default=None,
    help="Override the configured clean option for this run",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.version_option(version=__version__)
@click.argument("command", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    clean: bool | None,
    verbose: bool,
    command: str | None,
    args: tuple[str, ...],
) -> None:
    """wdiodocs - build the webdriverio documentation site.

    Installs pinned webdriverio and wddoc versions, generates markdown for
    every configured API version and assembles the hexo site.

    \b
    CONFIGURATION:
        Config file: ./wdiodocs.toml
        Keys: clean, [[builds]] (apiVersion, webdriverio, wddoc), [layout]

    Unknown commands print this help.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format="%(message)s"
    )

    try:
        options = ConfigManager.load_config(config).merged(clean=clean)
        orchestrator = BuildOrchestrator(options)
        router = CommandRouter(
            orchestrator.commands, lambda: show_help(ctx, orchestrator.commands)
        )

        if command is None:
            router.help_fallback()
            return

        router.run(command, list(args))

        if command in orchestrator.commands and command not in QUIET_COMMANDS:
            orchestrator.console.print(f"[green]✓[/green] {command} completed")

    except BuildError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()

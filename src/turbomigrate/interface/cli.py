"""
turbomigrate CLI entry point.

    turbomigrate [--local | --remote] [--dir PATH]     run a migration
    turbomigrate [--dir PATH] show-config              print parsed configs
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console

from turbomigrate import __version__
from turbomigrate.application.orchestrator import MigrationOrchestrator
from turbomigrate.domain.errors import TurbomigrateError, UserCancelledError
from turbomigrate.domain.models import RunConfig
from turbomigrate.domain.models.run_config import DEFAULT_MODULE_RUNTIME, DEFAULT_RUNNER
from turbomigrate.infrastructure.config import ConfigRepository, dump_document
from turbomigrate.infrastructure.executor import MigrationToolchain, SubprocessRunner
from turbomigrate.infrastructure.logging_config import setup_logging
from turbomigrate.interface.formatted_console import ConsoleRenderer
from turbomigrate.interface.prompts import NonInteractivePrompter, RichPrompter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="turbomigrate",
    help="Smarter drizzle migrations for Cloudflare D1 databases.",
    add_completion=False,
    rich_markup_mode="rich",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool):
    if value:
        typer.echo(f"turbomigrate {__version__}")
        raise typer.Exit()


def _fail(renderer: ConsoleRenderer, message: str) -> typer.Exit:
    renderer.error(message)
    return typer.Exit(1)


@app.callback()
def main_callback(  # pylint: disable=too-many-arguments
    ctx: typer.Context,
    local: bool = typer.Option(False, "--local", "-l", help="Run the migration locally."),
    remote: bool = typer.Option(False, "--remote", "-r", help="Run the migration remotely."),
    directory: Optional[str] = typer.Option(
        None, "--dir", "-d", help="Project directory (defaults to the current directory)."
    ),
    no_generate: bool = typer.Option(
        False, "--no-generate", help="Don't offer to generate a new migration first."
    ),
    runner: str = typer.Option(
        DEFAULT_RUNNER,
        "--runner",
        envvar="TURBOMIGRATE_RUNNER",
        help="Package runner used to invoke wrangler and drizzle-kit.",
    ),
    module_runtime: str = typer.Option(
        DEFAULT_MODULE_RUNTIME,
        "--module-runtime",
        envvar="TURBOMIGRATE_MODULE_RUNTIME",
        help="JavaScript runtime used to evaluate drizzle.config.ts/js.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write logs to file."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Resolve the wrangler environment, D1 database and drizzle migration,
    then run [bold]wrangler d1 execute[/bold] against it.
    """
    _ = version
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING, log_file=log_file)
    renderer = ConsoleRenderer(Console())

    try:
        run_config = RunConfig.from_options(
            directory,
            local=local,
            remote=remote,
            runner=runner,
            module_runtime=module_runtime,
            assume_no_generate=no_generate,
        )
    except ValueError as e:
        raise _fail(renderer, str(e))

    if not run_config.workdir.is_dir():
        raise _fail(renderer, f"Working directory '{directory}' does not exist")

    ctx.obj = run_config
    if ctx.invoked_subcommand is None:
        run_migration(run_config, renderer)


def run_migration(run_config: RunConfig, renderer: ConsoleRenderer) -> None:
    """Run one migration and turn its outcome into an exit status."""
    logger.info("Working directory: %s", run_config.workdir)
    prompter = RichPrompter(renderer.console) if run_config.interactive else NonInteractivePrompter()
    toolchain = MigrationToolchain(SubprocessRunner(), run_config.runner, run_config.interactive)
    orchestrator = MigrationOrchestrator(
        run_config,
        prompter,
        toolchain,
        notify=renderer.step,
        spinner=renderer.static_status if run_config.interactive else renderer.spinner,
    )

    try:
        outcome = asyncio.run(orchestrator.run())
    except UserCancelledError as e:
        logger.info("%s", e)
        raise _fail(renderer, "Migration cancelled.")
    except TurbomigrateError as e:
        logger.error("Migration failed during %s: %s", e.step, e)
        raise _fail(renderer, str(e))

    if not outcome.executed:
        renderer.warning("No migration was applied.")
        return

    if outcome.result.stdout.strip():
        renderer.console.print(outcome.result.stdout.rstrip(), markup=False, highlight=False)
    renderer.render_target(outcome.target)
    renderer.success("Successfully migrated!")


@app.command("show-config")
def show_config(
    ctx: typer.Context,
    compact: bool = typer.Option(False, "--compact", help="Print single-line JSON."),
):
    """
    Print the located wrangler and drizzle configs as parsed JSON.
    """
    run_config: RunConfig = ctx.obj
    renderer = ConsoleRenderer(Console())
    repository = ConfigRepository(run_config.workdir, run_config.module_runtime)

    failed = False
    for loader in (repository.load_deployment_config, repository.load_schema_tool_config):
        try:
            loaded = asyncio.run(loader())
        except TurbomigrateError as e:
            logger.error("Config load failed: %s", e)
            renderer.error(str(e))
            failed = True
            continue

        renderer.header(loaded.path.name)
        if loaded.located.ambiguous:
            renderer.warning(
                f"Multiple {loaded.located.kind} config files found: {', '.join(loaded.located.found)}"
            )
        renderer.console.print_json(dump_document(loaded.document), indent=None if compact else 2)

    if failed:
        raise typer.Exit(1)


def main() -> None:
    """Console script entry point."""
    app()

"""tokenpaint CLI entry point."""
from __future__ import annotations

import logging

import click

from tokenpaint import __version__

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _state_options(func):
    """Options shared by commands that touch settings and durable state."""
    func = click.option("--workspace", "workspace", default=None,
                        type=click.Path(file_okay=False), help="Open workspace folder")(func)
    func = click.option("--user-settings", default=None, type=click.Path(dir_okay=False),
                        help="User settings.json path")(func)
    func = click.option("--state-db", default=None, type=click.Path(dir_okay=False),
                        help="Durable state database path")(func)
    func = click.option("--extensions-dir", default=None, type=click.Path(file_okay=False),
                        help="Directory of installed editor add-ons")(func)
    func = click.option("--log-level", default="WARNING", type=click.Choice(LOG_LEVELS),
                        help="Logging level")(func)
    return func


def _build_config(**values):
    from tokenpaint.config import TokenPaintConfig

    logging.basicConfig(
        level=values.pop("log_level"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return TokenPaintConfig.from_env(
        workspace_dir=values.pop("workspace"),
        user_settings_path=values.pop("user_settings"),
        state_db_path=values.pop("state_db"),
        extensions_dir=values.pop("extensions_dir"),
        **values,
    )


@click.group()
@click.version_option(version=__version__, prog_name="tokenpaint")
def cli() -> None:
    """tokenpaint - live preview and persistence of syntax colour rules."""


@cli.command("open")
@_state_options
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to")
def open_session(**options) -> None:
    """Recover stale sessions, then serve the styling session API."""
    from tokenpaint.host import Host
    from tokenpaint.web.app import create_app

    config = _build_config(**options)
    host = Host(config)
    report = host.initialize()
    if report.restored:
        click.echo(f"Recovered {report.restored} unfinished session write(s)")
    app = create_app(host)
    click.echo(f"Starting tokenpaint on {config.host}:{config.port}")
    try:
        app.run(host=config.host, port=config.port)
    finally:
        host.deactivate()


@cli.command()
@click.argument("language", default="csharp")
def preview(language: str) -> None:
    """Print the raw example snippet for a language."""
    from tokenpaint.vocabulary import BuiltinSnippets

    snippet = BuiltinSnippets().snippet(language)
    click.echo(f"// preview.{snippet.extension}")
    click.echo(snippet.content, nl=False)


@cli.command()
@_state_options
def recover(**options) -> None:
    """Run only the start-up recovery sweep."""
    from tokenpaint.host import Host

    config = _build_config(**options)
    host = Host(config)
    try:
        report = host.initialize()
    finally:
        host.close()
    for step in report.steps:
        outcome = "failed: " + step.error if step.error else ("restored" if step.restored else "skipped")
        click.echo(f"{step.target} ({step.scope.value}): {outcome}")
    click.echo(f"Restored {report.restored}, failed {report.failed}")

"""CLI entry point: plugin list/search/install/uninstall/toggle and the manager page."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass

import click

from .core.config import Config, load_config
from .core.log import setup_logging
from .core.utils import short_cwd
from .hosts import LocalPluginHost, PromptPicker, StaticPicker
from .plugins import InstallOutcome, LifecycleController, RegistryStore, SearchIndex
from .tui.renderer import ConsoleSink, console, render_plugin_table


@dataclass
class _Session:
    config: Config
    host: LocalPluginHost
    store: RegistryStore


def _controller(session: _Session, picker, sink) -> LifecycleController:
    config = session.config
    return LifecycleController(
        session.host,
        picker,
        session.store,
        sink,
        host_timeout=config.host_timeout,
        picker_timeout=config.picker_timeout,
        notification_duration_ms=config.notification_duration_ms,
    )


async def _open(config: Config) -> _Session:
    host = LocalPluginHost(config)
    store = RegistryStore(host)
    await host.reload()
    await store.refresh()
    return _Session(config, host, store)


def _print_plugins(session: _Session) -> None:
    store = session.store
    if not len(store):
        console.print("no plugins installed", style="dim")
        console.print("use `plugdesk install <dir>` to add one", style="dim")
        return
    render_plugin_table(store.plugins, store.enabled)


# ── Commands ─────────────────────────────────────────────────────────


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Plugin data directory (default: ~/.plugdesk)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, data_dir: str | None):
    """plugdesk: manage installed plugins."""
    config = load_config(data_dir=data_dir, verbose=verbose)
    setup_logging(config.log_level)
    ctx.obj = config


@cli.command("list")
@click.pass_obj
def list_cmd(config: Config):
    """List installed plugins."""
    session = asyncio.run(_open(config))
    console.print(f"plugins in {short_cwd(config.plugins_dir)}", style="dim")
    _print_plugins(session)


@cli.command()
@click.argument("term")
@click.pass_obj
def search(config: Config, term: str):
    """Search installed plugins by name, description or author."""
    session = asyncio.run(_open(config))
    results = SearchIndex(session.store).filter(term)
    if not results:
        console.print("No plugins found", style="dim")
        return
    render_plugin_table(results, session.store.enabled)


@cli.command()
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.pass_obj
def install(config: Config, path: str | None):
    """Install a plugin from a directory (prompts when PATH is omitted)."""

    async def _run():
        session = await _open(config)
        picker = StaticPicker(path) if path else PromptPicker()
        return await _controller(session, picker, ConsoleSink()).install()

    outcome = asyncio.run(_run())
    if outcome is not InstallOutcome.INSTALLED:
        sys.exit(1)


@cli.command()
@click.argument("plugin_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def uninstall(config: Config, plugin_id: str, yes: bool):
    """Remove an installed plugin."""

    async def _run():
        session = await _open(config)
        controller = _controller(session, StaticPicker(None), ConsoleSink())
        controller.request_removal(plugin_id)
        if not yes and not click.confirm(controller.confirmation_message, default=False):
            controller.cancel_removal()
            console.print("Cancelled", style="dim")
            return True
        return await controller.confirm_removal()

    if not asyncio.run(_run()):
        sys.exit(1)


@cli.command()
@click.argument("plugin_id")
@click.pass_obj
def toggle(config: Config, plugin_id: str):
    """Enable a disabled plugin, or disable an enabled one."""

    async def _run():
        session = await _open(config)
        controller = _controller(session, StaticPicker(None), ConsoleSink())
        ok = await controller.toggle(plugin_id)
        return ok, session.store.is_enabled(plugin_id)

    ok, enabled = asyncio.run(_run())
    if not ok:
        console.print(f"could not update [bold]{plugin_id}[/bold]", style="red")
        sys.exit(1)
    console.print(f"{'enabled' if enabled else 'disabled'} [bold]{plugin_id}[/bold]")


@cli.command("load-unpacked")
@click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
@click.pass_obj
def load_unpacked(config: Config, path: str | None):
    """Load a plugin directory in place, without copying it."""

    async def _run():
        session = await _open(config)
        picker = PromptPicker()
        return await _controller(session, picker, ConsoleSink()).load_unpacked(path)

    if not asyncio.run(_run()):
        console.print("could not load plugin directory", style="red")
        sys.exit(1)
    console.print("loaded unpacked plugin")


@cli.command()
@click.pass_obj
def ui(config: Config):
    """Open the interactive plugin manager."""
    from .tui.plugin_ui import InlinePicker, StatusSink, run_plugin_ui

    setup_logging(config.log_level, log_file=config.log_path)

    async def _run():
        session = await _open(config)
        picker = InlinePicker()
        sink = StatusSink()
        await run_plugin_ui(_controller(session, picker, sink), picker, sink)

    asyncio.run(_run())


def main():
    cli()


if __name__ == "__main__":
    main()

"""CLI interface for PyAssetSync."""

import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

import click

from ..config import config
from ..exceptions import (
    BindingExistsError,
    BindingNotFoundError,
    MissingMandatoryFileError,
    PathOutsideRootError,
    SettingsError,
)
from ..output import OutputFormatter
from ..paths import ASSETS_FOLDER_NAME, to_virtual_relative
from ..sync import (
    Binding,
    BindingState,
    BindingStore,
    SettingsManager,
    SyncAction,
    SyncEngine,
    SyncMode,
    default_settings_file,
)
from .adapters import AssetRefreshNotifier, ClickConfirmationPrompt

logger = logging.getLogger(__name__)

MODE_CHOICES = [mode.value for mode in SyncMode] + ["sta", "ats", "tw"]


def _resolve_data_path(data_path: Optional[str]) -> str:
    """Return the absolute Assets directory from option, config or cwd."""
    if data_path is None:
        data_path = config.data_path
    if data_path is None:
        data_path = str(Path.cwd() / ASSETS_FOLDER_NAME)
    return os.path.abspath(data_path)


def _load_store(ctx: Any) -> tuple[SettingsManager, BindingStore]:
    """Load the binding store, exiting with an error if it is unreadable."""
    out: OutputFormatter = ctx.obj["out"]
    manager = SettingsManager(ctx.obj["settings_file"])
    try:
        store = manager.load(ctx.obj["data_path"])
    except SettingsError as e:
        out.error(str(e))
        ctx.exit(1)
    return manager, store


def _save_store(ctx: Any, manager: SettingsManager, store: BindingStore) -> None:
    out: OutputFormatter = ctx.obj["out"]
    try:
        manager.save_if_dirty(store)
    except SettingsError as e:
        out.error(str(e))
        ctx.exit(1)


def _to_asset_path(data_path: str, value: str) -> str:
    """Convert an ``Assets/...`` path or a filesystem path to an asset path.

    Raises:
        PathOutsideRootError: If a filesystem path is outside the Assets tree
    """
    unified = value.replace("\\", "/")
    if unified.split("/")[0] == ASSETS_FOLDER_NAME:
        return unified.rstrip("/")
    return to_virtual_relative(data_path, os.path.abspath(value))


def _find_binding(ctx: Any, store: BindingStore, asset: str) -> Binding:
    out: OutputFormatter = ctx.obj["out"]
    try:
        binding = store.find_by_asset(_to_asset_path(store.data_path, asset))
    except (BindingNotFoundError, PathOutsideRootError) as e:
        out.error(str(e))
        ctx.exit(1)
    return binding


def _create_engine(
    ctx: Any, manager: SettingsManager, store: BindingStore
) -> tuple[SyncEngine, AssetRefreshNotifier]:
    out: OutputFormatter = ctx.obj["out"]
    notifier = AssetRefreshNotifier()
    engine = SyncEngine(
        store,
        prompt=ClickConfirmationPrompt(out, assume_yes=ctx.obj["assume_yes"]),
        on_refresh=notifier,
        persistence=manager,
    )
    return engine, notifier


def _describe_state(binding: Binding) -> str:
    """Return a short human-readable state of a refreshed binding."""
    if not binding.source_meta.exists and not binding.asset_meta.exists:
        return "both files missing"
    if not binding.source_meta.exists:
        return "no source file"
    if not binding.asset_meta.exists:
        return "no asset file"
    state = binding.get_state(refresh=False)
    if state == BindingState.SAME_AS_SOURCE:
        return "up to date"
    if state == BindingState.OLDER_THAN_SOURCE:
        return "source newer"
    return "asset newer"


def _report_stats(ctx: Any, title: str, stats: dict) -> None:
    out: OutputFormatter = ctx.obj["out"]
    if out.json_output:
        out.output_json(stats)
    else:
        out.print_summary(
            title,
            [
                ("Updated", f"{stats['updates']} file(s)"),
                ("Created", f"{stats['creates']} file(s)"),
                ("Skipped", f"{stats['skips']} binding(s)"),
                ("Declined", f"{stats['declined']} binding(s)"),
                ("Errors", f"{stats['errors']} binding(s)"),
            ],
        )


@click.group()
@click.option(
    "--data-path",
    "-d",
    envvar="PYASSETSYNC_DATA_PATH",
    type=click.Path(file_okay=False),
    help="Project Assets directory (default: ./Assets)",
)
@click.option(
    "--settings-file",
    "-s",
    type=click.Path(dir_okay=False),
    help="Bindings settings file (default: Assets/Settings/external_assets.json)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option("--yes", "-y", is_flag=True, help="Answer yes to every confirmation")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyassetsync")
@click.pass_context
def main(
    ctx: Any,
    data_path: Optional[str],
    settings_file: Optional[str],
    quiet: bool,
    json: bool,
    yes: bool,
    verbose: bool,
) -> None:
    """PyAssetSync - Keep external files and project assets in sync."""
    # Store settings in context for subcommands to access
    ctx.ensure_object(dict)
    resolved_data_path = _resolve_data_path(data_path)
    ctx.obj["data_path"] = resolved_data_path
    ctx.obj["settings_file"] = (
        Path(settings_file)
        if settings_file
        else default_settings_file(resolved_data_path)
    )
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["assume_yes"] = yes

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyassetsync").setLevel(logging.DEBUG)
    else:
        # Engine errors (missing files, failed copies) are still reported
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("data_path", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def init(ctx: Any, data_path: str) -> None:
    """Save DATA_PATH as the default project Assets directory."""
    out: OutputFormatter = ctx.obj["out"]
    absolute = os.path.abspath(data_path)
    config.save_data_path(absolute)
    out.print_summary(
        "Initialization Complete",
        [
            ("Assets directory", absolute),
            ("Config file", str(config.get_config_path())),
        ],
    )


@main.command()
@click.argument(
    "external_file", type=click.Path(exists=True, dir_okay=False, readable=True)
)
@click.argument("asset")
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=SyncMode.SOURCE_TO_ASSET.value,
    show_default=True,
    help="Sync mode of the binding",
)
@click.option("--no-auto-update", is_flag=True, help="Don't update automatically")
@click.option("--no-notify", is_flag=True, help="Don't ask before updating")
@click.pass_context
def add(
    ctx: Any,
    external_file: str,
    asset: str,
    mode: str,
    no_auto_update: bool,
    no_notify: bool,
) -> None:
    """Bind EXTERNAL_FILE to ASSET.

    ASSET is either a virtual path starting with "Assets/" or a filesystem
    path inside the Assets directory.

    Sync Modes:
      - sourceToAsset (sta): Update asset from the external file
      - assetToSource (ats): Update the external file from the asset
      - twoWay (tw): Newer side overwrites the other

    Examples:
        pyassetsync add ../art/logo.png Assets/Textures/logo.png
        pyassetsync add ../shared/config.json Assets/config.json -m tw
    """
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)

    try:
        asset_path = _to_asset_path(store.data_path, asset)
        binding = store.register(
            os.path.abspath(external_file),
            asset_path,
            mode=SyncMode.from_string(mode),
            auto_update=not no_auto_update,
            notify_before_update=not no_notify,
        )
    except (BindingExistsError, PathOutsideRootError) as e:
        out.error(str(e))
        ctx.exit(1)

    _save_store(ctx, manager, store)

    if out.json_output:
        out.output_json(binding.to_dict())
    else:
        out.success(f"Bound {binding.external_path} -> {binding.asset_path}")


@main.command()
@click.argument("asset")
@click.pass_context
def remove(ctx: Any, asset: str) -> None:
    """Remove the binding of ASSET. Neither file is deleted."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)
    binding = _find_binding(ctx, store, asset)

    if not ctx.obj["assume_yes"] and not click.confirm(
        "Are you sure to delete this external asset binding?\n"
        "Both external file and asset won't be deleted.",
        default=False,
    ):
        out.info("Removal cancelled")
        return

    store.unregister(binding)
    _save_store(ctx, manager, store)
    out.success(f"Removed binding for {binding.asset_path}")


@main.command(name="list")
@click.pass_context
def list_bindings(ctx: Any) -> None:
    """List registered bindings."""
    out: OutputFormatter = ctx.obj["out"]
    _, store = _load_store(ctx)

    if out.json_output:
        out.output_json(store.to_dict())
        return

    if len(store) == 0:
        out.info('There are no bindings yet. Add one with "pyassetsync add".')
        return

    rows = [
        [
            binding.asset_path,
            binding.external_path,
            binding.mode.value,
            "on" if binding.auto_update else "off",
            "on" if binding.notify_before_update else "off",
        ]
        for binding in store
    ]
    out.output_table(["Asset", "Source File", "Mode", "Auto", "Notify"], rows)
    if not store.auto_synchronization:
        out.warning("Auto synchronization is disabled globally")


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show the synchronization state of every binding (dry run)."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)
    engine = SyncEngine(store, persistence=manager)

    results = []
    for binding in store:
        try:
            decisions = engine.plan(binding)
            actions = [
                f"{d.action.value} {d.direction.value}"
                for d in decisions
                if d.action != SyncAction.SKIP
            ]
            planned = ", ".join(actions) or "none"
        except MissingMandatoryFileError:
            planned = "error: missing file"
        except OSError as e:
            planned = f"error: {e}"
        results.append(
            {
                "asset": binding.asset_path,
                "source": binding.external_path,
                "mode": binding.mode.value,
                "state": _describe_state(binding),
                "action": planned,
            }
        )

    if out.json_output:
        out.output_json(results)
        return

    if not results:
        out.info('There are no bindings yet. Add one with "pyassetsync add".')
        return

    out.output_table(
        ["Asset", "Mode", "State", "Action"],
        [[r["asset"], r["mode"], r["state"], r["action"]] for r in results],
    )


@main.command()
@click.pass_context
def tick(ctx: Any) -> None:
    """Run one synchronization pass over all bindings."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)

    if not store.auto_synchronization:
        out.warning("Auto synchronization is disabled globally, nothing to do")

    engine, _ = _create_engine(ctx, manager, store)
    stats = engine.tick()
    _save_store(ctx, manager, store)
    _report_stats(ctx, "Synchronization Complete", stats)

    if stats["errors"] > 0:
        ctx.exit(1)


@main.command()
@click.argument("asset")
@click.pass_context
def update(ctx: Any, asset: str) -> None:
    """Update ASSET's binding now, without asking for confirmation."""
    manager, store = _load_store(ctx)
    binding = _find_binding(ctx, store, asset)

    engine, _ = _create_engine(ctx, manager, store)
    stats = engine.update_binding(binding)
    _save_store(ctx, manager, store)
    _report_stats(ctx, "Update Complete", stats)

    if stats["errors"] > 0:
        ctx.exit(1)


@main.command()
@click.option(
    "--interval",
    "-i",
    type=float,
    default=None,
    help="Seconds between two synchronization passes",
)
@click.option(
    "--max-ticks",
    type=int,
    default=0,
    help="Stop after this many passes (0 = run until interrupted)",
)
@click.pass_context
def watch(ctx: Any, interval: Optional[float], max_ticks: int) -> None:
    """Synchronize bindings repeatedly until interrupted."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)
    engine, notifier = _create_engine(ctx, manager, store)
    if interval is None:
        interval = config.tick_interval

    out.info(f"Watching {len(store)} binding(s) every {interval}s (Ctrl+C to stop)")
    totals: dict = {}
    ticks = 0
    try:
        while True:
            stats = engine.tick()
            for key, value in stats.items():
                totals[key] = totals.get(key, 0) + value
            if stats["updates"] or stats["creates"]:
                out.info(
                    f"Synchronized {stats['updates'] + stats['creates']} file(s)"
                )
            _save_store(ctx, manager, store)
            ticks += 1
            if max_ticks and ticks >= max_ticks:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        out.warning("\nWatch stopped by user")

    if totals:
        _report_stats(ctx, f"Watch Summary ({notifier.count} refresh(es))", totals)


@main.command(name="set")
@click.argument("asset")
@click.option(
    "--auto-update/--no-auto-update",
    default=None,
    help="Toggle automatic update of this binding",
)
@click.option(
    "--notify/--no-notify",
    default=None,
    help="Toggle confirmation before updating this binding",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=None,
    help="Change the sync mode",
)
@click.option(
    "--request-update",
    is_flag=True,
    help="Also update this binding now",
)
@click.pass_context
def set_binding(
    ctx: Any,
    asset: str,
    auto_update: Optional[bool],
    notify: Optional[bool],
    mode: Optional[str],
    request_update: bool,
) -> None:
    """Change the options of ASSET's binding."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)
    binding = _find_binding(ctx, store, asset)

    if auto_update is not None:
        store.set_auto_update(binding, auto_update)
    if notify is not None:
        store.set_notify_before_update(binding, notify)
    if mode is not None:
        store.set_mode(binding, mode)
    _save_store(ctx, manager, store)

    if request_update:
        engine, _ = _create_engine(ctx, manager, store)
        stats = engine.update_binding(binding)
        _report_stats(ctx, "Update Complete", stats)

    if out.json_output:
        if not request_update:
            out.output_json(binding.to_dict())
    else:
        out.success(
            f"{binding.asset_path}: mode={binding.mode.value}, "
            f"auto={'on' if binding.auto_update else 'off'}, "
            f"notify={'on' if binding.notify_before_update else 'off'}"
        )


@main.command()
@click.option(
    "--auto-sync/--no-auto-sync",
    default=None,
    help="Enable or disable automatic synchronization globally",
)
@click.option(
    "--notify/--no-notify",
    default=None,
    help="Enable or disable confirmations before updates globally",
)
@click.pass_context
def settings(ctx: Any, auto_sync: Optional[bool], notify: Optional[bool]) -> None:
    """Show or change global synchronization settings."""
    out: OutputFormatter = ctx.obj["out"]
    manager, store = _load_store(ctx)

    if auto_sync is not None:
        store.set_auto_synchronization(auto_sync)
    if notify is not None:
        store.set_global_notify(notify)
    _save_store(ctx, manager, store)

    values = {
        "autoSynchronization": store.auto_synchronization,
        "notifyBeforeUpdate": store.notify_before_update,
        "settingsFile": str(manager.settings_file),
    }
    if out.json_output:
        out.output_json(values)
    else:
        out.print_summary(
            "Settings",
            [
                ("Auto synchronization", "on" if store.auto_synchronization else "off"),
                ("Notify before update", "on" if store.notify_before_update else "off"),
                ("Settings file", str(manager.settings_file)),
            ],
        )


if __name__ == "__main__":
    main()

"""CLI entry point for the scene asset pipeline."""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .config import config
from .errors import QuotaExceededError
from .models import RunReport, RunState, ScriptDocument
from .pipeline import CancellationToken, PipelineOrchestrator
from .progress import pending_steps
from .quota import QuotaTracker
from .retry import RetryExecutor
from .storage import FileStore, PersistenceGateway

app = typer.Typer(
    name="scene-forge",
    help="Resumable image, video and narration generation for scene scripts",
    no_args_is_help=True
)

EXIT_QUOTA = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"scene-forge version {__version__}")
        raise typer.Exit()


def _gateway() -> PersistenceGateway:
    return PersistenceGateway(FileStore(config.store_dir), key=config.project_key)


def _load_stored() -> Optional[ScriptDocument]:
    return asyncio.run(_gateway().load())


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Scene Forge - fill in images, videos and narration for a script."""
    pass


@app.command()
def status(
    script: Optional[Path] = typer.Option(
        None,
        "--script",
        "-s",
        help="Path to a script YAML file (defaults to the stored project)",
        file_okay=True,
        dir_okay=False
    )
) -> None:
    """Show per-scene generation progress."""
    try:
        document = ScriptDocument.from_yaml(script) if script else _load_stored()
    except Exception as e:
        typer.echo(f"❌ Error loading project: {e}")
        raise typer.Exit(1)

    if document is None:
        typer.echo("❌ No stored project found")
        typer.echo("   Run 'scene-forge generate --script script.yaml' to start one")
        raise typer.Exit(1)

    typer.echo(f"📁 Project: {document.meta.title}")
    if document.global_style.art_style:
        typer.echo(f"   Style: {document.global_style.art_style}")
    typer.echo(f"   Scenes: {len(document.scenes)}")
    if document.meta.last_modified:
        typer.echo(f"   Last saved: {document.meta.last_modified.isoformat()}")

    done = 0
    typer.echo("\n📽️  Scenes:")
    for scene in document.scenes:
        steps = pending_steps(scene)
        if not steps:
            done += 1
        status_icon = "✅" if not steps else "⏳"
        typer.echo(
            f"   {status_icon} #{scene.scene_index} [{scene.type.value}/{scene.planned_layout.value}]"
            + (f" pending: {', '.join(steps)}" if steps else "")
        )
        cuts = getattr(scene, "cuts", None)
        if cuts:
            typer.echo(f"      → grid fallback with {len(cuts)} cuts")

    typer.echo(f"\n   Complete: {done}/{len(document.scenes)}")


def _print_report(report: RunReport) -> None:
    typer.echo(f"\n📊 Summary ({report.state.value}):")
    typer.echo(f"   Images: {report.images_generated}")
    typer.echo(f"   Inspections: {report.images_inspected} ({report.inspections_degraded} degraded)")
    typer.echo(f"   Videos: {report.videos_generated}")
    typer.echo(f"   Grid fallbacks: {report.fallbacks_applied}")
    typer.echo(f"   Narrations: {report.audio_generated}")
    if report.pending_scenes:
        pending = ", ".join(f"#{i}" for i in report.pending_scenes)
        typer.echo(f"   Pending scenes: {pending}")


async def _run_pipeline(
    orchestrator: PipelineOrchestrator,
    document: ScriptDocument,
    script: Optional[Path],
    cancel: CancellationToken,
) -> RunReport:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    def on_snapshot(snapshot: ScriptDocument) -> None:
        if script is not None:
            snapshot.to_yaml(script)
        done = sum(1 for s in snapshot.scenes if not pending_steps(s))
        typer.echo(f"   💾 Saved ({done}/{len(snapshot.scenes)} scenes complete)")

    try:
        return await orchestrator.run(document, on_snapshot=on_snapshot, cancel=cancel)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


@app.command()
def generate(
    script: Optional[Path] = typer.Option(
        None,
        "--script",
        "-s",
        help="Script YAML file; rewritten with progress after every save",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    resume: bool = typer.Option(
        False,
        "--resume",
        "-r",
        help="Continue the stored project instead of starting from the script file"
    ),
    scene_delay: Optional[float] = typer.Option(
        None,
        "--scene-delay",
        help="Seconds to pause between scenes",
        min=0
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate every missing asset, saving after each scene.

    Press Ctrl-C to stop after the current request; run again with
    --resume to continue.
    """
    from .services.remote import build_services

    setup_logging(verbose)

    document: Optional[ScriptDocument] = None
    try:
        if resume:
            document = _load_stored()
            if document is None and script is None:
                typer.echo("❌ No stored project to resume")
                raise typer.Exit(1)
        if document is None:
            if script is None:
                typer.echo("❌ Provide --script or --resume")
                raise typer.Exit(1)
            document = ScriptDocument.from_yaml(script)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"❌ Error loading project: {e}")
        raise typer.Exit(1)

    typer.echo(f"🎬 Generating assets: {document.meta.title}")
    typer.echo(f"   Scenes: {len(document.scenes)}")

    store = FileStore(config.store_dir)
    quota = QuotaTracker(store, limit=config.daily_quota_limit)

    try:
        services = build_services(config, quota=quota)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    orchestrator = PipelineOrchestrator(
        services,
        PersistenceGateway(store, key=config.project_key),
        executor=RetryExecutor(retries=config.retry_count, base_delay=config.retry_base_delay),
        scene_delay=config.scene_delay if scene_delay is None else scene_delay,
    )
    cancel = CancellationToken()

    try:
        report = asyncio.run(_run_pipeline(orchestrator, document, script, cancel))
    except QuotaExceededError as e:
        if orchestrator.last_report is not None:
            _print_report(orchestrator.last_report)
        typer.echo(f"\n❌ Quota exhausted: {e}")
        typer.echo("   Progress is saved. Run 'scene-forge generate --resume' once the quota resets.")
        raise typer.Exit(EXIT_QUOTA)

    _print_report(report)

    if report.state == RunState.CANCELLED:
        typer.echo("\n⏸️  Stopped. Resume with 'scene-forge generate --resume'.")
    elif report.pending_scenes:
        typer.echo(
            f"\n⚠️  {len(report.pending_scenes)} scene(s) still have pending assets. "
            "Resume when ready."
        )
    else:
        typer.echo("\n✅ All assets generated!")


@app.command()
def export(
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Where to write the stored project"
    ),
) -> None:
    """Write the stored project to a YAML file."""
    document = _load_stored()
    if document is None:
        typer.echo("❌ No stored project found")
        raise typer.Exit(1)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        document.to_yaml(output)
    except Exception as e:
        typer.echo(f"❌ Error saving project: {e}")
        raise typer.Exit(1)
    typer.echo(f"✅ Project exported: {output}")


@app.command()
def quota() -> None:
    """Show today's estimated API usage."""
    tracker = QuotaTracker(FileStore(config.store_dir), limit=config.daily_quota_limit)
    stats = asyncio.run(tracker.stats())

    typer.echo(f"📊 Usage for {stats.day.isoformat()}")
    typer.echo(f"   Requests: {stats.count}/{tracker.limit}")
    for category, count in stats.model_counts.items():
        typer.echo(f"   {category}: {count}")
    typer.echo(f"   Active model: {stats.active_model}")


if __name__ == "__main__":
    app()

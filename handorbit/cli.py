from __future__ import annotations
import asyncio, logging, math
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from .config import Settings, load_settings
from .fuse.state import GestureStabilizer
from .hand.scripted import ScriptedDetector, load_script
from .io.camera import CameraStream, StillCamera
from .runtime.events import GestureEvent
from .runtime.loop import DetectionLoop, FrameClock
from .viewer.controller import OrbitController
from .viewer.orbit import PREDEFINED_ORBITS, next_view
from .viewer.viewport import SimViewport

app = typer.Typer(add_completion=False, help="HandOrbit CLI: drive a 3D viewer camera with hand gestures")
console = Console()

def _setup_logging(level: int):
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)])
    logging.getLogger("handorbit").setLevel(level)

def _viewer(cfg: Settings) -> OrbitController:
    main = SimViewport("main", size=(cfg.capture.width, cfg.capture.height))
    axes = SimViewport("axes", size=(100,100))
    return OrbitController(main, axes, cfg.camera, cfg.snap)

def _summary(ctl: OrbitController):
    console.print(f"[bold]main[/bold]   {ctl.primary.camera_orbit}  target {ctl.primary.camera_target}")
    console.print(f"[bold]axes[/bold]   {ctl.secondary.camera_orbit}")

@app.command()
def run(config: Optional[Path] = typer.Option(None, help="YAML settings file"),
        camera: Optional[int] = typer.Option(None, help="Camera index (overrides config)"),
        preview: bool = typer.Option(True, "--preview/--no-preview", help="Show the debug overlay window"),
        verbose: bool = typer.Option(False, "--verbose", "-v")):
    """
    Live webcam: print one JSONL gesture event per frame and drive the viewer camera. Press q in the preview to quit.
    """
    _setup_logging(logging.DEBUG if verbose else logging.INFO)
    cfg = load_settings(config)
    if camera is not None: cfg.capture.camera = camera
    import cv2
    from .hand.landmarks import HandLandmarks
    from .hand.overlay import render
    ctl = _viewer(cfg)

    def on_gesture(ev: GestureEvent):
        typer.echo(ev.to_json())
        ctl.apply_gesture(ev)

    def overlay(frame, hands, loop: DetectionLoop):
        if not preview: return
        cv2.imshow("HandOrbit", render(frame, hands, loop.status, loop.color, loop.active, loop.error))
        if cv2.waitKey(1) & 0xFF == ord('q'):
            loop.hide()

    cap = cfg.capture
    loop = DetectionLoop(on_gesture,
                         camera_factory=lambda: CameraStream(cap.camera, cap.width, cap.height),
                         detector_factory=HandLandmarks,
                         stabilizer=GestureStabilizer(cfg.thresholds),
                         clock=FrameClock(cap.fps),
                         overlay=overlay)

    async def main():
        loop.show()
        try:
            await loop.wait()
        finally:
            loop.hide()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    finally:
        if preview: cv2.destroyAllWindows()
    if loop.error:
        console.print(f"[red]{loop.error}[/red]")
        raise typer.Exit(1)
    _summary(ctl)

@app.command()
def replay(script: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML/JSON landmark script"),
           config: Optional[Path] = typer.Option(None, help="YAML settings file"),
           verbose: bool = typer.Option(False, "--verbose", "-v")):
    """
    Feed a recorded landmark script through the gesture pipeline and print the events.
    """
    _setup_logging(logging.DEBUG if verbose else logging.WARNING)
    cfg = load_settings(config)
    frames, size = load_script(script)
    detector = ScriptedDetector(frames)
    ctl = _viewer(cfg)

    def on_gesture(ev: GestureEvent):
        typer.echo(ev.to_json())
        ctl.apply_gesture(ev)

    def done_when_exhausted(frame, hands, loop: DetectionLoop):
        if detector.exhausted: loop.hide()

    loop = DetectionLoop(on_gesture,
                         camera_factory=lambda: StillCamera(*size),
                         detector_factory=lambda: detector,
                         stabilizer=GestureStabilizer(cfg.thresholds),
                         clock=FrameClock(0),
                         overlay=done_when_exhausted)

    async def main():
        loop.show()
        await loop.wait()
    asyncio.run(main())
    if loop.error:
        console.print(f"[red]{loop.error}[/red]")
        raise typer.Exit(1)
    _summary(ctl)

@app.command()
def views():
    """List the predefined camera views."""
    t = Table(title="Predefined views")
    t.add_column("#"); t.add_column("name"); t.add_column("theta"); t.add_column("phi")
    for i,(name, theta, phi) in enumerate(PREDEFINED_ORBITS):
        t.add_row(str(i), name, f"{math.degrees(theta):.0f}°", f"{math.degrees(phi):.0f}°")
    console.print(t)

@app.command()
def snap(theta: float = typer.Argument(..., help="radians"), phi: float = typer.Argument(..., help="radians")):
    """
    Which view a click on the axes viewport would snap to from this orbit.
    """
    name, t, p = next_view(theta, phi)
    typer.echo(f"{name} view ({t:.4f}rad {p:.4f}rad)")

if __name__ == "__main__":
    app()

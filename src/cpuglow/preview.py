"""Terminal preview of the LED rings, rendered with Textual."""

import threading
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.widgets import Footer, Static

from cpuglow.loop import SampleLoop
from cpuglow.models import RING_COUNT, CpuTimes
from cpuglow.surface import check_ring

RING_COLORS = ("red", "dark_orange", "yellow", "green", "blue", "white")
BAR_WIDTH = 20


class QueueSurface:
    """
    Ring surface that publishes every frame to a thread-safe Queue.

    Written from the sample loop thread and read by the Textual app.
    """

    def __init__(self, frames: Queue[tuple[int, ...]]) -> None:
        self._frames = frames
        self._quitting = False
        self._levels = [0] * RING_COUNT

    @property
    def levels(self) -> tuple[int, ...]:
        return tuple(self._levels)

    def is_present(self) -> bool:
        return True

    def set_ring(self, index: int, intensity: int) -> None:
        check_ring(index, intensity)
        self._levels[index] = intensity
        self._frames.put(self.levels)

    def all_off(self) -> None:
        self._levels = [0] * RING_COUNT
        self._frames.put(self.levels)


def format_rings(levels: tuple[int, ...]) -> str:
    """Format ring intensities as coloured bars, outermost ring first."""
    lines = []
    for ring, level in enumerate(levels):
        color = RING_COLORS[ring]
        bar_len = round(level / 255 * BAR_WIDTH)
        # Lit rings always show at least one cell, even when very dim
        if level > 0:
            bar_len = max(bar_len, 1)
        bar = f"[{color}]" + "█" * bar_len + f"[/{color}]" + "[dim]░[/dim]" * (BAR_WIDTH - bar_len)
        lines.append(f"Ring {ring} \\[{bar}] {level:3d}")
    lit = sum(1 for level in levels if level > 0)
    lines.append(f"Lit: {lit}/{len(levels)}")
    return "\n".join(lines)


class RingGauge(Static):
    """Widget showing the six rings."""

    DEFAULT_CSS = """
    RingGauge {
        height: auto;
        padding: 1;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._levels: tuple[int, ...] = (0,) * RING_COUNT

    @property
    def levels(self) -> tuple[int, ...]:
        return self._levels

    def on_mount(self) -> None:
        self.update(format_rings(self._levels))

    def show_levels(self, levels: tuple[int, ...]) -> None:
        self._levels = levels
        self.update(format_rings(levels))


class GlowApp(App):
    """Preview application driving a QueueSurface."""

    TITLE = "cpuglow"
    SUB_TITLE = "PiGlow preview"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        loop: SampleLoop,
        surface: QueueSurface,
        frames: Queue[tuple[int, ...]],
        initial: CpuTimes | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        super().__init__()
        self._initial = initial
        self._cancel = cancel
        self._sample_loop = loop
        self._surface = surface
        self._frames = frames

    def compose(self) -> ComposeResult:
        yield RingGauge(id="rings")
        yield Footer()

    def on_mount(self) -> None:
        """Start the sample loop when the app is mounted."""
        self._sample_loop.start(self._initial)
        self.set_interval(0.1, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Show the most recent frame and watch for a failed or cancelled loop."""
        levels = None
        while True:
            try:
                levels = self._frames.get_nowait()
            except Empty:
                break

        if levels is not None:
            self.query_one("#rings", RingGauge).show_levels(levels)

        if self._sample_loop.failure is not None:
            self.exit(return_code=1, message=str(self._sample_loop.failure))
        elif self._cancel is not None and self._cancel.is_set():
            self.action_quit()

    def action_quit(self) -> None:
        """Stop sampling and turn the rings off before exiting."""
        if self._quitting:
            return
        self._quitting = True
        self._sample_loop.stop()
        if self._sample_loop.is_running:
            self.exit(return_code=1, message="Sample loop did not stop")
            return
        self._surface.all_off()
        self.exit()

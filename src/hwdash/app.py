"""hwdash - Main Textual application."""

import argparse
import logging
from collections.abc import Sequence

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.logging import TextualHandler
from textual.widgets import ContentSwitcher, Footer, Header, Sparkline, Static

from hwdash.config import DashboardConfig, parse_capacity
from hwdash.errors import ConfigError
from hwdash.formatting import SECTION_TITLES, format_section
from hwdash.models import MetricKind, ScreenState, Snapshot
from hwdash.scheduler import Dashboard
from hwdash.source import MetricSource, PsutilSource

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class SplashView(Static):
    """Shown until the splash timer runs out."""

    DEFAULT_CSS = """
    SplashView {
        width: 1fr;
        height: 1fr;
        content-align: center middle;
        text-style: bold;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__("hwdash\n\nreading hardware...", *args, **kwargs)


class DetailsView(VerticalScroll):
    """One section per metric kind, rebuilt from each new snapshot."""

    DEFAULT_CSS = """
    DetailsView > Static {
        height: auto;
        border: solid $primary;
        padding: 0 1;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._sections: dict[MetricKind, Static] = {}
        self._texts: dict[MetricKind, Text] = {}

    def compose(self) -> ComposeResult:
        empty = Snapshot.empty()
        for kind in MetricKind:
            self._texts[kind] = self._render_section(kind, empty)
            section = Static(self._texts[kind])
            self._sections[kind] = section
            yield section

    def update_snapshot(self, snapshot: Snapshot) -> None:
        for kind, section in self._sections.items():
            self._texts[kind] = self._render_section(kind, snapshot)
            section.update(self._texts[kind])

    def section_text(self, kind: MetricKind) -> str:
        return self._texts[kind].plain

    @staticmethod
    def _render_section(kind: MetricKind, snapshot: Snapshot) -> Text:
        # Plain Text so bracketed names are never parsed as markup
        text = Text(SECTION_TITLES[kind], style="bold")
        for line in format_section(kind, snapshot):
            text.append("\n" + line)
        return text


class GraphsView(VerticalScroll):
    """A sparkline per recorded series, added as new series appear."""

    DEFAULT_CSS = """
    GraphsView > Vertical {
        height: auto;
        margin-bottom: 1;
    }
    GraphsView Sparkline {
        height: 3;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._rows: dict[str, tuple[Static, Sparkline]] = {}

    @property
    def series_shown(self) -> list[str]:
        return list(self._rows)

    def update_series(self, dashboard: Dashboard) -> None:
        for name in dashboard.series_names():
            samples = dashboard.series_view(name)
            latest = f"{samples[-1]:.1f}" if samples else "-"
            caption = Text(f"{name}  {latest}")
            row = self._rows.get(name)
            if row is None:
                label = Static(caption)
                sparkline = Sparkline(list(samples), summary_function=max)
                self._rows[name] = (label, sparkline)
                self.mount(Vertical(label, sparkline))
                continue
            label, sparkline = row
            label.update(caption)
            sparkline.data = list(samples)


class SettingsView(Static):
    """Read-only view of the startup configuration."""

    def __init__(self, config: DashboardConfig, *args, **kwargs) -> None:
        text = self._describe(config)
        super().__init__(Text(text), *args, **kwargs)
        self.settings_text = text

    @staticmethod
    def _describe(config: DashboardConfig) -> str:
        lines = [
            f"Refresh interval: {config.refresh_interval:g}s",
            f"Splash duration:  {config.splash_duration:g}s",
            f"History capacity: {config.history_capacity} samples",
            f"Frame interval:   {config.frame_interval:g}s",
            f"Process limit:    {config.process_limit if config.process_limit is not None else 'none'}",
        ]
        for name, capacity in sorted(config.series_capacities.items()):
            lines.append(f"  {name}: {capacity} samples")
        return "\n".join(lines)


class HwdashApp(App):
    """Main hwdash application."""

    TITLE = "hwdash"
    SUB_TITLE = "Hardware Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    ContentSwitcher {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("d", "show('details')", "Details"),
        ("g", "show('graphs')", "Graphs"),
        ("s", "show('settings')", "Settings"),
    ]

    def __init__(
        self,
        config: DashboardConfig | None = None,
        source: MetricSource | None = None,
    ) -> None:
        """Initialize the HwdashApp."""
        super().__init__()
        self._config = config if config is not None else DashboardConfig()
        if source is None:
            source = PsutilSource(process_limit=self._config.process_limit)
        self._dashboard = Dashboard(source, self._config)
        self._shown_snapshot: Snapshot | None = None

    @property
    def dashboard(self) -> Dashboard:
        return self._dashboard

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Header()
        with ContentSwitcher(initial=ScreenState.SPLASH.value):
            yield SplashView(id=ScreenState.SPLASH.value)
            yield DetailsView(id=ScreenState.DETAILS.value)
            yield GraphsView(id=ScreenState.GRAPHS.value)
            yield SettingsView(self._config, id=ScreenState.SETTINGS.value)
        yield Footer()

    def on_mount(self) -> None:
        """Start ticking the dashboard when the app is mounted."""
        self.set_interval(self._config.frame_interval, self._on_frame)

    def _on_frame(self) -> None:
        self._dashboard.tick()
        self.refresh_view()

    def refresh_view(self) -> None:
        """Show the current screen and redraw it from the latest data."""
        screen = self._dashboard.current_screen()
        self.query_one(ContentSwitcher).current = screen.value
        self.sub_title = (
            "Hardware Dashboard (stale)" if self._dashboard.is_stale() else self.SUB_TITLE
        )

        if screen is ScreenState.DETAILS:
            snapshot = self._dashboard.current_snapshot()
            if snapshot is not self._shown_snapshot:
                self.query_one(DetailsView).update_snapshot(snapshot)
                self._shown_snapshot = snapshot
        elif screen is ScreenState.GRAPHS:
            self.query_one(GraphsView).update_series(self._dashboard)

    def action_show(self, screen: str) -> None:
        """Navigate to a screen; ignored while the splash is up."""
        if self._dashboard.navigate_to(ScreenState(screen)):
            self._shown_snapshot = None
            self.refresh_view()

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        close = getattr(self._dashboard.source, "close", None)
        if close is not None:
            close()
        self.exit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hwdash", description="Live hardware telemetry dashboard.")
    parser.add_argument("--refresh", type=float, default=1.0, help="seconds between samples")
    parser.add_argument("--splash", type=float, default=2.0, help="seconds the splash is shown")
    parser.add_argument("--history", type=int, default=60, help="samples kept per series")
    parser.add_argument(
        "--capacity",
        action="append",
        default=[],
        metavar="NAME=N",
        help="samples kept for a series or series prefix, e.g. cpu.core=120",
    )
    parser.add_argument("--processes", type=int, default=None, help="max processes listed")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="logging level",
    )
    parser.add_argument("--log-file", default=None, help="write logs to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> DashboardConfig:
    capacities = dict(parse_capacity(item) for item in args.capacity)
    return DashboardConfig(
        refresh_interval=args.refresh,
        splash_duration=args.splash,
        history_capacity=args.history,
        series_capacities=capacities,
        process_limit=args.processes,
    )


def configure_logging(level: str, log_file: str | None = None) -> None:
    """Send logs to a file, or to the Textual devtools console."""
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    else:
        handler = TextualHandler()
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for hwdash application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ConfigError as exc:
        parser.error(str(exc))
    configure_logging(args.log_level, args.log_file)
    logger.info("starting hwdash: %s", config)
    app = HwdashApp(config)
    app.run()


if __name__ == "__main__":
    main()

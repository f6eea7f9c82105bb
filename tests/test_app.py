"""Tests for hwdash application."""

import logging

import pytest
from conftest import make_snapshot
from textual.widgets import ContentSwitcher

from hwdash.app import (
    DetailsView,
    GraphsView,
    HwdashApp,
    SettingsView,
    build_parser,
    config_from_args,
    configure_logging,
)
from hwdash.config import DashboardConfig
from hwdash.errors import AdapterUnreachable, ConfigError
from hwdash.models import MetricKind, ScreenState
from hwdash.source import PsutilSource, StaticSource


def make_app(**config) -> HwdashApp:
    config.setdefault("frame_interval", 0.05)
    snapshot = make_snapshot(unavailable=frozenset({MetricKind.GPU}))
    return HwdashApp(DashboardConfig(**config), source=StaticSource(snapshot))


class TestCommandLine:
    """Tests for argument parsing and logging setup."""

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))

        assert config == DashboardConfig()

    def test_flags(self):
        args = build_parser().parse_args(
            [
                "--refresh", "0.5",
                "--splash", "0",
                "--history", "120",
                "--capacity", "cpu.core=30",
                "--capacity", "memory.used=10",
                "--processes", "50",
            ]
        )
        config = config_from_args(args)

        assert config.refresh_interval == 0.5
        assert config.splash_duration == 0
        assert config.history_capacity == 120
        assert config.series_capacities == {"cpu.core": 30, "memory.used": 10}
        assert config.process_limit == 50

    def test_log_level_is_case_insensitive(self):
        args = build_parser().parse_args(["--log-level", "debug"])

        assert args.log_level == "DEBUG"

    def test_unknown_log_level_is_a_usage_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["--log-level", "loud"])

        assert excinfo.value.code == 2
        assert "--log-level" in capsys.readouterr().err

    def test_invalid_flag_value(self):
        args = build_parser().parse_args(["--refresh", "0"])

        with pytest.raises(ConfigError):
            config_from_args(args)

    def test_log_file(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / "hwdash.log"
        configure_logging("info", str(log_file))
        try:
            logging.getLogger("hwdash.test").info("hello from test")
            for handler in root.handlers:
                handler.flush()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        assert "hello from test" in log_file.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_app_creation():
    """Test HwdashApp can be instantiated."""
    app = make_app()
    assert app.title == "hwdash"
    assert app.sub_title == "Hardware Dashboard"
    assert app.dashboard.current_screen() is ScreenState.SPLASH


@pytest.mark.asyncio
async def test_app_uses_psutil_by_default():
    app = HwdashApp()
    assert isinstance(app.dashboard.source, PsutilSource)
    app.dashboard.source.close()


@pytest.mark.asyncio
async def test_app_compose():
    """Test HwdashApp composes all four views."""
    app = make_app(splash_duration=60.0)
    async with app.run_test() as pilot:
        switcher = pilot.app.query_one(ContentSwitcher)
        assert switcher.current == "splash"
        for screen in ScreenState:
            assert pilot.app.query_one(f"#{screen.value}") is not None


@pytest.mark.asyncio
async def test_navigation_ignored_during_splash():
    app = make_app(splash_duration=60.0)
    async with app.run_test() as pilot:
        await pilot.press("g")
        await pilot.pause()

        assert app.dashboard.current_screen() is ScreenState.SPLASH
        assert pilot.app.query_one(ContentSwitcher).current == "splash"


@pytest.mark.asyncio
async def test_splash_then_details():
    app = make_app(splash_duration=0.0)
    async with app.run_test() as pilot:
        await pilot.pause(0.3)

        assert app.dashboard.current_screen() is ScreenState.DETAILS
        assert pilot.app.query_one(ContentSwitcher).current == "details"


@pytest.mark.asyncio
async def test_navigation_bindings():
    app = make_app(splash_duration=0.0)
    async with app.run_test() as pilot:
        await pilot.pause(0.3)
        switcher = pilot.app.query_one(ContentSwitcher)

        await pilot.press("g")
        assert switcher.current == "graphs"

        await pilot.press("s")
        assert switcher.current == "settings"

        await pilot.press("d")
        assert switcher.current == "details"
        assert app.dashboard.current_screen() is ScreenState.DETAILS


@pytest.mark.asyncio
async def test_details_show_snapshot():
    app = make_app(splash_duration=0.0)
    async with app.run_test() as pilot:
        app.dashboard.tick(1.0)
        app.refresh_view()
        await pilot.pause()

        details = pilot.app.query_one(DetailsView)
        assert "testhost" in details.section_text(MetricKind.SYSTEM)
        assert "Test CPU" in details.section_text(MetricKind.CPU)
        assert "unavailable" in details.section_text(MetricKind.GPU)


@pytest.mark.asyncio
async def test_details_populated_before_first_refresh():
    """With no splash, details show data before the refresh interval elapses."""
    app = make_app(splash_duration=0.0, refresh_interval=60.0)
    async with app.run_test() as pilot:
        await pilot.pause(0.3)

        details = pilot.app.query_one(DetailsView)
        assert app.dashboard.current_screen() is ScreenState.DETAILS
        assert "Test CPU" in details.section_text(MetricKind.CPU)
        assert "unavailable" not in details.section_text(MetricKind.MEMORY)


@pytest.mark.asyncio
async def test_graphs_show_series():
    app = make_app(splash_duration=0.0, refresh_interval=0.1)
    async with app.run_test() as pilot:
        app.dashboard.tick(0.1)
        app.dashboard.tick(0.1)
        await pilot.press("g")
        await pilot.pause()

        graphs = pilot.app.query_one(GraphsView)
        assert "cpu.total" in graphs.series_shown
        assert "memory.used" in graphs.series_shown


@pytest.mark.asyncio
async def test_settings_show_config():
    app = make_app(splash_duration=0.0, series_capacities={"cpu.core": 30})
    async with app.run_test() as pilot:
        settings = pilot.app.query_one(SettingsView)

        assert "Refresh interval: 1s" in settings.settings_text
        assert "cpu.core: 30 samples" in settings.settings_text


@pytest.mark.asyncio
async def test_stale_indicator():
    def unreachable():
        raise AdapterUnreachable("gone")

    app = HwdashApp(
        DashboardConfig(splash_duration=0.0, frame_interval=0.05),
        source=StaticSource(unreachable),
    )
    async with app.run_test() as pilot:
        app.dashboard.tick(1.0)
        app.refresh_view()
        await pilot.pause()

        assert app.dashboard.is_stale()
        assert "stale" in app.sub_title


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' binding triggers quit."""
    app = make_app()
    async with app.run_test() as pilot:
        await pilot.press("q")
        # App should be exiting
        assert pilot.app._exit


@pytest.mark.asyncio
async def test_app_receives_updates_from_system():
    """End to end with the real psutil source."""
    app = HwdashApp(DashboardConfig(splash_duration=0.0, refresh_interval=0.2, frame_interval=0.05))
    async with app.run_test() as pilot:
        await pilot.pause(1.0)

        assert app.dashboard.current_snapshot().cpus
        assert len(app.dashboard.series_view("cpu.total")) >= 1
        await pilot.press("q")

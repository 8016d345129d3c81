"""Tests for __main__ module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from ruamel.yaml.error import YAMLError

from livecheck.config.loader import ConfigNotFoundError
from livecheck.config.models import Config
from livecheck.registry import StreamRegistry


def make_registry(records=None) -> StreamRegistry:
    """Create a registry with a mocked provider."""
    provider = MagicMock()
    provider.fetch_statuses = AsyncMock(return_value=records or [])
    return StreamRegistry(provider)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_configures_structlog(self):
        """setup_logging should configure structlog."""
        from livecheck.__main__ import setup_logging

        with patch("livecheck.__main__.structlog") as mock_structlog:
            setup_logging()

            mock_structlog.configure.assert_called_once()
            call_kwargs = mock_structlog.configure.call_args[1]
            assert "processors" in call_kwargs
            assert "wrapper_class" in call_kwargs
            assert "logger_factory" in call_kwargs

    def test_setup_logging_json_format(self):
        """Should use JSONRenderer for json format."""
        from livecheck.__main__ import setup_logging

        with patch("livecheck.__main__.structlog") as mock_structlog:
            setup_logging("info", "json")
            mock_structlog.processors.JSONRenderer.assert_called_once()

    def test_setup_logging_text_format(self):
        """Should use KeyValueRenderer for text format."""
        from livecheck.__main__ import setup_logging

        with patch("livecheck.__main__.structlog") as mock_structlog:
            setup_logging("info", "text")
            mock_structlog.processors.KeyValueRenderer.assert_called_once()

    def test_setup_logging_console_format(self):
        """Should use ConsoleRenderer for console format."""
        from livecheck.__main__ import setup_logging

        with patch("livecheck.__main__.structlog") as mock_structlog:
            setup_logging("info", "console")
            mock_structlog.dev.ConsoleRenderer.assert_called_once()


class TestLevelFilter:
    """Tests for the log level filter processor."""

    def test_drops_events_below_level(self):
        """Events below the minimum level should be dropped."""
        from livecheck.__main__ import make_level_filter

        level_filter = make_level_filter("warn")

        with pytest.raises(structlog.DropEvent):
            level_filter(None, "info", {"event": "x"})

    def test_passes_events_at_or_above_level(self):
        """Events at or above the minimum level should pass through."""
        from livecheck.__main__ import make_level_filter

        level_filter = make_level_filter("warn")
        event = {"event": "x"}

        assert level_filter(None, "warning", event) is event
        assert level_filter(None, "error", event) is event


class TestParseArgs:
    """Tests for parse_args function."""

    def test_parse_args_defaults(self):
        """Should use default values when no args provided."""
        from livecheck.__main__ import parse_args

        with patch.dict("os.environ", {}, clear=True):
            args = parse_args([])

        assert args.channels == []
        assert args.config is None
        assert args.log_level is None

    def test_parse_args_channels(self):
        """Should collect positional channels."""
        from livecheck.__main__ import parse_args

        args = parse_args(["streamer1", "https://twitch.tv/streamer2"])
        assert args.channels == ["streamer1", "https://twitch.tv/streamer2"]

    def test_parse_args_combined(self):
        """Should parse options with channels."""
        from livecheck.__main__ import parse_args

        args = parse_args(["--config", "/path/to/livecheck.yaml", "--log-level", "debug", "foo"])

        assert args.config == "/path/to/livecheck.yaml"
        assert args.log_level == "debug"
        assert args.channels == ["foo"]

    def test_parse_args_log_level_from_env(self):
        """Should default log level from LC_LOG_LEVEL."""
        from livecheck.__main__ import parse_args

        with patch.dict("os.environ", {"LC_LOG_LEVEL": "warn"}):
            args = parse_args([])

        assert args.log_level == "warn"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_falls_back_to_defaults(self):
        """Missing auto-discovered config should fall back to defaults."""
        from livecheck.__main__ import load_config

        with patch(
            "livecheck.__main__.ConfigLoader.load",
            side_effect=ConfigNotFoundError("none"),
        ):
            config = load_config(None)

        assert isinstance(config, Config)

    def test_explicit_path_missing_raises(self, tmp_path):
        """Missing explicit config should raise."""
        from livecheck.__main__ import load_config

        with pytest.raises(ConfigNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_reads_file_on_every_call(self, tmp_path):
        """Each call should parse the file afresh and surface a broken file."""
        from livecheck.__main__ import load_config

        config_file = tmp_path / "livecheck.yaml"
        config_file.write_text("channels: [foo]\n")
        assert load_config(str(config_file)).channels == ["foo"]

        config_file.write_text("invalid: yaml: content: {")
        with pytest.raises(YAMLError):
            load_config(str(config_file))


class TestCheckChannels:
    """Tests for check_channels function."""

    @pytest.mark.asyncio
    async def test_checks_all_channels_in_one_fetch(self):
        """All channels should be resolved from one batched fetch."""
        from livecheck.__main__ import check_channels

        registry = make_registry([{"title": "Live", "channel": {"login": "bar"}}])

        results = await check_channels(registry, ["foo", "https://www.twitch.tv/Bar/en"])

        assert results == {"foo": False, "bar": True}
        registry.provider.fetch_statuses.assert_awaited_once_with(["foo", "bar"])

    @pytest.mark.asyncio
    async def test_invalid_url_skipped(self):
        """Invalid URLs should be skipped, not fatal."""
        from livecheck.__main__ import check_channels

        registry = make_registry()

        results = await check_channels(registry, ["https://example.com/foo", "bar"])

        assert results == {"bar": False}
        assert len(registry.streams) == 1

    @pytest.mark.asyncio
    async def test_host_only_reference_parsed_as_url(self):
        """A bare host should be parsed as a URL, not used as a channel name."""
        from livecheck.__main__ import check_channels

        registry = make_registry()

        results = await check_channels(registry, ["www.twitch.tv", "bar"])

        assert results == {"bar": False}
        registry.provider.fetch_statuses.assert_awaited_once_with(["bar"])

    @pytest.mark.asyncio
    async def test_urls_without_channel_skipped(self):
        """URLs that yield no channel should not appear in the results."""
        from livecheck.__main__ import check_channels

        registry = make_registry()

        results = await check_channels(
            registry, ["http://www.twitch.tv/", "twitch.tv", "foo"]
        )

        assert results == {"foo": False}
        assert "" not in results


class TestRun:
    """Tests for run function."""

    @pytest.mark.asyncio
    async def test_run_without_channels(self):
        """Run with nothing to check should exit cleanly."""
        from livecheck.__main__ import run

        with patch("livecheck.__main__.load_config", return_value=Config()):
            with patch("livecheck.__main__.setup_logging"):
                assert await run(None, [], None) == 0

    @pytest.mark.asyncio
    async def test_run_merges_config_and_cli_channels(self):
        """Configured and CLI channels should be checked together without duplicates."""
        from livecheck.__main__ import run

        config = Config(channels=["foo", "bar"])
        registry = make_registry()

        with patch("livecheck.__main__.load_config", return_value=config):
            with patch("livecheck.__main__.setup_logging") as mock_setup:
                with patch(
                    "livecheck.__main__.StreamRegistry.from_config", return_value=registry
                ):
                    assert await run(None, ["bar", "baz"], "debug") == 0

        mock_setup.assert_called_once_with("debug", "console")
        registry.provider.fetch_statuses.assert_awaited_once_with(["foo", "bar", "baz"])


class TestMain:
    """Tests for main function."""

    def test_main_calls_setup_and_run(self):
        """main should setup logging and run the check."""
        from livecheck.__main__ import main

        with patch("livecheck.__main__.parse_args") as mock_parse:
            mock_args = MagicMock()
            mock_args.log_level = None
            mock_parse.return_value = mock_args

            with patch("livecheck.__main__.setup_logging") as mock_setup:
                with patch("livecheck.__main__.asyncio.run", return_value=0) as mock_run:
                    with patch("livecheck.__main__.sys.exit") as mock_exit:
                        main()

                        mock_setup.assert_called_once_with("info")
                        mock_run.assert_called_once()
                        mock_exit.assert_called_once_with(0)

    def test_main_handles_keyboard_interrupt(self):
        """main should handle KeyboardInterrupt gracefully."""
        from livecheck.__main__ import main

        with patch("livecheck.__main__.parse_args") as mock_parse:
            mock_parse.return_value = MagicMock(log_level=None)

            with patch("livecheck.__main__.setup_logging"):
                with patch("livecheck.__main__.asyncio.run") as mock_run:
                    mock_run.side_effect = KeyboardInterrupt()

                    with patch("livecheck.__main__.sys.exit") as mock_exit:
                        main()
                        mock_exit.assert_called_once_with(130)

    def test_main_exits_on_exception(self):
        """main should exit with code 1 on exception."""
        from livecheck.__main__ import main

        with patch("livecheck.__main__.parse_args") as mock_parse:
            mock_parse.return_value = MagicMock(log_level=None)

            with patch("livecheck.__main__.setup_logging"):
                with patch("livecheck.__main__.asyncio.run") as mock_run:
                    mock_run.side_effect = RuntimeError("test error")

                    with patch("livecheck.__main__.sys.exit") as mock_exit:
                        main()
                        mock_exit.assert_called_once_with(1)

"""End-to-end tests for the bootstrap phases."""

import io
import json
from pathlib import Path

import pytest

from freecol.models.launch import ClientLaunch
from freecol.services.bootstrap import BootstrapSequencer, Phase, configuration_report
from freecol.services.context import LaunchContext
from freecol.services.directories import BUNDLED_DATA_DIRECTORY
from freecol.services.errors import ErrorReportingService, ExitRequest, FatalError, UsageError
from freecol.services.system import SystemProbe


GOOD_PROBE = SystemProbe((3, 12), 8 * 1024 ** 3)


class RecordingDispatcher:
    """Captures the context instead of starting a run mode."""

    def __init__(self, status: int = 0) -> None:
        self.status = status
        self.context: LaunchContext | None = None

    def dispatch(self, context: LaunchContext) -> int:
        self.context = context
        return self.status


def make_sequencer(*args: str, dispatcher=None, probe: SystemProbe = GOOD_PROBE) -> BootstrapSequencer:
    return BootstrapSequencer(
        list(args),
        reporter=ErrorReportingService(stream=io.StringIO()),
        dispatcher=dispatcher or RecordingDispatcher(),
        probe=probe,
    )


def make_data_directory(root: Path, messages: dict[str, str] | None = None) -> Path:
    """A copy of the bundled data with extra message overlays."""
    data = root / "data"
    (data / "rules").mkdir(parents=True)
    strings = data / "strings"
    strings.mkdir()
    for source in (BUNDLED_DATA_DIRECTORY / "strings").glob("*.json"):
        (strings / source.name).write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
    for name, content in (messages or {}).items():
        (strings / name).write_text(json.dumps(content), encoding="utf-8")
    return data


class TestPhases:
    """Phase order and the state each phase leaves behind."""

    def test_all_phases_run_in_order(self, user_home: Path) -> None:
        dispatcher = RecordingDispatcher()
        sequencer = make_sequencer(dispatcher=dispatcher)
        assert sequencer.run() == 0
        assert sequencer.completed == list(Phase)
        assert dispatcher.context is sequencer.context

    def test_headless_server_resolves_to_server_path(self, user_home: Path) -> None:
        dispatcher = RecordingDispatcher()
        make_sequencer("--headless", "--server", "--server-port", "1234", dispatcher=dispatcher).run()
        config = dispatcher.context.require_config()
        assert config.standalone_server
        assert config.headless
        assert config.server_port == 1234

    def test_status_comes_from_dispatcher(self, user_home: Path) -> None:
        assert make_sequencer(dispatcher=RecordingDispatcher(status=7)).run() == 7

    def test_default_directories_and_log_file(self, user_home: Path) -> None:
        dispatcher = RecordingDispatcher()
        make_sequencer(dispatcher=dispatcher).run()
        directories = dispatcher.context.require_directories()
        assert directories.data == user_home / ".local" / "share" / "freecol"
        assert directories.log_file.is_file()
        assert dispatcher.context.logging_service is not None

    def test_configuration_report(self, user_home: Path) -> None:
        dispatcher = RecordingDispatcher()
        make_sequencer(dispatcher=dispatcher).run()
        report = configuration_report(dispatcher.context)
        assert report["data"] == str(BUNDLED_DATA_DIRECTORY)
        assert report["memory"] == str(GOOD_PROBE.memory_bytes)
        assert report["mods"] == "NONE"


class TestFatalPhases:
    """Each phase that can fail stops the bootstrap where it fails."""

    def test_bad_data_directory(self, user_home: Path, tmp_path: Path) -> None:
        sequencer = make_sequencer("--freecol-data", str(tmp_path / "absent"))
        with pytest.raises(FatalError) as exc_info:
            sequencer.run()
        assert "Data directory not found" in exc_info.value.message
        assert sequencer.completed == []

    def test_usage_error_before_handlers(self, user_home: Path) -> None:
        sequencer = make_sequencer("--server", "--bogus")
        with pytest.raises(UsageError):
            sequencer.run()
        assert sequencer.completed == [Phase.DATA_DIR, Phase.LOCALE, Phase.CATALOG]
        assert not sequencer.context.store.is_standalone_server()

    def test_help(self, user_home: Path) -> None:
        with pytest.raises(ExitRequest) as exc_info:
            make_sequencer("--help").run()
        assert exc_info.value.exit_status == 0
        assert "--server-port" in exc_info.value.output

    def test_fatal_option(self, user_home: Path) -> None:
        with pytest.raises(FatalError) as exc_info:
            make_sequencer("--difficulty", "impossible").run()
        assert "impossible" in exc_info.value.message

    def test_old_runtime(self, user_home: Path) -> None:
        sequencer = make_sequencer(probe=SystemProbe((3, 8), None))
        with pytest.raises(FatalError) as exc_info:
            sequencer.run()
        assert "3.8" in exc_info.value.message
        assert Phase.USER_DIRS not in sequencer.completed

    def test_skipped_runtime_check(self, user_home: Path) -> None:
        sequencer = make_sequencer("--no-java-check", probe=SystemProbe((3, 8), None))
        assert sequencer.run() == 0

    def test_unusable_user_data_directory(self, user_home: Path) -> None:
        # The XDG data home is a file, so the default data directory cannot exist
        (user_home / ".local").mkdir()
        (user_home / ".local" / "share").write_text("")
        sequencer = make_sequencer()
        with pytest.raises(FatalError) as exc_info:
            sequencer.run()
        assert "user data directory" in exc_info.value.message
        assert Phase.LOGGING_INIT not in sequencer.completed

    def test_unwritable_log_file_is_advisory(self, user_home: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "afile"
        blocker.write_text("")
        dispatcher = RecordingDispatcher()
        sequencer = make_sequencer(
            "--log-file", str(blocker / "FreeCol.log"), "--headless", dispatcher=dispatcher
        )

        assert sequencer.run() == 0

        assert sequencer.completed == list(Phase)
        assert dispatcher.context is sequencer.context
        assert sequencer.context.logging_service is not None
        assert "Unable to write the log file" in sequencer.context.reporter.stream.getvalue()

    def test_advisories_do_not_stop_start_up(self, user_home: Path) -> None:
        sequencer = make_sequencer("--europeans", "0", "--gui-scale", "110")
        assert sequencer.run() == 0
        assert len(sequencer.context.reporter.advisories) == 2


class TestLocale:
    """Locale selection and reconciliation with the client options."""

    def test_explicit_locale_strips_encoding(self, user_home: Path) -> None:
        sequencer = make_sequencer("--default-locale", "de_DE.UTF-8")
        sequencer.run()
        assert sequencer.context.locale == "de_DE"
        assert sequencer.context.require_catalog().get_name("model.difficulty.hard") == "schwer"

    def test_client_options_language(self, user_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("freecol.services.bootstrap.platform_locale", lambda: "en")
        options = user_home / ".config" / "freecol" / "options.json"
        options.parent.mkdir(parents=True)
        options.write_text(json.dumps({"language": "de"}), encoding="utf-8")

        sequencer = make_sequencer()
        sequencer.run()

        assert sequencer.context.locale == "de"
        assert sequencer.context.require_catalog().message("cli.help") == "Zeigt diese Hilfe an."

    def test_explicit_locale_beats_client_options(self, user_home: Path) -> None:
        options = user_home / ".config" / "freecol" / "options.json"
        options.parent.mkdir(parents=True)
        options.write_text(json.dumps({"language": "de"}), encoding="utf-8")

        sequencer = make_sequencer("--default-locale", "en")
        sequencer.run()

        assert sequencer.context.locale == "en"

    def test_automatic_language_keeps_locale(self, user_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("freecol.services.bootstrap.platform_locale", lambda: "en")
        options = user_home / "opts.json"
        options.write_text(json.dumps({"language": "automatic"}), encoding="utf-8")

        sequencer = make_sequencer("--clientOptions", str(options))
        sequencer.run()

        assert sequencer.context.locale == "en"

    def test_localized_fatal_message(self, user_home: Path, tmp_path: Path) -> None:
        data = make_data_directory(tmp_path, {"messages_eo.json": {"cli.error.serverPort": "Malbona pordo %string%"}})
        with pytest.raises(FatalError) as exc_info:
            make_sequencer("--freecol-data", str(data), "--default-locale", "eo", "--server-port", "x").run()
        assert exc_info.value.message == "Malbona pordo x"


class TestMods:
    """Mods found during start-up."""

    def test_user_mod_messages_are_merged(self, user_home: Path) -> None:
        mod_dir = user_home / ".local" / "share" / "freecol" / "mods" / "example"
        (mod_dir / "strings").mkdir(parents=True)
        (mod_dir / "mod.json").write_text(
            json.dumps({"id": "example", "name": "Example", "version": "1.0"}), encoding="utf-8"
        )
        (mod_dir / "strings" / "messages.json").write_text(
            json.dumps({"mod.example.greeting": "Welcome"}), encoding="utf-8"
        )

        sequencer = make_sequencer()
        sequencer.run()

        assert [mod.id for mod in sequencer.context.mods] == ["example"]
        assert sequencer.context.require_catalog().message("mod.example.greeting") == "Welcome"


def test_client_starter_receives_launch(user_home: Path) -> None:
    """Without a fake dispatcher the real one hands over to the client."""
    from freecol.services.dispatcher import ModeDispatcher

    launches: list[ClientLaunch] = []

    def starter(launch: ClientLaunch) -> int:
        launches.append(launch)
        return 0

    sequencer = make_sequencer("--headless", "--name", "Tester", dispatcher=ModeDispatcher(start_client=starter))
    assert sequencer.run() == 0
    assert launches[0].name == "Tester"
    assert launches[0].headless

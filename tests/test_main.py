"""Tests for the entry point and exit status mapping."""

from pathlib import Path

import pytest

from freecol import __version__
from freecol.main import main, run
from freecol.services.errors import ExitRequest, FatalError, UsageError


class RaisingSequencer:
    def __init__(self, error: BaseException) -> None:
        self.error = error

    def run(self) -> int:
        raise self.error


class TestRun:
    """Every way out of the bootstrap becomes an exit status here."""

    def test_version(self, user_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--version"]) == 0
        assert f"FreeCol {__version__}" in capsys.readouterr().out.splitlines()

    def test_help(self, user_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--usage"]) == 0
        assert "usage: freecol [OPTIONS]" in capsys.readouterr().out

    def test_usage_error(self, user_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--no-such-option"]) == 1
        err = capsys.readouterr().err
        assert "--no-such-option" in err
        assert "usage: freecol [OPTIONS]" in err

    def test_fatal_error(self, user_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--server-port", "none"]) == 1
        assert 'Invalid server port "none"' in capsys.readouterr().err

    def test_out_of_range_port(self, user_home: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--server", "--server-port", "70000", "--private", "--headless"]) == 1
        assert 'Invalid server port "70000"' in capsys.readouterr().err

    def test_exit_request_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        sequencer = RaisingSequencer(ExitRequest(2, "integrity", to_stderr=True))
        assert run(sequencer=sequencer) == 2
        assert "integrity" in capsys.readouterr().err.splitlines()

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (FatalError("broken"), 1),
            (UsageError("bad", usage="usage: freecol"), 1),
            (KeyboardInterrupt(), 130),
            (RuntimeError("unexpected"), 1),
        ],
    )
    def test_status_mapping(self, error: BaseException, status: int) -> None:
        assert run(sequencer=RaisingSequencer(error)) == status

    def test_check_savegame_end_to_end(self, user_home: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        save = tmp_path / "empty.fsg"
        save.write_text('{"specification": "freecol", "turn": 1, "players": []}', encoding="utf-8")
        assert run(["--check-savegame", str(save)]) == 2
        assert "failed the integrity check" in capsys.readouterr().err


def test_main_exits_with_status(user_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.argv", ["freecol", "--version"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 0


def test_problems_are_reported_once(
    user_home: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.argv", ["freecol", "--server-port", "none"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert err.count('Invalid server port "none"') == 1
    assert "Fatal error" not in err

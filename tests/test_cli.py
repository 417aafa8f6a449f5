"""Tests for warren.cli — CLI entrypoint and the routes command."""

from argparse import Namespace
from pathlib import Path

import pytest

from warren.cli import main
from warren.cli._routes import format_table
from warren.functions.types import Registration


def _write(root: Path, relative: str, source: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_routes_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "--help"])
        assert exc_info.value.code == 0

    def test_run_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_routes_missing_dir(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes"])
        assert exc_info.value.code == 2

    def test_run_missing_dir(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run"])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "warren" in capsys.readouterr().out


class TestRoutesCommand:
    def test_prints_registration_table(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        root = tmp_path / "functions"
        _write(root, "_middleware.py", "def on_request(context):\n    pass\n")
        _write(root, "api/[id].py", "def on_request_get(context):\n    return 'x'\n")

        main(["routes", str(root)])

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["KIND", "METHOD", "PATTERN", "FILE"]
        rows = [line.split() for line in lines[1:]]
        assert [row[:3] for row in rows] == [
            ["global", "ALL", "/*"],
            ["middleware", "ALL", "/*"],
            ["route", "GET", "/api/:id"],
            ["route", "GET", "/api/:id{.+}"],
        ]
        assert rows[0][3] == "-"
        assert rows[2][3].endswith("api/[id].py")

    def test_missing_directory_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", str(tmp_path / "missing")])
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_format_table_aligns_columns(self) -> None:
        lines = format_table(
            (
                Registration(kind="global", method="ALL", pattern="/*"),
                Registration(kind="route", method="GET", pattern="/a", filepath="functions/a.py"),
            )
        )
        assert lines[0].index("METHOD") == lines[1].index("ALL") == lines[2].index("GET")
        assert lines[2].endswith("functions/a.py")


class TestRunCommand:
    def test_builds_app_from_arguments(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from warren.app import App
        from warren.cli import _run

        captured: list[App] = []
        monkeypatch.setattr(App, "run", lambda self: captured.append(self))

        _run.run_server(
            Namespace(functions_dir=str(tmp_path), host="0.0.0.0", port=9000, debug=True)
        )

        (app,) = captured
        assert app.config.host == "0.0.0.0"
        assert app.config.port == 9000
        assert app.config.debug is True
        assert app.config.functions_dir == str(tmp_path)

    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from warren.app import App
        from warren.cli import _run

        captured: list[App] = []
        monkeypatch.setattr(App, "run", lambda self: captured.append(self))

        _run.run_server(Namespace(functions_dir=str(tmp_path), host=None, port=None, debug=False))

        assert captured[0].config.port == 8000
        assert captured[0].config.log_level == "info"

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fixtures import make_row

from mcq_trainer.core.logging import close_logger
from mcq_trainer.trainer import _main
from mcq_trainer.trainer.config import CONFIG_FILENAME, load_config


@pytest.fixture(autouse=True)
def _close_trainer_logger():
    yield
    close_logger(logging.getLogger("mcq_trainer.trainer"))


def test_parser_collects_overrides() -> None:
    parser = _main.build_arg_parser()

    args = parser.parse_args(
        [
            "start",
            "--source",
            "a.csv",
            "--source",
            "b.csv",
            "--topic",
            "SQL",
            "--pool-size",
            "5",
            "--no-shuffle",
            "--include-answered",
        ]
    )
    overrides = _main._overrides_from_args(args)

    assert overrides.sources == [Path("a.csv"), Path("b.csv")]
    assert overrides.topic_filter == "SQL"
    assert overrides.pool_size == 5
    assert overrides.shuffle is False
    assert overrides.exclude_answered is False
    assert overrides.difficulty_filter is None


def test_toggle_flags_default_to_unset() -> None:
    args = _main.build_arg_parser().parse_args(["stats"])

    assert args.shuffle is None
    assert args.exclude_answered is None


def test_stats_command_renders_summary(workspace, tmp_path, capsys) -> None:
    bank = workspace.write_csv(
        "bank.csv",
        [make_row(id="q1"), make_row(id="q2", difficulty="Hard")],
    )

    code = _main.main(
        ["stats", "--source", str(bank), "--workspace", str(tmp_path / "ws")]
    )

    captured = capsys.readouterr()
    assert code == 0
    assert "Questions loaded" in captured.out
    assert "Hard" in captured.out
    assert (tmp_path / "ws" / "logs" / "trainer.log").exists()


def test_start_command_runs_console_loop(
    workspace, tmp_path, monkeypatch, capsys
) -> None:
    bank = workspace.write_csv("bank.csv", [make_row(id="q1")])
    seen: dict[str, object] = {}

    def fake_session(engine, console, input_provider):
        seen["corpus"] = [record.id for record in engine.corpus]
        seen["config"] = engine.config

    monkeypatch.setattr(_main, "run_trainer_session", fake_session)

    code = _main.main(
        [
            "start",
            "--source",
            str(bank),
            "--workspace",
            str(tmp_path / "ws"),
            "--difficulty",
            "Easy",
        ]
    )

    assert code == 0
    assert seen["corpus"] == ["q1"]
    assert seen["config"].difficulty_filter == "Easy"


def test_start_command_closes_engine_on_error(
    workspace, tmp_path, monkeypatch
) -> None:
    bank = workspace.write_csv("bank.csv", [make_row(id="q1")])
    engines = []

    def failing_session(engine, console, input_provider):
        engines.append(engine)
        raise RuntimeError("terminal went away")

    monkeypatch.setattr(_main, "run_trainer_session", failing_session)

    with pytest.raises(RuntimeError):
        _main.main(
            ["start", "--source", str(bank), "--workspace", str(tmp_path / "ws")]
        )

    assert len(engines) == 1
    assert engines[0].closed


def test_tui_command_runs_app(workspace, tmp_path, monkeypatch) -> None:
    bank = workspace.write_csv("bank.csv", [make_row(id="q1")])
    launched: list[object] = []

    class FakeApp:
        def __init__(self, engine):
            self.engine = engine

        def run(self):
            launched.append(self.engine)

    monkeypatch.setattr(_main, "TrainerApp", FakeApp)

    code = _main.main(
        ["tui", "--source", str(bank), "--workspace", str(tmp_path / "ws")]
    )

    assert code == 0
    assert len(launched) == 1


def test_missing_sources_returns_usage_error(tmp_path, capsys) -> None:
    code = _main.main(["start", "--workspace", str(tmp_path / "ws")])

    captured = capsys.readouterr()
    assert code == 2
    assert "no question sources configured" in captured.out


def test_unreadable_sources_return_error(tmp_path, capsys) -> None:
    code = _main.main(
        [
            "start",
            "--source",
            str(tmp_path / "absent.csv"),
            "--workspace",
            str(tmp_path / "ws"),
        ]
    )

    captured = capsys.readouterr()
    assert code == 1
    assert "absent.csv: file not found" in captured.out
    assert "No questions loaded." in captured.out


def test_config_error_exits_with_parser_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _main.main(
            [
                "start",
                "--config",
                str(tmp_path / "missing.toml"),
                "--workspace",
                str(tmp_path / "ws"),
            ]
        )

    assert excinfo.value.code == 2
    assert "Config file not found" in capsys.readouterr().err


def test_config_init_writes_workspace_template(tmp_path, capsys) -> None:
    code = _main.main(["config", "init", "--workspace", str(tmp_path)])

    target = tmp_path / "config" / CONFIG_FILENAME
    assert code == 0
    assert target.exists()
    assert str(target.resolve()) in capsys.readouterr().out


def test_config_init_requires_force(tmp_path, capsys) -> None:
    custom = tmp_path / "custom.toml"
    custom.write_text("existing", encoding="utf-8")

    code = _main.main(["config", "init", "--path", str(custom)])
    assert code == 1
    assert "Config already exists" in capsys.readouterr().err
    assert custom.read_text(encoding="utf-8") == "existing"

    code = _main.main(["config", "init", "--path", str(custom), "--force"])
    assert code == 0
    assert custom.read_text(encoding="utf-8") != "existing"


def test_config_init_relative_path(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    code = _main.main(["config", "init", "--path", "local.toml"])

    assert code == 0
    assert (tmp_path / "local.toml").exists()
    assert str((tmp_path / "local.toml").resolve()) in capsys.readouterr().out


def test_prepare_engine_loads_configured_sources(workspace, tmp_path) -> None:
    bank = workspace.write_csv(
        "bank.csv", [make_row(id="q1"), make_row(id="q2")]
    )
    config_path = workspace.write(
        "trainer.toml",
        f'[sources]\npaths = ["{bank.name}"]\n[session]\nshuffle = false\n',
    )
    result = load_config(
        config_path=config_path, env={}, workspace_path=tmp_path / "ws"
    )
    logger = logging.getLogger("mcq_trainer.tests.main")

    engine = _main.prepare_engine(result, logger)

    snapshot = engine.snapshot()
    assert snapshot.corpus_size == 2
    assert not snapshot.loading
    assert [record.id for record in engine.session] == ["q1", "q2"]

from __future__ import annotations

from quizzr.workspace import cli


def test_quizzr_init_creates_workspace_and_config(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("QUIZZR_DATA_HOME", str(target))

    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert (target / "exports").is_dir()
    config_file = target / "config" / "quizzr.toml"
    assert config_file.exists()
    assert f"Config: {config_file} (created)" in captured.out

    cli.main([])
    assert f"Config: {config_file} (exists)" in capsys.readouterr().out


def test_quizzr_init_supports_custom_path(tmp_path, capsys):
    target = tmp_path / "custom"

    code = cli.main(["--path", str(target), "--no-config"])

    captured = capsys.readouterr()
    assert code == 0
    assert target.is_dir()
    assert str(target) in captured.out
    assert not (target / "config" / "quizzr.toml").exists()


def test_quizzr_init_quiet_mode(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("QUIZZR_DATA_HOME", str(tmp_path / "quiet"))

    code = cli.main(["--quiet"])

    assert code == 0
    assert capsys.readouterr().out == ""


def test_quizzr_init_reports_file_in_the_way(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")

    code = cli.main(["--path", str(blocker)])

    assert code == 2
    assert "not a directory" in capsys.readouterr().err

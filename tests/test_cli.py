from pathlib import Path

import pytest

from quizzr import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "quizzr"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command(capsys):
    for argv in (["version"], ["--version"], ["-V"]):
        assert cli.main(argv) == 0
        assert capsys.readouterr().out.strip() == "0.0-test"


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: quizzr" in captured.out
    assert "Available commands:" in captured.out


def test_help_flag_shows_usage(capsys):
    code = cli.main(["--help"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Usage: quizzr" in captured.out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    captured = capsys.readouterr()
    assert code == 0
    for name in ("init", "config", "generate", "export"):
        assert f"  {name}" in captured.out


def test_help_known_command(capsys):
    code = cli.main(["help", "generate"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Run `quizzr generate --help`" in captured.out


def test_help_unknown_command(capsys):
    code = cli.main(["help", "nope"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command 'nope'" in captured.err


def test_unknown_command_returns_error(capsys):
    code = cli.main(["bogus"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command 'bogus'" in captured.err
    assert "Available commands:" in captured.err


def test_dispatch_runs_subcommand_with_prog_name(tmp_path, capsys):
    target = tmp_path / "ws"

    code = cli.main(["init", "--path", str(target), "--quiet"])

    assert code == 0
    assert (target / "logs").is_dir()


def test_dispatch_normalizes_argparse_exit(capsys):
    code = cli.main(["generate", "--help"])
    captured = capsys.readouterr()
    assert code == 0
    assert "usage: quizzr generate" in captured.out


def test_dispatch_reports_usage_errors(capsys):
    code = cli.main(["generate"])
    captured = capsys.readouterr()
    assert code == 2
    assert "TOPIC" in captured.err


def test_config_init_and_validate(tmp_path, capsys):
    target = tmp_path / "quizzr.toml"

    assert cli.main(["config", "init", "--path", str(target)]) == 0
    assert target.exists()
    assert cli.main(["config", "init", "--path", str(target)]) == 2
    assert "already exists" in capsys.readouterr().err
    assert cli.main(["config", "init", "--path", str(target), "--force"]) == 0

    capsys.readouterr()
    assert cli.main(["config", "validate", "--path", str(target)]) == 0
    out = capsys.readouterr().out
    assert "Configuration OK" in out
    assert "model: local" in out


def test_config_validate_reports_errors(tmp_path, capsys):
    bad = tmp_path / "bad.toml"
    bad.write_text("[llm]\nunknown = 1\n", encoding="utf-8")

    code = cli.main(["config", "validate", "--path", str(bad)])

    assert code == 2
    assert "llm.unknown" in capsys.readouterr().err


def test_config_init_defaults_to_workspace(tmp_path, capsys):
    assert cli.main(["config", "init"]) == 0
    expected = tmp_path / "data" / "config" / "quizzr.toml"
    assert expected.exists()

    capsys.readouterr()
    assert cli.main(["config", "path"]) == 0
    assert Path(capsys.readouterr().out.strip()) == expected


def test_config_path_without_file(capsys):
    assert cli.main(["config", "path"]) == 0
    assert "defaults" in capsys.readouterr().out

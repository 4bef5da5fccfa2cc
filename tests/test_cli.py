"""Tests for the sealkey command line."""

import pytest
from typer.testing import CliRunner

from sealkey import cli
from sealkey.errors import ClipboardUnavailable
from sealkey.vault import Vault, temp_path_for

runner = CliRunner()

PASS = "master"


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("SEALKEY_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("SEALKEY_COST", "5")
    monkeypatch.delenv("SEALKEY_VAULT", raising=False)


@pytest.fixture
def answers(monkeypatch):
    """Queue of replies for password prompts."""
    queue = []
    monkeypatch.setattr(cli, "_ask_password", lambda prompt="": queue.pop(0))
    return queue


@pytest.fixture
def vault_path(tmp_path, answers):
    path = tmp_path / "vault.db"
    answers.extend([PASS, PASS])
    result = runner.invoke(cli.app, ["init", str(path)])
    assert result.exit_code == 0, result.output
    return path


def _read(path, key):
    with Vault.open(path, PASS) as vault:
        return vault.key_get(key)


def test_init_creates_vault_and_activates_it(vault_path):
    assert vault_path.exists()
    result = runner.invoke(cli.app, ["which"])
    assert result.exit_code == 0
    assert "vault.db" in result.output


def test_init_appends_db_suffix(tmp_path, answers):
    answers.extend([PASS, PASS])
    result = runner.invoke(cli.app, ["init", str(tmp_path / "secrets")])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "secrets.db").exists()


def test_init_password_mismatch(tmp_path, answers):
    answers.extend([PASS, "other"])
    result = runner.invoke(cli.app, ["init", str(tmp_path / "vault.db")])
    assert result.exit_code == 1
    assert not (tmp_path / "vault.db").exists()


def test_init_existing_path(vault_path, answers):
    before = vault_path.read_bytes()
    answers.extend([PASS, PASS])
    result = runner.invoke(cli.app, ["init", str(vault_path)])
    assert result.exit_code == 1
    assert "path is occupied" in result.output
    assert vault_path.read_bytes() == before


def test_init_with_explicit_cost(tmp_path, answers):
    answers.extend([PASS, PASS])
    path = tmp_path / "costly.db"
    result = runner.invoke(cli.app, ["init", str(path), "--cost", "6"])
    assert result.exit_code == 0, result.output
    assert path.read_bytes()[0] == 6


def test_which_without_vault():
    result = runner.invoke(cli.app, ["which"])
    assert result.exit_code == 0
    assert "no active vault" in result.output


def test_corrupt_pointer_is_reported(tmp_path):
    pointer = tmp_path / "cfg" / "active.json"
    pointer.parent.mkdir(parents=True)
    pointer.write_text("not json")
    result = runner.invoke(cli.app, ["which"])
    assert result.exit_code == 1
    assert "pointer is corrupt" in result.output


def test_use_missing_vault(tmp_path):
    result = runner.invoke(cli.app, ["use", str(tmp_path / "missing.db")])
    assert result.exit_code == 1
    assert "file not found" in result.output


def test_ls_empty(vault_path, answers):
    answers.append(PASS)
    result = runner.invoke(cli.app, ["ls"])
    assert result.exit_code == 0, result.output
    assert "vault is empty" in result.output


def test_mk_then_ls(vault_path, answers):
    answers.extend([PASS, "s3cret"])
    result = runner.invoke(cli.app, ["mk", "github"])
    assert result.exit_code == 0, result.output
    assert _read(vault_path, "github") == "s3cret"

    answers.append(PASS)
    result = runner.invoke(cli.app, ["ls"])
    assert result.exit_code == 0
    assert "github" in result.output


def test_mk_generate(vault_path, answers):
    answers.append(PASS)
    result = runner.invoke(cli.app, ["mk", "github", "--generate", "--length", "32"])
    assert result.exit_code == 0, result.output
    assert len(_read(vault_path, "github")) == 32


def test_mk_duplicate_leaves_vault_untouched(vault_path, answers):
    answers.extend([PASS, "first"])
    runner.invoke(cli.app, ["mk", "github"])
    before = vault_path.read_bytes()

    answers.append(PASS)
    result = runner.invoke(cli.app, ["mk", "github"])
    assert result.exit_code == 1
    assert "already exists" in result.output
    assert vault_path.read_bytes() == before
    assert _read(vault_path, "github") == "first"


def test_wrong_password(vault_path, answers):
    answers.append("nope")
    result = runner.invoke(cli.app, ["ls"])
    assert result.exit_code == 1
    assert "decrypt failed" in result.output
    assert not temp_path_for(vault_path).exists()


def test_stale_working_copy_is_reported(vault_path, answers):
    temp_path_for(vault_path).write_bytes(b"stale")
    answers.append(PASS)
    result = runner.invoke(cli.app, ["ls"])
    assert result.exit_code == 1
    assert "path is occupied" in result.output


def test_rm(vault_path, answers):
    answers.extend([PASS, "s3cret"])
    runner.invoke(cli.app, ["mk", "github"])

    answers.append(PASS)
    result = runner.invoke(cli.app, ["rm", "github", "--yes"])
    assert result.exit_code == 0, result.output
    assert _read(vault_path, "github") is None


def test_rm_missing(vault_path, answers):
    answers.append(PASS)
    result = runner.invoke(cli.app, ["rm", "github", "--yes"])
    assert result.exit_code == 1
    assert "no key with that name exists" in result.output


def test_get_show(vault_path, answers):
    answers.extend([PASS, "s3cret"])
    runner.invoke(cli.app, ["mk", "github"])

    answers.append(PASS)
    result = runner.invoke(cli.app, ["get", "github", "--show"])
    assert result.exit_code == 0, result.output
    assert "s3cret" in result.output
    assert not temp_path_for(vault_path).exists()


def test_get_copies_to_clipboard(vault_path, answers, monkeypatch):
    answers.extend([PASS, "s3cret"])
    runner.invoke(cli.app, ["mk", "github"])

    copied = []
    monkeypatch.setattr(cli, "copy_then_clear", lambda text, timeout: copied.append((text, timeout)))
    answers.append(PASS)
    result = runner.invoke(cli.app, ["get", "github", "--timeout", "1"])
    assert result.exit_code == 0, result.output
    assert copied == [("s3cret", 1.0)]


def test_get_without_clipboard(vault_path, answers, monkeypatch):
    answers.extend([PASS, "s3cret"])
    runner.invoke(cli.app, ["mk", "github"])

    def broken(text, timeout):
        raise ClipboardUnavailable()

    monkeypatch.setattr(cli, "copy_then_clear", broken)
    answers.append(PASS)
    result = runner.invoke(cli.app, ["get", "github"])
    assert result.exit_code == 1
    assert "--show" in result.output


def test_get_missing(vault_path, answers):
    answers.append(PASS)
    result = runner.invoke(cli.app, ["get", "github", "--show"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_commands_need_active_vault(answers):
    result = runner.invoke(cli.app, ["ls"])
    assert result.exit_code == 1
    assert "no active vault" in result.output


def test_generate():
    result = runner.invoke(cli.app, ["generate", "--count", "3", "--length", "12"])
    assert result.exit_code == 0
    assert "Generated 3 passwords" in result.output


def test_info(vault_path, answers):
    answers.append(PASS)
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 0, result.output
    assert "Cost" in result.output


def test_make_password_charset():
    pw = cli._make_password(50, no_symbols=True)
    assert len(pw) == 50
    assert pw.isalnum()

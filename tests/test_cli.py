"""
End-to-end tests for the command line interface.

Commands run through ``main`` with in-memory streams and a static
password provider, against a per-test storage directory.
"""

import io
import json

import pytest

from secretsmanager import __version__
from secretsmanager.cli import StaticPasswordProvider
from secretsmanager.cli.main import main


@pytest.fixture
def cli(storage_dir):
    """Run one command; returns (exit_code, stdout, stderr)."""

    def run(*argv, password="pw1", confirmation=None, values=(), stdin=""):
        out, err = io.StringIO(), io.StringIO()
        provider = StaticPasswordProvider(
            password, confirmation=confirmation, secret_values=values
        )
        code = main(
            ["--storage-dir", str(storage_dir), *argv],
            passwords=provider,
            stdin=io.StringIO(stdin),
            stdout=out,
            stderr=err,
        )
        return code, out.getvalue(), err.getvalue()

    return run


@pytest.fixture
def project(cli):
    code, _, _ = cli("create", "api")
    assert code == 0
    code, _, _ = cli("add", "api", "API_KEY", "sk-123")
    assert code == 0
    return "api"


class TestCreateAndList:

    def test_empty_list(self, cli):
        code, out, _ = cli("list")
        assert code == 0
        assert "No projects found" in out

    def test_create_then_list(self, cli, storage_dir):
        code, out, _ = cli("create", "api")
        assert code == 0
        assert "Project 'api' created successfully!" in out
        assert (storage_dir / "api.encrypted").is_file()

        cli("create", "web")
        code, out, _ = cli("list")
        assert code == 0
        lines = out.splitlines()
        assert lines[0] == "Available projects:"
        assert lines[1].startswith("  • api (updated ")
        assert lines[2].startswith("  • web (updated ")

    def test_create_existing_fails(self, cli):
        cli("create", "api")
        code, out, err = cli("create", "api")
        assert code == 1
        assert err == "Error: Project 'api' already exists\n"
        assert out == ""

    def test_confirmation_mismatch(self, cli, storage_dir):
        code, _, err = cli("create", "api", confirmation="other")
        assert code == 1
        assert "Passwords do not match" in err
        assert not (storage_dir / "api.encrypted").exists()

    def test_empty_password(self, cli):
        code, _, err = cli("create", "api", password="")
        assert code == 1
        assert "Password cannot be empty" in err

    def test_unusable_kdf_settings(self, cli, monkeypatch, storage_dir):
        monkeypatch.setenv("SECRETS_MANAGER_SECURITY__KDF_ALGORITHM", "argon2id")
        monkeypatch.setenv("SECRETS_MANAGER_SECURITY__ARGON2_PARALLELISM", "2000")
        code, _, err = cli("create", "api")
        assert code == 1
        assert err.startswith("Error: Argon2 parallelism")
        assert not (storage_dir / "api.encrypted").exists()

    def test_invalid_name(self, cli):
        code, _, err = cli("create", "../escape")
        assert code == 1
        assert err.startswith("Error: Invalid project name")


class TestSecrets:

    def test_show_lists_keys_only(self, cli, project):
        cli("add", project, "DB_URL", "postgres://localhost")
        code, out, _ = cli("show", project)
        assert code == 0
        assert "Project: api" in out
        assert "Created: " in out
        assert "Secrets:\n  • API_KEY\n  • DB_URL\n" in out
        assert "sk-123" not in out

    def test_show_empty_project(self, cli):
        cli("create", "api")
        code, out, _ = cli("show", "api")
        assert code == 0
        assert "No secrets found" in out

    def test_add_prompts_for_value(self, cli, project):
        code, out, _ = cli("add", project, "TOKEN", values=["t-1"])
        assert code == 0
        assert "Secret 'TOKEN' added to project 'api'" in out
        _, out, _ = cli("export", project, "-f", "json")
        assert json.loads(out)["TOKEN"] == "t-1"

    def test_update_existing(self, cli, project):
        code, out, _ = cli("update", project, "API_KEY", "sk-456")
        assert code == 0
        assert "Secret 'API_KEY' updated in project 'api'" in out
        _, out, _ = cli("export", project)
        assert out == "export API_KEY=sk-456\n"

    def test_update_missing_key(self, cli, project):
        code, _, err = cli("update", project, "NOPE", "x")
        assert code == 1
        assert "Secret 'NOPE' not found" in err

    def test_remove(self, cli, project):
        code, out, _ = cli("remove", project, "API_KEY")
        assert code == 0
        assert "Secret 'API_KEY' removed from project 'api'" in out
        code, _, err = cli("remove", project, "API_KEY")
        assert code == 1
        assert "not found" in err

    def test_wrong_password(self, cli, project, storage_dir):
        before = (storage_dir / "api.encrypted").read_bytes()
        code, out, err = cli("add", project, "X", "1", password="wrong")
        assert code == 1
        assert err.startswith("Error: Could not decrypt project 'api'")
        assert out == ""
        assert (storage_dir / "api.encrypted").read_bytes() == before

    def test_key_must_be_variable_name(self, cli, project):
        code, _, err = cli("add", project, "X=1; touch pwned; Y", "v")
        assert code == 1
        assert err.startswith("Error: Secret key")
        _, out, _ = cli("export", project)
        assert out == "export API_KEY=sk-123\n"

    def test_missing_project(self, cli):
        code, _, err = cli("show", "ghost")
        assert code == 1
        assert err == "Error: Project 'ghost' not found\n"


class TestExport:

    def test_default_is_shell(self, cli, project):
        code, out, _ = cli("export", project)
        assert code == 0
        assert out == "export API_KEY=sk-123\n"

    def test_env_format(self, cli, project):
        cli("add", project, "GREETING", "hello world")
        _, out, _ = cli("export", project, "--format", "env")
        assert out == 'API_KEY=sk-123\nGREETING="hello world"\n'

    def test_to_file(self, cli, project, tmp_path):
        target = tmp_path / "out.json"
        code, out, _ = cli("export", project, "-f", "json", "-o", str(target))
        assert code == 0
        assert f"Exported to: {target}" in out
        assert json.loads(target.read_text()) == {"API_KEY": "sk-123"}
        assert target.stat().st_mode & 0o777 == 0o600

    def test_unknown_format_is_usage_error(self, cli, project):
        with pytest.raises(SystemExit) as excinfo:
            cli("export", project, "-f", "yaml")
        assert excinfo.value.code == 2


class TestDelete:

    def test_cancelled(self, cli, project, storage_dir):
        code, out, _ = cli("delete", project, stdin="n\n")
        assert code == 0
        assert "Deletion cancelled" in out
        assert (storage_dir / "api.encrypted").exists()

    def test_confirmed(self, cli, project, storage_dir):
        code, out, _ = cli("delete", project, stdin="y\n")
        assert code == 0
        assert "(y/N)" in out
        assert "Project 'api' deleted successfully!" in out
        assert not (storage_dir / "api.encrypted").exists()

    def test_yes_flag_skips_prompt(self, cli, project, storage_dir):
        code, out, _ = cli("delete", project, "--yes")
        assert code == 0
        assert "(y/N)" not in out
        assert not (storage_dir / "api.encrypted").exists()

    def test_missing(self, cli):
        code, _, err = cli("delete", "ghost", "-y")
        assert code == 1
        assert "not found" in err


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out

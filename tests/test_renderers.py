"""Tests for export rendering."""

import json
import shlex

import pytest

from secretsmanager.core.errors import ValidationError
from secretsmanager.export import ExportFormat, render
from secretsmanager.export.renderers import render_env, render_json, render_shell


class TestShell:

    def test_sorted_export_lines(self):
        assert render_shell({"B": "2", "A": "1"}) == "export A=1\nexport B=2\n"

    @pytest.mark.parametrize("value", [
        "it's",
        "two words",
        "$(rm -rf /)",
        "`id`",
        "a\nb",
        "",
    ])
    def test_values_survive_shell_parsing(self, value):
        line = render_shell({"K": value}).rstrip("\n")
        assert line.startswith("export K=")
        assert shlex.split(line[len("export K="):]) == [value]

    def test_empty_mapping(self):
        assert render_shell({}) == ""

    @pytest.mark.parametrize("key", ["X=1; touch pwned; Y", "A\nB", "$(id)", "9LIVES"])
    def test_rejects_unsafe_variable_names(self, key):
        with pytest.raises(ValidationError):
            render_shell({"API_KEY": "sk-123", key: "v"})


class TestEnv:

    def test_plain_values_unquoted(self):
        assert render_env({"PORT": "8080", "HOST": "localhost"}) == "HOST=localhost\nPORT=8080\n"

    def test_special_values_quoted(self):
        output = render_env({
            "SPACE": "a b",
            "QUOTE": 'say "hi"',
            "HASH": "x#y",
            "EMPTY": "",
        })
        assert 'SPACE="a b"\n' in output
        assert 'QUOTE="say \\"hi\\""\n' in output
        assert 'HASH="x#y"\n' in output
        assert 'EMPTY=""\n' in output

    def test_expansion_characters_escaped(self):
        assert render_env({"K": "$HOME`x`"}) == 'K="\\$HOME\\`x\\`"\n'

    def test_newline_escaped(self):
        assert render_env({"K": "a\nb"}) == 'K="a\\nb"\n'

    def test_rejects_key_that_adds_lines(self):
        with pytest.raises(ValidationError):
            render_env({"A\nINJECTED": "x"})


class TestJson:

    def test_round_trips(self):
        secrets = {"b": "2", "a": "ünïcode"}
        output = render_json(secrets)
        assert output.endswith("\n")
        assert json.loads(output) == secrets
        assert output.index('"a"') < output.index('"b"')


class TestFormat:

    @pytest.mark.parametrize("name,expected", [
        ("shell", ExportFormat.SHELL),
        ("ENV", ExportFormat.ENV),
        (" json ", ExportFormat.JSON),
    ])
    def test_parse(self, name, expected):
        assert ExportFormat.parse(name) is expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Invalid format"):
            ExportFormat.parse("yaml")

    def test_render_accepts_name(self):
        assert render({"A": "1"}, "env") == "A=1\n"
        assert render({"A": "1"}, ExportFormat.SHELL) == "export A=1\n"

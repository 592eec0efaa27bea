"""Tests for locating and listing project files without passwords."""

import json

import pytest

from secretsmanager.core.errors import (
    InvalidProjectName,
    ProjectAlreadyExists,
    ProjectNotFound,
)
from secretsmanager.core.vault import ProjectRegistry


class TestPathFor:

    def test_deterministic_file_name(self, registry, storage_dir):
        assert registry.path_for("api") == storage_dir / "api.encrypted"
        assert registry.path_for("my-app_v2.0") == storage_dir / "my-app_v2.0.encrypted"

    @pytest.mark.parametrize("name", [
        "",
        "..",
        "../../etc/passwd",
        "a/b",
        "a\\b",
        "with:colon",
        "tab\tname",
        ".hidden",
        " padded ",
        "x" * 129,
    ])
    def test_rejects_unsafe_names(self, registry, name):
        with pytest.raises(InvalidProjectName):
            registry.path_for(name)

    def test_invalid_name_is_value_error(self, registry):
        with pytest.raises(ValueError):
            registry.path_for("../x")


class TestList:

    def test_missing_directory(self, tmp_path):
        assert ProjectRegistry(tmp_path / "nope").list() == []

    def test_lists_without_password(self, store, registry):
        for name in ("zeta", "alpha", "mid"):
            store.create(name, f"{name}-pw").close()

        summaries = registry.list()
        assert [s.name for s in summaries] == ["alpha", "mid", "zeta"]
        for summary in summaries:
            assert summary.path == registry.path_for(summary.name)
            assert summary.created_at <= summary.updated_at

    def test_skips_foreign_and_corrupted_files(self, store, registry, storage_dir, caplog):
        store.create("good", "pw").close()
        (storage_dir / "broken.encrypted").write_text("{not json")
        (storage_dir / "notes.txt").write_text("ignored")
        (storage_dir / "dir.encrypted").mkdir()

        assert [s.name for s in registry.list()] == ["good"]
        assert "broken.encrypted" in caplog.text

    def test_skips_file_whose_header_names_another_project(self, store, registry, storage_dir):
        store.create("real", "pw").close()
        data = registry.path_for("real").read_bytes()
        (storage_dir / "copy.encrypted").write_bytes(data)

        assert [s.name for s in registry.list()] == ["real"]

    def test_reads_only_header(self, store, registry):
        store.create("api", "pw").close()
        path = registry.path_for("api")
        record = json.loads(path.read_text())
        # a broken ciphertext does not matter for listing
        record["ciphertext"] = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
        path.write_text(json.dumps(record))

        assert [s.name for s in registry.list()] == ["api"]


class TestReadWriteRemove:

    def test_read_missing(self, registry):
        with pytest.raises(ProjectNotFound):
            registry.read("ghost")

    def test_write_creates_directory(self, registry, storage_dir):
        registry.write("api", b"data")
        assert (storage_dir / "api.encrypted").read_bytes() == b"data"

    def test_exclusive_write_refuses_existing(self, registry):
        registry.write("api", b"first")
        with pytest.raises(ProjectAlreadyExists):
            registry.write("api", b"second", exclusive=True)
        assert registry.read("api") == b"first"
        assert [p.name for p in registry.storage_dir.iterdir()] == ["api.encrypted"]

    def test_replace_write(self, registry):
        registry.write("api", b"first")
        registry.write("api", b"second")
        assert registry.read("api") == b"second"

    def test_exists(self, registry):
        assert not registry.exists("api")
        registry.write("api", b"x")
        assert registry.exists("api")

    def test_remove(self, registry):
        registry.write("api", b"x")
        registry.remove("api")
        assert not registry.exists("api")
        with pytest.raises(ProjectNotFound):
            registry.remove("api")

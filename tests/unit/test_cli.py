"""
Tests de la CLI: códigos de salida y flujo completo contra el Strapi en memoria.
"""
from __future__ import annotations

import pytest

from cms_sync import cli
from cms_sync.infrastructure.external.strapi_sync import strapi_client


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("SYNC_DRY_RUN", "SYNC_UPDATE_EXISTING", "SYNC_EXPORTS_DIR", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STRAPI_URL", "https://cms.test")
    monkeypatch.setenv("STRAPI_API_TOKEN", "test-token")


@pytest.fixture
def patched_session(monkeypatch, fake_strapi):
    monkeypatch.setattr(strapi_client.requests, "Session", lambda: fake_strapi)
    return fake_strapi


def test_missing_exports_exits_non_zero(patched_session, tmp_path) -> None:
    code = cli.main(["sync", "--exports-dir", str(tmp_path / "nope")])

    assert code == cli.EXIT_EXPORTS_MISSING
    assert patched_session.calls == []


def test_missing_target_config_exits_with_config_error(monkeypatch, write_exports) -> None:
    monkeypatch.delenv("STRAPI_API_TOKEN")
    exports_dir = write_exports(categories=[{"data": {"name": "Tech"}}])

    assert cli.main(["sync", "--exports-dir", str(exports_dir)]) == cli.EXIT_CONFIG_ERROR


def test_unknown_only_collection_is_config_error(patched_session, write_exports) -> None:
    exports_dir = write_exports(categories=[{"data": {"name": "Tech"}}])

    assert cli.main(["sync", "--exports-dir", str(exports_dir), "--only", "tags"]) == cli.EXIT_CONFIG_ERROR


def test_sync_with_partial_failure_still_exits_zero(patched_session, write_exports) -> None:
    patched_session.fail_writes = {"Life"}
    exports_dir = write_exports(categories=[{"data": {"name": "Tech"}}, {"data": {"name": "Life"}}])

    code = cli.main(["sync", "--exports-dir", str(exports_dir)])

    assert code == cli.EXIT_OK
    assert [e["name"] for e in patched_session.store["categories"]] == ["Tech"]


def test_dry_run_flag_prevents_writes(patched_session, write_exports) -> None:
    exports_dir = write_exports(categories=[{"data": {"name": "Tech"}}], home={"data": {"title": "Inicio"}})

    assert cli.main(["sync", "--dry-run", "--exports-dir", str(exports_dir)]) == cli.EXIT_OK
    assert patched_session.mutating_calls == []


def test_no_update_existing_flag_skips(patched_session, write_exports) -> None:
    patched_session.seed("categories", name="Tech", description="remota")
    exports_dir = write_exports(categories=[{"data": {"name": "Tech", "description": "local"}}])

    cli.main(["sync", "--no-update-existing", "--exports-dir", str(exports_dir)])

    assert patched_session.store["categories"][0]["description"] == "remota"


def test_export_then_sync(monkeypatch, patched_session, tmp_path) -> None:
    monkeypatch.setenv("SOURCE_STRAPI_URL", "https://cms.test")
    monkeypatch.setenv("SOURCE_STRAPI_API_TOKEN", "test-token")
    patched_session.seed("authors", name="Ana")
    exports_dir = tmp_path / "exports"

    assert cli.main(["export", "--exports-dir", str(exports_dir)]) == cli.EXIT_OK
    assert (exports_dir / "authors.json").exists()

    assert cli.main(["sync", "--strip-system-fields", "--exports-dir", str(exports_dir)]) == cli.EXIT_OK
    assert len(patched_session.store["authors"]) == 1


def test_export_requires_source_config(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("SOURCE_STRAPI_URL", raising=False)
    assert cli.main(["export", "--exports-dir", str(tmp_path)]) == cli.EXIT_CONFIG_ERROR


@pytest.mark.parametrize(
    "name, value",
    [
        ("SYNC_DRY_RUN", "maybe"),
        ("HTTP_TIMEOUT_S", "abc"),
        ("LOG_LEVEL", "VERBOSE"),
    ],
)
def test_invalid_setting_values_exit_with_config_error(monkeypatch, patched_session, write_exports, name, value) -> None:
    monkeypatch.setenv(name, value)
    exports_dir = write_exports(categories=[{"data": {"name": "Tech"}}])

    assert cli.main(["sync", "--exports-dir", str(exports_dir)]) == cli.EXIT_CONFIG_ERROR
    assert patched_session.calls == []


def test_unwritable_log_file_is_config_error(monkeypatch, tmp_path) -> None:
    blocker = tmp_path / "logs"
    blocker.write_text("archivo", encoding="utf-8")
    monkeypatch.setenv("LOG_FILE", str(blocker / "app.log"))
    assert cli.main(["sync", "--exports-dir", str(tmp_path)]) == cli.EXIT_CONFIG_ERROR


def test_export_with_failed_collection_exits_incomplete(monkeypatch, patched_session, tmp_path) -> None:
    monkeypatch.setenv("SOURCE_STRAPI_URL", "https://cms.test")
    monkeypatch.setenv("SOURCE_STRAPI_API_TOKEN", "test-token")
    patched_session.media_files = None

    assert cli.main(["export", "--exports-dir", str(tmp_path / "exports")]) == cli.EXIT_EXPORT_INCOMPLETE
    assert (tmp_path / "exports" / "export-summary.json").exists()


def test_export_to_unwritable_dir_exits_non_zero(monkeypatch, patched_session, tmp_path) -> None:
    monkeypatch.setenv("SOURCE_STRAPI_URL", "https://cms.test")
    monkeypatch.setenv("SOURCE_STRAPI_API_TOKEN", "test-token")
    blocker = tmp_path / "exports"
    blocker.write_text("archivo", encoding="utf-8")

    assert cli.main(["export", "--exports-dir", str(blocker)]) == cli.EXIT_EXPORTS_UNWRITABLE

"""Tests for the command line interface."""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from paketwatch import __version__
from paketwatch.cli.main import app
from paketwatch.core.logging import ROOT_LOGGER
from paketwatch.persistence.db import dispose_engines

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    path = tmp_path / "app.yaml"
    path.write_text(
        f"config_dir: {tmp_path / 'configs'}\n"
        f"data_dir: {tmp_path / 'data'}\n"
        "database:\n"
        f"  url: sqlite:///{tmp_path / 'data' / 'test.db'}\n"
        "logging:\n"
        "  level: WARNING\n"
        "  file: null\n"
        "  rich_console: false\n",
        encoding="utf-8",
    )

    dispose_engines()
    yield path
    dispose_engines()

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def invoke(config_path):
    def _invoke(*args: str):
        return runner.invoke(app, ["--config", str(config_path), *args])

    return _invoke


@pytest.fixture
def initialized(invoke):
    result = invoke("init")
    assert result.exit_code == 0, result.output
    return invoke


ADD_ARGS = [
    "packages", "add",
    "--name", "Pembangunan Jalan Desa",
    "--type", "tender",
    "--location", "Kota Mataram",
    "--coordinates", "-8.58, 116.12",
    "--budget", "1000",
    "--hps", "900",
    "--realization", "500",
    "--status", "Dalam Proses",
    "--provider-name", "CV Maju Jaya",
    "--provider-address", "Mataram",
    "--opd", "Dinas PUPR",
    "--image-url", "https://example.org/jalan.jpg",
]


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_commands_require_init(invoke):
    result = invoke("packages", "list")
    assert result.exit_code == 1
    assert "not initialized" in result.output


def test_invalid_config_file(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("logging:\n  level: LOUD\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(bad), "status"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_init_and_empty_status(initialized, tmp_path):
    assert (tmp_path / "data" / "test.db").exists()

    result = initialized("status")
    assert result.exit_code == 0
    assert "No packages yet" in result.output


def test_import_then_browse(initialized, tmp_path, tender_csv):
    csv_file = tmp_path / "tender.csv"
    csv_file.write_text(tender_csv, encoding="utf-8")

    result = initialized("import", "csv", str(csv_file), "--seed", "1")
    assert result.exit_code == 0, result.output
    assert "Imported 2 package(s)" in result.output

    result = initialized("packages", "list", "--format", "json")
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert {item["name"] for item in data} == {"Pembangunan Jalan Desa", "Pengadaan Laptop"}
    assert all(item["source"] == "tender.csv" for item in data)

    result = initialized("packages", "list", "--status", "selesai", "--format", "json")
    assert [item["name"] for item in json.loads(result.stdout)] == ["Pembangunan Jalan Desa"]

    result = initialized("report", "summary", "--json")
    summary = json.loads(result.stdout)
    assert summary["total_packages"] == 2
    assert summary["total_budget"] == 1200000
    assert summary["total_realization"] == 550000

    result = initialized("report", "summary", "--type", "non-tender", "--json")
    filtered = json.loads(result.stdout)
    assert filtered["total_packages"] == 1
    assert filtered["is_filtered"] is True

    result = initialized("report", "breakdown", "--json")
    breakdown = json.loads(result.stdout)
    assert {item["label"] for item in breakdown["type"]} == {"Tender", "Non-Tender"}

    result = initialized("report", "opds")
    assert result.stdout.splitlines() == ["Dinas Kominfo", "Dinas PUPR"]

    result = initialized("logs")
    assert result.exit_code == 0
    assert "IMPORT" in result.output

    result = initialized("status")
    assert "Total packages: 2" in result.output


def test_import_unknown_format_fails(initialized, tmp_path, unknown_csv):
    csv_file = tmp_path / "aneh.csv"
    csv_file.write_text(unknown_csv, encoding="utf-8")

    result = initialized("import", "csv", str(csv_file))
    assert result.exit_code == 1
    assert "Import failed" in result.output

    result = initialized("packages", "list", "--format", "json")
    assert json.loads(result.stdout) == []


def test_import_dry_run(initialized, tmp_path, swakelola_csv):
    csv_file = tmp_path / "swakelola.csv"
    csv_file.write_text(swakelola_csv, encoding="utf-8")

    result = initialized("import", "csv", str(csv_file), "--dry-run")
    assert result.exit_code == 0, result.output
    assert "nothing was written" in result.output

    result = initialized("packages", "list", "--format", "json")
    assert json.loads(result.stdout) == []


def test_preview_needs_no_database(invoke, tmp_path, swakelola_csv):
    csv_file = tmp_path / "swakelola.csv"
    csv_file.write_text(swakelola_csv, encoding="utf-8")

    result = invoke("import", "preview", str(csv_file))
    assert result.exit_code == 0, result.output
    assert "swakelola" in result.output


def test_add_edit_delete(initialized):
    result = initialized(*ADD_ARGS)
    assert result.exit_code == 0, result.output
    assert "Package #1 added (50% progress)" in result.output

    result = initialized("packages", "show", "1")
    assert result.exit_code == 0
    assert "Pembangunan Jalan Desa" in result.output
    assert "Rp 1.000" in result.output

    result = initialized("packages", "edit", "1", "--realization", "1000", "--status", "selesai")
    assert result.exit_code == 0, result.output
    assert "100% progress" in result.output

    result = initialized("report", "top", "--limit", "1")
    assert result.exit_code == 0
    assert "Pembangunan" in result.output

    result = initialized("packages", "delete", "1", "--yes")
    assert result.exit_code == 0
    assert "deleted" in result.output

    result = initialized("packages", "show", "1")
    assert result.exit_code == 1
    assert "Package not found" in result.output

    result = initialized("logs", "--limit", "10")
    for action in ("ADD", "EDIT", "DELETE"):
        assert action in result.output


def test_add_rejects_invalid_input(initialized):
    args = list(ADD_ARGS)

    bad_coordinates = list(args)
    bad_coordinates[bad_coordinates.index("--coordinates") + 1] = "-95, 116"
    result = initialized(*bad_coordinates)
    assert result.exit_code == 1
    assert "Invalid package" in result.output

    infinite = list(args)
    infinite[infinite.index("--budget") + 1] = "inf"
    result = initialized(*infinite)
    assert result.exit_code == 1
    assert "finite" in result.output

    blank_name = list(args)
    blank_name[blank_name.index("--name") + 1] = "   "
    result = initialized(*blank_name)
    assert result.exit_code == 1

    bad_type = list(args)
    bad_type[bad_type.index("--type") + 1] = "lelang"
    result = initialized(*bad_type)
    assert result.exit_code == 2

    result = initialized("packages", "list", "--format", "json")
    assert json.loads(result.stdout) == []


def test_edit_errors(initialized):
    result = initialized("packages", "edit", "1")
    assert result.exit_code == 1
    assert "Nothing to change" in result.output

    result = initialized("packages", "edit", "42", "--name", "Baru")
    assert result.exit_code == 1
    assert "Package not found" in result.output


def test_bracketed_names_are_shown_literally(initialized):
    args = list(ADD_ARGS)
    args[args.index("--name") + 1] = "Rehab [B]"
    result = initialized(*args)
    assert result.exit_code == 0, result.output

    result = initialized("report", "top")
    assert result.exit_code == 0, result.output
    assert "Rehab [B]" in result.output

    result = initialized("logs")
    assert "Rehab [B]" in result.output

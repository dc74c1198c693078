"""Tests for building packages and normalizing whole files."""

from __future__ import annotations

import random

import pytest

from paketwatch.core.config.models import (
    DEFAULT_PLACEHOLDER_IMAGES,
    DEFAULT_PROVINCE,
    CsvFormat,
    NormalizerConfig,
    PackageStatus,
    PackageType,
)
from paketwatch.core.errors import EmptyFileError, ImportFormatError, UnknownFormatError
from paketwatch.core.normalize import (
    Coordinates,
    build_package,
    compute_progress,
    normalize_csv,
    placeholder_image,
)


@pytest.mark.parametrize(
    "budget, realization, expected",
    [
        (100, 50, 50),
        (0, 123, 0),
        (0, 0, 0),
        (-5, 1, 0),
        (8, 1, 13),
        (3, 1, 33),
        (100, 150, 150),
        (1, 10**307, 0),
        (1e-300, 1e300, 0),
        (10, 10**400, 0),
    ],
)
def test_compute_progress(budget, realization, expected):
    assert compute_progress(budget, realization) == expected


def test_placeholder_image_cycles():
    images = ["a", "b", "c"]
    assert [placeholder_image(i, images) for i in range(5)] == ["a", "b", "c", "a", "b"]


def test_tender_batch(tender_csv, rng):
    batch = normalize_csv(tender_csv, rng=rng)

    assert batch.format is CsvFormat.TENDER
    assert batch.rows_read == 3
    assert batch.skipped_unnamed == 1
    assert [p.name for p in batch.packages] == ["Pembangunan Jalan Desa", "Pengadaan Laptop"]

    road, laptop = batch.packages
    assert road.type is PackageType.TENDER
    assert (road.budget, road.hps, road.realization) == (1000000, 900000, 500000)
    assert road.progress == 50
    assert road.status is PackageStatus.COMPLETED
    assert road.opd_name == "Dinas PUPR"
    assert road.provider_name == "CV Maju Jaya"
    assert road.location == "Kota Mataram"
    assert road.provider_address == "Kota Mataram"
    assert road.image_url == DEFAULT_PLACEHOLDER_IMAGES[0]
    assert road.coordinates.is_valid()

    assert laptop.type is PackageType.NON_TENDER
    assert laptop.hps == 0
    assert laptop.progress == 25
    assert laptop.status is PackageStatus.IN_PROGRESS
    assert laptop.provider_name == "Belum Ada Pemenang"
    assert laptop.image_url == DEFAULT_PLACEHOLDER_IMAGES[1]


def test_swakelola_batch(swakelola_csv, rng):
    batch = normalize_csv(swakelola_csv, rng=rng)

    assert batch.format is CsvFormat.SWAKELOLA
    training, school = batch.packages

    assert training.type is PackageType.SWAKELOLA
    assert training.budget == training.hps == 300000000
    assert training.realization == 150000000
    assert training.progress == 50
    assert training.status is PackageStatus.PLANNING
    assert training.provider_name == "Swakelola Internal"
    assert training.provider_address == "Dinas Koperasi"
    assert training.location == "Provinsi Nusa Tenggara Barat"

    assert school.status is PackageStatus.SUSPENDED
    assert school.progress == 100
    assert school.provider_name == "Komite Sekolah"
    assert school.location == DEFAULT_PROVINCE


def test_same_seed_same_coordinates(tender_csv):
    first = normalize_csv(tender_csv, rng=random.Random(5))
    second = normalize_csv(tender_csv, rng=random.Random(5))
    assert [p.coordinates for p in first.packages] == [p.coordinates for p in second.packages]


def test_unknown_format_is_batch_fatal(unknown_csv):
    with pytest.raises(UnknownFormatError) as exc_info:
        normalize_csv(unknown_csv, source="aneh.csv")

    assert isinstance(exc_info.value, ImportFormatError)
    assert exc_info.value.headers == ["Kolom A", "Kolom B"]
    assert exc_info.value.source == "aneh.csv"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "Nama Paket,Nilai Kontrak,Jenis Pengadaan",
        "Nama Paket,Nilai Kontrak,Jenis Pengadaan\n\n",
        "Nama Paket,Nilai Kontrak,Jenis Pengadaan\nonly,two\n",
        "Kolom A,Kolom B\n",
        "Kolom A,Kolom B\nonly\n",
    ],
)
def test_empty_file_is_batch_fatal(text):
    with pytest.raises(EmptyFileError):
        normalize_csv(text)


def test_row_named_placeholder_is_dropped(rng):
    text = (
        "Nama Paket,Nilai Kontrak,Jenis Pengadaan,Nilai Pagu\n"
        "Tanpa Nama,100,Tender,200\n"
    )
    batch = normalize_csv(text, rng=rng)
    assert batch.packages == []
    assert batch.rows_read == 1
    assert batch.skipped_unnamed == 1


def test_coordinate_and_image_columns_are_used():
    row = {
        "Nama Paket": "Jembatan",
        "Nilai Kontrak": "10",
        "Jenis Pengadaan": "Tender",
        "Lintang": "-8,6",
        "Bujur": "116.2",
        "URL Gambar": "https://example.org/jembatan.jpg",
    }
    package = build_package(row, CsvFormat.TENDER, index=3)
    assert package.coordinates == Coordinates(lat=-8.6, lon=116.2)
    assert package.image_url == "https://example.org/jembatan.jpg"


def test_configured_defaults():
    config = NormalizerConfig(province="Bali", placeholder_images=["only.png"])
    row = {"Nama Paket": "Pasar", "Nilai Kontrak": "", "Jenis Pengadaan": ""}
    package = build_package(row, CsvFormat.TENDER, config=config, rng=random.Random(1), index=4)
    assert package.image_url == "only.png"
    assert package.location == "Bali"
    assert package.provider_address == "Bali"


def test_unknown_format_has_no_column_table():
    with pytest.raises(UnknownFormatError):
        build_package({"Nama Paket": "x"}, CsvFormat.UNKNOWN)


def test_with_changes_recomputes_progress(tender_csv, rng):
    road = normalize_csv(tender_csv, rng=rng).packages[0]
    updated = road.with_changes(realization=1000000)
    assert updated.progress == 100
    assert road.progress == 50
    assert updated.to_dict()["progress"] == 100
    assert updated.to_dict()["type"] == "Tender"


def test_huge_realization_does_not_break_progress(rng):
    text = (
        "Nama Paket,Nilai Kontrak,Jenis Pengadaan,Nilai Pagu\n"
        "Jalan,1e307,Tender,1\n"
    )
    package = normalize_csv(text, rng=rng).packages[0]
    assert package.progress == 0
    assert package.to_dict()["progress"] == 0

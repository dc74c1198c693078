"""Tests for the package and activity repositories."""

from __future__ import annotations

import pytest

from paketwatch.core.config.models import ActivityAction, PackageStatus, PackageType
from paketwatch.core.errors import InvalidCoordinatesError, PackageNotFoundError, PackageValidationError
from paketwatch.core.normalize import Coordinates
from paketwatch.persistence.repo import ActivityLogRepository, PackageRepository

from .helpers import make_package


@pytest.fixture
def repo(session):
    repo = PackageRepository(session)
    repo.create(make_package(), source="manual")
    repo.create(
        make_package(
            name="Pengadaan Laptop",
            type=PackageType.NON_TENDER,
            location="Lombok Barat",
            status=PackageStatus.COMPLETED,
            opd_name="Dinas Kominfo",
            budget=200,
            realization=200,
        ),
        source="tender.csv",
    )
    repo.create(
        make_package(
            name="Pelatihan UMKM",
            type=PackageType.SWAKELOLA,
            location="Mataram Timur",
            opd_name="Dinas Koperasi",
        ),
        source="swakelola.csv",
    )
    session.commit()
    return repo


def test_create_assigns_increasing_ids(session):
    repo = PackageRepository(session)
    first = repo.create(make_package())
    second = repo.create(make_package(name="Kedua"))
    assert first.id is not None
    assert second.id > first.id


def test_create_stores_progress_and_round_trips(session):
    row = PackageRepository(session).create(make_package(budget=8, realization=1), source="manual")
    assert row.progress == 13
    assert row.source == "manual"

    value = row.to_value()
    assert value.type is PackageType.TENDER
    assert value.coordinates == Coordinates(lat=-8.58, lon=116.12)
    assert row.to_dict()["id"] == row.id


def test_create_rejects_invalid_coordinates(session):
    with pytest.raises(InvalidCoordinatesError):
        PackageRepository(session).create(make_package(coordinates=Coordinates(lat=120.0, lon=0.0)))


def test_create_rejects_progress_too_large_to_store(session):
    repo = PackageRepository(session)
    with pytest.raises(PackageValidationError, match="too large"):
        repo.create(make_package(budget=1, realization=9_000_000_000_000_000_000))
    assert repo.count() == 0


def test_list_newest_first(repo):
    names = [p.name for p in repo.list_packages()]
    assert names == ["Pelatihan UMKM", "Pengadaan Laptop", "Pembangunan Jalan Desa"]


def test_search_matches_name_or_location(repo):
    assert [p.name for p in repo.list_packages(search="LAPTOP")] == ["Pengadaan Laptop"]
    assert {p.name for p in repo.list_packages(search="mataram")} == {
        "Pembangunan Jalan Desa",
        "Pelatihan UMKM",
    }
    assert repo.count(search="mataram") == 2


def test_filters(repo):
    assert [p.name for p in repo.list_packages(opd_name="Dinas Kominfo")] == ["Pengadaan Laptop"]
    assert [p.name for p in repo.list_packages(package_type=PackageType.SWAKELOLA)] == ["Pelatihan UMKM"]
    assert [p.name for p in repo.list_packages(status="Selesai")] == ["Pengadaan Laptop"]
    assert repo.count() == 3
    assert len(repo.list_packages(limit=1)) == 1
    assert [p.name for p in repo.list_packages(limit=1, offset=2)] == ["Pembangunan Jalan Desa"]


def test_update_recomputes_progress(repo):
    target = repo.list_packages(search="Jalan")[0]
    assert target.progress == 50

    updated = repo.update(target.id, realization=1000, status=PackageStatus.COMPLETED)

    assert updated.progress == 100
    assert updated.status == "Selesai"
    assert repo.require(target.id).realization == 1000


def test_update_validation(repo):
    target = repo.list_packages(search="Jalan")[0]
    with pytest.raises(PackageNotFoundError):
        repo.update(9999, name="x")
    with pytest.raises(InvalidCoordinatesError):
        repo.update(target.id, coordinates=Coordinates(lat=0.0, lon=500.0))
    with pytest.raises(PackageValidationError, match="too large"):
        repo.update(target.id, budget=1, realization=9_000_000_000_000_000_000)


def test_require_and_delete(repo):
    target = repo.list_packages(search="Laptop")[0]
    assert repo.delete(target.id) is True
    assert repo.delete(target.id) is False
    assert repo.get_by_id(target.id) is None
    with pytest.raises(PackageNotFoundError, match="Package not found"):
        repo.require(target.id)


def test_counts_and_opd_names(repo):
    assert repo.count_by_status() == {"Dalam Proses": 2, "Selesai": 1}
    assert repo.count_by_type() == {"Tender": 1, "Non-Tender": 1, "Swakelola": 1}
    assert repo.opd_names() == ["Dinas Kominfo", "Dinas Koperasi", "Dinas PUPR"]


def test_activity_log(session, repo):
    activity = ActivityLogRepository(session)
    target = repo.list_packages(search="Jalan")[0]

    activity.record(ActivityAction.ADD, "Added", package_id=target.id)
    activity.record("IMPORT", "Imported 3")
    activity.record(ActivityAction.EDIT, "Edited", package_id=target.id)

    assert [e.action for e in activity.recent()] == ["EDIT", "IMPORT", "ADD"]
    assert [e.description for e in activity.recent(limit=1)] == ["Edited"]
    assert [e.action for e in activity.recent(action=ActivityAction.IMPORT)] == ["IMPORT"]


def test_deleting_package_keeps_its_log_entries(session, repo):
    activity = ActivityLogRepository(session)
    target = repo.list_packages(search="Jalan")[0]
    entry = activity.record(ActivityAction.ADD, "Added", package_id=target.id)
    session.commit()

    repo.delete(target.id)
    session.commit()
    session.refresh(entry)

    assert entry.package_id is None

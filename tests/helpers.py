"""Builders shared by tests."""

from __future__ import annotations

from typing import Any

from paketwatch.core.config.models import PackageStatus, PackageType
from paketwatch.core.normalize import Coordinates, ProcurementPackage


def make_package(**overrides: Any) -> ProcurementPackage:
    fields: dict[str, Any] = {
        "name": "Pembangunan Jalan Desa",
        "type": PackageType.TENDER,
        "location": "Kota Mataram",
        "coordinates": Coordinates(lat=-8.58, lon=116.12),
        "budget": 1000,
        "hps": 900,
        "realization": 500,
        "status": PackageStatus.IN_PROGRESS,
        "provider_name": "CV Maju Jaya",
        "provider_address": "Kota Mataram",
        "opd_name": "Dinas PUPR",
        "image_url": "https://example.org/jalan.jpg",
    }
    fields.update(overrides)
    return ProcurementPackage(**fields)

"""Shared fixtures."""

from __future__ import annotations

import random

import pytest

from paketwatch.persistence.db import dispose_engines, get_engine, get_sync_session, init_db

TENDER_CSV = """\
Nama Paket,Jenis Pengadaan,Nilai Pagu,Nilai HPS,Nilai Kontrak,Tahap,Nama Satker,Nama Pemenang,KLPD
"Pembangunan Jalan Desa","Pekerjaan Konstruksi","Rp. 1.000.000,00","Rp. 900.000,00","Rp. 500.000,00","Paket Sudah Selesai","Dinas PUPR","CV Maju Jaya","Kota Mataram"
"Pengadaan Laptop","Non Tender Barang","200.000","","50.000","Sedang Berjalan","Dinas Kominfo","","Kabupaten Lombok Barat"
"","Pekerjaan Konstruksi","100","100","0","","Dinas PUPR","",""
"""

SWAKELOLA_CSV = """\
Nama Paket,Tipe Swakelola,Nilai Pagu,Nilai Total Realiasai,Status Paket,Nama Satker,Nama Pelaksana,K/L/PD
"Pelatihan UMKM","Tipe 1","Rp 300.000.000","Rp 150.000.000","Terumumkan","Dinas Koperasi","","Provinsi Nusa Tenggara Barat"
"Rehab Gedung Sekolah","Tipe 2","Rp 80.000.000","Rp 80.000.000","Paket Dibatalkan","Dinas Pendidikan","Komite Sekolah",""
"""

UNKNOWN_CSV = """\
Kolom A,Kolom B
1,2
"""


@pytest.fixture
def tender_csv() -> str:
    return TENDER_CSV


@pytest.fixture
def swakelola_csv() -> str:
    return SWAKELOLA_CSV


@pytest.fixture
def unknown_csv() -> str:
    return UNKNOWN_CSV


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def session():
    """Session bound to a fresh in-memory database."""
    dispose_engines()
    get_engine("sqlite://")
    init_db("sqlite://")
    session = get_sync_session()
    try:
        yield session
    finally:
        session.close()
        dispose_engines()

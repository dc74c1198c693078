"""
Paketwatch - Terminal-first procurement package monitor.

Imports procurement package exports (Tender / Non-Tender / Swakelola),
normalizes them, stores them in a local database and reports the
dashboard figures used by the provincial monitoring office.
"""

__version__ = "0.1.0"
__app_name__ = "paketwatch"

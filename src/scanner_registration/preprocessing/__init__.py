"""
Preprocessing Module

Loading and validation of structured scan reports.
"""

from .loader import ScanLoader, ScanDocument, ScanRecord

__all__ = [
    "ScanLoader",
    "ScanDocument",
    "ScanRecord",
]

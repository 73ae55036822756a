"""
Registration Module

Places scans reported in unknown local frames into one global frame by
matching translation-invariant fingerprints over the discrete rotation table,
then merges them into a single deduplicated point map.
"""

from .scan import Scan, OrientedScan
from .fingerprint import AnchorSnapshot, FingerprintIndex, fingerprint, extreme_points
from .matcher import Match, OverlapMatcher, match_scan, count_overlap
from .assembler import AssemblyResult, AssemblyStep, MapAssembler, ScanState
from .map_queries import point_count, max_sensor_distance
from .errors import (
    RegistrationError,
    StagnationError,
    PassBudgetExceededError,
    InsufficientScansError,
)

__all__ = [
    "Scan",
    "OrientedScan",
    "FingerprintIndex",
    "AnchorSnapshot",
    "fingerprint",
    "extreme_points",
    "Match",
    "OverlapMatcher",
    "match_scan",
    "count_overlap",
    "AssemblyResult",
    "AssemblyStep",
    "MapAssembler",
    "ScanState",
    "point_count",
    "max_sensor_distance",
    "RegistrationError",
    "StagnationError",
    "PassBudgetExceededError",
    "InsufficientScansError",
]

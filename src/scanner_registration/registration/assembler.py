"""
Map Assembler

Incrementally places scans into one global frame.

The reference scan is resolved up front with the identity transform and its
sensor at the origin. Every other scan starts UNRESOLVED. A pass walks the
unresolved scans in order and asks the matcher to place each one; the first
match is merged and the walk restarts, since a newly placed scan can unlock
its neighbours. When the anchor-sampled search stalls for a whole pass, one
exhaustive pass follows; if that also stalls the assembly fails with
StagnationError instead of retrying forever.
"""

from __future__ import annotations

import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence

from ..geometry.orientation import proper_rotations
from ..geometry.vectors import ORIGIN, Point
from ..utils.logging import setup_logger
from .errors import InsufficientScansError, PassBudgetExceededError, StagnationError
from .fingerprint import AnchorSampling, FingerprintIndex
from .map_queries import max_sensor_distance, point_count
from .matcher import Match, OverlapMatcher, match_scan
from .scan import Scan

logger = setup_logger(__name__)


class ScanState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class AssemblyStep:
    """One merge: the pass it happened in, the scan placed, and the map and
    resolved-set sizes right after it."""

    pass_number: int
    scan_id: int
    map_size: int
    resolved_count: int


@dataclass
class AssemblyResult:
    """
    Output of a completed assembly.

    Attributes:
        points: Deduplicated global point set
        sensors: Sensor position per scan id
        matches: Placement record per scan id (the reference has overlap equal
            to its own size and identity rotation)
        order: Scan ids in the order they were resolved
        passes: Number of matching passes run
        steps: One AssemblyStep per merged scan, in merge order
    """

    points: FrozenSet[Point]
    sensors: Dict[int, Point]
    matches: Dict[int, Match]
    order: List[int] = field(default_factory=list)
    passes: int = 0
    steps: List[AssemblyStep] = field(default_factory=list)

    @property
    def point_count(self) -> int:
        return point_count(self.points)

    @property
    def sensor_positions(self) -> List[Point]:
        return [self.sensors[i] for i in self.order]

    @property
    def max_sensor_distance(self) -> int:
        return max_sensor_distance(self.sensors.values())


class MapAssembler:
    """
    Drives the resolve loop over a collection of scans.

    Example:
        assembler = MapAssembler(OverlapMatcher(min_overlap=12))
        result = assembler.assemble(scans)
        result.point_count, result.max_sensor_distance
    """

    def __init__(
        self,
        matcher: Optional[OverlapMatcher] = None,
        *,
        anchor_sampling: AnchorSampling = "extremes",
        reference: str = "lowest_id",
        max_passes: Optional[int] = None,
        executor=None,
    ):
        """
        Args:
            matcher: Overlap matcher (defaults to OverlapMatcher())
            anchor_sampling: Anchor strategy for regular passes; "extremes"
                falls back to one exhaustive pass before failing
            reference: "lowest_id" resolves the scan with the smallest id first
                and visits the rest in id order; "first" keeps input order
            max_passes: Optional cap on matching passes
            executor: Optional ScanParallelExecutor; when set, every unresolved
                scan is matched in parallel during a pass
        """
        if reference not in ("lowest_id", "first"):
            raise ValueError(f"Unknown reference policy '{reference}'")
        if anchor_sampling not in ("extremes", "exhaustive"):
            raise ValueError(f"Unknown anchor sampling '{anchor_sampling}'")
        if max_passes is not None and max_passes < 1:
            raise ValueError(f"max_passes must be positive, got {max_passes}")
        self.matcher = matcher or OverlapMatcher()
        self.anchor_sampling = anchor_sampling
        self.reference = reference
        self.max_passes = max_passes
        self.executor = executor

    @classmethod
    def from_config(cls, cfg, executor=None) -> "MapAssembler":
        """Build an assembler from an AppConfig."""
        matcher = OverlapMatcher(
            min_overlap=cfg.matching.min_overlap,
            include_mirrored=cfg.orientation.include_mirrored,
        )
        return cls(
            matcher,
            anchor_sampling=cfg.matching.anchor_sampling,
            reference=cfg.assembly.reference,
            max_passes=cfg.assembly.max_passes,
            executor=executor,
        )

    def _ordered(self, scans: Sequence[Scan]) -> List[Scan]:
        if not scans:
            raise InsufficientScansError("At least one scan is required for registration")
        seen = set()
        for scan in scans:
            if scan.scan_id in seen:
                raise ValueError(f"Duplicate scan id {scan.scan_id}")
            seen.add(scan.scan_id)
        if self.reference == "lowest_id":
            return sorted(scans, key=lambda s: s.scan_id)
        return list(scans)

    def assemble(self, scans: Sequence[Scan]) -> AssemblyResult:
        """
        Resolve every scan into the frame of the reference scan.

        Raises:
            InsufficientScansError: If no scans are given
            StagnationError: If an exhaustive pass places nothing
            PassBudgetExceededError: If max_passes runs out first
        """
        ordered = self._ordered(scans)
        reference = ordered[0]
        start_time = time.time()

        index = FingerprintIndex(reference.points)
        states: Dict[int, ScanState] = {s.scan_id: ScanState.UNRESOLVED for s in ordered}
        states[reference.scan_id] = ScanState.RESOLVED
        sensors: Dict[int, Point] = {reference.scan_id: ORIGIN}
        matches: Dict[int, Match] = {
            reference.scan_id: Match(
                scan_id=reference.scan_id,
                rotation=proper_rotations()[0],
                translation=ORIGIN,
                overlap=len(reference.points),
                points=reference.points,
            )
        }
        order = [reference.scan_id]
        logger.info(
            f"Assembling {len(ordered)} scans; reference scan {reference.scan_id} "
            f"with {len(reference)} points at the origin"
        )

        unresolved = ordered[1:]
        sampling = self.anchor_sampling
        passes = 0
        steps: List[AssemblyStep] = []
        scope = self.executor if self.executor is not None else nullcontext()
        with scope:
            while unresolved:
                if self.max_passes is not None and passes >= self.max_passes:
                    raise PassBudgetExceededError(self.max_passes, [s.scan_id for s in unresolved])
                passes += 1

                found = self._run_pass(unresolved, index, sampling)
                if not found:
                    if sampling != "exhaustive":
                        logger.warning(
                            f"Pass {passes}: no match using '{sampling}' anchors for "
                            f"{len(unresolved)} scan(s); retrying with all anchors"
                        )
                        sampling = "exhaustive"
                        continue
                    raise StagnationError(order, [s.scan_id for s in unresolved])

                for match in found:
                    before = len(index)
                    index.add(match.points)
                    states[match.scan_id] = ScanState.RESOLVED
                    sensors[match.scan_id] = match.sensor_position
                    matches[match.scan_id] = match
                    order.append(match.scan_id)
                    steps.append(AssemblyStep(passes, match.scan_id, len(index), len(order)))
                    logger.info(
                        f"Resolved scan {match.scan_id}: sensor at {match.sensor_position}, "
                        f"rotation {match.rotation.index}, {match.overlap} shared points, "
                        f"map {before} -> {len(index)} points"
                    )
                unresolved = [s for s in unresolved if states[s.scan_id] is ScanState.UNRESOLVED]
                sampling = self.anchor_sampling

        elapsed = time.time() - start_time
        logger.info(
            f"Assembly complete: {len(order)} scans, {len(index)} points, "
            f"{passes} passes in {elapsed:.2f}s"
        )
        return AssemblyResult(
            points=index.points,
            sensors=sensors,
            matches=matches,
            order=order,
            passes=passes,
            steps=steps,
        )

    def _run_pass(
        self,
        unresolved: List[Scan],
        index: FingerprintIndex,
        sampling: AnchorSampling,
    ) -> List[Match]:
        """
        One walk over the unresolved scans.

        Sequentially the walk stops at the first match. With an executor all
        scans are matched against the same AnchorSnapshot, which carries only the
        fingerprints of the sampled anchors. Every match found is valid
        against the grown map too, since the map only gains points.
        """
        if self.executor is not None and len(unresolved) > 1:
            results = self.executor.map_scans(
                unresolved,
                match_scan,
                {"index": index.snapshot(sampling), "matcher": self.matcher, "anchor_sampling": sampling},
            )
            return [m for m in results if m is not None]

        for scan in unresolved:
            match = self.matcher.find_match(scan, index, sampling)
            if match is not None:
                return [match]
            logger.debug(f"No match for scan {scan.scan_id} this pass")
        return []

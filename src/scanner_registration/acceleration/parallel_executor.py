"""
Parallel execution infrastructure for scan matching.

Provides ScanParallelExecutor for distributing matcher calls over the
unresolved scans of an assembly pass across multiple CPU cores using
multiprocessing.
"""

from __future__ import annotations

import logging
import time
from multiprocessing import Pool, cpu_count
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


def _worker_wrapper(args: Tuple[int, Any, Callable, Dict[str, Any]]) -> Tuple[int, Any, Optional[str]]:
    """
    Worker wrapper function for parallel scan processing.

    Must be at module level for pickling on Windows.

    Args:
        args: Tuple of (position, scan, worker_fn, worker_kwargs)

    Returns:
        Tuple of (position, result, error_message)
    """
    idx, scan, worker_fn, worker_kwargs = args
    try:
        result = worker_fn(scan, **worker_kwargs)
        return (idx, result, None)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {str(e)}"
        logger.error(f"Worker error on scan {getattr(scan, 'scan_id', idx)}: {error_msg}")
        return (idx, None, error_msg)


class ScanParallelExecutor:
    """
    Parallel executor for per-scan work.

    Manages the worker pool, hands one scan to each task and collects results
    in input order.

    Example:
        with ScanParallelExecutor(n_workers=4) as executor:
            matches = executor.map_scans(
                scans=unresolved,
                worker_fn=match_scan,
                worker_kwargs={'index': index.snapshot('extremes'), 'matcher': matcher}
            )

    Outside a `with` block a pool is created for each map_scans call.
    """

    def __init__(self, n_workers: Optional[int] = None):
        """
        Initialize parallel executor.

        Args:
            n_workers: Number of worker processes. If None, uses cpu_count - 1
                to leave one core for the coordinating process. Minimum is 1.
        """
        if n_workers is None:
            n_workers = max(1, cpu_count() - 1)
        else:
            n_workers = max(1, int(n_workers))

        self.n_workers = n_workers
        self._pool = None

        logger.info(
            f"Initialized ScanParallelExecutor with {self.n_workers} workers "
            f"(total CPUs: {cpu_count()})"
        )

    def __enter__(self) -> "ScanParallelExecutor":
        """Keep one worker pool alive until the block exits."""
        if self._pool is None and self.n_workers > 1:
            self._pool = Pool(processes=self.n_workers)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
            self._pool = None

    def map_scans(
        self,
        scans: List[Any],
        worker_fn: Callable,
        worker_kwargs: Dict[str, Any],
    ) -> List[Any]:
        """
        Map worker function over scans in parallel.

        Args:
            scans: Items to process (typically Scan objects)
            worker_fn: Picklable function with signature
                worker_fn(scan, **worker_kwargs) -> result
            worker_kwargs: Fixed keyword arguments passed to each call

        Returns:
            List of results in the same order as `scans`

        Raises:
            RuntimeError: If any worker fails
        """
        n_scans = len(scans)

        if n_scans == 0:
            logger.warning("No scans to process")
            return []

        start_time = time.time()

        # Single worker or single scan: no pool overhead
        if self.n_workers == 1 or n_scans == 1:
            results = []
            for scan in scans:
                try:
                    results.append(worker_fn(scan, **worker_kwargs))
                except Exception as e:
                    logger.error(f"Error processing scan {getattr(scan, 'scan_id', '?')}: {e}", exc_info=True)
                    raise RuntimeError(f"Scan processing failed: {e}") from e
            logger.debug(f"Sequential processing of {n_scans} scans took {time.time() - start_time:.2f}s")
            return results

        try:
            results = self._parallel_map(scans, worker_fn, worker_kwargs)
        except RuntimeError:
            raise
        except Exception as e:
            logger.error(f"Parallel processing failed: {e}", exc_info=True)
            raise RuntimeError(f"Parallel scan processing failed: {e}") from e

        logger.debug(
            f"Parallel processing of {n_scans} scans on {self.n_workers} workers "
            f"took {time.time() - start_time:.2f}s"
        )
        return results

    def _parallel_map(
        self,
        scans: List[Any],
        worker_fn: Callable,
        worker_kwargs: Dict[str, Any],
    ) -> List[Any]:
        """
        Execute parallel mapping using multiprocessing.Pool.

        Uses imap_unordered, then reorders results to match input order.
        """
        n_scans = len(scans)
        worker_args = [(i, scan, worker_fn, worker_kwargs) for i, scan in enumerate(scans)]

        results_dict = {}
        errors = []
        if self._pool is not None:
            self._collect(self._pool, worker_args, results_dict, errors)
        else:
            with Pool(processes=min(self.n_workers, n_scans)) as pool:
                self._collect(pool, worker_args, results_dict, errors)

        if errors:
            error_msg = f"{len(errors)} scans failed out of {n_scans}"
            logger.error(error_msg)
            for idx, error in errors[:5]:
                logger.error(f"  Scan at position {idx}: {error}")
            if len(errors) > 5:
                logger.error(f"  ... and {len(errors) - 5} more errors")
            raise RuntimeError(error_msg)

        return [results_dict[i] for i in range(n_scans)]

    @staticmethod
    def _collect(pool, worker_args, results_dict: Dict[int, Any], errors: List[Tuple[int, str]]) -> None:
        for idx, result, error in pool.imap_unordered(_worker_wrapper, worker_args):
            if error:
                errors.append((idx, error))
            else:
                results_dict[idx] = result

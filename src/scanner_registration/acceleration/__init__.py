"""
Acceleration Module

Parallel processing infrastructure: matcher calls for the unresolved scans of
a pass can be distributed over worker processes.
"""

from .parallel_executor import ScanParallelExecutor

__all__ = [
    "ScanParallelExecutor",
]

"""
Registration error taxonomy.

A scan that does not match during one pass is not an error; these are raised
only when the assembly as a whole cannot complete.
"""

from __future__ import annotations

from typing import Sequence


class RegistrationError(RuntimeError):
    """Base class for failures of the registration engine."""


class StagnationError(RegistrationError):
    """A full exhaustive pass over the unresolved scans produced no match."""

    def __init__(self, resolved_ids: Sequence[int], unresolved_ids: Sequence[int]):
        self.resolved_ids = list(resolved_ids)
        self.unresolved_ids = list(unresolved_ids)
        super().__init__(
            "Scan overlap graph is disconnected or overlap is insufficient: "
            f"{len(self.unresolved_ids)} scan(s) unresolved {self.unresolved_ids}, "
            f"resolved {self.resolved_ids}"
        )


class PassBudgetExceededError(RegistrationError):
    """The configured maximum number of assembly passes was used up."""

    def __init__(self, max_passes: int, unresolved_ids: Sequence[int]):
        self.max_passes = max_passes
        self.unresolved_ids = list(unresolved_ids)
        super().__init__(
            f"Assembly did not finish within {max_passes} passes; "
            f"unresolved scans: {self.unresolved_ids}"
        )


class InsufficientScansError(ValueError):
    """No scans were supplied to the assembler."""

"""
Scan Data Loader

This module loads already-structured scan reports from YAML or JSON files and
validates them into Scan objects.

Expected document layout:

    scans:
      - id: 0
        points:
          - [404, -588, -901]
          - [528, -643, 409]
      - id: 1
        points: [...]
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import BaseModel, Field, StrictInt, ValidationError

from ..registration.scan import Scan
from ..utils.logging import setup_logger

logger = setup_logger(__name__)


class ScanRecord(BaseModel):
    id: StrictInt = Field(ge=0)
    points: List[Tuple[StrictInt, StrictInt, StrictInt]] = Field(default_factory=list)


class ScanDocument(BaseModel):
    scans: List[ScanRecord]


class ScanLoader:
    """
    A class for loading scan reports.

    Features:
    - YAML (.yaml/.yml) and JSON (.json) documents
    - Strict integer coordinate validation via pydantic
    - Duplicate scan id detection
    """

    SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")

    def load(self, file_path: str) -> List[Scan]:
        """
        Load a scan report file.

        Args:
            file_path: Path to the YAML/JSON file

        Returns:
            List of Scan in document order

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the format is unsupported or the content is invalid
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in self.SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported file format: {file_path.suffix}")

        logger.info(f"Loading scans from {file_path}")
        with file_path.open("r", encoding="utf-8") as f:
            if suffix == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)

        try:
            scans = self.from_dict(raw or {})
        except ValueError as e:
            raise ValueError(f"Invalid scan data in {file_path}: {e}") from e

        logger.info(
            f"Loaded {len(scans)} scans with {sum(len(s) for s in scans)} points in total"
        )
        return scans

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> List[Scan]:
        """Validate a parsed document into Scan objects."""
        try:
            document = ScanDocument.model_validate(raw)
        except ValidationError as e:
            raise ValueError(str(e)) from e

        scans: List[Scan] = []
        seen = set()
        for record in document.scans:
            if record.id in seen:
                raise ValueError(f"Duplicate scan id {record.id}")
            seen.add(record.id)
            if not record.points:
                logger.warning(f"Scan {record.id} has no points")
            scans.append(Scan.from_points(record.id, record.points))
        return scans

"""
File checkpoint store - Implements CheckpointStore protocol on a JSON file.

The whole manager record is one JSON document. Saving writes to a
temporary file in the same directory and renames it over the old one,
so a crash mid-write never leaves a truncated checkpoint behind.
"""

import logging
import os
import tempfile
from pathlib import Path

from namereg.domain.records import ManagerRecord

from .records import dumps_manager, loads_manager

logger = logging.getLogger(__name__)


class FileCheckpointStore:
    """
    Implements CheckpointStore protocol via a local state file.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Initialize store with the state file location.

        Args:
            path: JSON state file; need not exist yet
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ManagerRecord | None:
        """Read the state file, or return None if there is none yet."""
        if not self._path.exists():
            logger.info("No old state to read from %s, initialising empty", self._path)
            return None

        logger.info("Reading old state from %s", self._path)
        return loads_manager(self._path.read_text(encoding="utf-8"))

    def save(self, record: ManagerRecord) -> None:
        """Atomically replace the state file with the record."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(dumps_manager(record))
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Wrote new state to %s", self._path)

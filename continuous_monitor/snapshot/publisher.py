"""Publishing the snapshot document to its well-known file."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from continuous_monitor.config import DEFAULT_OUTPUT_FILE
from continuous_monitor.snapshot.models import Snapshot
from continuous_monitor.utils.errors import PublishError

logger = logging.getLogger(__name__)


class SnapshotPublisher:
    """Overwrites the snapshot file each cycle.

    The file is replaced atomically so a collector never reads a partially
    written document.
    """

    def __init__(self, output_file: Optional[Union[str, Path]] = None):
        self.output_file = Path(output_file) if output_file else DEFAULT_OUTPUT_FILE

    def publish(self, snapshot: Snapshot) -> Path:
        """Write the snapshot.

        Raises:
            PublishError: If the file cannot be written
        """
        directory = self.output_file.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=directory, prefix=f".{self.output_file.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise PublishError(f"Cannot write {self.output_file}: {e}", path=self.output_file) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.to_json())
                f.write("\n")
            os.replace(tmp, self.output_file)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise PublishError(f"Cannot write {self.output_file}: {e}", path=self.output_file) from e

        logger.debug(f"Published snapshot to {self.output_file}")
        return self.output_file

    def read(self) -> Optional[Snapshot]:
        """Return the last published snapshot, or None if there is none."""
        try:
            return Snapshot.from_json(self.output_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            logger.warning(f"Failed to read snapshot {self.output_file}: {e}")
            return None

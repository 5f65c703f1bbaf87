"""Durable checkpoint storage.

The checkpoint lives in a well-known per-user directory as two plain-text
files, one scalar each, so a restarted monitor resumes where it stopped:

    ~/.continuous_monitor/last_boot_id
    ~/.continuous_monitor/last_dmesg_ts
"""

import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from continuous_monitor.config import DEFAULT_STATE_DIR
from continuous_monitor.state.models import Checkpoint
from continuous_monitor.utils.errors import CheckpointStoreError, StateDirectoryError

logger = logging.getLogger(__name__)

BOOT_ID_FILE = "last_boot_id"
OFFSET_FILE = "last_dmesg_ts"


def format_offset(offset: float) -> str:
    """Serialize an offset so that float(format_offset(x)) == x."""
    return repr(float(offset))


def parse_offset(text: str) -> Optional[float]:
    """Parse a stored offset, returning None if it is not a usable value."""
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _atomic_write_text(path: Path, content: str) -> None:
    """Write content to path via a temp file in the same directory and rename."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class CheckpointStore:
    """Load and save the monitor checkpoint.

    Usage:
        store = CheckpointStore()
        checkpoint = store.load()
        ...
        store.save(checkpoint.advance(new_offset))
    """

    def __init__(self, state_dir: Optional[Union[str, Path]] = None, create: bool = True):
        """Initialize the store, creating its directory.

        Args:
            state_dir: Directory holding the checkpoint files
            create: Create the directory if missing; read-only callers pass False

        Raises:
            StateDirectoryError: If the directory cannot be created
        """
        self.state_dir = Path(state_dir).expanduser() if state_dir else DEFAULT_STATE_DIR
        if create:
            try:
                self.state_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StateDirectoryError(
                    f"Cannot create state directory {self.state_dir}: {e}",
                    path=self.state_dir,
                ) from e

        self.boot_id_file = self.state_dir / BOOT_ID_FILE
        self.offset_file = self.state_dir / OFFSET_FILE

    def load(self) -> Checkpoint:
        """Load the stored checkpoint.

        Never raises: missing or unreadable state yields an empty checkpoint.
        """
        boot_id = self._read(self.boot_id_file)
        raw_offset = self._read(self.offset_file)

        offset = 0.0
        if raw_offset:
            parsed = parse_offset(raw_offset)
            if parsed is None:
                logger.warning(
                    f"Ignoring invalid offset {raw_offset!r} in {self.offset_file}"
                )
            else:
                offset = parsed

        return Checkpoint(boot_id=boot_id, last_log_offset=offset)

    def save(self, checkpoint: Checkpoint) -> bool:
        """Persist the checkpoint.

        A failed write is logged and reported through the return value; the
        caller keeps using its in-memory checkpoint and retries next cycle.

        Returns:
            True if both values were written
        """
        try:
            self.write(checkpoint)
        except CheckpointStoreError as e:
            logger.warning(f"Failed to persist checkpoint: {e}")
            return False
        return True

    def write(self, checkpoint: Checkpoint) -> None:
        """Persist the checkpoint, raising on failure.

        Raises:
            CheckpointStoreError: If either file cannot be written
        """
        for path, value in (
            (self.boot_id_file, checkpoint.boot_id),
            (self.offset_file, format_offset(checkpoint.last_log_offset)),
        ):
            try:
                _atomic_write_text(path, value)
            except OSError as e:
                raise CheckpointStoreError(f"Cannot write {path}: {e}", path=path) from e

        logger.debug(
            f"Saved checkpoint boot_id={checkpoint.boot_id} "
            f"offset={checkpoint.last_log_offset}"
        )

    def reset(self) -> None:
        """Remove all stored state."""
        for path in (self.boot_id_file, self.offset_file):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
        logger.info(f"Cleared checkpoint in {self.state_dir}")

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8").strip()
        except (FileNotFoundError, NotADirectoryError):
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return ""

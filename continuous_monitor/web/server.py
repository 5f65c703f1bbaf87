"""FastAPI read-out of the most recent snapshot.

Provides:
- GET/POST /api/getAllData - Last published snapshot ({} if none)
- GET /api/checkpoint - Stored checkpoint
- GET /health - Liveness and version
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from continuous_monitor import __version__
from continuous_monitor.config import DEFAULT_OUTPUT_FILE, DEFAULT_STATE_DIR
from continuous_monitor.snapshot.publisher import SnapshotPublisher
from continuous_monitor.state.store import CheckpointStore
from continuous_monitor.utils.errors import MonitorError

logger = logging.getLogger(__name__)

# Global state
_output_file: Path = DEFAULT_OUTPUT_FILE
_state_dir: Path = DEFAULT_STATE_DIR


def configure(
    output_file: Optional[Union[str, Path]] = None,
    state_dir: Optional[Union[str, Path]] = None,
) -> None:
    """Point the server at a snapshot file and checkpoint directory."""
    global _output_file, _state_dir
    if output_file is not None:
        _output_file = Path(output_file)
    if state_dir is not None:
        _state_dir = Path(state_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context."""
    logger.info(f"Serving snapshots from {_output_file} (v{__version__})")
    yield
    logger.info("Shutting down snapshot server")


app = FastAPI(
    title="Continuous Monitor",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}


@app.api_route("/api/getAllData", methods=["GET", "POST"])
async def get_all_data():
    """Return the last published snapshot document."""
    snapshot = SnapshotPublisher(_output_file).read()
    if snapshot is None:
        return JSONResponse({})
    return JSONResponse(snapshot.model_dump())


@app.get("/api/checkpoint")
async def get_checkpoint():
    """Return the stored checkpoint ({} if it cannot be read)."""
    if not _state_dir.is_dir():
        return JSONResponse({})
    try:
        checkpoint = CheckpointStore(_state_dir, create=False).load()
    except MonitorError as e:
        logger.warning(f"Checkpoint read-out failed: {e}")
        return JSONResponse({})
    return JSONResponse(checkpoint.to_dict())


def run_server(
    port: int = 8080,
    host: str = "0.0.0.0",
    output_file: Optional[Union[str, Path]] = None,
    state_dir: Optional[Union[str, Path]] = None,
):
    """Run the web server."""
    configure(output_file=output_file, state_dir=state_dir)

    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level="info")

"""HTTP read-out of published snapshots."""

from .server import app, configure, run_server

__all__ = ["app", "configure", "run_server"]

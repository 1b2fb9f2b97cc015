from .config import SyncConfig
from .sync import SyncSummary, run_sync

__all__ = ["SyncConfig", "SyncSummary", "run_sync"]

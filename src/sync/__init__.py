"""Cache synchronization package."""

from src.sync.synchronizer import DataSynchronizer

__all__ = ["DataSynchronizer"]

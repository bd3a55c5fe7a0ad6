"""Service exports."""

from . import export, financials, loader, periods, readiness, repository, review, storage

__all__ = ["export", "financials", "loader", "periods", "readiness", "repository", "review", "storage"]

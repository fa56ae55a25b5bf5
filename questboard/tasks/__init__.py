"""Celery tasks package."""

from questboard.tasks import achievements, progress

__all__ = ["achievements", "progress"]

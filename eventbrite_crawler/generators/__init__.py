"""Output writers for crawled events."""

from .dataset import DatasetWriter

__all__ = ["DatasetWriter"]

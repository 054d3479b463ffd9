"""Validation and consistency scoring for client, worker and task datasets."""

__version__ = "0.1.0"

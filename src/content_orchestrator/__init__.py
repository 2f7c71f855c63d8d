"""Resumable agent runtime and critique-revision content pipeline."""

__version__ = "0.1.0"

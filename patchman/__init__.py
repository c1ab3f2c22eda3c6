"""Paging, filter, tag, sort and export helpers for a patch management API, and a mock platform server."""

__version__ = "0.1.0"
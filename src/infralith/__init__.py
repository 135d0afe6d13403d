"""Infralith Core: in-memory agent and render workflow orchestration."""

__version__ = "0.1.0"

"""Criticality scoring, retrying HTTP, GitHub API helpers and command-line utilities."""

__version__ = "0.1.0"
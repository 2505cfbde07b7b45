"""Workspace-bounded command execution sandbox."""

__version__ = "0.1.0"

"""Workspace facade over stores, reconciler and optimizer."""

from roomlayout.workspace.workspace import Workspace

__all__ = ["Workspace"]

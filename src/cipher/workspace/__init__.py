"""Workspace access for training-time pattern harvesting."""

from cipher.workspace.provider import DEFAULT_EXCLUDES, FilesystemWorkspace, WorkspaceProvider

__all__ = ["DEFAULT_EXCLUDES", "FilesystemWorkspace", "WorkspaceProvider"]

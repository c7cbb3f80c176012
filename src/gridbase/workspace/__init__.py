"""Workspace orchestration: session, owner-bound client, base list and table screen."""

from gridbase.workspace.bases import BasesWorkspace
from gridbase.workspace.client import StoreClient
from gridbase.workspace.session import (
    Session,
    SessionProvider,
    StaticSessionProvider,
    format_initials,
    format_last_opened,
    format_user_initial,
)
from gridbase.workspace.table_view import RenderCell, RenderRow, RenderWindow, TableSession, TableWorkspace

__all__ = [
    "BasesWorkspace",
    "RenderCell",
    "RenderRow",
    "RenderWindow",
    "Session",
    "SessionProvider",
    "StaticSessionProvider",
    "StoreClient",
    "TableSession",
    "TableWorkspace",
    "format_initials",
    "format_last_opened",
    "format_user_initial",
]

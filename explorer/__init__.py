"""Browsing engine for a file agent.

The engine keeps all browsing state (current directory, history, caches,
search results, clipboard and the audio preview) in one ``ExplorerSession``
and pushes render models to a host shell through ``RenderHooks``.

Example:
    Basic usage::

        from explorer import ExplorerSession, RenderHooks

        class PrintHooks(RenderHooks):
            def show_status(self, message):
                print(message.severity.value, message.text)

        async with ExplorerSession(hooks=PrintHooks()) as session:
            await session.navigate("C:\\\\Users")
            await session.run_search("report")
"""

from explorer.cache import BoundedCache, DirectoryCache, SearchCache
from explorer.clipboard import Clipboard, ClipboardOperation
from explorer.config import ExplorerSettings, get_settings
from explorer.history import NavigationHistory
from explorer.navigation import NavigationController, NavState
from explorer.operations import BatchResult, FileOperations
from explorer.prefetch import PrefetchQueue
from explorer.search import SearchEngine, calculate_relevance
from explorer.session import ContextAction, DriveInfo, ExplorerSession, ItemProperties, RenderHooks
from explorer.status import Severity, StatusLine, StatusMessage
from explorer.views import DetailView, GridView, ItemRow, ItemView, ListView, ViewKind
from explorer.virtual_list import VirtualFrame, VirtualListRenderer

__all__ = [
    # Session
    "ExplorerSession",
    "RenderHooks",
    "ContextAction",
    "DriveInfo",
    "ItemProperties",
    "ExplorerSettings",
    "get_settings",
    # Components
    "BoundedCache",
    "DirectoryCache",
    "SearchCache",
    "PrefetchQueue",
    "NavigationHistory",
    "NavigationController",
    "NavState",
    "SearchEngine",
    "calculate_relevance",
    "VirtualListRenderer",
    "VirtualFrame",
    "Clipboard",
    "ClipboardOperation",
    "FileOperations",
    "BatchResult",
    "StatusLine",
    "StatusMessage",
    "Severity",
    # Views
    "ItemView",
    "ListView",
    "GridView",
    "DetailView",
    "ItemRow",
    "ViewKind",
]

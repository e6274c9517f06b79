"""Explorer session: the single value owning all browsing state.

``ExplorerSession`` wires the agent client, caches, history, navigation,
search, the virtual list, file operations and the audio pipeline together,
and talks to the host shell exclusively through ``RenderHooks``. Nothing is
persisted; dropping the session discards caches, history and clipboard.

Example:
    Driving a session from a shell::

        hooks = MyShellHooks()
        async with ExplorerSession(hooks=hooks) as session:
            await session.navigate("C:\\\\Users")
            await session.handle_key("f5")
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel

from agent_client.client import AsyncFileAgentClient
from agent_client.exceptions import FileAgentClientError
from agent_client.models import DirectoryEntry
from explorer.audio.formats import is_audio_file
from explorer.audio.output import OutputFactory
from explorer.audio.pipeline import AudioSession, AudioWaveformPipeline
from explorer.audio.player import PlaybackState
from explorer.audio.waveform import WaveformRender
from explorer.cache import DirectoryCache, SearchCache
from explorer.clipboard import Clipboard
from explorer.config import ExplorerSettings, get_settings
from explorer.history import NavigationHistory
from explorer.navigation import NavigationController, NavState
from explorer.operations import BatchResult, FileOperations
from explorer.paths import base_name, breadcrumb
from explorer.prefetch import PrefetchQueue
from explorer.search import SearchEngine
from explorer.status import StatusLine, StatusMessage
from explorer.tasks import ForegroundTracker, RequestGuard
from explorer.views import ListView, ViewKind, file_type, format_file_size, get_view
from explorer.virtual_list import VirtualFrame, VirtualListRenderer

logger = logging.getLogger(__name__)

DRIVE_TYPES = {
    "C": ("💾", "HDD"),
    "D": ("💿", "CD/DVD"),
    "E": ("🔌", "USB"),
    "F": ("🔌", "USB"),
    "G": ("🔌", "USB"),
    "H": ("🔌", "USB"),
}


class DriveInfo(BaseModel):
    """A drive found by probing its root."""

    letter: str
    path: str
    icon: str
    kind: str

    @classmethod
    def for_letter(cls, letter: str) -> "DriveInfo":
        icon, kind = DRIVE_TYPES.get(letter.upper(), ("💾", "Drive"))
        return cls(letter=letter.upper(), path=f"{letter.upper()}:\\", icon=icon, kind=kind)

    @property
    def label(self) -> str:
        return f"{self.letter}: Drive"


class ItemProperties(BaseModel):
    """Details shown by the properties action."""

    name: str
    path: str
    type_label: str
    size_label: str


class ContextAction(str, Enum):
    """Actions offered by the item and background context menus."""

    OPEN = "open"
    COPY = "copy"
    CUT = "cut"
    PASTE = "paste"
    DELETE = "delete"
    RENAME = "rename"
    COPY_PATH = "copy-path"
    PROPERTIES = "properties"
    NEW_FOLDER = "new-folder"
    NEW_FILE = "new-file"


class RenderHooks:
    """Shell callbacks. Every hook is a no-op here; shells override what they draw."""

    def show_items(self, frame: VirtualFrame) -> None:
        """Draw the item list (or its visible window)."""

    def show_address(self, path: str, crumbs: list[tuple[str, str]]) -> None:
        """Update the address bar and breadcrumb."""

    def show_nav_state(self, state: NavState) -> None:
        """Enable or disable the back/forward/up buttons."""

    def show_status(self, message: StatusMessage) -> None:
        """Update the status line."""

    def show_connection(self, online: bool) -> None:
        """Update the connection indicator."""

    def show_drives(self, drives: list[DriveInfo], active: str | None) -> None:
        """Draw the drive list, marking the active drive letter."""

    def show_waveform(self, waveform: WaveformRender) -> None:
        """Draw the waveform of the loaded audio file."""

    def show_progress(self, position: float, duration: float, x: float) -> None:
        """Move the playback progress line."""

    def show_peaks(self, left: float, right: float) -> None:
        """Update the left/right peak meters."""

    def show_playback_state(self, state: PlaybackState) -> None:
        """Update the player controls."""

    def show_properties(self, properties: ItemProperties) -> None:
        """Present item properties."""

    def copy_text(self, text: str) -> None:
        """Put text on the system clipboard."""

    def focus(self, target: str) -> None:
        """Focus an input ("address" or "search")."""

    def confirm(self, message: str) -> bool:
        """Ask the user to confirm a destructive action."""
        return True

    def prompt(self, message: str, default: str = "") -> str | None:
        """Ask the user for a name; None cancels."""
        return default or None


class ExplorerSession:
    """All browsing state for one shell window.

    Attributes:
        settings: Session configuration.
        hooks: Shell callbacks.
        client: The async agent client.
        navigation: Current directory and history.
        search: Search engine for the current directory.
        renderer: Virtual list over the displayed items.
        clipboard: Copy/cut clipboard.
        audio: Audio preview pipeline.
        selection: Selected item paths, in selection order.
        drives: Drives found by ``load_drives``.
        is_online: Result of the latest health check.
    """

    def __init__(
        self,
        settings: ExplorerSettings | None = None,
        hooks: RenderHooks | None = None,
        client: AsyncFileAgentClient | None = None,
        transport: Any = None,
        audio_output: OutputFactory | None = None,
    ) -> None:
        """Create a session.

        Args:
            settings: Configuration; loaded from the environment if omitted.
            hooks: Shell callbacks; a no-op implementation if omitted.
            client: Agent client; built from settings if omitted.
            transport: HTTP transport for a client built here (testing).
            audio_output: Opens the device audio previews play on; libvlc if
                omitted.
        """
        self.settings = settings or get_settings()
        self.hooks = hooks or RenderHooks()
        self.client = client or AsyncFileAgentClient(
            base_url=self.settings.base_url,
            token=self.settings.token,
            timeout=self.settings.request_timeout,
            health_timeout=self.settings.health_timeout,
            binary_timeout=self.settings.binary_timeout,
            transport=transport,
        )
        files = self.client.files
        settings = self.settings

        self.status = StatusLine(sink=self.hooks.show_status, error_seconds=settings.error_display_seconds)
        self.tracker = ForegroundTracker()
        self.directory_cache = DirectoryCache(settings.directory_cache_size)
        self.search_cache = SearchCache(settings.search_cache_size)
        self.prefetch = PrefetchQueue(
            self.directory_cache,
            loader=files.list,
            tracker=self.tracker,
            max_size=settings.prefetch_queue_size,
        )
        self.navigation = NavigationController(
            files,
            self.directory_cache,
            history=NavigationHistory(max_size=settings.history_size),
            prefetch=self.prefetch,
            guard=RequestGuard("view"),
            tracker=self.tracker,
            status=self.status,
            is_online=lambda: self.is_online,
            on_listing=self._show_listing,
            on_state=self.hooks.show_nav_state,
            home_path=settings.default_root,
            prefetch_children=settings.prefetch_children,
        )
        self.search = SearchEngine(
            files,
            self.navigation,
            cache=self.search_cache,
            status=self.status,
            on_results=self._show_search_results,
            default_root=settings.default_root,
            debounce=settings.search_debounce,
        )
        self.renderer = VirtualListRenderer(
            view=ListView(),
            on_frame=self.hooks.show_items,
            item_height=settings.item_height,
            buffer_items=settings.buffer_items,
            threshold=settings.virtual_threshold,
            initial_visible=settings.initial_visible_items,
            scroll_throttle=settings.scroll_throttle,
        )
        self.operations = FileOperations(files, self.directory_cache, tracker=self.tracker)
        self.clipboard = Clipboard()
        self.audio = AudioWaveformPipeline(
            files,
            status=self.status,
            tracker=self.tracker,
            width=settings.waveform_width,
            height=settings.waveform_height,
            on_waveform=self.hooks.show_waveform,
            on_progress=self.hooks.show_progress,
            on_peaks=self.hooks.show_peaks,
            on_state=self.hooks.show_playback_state,
            progress_interval=settings.progress_interval,
            peak_interval=settings.peak_meter_interval,
            output_factory=audio_output,
        )

        self.selection: list[str] = []
        self.drives: list[DriveInfo] = []
        self.active_drive: DriveInfo | None = None
        self.is_online = False
        self._monitor: asyncio.Task | None = None

        self._shortcuts: dict[str, Callable[[], Awaitable[Any] | Any]] = {
            "ctrl+l": lambda: self.hooks.focus("address"),
            "ctrl+f": lambda: self.hooks.focus("search"),
            "alt+left": self.navigation.go_back,
            "alt+right": self.navigation.go_forward,
            "alt+up": self.navigation.go_up,
            "f5": self.refresh,
            "delete": self.delete_selection,
            "ctrl+c": self.copy_selection,
            "ctrl+x": self.cut_selection,
            "ctrl+v": self.paste,
            "space": self.audio.toggle_play_pause,
            "ctrl+space": self.audio.stop,
        }
        self._actions: dict[ContextAction, Callable[[], Awaitable[Any] | Any]] = {
            ContextAction.OPEN: self.open_selection,
            ContextAction.COPY: self.copy_selection,
            ContextAction.CUT: self.cut_selection,
            ContextAction.PASTE: self.paste,
            ContextAction.DELETE: self.delete_selection,
            ContextAction.RENAME: self.rename,
            ContextAction.COPY_PATH: self.copy_path,
            ContextAction.PROPERTIES: self.properties,
            ContextAction.NEW_FOLDER: self.create_folder,
            ContextAction.NEW_FILE: self.create_file,
        }

    async def __aenter__(self) -> "ExplorerSession":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def current_path(self) -> str | None:
        return self.navigation.current_path

    @property
    def items(self) -> list[DirectoryEntry]:
        """The items on display (a listing or search results)."""
        return list(self.renderer.items)

    @property
    def audio_session(self) -> AudioSession | None:
        return self.audio.session

    # Lifecycle

    async def start(self) -> None:
        """Check the connection, start background work and open the first drive."""
        await self.check_connection()
        self.prefetch.start()
        if self._monitor is None:
            self._monitor = asyncio.get_running_loop().create_task(self._monitor_connection())
        await self.load_drives()

    async def close(self) -> None:
        """Stop background work and release every resource."""
        if self._monitor is not None:
            self._monitor.cancel()
            try:
                await self._monitor
            except asyncio.CancelledError:
                pass
            self._monitor = None
        await self.prefetch.stop()
        self.search.exit_search_mode()
        self.audio.close()
        await self.client.close()

    async def check_connection(self) -> bool:
        """Run a health check and update the connection state."""
        online = await self.client.health()
        self.set_connection_status(online)
        return online

    def set_connection_status(self, online: bool) -> None:
        if online == self.is_online:
            return
        self.is_online = online
        logger.info(f"Agent {'online' if online else 'offline'} at {self.client.base_url}")
        self.hooks.show_connection(online)
        if online:
            self.status.success("Connected")
        else:
            self.status.error("Offline")

    async def _monitor_connection(self) -> None:
        while True:
            await asyncio.sleep(self.settings.connection_poll_interval)
            await self.check_connection()

    # Drives

    async def load_drives(self) -> list[DriveInfo]:
        """Probe every configured drive letter in parallel and open the first found."""
        self.status.loading("Looking for drives...")
        letters = list(self.settings.drive_letters)
        found = await asyncio.gather(*(self._probe_drive(letter) for letter in letters))
        self.drives = [drive for drive in found if drive is not None]
        self.hooks.show_drives(self.drives, None)
        if not self.drives:
            self.status.error("No drives found")
            return self.drives
        await self.select_drive(self.drives[0])
        self.status.success(f"Found {len(self.drives)} drives")
        return self.drives

    async def _probe_drive(self, letter: str) -> DriveInfo | None:
        drive = DriveInfo.for_letter(letter)
        try:
            with self.tracker.busy():
                listing = await self.client.files.list(drive.path)
        except FileAgentClientError as e:
            logger.debug(f"Drive {drive.letter}: not available: {e}")
            return None
        self.directory_cache.put(drive.path, listing)
        return drive

    async def select_drive(self, drive: DriveInfo | str) -> bool:
        """Make a drive active and open its root."""
        if isinstance(drive, str):
            drive = DriveInfo.for_letter(drive.rstrip(":\\"))
        self.active_drive = drive
        self.hooks.show_drives(self.drives, drive.letter)
        self.navigation.home_path = drive.path
        return await self.navigation.navigate(drive.path)

    # Navigation and display

    async def navigate(self, path: str) -> bool:
        """Open a directory typed into the address bar or clicked in the tree."""
        return await self.navigation.navigate(path)

    async def go_back(self) -> bool:
        return await self.navigation.go_back()

    async def go_forward(self) -> bool:
        return await self.navigation.go_forward()

    async def go_up(self) -> bool:
        return await self.navigation.go_up()

    async def go_home(self) -> bool:
        return await self.navigation.go_home()

    async def refresh(self) -> bool:
        """Drop cached listings and reload the current directory."""
        return await self.navigation.refresh()

    async def run_search(self, query: str) -> list[DirectoryEntry] | None:
        """Search now (search button or Enter)."""
        return await self.search.search(query)

    def search_as_you_type(self, query: str) -> asyncio.Task:
        """Search once typing pauses."""
        return self.search.search_as_you_type(query)

    def set_view(self, kind: ViewKind | str) -> VirtualFrame:
        """Switch between list, grid and detail views."""
        return self.renderer.set_view(get_view(kind))

    def on_scroll(self, scroll_offset: float) -> bool:
        return self.renderer.on_scroll(scroll_offset)

    def on_resize(self, viewport_height: float) -> VirtualFrame:
        self.renderer.resize(viewport_height)
        return self.renderer.redraw()

    def _show_listing(self, path: str, entries: list[DirectoryEntry]) -> None:
        self.search.exit_search_mode()
        self.selection.clear()
        self.hooks.show_address(path, breadcrumb(path))
        self.renderer.set_items(entries)

    def _show_search_results(self, query: str, results: list[DirectoryEntry]) -> None:
        self.selection.clear()
        self.renderer.set_items(results)

    # Selection

    def find_item(self, path: str) -> DirectoryEntry | None:
        """The displayed entry with this path, if any."""
        return next((entry for entry in self.renderer.items if entry.path == path), None)

    def select(self, path: str, toggle: bool = False) -> list[str]:
        """Select an item; with toggle, add or remove it from the selection."""
        if not toggle:
            self.selection = [path]
        elif path in self.selection:
            self.selection.remove(path)
        else:
            self.selection.append(path)
        return self.selection

    def clear_selection(self) -> None:
        self.selection.clear()

    async def activate(self, path: str) -> bool:
        """Double-click behaviour: open folders, preview audio files."""
        entry = self.find_item(path)
        if entry is None:
            return False
        if entry.is_directory:
            return await self.navigation.navigate(entry.path)
        if is_audio_file(entry.path):
            return await self.audio.load_audio(entry.path) is not None
        return False

    async def open_selection(self) -> bool:
        if not self.selection:
            return False
        entry = self.find_item(self.selection[0])
        if entry is None or not entry.is_directory:
            return False
        return await self.navigation.navigate(entry.path)

    # Clipboard and file operations

    def copy_selection(self) -> int:
        count = self.clipboard.copy(self.selection)
        if count:
            self.status.success(f"Copied {count} items")
        return count

    def cut_selection(self) -> int:
        count = self.clipboard.cut(self.selection)
        if count:
            self.status.success(f"Cut {count} items")
        return count

    async def paste(self) -> BatchResult | None:
        """Paste the clipboard into the current directory."""
        if self.clipboard.is_empty or self.current_path is None:
            return None
        self.status.loading("Pasting...")
        result = await self.operations.paste(self.clipboard, self.current_path)
        await self._reload()
        self._report(result, "Pasted")
        return result

    async def delete_selection(self) -> BatchResult | None:
        """Delete the selected items after confirmation."""
        if not self.selection:
            return None
        if not self.hooks.confirm(f"Delete {len(self.selection)} items?"):
            return None
        self.status.loading("Deleting...")
        result = await self.operations.delete(list(self.selection))
        await self._reload()
        self.selection = list(result.failed)
        self._report(result, "Deleted")
        return result

    async def rename(self, path: str | None = None, new_name: str | None = None) -> str | None:
        """Rename an item (the first selected one by default)."""
        path = path or (self.selection[0] if self.selection else None)
        if path is None:
            return None
        new_name = new_name or self.hooks.prompt("New name:", base_name(path))
        if not new_name:
            return None
        try:
            target = await self.operations.rename(path, new_name)
        except ValueError as e:
            self.status.error(str(e))
            return None
        except FileAgentClientError as e:
            self.status.error(f"Rename failed: {e}")
            return None
        await self._reload()
        self.status.success(f"Renamed to {base_name(target)}")
        return target

    async def create_folder(self, name: str | None = None) -> str | None:
        return await self._create(name, is_directory=True)

    async def create_file(self, name: str | None = None) -> str | None:
        return await self._create(name, is_directory=False)

    async def _create(self, name: str | None, is_directory: bool) -> str | None:
        if self.current_path is None:
            return None
        kind = "folder" if is_directory else "file"
        default = "New folder" if is_directory else "New file.txt"
        name = name or self.hooks.prompt(f"Name of the new {kind}:", default)
        if not name:
            return None
        try:
            path = await self.operations.create(self.current_path, name, is_directory=is_directory)
        except ValueError as e:
            self.status.error(str(e))
            return None
        except FileAgentClientError as e:
            self.status.error(f"Could not create {kind}: {e}")
            return None
        await self._reload()
        self.status.success(f"Created {kind} {base_name(path)}")
        return path

    def copy_path(self, path: str | None = None) -> str | None:
        """Copy an item's path to the system clipboard."""
        path = path or (self.selection[0] if self.selection else None)
        if path is None:
            return None
        self.hooks.copy_text(path)
        self.status.success("Path copied")
        return path

    def properties(self, path: str | None = None) -> ItemProperties | None:
        """Show name, path, type and size of a displayed item."""
        path = path or (self.selection[0] if self.selection else None)
        entry = self.find_item(path) if path else None
        if entry is None:
            return None
        properties = ItemProperties(
            name=entry.name,
            path=entry.path,
            type_label=file_type(entry),
            size_label=format_file_size(entry.size) if entry.is_file else "-",
        )
        self.hooks.show_properties(properties)
        return properties

    async def _reload(self) -> None:
        if self.current_path is not None:
            await self.navigation.navigate(self.current_path, add_to_history=False)

    def _report(self, result: BatchResult, verb: str) -> None:
        if result.ok:
            self.status.success(f"{verb} {len(result.attempted)} items")
        else:
            self.status.error(result.summary())

    # Context menu and keyboard

    async def handle_context_action(self, action: ContextAction | str) -> Any:
        """Run a context-menu action against the current selection."""
        handler = self._actions[ContextAction(action)]
        result = handler()
        if asyncio.iscoroutine(result):
            result = await result
        return result

    async def handle_key(self, key: str, ctrl: bool = False, alt: bool = False, in_text_input: bool = False) -> bool:
        """Dispatch a global keyboard shortcut.

        Args:
            key: Key name, e.g. "l", "left", "f5", "delete", "space".
            ctrl: Whether Ctrl is held.
            alt: Whether Alt is held.
            in_text_input: Whether focus is in a text field.

        Returns:
            True if the key was handled.
        """
        combo = "+".join([*(["ctrl"] if ctrl else []), *(["alt"] if alt else []), key.lower()])
        if not self._shortcut_enabled(combo, in_text_input):
            return False
        result = self._shortcuts[combo]()
        if asyncio.iscoroutine(result):
            await result
        return True

    def _shortcut_enabled(self, combo: str, in_text_input: bool) -> bool:
        if combo not in self._shortcuts:
            return False
        if combo in ("delete", "ctrl+c", "ctrl+x"):
            return bool(self.selection)
        if combo == "ctrl+v":
            return not self.clipboard.is_empty
        if combo == "space":
            return self.audio.session is not None and not in_text_input
        if combo == "ctrl+space":
            return self.audio.session is not None
        return True

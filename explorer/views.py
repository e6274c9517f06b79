"""Item views: list, grid and detail renderings of one ordered item set.

Every view consumes the same ordered entries and turns them into
``ItemRow`` models; only the columns and layout differ. Display ordering
(directories first, then files, each by name) lives here too, so the
virtual list and the views can assume their input is already ordered.
"""

import locale
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from enum import Enum

from pydantic import BaseModel

from agent_client.models import DirectoryEntry

FOLDER_ICON = "📁"
DEFAULT_FILE_ICON = "📄"

FILE_ICONS = {
    # Images
    "jpg": "🖼️", "jpeg": "🖼️", "png": "🖼️", "gif": "🖼️", "bmp": "🖼️", "svg": "🖼️", "webp": "🖼️",
    # Video
    "mp4": "🎬", "avi": "🎬", "mov": "🎬", "wmv": "🎬", "flv": "🎬", "mkv": "🎬",
    # Audio
    "mp3": "🎵", "wav": "🎵", "flac": "🎵", "aac": "🎵", "ogg": "🎵", "aif": "🎵", "aiff": "🎵", "m4a": "🎵",
    # Documents
    "txt": "📄", "md": "📝", "doc": "📄", "docx": "📄", "pdf": "📕", "rtf": "📄",
    "xls": "📊", "xlsx": "📊", "ppt": "📊", "pptx": "📊",
    # Source code
    "js": "📜", "ts": "📜", "html": "🌐", "css": "🎨", "json": "📋", "xml": "📋",
    "py": "🐍", "java": "☕", "cpp": "🔧", "c": "🔧", "h": "🔧",
    "php": "🌐", "rb": "💎", "go": "🐹", "rs": "🔧", "kt": "🎯",
    # Archives
    "zip": "📦", "rar": "📦", "7z": "📦", "tar": "📦", "gz": "📦",
    # Executables
    "exe": "⚙️", "msi": "⚙️", "bat": "⚙️", "cmd": "⚙️", "ps1": "⚙️",
}

FILE_TYPES = {
    "jpg": "JPEG image", "jpeg": "JPEG image", "png": "PNG image", "gif": "GIF image",
    "mp4": "MP4 video", "avi": "AVI video", "mov": "MOV video",
    "mp3": "MP3 audio", "wav": "WAV audio",
    "txt": "Text document", "doc": "Word document", "pdf": "PDF document",
    "zip": "ZIP archive", "exe": "Application",
    "js": "JavaScript", "html": "HTML document", "css": "Stylesheet",
}

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class ViewKind(str, Enum):
    """The three item view variants."""

    LIST = "list"
    GRID = "grid"
    DETAIL = "detail"


class ItemRow(BaseModel):
    """One rendered item.

    Attributes:
        index: Position in the full ordered item set.
        path: Absolute path of the item.
        name: Display name.
        is_file: Whether the item is a file.
        icon: Icon glyph for the item.
        type_label: Human-readable type.
        size_label: Formatted size (files only).
        modified: Always empty; the agent reports no modification times.
    """

    index: int
    path: str
    name: str
    is_file: bool
    icon: str
    type_label: str
    size_label: str = ""
    modified: str = ""


class RenderedItems(BaseModel):
    """Output of an ItemView for a slice of items."""

    view: ViewKind
    header: tuple[str, ...] = ()
    rows: list[ItemRow]


def file_icon(entry: DirectoryEntry) -> str:
    """Icon glyph for an entry."""
    if entry.is_directory:
        return FOLDER_ICON
    return FILE_ICONS.get(entry.extension, DEFAULT_FILE_ICON)


def file_type(entry: DirectoryEntry) -> str:
    """Human-readable type label for an entry."""
    if entry.is_directory:
        return "Folder"
    ext = entry.extension
    return FILE_TYPES.get(ext, f"{ext.upper()} file" if ext else "File")


def format_file_size(size: int | None) -> str:
    """Format a byte count with 1024-based units.

    Bytes are shown without decimals, larger units with one.

    Examples:
        >>> format_file_size(512)
        '512 B'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if not size:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(value)} {SIZE_UNITS[0]}"
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def _name_key(entry: DirectoryEntry) -> tuple[str, str]:
    return (locale.strxfrm(entry.name.casefold()), entry.name)


def display_order(entries: Iterable[DirectoryEntry]) -> list[DirectoryEntry]:
    """Order a directory listing for display.

    Directories come first, then files; each group is sorted by name using
    locale-aware, case-insensitive collation.
    """
    folders = []
    files = []
    for entry in entries:
        (files if entry.is_file else folders).append(entry)
    return sorted(folders, key=_name_key) + sorted(files, key=_name_key)


class ItemView(ABC):
    """Turns an ordered item slice into rendered rows."""

    kind: ViewKind
    header: tuple[str, ...] = ()
    # Only views that draw fixed-height rows can be windowed
    supports_virtual_scroll: bool = False

    def render(self, items: Sequence[DirectoryEntry], start_index: int = 0) -> RenderedItems:
        """Render items, numbering rows from start_index.

        Args:
            items: The already-ordered slice to render.
            start_index: Index of ``items[0]`` in the full item set.
        """
        rows = [self.render_item(entry, start_index + offset) for offset, entry in enumerate(items)]
        return RenderedItems(view=self.kind, header=self.header, rows=rows)

    @abstractmethod
    def render_item(self, entry: DirectoryEntry, index: int) -> ItemRow:
        """Render a single entry."""


class ListView(ItemView):
    """Compact one-line rows; the only view that virtualizes."""

    kind = ViewKind.LIST
    supports_virtual_scroll = True

    def render_item(self, entry: DirectoryEntry, index: int) -> ItemRow:
        return ItemRow(
            index=index,
            path=entry.path,
            name=entry.name,
            is_file=entry.is_file,
            icon=file_icon(entry),
            type_label=file_type(entry),
            size_label=format_file_size(entry.size) if entry.is_file and entry.size else "",
        )


class GridView(ListView):
    """Icon tiles carrying the same details as list rows."""

    kind = ViewKind.GRID
    supports_virtual_scroll = False


class DetailView(ItemView):
    """Tabular rows with a header and a (always empty) modified column."""

    kind = ViewKind.DETAIL
    header = ("Name", "Modified", "Type", "Size")

    def render_item(self, entry: DirectoryEntry, index: int) -> ItemRow:
        return ItemRow(
            index=index,
            path=entry.path,
            name=entry.name,
            is_file=entry.is_file,
            icon=file_icon(entry),
            type_label=file_type(entry),
            size_label=format_file_size(entry.size) if entry.is_file and entry.size else "",
            modified="",
        )


VIEWS: dict[ViewKind, ItemView] = {
    ViewKind.LIST: ListView(),
    ViewKind.GRID: GridView(),
    ViewKind.DETAIL: DetailView(),
}


def get_view(kind: ViewKind | str) -> ItemView:
    """Look up the view for a kind name."""
    return VIEWS[ViewKind(kind)]

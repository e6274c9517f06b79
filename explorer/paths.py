"""Path helpers for agent paths.

The agent serves Windows-style paths. The engine keys caches and history
on the normalized form, so every path entering the engine goes through
``normalize_path`` first.
"""

SEPARATOR = "\\"


def normalize_path(path: str) -> str:
    """Return the canonical form of a path.

    Forward slashes become backslashes, trailing separators are trimmed,
    and a bare drive (``C:``) is re-padded to its root (``C:\\``).

    Args:
        path: A user- or agent-supplied path.

    Returns:
        The normalized path; empty input stays empty.
    """
    path = path.replace("/", SEPARATOR).rstrip(SEPARATOR)
    if len(path) == 2 and path.endswith(":"):
        path += SEPARATOR
    return path


def parent_path(path: str | None) -> str | None:
    """Return the parent directory of a normalized path.

    Args:
        path: A normalized path.

    Returns:
        The parent path, or None for roots (length <= 3) and empty input.
    """
    if not path or len(path) <= 3:
        return None
    last = max(path.rfind(SEPARATOR), path.rfind("/"))
    if last <= 2:
        return path[:3]
    return path[:last]


def join_path(directory: str, name: str) -> str:
    """Join a directory and a child name."""
    if directory.endswith(SEPARATOR):
        return f"{directory}{name}"
    return f"{directory}{SEPARATOR}{name}"


def base_name(path: str) -> str:
    """Return the final component of a path."""
    return path.rstrip(SEPARATOR).split(SEPARATOR)[-1]


def extension(path: str) -> str:
    """Return the lowercase extension of a path without the dot."""
    name = base_name(path)
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def breadcrumb(path: str) -> list[tuple[str, str]]:
    """Split a path into clickable crumbs.

    Args:
        path: A normalized path.

    Returns:
        ``(label, path)`` pairs from the drive root down, each path being the
        cumulative prefix ending in a separator.
    """
    crumbs = []
    current = ""
    for part in (p for p in path.split(SEPARATOR) if p):
        current += part + SEPARATOR
        crumbs.append((part, current))
    return crumbs

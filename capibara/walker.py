"""Discovery of header boundary files in the fragment tree."""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Set, Tuple

from .constants import DEFAULT_MARKER, EXCLUDED_DIRS
from .errors import TraversalError
from .logging import get_logger

_logger = get_logger("walker")


def _open_cursor(directory: Path) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise TraversalError(directory, exc.strerror or str(exc)) from exc
    return iter(entries)


def _is_excluded(rel_path: str, name: str, patterns: Sequence[str]) -> bool:
    if name in EXCLUDED_DIRS:
        return True
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        if not pattern:
            continue
        target = rel_path if "/" in pattern else name
        if fnmatchcase(target, pattern.lstrip("/")):
            return True
    return False


class PathWalker:
    """Walks the fragment tree depth-first and records header boundary files.

    The walk keeps its own stack of directory cursors instead of recursing, so
    deep trees do not grow the interpreter stack. Entries are visited in name
    order, making the result deterministic across runs.
    """

    def __init__(
        self,
        marker: str = DEFAULT_MARKER,
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.marker = marker
        self.exclude_paths: Tuple[str, ...] = tuple(exclude_paths)

    def find_header_paths(self, root: str | Path) -> List[Path]:
        """Return boundary file paths in pre-order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Header tree not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Header tree is not a directory: {root}")

        boundaries: List[Path] = []
        visited: Set[Path] = {root_path}
        stack: List[Iterator[Path]] = [_open_cursor(root_path)]

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            if entry.is_dir():
                # Cycles only come through directories; marker files are never deduplicated.
                resolved = entry.resolve()
                if resolved in visited:
                    continue
                visited.add(resolved)
                rel_path = entry.relative_to(root_path).as_posix()
                if _is_excluded(rel_path, entry.name, self.exclude_paths):
                    _logger.debug("Skipping excluded directory %s", rel_path)
                    continue
                stack.append(_open_cursor(entry))
            elif entry.name == self.marker:
                boundaries.append(entry)

        _logger.debug("Walk of %s found %d boundary files", root_path, len(boundaries))
        return boundaries


def header_ref(boundary: Path, root: str | Path) -> str:
    """Return the header ref (boundary directory relative to the root)."""
    root_path = Path(root).expanduser().resolve()
    return boundary.parent.relative_to(root_path).as_posix()


def find_header_paths(
    root: str | Path,
    marker: str = DEFAULT_MARKER,
    exclude_paths: Iterable[str] = (),
) -> List[Path]:
    return PathWalker(marker=marker, exclude_paths=exclude_paths).find_header_paths(root)


__all__ = ["PathWalker", "find_header_paths", "header_ref"]

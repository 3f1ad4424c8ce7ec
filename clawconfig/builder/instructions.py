"""
Integration Instruction Catalog.

Static, per-provider markdown describing how the agent should use an
integration. The catalog is populated once (at process start or in a
test) and is read-only afterwards; builders receive it explicitly.

File layout:
    <directory>/<provider>.md, e.g. instruction_docs/github.md

Usage:
    catalog = InstructionCatalog.default()  # packaged instructions
    catalog = InstructionCatalog.from_directory(settings.instructions_dir)
    files = build_workspace_files(snapshot, instructions=catalog)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

PACKAGED_DIR = Path(__file__).parent / "instruction_docs"


class InstructionCatalog(Mapping[str, str]):
    """Immutable provider -> markdown lookup."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, provider: str) -> str:
        return self._entries[provider]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"InstructionCatalog(providers={sorted(self._entries)})"

    @classmethod
    def from_directory(cls, directory: str | Path) -> "InstructionCatalog":
        """
        Load every `<provider>.md` file in a directory.

        A missing directory yields an empty catalog; unreadable files are
        logged and skipped.
        """
        base = Path(directory)
        if not base.is_dir():
            logger.warning(f"[instructions] Directory not found: {base}")
            return cls()

        entries: dict[str, str] = {}
        for path in sorted(base.glob("*.md")):
            try:
                entries[path.stem] = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error(f"[instructions] Failed to load {path}: {e}")

        logger.info(f"[instructions] Loaded instructions for {sorted(entries)}")
        return cls(entries)

    @classmethod
    def default(cls) -> "InstructionCatalog":
        """Catalog of the instructions shipped with the package."""
        return cls.from_directory(PACKAGED_DIR)

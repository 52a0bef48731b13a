"""Persistence of accepted minutes with one generation of history.

Layout::

    <output_dir>/section00.md, section01.md, ..., extra-pauta.md
    <output_dir>/<archive_dirname>/   previous accepted set, same names

Every accept rotates the current files into the archive slot (replacing
whatever was there) and writes the new set. Rotation stages the current files
in a fresh directory first and only then swaps it in as the archive, so the
old archive is never deleted before the new one is complete and the output
area and the archive are never both empty.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

import structlog

from src.studio.errors import PersistenceError
from src.studio.minutes.schemas import MinutesDocument

logger = structlog.get_logger(__name__)

EXTRA_FILENAME = "extra-pauta.md"
STAGING_PREFIX = ".rotating-"


def section_filename(index: int) -> str:
    """File name of the item at ``index`` (zero-padded, document order)."""
    return f"section{index:02d}.md"


class MinutesArchive:
    """Writes accepted documents and keeps the previous set as archive.

    Args:
        output_dir: Directory receiving the accepted files.
        archive_dirname: Name of the archive subdirectory inside output_dir.
    """

    def __init__(self, output_dir: str | Path, archive_dirname: str = "ant") -> None:
        self._output_dir = Path(output_dir)
        self._archive_dir = self._output_dir / archive_dirname

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def archive_dir(self) -> Path:
        return self._archive_dir

    def write(self, document: MinutesDocument) -> list[str]:
        """Rotate the current output into the archive and write ``document``.

        Args:
            document: Accepted document. Written even when identical to the
                current output.

        Returns:
            Names of the files written, in write order.

        Raises:
            PersistenceError: If any filesystem step fails. A failure during
                rotation leaves the previous output and archive in place.
        """
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                f"Cannot create output directory: {exc}", path=str(self._output_dir)
            ) from exc

        rotated = self._rotate()

        written: list[str] = []
        for index, item in enumerate(document.items):
            name = section_filename(index)
            self._write_file(name, item)
            written.append(name)

        if document.extra:
            self._write_file(EXTRA_FILENAME, document.extra)
            written.append(EXTRA_FILENAME)

        logger.info(
            "minutes.archive_written",
            output_dir=str(self._output_dir),
            files=len(written),
            rotated=rotated,
        )
        return written

    def current_files(self) -> list[str]:
        """Names of the accepted files currently in the output directory."""
        return self._list_files(self._output_dir)

    def archived_files(self) -> list[str]:
        """Names of the files held in the archive slot."""
        return self._list_files(self._archive_dir)

    # ── Internals ────────────────────────────────────────────────────────────

    def _rotate(self) -> int:
        """Move current files into the archive slot. Returns the file count."""
        existing = self.current_files()
        if not existing:
            return 0

        staging: Path | None = None
        retired: Path | None = None
        try:
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self._output_dir))
            for name in existing:
                os.replace(self._output_dir / name, staging / name)

            if self._archive_dir.exists():
                retired = staging.with_name(staging.name + "-old")
                os.replace(self._archive_dir, retired)
            os.replace(staging, self._archive_dir)
        except OSError as exc:
            if retired is not None and retired.exists() and not self._archive_dir.exists():
                os.replace(retired, self._archive_dir)
            if staging is not None and staging.exists():
                self._restore(staging)
            raise PersistenceError(
                f"Cannot rotate previous output into archive: {exc}",
                path=str(self._archive_dir),
            ) from exc

        if retired is not None:
            shutil.rmtree(retired, ignore_errors=True)
        return len(existing)

    def _restore(self, staging: Path) -> None:
        """Put staged files back into the output area after a failed rotation."""
        for path in staging.iterdir():
            target = self._output_dir / path.name
            if not target.exists():
                os.replace(path, target)
        shutil.rmtree(staging, ignore_errors=True)
        logger.warning("minutes.archive_rotation_rolled_back", output_dir=str(self._output_dir))

    def _write_file(self, name: str, content: str) -> None:
        target = self._output_dir / name
        tmp = target.with_name(f".{name}.tmp")
        try:
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, target)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {name}: {exc}", path=str(target)) from exc

    @staticmethod
    def _list_files(directory: Path) -> list[str]:
        if not directory.is_dir():
            return []
        return sorted(
            p.name
            for p in directory.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

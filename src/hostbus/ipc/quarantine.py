"""Holding area for IPC files that failed processing."""

from __future__ import annotations

from pathlib import Path

from hostbus.groups.paths import GroupPaths
from hostbus.infrastructure.logger import logger
from hostbus.ipc.boundary import BoundaryViolation, canonicalize, resolve_within


class QuarantineSink:
    """Moves unprocessable envelopes to ``<ipc-root>/errors/<group>-<file>``.

    Files are kept byte-for-byte so an operator can see what the container
    sent. Moves are renames within the IPC tree and never raise.
    """

    def __init__(self, errors_dir: Path) -> None:
        self._errors_dir = errors_dir

    @classmethod
    def open(cls, ipc_root: Path) -> QuarantineSink:
        """Create the errors directory and verify it resolves inside the IPC root.

        Raises BoundaryViolation (or OSError if it cannot be created).
        """
        canonical_root = canonicalize(ipc_root)
        errors_dir = GroupPaths.ipc_errors_dir(canonical_root)
        errors_dir.mkdir(parents=True, exist_ok=True)
        return cls(resolve_within(canonical_root, errors_dir))

    @property
    def path(self) -> Path:
        return self._errors_dir

    def move(self, file_path: Path, source_group: str, source_dir: Path) -> Path | None:
        """Quarantine one file. Returns where it landed, or None if it was left in place."""
        try:
            canonical = resolve_within(source_dir, file_path)
        except BoundaryViolation as err:
            logger.warning(
                "Rejected IPC file move outside canonical source directory",
                file=file_path.name,
                source_group=source_group,
                error=str(err),
            )
            return None

        target = self._target_for(source_group, file_path.name)
        try:
            canonical.rename(target)
        except OSError:
            logger.exception("Failed to move IPC file to errors directory", file=file_path.name, source_group=source_group)
            return None

        logger.info("IPC file quarantined", file=file_path.name, source_group=source_group, target=target.name)
        return target

    def _target_for(self, source_group: str, filename: str) -> Path:
        target = self._errors_dir / f"{source_group}-{filename}"
        if not target.exists():
            return target
        # Same group reused a filename that is still waiting for inspection
        stem, suffix = Path(filename).stem, Path(filename).suffix
        n = 1
        while True:
            target = self._errors_dir / f"{source_group}-{stem}-{n}{suffix}"
            if not target.exists():
                return target
            n += 1

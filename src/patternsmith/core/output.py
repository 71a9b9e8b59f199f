"""Writing generated artifacts to disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from patternsmith.core.exceptions import ArtifactWriteError
from patternsmith.core.generators import Artifact
from patternsmith.core.utils.io import atomic_write_text

logger = logging.getLogger(__name__)


class ArtifactWriter:
    """Write artifacts under ``directory``; each file is replaced atomically.

    Files whose content is unchanged are left untouched so repeated runs do
    not disturb modification times.
    """

    def __init__(self, directory: Path, *, dry_run: bool = False) -> None:
        self.directory = Path(directory)
        self.dry_run = dry_run

    def target(self, artifact: Artifact) -> Path:
        return self.directory / artifact.name

    def write(self, artifact: Artifact) -> Path:
        path = self.target(artifact)
        if self.dry_run:
            logger.info("dry run: would write %s", path)
            return path
        try:
            if path.exists() and path.read_text(encoding="utf-8") == artifact.text:
                logger.debug("unchanged: %s", path)
                return path
            atomic_write_text(path, artifact.text)
        except OSError as exc:
            raise ArtifactWriteError(
                f"Cannot write {path}: {exc}", context={"path": str(path), "artifact": artifact.name}
            ) from exc
        logger.info("wrote %s", path)
        return path

    def write_all(self, artifacts: Iterable[Artifact]) -> List[Path]:
        return [self.write(artifact) for artifact in artifacts]


__all__ = ["ArtifactWriter"]

"""Private scratch directory holding the script files handed to toolchains."""

import os
import shutil
import tempfile
from typing import Optional

from scriptrunner.logging import get_logger

from .errors import ScratchWriteError
from .language import LanguageDescriptor

logger = get_logger(__name__)

WORKSPACE_PREFIX = "script-runner"


class Workspace:
    """Session-scoped temp directory.

    Scratch files are named by language extension and overwritten on every
    run. They are only deleted by cleanup(), since a toolchain (or a child
    it spawned) may still read the file after the run that wrote it.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self._path = tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=base_dir)
        self._closed = False
        logger.debug(f"Workspace created at {self._path}")

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def scratch_path(self, language: LanguageDescriptor) -> str:
        """Absolute path of the scratch file for ``language``."""
        return os.path.join(self._path, language.scratch_file_name)

    def write_script(self, source: str, language: LanguageDescriptor) -> str:
        """Write ``source`` to the language's scratch file, truncating it.

        Returns:
            The absolute path of the written file.

        Raises:
            ScratchWriteError: if the workspace is gone or the write fails.
        """
        path = self.scratch_path(language)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(source)
        except OSError as e:
            raise ScratchWriteError(f"Cannot write scratch file {path}: {e}") from e
        logger.debug(f"Wrote {len(source)} chars to {path}")
        return path

    def cleanup(self) -> None:
        """Remove the directory and everything in it. Never raises."""
        if self._closed:
            return
        self._closed = True
        shutil.rmtree(self._path, ignore_errors=True)
        logger.debug(f"Workspace removed: {self._path}")

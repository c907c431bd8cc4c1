from __future__ import annotations

import contextlib
import logging
import os
import sys


class StdoutGuard(contextlib.AbstractContextManager):
    """
    Keep stdout reserved for wire bytes while active.

    - the root logger is configured once, writing to stderr
    - ``THRIFTWIRE_LOG_LEVEL`` wins over the level passed in
    - anything printed to ``sys.stdout`` inside the block goes to stderr
    """

    def __init__(self, level: str = "WARNING") -> None:
        self._orig_stdout = sys.stdout
        self.wire = sys.stdout.buffer if hasattr(sys.stdout, "buffer") else None
        if not logging.getLogger().handlers:
            logging.basicConfig(
                stream=sys.stderr,
                level=os.environ.get("THRIFTWIRE_LOG_LEVEL", level).upper(),
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

    def __enter__(self) -> StdoutGuard:
        sys.stdout = sys.stderr
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        sys.stdout = self._orig_stdout
        return False

    def write(self, data: bytes) -> None:
        if self.wire is not None:
            self.wire.write(data)
            self.wire.flush()
        else:
            self._orig_stdout.write(data.decode("utf-8"))
            self._orig_stdout.flush()

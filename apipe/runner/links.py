"""OS pipe wrapper used to connect neighbouring stages."""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


class PipeLink:
    """One anonymous pipe between stage ``i`` and stage ``i + 1``.

    Each end is closed at most once. ``close()`` releases whatever the
    parent still holds and is safe to call repeatedly, so a ``PipeLink`` can
    be registered with an ``ExitStack`` and forgotten about.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        self.read_fd: int | None
        self.write_fd: int | None
        self.read_fd, self.write_fd = os.pipe()

    def close_read(self) -> None:
        if self.read_fd is not None:
            fd, self.read_fd = self.read_fd, None
            os.close(fd)
            logger.debug("closed read end of pipe %d (fd %d)", self.index, fd)

    def close_write(self) -> None:
        if self.write_fd is not None:
            fd, self.write_fd = self.write_fd, None
            os.close(fd)
            logger.debug("closed write end of pipe %d (fd %d)", self.index, fd)

    def close(self) -> None:
        self.close_write()
        self.close_read()

    @property
    def closed(self) -> bool:
        return self.read_fd is None and self.write_fd is None

    def __enter__(self) -> PipeLink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"PipeLink(index={self.index}, read_fd={self.read_fd}, write_fd={self.write_fd})"


__all__ = ["PipeLink"]

import os

import pytest

from apipe.runner import PipeLink


def test_pipe_link_carries_bytes():
    with PipeLink(0) as link:
        os.write(link.write_fd, b"ping")
        link.close_write()
        assert os.read(link.read_fd, 16) == b"ping"
        assert os.read(link.read_fd, 16) == b""
    assert link.closed


def test_pipe_link_close_is_idempotent():
    link = PipeLink(3)
    read_fd = link.read_fd
    link.close()
    link.close()
    link.close_read()
    assert link.read_fd is None and link.write_fd is None
    with pytest.raises(OSError):
        os.fstat(read_fd)


def test_pipe_link_descriptors_are_not_inheritable():
    with PipeLink(1) as link:
        assert not os.get_inheritable(link.read_fd)
        assert not os.get_inheritable(link.write_fd)


def test_pipe_link_closes_on_error():
    with pytest.raises(RuntimeError):
        with PipeLink(2) as link:
            raise RuntimeError("boom")
    assert link.closed

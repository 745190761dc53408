"""
ipc/framing.py
==============
Exact-byte-count transfers over a pipe descriptor.

Every record exchanged between the simulator processes has a fixed size,
so a reader asks for exactly ``n`` bytes and gets either all of them or an
explicit status.  Partial reads and writes from the kernel are stitched
together here; callers never see a truncated record.

Supports:
    - Resuming after ``InterruptedError`` (signal during the syscall)
    - End-of-stream detection (peer closed its end)
    - Short-transfer and OS errors reported as :attr:`TransferStatus.ERROR`
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Tuple

log = logging.getLogger(__name__)


class TransferStatus(Enum):
    """Outcome of a framed transfer."""

    COMPLETE = "complete"
    END_OF_STREAM = "end_of_stream"
    ERROR = "error"


def read_exact(fd: int, n: int) -> Tuple[bytes, TransferStatus]:
    """
    Read exactly *n* bytes from *fd*.

    Args:
        fd (int): Readable descriptor (usually the read end of a pipe).
        n (int): Record size in bytes.

    Returns:
        Tuple[bytes, TransferStatus]: ``(data, COMPLETE)`` with ``len(data) == n``,
        or ``(b"", END_OF_STREAM)`` if the peer closed before any byte arrived,
        or ``(b"", ERROR)`` on an OS error or a record truncated by end-of-stream.
    """
    buf = bytearray()
    while len(buf) < n:
        try:
            chunk = os.read(fd, n - len(buf))
        except InterruptedError:
            continue
        except OSError as exc:
            log.error("read_failed fd=%d got=%d/%d err=%s", fd, len(buf), n, exc)
            return b"", TransferStatus.ERROR

        if not chunk:
            if buf:
                log.error("short_read fd=%d got=%d/%d", fd, len(buf), n)
                return b"", TransferStatus.ERROR
            log.info("end_of_stream fd=%d", fd)
            return b"", TransferStatus.END_OF_STREAM

        buf += chunk

    return bytes(buf), TransferStatus.COMPLETE


def write_exact(fd: int, data: bytes) -> TransferStatus:
    """
    Write all of *data* to *fd*.

    Args:
        fd (int): Writable descriptor (usually the write end of a pipe).
        data (bytes): One complete record or batch.

    Returns:
        TransferStatus: ``COMPLETE`` once every byte is written, ``ERROR`` if
        the write fails (``BrokenPipeError`` included) or makes no progress.
    """
    view = memoryview(data)
    total = 0
    while total < len(view):
        try:
            written = os.write(fd, view[total:])
        except InterruptedError:
            continue
        except OSError as exc:
            log.error("write_failed fd=%d sent=%d/%d err=%s", fd, total, len(view), exc)
            return TransferStatus.ERROR

        if written == 0:
            log.error("short_write fd=%d sent=%d/%d", fd, total, len(view))
            return TransferStatus.ERROR
        total += written

    return TransferStatus.COMPLETE

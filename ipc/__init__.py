"""
ipc: pipe transport between simulator processes
===============================================

Fixed-size binary records moved over anonymous pipes with all-or-nothing
framing.  Every process (coordinator, drone, input, generators) talks
through these helpers only.

Modules
-------
framing
    :func:`read_exact` / :func:`write_exact` and :class:`TransferStatus`.
records
    Wire records (:class:`KinematicState`, :class:`CommandState`,
    :class:`Obstacle`, :class:`Target`) and batch codecs.
metrics
    :class:`ChannelMetrics` counter snapshot.
"""

from .framing import TransferStatus, read_exact, write_exact
from .records import (
    COMMAND_SIZE,
    STATE_SIZE,
    CommandState,
    KinematicState,
    Obstacle,
    Target,
    batch_size,
    pack_batch,
    unpack_batch,
)
from .metrics import ChannelMetrics

__all__ = [
    "TransferStatus",
    "read_exact",
    "write_exact",
    "KinematicState",
    "CommandState",
    "Obstacle",
    "Target",
    "STATE_SIZE",
    "COMMAND_SIZE",
    "batch_size",
    "pack_batch",
    "unpack_batch",
    "ChannelMetrics",
]

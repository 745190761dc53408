"""
Wire records exchanged over the simulator pipes.

Every record has a fixed little-endian layout with no padding, so a reader
always knows how many bytes to ask :func:`ipc.framing.read_exact` for.
Population batches are a fixed number of records; unused slots are zeroed
and carry ``active == 0``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar, List, Sequence


@dataclass
class KinematicState:
    """
    Drone position and velocity, published by the integrator every step.

    Attributes:
        x, y (float): Position in world units.
        vx, vy (float): Velocity in world units per second.
    """
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    WIRE: ClassVar[struct.Struct] = struct.Struct("<4d")

    def pack(self) -> bytes:
        return self.WIRE.pack(self.x, self.y, self.vx, self.vy)

    @classmethod
    def unpack(cls, data: bytes) -> "KinematicState":
        return cls(*cls.WIRE.unpack(data))

    @property
    def speed(self) -> float:
        return (self.vx * self.vx + self.vy * self.vy) ** 0.5


@dataclass
class CommandState:
    """
    User command: force plus control flags.

    Attributes:
        fx, fy (float): Commanded force.
        brake (int): 1 while the last key was a brake.
        reset (int): 1 when the drone should snap back to the world centre.
        quit (int): 1 once the user asked to stop the simulation.
        last_key (int): Code of the last key handled by the input process.
    """
    fx: float = 0.0
    fy: float = 0.0
    brake: int = 0
    reset: int = 0
    quit: int = 0
    last_key: int = 0

    WIRE: ClassVar[struct.Struct] = struct.Struct("<2d4i")

    def pack(self) -> bytes:
        return self.WIRE.pack(
            self.fx, self.fy, self.brake, self.reset, self.quit, self.last_key
        )

    @classmethod
    def unpack(cls, data: bytes) -> "CommandState":
        return cls(*cls.WIRE.unpack(data))


@dataclass
class Obstacle:
    """A circular obstacle slot; ``active == 0`` marks an empty slot."""
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    active: int = 0

    WIRE: ClassVar[struct.Struct] = struct.Struct("<3di")

    def pack(self) -> bytes:
        return self.WIRE.pack(self.x, self.y, self.radius, self.active)

    @classmethod
    def unpack(cls, data: bytes) -> "Obstacle":
        return cls(*cls.WIRE.unpack(data))


@dataclass
class Target:
    """
    A collectable target slot.

    Attributes:
        x, y, radius (float): Geometry in world units.
        id (int): Identifier kept across relocations.
        active (int): 1 for a live target, 0 for an empty slot.
        created (float): Epoch seconds when the generator created it.
    """
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    id: int = 0
    active: int = 0
    created: float = 0.0

    WIRE: ClassVar[struct.Struct] = struct.Struct("<3d2id")

    def pack(self) -> bytes:
        return self.WIRE.pack(
            self.x, self.y, self.radius, self.id, self.active, self.created
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Target":
        return cls(*cls.WIRE.unpack(data))


STATE_SIZE = KinematicState.WIRE.size
COMMAND_SIZE = CommandState.WIRE.size


def batch_size(record_type: type, capacity: int) -> int:
    """Number of bytes in one batch of *capacity* records."""
    return record_type.WIRE.size * capacity


def pack_batch(records: Sequence, record_type: type, capacity: int) -> bytes:
    """
    Encode *records* as a full batch, padding with zeroed inactive slots.

    Raises:
        ValueError: If more than *capacity* records are given.
    """
    if len(records) > capacity:
        raise ValueError(f"{len(records)} records exceed batch capacity {capacity}")
    empty = record_type().pack()
    body = b"".join(r.pack() for r in records)
    return body + empty * (capacity - len(records))


def unpack_batch(data: bytes, record_type: type, capacity: int) -> List:
    """
    Decode a full batch into *capacity* records (inactive slots included).

    Raises:
        ValueError: If *data* is not exactly one batch long.
    """
    size = record_type.WIRE.size
    if len(data) != size * capacity:
        raise ValueError(
            f"batch of {record_type.__name__} must be {size * capacity} bytes, got {len(data)}"
        )
    return [
        record_type(*fields) for fields in record_type.WIRE.iter_unpack(data)
    ]

"""
ChannelMetrics: Tracks simple statistics for the coordinator's pipes.
"""

from typing import Dict


class ChannelMetrics:
    """
    Tracks records moved, end-of-stream events and errors per channel.

    Attributes:
        records_in (Dict[str, int]): Complete records read, by channel name.
        records_out (Dict[str, int]): Complete records written, by channel name.
        end_of_stream (Dict[str, int]): End-of-stream events, by channel name.
        errors (Dict[str, int]): Read/write errors, by channel name.
        ticks (int): Coordinator ticks executed.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.records_in: Dict[str, int] = {}
        self.records_out: Dict[str, int] = {}
        self.end_of_stream: Dict[str, int] = {}
        self.errors: Dict[str, int] = {}
        self.ticks = 0

    @staticmethod
    def _bump(counter: Dict[str, int], channel: str) -> None:
        counter[channel] = counter.get(channel, 0) + 1

    def record_in(self, channel: str) -> None:
        self._bump(self.records_in, channel)

    def record_out(self, channel: str) -> None:
        self._bump(self.records_out, channel)

    def eof(self, channel: str) -> None:
        self._bump(self.end_of_stream, channel)

    def error(self, channel: str) -> None:
        self._bump(self.errors, channel)

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Copies of every counter plus the tick count.
        """
        return {
            "ticks": self.ticks,
            "records_in": dict(self.records_in),
            "records_out": dict(self.records_out),
            "end_of_stream": dict(self.end_of_stream),
            "errors": dict(self.errors),
        }

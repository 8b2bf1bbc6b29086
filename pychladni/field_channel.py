"""
Message boundary between the field generator and the frame loop.

Classes:
    FieldMessage: One emission of the generator, tagged with its epoch.
    FieldChannel: FIFO that hands buffers over to the receiving side.
    FieldReceiver: Foreground end; keeps the latest field of the current epoch.
"""

import logging
import queue
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from pychladni.config import DEFAULT_RANDOM_VIBRATION_INTENSITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FieldMessage:
    """
    Field data for the consumer.

    Attributes:
        epoch (int): Configuration generation that produced the message.
        vibration_intensity (float): Jitter amplitude the particles should use.
        vibration_values (np.ndarray | None): (height, width) vibration magnitudes.
        gradients (np.ndarray | None): (height, width, 2) descent directions.
    """
    epoch: int
    vibration_intensity: float
    vibration_values: Optional[np.ndarray] = None
    gradients: Optional[np.ndarray] = None

    def __post_init__(self):
        if (self.vibration_values is None) != (self.gradients is None):
            raise ValueError("vibration_values and gradients must both be set or both be None")
        if self.vibration_intensity <= 0:
            raise ValueError(f"vibration_intensity must be positive, got {self.vibration_intensity!r}")

    @property
    def resonant(self) -> bool:
        """True when the message carries field data."""
        return self.gradients is not None


class FieldChannel:
    """
    Ordered single-producer/single-consumer queue of FieldMessages.

    Sending hands the buffers over: they are frozen read-only on the way in,
    and the sender is expected to drop its own references.
    """

    def __init__(self):
        self._queue = queue.SimpleQueue()

    def send(self, message: FieldMessage):
        for buffer in (message.vibration_values, message.gradients):
            if buffer is not None:
                buffer.flags.writeable = False
        self._queue.put(message)

    def receive(self) -> Optional[FieldMessage]:
        """Next message, or None if nothing is waiting. Never blocks."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[FieldMessage]:
        """All waiting messages in send order."""
        messages = []
        while True:
            message = self.receive()
            if message is None:
                return messages
            messages.append(message)


class FieldReceiver:
    """
    Foreground end of the channel.

    Holds the most recent message of the newest requested epoch. Messages
    from older epochs were produced for a configuration the foreground has
    already replaced and are dropped.
    """

    def __init__(self, channel: FieldChannel,
                 default_intensity: float = DEFAULT_RANDOM_VIBRATION_INTENSITY):
        self.channel = channel
        self.default_intensity = default_intensity
        self.expected_epoch = 0
        self.current: Optional[FieldMessage] = None

    def expect(self, epoch: int):
        """Called when a reconfiguration with this epoch has been requested."""
        if epoch > self.expected_epoch:
            self.expected_epoch = epoch
            self.current = None

    def poll(self) -> List[FieldMessage]:
        """
        Takes every waiting message and keeps the newest accepted one.
        Returns: The accepted messages, in send order.
        """
        accepted = []
        for message in self.channel.drain():
            if message.epoch < self.expected_epoch:
                logger.debug("Dropped stale field message (epoch %d < %d)",
                             message.epoch, self.expected_epoch)
                continue
            self.current = message
            accepted.append(message)
        return accepted

    @property
    def intensity(self) -> float:
        if self.current is None:
            return self.default_intensity
        return self.current.vibration_intensity

    @property
    def gradients(self) -> Optional[np.ndarray]:
        return None if self.current is None else self.current.gradients

    @property
    def vibration_values(self) -> Optional[np.ndarray]:
        return None if self.current is None else self.current.vibration_values

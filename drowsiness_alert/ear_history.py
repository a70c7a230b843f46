"""
EAR History Module
Fixed-length rolling window of recent EAR values for charts and diagnostics
"""

from collections import deque

from drowsiness_alert.config import EAR_HISTORY_LENGTH, EAR_HISTORY_FILL


class EARHistory:
    """
    Rolling buffer of the last N EAR samples, oldest first.

    Starts filled with a neutral value so a chart has a full width of data
    from the first frame. The alertness state machine does not read from it.
    """

    def __init__(self, capacity=EAR_HISTORY_LENGTH, fill=EAR_HISTORY_FILL):
        """
        Initialize EAR history.

        Args:
            capacity: Maximum number of samples kept
            fill: Neutral value the buffer starts with
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.fill = fill
        self.samples = deque([fill] * capacity, maxlen=capacity)

    def push(self, sample):
        """Append a sample, evicting the oldest one when full."""
        self.samples.append(float(sample))

    def snapshot(self):
        """
        Get a copy of the buffered samples.

        Returns:
            List of EAR values, oldest first
        """
        return list(self.samples)

    def clear(self):
        """Refill the buffer with the neutral value."""
        self.samples.clear()
        self.samples.extend([self.fill] * self.capacity)

    @property
    def latest(self):
        return self.samples[-1]

    def __len__(self):
        return len(self.samples)

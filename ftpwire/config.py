import warnings
from dataclasses import dataclass
from typing import Optional


@dataclass
class Limits:
    """
    Resource limits for control and data connections.

    Controls how much the background readers pull from a socket in one go
    and, optionally, how fast they are allowed to move bytes. Speed limits
    are handed to aioftp's stream throttles, so they apply per connection.

    Attributes:
        size: Maximum bytes requested from the socket per read.
              Replies are small; 1 KiB keeps the control reader responsive.
        read: Read speed limit in bytes per second, None for unlimited.
        write: Write speed limit in bytes per second, None for unlimited.
    """

    size: int = 1024  # Bytes requested per socket read
    read: Optional[int] = None  # Read speed limit (bytes/s)
    write: Optional[int] = None  # Write speed limit (bytes/s)

    def __post_init__(self) -> None:
        """
        Validate limit configuration after initialization.

        Returns:
            None

        Raises:
            ValueError: If the read size or a speed limit is not positive.
        """
        if self.size <= 0:
            raise ValueError("Read size must be positive")

        if self.read is not None and self.read <= 0:
            raise ValueError("Read speed limit must be positive")

        if self.write is not None and self.write <= 0:
            raise ValueError("Write speed limit must be positive")


@dataclass
class Retry:
    """
    Retry configuration for transient (4xx) replies.

    A standalone command that gets a transient negative reply is sent again,
    up to ``total`` more times. Commands running inside a sequence are never
    resent on their own; instead the whole sequence starts over from its
    first command, which spends one unit of the ``sequence`` budget.

    Attributes:
        total: Extra attempts for a standalone command after the first one.
        sequence: How many times a sequence may restart before giving up.
        backoff: Exponential backoff factor between resends.
                 Delay before resend n = backoff * (2 ^ n); 0 resends at once.
    """

    total: int = 3  # Extra attempts for a standalone command
    sequence: int = 3  # Restart budget shared by a whole sequence
    backoff: float = 0.0  # Exponential backoff factor between resends

    def __post_init__(self) -> None:
        """
        Validate retry configuration after initialization.

        Returns:
            None

        Raises:
            ValueError: If a budget or the backoff factor is negative.
        """
        if self.total < 0:
            raise ValueError("Total retries cannot be negative")

        if self.sequence < 0:
            raise ValueError("Sequence retries cannot be negative")

        if self.backoff < 0:
            raise ValueError("Backoff factor cannot be negative")

    def delay(self, attempt: int) -> float:
        return self.backoff * (2 ** attempt)


@dataclass
class Timeout:
    """
    Timeout configuration for connection setup and writes.

    Reads have no timeout on purpose: the background readers sit on idle
    sockets for as long as the connection lives. How long the engine waits
    for a reply is governed by :class:`Polling` instead.

    Attributes:
        connect: Time to wait for a control or data connection to open.
        write: Time to wait when sending a command line.
    """

    connect: float = 5.0  # Time to wait for connection establishment
    write: float = 10.0  # Time to wait when sending a command

    def __post_init__(self) -> None:
        """
        Validate timeout configuration after initialization.

        Returns:
            None

        Raises:
            ValueError: If a timeout value is not positive.
        """
        if self.connect <= 0:
            raise ValueError("Connect timeout must be positive")
        if self.write <= 0:
            raise ValueError("Write timeout must be positive")


@dataclass
class Polling:
    """
    Wait policy for pulling bytes out of a background reader.

    Every retrieval is a bounded number of waits. While nothing has arrived
    each wait lasts ``wait`` seconds; once some bytes are in, the reader only
    waits ``settle`` seconds for more, which gives a multi-line reply time to
    finish arriving. A retrieval returns as soon as a settle window passes
    quietly.

    Attributes:
        wait: Seconds per wait while no data has arrived yet.
        settle: Seconds per wait once data is in the buffer.
        attempts: Waits per ordinary retrieval.
    """

    wait: float = 0.15  # Wait while nothing has arrived
    settle: float = 0.05  # Wait once data started arriving
    attempts: int = 4  # Waits per retrieval

    def __post_init__(self) -> None:
        """
        Validate polling configuration after initialization.

        Returns:
            None

        Raises:
            ValueError: If an interval or the attempt count is not positive.
        """
        if self.wait <= 0:
            raise ValueError("Wait interval must be positive")
        if self.settle <= 0:
            raise ValueError("Settle interval must be positive")
        if self.attempts <= 0:
            raise ValueError("Attempts must be positive")

        if self.settle > self.wait:
            warnings.warn(
                f"Settle interval ({self.settle}) is longer than the wait interval ({self.wait}). "
                "Replies will be returned later than necessary."
            )

    @property
    def block(self) -> int:
        """Waits for a blocking retrieval, used while a data transfer runs."""
        return self.attempts * self.attempts

"""
Errors recorded by the FtpWire engine.

Most of these are never raised at the caller. The engine records them on the
in-flight :class:`~ftpwire.command.Command` and returns, so callers inspect
``command.success`` and ``command.last_error`` instead of catching.
"""

from typing import Optional


class FtpError(Exception):
    """Base class for everything FtpWire records or raises."""


# Connection state


class ConnectionStateError(FtpError):
    pass


class NotReady(ConnectionStateError):
    def __init__(self, message: str = "Server is disconnected or otherwise unavailable") -> None:
        super().__init__(message)


class NotConnected(NotReady):
    def __init__(self, message: str = "Control connection is not open") -> None:
        super().__init__(message)


# Transport


class TransportError(FtpError):
    pass


class WriteError(TransportError):
    pass


class ReadError(TransportError):
    pass


class ConnectionClosed(TransportError):
    def __init__(self, message: str = "Connection closed by remote") -> None:
        super().__init__(message)


class DataConnectionError(TransportError):
    pass


# Parsing


class ParseError(FtpError):
    pass


class InvalidFormat(ParseError):
    """A content line carried no status code where one was required."""

    def __init__(self, line: str = "") -> None:
        self.line = line
        super().__init__(f"Invalid line format: {line!r}")


class InvalidStatus(ParseError):
    """A status code was found but it is not a known FTP reply code."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"Invalid reply status {status}. Wrongly formatted multi-line reply?")


class EmptyInput(ParseError):
    def __init__(self) -> None:
        super().__init__("Empty response")


# Reply classification


class StatusError(FtpError):
    """
    A reply arrived but its status does not let the command succeed.

    Attributes:
        status: Reply status code the server sent
        text: Reply message, verbatim
    """

    def __init__(self, message: str, status: Optional[int] = None, text: str = "") -> None:
        self.status = status
        self.text = text
        super().__init__(message)


class UnexpectedCompletion(StatusError):
    def __init__(self, verb: str, expected: str, status: int, text: str) -> None:
        super().__init__(
            f"{verb} completed without meeting any of the {expected} statuses. "
            f"Completion status: {status}, message: {text}",
            status,
            text,
        )


class OutOfSequence(StatusError):
    def __init__(self, verb: str, status: int, text: str) -> None:
        super().__init__(
            f"{verb} could not complete, use a sequence for dependent commands. "
            f"Intermediate status: {status}, message: {text}",
            status,
            text,
        )


class RetriesExhausted(StatusError):
    def __init__(self, verb: str, status: int, text: str) -> None:
        super().__init__(
            f"{verb} reached the maximum number of retries. "
            f"Transient negative completion status {status}, message: {text}",
            status,
            text,
        )


class PermanentFailure(StatusError):
    def __init__(self, status: int, text: str) -> None:
        super().__init__(f"Command failure: {status} {text}", status, text)


class UnexpectedReply(StatusError):
    def __init__(self, verb: str, status: int, text: str) -> None:
        super().__init__(f"{verb} received an unsupported reply: {status} {text}", status, text)


class NoReply(FtpError):
    def __init__(self, message: str = "Unable to fetch a response from server at this time") -> None:
        super().__init__(message)


class SequenceExhausted(FtpError):
    def __init__(self, verb: str, budget: int) -> None:
        self.budget = budget
        super().__init__(f"Sequence restarted {budget} times and gave up at {verb}")


class UnknownCommand(FtpError):
    def __init__(self, verb: str) -> None:
        self.verb = verb
        super().__init__(f"Unrecognized command {verb}")


# Addresses


class AddressError(FtpError, ValueError):
    pass


class MalformedAddress(AddressError):
    pass


class MissingDataAddress(AddressError):
    def __init__(self) -> None:
        super().__init__(
            "Unable to establish a data connection in the current context. "
            "Negotiate passive or extended passive mode first"
        )

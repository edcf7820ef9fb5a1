import logging
from typing import FrozenSet, Iterable, List, Optional

from . import commands
from .parser import Reply

logger = logging.getLogger(__name__)

EOL = "\r\n"


class Command:
    """
    One request to the server plus everything we learn while running it.

    A command knows which reply statuses count as success for it. The engine
    attaches the server's reply and records every problem it meets along the
    way; as soon as a single error is recorded the command is failed for this
    attempt. Sequences call :meth:`flush` to give a command a clean slate
    before running it again.

    Attributes:
        verb: Canonical verb, ``commands.UNKNOWN`` for unrecognized input
        parameters: Everything after the verb on the command line
        statuses: Reply statuses that mean the command did what was asked
        errors: Errors recorded during the current attempt, oldest first
        reply: Last reply the server sent for this command
    """

    def __init__(self, verb: str, parameters: str = "", statuses: Iterable[int] = ()) -> None:
        self.source: str = verb.strip()
        self.verb: str = commands.canonical(verb)
        if commands.historic(verb):
            logger.debug("Historic verb %s sent as %s", self.source, self.verb)
        self.parameters: str = parameters
        self.statuses: FrozenSet[int] = frozenset(statuses)
        self.errors: List[BaseException] = []
        self.reply: Optional[Reply] = None

    def __repr__(self) -> str:
        return f"Command({self.censored!r}, statuses={self.expected!r})"

    def __str__(self) -> str:
        return self.line

    @property
    def line(self) -> str:
        if self.parameters:
            return f"{self.verb} {self.parameters}"
        return self.verb

    @property
    def censored(self) -> str:
        """Command line safe for logs, secrets replaced with stars."""
        if self.parameters and self.verb in commands.secret:
            return f"{self.verb} ****"
        return self.line

    def encode(self, encoding: str = "utf-8") -> bytes:
        return (self.line + EOL).encode(encoding)

    def expects(self, status: int) -> bool:
        return status in self.statuses

    @property
    def expected(self) -> str:
        """Accepted statuses as a readable list, e.g. ``200|220``."""
        return "|".join(str(status) for status in sorted(self.statuses))

    def add(self, error: Optional[BaseException]) -> None:
        if error is not None:
            self.errors.append(error)

    def flush(self) -> List[BaseException]:
        errors, self.errors = self.errors, []
        return errors

    @property
    def last_error(self) -> Optional[BaseException]:
        return self.errors[-1] if self.errors else None

    def attach(self, reply: Optional[Reply], error: Optional[BaseException] = None) -> None:
        self.add(error)
        self.reply = reply

    @property
    def valid(self) -> bool:
        """True when the attached reply carries one of the accepted statuses."""
        return self.reply is not None and self.expects(self.reply.status)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def unknown(self) -> bool:
        return self.verb == commands.UNKNOWN

    @property
    def transfer(self) -> bool:
        return self.verb in commands.transfers

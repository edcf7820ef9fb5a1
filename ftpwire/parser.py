import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Tuple

from .codes import family, known
from .errors import EmptyInput, InvalidFormat, InvalidStatus, ParseError

logger = logging.getLogger(__name__)

# One physical line and its terminator, if any
LINE = re.compile(rb"([^\r\n]*)(\r\n|\n|\r)?")
# Trimmed from both ends of every line
BLANK = b" \t\x00\x0b\x0c"
MARKER = b"-"

# (bytes consumed, completed reply, error)
Scan = Tuple[int, Optional["Reply"], Optional[ParseError]]


@dataclass(frozen=True)
class Reply:
    """
    One complete server reply.

    Attributes:
        status: Three digit reply code, always one of the known codes
        message: Reply text; lines of a multi-line reply are joined with newlines
        multiline: True when the reply was opened with the ``ddd-`` marker
    """

    status: int
    message: str
    multiline: bool = False

    def __post_init__(self) -> None:
        if not known(self.status):
            raise InvalidStatus(self.status)

    @property
    def family(self) -> int:
        return family(self.status)

    @property
    def lines(self) -> List[str]:
        return self.message.split("\n")

    def __str__(self) -> str:
        return f"{self.status} {self.message}"


class Parser:
    """
    Re-entrant reply scanner for control connection bytes.

    Control reads come in arbitrary chunks: a chunk may hold half a line,
    several pipelined replies, or a multi-line reply cut in the middle. Feed
    every chunk to :meth:`parse` and pop finished replies with :meth:`get`.
    Bytes that can't be decided yet (an unterminated line, a multi-line reply
    still waiting for its closing line) stay in ``pending`` until more bytes
    arrive or :meth:`finish` is called.

    Multi-line replies end on a line that repeats the opening status without
    the dash. A content line that happens to start with those same three
    digits ends the reply too; that heuristic is inherited from RFC 959 and
    can't be made exact for unusual server output.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.replies: Deque[Reply] = deque()
        self.errors: List[ParseError] = []
        self.pending = bytearray()

    def __len__(self) -> int:
        return len(self.replies)

    def parse(self, block: bytes) -> int:
        """Scan a block of bytes, queueing every reply it completes.

        Args:
            block: Raw bytes as read from the connection

        Returns:
            int: Number of replies completed by this block
        """
        self.pending.extend(block)
        return self.run(final=False)

    def finish(self) -> int:
        """Parse whatever is pending as if the stream had ended."""
        return self.run(final=True)

    def get(self) -> Optional[Reply]:
        """Pop the oldest parsed reply, or None when there is none."""
        if self.replies:
            return self.replies.popleft()
        return None

    def drain(self) -> List[Reply]:
        replies = list(self.replies)
        self.replies.clear()
        return replies

    def drain_errors(self) -> List[ParseError]:
        errors, self.errors = self.errors, []
        return errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def last_error(self) -> Optional[ParseError]:
        return self.errors[-1] if self.errors else None

    def run(self, final: bool) -> int:
        count = 0
        while self.pending:
            consumed, reply, error = self.scan(bytes(self.pending), final)

            if error is not None and not isinstance(error, EmptyInput):
                logger.debug("Parsing error: %s", error)
                self.errors.append(error)
            if reply is not None:
                self.replies.append(reply)
                count += 1

            if consumed == 0:
                break
            del self.pending[:consumed]
        return count

    def scan(self, data: bytes, final: bool) -> Scan:
        """Scan one reply off the front of ``data``."""
        status: Optional[int] = None
        texts: List[str] = []
        consumed = 0

        for raw, end in self.split(data, final):
            line = raw.strip(BLANK)
            if not line:
                if status is None:
                    consumed = end
                continue

            code, dash, text = self.tokenize(line)

            if status is None:
                if code is None:
                    return end, None, InvalidFormat(self.decode(line))
                if not known(code):
                    return end, None, InvalidStatus(code)
                status = code
                texts.append(text)
                consumed = end
                if not dash:
                    return consumed, Reply(status, text), None
                continue

            if code is None:
                texts.append(text)
                consumed = end
                continue

            if code != status:
                # Next reply starts here, leave it for the next pass
                return consumed, Reply(status, "\n".join(texts), True), None

            texts.append(text)
            consumed = end
            if not dash:
                return consumed, Reply(status, "\n".join(texts), True), None

        if status is None:
            return consumed, None, EmptyInput()
        if final:
            return consumed, Reply(status, "\n".join(texts), True), None
        # Multi-line reply still open
        return 0, None, None

    @staticmethod
    def split(data: bytes, final: bool) -> Iterator[Tuple[bytes, int]]:
        position = 0
        while position < len(data):
            match = LINE.match(data, position)
            if match.group(2) is None and not final:
                return
            yield match.group(1), match.end()
            position = match.end()

    def tokenize(self, line: bytes) -> Tuple[Optional[int], bool, str]:
        digits = 0
        while digits < 3 and line[digits : digits + 1].isdigit():
            digits += 1

        if not digits:
            return None, False, self.decode(line)

        dash = line[digits : digits + 1] == MARKER
        rest = line[digits + 1 :] if dash else line[digits:]
        return int(line[:digits]), dash, self.decode(rest.lstrip(b" "))

    def decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors="replace")

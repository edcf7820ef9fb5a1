import asyncio
import logging
import warnings
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union
from urllib.parse import urlparse

import aioftp

from . import codes
from .address import Address, decode_extended, decode_port
from .auth import Basic, Guest
from .command import Command
from .config import Limits, Polling, Retry, Timeout
from .errors import (
    ConnectionClosed,
    DataConnectionError,
    MalformedAddress,
    MissingDataAddress,
    NoReply,
    NotConnected,
    NotReady,
    OutOfSequence,
    PermanentFailure,
    RetriesExhausted,
    SequenceExhausted,
    StatusError,
    UnexpectedCompletion,
    UnexpectedReply,
    UnknownCommand,
    WriteError,
)
from .parser import Parser, Reply
from .reader import Reader

logger = logging.getLogger(__name__)

# Type definitions for clarity
HookType = Callable[..., Awaitable[Any]]
Opener = Callable[[str, int], Awaitable[Any]]
AuthType = Union[Basic, Guest]


class Outcome(Enum):
    """What a single execution step decided after reading a reply."""

    PENDING = "pending"  # 1xx, wait for the final reply without resending
    COMPLETED = "completed"  # 2xx, or 3xx inside a sequence
    RETRY = "retry"  # 4xx on a standalone command, send it again
    RESTART = "restart"  # 4xx inside a sequence, start the sequence over
    FATAL = "fatal"  # Done for good, the reason is recorded on the command


class FtpClient:
    """
    Protocol engine for one FTP control connection.

    Drives commands against the server and turns whatever comes back into a
    verdict on the command itself. Nothing here raises for protocol
    outcomes: a rejected login, a missing file or a server that went quiet
    all end up as errors recorded on the returned :class:`Command`, so the
    caller just checks ``command.success``.

    Reply families decide what happens next. 1xx means keep waiting, 2xx
    means done, 3xx is only fine inside a sequence, 4xx is retried (a
    sequence restarts from its first command instead) and 5xx fails on the
    spot.

    Only one command may be in flight at a time. The engine does no locking;
    callers sharing a client must take turns.
    """

    def __init__(
        self,
        endpoint: str,
        auth: Optional[AuthType] = None,
        retry: Optional[Retry] = None,
        timeout: Optional[Timeout] = None,
        polling: Optional[Polling] = None,
        limits: Optional[Limits] = None,
        hooks: Optional[Dict[str, HookType]] = None,
        encoding: str = "utf-8",
        opener: Optional[Opener] = None,
    ) -> None:
        """Set up the engine; nothing touches the network until :meth:`connect`.

        Args:
            endpoint: Server URL like "ftp://myserver.com:2121"
            auth: Username and password, None to log in anonymously
            retry: Retry budgets for transient replies and sequences
            timeout: How long to wait for connects and writes
            polling: Wait policy for pulling replies out of the control reader
            limits: Read size and speed limits for every connection
            hooks: Async callbacks for "connect", "request", "reply", "error" and "close"
            encoding: Text encoding for command and reply lines
            opener: Async callable (host, port) -> stream, replaces the TCP opener
        """
        # Parse endpoint URL to extract connection details
        url = urlparse(endpoint)
        self.endpoint: str = endpoint
        self.host: Optional[str] = url.hostname
        self.port: int = url.port or aioftp.DEFAULT_PORT

        # Store config for engine behavior
        self.auth: Optional[AuthType] = auth
        self.retry: Retry = retry or Retry()
        self.timeout: Timeout = timeout or Timeout()
        self.polling: Polling = polling or Polling()
        self.limits: Limits = limits or Limits()
        self.hooks: Dict[str, HookType] = hooks or {}
        self.encoding: str = encoding
        self.opener: Opener = opener or self.open
        self.throttle = aioftp.StreamThrottle.from_limits(self.limits.read, self.limits.write)

        # Session state
        self.stream: Any = None
        self.control: Optional[Reader] = None
        self.pipe: Optional[Reader] = None
        self.parser = Parser(encoding)
        self.data: Optional[Address] = None
        self.greeting: Optional[Reply] = None
        self.connected: bool = False
        self.greeted: bool = False
        self.disconnected: bool = False
        self.authenticated: bool = False

    @property
    def ready(self) -> bool:
        """True when commands may be sent: connected, greeted and not quit."""
        return self.connected and self.greeted and not self.disconnected

    async def open(self, host: str, port: int) -> aioftp.ThrottleStreamIO:
        """Open a TCP connection wrapped in an aioftp stream.

        Reads are left without a timeout since the background readers wait
        on idle sockets; writes use the configured write timeout.
        """
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=self.timeout.connect,
        )
        return aioftp.ThrottleStreamIO(
            reader,
            writer,
            throttles={"_": self.throttle},
            write_timeout=self.timeout.write,
        )

    async def connect(self) -> Optional[Reply]:
        """Open the control connection and wait for the server greeting.

        The session becomes ready once the server greets with 220. A 1xx
        greeting ("ready in n minutes") is followed by waiting for the final
        one.

        Returns:
            Reply: The greeting, or None when the server never sent one

        Raises:
            ConnectionError: If the control connection can't be opened
        """
        if self.connected:
            return self.greeting

        try:
            self.stream = await self.opener(self.host, self.port)
        except asyncio.TimeoutError:
            raise ConnectionError(f"Connection to {self.host}:{self.port} timed out")
        except OSError as error:
            raise ConnectionError(f"Failed to connect to FTP server: {error}")

        self.connected = True
        self.disconnected = False
        self.parser = Parser(self.encoding)
        self.control = Reader(self.stream, self.polling, self.limits.size).start()

        greeting = await self.receive(None, patient=True)
        while greeting is not None and greeting.family == codes.PRELIMINARY:
            logger.info("Server not ready yet: %s", greeting)
            greeting = await self.receive(None, patient=True)

        self.greeting = greeting
        self.greeted = greeting is not None and greeting.status == codes.READY

        if self.greeted:
            logger.info("Connected to %s:%s: %s", self.host, self.port, greeting)
            await self.notify("connect", self)
        else:
            logger.warning("Server at %s:%s is not ready: %s", self.host, self.port, greeting)

        return greeting

    async def send(self, command: Command) -> None:
        """Write one command line on the control connection.

        Replies nobody waited for are dropped first so they can't be mistaken
        for the answer to this command. That includes the unfinished tail of
        a reply an earlier command gave up on.

        Raises:
            WriteError: If the write fails or times out
        """
        stale = self.control.now()
        if stale:
            self.parser.parse(stale)
        self.parser.finish()
        for reply in self.parser.drain():
            logger.warning("Discarding unconsumed reply: %s", reply)
        for error in self.parser.drain_errors():
            logger.warning("Discarding unparsable input: %s", error)

        logger.debug("> %s", command.censored)
        await self.notify("request", command)

        try:
            await self.stream.write(command.encode(self.encoding))
        except (OSError, asyncio.TimeoutError) as error:
            raise WriteError(f"Unable to send {command.verb}: {error}") from error

    async def receive(self, command: Optional[Command], patient: bool = False) -> Optional[Reply]:
        """
        Wait for the next reply on the control connection.

        Pulls bytes from the control reader until the parser completes a
        reply. Parse errors are recorded on ``command`` (or logged when there
        is none). A patient wait uses the longer blocking budget and keeps
        waiting for as long as a data transfer is still streaming.

        Args:
            command: Command the reply belongs to, None for the greeting
            patient: Wait with the blocking budget (after a 1xx reply)

        Returns:
            Reply: The next reply, or None if none arrived in time
        """
        reply = self.parser.get()

        while reply is None:
            if patient:
                data = await self.control.block()
            else:
                data = await self.control.get()

            if data:
                logger.debug("< %r", data)
                self.parser.parse(data)
            elif not self.control.available:
                self.parser.finish()

            for error in self.parser.drain_errors():
                if command is not None:
                    command.add(error)
                else:
                    logger.warning("Unparsable reply: %s", error)

            reply = self.parser.get()
            if reply is not None:
                break

            if data:
                # Partial reply, keep reading
                continue

            if not self.control.available:
                self.connected = False
                if command is not None:
                    command.add(self.control.error or ConnectionClosed())
                return None

            if patient and self.pipe is not None and self.pipe.active:
                continue

            return None

        logger.debug("Reply: %s", reply)
        await self.notify("reply", reply)
        return reply

    def classify(self, command: Command, reply: Reply, sequence: bool, attempt: int) -> Outcome:
        """
        Decide what a reply means for the command it answers.

        Args:
            command: Command the reply belongs to, errors are recorded here
            reply: Reply to classify
            sequence: Whether the command runs inside a sequence
            attempt: Resends already spent on this command

        Returns:
            Outcome: Next step for the execution loop
        """
        family = reply.family

        if family == codes.PRELIMINARY:
            return Outcome.PENDING

        if family == codes.COMPLETION:
            # Done either way, but not necessarily the way we asked for
            if not command.expects(reply.status):
                command.add(UnexpectedCompletion(command.verb, command.expected, reply.status, reply.message))
            return Outcome.COMPLETED

        if family == codes.INTERMEDIATE:
            if not sequence:
                command.add(OutOfSequence(command.verb, reply.status, reply.message))
                return Outcome.FATAL
            return Outcome.COMPLETED

        if family == codes.TRANSIENT:
            if sequence:
                return Outcome.RESTART
            if attempt >= self.retry.total:
                command.add(RetriesExhausted(command.verb, reply.status, reply.message))
                return Outcome.FATAL
            return Outcome.RETRY

        if family == codes.PERMANENT:
            command.add(PermanentFailure(reply.status, reply.message))
            return Outcome.FATAL

        command.add(UnexpectedReply(command.verb, reply.status, reply.message))
        return Outcome.FATAL

    async def execute(self, command: Command, sequence: bool = False) -> Outcome:
        """
        Run one command to a final outcome.

        Sends the command, then keeps reading replies until one of them is
        final. Transient replies on a standalone command cause a resend, up
        to the retry budget; inside a sequence they are handed back as
        :attr:`Outcome.RESTART` for the sequence runner.

        Args:
            command: Command to run; its reply and errors are updated in place
            sequence: Whether the command runs inside a sequence

        Returns:
            Outcome: COMPLETED, RESTART or FATAL
        """
        if command.unknown:
            command.add(UnknownCommand(command.source))
            return Outcome.FATAL

        if not self.connected:
            command.add(NotConnected())
            return Outcome.FATAL

        if not self.ready:
            # Do not make requests on closed connections
            command.add(NotReady())
            return Outcome.FATAL

        attempt = 0
        outcome = Outcome.RETRY

        while True:
            if outcome is Outcome.RETRY:
                try:
                    await self.send(command)
                except WriteError as error:
                    command.add(error)
                    return Outcome.FATAL
                reply = await self.receive(command)
            else:
                reply = await self.receive(command, patient=True)

            if reply is None:
                if command.success:
                    command.add(NoReply())
                return Outcome.FATAL

            command.attach(reply)
            outcome = self.classify(command, reply, sequence, attempt)

            if outcome is Outcome.PENDING:
                continue

            if outcome is Outcome.RETRY:
                delay = self.retry.delay(attempt)
                attempt += 1
                logger.info(
                    "%s got %s (%s), retry %d of %d",
                    command.verb,
                    reply.status,
                    codes.describe(reply.status),
                    attempt,
                    self.retry.total,
                )
                if delay:
                    await asyncio.sleep(delay)
                continue

            return outcome

    async def report(self, command: Command) -> None:
        if command.success:
            logger.info("%s successful.", command.verb)
        else:
            logger.info("%s failed. %s", command.verb, command.last_error)
            await self.notify("error", command.last_error)

    async def request(self, command: Command) -> Command:
        """Run a standalone command on the control connection.

        Returns:
            Command: The same command, with its reply and any errors attached
        """
        logger.info("Executing: %s", command.censored)
        await self.execute(command)
        await self.report(command)
        return command

    async def sequence(self, *commands: Command) -> Tuple[bool, Optional[Command]]:
        """
        Run dependent commands in order, restarting them together on 4xx.

        Stops at the first command that fails. When a command gets a
        transient reply the whole sequence starts over from the first command;
        every restart spends one unit of ``retry.sequence``. Running out of
        restarts records :class:`SequenceExhausted` on the command that
        triggered the last one.

        Returns:
            Tuple[bool, Command]: Overall success and the last command that ran
        """
        budget = self.retry.sequence
        last: Optional[Command] = None

        while True:
            restart = False

            for command in commands:
                last = command
                logger.info("Executing: %s", command.censored)
                outcome = await self.execute(command, sequence=True)

                if outcome is Outcome.RESTART:
                    command.flush()
                    budget -= 1
                    restart = True
                    logger.info("%s got a transient reply, restarting sequence (%d left)", command.verb, budget)
                    break

                await self.report(command)
                if not command.success:
                    return False, command

            if not restart:
                return True, last

            if budget <= 0:
                last.add(SequenceExhausted(last.verb, self.retry.sequence))
                await self.report(last)
                return False, last

    async def transfer(self, command: Command, sink: Any = None) -> Tuple[Command, bytes]:
        """
        Run a command that moves data over a separate data connection.

        Needs a data address from a previous :meth:`passive` or
        :meth:`extended` negotiation. Opens the data connection, starts a
        fresh reader on it, runs the command on the control connection and
        then drains and closes the data reader. The final control reply is
        what says the data connection is complete.

        Args:
            command: Data-bearing command such as LIST or RETR
            sink: Optional writer that receives the data instead of the return value

        Returns:
            Tuple[Command, bytes]: The command and the data read (empty with a sink)
        """
        logger.info("Executing: %s", command.censored)

        if command.unknown:
            command.add(UnknownCommand(command.source))
            await self.report(command)
            return command, b""

        if not command.transfer:
            logger.warning("%s does not use a data connection", command.verb)

        if self.data is None:
            command.add(MissingDataAddress())
            await self.report(command)
            return command, b""

        if not self.ready:
            command.add(NotReady())
            await self.report(command)
            return command, b""

        try:
            stream = await self.opener(self.data.ip, self.data.port)
        except (OSError, asyncio.TimeoutError) as error:
            command.add(DataConnectionError(f"Unable to open data connection to {self.data}: {error}"))
            await self.report(command)
            return command, b""

        reader = Reader(stream, self.polling, self.limits.size)
        if sink is not None:
            reader.redirect(sink)
        self.pipe = reader.start()

        try:
            await self.execute(command)
            data = await reader.get()
        finally:
            self.pipe = None
            await reader.close()

        await self.report(command)
        return command, data

    def register(self, address: Optional[Address]) -> Address:
        """Remember the address data connections should go to.

        Port-only addresses (EPSV) are completed with the control
        connection's peer.

        Raises:
            MalformedAddress: If no address is given
        """
        if address is None:
            raise MalformedAddress("Invalid data address")

        if address.ip is None:
            host = Address.peer(self.stream) or Address(ip=self.host, port=0)
            address = address.replace(ip=host.ip, family=host.family)

        self.data = address
        return address

    async def passive(self) -> Command:
        """Negotiate passive mode with PASV and register the server's address."""
        command = await self.request(Command("PASV", statuses={codes.PASSIVE}))
        if command.success:
            address = decode_port(command.reply.message)
            if address is None:
                command.add(MalformedAddress(f"Invalid passive address in reply: {command.reply.message}"))
            else:
                self.register(address)
        return command

    async def extended(self) -> Command:
        """Negotiate extended passive mode with EPSV, the only option over IPv6."""
        command = await self.request(Command("EPSV", statuses={codes.EXTENDED_PASSIVE}))
        if command.success:
            address = decode_extended(command.reply.message)
            if address is None:
                command.add(MalformedAddress(f"Invalid extended passive address in reply: {command.reply.message}"))
            else:
                self.register(address)
        return command

    async def login(self, auth: Optional[AuthType] = None, account: Optional[str] = None) -> Command:
        """
        Log in with USER and PASS, sent as one sequence.

        Servers that let the user in straight after USER (230) finish early.
        Servers that want an account after the password (332) get ACCT when
        ``account`` is given.

        Args:
            auth: Credentials, defaults to the client's, then anonymous
            account: Account for servers that require ACCT

        Returns:
            Command: The last command sent
        """
        auth = auth or self.auth or Guest()
        user = Command("USER", auth.user, {codes.NEED_PASSWORD})
        password = Command("PASS", auth.password, {codes.LOGGED_IN, codes.NOT_IMPLEMENTED})

        ok, last = await self.sequence(user, password)

        if last is user and user.reply is not None and user.reply.status == codes.LOGGED_IN:
            # No password needed
            user.flush()
            ok = True
        elif ok and password.reply is not None and password.reply.status == codes.NEED_ACCOUNT:
            if account is None:
                password.add(StatusError("Server requires an account to log in", codes.NEED_ACCOUNT, password.reply.message))
                ok = False
            else:
                last = await self.request(Command("ACCT", account, {codes.LOGGED_IN, codes.NOT_IMPLEMENTED}))
                ok = last.success

        self.authenticated = ok
        return last

    async def quit(self) -> Command:
        """Say goodbye with QUIT and close the control connection."""
        command = await self.request(Command("QUIT", statuses={codes.CLOSING}))
        if command.success:
            self.disconnected = True
            self.authenticated = False
            await self.close()
        return command

    async def close(self) -> None:
        """Close the control connection without saying goodbye."""
        if self.control is not None:
            await self.control.close()
            self.control = None
            await self.notify("close", self)
        self.stream = None
        self.connected = False
        self.greeted = False

    async def notify(self, event: str, *args: Any) -> None:
        """Run a user hook; hook failures never break the engine."""
        hook = self.hooks.get(event)
        if hook is None:
            return
        try:
            await hook(*args)
        except Exception as error:
            warnings.warn(f"{event.capitalize()} hook failed: {error}")

    async def __aenter__(self) -> "FtpClient":
        """Connect and log in.

        Returns:
            FtpClient: This same instance, ready for commands

        Raises:
            ConnectionError: If we can't connect, the server isn't ready, or login fails
        """
        greeting = await self.connect()
        if not self.ready:
            await self.close()
            raise ConnectionError(f"Server at {self.host}:{self.port} is not ready: {greeting}")

        last = await self.login()
        if not self.authenticated:
            await self.close()
            raise ConnectionError(f"Login failed: {last.last_error}")

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Quit politely if possible, then make sure the connection is closed."""
        if self.ready:
            await self.quit()
        if self.control is not None:
            await self.close()

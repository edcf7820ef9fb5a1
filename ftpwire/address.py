import ipaddress
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from .errors import MalformedAddress

# Six comma separated groups: h1,h2,h3,h4,p1,p2
PORT = re.compile(r"(?<!\d)(\d{1,3}),(\d{1,3}),(\d{1,3}),(\d{1,3}),(\d{1,3}),(\d{1,3})(?!\d)")
# |family|address|port|
EXTENDED = re.compile(r"\|([^|]*)\|([^|]*)\|(\d{1,5})\|")


class Family(IntEnum):
    IPV4 = 1
    IPV6 = 2


@dataclass(frozen=True)
class Address:
    """
    Network address of a control or data connection.

    Addresses are immutable. Whenever passive mode is renegotiated the session
    swaps in a brand new one instead of patching the old.

    Attributes:
        ip: Address literal, or None when the server left it out (EPSV replies
            only carry a port, the host is the control connection's peer).
        port: TCP port.
        family: IPV4 or IPV6, inferred from the literal when not given.
    """

    ip: Optional[str]
    port: int
    family: Optional[Family] = None

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 0xFFFF:
            raise MalformedAddress(f"Port out of range: {self.port}")
        if self.family is None:
            object.__setattr__(self, "family", infer(self.ip))

    def __str__(self) -> str:
        if self.family == Family.IPV6:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"

    def replace(self, **changes: Any) -> "Address":
        fields = {"ip": self.ip, "port": self.port, "family": self.family}
        fields.update(changes)
        return Address(**fields)

    @classmethod
    def peer(cls, stream: Any) -> Optional["Address"]:
        """Build an address from the remote end of a live connection.

        Works with anything that exposes an asyncio ``writer`` (aioftp's
        stream wrappers do). The port is left at 0 since only the host is of
        interest when completing a port-only EPSV reply.

        Returns:
            Address: The peer, or None when the stream can't tell
        """
        writer = getattr(stream, "writer", None)
        if writer is None:
            return None
        info = writer.get_extra_info("peername")
        if not info:
            return None
        return cls(ip=str(info[0]), port=0)


def infer(ip: Optional[str]) -> Family:
    """Guess the IP family of an address literal, IPv4 unless it has a colon."""
    if ip and ":" in ip:
        return Family.IPV6
    return Family.IPV4


def encode_port(address: Address) -> str:
    """
    Render an address in PORT/PASV form: ``h1,h2,h3,h4,p1,p2``.

    Only IPv4 fits this encoding, IPv6 peers must use the extended form.

    Args:
        address: IPv4 address to encode

    Returns:
        str: The six comma separated numbers

    Raises:
        MalformedAddress: If the address is IPv6 or not a dotted quad
    """
    if address.family != Family.IPV4 or not address.ip:
        raise MalformedAddress(f"PORT encoding requires an IPv4 address, got {address.ip!r}")

    try:
        ip = ipaddress.IPv4Address(address.ip)
    except ValueError:
        raise MalformedAddress(f"Invalid IPv4 address: {address.ip}")

    octets = str(ip).split(".")

    parts = octets + [str((address.port >> 8) & 0xFF), str(address.port & 0xFF)]
    return ",".join(parts)


def decode_port(text: str) -> Optional[Address]:
    """
    Find a PORT/PASV address inside free-form reply text.

    Servers wrap the numbers in whatever prose they like
    (``227 Entering Passive Mode (127,0,0,1,192,1)``), so this searches for the
    first run of six comma separated groups instead of parsing the whole text.

    Args:
        text: Reply message or PORT parameter

    Returns:
        Address: Decoded IPv4 address, or None if no valid group run is found
    """
    match = PORT.search(text)
    if match is None:
        return None

    numbers = [int(group) for group in match.groups()]
    high, low = numbers[4], numbers[5]
    if high > 0xFF or low > 0xFF:
        return None

    try:
        ip = ipaddress.IPv4Address(".".join(str(n) for n in numbers[:4]))
    except ValueError:
        return None

    return Address(ip=str(ip), port=high * 256 + low, family=Family.IPV4)


def encode_extended(address: Address) -> str:
    """Render an address in EPRT/EPSV form: ``|family|address|port|``."""
    return f"|{int(address.family)}|{address.ip or ''}|{address.port}|"


def decode_extended(text: str) -> Optional[Address]:
    """
    Find an EPRT/EPSV address inside free-form reply text.

    A family token other than 1 or 2 is not trusted, the family is inferred
    from the address literal instead. An empty literal (the usual EPSV
    ``(|||6446|)`` shape) yields an address with ``ip=None``.

    Args:
        text: Reply message or EPRT parameter

    Returns:
        Address: Decoded address, or None when the delimited fields are missing
    """
    match = EXTENDED.search(text)
    if match is None:
        return None

    token, literal, port = match.groups()
    literal = literal.strip() or None
    try:
        family = Family(int(token))
    except ValueError:
        family = infer(literal)

    if literal is not None:
        try:
            literal = str(ipaddress.ip_address(literal))
        except ValueError:
            return None

    try:
        return Address(ip=literal, port=int(port), family=family)
    except MalformedAddress:
        return None

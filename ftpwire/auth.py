import warnings
from dataclasses import dataclass

import aioftp

# Type definitions for clarity
Username = str
Password = str

ANONYMOUS: Username = "anonymous"


@dataclass
class Basic:
    """
    Username and password login.

    FTP sends both in clear text as the parameters of USER and PASS, so the
    only processing here is sanitizing: usernames can't contain whitespace
    on the wire, and surrounding whitespace in a password is almost always a
    copy/paste accident.

    Attributes:
        user: Username, trimmed with any internal whitespace removed.
              Must not be empty after sanitizing.
        password: Password, trimmed. May be empty; some servers accept
                  a blank PASS.
    """

    user: Username
    password: Password = ""

    def __post_init__(self) -> None:
        """
        Sanitize and validate the credentials.

        Returns:
            None

        Raises:
            ValueError: If the username is empty once whitespace is stripped
        """
        cleaned: Username = "".join(self.user.split())

        if not cleaned:
            raise ValueError("Username cannot be empty or whitespace")

        if cleaned != self.user.strip():
            warnings.warn(
                "Whitespace was removed from inside the username. "
                "FTP usernames can't contain spaces."
            )

        self.user = cleaned
        self.password = self.password.strip()


@dataclass
class Guest:
    """
    Anonymous login for public servers.

    Logs in as ``anonymous``. By convention the password is an e-mail
    address or some other identifier of who is connecting.

    Attributes:
        password: Identity sent as the anonymous password.
    """

    password: Password = aioftp.DEFAULT_PASSWORD

    def __post_init__(self) -> None:
        """
        Validate the guest identity.

        Returns:
            None
        """
        self.password = self.password.strip()

        if not self.password:
            warnings.warn(
                "Anonymous password is empty. "
                "Some servers reject anonymous logins without an identity."
            )

    @property
    def user(self) -> Username:
        return ANONYMOUS

__version__ = "1.0.0"
__author__ = "Andrew Hernandez"
__email__ = "andromedeyz@hotmail.com"
__license__ = "MIT"
__description__ = "An async FTP control-channel engine for Python with reply parsing, retry logic, and passive data transfers."
__url__ = "http://github.com/ApaxPhoenix/FtpWire"

# The main FtpWire class - configure once, create engines
from .ftp import FtpWire

# The heart of FtpWire - runs commands and classifies replies
from .core import (
    FtpClient,  # One control connection and everything sent over it
    Outcome,  # What the engine decided after a reply
)

# Commands and replies
from .command import Command
from .parser import Parser, Reply
from .address import Address, Family

# Fine-tune how the engine behaves
from .config import (
    Timeout,  # Set how long to wait for connections and writes
    Retry,  # Retry budgets for transient replies
    Limits,  # Read size and speed limits
    Polling,  # How long to wait for replies
)

# Different ways to log in
from .auth import (
    Basic,  # Classic username and password login
    Guest,  # Anonymous access for public servers
)

from .errors import FtpError

# Everything you can import and use
__all__ = [
    # The main class you'll work with
    "FtpWire",
    # Core functionality
    "FtpClient",
    "Outcome",
    "Command",
    "Parser",
    "Reply",
    "Address",
    "Family",
    # Configuration options
    "Timeout",
    "Retry",
    "Limits",
    "Polling",
    # Authentication types
    "Basic",
    "Guest",
    # Errors
    "FtpError",
    # Package info
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__description__",
    "__url__",
]

# Make sure you're running a modern Python version
import sys

if sys.version_info < (3, 9):
    raise RuntimeError("FtpWire needs Python 3.9 or newer to work properly")

from types import MappingProxyType

# FTP reply codes - what the server is trying to tell you
codes = MappingProxyType(
    {
        # 1xx - "Hold on, I'm working on it"
        110: "Restart marker reply",
        120: "Service ready in n minutes",
        125: "Data connection already open; transfer starting",
        150: "File status okay; about to open data connection",
        # 2xx - "Success! Everything went great"
        200: "Command okay",
        202: "Command not implemented, superfluous at this site",
        211: "System status, or system help reply",
        212: "Directory status",
        213: "File status",
        214: "Help message",
        215: "NAME system type",
        220: "Service ready for new user",
        221: "Service closing control connection",
        225: "Data connection open; no transfer in progress",
        226: "Closing data connection",
        227: "Entering Passive Mode",
        228: "Entering Long Passive Mode",
        229: "Entering Extended Passive Mode",
        230: "User logged in, proceed",
        231: "User logged out; service terminated",
        232: "Logout command noted, will complete when transfer done",
        250: "Requested file action okay, completed",
        257: "PATHNAME created",
        # 3xx - "I need more info from you"
        331: "User name okay, need password",
        332: "Need account for login",
        350: "Requested file action pending further information",
        # 4xx - "Something's wrong, but we can try again"
        421: "Service not available, closing control connection",
        425: "Can't open data connection",
        426: "Connection closed; transfer aborted",
        430: "Invalid username or password",
        434: "Requested host unavailable",
        450: "Requested file action not taken",
        451: "Requested action aborted: local error in processing",
        452: "Requested action not taken; insufficient storage space",
        # 5xx - "Nope, that's not going to work"
        500: "Syntax error, command unrecognized",
        501: "Syntax error in parameters or arguments",
        502: "Command not implemented",
        503: "Bad sequence of commands",
        504: "Command not implemented for that parameter",
        530: "Not logged in",
        532: "Need account for storing files",
        550: "Requested action not taken; file unavailable",
        551: "Requested action aborted: page type unknown",
        552: "Requested file action aborted; exceeded storage allocation",
        553: "Requested action not taken; file name not allowed",
        # 6xx - protected replies (RFC 2228)
        631: "Integrity protected reply",
        632: "Confidentiality and integrity protected reply",
        633: "Confidentiality protected reply",
    }
)

# Reply code families, keyed by the hundreds digit
PRELIMINARY = 1
COMPLETION = 2
INTERMEDIATE = 3
TRANSIENT = 4
PERMANENT = 5

# Statuses the engine relies on by name
READY = 220
CLOSING = 221
PASSIVE = 227
EXTENDED_PASSIVE = 229
LOGGED_IN = 230
NEED_PASSWORD = 331
NEED_ACCOUNT = 332
NOT_IMPLEMENTED = 202


def known(status: int) -> bool:
    """Check whether a status belongs to the known reply table."""
    return status in codes


def family(status: int) -> int:
    return status // 100


def describe(status: int) -> str:
    return codes.get(status, "Unknown reply")

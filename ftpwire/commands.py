from types import MappingProxyType

# Sentinel verb for input the catalog does not recognize
UNKNOWN = "UNKNOWN"

# Standard verbs from the IANA FTP command registry
known = frozenset(
    {
        "ABOR", "ACCT", "ADAT", "ALLO", "APPE", "AUTH", "CCC", "CDUP",
        "CONF", "CWD", "DELE", "ENC", "EPRT", "EPSV", "FEAT", "HELP",
        "LANG", "LIST", "MDTM", "MIC", "MKD", "MLSD", "MLST", "MODE",
        "NLST", "NOOP", "OPTS", "PASS", "PASV", "PBSZ", "PORT", "PROT",
        "PWD", "QUIT", "REIN", "REST", "RETR", "RMD", "RNFR", "RNTO",
        "SITE", "SIZE", "SMNT", "STAT", "STOR", "STOU", "STRU", "SYST",
        "TYPE", "USER",
    }
)

# Historic verbs and the standard verbs that replaced them
aliases = MappingProxyType(
    {
        "LPRT": "EPRT",
        "LPSV": "EPSV",
        "XCUP": "CDUP",
        "XCWD": "CWD",
        "XMKD": "MKD",
        "XPWD": "PWD",
        "XRMD": "RMD",
    }
)

# Verbs whose parameters are never written to logs
secret = frozenset({"PASS", "ACCT"})

# Verbs that open a data connection before they complete
transfers = frozenset({"LIST", "NLST", "MLSD", "RETR", "STOR", "STOU", "APPE"})


def canonical(verb: str) -> str:
    """Map a verb to its standard token.

    Matching ignores case and surrounding whitespace. Historic verbs such as
    ``XPWD`` resolve to their current counterpart; anything else that is not a
    standard verb becomes :data:`UNKNOWN`.

    Args:
        verb: Raw verb as typed by the caller

    Returns:
        str: Standard verb or ``UNKNOWN``
    """
    verb = verb.strip().upper()
    if verb in known:
        return verb
    return aliases.get(verb, UNKNOWN)


def historic(verb: str) -> bool:
    return verb.strip().upper() in aliases

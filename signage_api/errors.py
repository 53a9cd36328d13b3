class DeviceAuthError(Exception):
    """The presented device credential is missing, invalid, expired or unknown.

    The message is for server logs only; responses always use the same
    generic body so a caller cannot tell which check failed.
    """


class ResolutionError(RuntimeError):
    """Active content could not be determined (e.g. the database is unreachable).

    Distinct from "nothing assigned": callers must report a server error
    instead of an empty config.
    """

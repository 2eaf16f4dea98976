"""Exception hierarchy for cleanctl.

Per-file I/O problems are never raised to callers; they are logged and
counted. Only the conditions below cross module boundaries.
"""


class CleanctlError(Exception):
    """Base exception for all cleanctl errors."""


class ScanError(CleanctlError):
    """Raised when a scan cannot continue (e.g. unreadable root)."""


class ScanCancelled(CleanctlError):
    """Raised inside a scan when cancellation has been requested.

    This is a control-flow signal, not a failure. The orchestrator turns
    it into the Cancelled state.
    """


class ConfigError(CleanctlError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""

"""Domain-specific errors for matebookctl."""


class MatebookctlError(Exception):
    """Base error for matebookctl."""


class ProfileValidationError(MatebookctlError):
    """Raised when a platform profile does not conform to schema or semantics."""


class ProfileLoadError(MatebookctlError):
    """Raised when reading a platform profile fails."""


class SettingsError(MatebookctlError):
    """Raised when the settings file is unreadable or invalid."""


class EndpointError(MatebookctlError):
    """Base endpoint error."""


class ReadError(EndpointError):
    """Raised when an endpoint value cannot be read."""


class AccessError(ReadError):
    """Raised when an endpoint path is missing or not permitted."""


class ParseError(ReadError):
    """Raised when endpoint content does not have the expected shape."""


class WriteError(EndpointError):
    """Raised when writing to an endpoint fails."""

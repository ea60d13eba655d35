class DocVersionsError(Exception):
    """Base exception class for docversions errors with context-aware message formatting."""

    default_message = "An error occurred"

    def __init__(self, message: str = None, **kwargs):
        self.message = message or self.default_message
        self.context = kwargs
        self.formatted_message = self.format_message()
        super().__init__(self.formatted_message)

    def format_message(self) -> str:
        """Format exception message properly."""
        context_details = " | ".join(
            f"{key}: {value}" for key, value in self.context.items() if value
        )
        return f"{self.message} ({context_details})" if context_details else self.message

    def __str__(self):
        return self.formatted_message


class ConfigError(DocVersionsError):
    """Raised when build settings or the current version file cannot be loaded."""

    pass


class ShellCommandError(DocVersionsError):
    """Raised when the return code of a subprocess exec call is non-zero."""

    pass


class RegistryQueryError(DocVersionsError):
    """Raised when the package registry cannot be queried or returns a malformed payload."""

    default_message = "Unable to query the package registry"


class NoStableReleaseError(DocVersionsError):
    """Raised when no parseable stable release exists to label the stable snapshot with."""

    default_message = "No stable release found in version history"


class OutputError(DocVersionsError):
    """Raised if a service record cannot be rendered or written."""

    pass


class UnparseableVersionWarning(Warning):
    """Custom warning for registry version strings that are not valid semantic versions."""

    pass

"""Error taxonomy shared by the API client, auth bridge and command layer."""


class ZohoMailError(Exception):
    """Base class for every error the CLI reports to the user.

    ``hint`` is an optional remediation line printed under the message.
    """

    hint: str | None = None

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class AuthRequired(ZohoMailError):
    """No active Zoho Mail connection on the OAuth proxy."""

    hint = "Run `zoho-mail auth login` to connect"


class CapabilityNotSupported(ZohoMailError):
    """The operation is not reachable through the configured transport."""

    def __init__(self, capability: str, *, transport: str | None = None) -> None:
        where = f" by the {transport} transport" if transport else ""
        super().__init__(f"{capability} is not supported{where}")
        self.capability = capability
        self.transport = transport


class ApiError(ZohoMailError):
    """Zoho returned a non-success status in the response envelope."""

    def __init__(self, description: str, code: int | None = None) -> None:
        super().__init__(f"API error: {description}")
        self.description = description
        self.code = code


class TransportError(ZohoMailError):
    """The helper output did not contain a usable response envelope."""


class ProcessError(ZohoMailError):
    """The external helper could not be run, failed, or timed out."""

    hint = "Make sure pdauth is installed and configured (`pdauth config`)"


class ValidationError(ZohoMailError):
    """A required argument is missing or invalid."""

"""
Exception classes for the config uploader.
"""

from typing import Optional, Sequence


class ConfigUploaderError(Exception):
    """Base exception for all config uploader errors."""
    pass


class OperationCancelled(ConfigUploaderError):
    """Raised when the operator declines a step. Not a failure."""
    pass


class ValidationError(ConfigUploaderError):
    """Raised when input validation fails."""
    pass


class AuthError(ConfigUploaderError):
    """Raised when no authenticated remote session can be established."""
    pass


class DiscoveryError(ConfigUploaderError):
    """Raised when a listing required for selection returns nothing usable."""
    pass


class DiscoveryDegraded(ConfigUploaderError):
    """Raised when listing environments fails; callers fall back to production."""
    pass


class ProvisioningDeclined(OperationCancelled):
    """Raised when the operator refuses to create a missing slot."""
    pass


class ProvisioningFailed(ConfigUploaderError):
    """Raised when the remote slot creation call fails."""
    pass


class MissingLocalFile(ConfigUploaderError):
    """Raised when the env file for the chosen environment does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Environment file {path} not found")


class WriteFailed(ConfigUploaderError):
    """
    Raised when a remote settings write fails.

    Attributes:
        completed: Descriptions of write actions that succeeded before the
            failure. They are not rolled back.
    """

    def __init__(self, message: str, completed: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.completed = list(completed or [])


class PreferenceCorrupt(ConfigUploaderError):
    """Raised when the stored preference file cannot be parsed."""
    pass


class GatewayError(ConfigUploaderError):
    """Raised when the remote platform cannot be reached or queried."""
    pass


class GatewayUnavailable(GatewayError):
    """Raised when the platform CLI executable cannot be found."""
    pass


class GatewayCommandError(GatewayError):
    """
    Raised when a platform command exits non-zero.

    Attributes:
        command: The argv that was executed
        returncode: Process exit status
        stderr: Captured standard error, stripped
    """

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"'{' '.join(self.command[:4])}' exited with {returncode}{detail}")

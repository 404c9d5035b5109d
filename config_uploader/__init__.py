"""
Azure App Config Uploader
Resolves a web app environment and pushes local .env settings to it.
"""

__version__ = "1.0.0"

from .models import Target, StoredSelection, ConfigEntry, RunOutcome, UploadState, PRODUCTION
from .exceptions import (
    ConfigUploaderError, OperationCancelled, AuthError, DiscoveryError, DiscoveryDegraded,
    ProvisioningDeclined, ProvisioningFailed, MissingLocalFile, WriteFailed,
    PreferenceCorrupt, GatewayError, ValidationError
)
from .config import Config
from .orchestrator import UploadOrchestrator

__all__ = [
    "Target",
    "StoredSelection",
    "ConfigEntry",
    "RunOutcome",
    "UploadState",
    "PRODUCTION",
    "ConfigUploaderError",
    "OperationCancelled",
    "AuthError",
    "DiscoveryError",
    "DiscoveryDegraded",
    "ProvisioningDeclined",
    "ProvisioningFailed",
    "MissingLocalFile",
    "WriteFailed",
    "PreferenceCorrupt",
    "GatewayError",
    "ValidationError",
    "Config",
    "UploadOrchestrator",
]

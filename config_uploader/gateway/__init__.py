"""
Remote Environment Gateway implementations.
"""

from .base import RemoteEnvironmentGateway
from .azure_cli import AzureCliGateway

__all__ = ['RemoteEnvironmentGateway', 'AzureCliGateway']

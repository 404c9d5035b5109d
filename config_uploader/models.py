"""
Data models for the config uploader.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Any


PRODUCTION = "production"


class UploadState(Enum):
    """States of a single upload run"""
    START = 'start'
    LOGIN_CHECK = 'login_check'
    RESOLVING = 'resolving'
    PROVISIONING = 'provisioning'
    LOADING = 'loading'
    CLASSIFYING = 'classifying'
    CONFIRMING = 'confirming'
    WRITING = 'writing'
    PERSISTING = 'persisting'
    DONE = 'done'
    ABORTED = 'aborted'


class RunOutcome(Enum):
    """How a run ended"""
    DONE = 'done'
    CANCELLED = 'cancelled'
    FAILED = 'failed'

    @property
    def exit_code(self) -> int:
        return 1 if self is RunOutcome.FAILED else 0


def is_production(environment: str) -> bool:
    return environment == PRODUCTION


def slot_for(environment: str) -> Optional[str]:
    """Slot qualifier for an environment name; production has none."""
    return None if is_production(environment) else environment


@dataclass(frozen=True)
class Target:
    """
    Where configuration will be written.

    Attributes:
        app_name: Web app name
        resource_group: Resource group holding the app
        environment: "production" or a slot name
        resolved: False while the environment is not known to exist remotely.
            Not part of equality.
    """
    app_name: str
    resource_group: str
    environment: str
    resolved: bool = field(default=True, compare=False)

    @property
    def slot(self) -> Optional[str]:
        return slot_for(self.environment)

    @property
    def is_production(self) -> bool:
        return is_production(self.environment)

    def as_resolved(self) -> "Target":
        return Target(self.app_name, self.resource_group, self.environment, resolved=True)


@dataclass(frozen=True)
class StoredSelection:
    """
    A previously successful Target plus when it was last used.

    Serialized with the keys used by existing .azure-config.json files.
    """
    app_name: str
    resource_group: str
    environment: str
    last_used: str

    @classmethod
    def from_target(cls, target: Target, now: Optional[datetime] = None) -> "StoredSelection":
        now = now or datetime.now(timezone.utc)
        return cls(
            app_name=target.app_name,
            resource_group=target.resource_group,
            environment=target.environment,
            last_used=now.isoformat().replace('+00:00', 'Z'),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredSelection":
        """
        Build from the persisted JSON mapping.

        Raises:
            KeyError, TypeError: if required fields are missing or malformed
        """
        values = {
            'app_name': data['appName'],
            'resource_group': data['resourceGroup'],
            'environment': data['environment'],
            'last_used': data['lastUsed'],
        }
        for name, value in values.items():
            if not isinstance(value, str) or not value:
                raise TypeError(f"{name} must be a non-empty string")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'appName': self.app_name,
            'resourceGroup': self.resource_group,
            'environment': self.environment,
            'lastUsed': self.last_used,
        }
        slot = slot_for(self.environment)
        if slot:
            data['slot'] = slot
        return data

    def to_target(self) -> Target:
        return Target(self.app_name, self.resource_group, self.environment)

    @property
    def last_used_at(self) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(self.last_used.replace('Z', '+00:00'))
        except ValueError:
            return None


@dataclass(frozen=True)
class ConfigEntry:
    """A single key/value pair read from a local env file"""
    key: str
    value: str

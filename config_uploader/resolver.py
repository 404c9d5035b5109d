#!/usr/bin/env python3
"""
Environment Resolver for the config uploader

Decides which app / resource group / environment a run targets:
1. Offer to reuse the stored selection (no discovery when accepted)
2. Otherwise pick resource group and app from live listings
3. Pick an environment from the live slot list, or name a slot that does
   not exist yet (only when the listing succeeded)

Resolution never creates anything. A Target whose environment is not live is
returned unresolved, and `ensure_slot_exists` handles provisioning.
"""

import re
from typing import List, Optional, Sequence, Tuple

from .exceptions import (
    DiscoveryDegraded, DiscoveryError, GatewayError, ProvisioningDeclined, ProvisioningFailed,
    ValidationError
)
from .formatting import format_stored_selection
from .gateway.base import RemoteEnvironmentGateway
from .models import PRODUCTION, StoredSelection, Target
from .operator import Operator
from .log_manager import get_logger

# Azure slot names: letters, digits and hyphens
SLOT_NAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,58}[A-Za-z0-9])?$")


def validate_slot_name(name: str) -> Optional[str]:
    """Error message for an invalid new slot name, None when valid"""
    if name == PRODUCTION:
        return None
    if not SLOT_NAME_RE.match(name):
        return "Slot names may only contain letters, digits and hyphens (max 60 characters)"
    return None


def with_production(environments: Sequence[str]) -> List[str]:
    """Environment list with "production" first and no duplicates"""
    result = [PRODUCTION]
    for name in environments:
        if name and name not in result:
            result.append(name)
    return result


class EnvironmentResolver:
    """Chooses the Target for a run"""

    def __init__(self, gateway: RemoteEnvironmentGateway, operator: Operator,
                 suggested_environments: Sequence[str] = ()):
        """
        Args:
            gateway: Remote platform access
            operator: Answers the selection questions
            suggested_environments: Slot names offered for creation when not live
        """
        self.gateway = gateway
        self.operator = operator
        self.suggested_environments = [name for name in suggested_environments if name != PRODUCTION]
        self.logger = get_logger('EnvironmentResolver', component='manager')

    async def resolve(self, stored: Optional[StoredSelection]) -> Target:
        """
        Determine the Target for this run.

        Args:
            stored: The last successful selection, if any

        Returns:
            Target; `resolved` is False when the environment is not live yet

        Raises:
            DiscoveryError: no resource groups or no apps are visible
            GatewayError: listing resource groups or apps failed
            ValidationError: the chosen environment is not live and is not a valid slot name
        """
        if stored is not None:
            if await self.operator.confirm(format_stored_selection(stored), default=True):
                self.logger.info(f"Reusing stored selection {stored.app_name}/{stored.environment}")
                return stored.to_target()

        resource_groups = await self.gateway.list_resource_groups()
        if not resource_groups:
            raise DiscoveryError("No resource groups found for the current account")
        apps = await self.gateway.list_apps()
        if not apps:
            raise DiscoveryError("No web apps found for the current account")

        resource_group = await self.operator.choose_one("Select the resource group:", resource_groups)
        app_name = await self.operator.choose_one("Select the web app:", apps)

        live, discovered = await self.discover_environments(app_name, resource_group)

        choices = list(live)
        if discovered:
            choices += [name for name in self.suggested_environments if name not in live]

        environment = await self.operator.choose_one(
            "Select the environment:", choices, default=PRODUCTION,
            allow_custom=discovered, validate=validate_slot_name
        )
        environment = environment.strip()

        resolved = environment in live
        if not resolved:
            error = validate_slot_name(environment)
            if error is not None:
                raise ValidationError(f"Invalid environment name '{environment}': {error}")
            self.logger.info(f"Environment '{environment}' is not live on {app_name}")
        return Target(app_name, resource_group, environment, resolved=resolved)

    async def discover_environments(self, app_name: str, resource_group: str) -> Tuple[List[str], bool]:
        """
        List live environments, always including production.

        Returns:
            (environments, discovery_succeeded)
        """
        try:
            names = await self.gateway.list_environments(app_name, resource_group)
        except (GatewayError, DiscoveryDegraded) as e:
            self.logger.warning(f"Environment discovery failed for {app_name}, using production only: {e}")
            return [PRODUCTION], False
        return with_production(names), True

    async def ensure_slot_exists(self, target: Target) -> Target:
        """
        Create the slot for an unresolved Target after operator consent.

        Returns:
            The resolved Target

        Raises:
            ProvisioningDeclined: the operator said no (clean cancellation)
            ProvisioningFailed: the platform rejected the creation
        """
        if target.resolved:
            return target

        create = await self.operator.confirm(
            f"Slot '{target.environment}' does not exist on {target.app_name}. Create it?",
            default=False
        )
        if not create:
            raise ProvisioningDeclined(f"Slot '{target.environment}' was not created")

        await self.operator.inform(f"Creating slot '{target.environment}'...")
        try:
            await self.gateway.create_slot(target.app_name, target.resource_group, target.environment)
        except GatewayError as e:
            raise ProvisioningFailed(f"Could not create slot '{target.environment}': {e}") from e

        self.logger.info(f"Created slot {target.environment} on {target.app_name}")
        return target.as_resolved()

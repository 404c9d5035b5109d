"""
Azure CLI implementation of the Remote Environment Gateway.

Each operation runs one or two `az` processes. Arguments are passed as an
argv list, never through a shell, so setting values need no quoting.
"""

import asyncio
import json
from typing import Any, List, Mapping, Optional, Sequence

from ..exceptions import (
    AuthError, GatewayCommandError, GatewayError, GatewayUnavailable,
    ProvisioningFailed, WriteFailed
)
from ..log_manager import get_logger
from .base import RemoteEnvironmentGateway


class AzureCliGateway(RemoteEnvironmentGateway):
    """Talks to Azure App Service through the az command line tool"""

    def __init__(self, az_path: str = "az", timeout: float = 120.0):
        """
        Args:
            az_path: az executable name or path
            timeout: Seconds to wait for each non-interactive call
        """
        self.az_path = az_path
        self.timeout = timeout
        self.logger = get_logger('AzureCliGateway', component='gateway')

    # ============================================================================
    # Process helpers
    # ============================================================================

    async def _run(self, args: Sequence[str], interactive: bool = False) -> str:
        """
        Run az with the given arguments.

        Args:
            args: Arguments after the executable
            interactive: Inherit the terminal (for login) instead of capturing output

        Returns:
            Captured stdout ("" when interactive)

        Raises:
            GatewayUnavailable: az is not installed
            GatewayCommandError: az exited non-zero
            GatewayError: the call timed out
        """
        command = [self.az_path, *args]
        pipe = None if interactive else asyncio.subprocess.PIPE
        self.logger.debug(f"Running: {' '.join(command[:5])}")

        try:
            process = await asyncio.create_subprocess_exec(*command, stdout=pipe, stderr=pipe)
        except FileNotFoundError:
            raise GatewayUnavailable(f"Azure CLI not found: {self.az_path}")

        try:
            if interactive:
                await process.wait()
                stdout, stderr = b"", b""
            else:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise GatewayError(f"'{' '.join(command[:4])}' timed out after {self.timeout:g}s")

        if process.returncode != 0:
            raise GatewayCommandError(command, process.returncode, stderr.decode(errors='replace'))
        return stdout.decode(errors='replace')

    async def _run_json(self, args: Sequence[str]) -> Any:
        output = await self._run([*args, "--output", "json"])
        try:
            return json.loads(output) if output.strip() else None
        except json.JSONDecodeError as e:
            raise GatewayError(f"az returned non-JSON output for '{' '.join(args[:3])}': {e}")

    async def _run_names(self, args: Sequence[str]) -> List[str]:
        data = await self._run_json([*args, "--query", "[].name"])
        if data is None:
            return []
        if not isinstance(data, list):
            raise GatewayError(f"Expected a list of names from '{' '.join(args[:3])}'")
        return [str(name) for name in data if name]

    @staticmethod
    def _target_args(app_name: str, resource_group: str, slot: Optional[str]) -> List[str]:
        args = ["--name", app_name, "--resource-group", resource_group]
        if slot:
            args += ["--slot", slot]
        return args

    # ============================================================================
    # Session
    # ============================================================================

    async def is_authenticated(self) -> bool:
        try:
            await self._run(["account", "show", "--output", "none"])
            return True
        except GatewayCommandError:
            return False

    async def login(self) -> None:
        self.logger.info("Starting interactive az login")
        try:
            await self._run(["login"], interactive=True)
        except GatewayError as e:
            raise AuthError(f"Azure login failed: {e}") from e

    # ============================================================================
    # Discovery
    # ============================================================================

    async def list_resource_groups(self) -> List[str]:
        return await self._run_names(["group", "list"])

    async def list_apps(self) -> List[str]:
        return await self._run_names(["webapp", "list"])

    async def list_environments(self, app_name: str, resource_group: str) -> List[str]:
        return await self._run_names(
            ["webapp", "deployment", "slot", "list", "--name", app_name, "--resource-group", resource_group]
        )

    # ============================================================================
    # Mutations
    # ============================================================================

    async def create_slot(self, app_name: str, resource_group: str, slot: str) -> None:
        self.logger.info(f"Creating slot {slot} on {app_name} ({resource_group})")
        try:
            await self._run(
                ["webapp", "deployment", "slot", "create", *self._target_args(app_name, resource_group, slot),
                 "--output", "none"]
            )
        except GatewayError as e:
            raise ProvisioningFailed(f"Could not create slot '{slot}': {e}") from e

    async def write_settings(self, app_name: str, resource_group: str,
                             slot: Optional[str], entries: Mapping[str, str]) -> None:
        pairs = [f"{key}={value}" for key, value in entries.items()]
        self.logger.info(f"Setting {len(pairs)} app settings on {app_name} slot={slot or 'production'}")
        try:
            await self._run(
                ["webapp", "config", "appsettings", "set", *self._target_args(app_name, resource_group, slot),
                 "--settings", *pairs, "--output", "none"]
            )
        except GatewayError as e:
            raise WriteFailed(f"Failed to write app settings: {e}") from e

    async def mark_slot_settings(self, app_name: str, resource_group: str,
                                 slot: Optional[str], keys: Sequence[str]) -> None:
        """
        Re-apply the current remote values of `keys` as slot settings.

        az only accepts slot settings as KEY=VALUE, so the values are read back
        from the target first.
        """
        target = self._target_args(app_name, resource_group, slot)
        try:
            current = await self._run_json(["webapp", "config", "appsettings", "list", *target])
        except GatewayError as e:
            raise WriteFailed(f"Failed to read app settings before marking slot settings: {e}") from e

        values = {item.get("name"): item.get("value") for item in current or [] if isinstance(item, dict)}
        missing = [key for key in keys if key not in values]
        if missing:
            raise WriteFailed(f"Cannot mark missing settings as slot settings: {', '.join(missing)}")

        pairs = [f"{key}={values[key] if values[key] is not None else ''}" for key in keys]
        self.logger.info(f"Marking {len(pairs)} slot settings on {app_name} slot={slot or 'production'}")
        try:
            await self._run(
                ["webapp", "config", "appsettings", "set", *target, "--slot-settings", *pairs, "--output", "none"]
            )
        except GatewayError as e:
            raise WriteFailed(f"Failed to mark slot settings: {e}") from e

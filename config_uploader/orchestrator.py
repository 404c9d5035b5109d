#!/usr/bin/env python3
"""
Upload Orchestrator for the config uploader

Runs one upload as a linear state machine:

    start -> login_check -> resolving -> [provisioning] -> loading
          -> [classifying] -> confirming -> writing -> persisting -> done

Any state that needs operator consent or a remote success can end in
`aborted`. Operator declines end the run as cancelled (exit 0); every other
error ends it as failed (exit 1). The stored selection is read once while
resolving and written once after both writes succeed. Nothing is retried.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, FrozenSet, List, Optional

from .classifier import SlotSettingClassifier
from .exceptions import ConfigUploaderError, OperationCancelled, WriteFailed
from .formatting import format_upload_summary
from .gateway.base import RemoteEnvironmentGateway
from .local_source import LocalConfigSource
from .models import ConfigEntry, RunOutcome, StoredSelection, Target, UploadState
from .operator import Operator
from .preferences import PreferenceStore
from .resolver import EnvironmentResolver
from .write_plan import WritePlan
from .log_manager import get_logger, get_logging_manager


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UploadOrchestrator:
    """Drives a single confirmed upload of local settings to the remote app"""

    def __init__(self,
                 gateway: RemoteEnvironmentGateway,
                 operator: Operator,
                 preferences: PreferenceStore,
                 source: LocalConfigSource,
                 resolver: EnvironmentResolver,
                 classifier: SlotSettingClassifier,
                 clock: Callable[[], datetime] = _utc_now):
        """
        Args:
            gateway: Remote platform access
            operator: Answers questions and receives status messages
            preferences: Stored selection file
            source: Local env file reader
            resolver: Chooses the Target
            classifier: Chooses slot-sticky keys
            clock: Timestamp source for the stored selection
        """
        self.gateway = gateway
        self.operator = operator
        self.preferences = preferences
        self.source = source
        self.resolver = resolver
        self.classifier = classifier
        self.clock = clock
        self.logger = get_logger('UploadOrchestrator', component='manager')

        self.state = UploadState.START
        self.history: List[UploadState] = [UploadState.START]
        self.target: Optional[Target] = None
        self.entries: List[ConfigEntry] = []
        self.slot_settings: FrozenSet[str] = frozenset()
        self.plan: Optional[WritePlan] = None

    def _enter(self, state: UploadState):
        self.logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def run(self) -> RunOutcome:
        """
        Execute the whole pipeline.

        Returns:
            RunOutcome.DONE, CANCELLED or FAILED
        """
        try:
            await self._login_check()
            await self._resolve()
            await self._load()
            await self._classify()
            await self._confirm()
            await self._write()
            await self._persist()
        except OperationCancelled as e:
            self.logger.info(f"Run cancelled in {self.state.value}: {e}")
            self._enter(UploadState.ABORTED)
            await self.operator.inform(str(e) or "Upload cancelled")
            return RunOutcome.CANCELLED
        except ConfigUploaderError as e:
            self.logger.error(f"Run failed in {self.state.value}: {e}", exc_info=e.__cause__ is not None)
            failed_in = self.state
            self._enter(UploadState.ABORTED)
            await self.operator.warn(self._failure_message(failed_in, e))
            return RunOutcome.FAILED

        self._enter(UploadState.DONE)
        await self.operator.inform("Configuration uploaded successfully!")
        return RunOutcome.DONE

    @staticmethod
    def _failure_message(state: UploadState, error: ConfigUploaderError) -> str:
        if state == UploadState.WRITING:
            message = f"Failed to upload configuration: {error}"
            if isinstance(error, WriteFailed) and error.completed:
                message += f"\nAlready applied (not rolled back): {'; '.join(error.completed)}"
            return message
        return f"Error: {error}"

    # ============================================================================
    # States
    # ============================================================================

    async def _login_check(self):
        self._enter(UploadState.LOGIN_CHECK)
        await self.operator.inform("Checking Azure login status...")
        if await self.gateway.is_authenticated():
            return
        await self.operator.inform("Not logged in to Azure. Please login first.")
        await self.gateway.login()

    async def _resolve(self):
        self._enter(UploadState.RESOLVING)
        stored = self.preferences.read()
        target = await self.resolver.resolve(stored)

        if not target.resolved:
            self._enter(UploadState.PROVISIONING)
            target = await self.resolver.ensure_slot_exists(target)

        self.target = target
        get_logging_manager().log_with_context(self.logger, logging.INFO, "Target resolved", {
            'app': target.app_name,
            'resource_group': target.resource_group,
            'environment': target.environment,
            'reused': stored is not None and stored.to_target() == target,
        })

    async def _load(self):
        self._enter(UploadState.LOADING)
        self.entries = self.source.load_entries(self.target.environment)

    async def _classify(self):
        if self.target.is_production:
            self.slot_settings = frozenset()
            return
        self._enter(UploadState.CLASSIFYING)
        keys = {entry.key for entry in self.entries}
        self.slot_settings = await self.classifier.classify(self.target, keys)
        self.logger.info(f"Slot settings: {', '.join(sorted(self.slot_settings)) or '(none)'}")

    async def _confirm(self):
        self._enter(UploadState.CONFIRMING)
        await self.operator.inform(format_upload_summary(self.target.environment, self.entries))
        if not await self.operator.confirm("Proceed with upload?", default=False):
            raise OperationCancelled("Upload cancelled")

    async def _write(self):
        self._enter(UploadState.WRITING)
        await self.operator.inform("Uploading configuration...")
        entries = {entry.key: entry.value for entry in self.entries}
        self.plan = WritePlan.for_upload(self.target, entries, self.slot_settings)
        try:
            await self.plan.execute(self.gateway)
        finally:
            get_logging_manager().log_with_context(
                self.logger, logging.INFO, "Write plan finished", self.plan.summary()
            )

    async def _persist(self):
        self._enter(UploadState.PERSISTING)
        selection = StoredSelection.from_target(self.target, now=self.clock())
        try:
            self.preferences.write(selection)
        except OSError as e:
            # The upload itself succeeded; only the remembered selection is lost
            self.logger.error(f"Could not save selection to {self.preferences.path}: {e}")
            await self.operator.warn(f"Settings were uploaded but the selection could not be saved: {e}")

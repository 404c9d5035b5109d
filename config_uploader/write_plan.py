#!/usr/bin/env python3
"""
Write plan for the config uploader

The remote store applies settings one call at a time with no transactions.
The plan runs its actions strictly in order and stops at the first failure.
Actions that already completed are reported, never undone.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional

from .exceptions import WriteFailed
from .gateway.base import RemoteEnvironmentGateway
from .models import Target
from .log_manager import get_logger


class ActionStatus(Enum):
    """Status of an action"""
    PENDING = 'pending'
    EXECUTING = 'executing'
    COMPLETED = 'completed'
    FAILED = 'failed'
    SKIPPED = 'skipped'


@dataclass
class ActionResult:
    """Result of executing an action"""
    success: bool
    action_type: str
    target: str
    message: Optional[str] = None
    error: Optional[str] = None


class WriteAction(ABC):
    """Base class for remote write actions"""

    action_type = 'write'

    def __init__(self, target: Target):
        self.target = target
        self.status = ActionStatus.PENDING
        self.result: Optional[ActionResult] = None
        self.error: Optional[Exception] = None

    @property
    def target_label(self) -> str:
        return f"{self.target.app_name}/{self.target.environment}"

    @abstractmethod
    async def execute(self, gateway: RemoteEnvironmentGateway) -> ActionResult:
        """Perform the remote call; raise on failure"""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description of the action"""


class ApplySettingsAction(WriteAction):
    """Write every local entry as an app setting"""

    action_type = 'apply_settings'

    def __init__(self, target: Target, entries: Mapping[str, str]):
        super().__init__(target)
        self.entries = dict(entries)

    async def execute(self, gateway: RemoteEnvironmentGateway) -> ActionResult:
        await gateway.write_settings(
            self.target.app_name, self.target.resource_group, self.target.slot, self.entries
        )
        return ActionResult(
            success=True,
            action_type=self.action_type,
            target=self.target_label,
            message=f"Applied {len(self.entries)} settings"
        )

    def describe(self) -> str:
        return f"Apply {len(self.entries)} settings to {self.target_label}"


class MarkSlotSettingsAction(WriteAction):
    """Mark keys as sticky to the target slot"""

    action_type = 'mark_slot_settings'

    def __init__(self, target: Target, keys: FrozenSet[str]):
        super().__init__(target)
        self.keys = sorted(keys)

    async def execute(self, gateway: RemoteEnvironmentGateway) -> ActionResult:
        await gateway.mark_slot_settings(
            self.target.app_name, self.target.resource_group, self.target.slot, self.keys
        )
        return ActionResult(
            success=True,
            action_type=self.action_type,
            target=self.target_label,
            message=f"Marked slot settings: {', '.join(self.keys)}"
        )

    def describe(self) -> str:
        return f"Mark {', '.join(self.keys)} as slot settings on {self.target_label}"


class WritePlan:
    """Ordered remote writes for one upload"""

    def __init__(self):
        self.actions: List[WriteAction] = []
        self.results: List[ActionResult] = []
        self.logger = get_logger('WritePlan', component='manager')

    @classmethod
    def for_upload(cls, target: Target, entries: Mapping[str, str],
                   slot_settings: FrozenSet[str]) -> "WritePlan":
        """Settings first, then slot markers when there are any"""
        plan = cls()
        plan.add_action(ApplySettingsAction(target, entries))
        if slot_settings:
            plan.add_action(MarkSlotSettingsAction(target, slot_settings))
        return plan

    def add_action(self, action: WriteAction):
        self.actions.append(action)
        self.logger.debug(f"Added {action.__class__.__name__}: {action.describe()}")

    def describe(self) -> List[str]:
        return [action.describe() for action in self.actions]

    def completed(self) -> List[str]:
        return [a.describe() for a in self.actions if a.status == ActionStatus.COMPLETED]

    async def execute(self, gateway: RemoteEnvironmentGateway) -> List[ActionResult]:
        """
        Run every action in order.

        Returns:
            Results of all actions

        Raises:
            WriteFailed: the first failing action; later actions are skipped
        """
        self.results = []
        self.logger.info(f"Executing write plan with {len(self.actions)} actions")

        for index, action in enumerate(self.actions):
            action.status = ActionStatus.EXECUTING
            try:
                result = await action.execute(gateway)
            except Exception as e:
                action.status = ActionStatus.FAILED
                action.error = e
                action.result = ActionResult(
                    success=False,
                    action_type=action.action_type,
                    target=action.target_label,
                    error=str(e)
                )
                self.results.append(action.result)
                for later in self.actions[index + 1:]:
                    later.status = ActionStatus.SKIPPED

                completed = self.completed()
                self.logger.error(f"Action failed: {action.describe()}: {e}")
                if completed:
                    self.logger.error(f"Not rolled back: {'; '.join(completed)}")
                if isinstance(e, WriteFailed):
                    e.completed = completed
                    raise
                raise WriteFailed(f"{action.describe()} failed: {e}", completed) from e

            action.status = ActionStatus.COMPLETED
            action.result = result
            self.results.append(result)
            if result.message:
                self.logger.info(result.message)

        self.logger.info(f"Write plan complete: {len(self.results)} executed")
        return self.results

    def summary(self) -> Dict[str, Dict[str, str]]:
        return {action.action_type: {'status': action.status.value} for action in self.actions}

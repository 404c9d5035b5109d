"""
Shared pytest fixtures for config uploader tests.
Provides a scripted operator, an in-memory gateway and a temporary project.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Keep log files out of the real home directory
os.environ['CONFIG_UPLOADER_HOME'] = tempfile.mkdtemp(prefix='config-uploader-tests-')

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config_uploader.classifier import SlotSettingClassifier
from config_uploader.exceptions import AuthError, GatewayCommandError
from config_uploader.gateway.base import RemoteEnvironmentGateway
from config_uploader.local_source import LocalConfigSource
from config_uploader.operator import Operator
from config_uploader.orchestrator import UploadOrchestrator
from config_uploader.preferences import PreferenceStore
from config_uploader.resolver import EnvironmentResolver


DEFAULT_SLOT_KEYS = ["NODE_ENV", "MONGODB_URI", "API_KEY"]


class ScriptedOperator(Operator):
    """Operator that answers from a fixed script and records every question"""

    def __init__(self, answers: Optional[Sequence[Any]] = None):
        self.answers = list(answers or [])
        self.questions: List[Dict[str, Any]] = []
        self.messages: List[str] = []
        self.warnings: List[str] = []

    def _next(self, kind: str, message: str, **details) -> Any:
        self.questions.append({'kind': kind, 'message': message, **details})
        if not self.answers:
            raise AssertionError(f"Unexpected {kind} question: {message}")
        return self.answers.pop(0)

    async def confirm(self, message, default):
        answer = self._next('confirm', message, default=default)
        assert isinstance(answer, bool), f"Expected bool answer for: {message}"
        return answer

    async def choose_one(self, message, choices, default=None, allow_custom=False, validate=None):
        answer = self._next('choose_one', message, choices=list(choices), default=default,
                            allow_custom=allow_custom)
        assert answer in choices or allow_custom, f"{answer!r} not offered for: {message}"
        return answer

    async def choose_many(self, message, choices):
        answer = self._next('choose_many', message, choices=list(choices))
        return list(answer)

    async def inform(self, message):
        self.messages.append(message)

    async def warn(self, message):
        self.warnings.append(message)

    def asked(self, kind: str) -> List[Dict[str, Any]]:
        return [q for q in self.questions if q['kind'] == kind]


class FakeGateway(RemoteEnvironmentGateway):
    """In-memory gateway that records calls"""

    def __init__(self, resource_groups=("bar",), apps=("foo",), environments=("production",)):
        self.authenticated = True
        self.login_succeeds = True
        self.resource_groups = list(resource_groups)
        self.apps = list(apps)
        self.environments = list(environments)
        self.list_environments_error: Optional[Exception] = None
        self.create_slot_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.mark_error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def calls_to(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def is_authenticated(self):
        self.calls.append(('is_authenticated',))
        return self.authenticated

    async def login(self):
        self.calls.append(('login',))
        if not self.login_succeeds:
            raise AuthError("Azure login failed")
        self.authenticated = True

    async def list_resource_groups(self):
        self.calls.append(('list_resource_groups',))
        return list(self.resource_groups)

    async def list_apps(self):
        self.calls.append(('list_apps',))
        return list(self.apps)

    async def list_environments(self, app_name, resource_group):
        self.calls.append(('list_environments', app_name, resource_group))
        if self.list_environments_error:
            raise self.list_environments_error
        return list(self.environments)

    async def create_slot(self, app_name, resource_group, slot):
        self.calls.append(('create_slot', app_name, resource_group, slot))
        if self.create_slot_error:
            raise self.create_slot_error
        self.environments.append(slot)

    async def write_settings(self, app_name, resource_group, slot, entries):
        self.calls.append(('write_settings', app_name, resource_group, slot, dict(entries)))
        if self.write_error:
            raise self.write_error

    async def mark_slot_settings(self, app_name, resource_group, slot, keys):
        self.calls.append(('mark_slot_settings', app_name, resource_group, slot, list(keys)))
        if self.mark_error:
            raise self.mark_error


@pytest.fixture
def project_dir(tmp_path):
    """Empty project directory"""
    directory = tmp_path / "project"
    directory.mkdir()
    return directory


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def write_env(project_dir):
    """Write an env file into the project directory"""
    def _write(name: str, content: str) -> Path:
        path = project_dir / name
        path.write_text(content, encoding='utf-8')
        return path
    return _write


@pytest.fixture
def make_orchestrator(project_dir, gateway):
    """Build an orchestrator around a scripted operator"""
    def _make(answers, suggested=("staging", "development"), slot_keys=DEFAULT_SLOT_KEYS):
        operator = ScriptedOperator(answers)
        orchestrator = UploadOrchestrator(
            gateway=gateway,
            operator=operator,
            preferences=PreferenceStore(project_dir / ".azure-config.json"),
            source=LocalConfigSource(project_dir),
            resolver=EnvironmentResolver(gateway, operator, suggested_environments=suggested),
            classifier=SlotSettingClassifier(operator, slot_keys),
        )
        return orchestrator, operator
    return _make


@pytest.fixture
def command_error():
    """A failed az command, as the CLI adapter reports it"""
    return GatewayCommandError(["az", "webapp", "config", "appsettings", "set"], 1, "Forbidden")



"""
Tests for the Azure CLI gateway with the az process mocked out.
"""

import asyncio
import json
from unittest.mock import patch

import pytest

from config_uploader.exceptions import (
    AuthError, GatewayCommandError, GatewayError, GatewayUnavailable, ProvisioningFailed, WriteFailed
)
from config_uploader.gateway.azure_cli import AzureCliGateway


class FakeProcess:
    """Stands in for asyncio.subprocess.Process"""

    def __init__(self, stdout=b"", stderr=b"", returncode=0, hang=False):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.hang = hang
        self.killed = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(10)
        return self._stdout, self._stderr

    async def wait(self):
        return self.returncode

    def kill(self):
        self.killed = True


class ProcessRecorder:
    """Replacement for create_subprocess_exec that replays queued processes"""

    def __init__(self, *processes):
        self.processes = list(processes)
        self.commands = []
        self.kwargs = []

    async def __call__(self, *command, **kwargs):
        self.commands.append(list(command))
        self.kwargs.append(kwargs)
        return self.processes.pop(0)


def json_process(data, returncode=0):
    return FakeProcess(stdout=json.dumps(data).encode(), returncode=returncode)


def patched(recorder):
    return patch('config_uploader.gateway.azure_cli.asyncio.create_subprocess_exec', recorder)


class TestSession:

    @pytest.mark.asyncio
    async def test_authenticated_when_account_show_succeeds(self):
        recorder = ProcessRecorder(FakeProcess())
        with patched(recorder):
            assert await AzureCliGateway().is_authenticated() is True
        assert recorder.commands[0][:3] == ["az", "account", "show"]

    @pytest.mark.asyncio
    async def test_not_authenticated_when_account_show_fails(self):
        recorder = ProcessRecorder(FakeProcess(returncode=1, stderr=b"Please run 'az login'"))
        with patched(recorder):
            assert await AzureCliGateway().is_authenticated() is False

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        async def not_found(*args, **kwargs):
            raise FileNotFoundError("az")

        with patched(not_found):
            with pytest.raises(GatewayUnavailable):
                await AzureCliGateway(az_path="/opt/az").is_authenticated()

    @pytest.mark.asyncio
    async def test_login_inherits_terminal(self):
        recorder = ProcessRecorder(FakeProcess())
        with patched(recorder):
            await AzureCliGateway().login()
        assert recorder.commands[0] == ["az", "login"]
        assert recorder.kwargs[0] == {'stdout': None, 'stderr': None}

    @pytest.mark.asyncio
    async def test_login_failure_is_auth_error(self):
        recorder = ProcessRecorder(FakeProcess(returncode=1))
        with patched(recorder):
            with pytest.raises(AuthError):
                await AzureCliGateway().login()


class TestDiscovery:

    @pytest.mark.asyncio
    async def test_list_resource_groups(self):
        recorder = ProcessRecorder(json_process(["rg1", "rg2"]))
        with patched(recorder):
            assert await AzureCliGateway().list_resource_groups() == ["rg1", "rg2"]
        assert recorder.commands[0] == ["az", "group", "list", "--query", "[].name", "--output", "json"]

    @pytest.mark.asyncio
    async def test_list_apps(self):
        recorder = ProcessRecorder(json_process(["foo"]))
        with patched(recorder):
            assert await AzureCliGateway().list_apps() == ["foo"]
        assert recorder.commands[0][:3] == ["az", "webapp", "list"]

    @pytest.mark.asyncio
    async def test_list_environments_queries_slots(self):
        recorder = ProcessRecorder(json_process(["staging"]))
        with patched(recorder):
            assert await AzureCliGateway().list_environments("foo", "bar") == ["staging"]
        command = recorder.commands[0]
        assert command[:5] == ["az", "webapp", "deployment", "slot", "list"]
        assert command[command.index("--name") + 1] == "foo"
        assert command[command.index("--resource-group") + 1] == "bar"

    @pytest.mark.asyncio
    async def test_non_json_output(self):
        recorder = ProcessRecorder(FakeProcess(stdout=b"not json"))
        with patched(recorder):
            with pytest.raises(GatewayError):
                await AzureCliGateway().list_apps()

    @pytest.mark.asyncio
    async def test_command_failure_carries_stderr(self):
        recorder = ProcessRecorder(FakeProcess(returncode=3, stderr=b"ResourceGroupNotFound\n"))
        with patched(recorder):
            with pytest.raises(GatewayCommandError) as exc_info:
                await AzureCliGateway().list_environments("foo", "bar")
        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "ResourceGroupNotFound"

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        process = FakeProcess(hang=True)
        recorder = ProcessRecorder(process)
        with patched(recorder):
            with pytest.raises(GatewayError, match="timed out"):
                await AzureCliGateway(timeout=0.01).list_apps()
        assert process.killed


class TestMutations:

    @pytest.mark.asyncio
    async def test_create_slot(self):
        recorder = ProcessRecorder(FakeProcess())
        with patched(recorder):
            await AzureCliGateway().create_slot("foo", "bar", "staging")
        command = recorder.commands[0]
        assert command[:5] == ["az", "webapp", "deployment", "slot", "create"]
        assert command[command.index("--slot") + 1] == "staging"

    @pytest.mark.asyncio
    async def test_create_slot_failure(self):
        recorder = ProcessRecorder(FakeProcess(returncode=1, stderr=b"Conflict"))
        with patched(recorder):
            with pytest.raises(ProvisioningFailed, match="Conflict"):
                await AzureCliGateway().create_slot("foo", "bar", "staging")

    @pytest.mark.asyncio
    async def test_write_settings_passes_pairs_without_shell_quoting(self):
        recorder = ProcessRecorder(FakeProcess())
        with patched(recorder):
            await AzureCliGateway().write_settings("foo", "bar", None, {"A": "1", "MSG": "hello world"})
        command = recorder.commands[0]
        assert command[:5] == ["az", "webapp", "config", "appsettings", "set"]
        assert "--slot" not in command
        start = command.index("--settings") + 1
        assert command[start:start + 2] == ["A=1", "MSG=hello world"]

    @pytest.mark.asyncio
    async def test_write_settings_on_slot(self):
        recorder = ProcessRecorder(FakeProcess())
        with patched(recorder):
            await AzureCliGateway().write_settings("foo", "bar", "staging", {"A": "1"})
        command = recorder.commands[0]
        assert command[command.index("--slot") + 1] == "staging"

    @pytest.mark.asyncio
    async def test_write_settings_failure(self):
        recorder = ProcessRecorder(FakeProcess(returncode=1, stderr=b"Forbidden"))
        with patched(recorder):
            with pytest.raises(WriteFailed):
                await AzureCliGateway().write_settings("foo", "bar", None, {"A": "1"})

    @pytest.mark.asyncio
    async def test_mark_slot_settings_reuses_remote_values(self):
        remote = [
            {"name": "NODE_ENV", "value": "staging", "slotSetting": False},
            {"name": "API_KEY", "value": "xyz", "slotSetting": False},
            {"name": "PORT", "value": "80", "slotSetting": False},
        ]
        recorder = ProcessRecorder(json_process(remote), FakeProcess())
        with patched(recorder):
            await AzureCliGateway().mark_slot_settings("foo", "bar", "staging", ["API_KEY", "NODE_ENV"])

        assert recorder.commands[0][:5] == ["az", "webapp", "config", "appsettings", "list"]
        command = recorder.commands[1]
        start = command.index("--slot-settings") + 1
        assert command[start:start + 2] == ["API_KEY=xyz", "NODE_ENV=staging"]
        assert "--settings" not in command

    @pytest.mark.asyncio
    async def test_mark_slot_settings_for_missing_key(self):
        recorder = ProcessRecorder(json_process([{"name": "A", "value": "1"}]))
        with patched(recorder):
            with pytest.raises(WriteFailed, match="MISSING"):
                await AzureCliGateway().mark_slot_settings("foo", "bar", "staging", ["MISSING"])
        assert len(recorder.commands) == 1

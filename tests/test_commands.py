"""Tests for command registration and execution."""

import pytest

from exthost.extensions import ExtensionLifecycle

from conftest import RecordingExtension, make_manifest


class Calculator(ExtensionLifecycle):

    async def on_activate(self):
        ui = self.context.ui
        ui.register_command("add", "Add", lambda a, b: a + b)
        ui.register_command("echo", "Echo", self.echo)
        ui.register_command("fail", "Fail", self.fail)

    async def echo(self, value):
        return value

    def fail(self):
        raise ValueError("bad input")


COMMAND_PERMISSIONS = ["ui.render", "ui.command"]


@pytest.fixture
def calculator_manifest():
    return make_manifest("calculator", COMMAND_PERMISSIONS)


class TestExecuteCommand:
    """Test execute_extension_command."""

    @pytest.mark.asyncio
    async def test_sync_handler(self, host, calculator_manifest):
        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")

        result = await host.execute_extension_command("calculator", "add", 2, 3)

        assert result.success is True
        assert result.data == 5
        assert result.duration >= 0

    @pytest.mark.asyncio
    async def test_async_handler(self, host, calculator_manifest):
        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")

        result = await host.execute_extension_command("calculator", "echo", {"x": 1})
        assert result.to_dict()["data"] == {"x": 1}

    @pytest.mark.asyncio
    async def test_handler_error_is_captured(self, host, calculator_manifest):
        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")

        result = await host.execute_extension_command("calculator", "fail")

        assert result.success is False
        assert result.error == "bad input"
        assert "data" not in result.to_dict()

    @pytest.mark.asyncio
    async def test_unknown_extension(self, host):
        result = await host.execute_extension_command("ghost", "run")
        assert result.success is False
        assert "not found" in result.error

    @pytest.mark.asyncio
    async def test_unknown_command(self, host, calculator_manifest):
        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")

        result = await host.execute_extension_command("calculator", "divide", 1, 0)
        assert result.success is False
        assert "Command 'divide' not found" in result.error

    @pytest.mark.asyncio
    async def test_requires_ui_command(self, host):
        await host.register_extension(make_manifest(), RecordingExtension())
        host.register_command("demo-ext", "run", "Run", lambda: "ran")

        result = await host.execute_extension_command("demo-ext", "run")

        assert result.success is False
        assert "ui.command" in result.error

    @pytest.mark.asyncio
    async def test_commands_gone_after_deactivate(self, host, calculator_manifest):
        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")
        await host.deactivate_extension("calculator")

        result = await host.execute_extension_command("calculator", "add", 1, 1)
        assert result.success is False

    @pytest.mark.asyncio
    async def test_registration_events(self, host, calculator_manifest):
        registered = []
        host.events.on("command:registered", lambda name, command_id, title: registered.append(command_id))

        await host.register_extension(calculator_manifest, Calculator)
        await host.activate_extension("calculator")

        assert registered == ["add", "echo", "fail"]

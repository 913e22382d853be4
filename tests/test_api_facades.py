"""Tests for the permission-checked extension API."""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest

from exthost.extensions import CapabilityUnavailableError, PermissionDeniedError, WorkspacePathError
from exthost.extensions.api import ChatOptions, SearchOptions, WebviewOptions
from exthost.services.editor import CursorPosition
from exthost.services.git import GitStatus
from exthost.services.http import HTTPResponse

from conftest import RecordingExtension, make_manifest


async def api_for(host, permissions, name="demo-ext"):
    await host.register_extension(make_manifest(name, permissions), RecordingExtension())
    return host.get_extension_api(name)


class TestPermissionEnforcement:
    """Checks run before any side effect."""

    @pytest.mark.asyncio
    async def test_denied_write_never_touches_filesystem(self, host, workspace):
        api = await api_for(host, ["workspace.read"])

        with patch.object(host.services.filesystem, "write_text", new=AsyncMock()) as write:
            with pytest.raises(PermissionDeniedError) as exc_info:
                await api.workspace.write_file("notes.txt", "hi")

        write.assert_not_called()
        assert exc_info.value.permission == "workspace.write"
        assert not (workspace / "notes.txt").exists()

    @pytest.mark.asyncio
    async def test_facades_fail_after_unregister(self, host):
        api = await api_for(host, ["ui.render", "workspace.read"])
        await host.unregister_extension("demo-ext")

        with pytest.raises(PermissionDeniedError, match="No permissions found"):
            await api.workspace.read_file("README.md")
        with pytest.raises(PermissionDeniedError):
            api.events.emit("anything")
        with pytest.raises(PermissionDeniedError):
            api.logger.info("hello")

    @pytest.mark.asyncio
    async def test_stream_chat_checks_on_call(self, host):
        api = await api_for(host, ["ui.render"])
        with pytest.raises(PermissionDeniedError):
            api.ai.stream_chat("hello")


class TestWorkspaceAPI:

    @pytest.mark.asyncio
    async def test_read_write_list(self, host, workspace):
        api = await api_for(host, ["workspace.read", "workspace.write"])

        await api.workspace.write_file("docs/notes.txt", "first")
        assert (workspace / "docs" / "notes.txt").read_text() == "first"
        assert await api.workspace.read_file("docs/notes.txt") == "first"

        names = [item.name for item in await api.workspace.list_directory(".")]
        assert names == ["README.md", "docs", "src"]

        info = await api.workspace.get_info("docs/notes.txt")
        assert info.is_file() and info.size == 5

    @pytest.mark.asyncio
    async def test_write_emits_created_then_changed(self, host):
        api = await api_for(host, ["workspace.write"])
        seen = []
        host.events.on("workspace:file:created", lambda change: seen.append(change.type))
        host.events.on("workspace:file:changed", lambda change: seen.append(change.type))

        await api.workspace.write_file("a.txt", "1")
        await api.workspace.write_file("a.txt", "2")
        assert seen == ["created", "changed"]

    @pytest.mark.asyncio
    async def test_delete_and_mkdir(self, host, workspace):
        api = await api_for(host, ["workspace.fileSystem"])
        deleted = []
        host.events.on("workspace:file:deleted", lambda change: deleted.append(change.path))

        await api.workspace.create_directory("build/out")
        assert (workspace / "build" / "out").is_dir()
        await api.workspace.delete("build")
        assert not (workspace / "build").exists()
        assert deleted == ["build"]

    @pytest.mark.asyncio
    async def test_paths_cannot_escape(self, host):
        api = await api_for(host, ["workspace.read"])
        with pytest.raises(WorkspacePathError):
            await api.workspace.read_file("../secret.txt")

    @pytest.mark.asyncio
    async def test_search(self, host):
        api = await api_for(host, ["workspace.read"])

        results = await api.workspace.search("hello")
        assert [(r.path, r.line) for r in results] == [("README.md", 2), ("src/app.py", 1), ("src/app.py", 2)]

        sensitive = await api.workspace.search("Hello", SearchOptions(case_sensitive=True))
        assert [(r.path, r.line, r.column) for r in sensitive] == [("src/app.py", 2, 13)]

        python_only = await api.workspace.search("hello", SearchOptions(include="*.py", max_results=1))
        assert [(r.path, r.line) for r in python_only] == [("src/app.py", 1)]

    @pytest.mark.asyncio
    async def test_watch_filters_by_path(self, host):
        api = await api_for(host, ["workspace.read", "workspace.write"])
        changes = []
        handle = api.workspace.watch(["src"], lambda change: changes.append(change.path))

        await api.workspace.write_file("src/new.py", "x = 1\n")
        await api.workspace.write_file("README.md", "changed")
        assert changes == ["src/new.py"]

        handle.dispose()
        await api.workspace.write_file("src/other.py", "")
        assert changes == ["src/new.py"]
        assert host.resources.subscriptions == {}


class TestEditorAPI:

    @pytest.mark.asyncio
    async def test_read_and_edit(self, host):
        api = await api_for(host, ["editor.read", "editor.write"])
        host.services.editor.open_document("main.py", "print('a')\nprint('b')\n", "python")

        host.services.editor.set_cursor(CursorPosition(1, 0))
        assert api.editor.get_current_line() == "print('b')"

        await api.editor.insert_text("# ")
        assert api.editor.get_active_editor().text == "print('a')\n# print('b')\n"
        assert await api.editor.find_replace("print", "log") is True
        assert api.editor.get_active_editor().text == "log('a')\n# log('b')\n"

    @pytest.mark.asyncio
    async def test_text_change_subscription_is_cleaned_up(self, host):
        api = await api_for(host, ["ui.render", "editor.read", "editor.write"])
        host.services.editor.open_document("main.py", "")
        changes = []
        api.editor.on_text_change(lambda change: changes.append(change.inserted))

        await api.editor.insert_text("abc")
        assert changes == ["abc"]

        await host.activate_extension("demo-ext")
        await host.deactivate_extension("demo-ext")
        await api.editor.insert_text("def")
        assert changes == ["abc"]

    @pytest.mark.asyncio
    async def test_read_only_extension_cannot_edit(self, host):
        api = await api_for(host, ["editor.read"])
        host.services.editor.open_document("main.py", "x")
        with pytest.raises(PermissionDeniedError):
            await api.editor.insert_text("y")
        assert api.editor.get_active_editor().text == "x"


class TestTerminalAPI:

    @pytest.mark.asyncio
    async def test_execute_and_history(self, host):
        api = await api_for(host, ["terminal.execute", "terminal.read"])
        output = []
        api.terminal.on_output(lambda event: output.append(event.data))

        result = await api.terminal.execute("echo hello")

        assert result.exit_code == 0
        assert result.output.strip() == "hello"
        assert output == ["hello\n"]
        assert [entry.command for entry in api.terminal.get_history()] == ["echo hello"]

    @pytest.mark.asyncio
    async def test_history_requires_read(self, host):
        api = await api_for(host, ["terminal.execute"])
        with pytest.raises(PermissionDeniedError):
            api.terminal.get_history()


class TestAIAPI:

    @pytest.mark.asyncio
    async def test_chat_and_generate(self, host, ai_provider):
        api = await api_for(host, ["ai.request"])

        reply = await api.ai.chat("hi", ChatOptions(context=["file.py"]))
        assert reply.role == "assistant"
        assert "print('hi')" in reply.content

        assert await api.ai.generate_code("say hi", "python") == "print('hi')"
        assert len(ai_provider.prompts) == 2

    @pytest.mark.asyncio
    async def test_stream_chat(self, host, ai_provider):
        ai_provider.response = "first\n\nsecond"
        api = await api_for(host, ["ai.request"])

        chunks = [message.content async for message in api.ai.stream_chat("hi")]
        assert "".join(chunks) == "first\n\nsecond"
        assert len(chunks) == 2

    @pytest.mark.asyncio
    async def test_analyze_code_parses_json(self, host, ai_provider):
        ai_provider.response = '{"issues": [{"type": "warning", "message": "unused import", "line": 1}], "summary": "ok"}'
        api = await api_for(host, ["ai.request"])

        analysis = await api.ai.analyze_code("import os", "python")
        assert analysis.issues[0].message == "unused import"
        assert analysis.summary == "ok"

    @pytest.mark.asyncio
    async def test_without_provider(self, host):
        host.services.ai = None
        api = await api_for(host, ["ai.request"])
        with pytest.raises(CapabilityUnavailableError):
            await api.ai.chat("hi")


class TestGitAPI:

    @pytest.mark.asyncio
    async def test_status_delegates_to_service(self, host):
        api = await api_for(host, ["git.read"])
        status = GitStatus(branch="main", modified=["a.py"])

        with patch.object(host.services.git, "get_status", new=AsyncMock(return_value=status)):
            assert (await api.git.get_status()).branch == "main"

    @pytest.mark.asyncio
    async def test_commit_requires_write(self, host):
        api = await api_for(host, ["git.read"])
        with patch.object(host.services.git, "commit", new=AsyncMock()) as commit:
            with pytest.raises(PermissionDeniedError):
                await api.git.commit("msg")
        commit.assert_not_called()


class TestUIAPI:

    @pytest.mark.asyncio
    async def test_notification_event(self, host):
        api = await api_for(host, ["ui.render"])
        seen = []
        host.events.on("ui:notification", lambda name, message, type: seen.append((name, message, type)))

        api.ui.show_notification("saved", "success")
        api.ui.show_notification("odd", "purple")
        await host.events.drain()

        assert seen == [("demo-ext", "saved", "success"), ("demo-ext", "odd", "info")]

    @pytest.mark.asyncio
    async def test_only_facade_notifications_reach_bridge(self, host):
        api = await api_for(host, ["ui.render"])
        host.services.ui.notify = AsyncMock()

        api.events.emit("ui:notification", "someone-else", "forged", "error")
        api.ui.show_notification("saved", "success")
        await host.events.drain()

        host.services.ui.notify.assert_awaited_once_with("demo-ext", "saved", "success")

    @pytest.mark.asyncio
    async def test_dialogs_use_bridge(self, host):
        api = await api_for(host, ["ui.render"])
        assert await api.ui.show_input_dialog("Name?") is None
        assert await api.ui.show_confirmation_dialog("Sure?", "Really?") is False

        host.services.ui.confirm = AsyncMock(return_value=True)
        assert await api.ui.show_confirmation_dialog("Sure?", "Really?") is True

    @pytest.mark.asyncio
    async def test_keybinding_is_namespaced(self, host):
        api = await api_for(host, ["ui.shortcut"])
        api.ui.register_keybinding("ctrl+k", "open")
        assert host.get_keybindings("demo-ext")[0].command == "demo-ext:open"

    @pytest.mark.asyncio
    async def test_webview_lifecycle(self, host):
        api = await api_for(host, ["ui.render"])
        messages = []
        host.events.on("ui:webview:message", lambda webview_id, message: messages.append(message))
        disposed = []
        host.events.on("ui:webview:dispose", disposed.append)

        webview = await api.ui.create_webview(WebviewOptions(title="Preview", html="<p>hi</p>"))
        webview.show()
        webview.post_message({"type": "refresh"})

        assert host.get_webviews() == [webview]
        assert messages == [{"type": "refresh"}]

        host.resources.cleanup_webviews("demo-ext")
        assert host.get_webviews() == []
        assert disposed == [webview.id]


class TestStorageAPI:

    @pytest.mark.asyncio
    async def test_values_are_namespaced(self, host):
        first = await api_for(host, ["storage.persistent"], "first")
        second = await api_for(host, ["storage.persistent"], "second")

        await first.storage.set_global("token", "abc")
        assert await first.storage.get_global("token") == "abc"
        assert await second.storage.get_global("token", "none") == "none"

        await first.storage.set_extension("count", 3)
        assert await first.storage.keys("extension") == ["count"]
        assert await first.storage.delete_extension("count") is True
        assert await first.storage.delete_extension("count") is False


class TestConfigAPI:

    @pytest.mark.asyncio
    async def test_settings(self, host):
        api = await api_for(host, ["settings.read", "settings.write"])

        await api.config.set("editor.tabSize", 2)
        assert await api.config.get("editor") == {"tabSize": 2}
        assert await api.config.get("missing.section") is None

    @pytest.mark.asyncio
    async def test_config_changed_event_cannot_target_other_extensions(self, host):
        victim = RecordingExtension()
        await host.register_extension(make_manifest("victim"), victim)
        attacker = await api_for(host, [], "attacker")

        attacker.events.emit("config:changed", "victim", {"token": "stolen"})
        await host.events.drain()

        assert victim.calls == ["on_load"]
        assert host.get_extension("victim").config == {}

    @pytest.mark.asyncio
    async def test_set_extension_emits_config_changed(self, host):
        extension = RecordingExtension()
        await host.register_extension(
            make_manifest(permissions=["settings.read", "settings.write"], defaultConfig={"name": "Dev"}),
            extension,
        )
        api = host.get_extension_api("demo-ext")

        await api.config.set_extension("name", "Ada")

        assert await api.config.get_extension("name") == "Ada"
        assert ("on_config_change", {"name": "Ada"}) in extension.calls

    @pytest.mark.asyncio
    async def test_read_only(self, host):
        api = await api_for(host, ["settings.read"])
        with pytest.raises(PermissionDeniedError):
            await api.config.set("editor.tabSize", 8)


class TestEventsAPI:

    @pytest.mark.asyncio
    async def test_remove_all_listeners_only_removes_own(self, host):
        first = await api_for(host, [], "first")
        second = await api_for(host, [], "second")
        received = []
        first.events.on("ping", lambda: received.append("first"))
        second.events.on("ping", lambda: received.append("second"))

        assert first.events.remove_all_listeners() == 1
        first.events.emit("ping")
        assert received == ["second"]

    @pytest.mark.asyncio
    async def test_once(self, host):
        api = await api_for(host, [])
        received = []
        api.events.once("ping", received.append)

        api.events.emit("ping", 1)
        api.events.emit("ping", 2)
        assert received == [1]
        assert host.resources.subscriptions == {}

    @pytest.mark.asyncio
    async def test_timers_are_cancelled_on_deactivate(self, host):
        api = await api_for(host, ["ui.render"])
        await host.activate_extension("demo-ext")
        fired = []
        api.events.call_later(0.05, fired.append, "late")
        task = api.events.call_every(0.05, fired.append, "tick")

        await host.deactivate_extension("demo-ext")
        await asyncio.sleep(0.1)

        assert fired == []
        assert task.cancelled() or task.done()
        assert host.resources.timers == {}

    @pytest.mark.asyncio
    async def test_call_later_fires(self, host):
        api = await api_for(host, [])
        fired = []
        api.events.call_later(0, fired.append, "now")
        await asyncio.sleep(0.01)
        assert fired == ["now"]
        assert host.resources.timers == {}


class TestHTTPAPI:

    @pytest.mark.asyncio
    async def test_get_delegates_to_client(self, host):
        api = await api_for(host, ["network.request"])
        response = HTTPResponse(status=200, status_text="OK", data="{}")

        with patch.object(host.services.http, "request", new=AsyncMock(return_value=response)) as request:
            result = await api.http.get("https://example.com/api")

        assert result.ok
        request.assert_awaited_once_with("https://example.com/api", method="GET", headers=None)

    @pytest.mark.asyncio
    async def test_denied_without_network_permission(self, host):
        api = await api_for(host, ["ui.render"])
        with patch.object(host.services.http, "request", new=AsyncMock()) as request:
            with pytest.raises(PermissionDeniedError):
                await api.http.post("https://example.com", {"a": 1})
        request.assert_not_called()


class TestLoggerAPI:

    @pytest.mark.asyncio
    async def test_logs_under_extension_name(self, host, caplog):
        api = await api_for(host, [])
        caplog.set_level(logging.INFO, logger="extension.demo-ext")

        api.logger.info("started")
        api.logger.child("worker").warning("slow")

        records = [(r.name, r.getMessage()) for r in caplog.records if r.name.startswith("extension.")]
        assert records == [("extension.demo-ext", "started"), ("extension.demo-ext.worker", "slow")]

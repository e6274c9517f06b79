"""Tests for ExplorerSession against the fake agent.

The session is driven the way a shell would drive it (navigation calls,
keyboard shortcuts, context actions) and assertions are made on the hook
calls recorded by ``RecordingHooks``.
"""

import asyncio

import pytest

from explorer.clipboard import ClipboardOperation
from explorer.session import ContextAction, DriveInfo, ExplorerSession, ItemProperties, RenderHooks
from explorer.status import Severity
from explorer.views import ViewKind


# =============================================================================
# Lifecycle and drives
# =============================================================================


class TestLifecycle:
    async def test_start_finds_drives_and_opens_first(self, explorer_settings, hooks, agent_transport, fake_fs) -> None:
        async with ExplorerSession(settings=explorer_settings, hooks=hooks, transport=agent_transport) as session:
            assert session.is_online
            assert [d.letter for d in session.drives] == ["C", "D"]
            assert session.current_path == "C:\\"
            assert hooks.of("show_connection") == [(True,)]
            assert hooks.last("show_drives") == (session.drives, "C")
            assert hooks.statuses[-1].text == "Found 2 drives"
            assert fake_fs.list_calls.count("C:\\") == 1
            assert "D:\\" in session.directory_cache

    async def test_no_drives(self, session, hooks, fake_fs) -> None:
        fake_fs.failing.update({"C:\\", "D:\\"})
        assert await session.load_drives() == []
        assert session.current_path is None
        assert hooks.errors()[-1] == "No drives found"

    async def test_select_drive_by_letter(self, session) -> None:
        await session.load_drives()
        assert await session.select_drive("D:") is True
        assert session.current_path == "D:\\"
        assert session.active_drive == DriveInfo.for_letter("D")
        assert session.navigation.home_path == "D:\\"

    async def test_check_connection(self, session) -> None:
        assert await session.check_connection() is True

    async def test_going_offline(self, session, hooks, fake_fs) -> None:
        session.set_connection_status(False)
        assert hooks.last("show_connection") == (False,)
        assert hooks.errors()[-1] == "Offline"
        assert await session.navigate("C:\\") is False
        assert hooks.errors()[-1] == "Not connected to the file agent"
        assert fake_fs.calls["list"] == 0

    async def test_close_releases_audio(self, session, audio_fs) -> None:
        await session.navigate("C:\\Music")
        await session.activate("C:\\Music\\tone.wav")
        audio = session.audio_session
        await session.close()
        assert audio.closed
        assert session.audio_session is None


class TestDriveInfo:
    def test_known_letters(self) -> None:
        drive = DriveInfo.for_letter("c")
        assert drive.path == "C:\\"
        assert drive.kind == "HDD"
        assert drive.label == "C: Drive"
        assert DriveInfo.for_letter("E").kind == "USB"

    def test_unknown_letter(self) -> None:
        assert DriveInfo.for_letter("Z").kind == "Drive"


# =============================================================================
# Display
# =============================================================================


class TestDisplay:
    async def test_listing_is_drawn(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        assert hooks.last("show_address") == ("C:\\Users", [("C:", "C:\\"), ("Users", "C:\\Users\\")])
        frame = hooks.frames[-1]
        assert frame.total == 10
        assert [row.name for row in frame.content.rows[:2]] == ["alice", "bob"]
        assert hooks.last("show_nav_state")[0].can_go_up

    async def test_large_listing_is_windowed(self, session, hooks, fake_fs) -> None:
        for i in range(1500):
            fake_fs.add_file(f"C:\\Big\\file{i:04d}.txt", b"x")
        await session.navigate("C:\\Big")
        frame = hooks.frames[-1]
        assert frame.virtual
        assert frame.rendered_count == 60

        frame = session.on_resize(720)
        assert frame.rendered_count == 30
        assert session.on_scroll(3600) is True
        assert hooks.frames[-1].start == 100

    async def test_switch_view(self, session, hooks) -> None:
        await session.navigate("C:\\")
        frame = session.set_view(ViewKind.DETAIL)
        assert frame.content.header == ("Name", "Modified", "Type", "Size")
        assert frame.total == 3
        assert session.set_view("grid").content.view is ViewKind.GRID

    async def test_search_results_replace_listing(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\bob")
        results = await session.run_search("log")
        assert hooks.frames[-1].total == 4
        assert session.items == results
        assert session.selection == []

        await session.run_search("")
        assert hooks.frames[-1].total == 10
        assert not session.search.in_search_mode

    async def test_search_as_you_type(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        await session.search_as_you_type("catalog")
        assert [row.name for row in hooks.frames[-1].content.rows] == ["catalog.txt"]

    async def test_clearing_typed_query_shows_listing(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        await session.run_search("log")
        await session.search_as_you_type("")
        assert not session.search.in_search_mode
        assert hooks.frames[-1].total == 10

    async def test_navigation_leaves_search_mode(self, session) -> None:
        await session.navigate("C:\\Users")
        await session.run_search("log")
        await session.navigate("C:\\")
        assert not session.search.in_search_mode
        assert len(session.items) == 3


# =============================================================================
# Selection, activation and file operations
# =============================================================================


class TestSelection:
    async def test_select_and_toggle(self, session) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\bob")
        session.select("C:\\Users\\carol", toggle=True)
        assert session.selection == ["C:\\Users\\bob", "C:\\Users\\carol"]
        session.select("C:\\Users\\bob", toggle=True)
        assert session.selection == ["C:\\Users\\carol"]
        session.select("C:\\Users\\dave")
        assert session.selection == ["C:\\Users\\dave"]
        session.clear_selection()
        assert session.selection == []

    async def test_activate_directory(self, session) -> None:
        await session.navigate("C:\\")
        assert await session.activate("C:\\Users") is True
        assert session.current_path == "C:\\Users"

    async def test_activate_text_file_does_nothing(self, session) -> None:
        await session.navigate("C:\\")
        assert await session.activate("C:\\readme.txt") is False
        assert await session.activate("C:\\not-listed") is False

    async def test_activate_audio(self, session, hooks, audio_fs) -> None:
        await session.navigate("C:\\Music")
        assert await session.activate("C:\\Music\\tone.wav") is True
        assert hooks.last("show_waveform")[0].placeholder is False
        assert session.current_path == "C:\\Music"

    async def test_open_selection(self, session) -> None:
        await session.navigate("C:\\")
        assert await session.open_selection() is False
        session.select("C:\\Music")
        assert await session.handle_context_action(ContextAction.OPEN) is True
        assert session.current_path == "C:\\Music"


class TestFileOperations:
    async def test_copy_paste(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\log.txt")
        assert session.copy_selection() == 1
        assert hooks.statuses[-1].text == "Copied 1 items"

        await session.navigate("D:\\")
        result = await session.paste()
        assert result.ok
        assert "D:\\log.txt" in fake_fs.files
        assert "D:\\log.txt" in [row.path for row in hooks.frames[-1].content.rows]
        assert hooks.statuses[-1].text == "Pasted 1 items"
        assert session.clipboard.operation is ClipboardOperation.COPY

    async def test_cut_paste_partial_failure(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\log.txt")
        session.select("C:\\Users\\catalog.txt", toggle=True)
        session.cut_selection()
        fake_fs.failing.add("C:\\Users\\catalog.txt")

        await session.navigate("D:\\")
        result = await session.paste()
        assert not result.ok
        assert hooks.errors()[-1] == "move: 1 of 2 items succeeded; failed: catalog.txt"
        assert session.clipboard.items == ["C:\\Users\\catalog.txt"]

    async def test_paste_with_empty_clipboard(self, session) -> None:
        await session.navigate("C:\\")
        assert await session.paste() is None

    async def test_delete_asks_for_confirmation(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\log.txt")
        hooks.confirm_answer = False
        assert await session.delete_selection() is None
        assert "C:\\Users\\log.txt" in fake_fs.files
        assert hooks.last("confirm") == ("Delete 1 items?",)

        hooks.confirm_answer = True
        result = await session.delete_selection()
        assert result.ok
        assert "C:\\Users\\log.txt" not in fake_fs.files
        assert hooks.frames[-1].total == 9
        assert session.selection == []

    async def test_delete_keeps_failed_selected(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\log.txt")
        session.select("C:\\Users\\backlog.txt", toggle=True)
        fake_fs.failing.add("C:\\Users\\backlog.txt")
        await session.delete_selection()
        assert session.selection == ["C:\\Users\\backlog.txt"]
        assert hooks.errors()[-1] == "delete: 1 of 2 items succeeded; failed: backlog.txt"

    async def test_rename_with_prompt(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Users")
        session.select("C:\\Users\\log.txt")
        hooks.prompt_answer = "events.log"
        target = await session.handle_context_action("rename")
        assert target == "C:\\Users\\events.log"
        assert hooks.last("prompt") == ("New name:", "log.txt")
        assert "C:\\Users\\events.log" in fake_fs.files
        assert hooks.statuses[-1].text == "Renamed to events.log"

    async def test_rename_invalid_name(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        assert await session.rename("C:\\Users\\log.txt", "a\\b") is None
        assert hooks.statuses[-1].severity is Severity.ERROR

    async def test_rename_agent_failure(self, session, hooks) -> None:
        await session.navigate("C:\\Users")
        assert await session.rename("C:\\Users\\ghost.txt", "x.txt") is None
        assert hooks.errors()[-1].startswith("Rename failed")

    async def test_create_folder_default_name(self, session, hooks, fake_fs) -> None:
        await session.navigate("C:\\Music")
        path = await session.handle_context_action(ContextAction.NEW_FOLDER)
        assert path == "C:\\Music\\New folder"
        assert path in fake_fs.dirs
        assert hooks.statuses[-1].text == "Created folder New folder"
        assert "C:\\Music\\New folder" in [row.path for row in hooks.frames[-1].content.rows]

    async def test_create_file(self, session, fake_fs) -> None:
        await session.navigate("C:\\Music")
        assert await session.create_file("notes.txt") == "C:\\Music\\notes.txt"
        assert fake_fs.files["C:\\Music\\notes.txt"] == b""

    async def test_create_existing_fails(self, session, hooks) -> None:
        await session.navigate("C:\\")
        assert await session.create_folder("Users") is None
        assert hooks.errors()[-1].startswith("Could not create folder")

    async def test_create_cancelled(self, session, hooks, fake_fs) -> None:
        class CancellingHooks(type(hooks)):
            def prompt(self, message, default=""):
                return None

        session.hooks = CancellingHooks()
        await session.navigate("C:\\Music")
        assert await session.create_file() is None
        assert fake_fs.calls["create"] == 0

    async def test_copy_path(self, session, hooks) -> None:
        await session.navigate("C:\\")
        session.select("C:\\readme.txt")
        assert await session.handle_context_action(ContextAction.COPY_PATH) == "C:\\readme.txt"
        assert hooks.last("copy_text") == ("C:\\readme.txt",)
        assert hooks.statuses[-1].text == "Path copied"

    async def test_properties(self, session, hooks) -> None:
        await session.navigate("C:\\")
        assert session.properties("C:\\readme.txt") == ItemProperties(
            name="readme.txt", path="C:\\readme.txt", type_label="Text document", size_label="11 B"
        )
        session.select("C:\\Users")
        folder = await session.handle_context_action("properties")
        assert folder.size_label == "-"
        assert folder.type_label == "Folder"
        assert hooks.last("show_properties") == (folder,)


# =============================================================================
# Keyboard
# =============================================================================


class TestKeyboard:
    async def test_focus_shortcuts(self, session, hooks) -> None:
        assert await session.handle_key("l", ctrl=True)
        assert await session.handle_key("F", ctrl=True)
        assert hooks.of("focus") == [("address",), ("search",)]

    async def test_history_shortcuts(self, session) -> None:
        await session.navigate("C:\\")
        await session.navigate("C:\\Users")
        assert await session.handle_key("left", alt=True)
        assert session.current_path == "C:\\"
        assert await session.handle_key("right", alt=True)
        assert session.current_path == "C:\\Users"
        assert await session.handle_key("up", alt=True)
        assert session.current_path == "C:\\"

    async def test_refresh_shortcut(self, session, fake_fs) -> None:
        await session.navigate("C:\\")
        await session.handle_key("f5")
        assert fake_fs.list_calls.count("C:\\") == 2

    async def test_selection_shortcuts_need_selection(self, session) -> None:
        await session.navigate("C:\\")
        assert not await session.handle_key("delete")
        assert not await session.handle_key("c", ctrl=True)
        assert not await session.handle_key("x", ctrl=True)
        assert not await session.handle_key("v", ctrl=True)

    async def test_clipboard_shortcuts(self, session, fake_fs) -> None:
        await session.navigate("C:\\")
        session.select("C:\\readme.txt")
        assert await session.handle_key("x", ctrl=True)
        await session.navigate("D:\\")
        assert await session.handle_key("v", ctrl=True)
        assert "D:\\readme.txt" in fake_fs.files
        assert "C:\\readme.txt" not in fake_fs.files
        assert session.clipboard.is_empty

    async def test_unknown_key(self, session) -> None:
        assert not await session.handle_key("q")
        assert not await session.handle_key("left")

    async def test_audio_shortcuts(self, session, audio_fs) -> None:
        assert not await session.handle_key("space")

        await session.navigate("C:\\Music")
        await session.activate("C:\\Music\\tone.wav")
        audio = session.audio_session

        assert not await session.handle_key("space", in_text_input=True)
        assert await session.handle_key("space")
        assert audio.is_playing
        await asyncio.sleep(0.01)
        assert await session.handle_key("space", ctrl=True)
        assert not audio.is_playing
        assert audio.position_seconds == 0.0


class TestRenderHooksDefaults:
    def test_defaults(self) -> None:
        hooks = RenderHooks()
        assert hooks.confirm("Delete?") is True
        assert hooks.prompt("Name:", "New folder") == "New folder"
        assert hooks.prompt("Name:") is None

    async def test_session_without_hooks(self, explorer_settings, agent_transport) -> None:
        async with ExplorerSession(settings=explorer_settings, transport=agent_transport) as session:
            assert session.current_path == "C:\\"


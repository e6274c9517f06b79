"""End-to-end browsing flows over the fake agent.

Each test starts a full ExplorerSession the way a shell does and checks
both what was drawn and which agent endpoints were hit.
"""

from explorer.session import ExplorerSession


async def test_repeat_navigation_is_served_from_cache(explorer_settings, hooks, agent_transport, fake_fs) -> None:
    async with ExplorerSession(settings=explorer_settings, hooks=hooks, transport=agent_transport) as session:
        await session.navigate("C:\\")
        assert hooks.frames[-1].total == 3
        names = [row.name for row in hooks.frames[-1].content.rows]
        assert names == ["Music", "Users", "readme.txt"]

        before = fake_fs.calls["list"]
        await session.navigate("C:\\")
        assert fake_fs.calls["list"] == before
        assert [row.name for row in hooks.frames[-1].content.rows] == names


async def test_browse_search_and_copy(explorer_settings, hooks, agent_transport, fake_fs) -> None:
    async with ExplorerSession(settings=explorer_settings, hooks=hooks, transport=agent_transport) as session:
        await session.navigate("C:\\Users")
        results = await session.run_search("log")
        assert {entry.name for entry in results} == {"log.txt", "catalog.txt", "my-log-file.txt", "backlog.txt"}
        assert results[0].name == "log.txt"

        session.select("C:\\Users\\log.txt")
        assert session.copy_selection() == 1

        await session.go_back()
        assert session.current_path == "C:\\"
        await session.select_drive("D")
        result = await session.paste()

        assert result.ok
        assert fake_fs.files["D:\\log.txt"] == b"x" * 10
        assert "log.txt" in [row.name for row in hooks.frames[-1].content.rows]
        assert hooks.statuses[-1].text == "Pasted 1 items"


async def test_history_round_trip(explorer_settings, hooks, agent_transport) -> None:
    async with ExplorerSession(settings=explorer_settings, hooks=hooks, transport=agent_transport) as session:
        await session.navigate("C:\\Users")
        await session.navigate("C:\\Users\\alice")
        assert await session.go_back()
        assert await session.go_back()
        assert session.current_path == "C:\\"
        assert not await session.go_back()
        assert await session.go_forward()
        assert session.current_path == "C:\\Users"
        assert hooks.last("show_nav_state")[0].can_go_forward

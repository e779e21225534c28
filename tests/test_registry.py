import asyncio
import random

import pytest

from liveboard.core.errors import NotFound
from liveboard.ws.manager import SessionRegistry, classify_role

from conftest import FakeSocket


def test_classify_role_is_literal_prefix():
    assert classify_role("Dashboard-1", "Dashboard") == "controller"
    assert classify_role("Dashboard", "Dashboard") == "controller"
    assert classify_role("dashboard-1", "Dashboard") == "external"
    assert classify_role("My Dashboard", "Dashboard") == "external"
    assert classify_role("Dashboard-1", "") == "external"


@pytest.mark.asyncio
async def test_register_defaults(registry):
    session = await registry.register(FakeSocket(), "10.0.0.5")

    assert session.displayName == "Unknown Device"
    assert session.role == "external"
    assert session.remoteAddress == "10.0.0.5"
    assert registry.count() == 1
    assert registry.external_count() == 1


@pytest.mark.asyncio
async def test_identify_classifies_and_filters(registry):
    a = await registry.register(FakeSocket())
    b = await registry.register(FakeSocket())

    updated = await registry.identify(a.id, "Dashboard-1")

    assert updated.role == "controller"
    assert [s.id for s in registry.list_external()] == [b.id]
    assert registry.count() == 2
    assert registry.external_count() == 1

    # renomear para algo sem prefixo volta a external
    await registry.identify(a.id, "Phone")
    assert [s.id for s in registry.list_external()] == [a.id, b.id]


@pytest.mark.asyncio
async def test_identify_blank_name_falls_back(registry):
    a = await registry.register(FakeSocket())
    updated = await registry.identify(a.id, "   ")
    assert updated.displayName == "Unknown Device"


@pytest.mark.asyncio
async def test_identify_unknown_session(registry):
    with pytest.raises(NotFound):
        await registry.identify("ghost", "Dashboard-1")


@pytest.mark.asyncio
async def test_unregister_is_idempotent(registry):
    a = await registry.register(FakeSocket())

    assert (await registry.unregister(a.id)).id == a.id
    assert await registry.unregister(a.id) is None
    assert await registry.unregister("never-existed") is None
    assert registry.count() == 0


@pytest.mark.asyncio
async def test_returned_sessions_are_copies(registry):
    a = await registry.register(FakeSocket())
    view = registry.get(a.id)
    view.displayName = "hacked"
    assert registry.get(a.id).displayName == "Unknown Device"


@pytest.mark.asyncio
async def test_interleaved_operations_keep_counts_consistent():
    registry = SessionRegistry(controller_prefix="Dashboard")
    rng = random.Random(7)
    alive: dict[str, str] = {}
    gone: set[str] = set()

    async def lifecycle(n: int) -> None:
        s = await registry.register(FakeSocket(), f"10.0.0.{n}")
        alive[s.id] = "external"
        await asyncio.sleep(0)
        name = "Dashboard-%d" % n if rng.random() < 0.4 else "Remote-%d" % n
        await registry.identify(s.id, name)
        alive[s.id] = "controller" if name.startswith("Dashboard") else "external"
        await asyncio.sleep(0)
        if rng.random() < 0.5:
            await registry.unregister(s.id)
            await registry.unregister(s.id)
            alive.pop(s.id)
            gone.add(s.id)

    await asyncio.gather(*(lifecycle(n) for n in range(60)))

    assert registry.count() == len(alive)
    assert registry.external_count() == sum(1 for r in alive.values() if r == "external")
    external_ids = {s.id for s in registry.list_external()}
    assert not external_ids & gone
    assert len({s.id for s in registry.list_sessions()}) == registry.count()


@pytest.mark.asyncio
async def test_send_all_skips_failing_sockets(registry):
    ok = FakeSocket()
    await registry.register(ok)
    await registry.register(FakeSocket(fail=True))

    delivered = await registry.send_all({"type": "control-stop", "data": {}})

    assert delivered == 1
    assert ok.types() == ["control-stop"]
    # socket quebrado continua registrado até o disconnect
    assert registry.count() == 2

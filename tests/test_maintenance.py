import asyncio

from roles_bot import maintenance
from roles_bot.binding.models import BindingSet, ResolvedBinding
from roles_bot.memory.bindings import BindingStore


def test_validate_bindings_drops_sets_for_deleted_messages(db_path, platform):
    platform.existing_messages = {1}
    platform.fail_on.add(("message_exists", 3))

    async def _run():
        store = await BindingStore.open(db_path)
        try:
            for mid in (1, 2, 3):
                await store.put(BindingSet(9, 8, mid, (ResolvedBinding("A", 111),)))
            removed = await maintenance.validate_bindings(store, platform)
            return removed, sorted(bs.message_id for bs in await store.all()), 2 in store
        finally:
            await store.close()

    removed, remaining, still_indexed = asyncio.run(_run())

    # Message 3 could not be checked, so it is kept.
    assert removed == [2]
    assert remaining == [1, 3]
    assert still_indexed is False


def test_periodic_task_runs_and_cancels():
    calls = []

    async def _run():
        async def job():
            calls.append(1)

        task = await maintenance.startup(job, 0.01)
        await asyncio.sleep(0.05)
        await maintenance.shutdown(task)
        return task.cancelled()

    assert asyncio.run(_run()) is True
    assert calls

"""
tests/test_scheduler.py
Latest-wins scheduling and the typewriter reveal.
Each test drives its own event loop with asyncio.run().
"""

import asyncio

from sentiwatch.scheduler import LatestWinsScheduler, reveal_text


class TestLatestWinsScheduler:
    def test_single_submit_commits(self):
        committed = []

        async def scenario():
            sched = LatestWinsScheduler(delay=0)
            sched.submit(lambda: "A", committed.append)
            return await sched.wait()

        assert asyncio.run(scenario()) is True
        assert committed == ["A"]

    def test_newer_submit_discards_older(self):
        committed = []

        async def scenario():
            sched = LatestWinsScheduler()
            first = sched.submit(lambda: "A", committed.append, delay=0.05)
            sched.submit(lambda: "B", committed.append, delay=0)
            await sched.wait()
            await asyncio.gather(first, return_exceptions=True)

        asyncio.run(scenario())
        assert committed == ["B"]

    def test_stale_work_is_never_run(self):
        calls = []

        async def scenario():
            sched = LatestWinsScheduler(delay=0.05)
            sched.submit(lambda: calls.append("A"), lambda _: None)
            await asyncio.sleep(0)
            sched.begin()
            return await sched.wait()

        assert asyncio.run(scenario()) is None
        assert calls == []

    def test_generation_increments(self):
        sched = LatestWinsScheduler()
        g1 = sched.begin()
        g2 = sched.begin()
        assert g2 == g1 + 1
        assert sched.is_current(g2)
        assert not sched.is_current(g1)

    def test_wait_with_nothing_pending(self):
        assert asyncio.run(LatestWinsScheduler().wait()) is None


class TestRevealText:
    def test_reveals_prefixes_in_order(self):
        seen = []

        async def scenario():
            return await reveal_text("abc", seen.append, LatestWinsScheduler(), char_delay=0)

        assert asyncio.run(scenario()) is True
        assert seen == ["", "a", "ab", "abc"]

    def test_newer_reveal_stops_older(self):
        old, new = [], []

        async def scenario():
            sched = LatestWinsScheduler()
            first = asyncio.ensure_future(
                reveal_text("x" * 50, old.append, sched, char_delay=0.01)
            )
            await asyncio.sleep(0.03)
            second = await reveal_text("done", new.append, sched, char_delay=0)
            return await first, second

        first_done, second_done = asyncio.run(scenario())
        assert first_done is False
        assert second_done is True
        assert len(old[-1]) < 50
        assert new[-1] == "done"

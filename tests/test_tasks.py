import asyncio
import unittest

from iconcraft.tasks import gather_all, series, parallel


class TestGatherAll(unittest.TestCase):
    def test_results_keep_argument_order(self):
        async def value(v, delay):
            await asyncio.sleep(delay)
            return v

        result = asyncio.run(gather_all(value("a", 0.03), value("b", 0.0), value("c", 0.01)))
        self.assertEqual(result, ["a", "b", "c"])

    def test_empty(self):
        self.assertEqual(asyncio.run(gather_all()), [])

    def test_first_failure_cancels_siblings(self):
        state = {"cancelled": False, "finished": False}

        async def slow():
            try:
                await asyncio.sleep(5)
                state["finished"] = True
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise

        async def broken():
            await asyncio.sleep(0.01)
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            asyncio.run(gather_all(slow(), broken()))
        self.assertTrue(state["cancelled"])
        self.assertFalse(state["finished"])


class TestComposition(unittest.TestCase):
    def test_series_runs_in_order(self):
        log = []

        def step(name, delay):
            async def run():
                await asyncio.sleep(delay)
                log.append(name)
                return name
            return run

        result = asyncio.run(series(step("clean", 0.02), step("build", 0.0))())
        self.assertEqual(log, ["clean", "build"])
        self.assertEqual(result, ["clean", "build"])

    def test_parallel_overlaps(self):
        running = {"now": 0, "peak": 0}

        def step():
            async def run():
                running["now"] += 1
                running["peak"] = max(running["peak"], running["now"])
                await asyncio.sleep(0.02)
                running["now"] -= 1
            return run

        asyncio.run(parallel(step(), step(), step())())
        self.assertEqual(running["peak"], 3)


if __name__ == '__main__':
    unittest.main()

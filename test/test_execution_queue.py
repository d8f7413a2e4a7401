import asyncio
import unittest

from app.cristalix.execution_queue import ExecutionQueue


class TestExecutionQueue(unittest.IsolatedAsyncioTestCase):

    async def test_concurrency_bound(self):
        queue = ExecutionQueue(limit=3)
        running = 0
        max_running = 0

        def make_task(value: int):
            async def task():
                nonlocal running, max_running
                running += 1
                max_running = max(max_running, running)
                await asyncio.sleep(0.01)
                running -= 1
                return value
            return task

        futures = [queue.submit(make_task(i)) for i in range(10)]
        self.assertEqual(queue.active, 3)
        self.assertEqual(queue.pending, 7)

        results = await asyncio.gather(*futures)
        self.assertEqual(results, list(range(10)))
        self.assertLessEqual(max_running, 3)
        self.assertEqual(queue.peak, 3)
        self.assertEqual(queue.active, 0)
        self.assertEqual(queue.pending, 0)

    async def test_fifo_admission(self):
        queue = ExecutionQueue(limit=1)
        started: list[int] = []

        def make_task(value: int):
            async def task():
                started.append(value)
                await asyncio.sleep(0)
                return value
            return task

        await asyncio.gather(*(queue.submit(make_task(i)) for i in range(5)))
        self.assertEqual(started, [0, 1, 2, 3, 4])

    async def test_failure_is_delivered_and_frees_the_slot(self):
        queue = ExecutionQueue(limit=1)

        async def boom():
            raise RuntimeError("upstream down")

        async def ok():
            return "ok"

        failing = queue.submit(boom)
        following = queue.submit(ok)
        with self.assertRaises(RuntimeError):
            await failing
        self.assertEqual(await following, "ok")
        self.assertEqual(queue.active, 0)

    def test_invalid_limit(self):
        with self.assertRaises(ValueError):
            ExecutionQueue(limit=0)


if __name__ == '__main__':
    unittest.main()

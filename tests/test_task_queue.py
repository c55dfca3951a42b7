import asyncio
import time
import unittest
from unittest.mock import MagicMock

from tools.detached import DetachedTasks
from tools.task_queue import TaskQueue


class TestTaskQueue(unittest.IsolatedAsyncioTestCase):
    async def test_never_exceeds_concurrency_limit(self):
        tasks = DetachedTasks()
        running = 0
        peak = 0
        done = []

        async def worker(n):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.001 * (n % 4))
            running -= 1
            done.append(n)

        queue = TaskQueue("Test", worker, concurrency_limit=3, tasks=tasks)
        queue.add(range(20))

        # Three started immediately, the rest wait in the queue
        self.assertEqual(queue.active, 3)
        self.assertEqual(len(queue), 17)

        await tasks.drain()

        self.assertEqual(peak, 3)
        self.assertEqual(sorted(done), list(range(20)))  # each task ran exactly once
        self.assertEqual(queue.active, 0)
        self.assertEqual(len(queue), 0)

    async def test_starts_in_fifo_order_completes_in_any_order(self):
        tasks = DetachedTasks()
        started = []
        completed = []

        async def worker(n):
            started.append(n)
            await asyncio.sleep(0.01 * (3 - n))
            completed.append(n)

        queue = TaskQueue("Test", worker, concurrency_limit=3, tasks=tasks)
        queue.add([0, 1, 2])
        await tasks.drain()

        self.assertEqual(started, [0, 1, 2])
        self.assertEqual(completed, [2, 1, 0])

    async def test_single_slot_runs_sequentially(self):
        tasks = DetachedTasks()
        started = []

        async def worker(n):
            started.append(n)
            await asyncio.sleep(0)

        queue = TaskQueue("Test", worker, concurrency_limit=1, tasks=tasks)
        queue.add(["a", "b", "c", "d"])
        await tasks.drain()

        self.assertEqual(started, ["a", "b", "c", "d"])

    async def test_failing_task_does_not_stop_queue(self):
        tasks = DetachedTasks()
        telemetry = MagicMock()
        on_complete = MagicMock()
        done = []

        async def worker(n):
            if n == 2:
                raise RuntimeError("boom")
            done.append(n)

        queue = TaskQueue("Test", worker, concurrency_limit=2, on_complete=on_complete, tasks=tasks, telemetry=telemetry)
        queue.add(range(5))
        await tasks.drain()

        self.assertEqual(sorted(done), [0, 1, 3, 4])
        self.assertEqual(telemetry.log_error.call_count, 1)
        # on_complete fires for successful tasks only
        self.assertEqual(on_complete.call_count, 4)
        self.assertEqual(queue.active, 0)

    async def test_failing_on_complete_is_contained(self):
        tasks = DetachedTasks()
        done = []

        async def worker(n):
            done.append(n)

        queue = TaskQueue("Test", worker, concurrency_limit=1, on_complete=MagicMock(side_effect=ValueError("x")), tasks=tasks)
        queue.add(range(3))
        await tasks.drain()

        self.assertEqual(done, [0, 1, 2])

    async def test_idles_when_empty_and_resumes_on_add(self):
        tasks = DetachedTasks()
        done = []

        async def worker(n):
            done.append(n)

        queue = TaskQueue("Test", worker, concurrency_limit=2, tasks=tasks)
        queue.add([1, 2])
        await tasks.drain()
        self.assertEqual(queue.active, 0)

        queue.add([3])
        await tasks.drain()

        self.assertEqual(sorted(done), [1, 2, 3])

    async def test_task_delay_spaces_out_work(self):
        tasks = DetachedTasks()

        async def worker(n):
            return n

        queue = TaskQueue("Test", worker, concurrency_limit=1, task_delay_ms=20, tasks=tasks)

        start = time.perf_counter()
        queue.add(range(3))
        await tasks.drain()

        # Each task holds its slot for the delay before the next one starts
        self.assertGreaterEqual(time.perf_counter() - start, 0.04)

    def test_rejects_zero_concurrency(self):
        async def worker(n):
            return n

        with self.assertRaises(ValueError):
            TaskQueue("Test", worker, concurrency_limit=0)

    async def test_empty_shared_group_is_used(self):
        tasks = DetachedTasks()
        done = []

        async def worker(n):
            await asyncio.sleep(0)
            done.append(n)

        queue = TaskQueue("Test", worker, tasks=tasks)
        self.assertIs(queue._tasks, tasks)

        queue.add([1, 2, 3])
        await tasks.drain()

        self.assertEqual(sorted(done), [1, 2, 3])


if __name__ == "__main__":
    unittest.main()

import asyncio
import unittest
from unittest.mock import MagicMock

from tools.async_batch import async_batch


class TestAsyncBatch(unittest.IsolatedAsyncioTestCase):
    async def test_runs_in_groups_of_size(self):
        running = 0
        peak = 0
        seen = []

        async def fn(value):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0)
            running -= 1
            seen.append(value)

        failures = await async_batch("Test", list(range(7)), fn, size=3)

        self.assertEqual(failures, 0)
        self.assertEqual(peak, 3)
        self.assertEqual(sorted(seen), list(range(7)))

    async def test_failures_are_counted_and_reported(self):
        telemetry = MagicMock()
        done = []

        async def fn(value):
            if value % 2:
                raise ValueError(f"odd {value}")
            done.append(value)

        failures = await async_batch("Test", [0, 1, 2, 3, 4], fn, size=2, telemetry=telemetry)

        self.assertEqual(failures, 2)
        self.assertEqual(done, [0, 2, 4])
        telemetry.log_property.assert_called_once_with("Batch_Test", 5)
        errors = [c.args[0] for c in telemetry.log_error.call_args_list]
        self.assertEqual(errors, ["Batch_Test: at values[1]: odd 1", "Batch_Test: at values[3]: odd 3"])

    async def test_empty_input(self):
        telemetry = MagicMock()

        self.assertEqual(await async_batch("Test", [], MagicMock(), telemetry=telemetry), 0)
        telemetry.log_property.assert_not_called()


if __name__ == "__main__":
    unittest.main()

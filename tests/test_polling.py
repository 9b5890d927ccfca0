import json
import sys
import unittest
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_ROOT))

from discoclient.apis import checks_v1alpha  # noqa: E402
from discoclient.errors import OperationError, OperationTimeoutError  # noqa: E402
from discoclient.models import Operation, Status  # noqa: E402
from discoclient.polling import OperationPoller  # noqa: E402
from discoclient.transport import HttpxTransport  # noqa: E402

NAME = "accounts/1/apps/2/operations/3"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    async def sleep_async(self, seconds: float) -> None:
        self.sleep(seconds)


def _scripted(*payloads: dict[str, Any]):
    calls: list[int] = []
    operations = [Operation.from_wire(p) for p in payloads]

    def fetch() -> Operation:
        index = min(len(calls), len(operations) - 1)
        calls.append(index)
        return operations[index]

    return fetch, calls


class TestOperationPoller(unittest.TestCase):
    def test_wait_until_done(self) -> None:
        clock = FakeClock()
        fetch, calls = _scripted(
            {"name": NAME, "metadata": {"progress": 10}},
            {"name": NAME, "metadata": {"progress": 60}},
            {"name": NAME, "done": True, "response": {"verdict": "ok"}},
        )
        poller = OperationPoller(fetch, interval_s=2.0, timeout_s=30.0, sleep=clock.sleep, clock=clock)

        op = poller.wait()
        self.assertTrue(op.is_terminal)
        self.assertEqual(poller.polls, 3)
        self.assertEqual(clock.sleeps, [2.0, 2.0])
        self.assertIs(poller.last, op)

    def test_polling_completed_operation_is_idempotent(self) -> None:
        fetch, calls = _scripted({"name": NAME, "done": True, "response": {"verdict": "ok"}})
        poller = OperationPoller(fetch)

        first = poller.poll()
        second = poller.poll()
        self.assertIs(first, second)
        self.assertEqual(first.to_wire(), second.to_wire())
        self.assertEqual(len(calls), 1)
        self.assertEqual(poller.result(), {"verdict": "ok"})
        self.assertEqual(len(calls), 1)

        with self.assertRaises(ValidationError):
            first.error = Status(code=3, message="x")
        self.assertIsNone(poller.poll().error)

    def test_timeout_reports_last_operation(self) -> None:
        clock = FakeClock()
        fetch, calls = _scripted({"name": NAME, "metadata": {"progress": 1}})
        poller = OperationPoller(fetch, interval_s=1.0, timeout_s=2.0, sleep=clock.sleep, clock=clock)

        with self.assertRaises(OperationTimeoutError) as ctx:
            poller.wait()
        self.assertEqual(ctx.exception.operation.name, NAME)
        self.assertEqual(len(calls), 3)
        self.assertIn("2.0s", str(ctx.exception))

    def test_failed_operation_raises(self) -> None:
        fetch, _ = _scripted({"name": NAME, "done": True, "error": {"code": 3, "message": "bad policy"}})
        with self.assertRaises(OperationError) as ctx:
            OperationPoller(fetch).result()
        self.assertEqual(ctx.exception.operation.error.message, "bad policy")

    def test_fetch_must_return_operation(self) -> None:
        poller = OperationPoller(lambda: {"done": True})
        with self.assertRaises(TypeError):
            poller.poll()

    def test_invalid_settings(self) -> None:
        with self.assertRaises(ValueError):
            OperationPoller(lambda: None, interval_s=-1)
        with self.assertRaises(ValueError):
            OperationPoller(lambda: None, timeout_s=-1)

    def test_for_name_polls_the_service(self) -> None:
        responses = [
            {"name": NAME, "done": False},
            {"name": NAME, "done": True, "response": {"verdict": "ok"}},
        ]
        seen: list[str] = []

        def respond(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, content=json.dumps(responses[min(len(seen) - 1, 1)]).encode("utf-8"))

        client = httpx.Client(transport=httpx.MockTransport(respond))
        self.addCleanup(client.close)
        service = checks_v1alpha.build(transport=HttpxTransport(client))
        clock = FakeClock()
        poller = OperationPoller.for_name(
            service.accounts.apps.operations.get, NAME, interval_s=0.5, sleep=clock.sleep, clock=clock
        )

        self.assertEqual(poller.result(), {"verdict": "ok"})
        self.assertEqual(poller.poll().result(), {"verdict": "ok"})
        self.assertEqual(seen, [f"/v1alpha/{NAME}", f"/v1alpha/{NAME}"])


class TestOperationPollerAsync(unittest.IsolatedAsyncioTestCase):
    async def test_wait_async(self) -> None:
        clock = FakeClock()
        fetch, calls = _scripted(
            {"name": NAME},
            {"name": NAME, "done": True, "response": {"verdict": "ok"}},
        )
        poller = OperationPoller(fetch, interval_s=1.0, timeout_s=10.0, clock=clock)

        op = await poller.wait_async(sleep=clock.sleep_async)
        self.assertTrue(op.is_terminal)
        self.assertEqual(clock.sleeps, [1.0])

        again = await poller.poll_async()
        self.assertIs(again, op)
        self.assertEqual(len(calls), 2)

    async def test_awaitable_fetch(self) -> None:
        async def fetch() -> Operation:
            return Operation.from_wire({"name": NAME, "done": True, "response": {"n": 1}})

        poller = OperationPoller(fetch)
        self.assertEqual(await poller.result_async(), {"n": 1})


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Union

import structlog

from .errors import OperationTimeoutError
from .models.operations import Operation
from .request import ApiRequest
from .resource import MethodFactory

log = structlog.get_logger(__name__)

Fetch = Callable[[], Union[ApiRequest, Operation, Awaitable[Operation]]]


class OperationPoller:
    """Poll a long-running operation until it completes.

    ``fetch`` is called once per poll and returns a fresh request (or the
    operation itself). Once a terminal state has been seen it is cached:
    further polls return it without another call.
    """

    def __init__(
        self,
        fetch: Fetch,
        *,
        interval_s: float = 1.0,
        timeout_s: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        if timeout_s < 0:
            raise ValueError("timeout_s must be >= 0")
        self._fetch = fetch
        self._interval_s = interval_s
        self._timeout_s = timeout_s
        self._sleep = sleep
        self._clock = clock
        self._last: Operation | None = None
        self._terminal: Operation | None = None
        self._polls = 0

    @classmethod
    def for_name(cls, get: MethodFactory, name: str, **kwargs: Any) -> "OperationPoller":
        return cls(lambda: get(name=name), **kwargs)

    @property
    def last(self) -> Operation | None:
        return self._last

    @property
    def polls(self) -> int:
        return self._polls

    def _record(self, operation: Any) -> Operation:
        if not isinstance(operation, Operation):
            raise TypeError(f"Expected Operation, got {type(operation).__name__}")
        self._polls += 1
        self._last = operation
        if operation.is_terminal:
            self._terminal = operation
        log.debug("operation.poll", name=operation.name, done=operation.is_terminal, polls=self._polls)
        return operation

    def poll(self) -> Operation:
        if self._terminal is not None:
            return self._terminal
        result = self._fetch()
        if isinstance(result, ApiRequest):
            result = result.execute()
        return self._record(result)

    def wait(self) -> Operation:
        deadline = self._clock() + self._timeout_s
        while True:
            operation = self.poll()
            if operation.is_terminal:
                return operation
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise OperationTimeoutError(operation, timeout_s=self._timeout_s)
            self._sleep(min(self._interval_s, remaining))

    def result(self) -> dict[str, Any]:
        return self.wait().result()

    async def poll_async(self) -> Operation:
        if self._terminal is not None:
            return self._terminal
        result: Any = self._fetch()
        if isinstance(result, ApiRequest):
            result = await result.execute_async()
        elif inspect.isawaitable(result):
            result = await result
        return self._record(result)

    async def wait_async(self, *, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep) -> Operation:
        deadline = self._clock() + self._timeout_s
        while True:
            operation = await self.poll_async()
            if operation.is_terminal:
                return operation
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise OperationTimeoutError(operation, timeout_s=self._timeout_s)
            await sleep(min(self._interval_s, remaining))

    async def result_async(self) -> dict[str, Any]:
        return (await self.wait_async()).result()

import asyncio
from types import SimpleNamespace
from typing import Any, Optional


def make_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(
        output=[
            SimpleNamespace(
                type="message",
                content=[SimpleNamespace(type="output_text", text=text)],
            )
        ],
        usage=SimpleNamespace(input_tokens=12, output_tokens=34),
    )


class FakeResponses:
    def __init__(self, text: str = "", error: Optional[Exception] = None, hold: bool = False) -> None:
        self.text = text
        self.error = error
        self.hold = hold
        self.calls: list[dict[str, Any]] = []
        self._started: Optional[asyncio.Event] = None
        self._release: Optional[asyncio.Event] = None

    @property
    def started(self) -> asyncio.Event:
        if self._started is None:
            self._started = asyncio.Event()
        return self._started

    @property
    def release(self) -> asyncio.Event:
        if self._release is None:
            self._release = asyncio.Event()
        return self._release

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        self.started.set()
        if self.hold:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return make_response(self.text)


class FakeModelClient:
    def __init__(self, text: str = "", error: Optional[Exception] = None, hold: bool = False) -> None:
        self.responses = FakeResponses(text=text, error=error, hold=hold)

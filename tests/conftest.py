"""
Shared fakes for the OpenAI async client.

The fakes mimic the attribute shape of the SDK objects the services read
(`output`, `output_text`, `usage`, `text`, `content`), so no network calls
are made.
"""

import json
from types import SimpleNamespace

import pytest

from services.chat.market_price import MarketPriceQuote
from services.chat.session_store import SessionStore


def text_response(text, input_tokens=12, output_tokens=7):
    """Build a Responses API result carrying plain text."""
    return SimpleNamespace(
        output=[
            SimpleNamespace(
                type="message",
                content=[SimpleNamespace(type="output_text", text=text)],
            )
        ],
        output_text=text,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def function_call_response(name, arguments, call_id="call_1"):
    """Build a Responses API result that requests a function call."""
    return SimpleNamespace(
        output=[
            SimpleNamespace(
                type="function_call",
                name=name,
                arguments=json.dumps(arguments),
                call_id=call_id,
            )
        ],
        output_text="",
        usage=SimpleNamespace(input_tokens=20, output_tokens=4),
    )


class FakeEndpoint:
    """Async `create` that replays scripted results and records every call."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.results:
            raise RuntimeError("No scripted result left")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeOpenAI:
    """Stand-in for `AsyncOpenAI` exposing the endpoints the services use."""

    def __init__(self, responses=None, transcriptions=None, speech=None):
        self.responses = FakeEndpoint(responses)
        self.audio = SimpleNamespace(
            transcriptions=FakeEndpoint(transcriptions),
            speech=FakeEndpoint(speech),
        )


class RecordingPriceSource:
    """Market price source returning a fixed price and remembering crop names."""

    def __init__(self, price=3.25):
        self.price = price
        self.crops = []

    async def quote(self, crop_name):
        self.crops.append(crop_name)
        return MarketPriceQuote(crop_name=crop_name, price=self.price)


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def session(store):
    return store.create("en-US")

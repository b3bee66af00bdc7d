"""
Shared fixtures for the JSON-RPC client tests
"""

import asyncio
import json

import pytest

from seam_jsonrpc.adapters.transport_interface import Transport


def run_async(coro):
    """Run a coroutine on a fresh event loop and return its result"""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class FakeTransport(Transport):
    """In-memory transport answering with a responder function

    The responder receives the decoded request and returns reply bytes, a JSON node
    (serialized for it), or raises to simulate a transport failure. Replies for a
    request id can be held back with ``hold(id)`` and released with ``release(id)``.
    """

    def __init__(self, responder=None):
        self.responder = responder or echo_responder
        self.requests = []
        self.addresses = []
        self.closed = False
        self._gates = {}

    def hold(self, call_id):
        self._gates[call_id] = asyncio.Event()

    def release(self, call_id):
        self._gates[call_id].set()

    async def send(self, payload: bytes, address: str) -> bytes:
        request = json.loads(payload.decode("utf-8"))
        self.requests.append(request)
        self.addresses.append(address)

        gate = self._gates.get(request.get("id"))
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)

        reply = self.responder(request)
        if isinstance(reply, (bytes, str)):
            return reply if isinstance(reply, bytes) else reply.encode("utf-8")
        return json.dumps(reply).encode("utf-8")

    async def close(self) -> None:
        self.closed = True


def echo_responder(request):
    """Reply with the request params as the result"""
    return {"jsonrpc": "2.0", "result": request["params"], "id": request["id"]}


class RecordingDelegate:
    """Delegate recording callback deliveries and internal errors

    Args:
        forward: Value returned from method_call_did_fail
        log: Shared list receiving ("name", call, error) tuples for ordering checks
    """

    def __init__(self, name="delegate", forward=True, log=None):
        self.name = name
        self.forward = forward
        self.log = log if log is not None else []
        self.results = []
        self.failures = []

    def method_call_did_return(self, call, result, error):
        self.results.append((call, result, error))

    def method_call_did_fail(self, call, error):
        self.failures.append((call, error))
        self.log.append((self.name, call, error))
        return self.forward


class CallbackOnlyDelegate:
    """Delegate without the error handling capability"""

    def __init__(self):
        self.results = []

    def method_call_did_return(self, call, result, error):
        self.results.append((call, result, error))


class Person:
    """Result type implementing the conversion contract"""

    def __init__(self, first_name, last_name=None):
        self.first_name = first_name
        self.last_name = last_name

    @classmethod
    def from_json(cls, node):
        return cls(node["firstname"], node.get("lastname"))

    def to_json(self):
        return {"firstname": self.first_name, "lastname": self.last_name}

    def __eq__(self, other):
        return isinstance(other, Person) and self.to_json() == other.to_json()

    def __repr__(self):
        return f"<Person {self.first_name} {self.last_name}>"


@pytest.fixture
def transport():
    return FakeTransport()



"""
Tests for response handling: envelope checks, conversion and callback delivery
"""
import asyncio
import gc
import json
from types import SimpleNamespace

import pytest
from google.protobuf.struct_pb2 import Struct

from conftest import CallbackOnlyDelegate, Person, RecordingDelegate, run_async
from seam_jsonrpc.errors import ConversionError, ParseError, ServerError, TransportError
from seam_jsonrpc.rpc.method_call import new_call
from seam_jsonrpc.rpc.response_handler import HandlerState, ResponseHandler


def make_handler(delegate=None, callback="method_call_did_return", result_type=None, fallback=None):
    call = new_call("getUserDetails", ["user1234"])
    endpoint = SimpleNamespace(delegate=fallback)
    handler = ResponseHandler(call, endpoint=endpoint)
    if delegate is not None:
        handler.set_delegate(delegate, callback, result_type=result_type)
    return handler


def reply(handler, **members):
    node = {"jsonrpc": "2.0", "id": handler.call.id}
    node.update(members)
    return json.dumps(node).encode("utf-8")


class TestSuccessfulReplies:
    """Test result delivery"""

    def test_generic_result(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler, result={"firstname": "Ada"}))

        assert delegate.results == [(handler.call, {"firstname": "Ada"}, None)]
        assert delegate.failures == []
        assert handler.state is HandlerState.DELIVERED

    def test_null_result(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Person)
        handler.handle_response(reply(handler, result=None))

        assert delegate.results == [(handler.call, None, None)]

    def test_v1_reply_with_null_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        body = json.dumps({"result": "pong", "error": None, "id": handler.call.id})
        handler.handle_response(body.encode("utf-8"))

        assert delegate.results == [(handler.call, "pong", None)]

    def test_single_converted_instance(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Person)
        handler.handle_response(reply(handler, result={"firstname": "Ada", "lastname": "Lovelace"}))

        _, result, error = delegate.results[0]
        assert error is None
        assert result == Person("Ada", "Lovelace")

    def test_array_converted_in_order(self):
        class Item:
            def __init__(self, a):
                self.a = a

            @classmethod
            def from_json(cls, node):
                return cls(node["a"])

        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Item)
        handler.handle_response(reply(handler, result=[{"a": 1}, {"a": 2}]))

        _, result, error = delegate.results[0]
        assert error is None
        assert [item.a for item in result] == [1, 2]
        assert all(isinstance(item, Item) for item in result)

    def test_result_type_set_separately(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        assert handler.set_result_type(Person) is handler
        handler.handle_response(reply(handler, result={"firstname": "Ada"}))

        assert delegate.results[0][1] == Person("Ada")


class TestServerErrors:
    """Test server error replies"""

    def test_server_error_goes_to_callback_only(self):
        fallback = RecordingDelegate("fallback")
        delegate = RecordingDelegate()
        handler = make_handler(delegate, fallback=fallback)
        handler.handle_response(reply(handler, error={"code": -32601, "message": "method not found", "data": None}))

        call, result, error = delegate.results[0]
        assert result is None
        assert isinstance(error, ServerError)
        assert error.code == -32601
        assert error.message == "method not found"
        assert error.data is None
        assert error.call is handler.call
        assert delegate.failures == []
        assert fallback.failures == []
        assert handler.state is HandlerState.DELIVERED

    def test_server_error_data_verbatim(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler, error={"code": 42, "message": "bad", "data": {"field": "x"}}))

        error = delegate.results[0][2]
        assert error.data == {"field": "x"}

    def test_v1_string_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        body = json.dumps({"result": None, "error": "boom", "id": handler.call.id})
        handler.handle_response(body.encode("utf-8"))

        error = delegate.results[0][2]
        assert isinstance(error, ServerError)
        assert error.code is None
        assert error.message == "boom"
        assert error.data == "boom"


class TestInternalErrors:
    """Test parse and conversion failures"""

    def test_parse_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(b"<html>not json</html>")

        _, result, error = delegate.results[0]
        assert result is None
        assert isinstance(error, ParseError)
        assert error.raw_text == "<html>not json</html>"
        assert isinstance(error.cause, ValueError)
        assert delegate.failures == [(handler.call, error)]
        assert handler.state is HandlerState.FAILED

    def test_invalid_utf8(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(b"\xff\xfe{}")

        assert isinstance(delegate.results[0][2], ParseError)

    def test_id_mismatch(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        body = json.dumps({"jsonrpc": "2.0", "result": "ok", "id": "someone-else"})
        handler.handle_response(body.encode("utf-8"))

        _, result, error = delegate.results[0]
        assert result is None
        assert isinstance(error, ConversionError)
        assert error.node["id"] == "someone-else"
        assert delegate.failures == [(handler.call, error)]

    def test_missing_id(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(json.dumps({"jsonrpc": "2.0", "result": "ok"}).encode("utf-8"))

        assert isinstance(delegate.results[0][2], ConversionError)

    def test_both_result_and_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler, result=1, error={"code": 1, "message": "x"}))

        assert isinstance(delegate.results[0][2], ConversionError)

    def test_neither_result_nor_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler))

        assert isinstance(delegate.results[0][2], ConversionError)

    def test_non_object_reply(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(b"[1, 2, 3]")

        error = delegate.results[0][2]
        assert isinstance(error, ConversionError)
        assert error.node == [1, 2, 3]

    def test_conversion_failure_names_type(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Person)
        handler.handle_response(reply(handler, result={"lastname": "only"}))

        error = delegate.results[0][2]
        assert isinstance(error, ConversionError)
        assert error.type_name == "Person"
        assert error.node == {"lastname": "only"}
        assert error.call is handler.call

    def test_type_without_contract(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=int)
        handler.handle_response(reply(handler, result=5))

        error = delegate.results[0][2]
        assert isinstance(error, ConversionError)
        assert error.type_name == "int"

    def test_transport_error(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        failure = TransportError("connection refused", cause=ConnectionRefusedError())
        handler.handle_transport_error(failure)

        assert delegate.results == [(handler.call, None, failure)]
        assert delegate.failures == [(handler.call, failure)]
        assert failure.call is handler.call

    def test_deeply_nested_reply(self):
        fallback = RecordingDelegate("endpoint")
        delegate = RecordingDelegate("call")
        handler = make_handler(delegate, fallback=fallback)
        body = '{"id": "%s", "result": %s%s}' % (handler.call.id, "[" * 100000, "]" * 100000)
        handler.handle_response(body.encode("utf-8"))

        error = delegate.results[0][2]
        assert isinstance(error, ParseError)
        assert isinstance(error.cause, RecursionError)
        assert handler.state is HandlerState.FAILED
        assert delegate.failures == [(handler.call, error)]
        assert fallback.failures == [(handler.call, error)]

    @pytest.mark.parametrize("value", [0, "", False])
    def test_falsy_result_for_protobuf_type(self, value):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Struct)
        handler.handle_response(reply(handler, result=value))

        _, result, error = delegate.results[0]
        assert result is None
        assert isinstance(error, ConversionError)
        assert handler.state is HandlerState.FAILED

    def test_empty_object_for_protobuf_type(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, result_type=Struct)
        handler.handle_response(reply(handler, result={}))

        assert delegate.results == [(handler.call, Struct(), None)]

    def test_internal_error_from_endpoint(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        failure = ConversionError(b"...", None, "reply could not be processed")
        handler.handle_internal_error(failure)

        assert delegate.results == [(handler.call, None, failure)]
        assert delegate.failures == [(handler.call, failure)]

    def test_server_error_is_not_internal(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        with pytest.raises(TypeError):
            handler.handle_internal_error(ServerError(-32000, "boom"))

        assert not handler.done
        assert delegate.failures == []


class TestCallbackConfiguration:
    """Test delegate/callback configuration forms"""

    def test_set_delegate_returns_handler(self):
        handler = make_handler()
        delegate = RecordingDelegate()
        assert handler.set_delegate(delegate, "method_call_did_return") is handler
        assert handler.delegate is delegate

    def test_bound_method_callback(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, delegate.method_call_did_return)
        handler.handle_response(reply(handler, result=1))

        assert delegate.results == [(handler.call, 1, None)]

    def test_bound_method_does_not_keep_delegate_alive(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate, delegate.method_call_did_return)
        del delegate
        gc.collect()

        assert handler.delegate is None
        handler.handle_response(reply(handler, result=1))

    def test_plain_function_without_delegate(self):
        received = []
        handler = make_handler()
        handler.set_delegate(None, lambda call, result, error: received.append((result, error)))
        handler.handle_response(reply(handler, result="ok"))

        assert received == [("ok", None)]

    def test_unknown_callback_name(self):
        delegate = CallbackOnlyDelegate()
        handler = make_handler(delegate, "no_such_method")
        handler.handle_response(reply(handler, result="ok"))

        assert delegate.results == []
        assert handler.state is HandlerState.DELIVERED

    def test_invalid_callback(self):
        handler = make_handler()
        with pytest.raises(TypeError):
            handler.set_delegate(RecordingDelegate(), 42)

    def test_configuration_after_delivery(self):
        handler = make_handler()
        handler.handle_response(reply(handler, result="ok"))

        with pytest.raises(RuntimeError):
            handler.set_delegate(RecordingDelegate(), "method_call_did_return")
        with pytest.raises(RuntimeError):
            handler.set_result_type(Person)

    def test_delegate_without_weakref_slot(self):
        class Slotted:
            __slots__ = ("name",)

            def method_call_did_return(self, call, result, error):
                pass

        handler = make_handler()
        with pytest.raises(TypeError, match="__weakref__"):
            handler.set_delegate(Slotted(), "method_call_did_return")

    def test_delegate_with_weakref_slot(self):
        class Slotted:
            __slots__ = ("results", "__weakref__")

            def __init__(self):
                self.results = []

            def method_call_did_return(self, call, result, error):
                self.results.append(result)

        delegate = Slotted()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler, result="ok"))

        assert delegate.results == ["ok"]


class TestDeliverySemantics:
    """Test exactly-once delivery and discarded delegates"""

    def test_unconfigured_handler(self):
        handler = make_handler()
        handler.handle_response(reply(handler, result="ok"))
        assert handler.done

    def test_delivered_exactly_once(self):
        delegate = RecordingDelegate()
        handler = make_handler(delegate)
        handler.handle_response(reply(handler, result=1))
        handler.handle_response(reply(handler, result=2))
        handler.handle_transport_error(TransportError("late"))

        assert delegate.results == [(handler.call, 1, None)]
        assert delegate.failures == []

    def test_discarded_delegate_is_noop(self):
        delegate = RecordingDelegate()
        results = delegate.results
        handler = make_handler(delegate)
        del delegate
        gc.collect()

        handler.handle_response(reply(handler, result="late"))
        handler_failure = make_handler(RecordingDelegate())
        gc.collect()
        handler_failure.handle_response(b"garbage")

        assert results == []
        assert handler.done
        assert handler_failure.state is HandlerState.FAILED

    def test_callback_exception_is_contained(self):
        def explode(call, result, error):
            raise RuntimeError("callback bug")

        handler = make_handler()
        handler.set_delegate(None, explode)
        handler.handle_response(reply(handler, result="ok"))

        assert handler.state is HandlerState.DELIVERED

    def test_wait_returns_outcome(self):
        handler = make_handler()

        async def scenario():
            handler.handle_response(reply(handler, result=[1, 2]))
            return await handler.wait()

        assert run_async(scenario()) == ([1, 2], None)

    def test_wait_before_delivery(self):
        handler = make_handler()

        async def scenario():
            waiter = asyncio.ensure_future(handler.wait())
            await asyncio.sleep(0)
            assert not waiter.done()
            handler.handle_response(b"not json")
            return await waiter

        result, error = run_async(scenario())
        assert result is None
        assert isinstance(error, ParseError)

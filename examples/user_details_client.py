#!/usr/bin/env python
"""
JSON-RPC Client Example

Calls a JSON-RPC web service, converts the result into Person objects and shows
how internal errors fall back from the call's delegate to the endpoint's delegate.

Usage:
    SEAM_JSONRPC_URL=http://localhost:8080/json python examples/user_details_client.py user1234
"""

import sys
import asyncio
import logging

from seam_jsonrpc import ClientConfig, ServiceEndpoint
from seam_jsonrpc.telemetry.tracer import setup_tracer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

class Person:
    """Person returned by the getUserDetails method"""

    def __init__(self, first_name: str, last_name: str):
        self.first_name = first_name
        self.last_name = last_name

    @classmethod
    def from_json(cls, node):
        return cls(node["firstname"], node["lastname"])

    def to_json(self):
        return {"firstname": self.first_name, "lastname": self.last_name}

    def __repr__(self):
        return f"<Person {self.first_name} {self.last_name}>"

class NetworkAlerts:
    """Endpoint-wide fallback for internal errors"""

    def method_call_did_fail(self, call, error) -> bool:
        logger.warning(f"Service unreachable while calling {call.method}: {error}")
        return False

class UserScreen:
    """Receives the result of one call"""

    def method_call_did_return_user(self, call, person, error):
        if error:
            logger.error(f"Error in method call {call.method}: {error}")
        else:
            logger.info(f"Received person: {person}")

    def method_call_did_fail(self, call, error) -> bool:
        logger.info("getUserDetails failed, forwarding to the endpoint delegate")
        return True

async def main(user_id: str):
    config = ClientConfig.from_env()
    if config.enable_tracing:
        setup_tracer(config.service_name)

    alerts = NetworkAlerts()
    screen = UserScreen()
    async with ServiceEndpoint.from_config(config, delegate=alerts) as service:
        service.call_method_with_name_and_params("getUserDetails", user_id).set_delegate(
            screen, "method_call_did_return_user", result_type=Person
        )

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "user1234"))

"""
Explicit method dispatch for a service endpoint

Maps remote method names to call constructors so remote methods can be invoked
by name without building MethodCall objects by hand.
"""

from typing import Any, Callable, Dict, Iterable


class ServiceProxy:
    """Name-based entry point over ``ServiceEndpoint.call_method``

    ``proxy.invoke("echo", "Hello there")`` is equivalent to
    ``endpoint.call_method_with_name_and_params("echo", "Hello there")``.
    Registered names are also reachable as ``proxy["echo"]("Hello there")``.
    """

    def __init__(self, endpoint, methods: Iterable[str] = ()):
        self.endpoint = endpoint
        self._methods: Dict[str, Callable[..., Any]] = {}
        for name in methods:
            self.register(name)

    def register(self, name: str) -> "ServiceProxy":
        if not name:
            raise ValueError("Method name must be a non-empty string")
        self._methods[name] = lambda *params: self.invoke(name, *params)
        return self

    @property
    def methods(self):
        return sorted(self._methods)

    def invoke(self, name: str, *params: Any):
        """Call remote method ``name`` with positional params

        Returns:
            ResponseHandler: handler of the dispatched call
        """
        return self.endpoint.call_method(self.endpoint.new_call(name, params))

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._methods[name]

    def __contains__(self, name: str) -> bool:
        return name in self._methods

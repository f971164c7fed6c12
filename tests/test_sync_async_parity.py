"""Sync/Async API parity tests.

Validates that RestClient and AsyncRestClient expose the same methods with
matching signatures.
"""

import inspect
from collections.abc import Callable
from typing import Any

import pytest

from restenvelope import AsyncRestClient, RestClient


def get_param_names(func: Callable) -> list[str]:
    """Extract parameter names from a function signature."""
    sig = inspect.signature(func)
    return [
        name
        for name, param in sig.parameters.items()
        if param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def get_param_defaults(func: Callable) -> dict[str, Any]:
    """Extract parameter defaults from a function signature."""
    sig = inspect.signature(func)
    return {
        name: param.default
        for name, param in sig.parameters.items()
        if param.default is not inspect.Parameter.empty
    }


def compare_signatures(sync_func: Callable, async_func: Callable) -> list[str]:
    """Compare signatures of sync and async functions.

    Returns a list of differences (empty if signatures match).
    """
    differences = []

    sync_params = get_param_names(sync_func)
    async_params = get_param_names(async_func)

    if sync_params != async_params:
        differences.append(f"Parameter names differ: sync={sync_params}, async={async_params}")

    sync_defaults = get_param_defaults(sync_func)
    async_defaults = get_param_defaults(async_func)

    for name in set(sync_defaults.keys()) & set(async_defaults.keys()):
        if sync_defaults[name] != async_defaults[name]:
            differences.append(
                f"Default for '{name}' differs: "
                f"sync={sync_defaults[name]}, async={async_defaults[name]}"
            )

    return differences


REQUEST_METHODS = [
    "request",
    "request_raw",
    "request_with_retry",
    "auth_request",
    "auth_request_with_retry",
    "opt_auth_request",
    "opt_auth_request_with_retry",
    "upload",
    "upload_file",
]


class TestClientSignatureParity:
    @pytest.mark.parametrize("name", REQUEST_METHODS)
    def test_method_signatures_match(self, name):
        differences = compare_signatures(getattr(RestClient, name), getattr(AsyncRestClient, name))
        assert not differences, f"Signature differences: {differences}"

    @pytest.mark.parametrize("name", REQUEST_METHODS)
    def test_async_methods_are_coroutines(self, name):
        assert inspect.iscoroutinefunction(getattr(AsyncRestClient, name))
        assert not inspect.iscoroutinefunction(getattr(RestClient, name))

    def test_constructor_signatures_match(self):
        differences = compare_signatures(RestClient.__init__, AsyncRestClient.__init__)
        assert not differences, f"Signature differences: {differences}"

    def test_shared_configuration_surface(self):
        for name in ("config", "authentication", "set_authentication", "set_debug"):
            assert hasattr(RestClient, name)
            assert hasattr(AsyncRestClient, name)

    def test_close_methods(self):
        assert callable(RestClient.close)
        assert inspect.iscoroutinefunction(AsyncRestClient.aclose)

"""Tests for ClientConfig and HTTPMethod parameter placement."""

import pytest

from restenvelope import ClientConfig, HTTPMethod
from restenvelope._core import coerce_method


class TestHTTPMethod:
    @pytest.mark.parametrize("method", [HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.OPTIONS])
    def test_url_encoding_methods(self, method):
        assert method.encodes_params_in_url
        assert not method.encodes_params_in_body

    @pytest.mark.parametrize("method", [HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH])
    def test_body_encoding_methods(self, method):
        assert method.encodes_params_in_body
        assert not method.encodes_params_in_url

    def test_delete_sends_no_params(self):
        assert not HTTPMethod.DELETE.encodes_params_in_url
        assert not HTTPMethod.DELETE.encodes_params_in_body

    def test_coerce_method_accepts_strings(self):
        assert coerce_method("post") is HTTPMethod.POST
        assert coerce_method(HTTPMethod.PATCH) is HTTPMethod.PATCH

    def test_coerce_method_rejects_unknown(self):
        with pytest.raises(ValueError):
            coerce_method("TRACE")


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.scheme == "https"
        assert config.host == "www.atonline.com"
        assert config.rest_path == "/_special/rest/"
        assert config.client_id is None
        assert config.context_params == {}
        assert config.request_timeout == 60
        assert config.resource_timeout == 300
        assert config.upload_request_timeout == 300
        assert config.upload_resource_timeout == 3600
        assert config.max_connections_per_host == 50

    def test_build_url(self):
        config = ClientConfig(host="api.example.com")
        assert config.build_url("User:get") == "https://api.example.com/_special/rest/User:get"

    def test_with_context(self):
        config = ClientConfig(host="api.example.com").with_context(
            language="en-US", timezone="Asia/Tokyo"
        )
        assert config.context_params == {"_ctx[l]": "en-US", "_ctx[t]": "Asia/Tokyo"}

    def test_with_context_keeps_existing_params(self):
        config = ClientConfig(host="h", context_params={"a": "1"}).with_context(language="fr")
        assert config.context_params == {"a": "1", "_ctx[l]": "fr"}

    def test_with_context_does_not_mutate_original(self):
        original = ClientConfig(host="h")
        original.with_context(language="fr")
        assert original.context_params == {}

    def test_with_client_id(self):
        config = ClientConfig(host="h").with_client_id("cli-1")
        assert config.client_id == "cli-1"
        assert config.host == "h"

    def test_from_env(self, monkeypatch, mock_env_clear):
        monkeypatch.setenv("RESTENVELOPE_HOST", "env.example.com")
        monkeypatch.setenv("RESTENVELOPE_CLIENT_ID", "env-client")
        config = ClientConfig.from_env()
        assert config.host == "env.example.com"
        assert config.client_id == "env-client"
        assert config.scheme == "https"

    def test_from_env_defaults(self, mock_env_clear):
        config = ClientConfig.from_env()
        assert config.host == "www.atonline.com"
        assert config.client_id is None

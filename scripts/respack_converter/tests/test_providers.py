"""
Tests for manifest parsing and resource providers.
"""

import threading
import unittest
from unittest.mock import Mock, patch
import requests

from respack_converter.processing.classifier import SemanticRole
from respack_converter.providers import provider_registry
from respack_converter.providers.base import (
    ResourceManifest, ResourceProvider, ProviderRegistry,
    ProviderError, ManifestParseError, FetchError, ConfigurationError
)
from respack_converter.providers.http import HttpResourceProvider


class MockProvider(ResourceProvider):
    """In-memory provider for testing."""

    def __init__(self, config, payloads=None):
        super().__init__(config)
        self.payloads = payloads or {}

    def fetch_manifest(self, url):
        return ResourceManifest.from_dict(self.payloads[url])

    def fetch_bytes(self, url):
        if url not in self.payloads:
            raise FetchError(f"404 for {url}", "MockProvider", url=url)
        return self.payloads[url]


class TestResourceManifest(unittest.TestCase):
    """Test ResourceManifest parsing."""

    def test_valid_manifest(self):
        manifest = ResourceManifest.from_dict({
            "name": "Demo",
            "author": "A",
            "res": {"tap": "u1"},
            "includes_hit_songs": True,
        })

        self.assertEqual(manifest.name, "Demo")
        self.assertEqual(manifest.author, "A")
        self.assertEqual(dict(manifest.resources), {"tap": "u1"})

    def test_resources_are_read_only(self):
        manifest = ResourceManifest.from_dict({"name": "Demo", "author": "A", "res": {}})

        with self.assertRaises(TypeError):
            manifest.resources["tap"] = "u"

    def test_invalid_shapes(self):
        invalid = [
            [],
            "manifest",
            {"author": "A", "res": {}},
            {"name": "Demo", "res": {}},
            {"name": "Demo", "author": "A"},
            {"name": 1, "author": "A", "res": {}},
            {"name": "Demo", "author": "A", "res": ["tap"]},
            {"name": "Demo", "author": "A", "res": {"tap": 3}},
        ]
        for payload in invalid:
            with self.subTest(payload=payload):
                with self.assertRaises(ManifestParseError):
                    ResourceManifest.from_dict(payload)

    def test_unsafe_names(self):
        for name in ("", "..", "a/b", "a\\b"):
            with self.subTest(name=name):
                with self.assertRaises(ManifestParseError):
                    ResourceManifest.from_dict({"name": name, "author": "A", "res": {}})


class TestFetchAll(unittest.TestCase):
    """Test concurrent resource fetching."""

    def test_results_follow_classification_order(self):
        provider = MockProvider({"max_workers": 3}, {"u1": b"one", "u2": b"two", "u3": b"three"})
        classified = {
            SemanticRole.TAP: "u1",
            SemanticRole.DRAG: "u2",
            SemanticRole.TAP_SOUND: "u3",
        }

        assets = provider.fetch_all(classified)

        self.assertEqual([asset.role for asset in assets], list(classified))
        self.assertEqual([asset.data for asset in assets], [b"one", b"two", b"three"])

    def test_shared_url_fetched_per_role(self):
        provider = MockProvider({}, {"u": b"x"})

        assets = provider.fetch_all({SemanticRole.TAP: "u", SemanticRole.TAP_SOUND: "u"})

        self.assertEqual(len(assets), 2)

    def test_failure_propagates(self):
        provider = MockProvider({}, {"u1": b"one"})

        with self.assertRaises(FetchError):
            provider.fetch_all({SemanticRole.TAP: "u1", SemanticRole.DRAG: "missing"})

    def test_failure_cancels_pending_downloads(self):
        release = threading.Event()

        class FailFastProvider(MockProvider):
            def __init__(self, config):
                super().__init__(config)
                self.requested = []

            def fetch_bytes(self, url):
                self.requested.append(url)
                if url == "bad":
                    raise FetchError("404 for bad", "FailFastProvider", url=url)
                release.wait(timeout=2)
                return b"ok"

        provider = FailFastProvider({"max_workers": 1})
        classified = {
            SemanticRole.TAP: "bad",
            SemanticRole.DRAG: "u2",
            SemanticRole.FLICK: "u3",
            SemanticRole.TAP_SOUND: "u4",
            SemanticRole.DRAG_SOUND: "u5",
        }

        try:
            with self.assertRaises(FetchError):
                provider.fetch_all(classified)
        finally:
            release.set()

        self.assertEqual(provider.requested[0], "bad")
        self.assertLessEqual(len(provider.requested), 2)

    def test_empty(self):
        self.assertEqual(MockProvider({}).fetch_all({}), [])


class TestHttpResourceProvider(unittest.TestCase):
    """Test HttpResourceProvider with a mocked session."""

    def setUp(self):
        self.provider = HttpResourceProvider({"timeout": 5})
        self.provider.session = Mock()

    def response(self, content=b"", json_data=None, status_error=None):
        response = Mock()
        response.content = content
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        if status_error:
            response.raise_for_status.side_effect = status_error
        return response

    def test_fetch_manifest(self):
        self.provider.session.get.return_value = self.response(
            json_data={"name": "Demo", "author": "A", "res": {"tap": "u1"}}
        )

        manifest = self.provider.fetch_manifest("https://example.com/pack")

        self.assertEqual(manifest.name, "Demo")
        self.provider.session.get.assert_called_once_with("https://example.com/pack", timeout=5)

    def test_fetch_manifest_not_json(self):
        self.provider.session.get.return_value = self.response(json_data=ValueError("Expecting value"))

        with self.assertRaises(ManifestParseError):
            self.provider.fetch_manifest("https://example.com/pack")

    def test_fetch_manifest_wrong_shape(self):
        self.provider.session.get.return_value = self.response(json_data={"name": "Demo"})

        with self.assertRaises(ManifestParseError):
            self.provider.fetch_manifest("https://example.com/pack")

    def test_fetch_bytes(self):
        self.provider.session.get.return_value = self.response(content=b"payload")

        self.assertEqual(self.provider.fetch_bytes("https://example.com/tap.png"), b"payload")

    def test_http_error(self):
        self.provider.session.get.return_value = self.response(
            status_error=requests.HTTPError("404 Client Error")
        )

        with self.assertRaises(FetchError) as ctx:
            self.provider.fetch_bytes("https://example.com/missing.png")

        self.assertEqual(ctx.exception.url, "https://example.com/missing.png")
        self.assertTrue(ctx.exception.recoverable)

    def test_connection_error(self):
        self.provider.session.get.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(FetchError):
            self.provider.fetch_manifest("https://example.com/pack")

    def test_invalid_config(self):
        with self.assertRaises(ConfigurationError):
            HttpResourceProvider({"timeout": 0})

        with self.assertRaises(ConfigurationError):
            HttpResourceProvider({"max_workers": "many"})

    def test_user_agent(self):
        provider = HttpResourceProvider({"user_agent": "custom/1.0"})

        self.assertEqual(provider.session.headers["User-Agent"], "custom/1.0")

    def test_default_user_agent(self):
        provider = HttpResourceProvider({})

        self.assertEqual(provider.session.headers["User-Agent"], HttpResourceProvider.DEFAULT_USER_AGENT)


class TestProviderRegistry(unittest.TestCase):
    """Test provider registration."""

    def test_http_registered(self):
        self.assertIn("http", provider_registry.list_available_provider_classes())
        self.assertIsInstance(provider_registry.create_provider("http", {}), HttpResourceProvider)

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError):
            ProviderRegistry().create_provider("ftp", {})

    def test_register_invalid_class(self):
        with self.assertRaises(ValueError):
            ProviderRegistry().register_provider_class("bad", object)


class TestProviderErrors(unittest.TestCase):
    """Test provider error classes."""

    def test_hierarchy(self):
        self.assertTrue(issubclass(ManifestParseError, ProviderError))
        self.assertTrue(issubclass(FetchError, ProviderError))

    def test_manifest_parse_error(self):
        error = ManifestParseError("missing name")

        self.assertIn("Manifest error", str(error))
        self.assertFalse(error.recoverable)


if __name__ == '__main__':
    unittest.main()

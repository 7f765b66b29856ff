"""Tests for shared models."""

import unittest

from apicseed import ApiResult, App, ConfigurationError, SeedContext, Storage
from apicseed._context import get_default_context, reset_default_context, resolve_context
from apicseed._http import HttpErrorDetail
from apicseed._models import consumer_context


class TestApp(unittest.TestCase):
    """Tests for the App enum."""

    def test_parse_accepts_role_names(self):
        self.assertIs(App.parse("admin"), App.ADMIN)
        self.assertIs(App.parse(App.CONSUMER), App.CONSUMER)

    def test_parse_rejects_unknown_roles(self):
        with self.assertRaises(ConfigurationError) as ctx:
            App.parse("provider")
        self.assertIn("admin, manager, consumer", str(ctx.exception))

    def test_idp_scope(self):
        self.assertEqual(App.ADMIN.idp_scope, "admin")
        self.assertEqual(App.MANAGER.idp_scope, "provider")
        self.assertEqual(App.CONSUMER.idp_scope, "consumer")

    def test_api_root(self):
        self.assertEqual(App.ADMIN.api_root, "/api")
        self.assertEqual(App.MANAGER.api_root, "/api")
        self.assertEqual(App.CONSUMER.api_root, "/consumer-api")

    def test_str_is_value(self):
        self.assertEqual(f"{App.MANAGER}", "manager")

    def test_consumer_context(self):
        self.assertEqual(consumer_context("acme", "sandbox"), "acme.sandbox")


class TestApiResult(unittest.TestCase):
    """Tests for ApiResult."""

    def test_ok_when_no_error_nor_retry_errors(self):
        self.assertTrue(ApiResult(status=200, body={}).ok)

    def test_not_ok_with_error(self):
        error = HttpErrorDetail(request={}, response="not found")
        self.assertFalse(ApiResult(status=404, error=error).ok)

    def test_not_ok_with_retry_errors(self):
        self.assertFalse(ApiResult(retry_errors=(ValueError("boom"),)).ok)


class TestSeedContext(unittest.TestCase):
    """Tests for the session context."""

    def tearDown(self):
        reset_default_context()

    def test_default_context_is_shared(self):
        self.assertIs(get_default_context(), get_default_context())

    def test_reset_default_context_drops_state(self):
        context = get_default_context()
        context.storage.set("token:admin", "abc")

        reset_default_context()

        self.assertIsNot(get_default_context(), context)
        self.assertIsNone(get_default_context().storage.get("token:admin"))

    def test_resolve_context(self):
        context = SeedContext.create(storage=Storage())

        self.assertIs(resolve_context(context), context)
        self.assertIs(resolve_context(None), get_default_context())


if __name__ == "__main__":
    unittest.main()

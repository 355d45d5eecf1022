"""
Unit tests for `provider_api/cloudways_client.py` – CloudwaysClient request/response handling.

`requests.post` and `requests.get` are replaced with mocks returning synthetic response
objects, so no HTTP traffic happens. The tests pin down how each response body shape is
interpreted: the token exchange, the fixed-order interpretation of action responses, the raw
status read, and the handling of bodies that are not JSON. Transport errors are checked to
propagate untouched.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests

from provider_api.cloudways_client import DEFAULT_BASE_URL, CloudwaysClient
from provider_api.errors import (
    AuthenticationError,
    InvalidRequestError,
    OperationError,
    UnexpectedResponseError,
)
from provider_api.models import ActionResult, VarnishAction

BASE_URL = "http://cloudways.test/api/v1"


def _response(body, status_code=200):
    """Build a fake `requests.Response` whose `.json()` returns `body`."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = str(body)
    return resp


def _invalid_json_response(text, status_code=502):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.side_effect = ValueError("Expecting value")
    resp.text = text
    return resp


class TestObtainAccessToken(unittest.TestCase):
    """Token exchange: only a non-empty `access_token` counts as success."""

    def setUp(self):
        self.client = CloudwaysClient(base_url=BASE_URL + "/", timeout_s=5)

    @patch("provider_api.cloudways_client.requests.post")
    def test_returns_token_verbatim(self, mock_post):
        mock_post.return_value = _response({"access_token": "abc.def", "expires_in": 3600})

        token = self.client.obtain_access_token("me@example.com", "secret")

        self.assertEqual(token, "abc.def")
        mock_post.assert_called_once_with(
            f"{BASE_URL}/oauth/access_token",
            json={"email": "me@example.com", "api_key": "secret"},
            headers={"Content-Type": "application/json"},
            timeout=5,
        )

    @patch("provider_api.cloudways_client.requests.post")
    def test_missing_or_falsy_token_raises(self, mock_post):
        for body in ({}, None, {"access_token": ""}, {"access_token": None},
                     {"error": "invalid_credentials"}, ["access_token"]):
            with self.subTest(body=body):
                mock_post.return_value = _response(body)
                with self.assertRaises(AuthenticationError) as ctx:
                    self.client.obtain_access_token("me@example.com", "wrong")
                self.assertEqual(ctx.exception.body, body)

    @patch("provider_api.cloudways_client.requests.post")
    def test_non_json_body_raises_authentication_error(self, mock_post):
        mock_post.return_value = _invalid_json_response("<html>Bad Gateway</html>")

        with self.assertRaises(AuthenticationError) as ctx:
            self.client.obtain_access_token("me@example.com", "secret")
        self.assertEqual(ctx.exception.body, "<html>Bad Gateway</html>")


class TestExecuteAction(unittest.TestCase):
    """Action responses are checked in order: failure flag, success flag, anything else."""

    def setUp(self):
        self.client = CloudwaysClient(base_url=BASE_URL)

    @patch("provider_api.cloudways_client.requests.post")
    def test_status_true_completes_immediately(self, mock_post):
        mock_post.return_value = _response({"status": True})

        result = self.client.execute_action("tkn", "123456", "flush_all")

        self.assertEqual(result, ActionResult(completed=True))
        self.assertIsNone(result.operation_id)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], f"{BASE_URL}/service/varnish")
        self.assertEqual(kwargs["json"], {"server_id": 123456, "action": "flush_all"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tkn")

    @patch("provider_api.cloudways_client.requests.post")
    def test_status_true_wins_over_other_fields(self, mock_post):
        mock_post.return_value = _response(
            {"status": True, "operation_id": 42, "message": "ignored"}
        )

        result = self.client.execute_action("tkn", 1, VarnishAction.PURGE)

        self.assertTrue(result.completed)
        self.assertEqual(mock_post.call_args.kwargs["json"]["action"], "purge")

    @patch("provider_api.cloudways_client.requests.post")
    def test_status_false_uses_provider_message(self, mock_post):
        body = {"status": False, "message": "Server is not running"}
        mock_post.return_value = _response(body)

        with self.assertRaises(OperationError) as ctx:
            self.client.execute_action("tkn", 1, "flush_all")

        self.assertEqual(ctx.exception.message, "Server is not running")
        self.assertEqual(str(ctx.exception), "Operation failed: Server is not running")
        self.assertEqual(ctx.exception.body, body)

    @patch("provider_api.cloudways_client.requests.post")
    def test_status_false_without_message_is_unknown_error(self, mock_post):
        for body in ({"status": False}, {"status": False, "message": ""},
                     {"status": False, "operation_id": 7}):
            with self.subTest(body=body):
                mock_post.return_value = _response(body)
                with self.assertRaises(OperationError) as ctx:
                    self.client.execute_action("tkn", 1, "flush_all")
                self.assertEqual(ctx.exception.message, "Unknown error")

    @patch("provider_api.cloudways_client.requests.post")
    def test_other_shapes_are_unexpected(self, mock_post):
        for body in ({}, {"status": "pending"}, {"status": 1}, {"operation_id": 9}, None, "ok"):
            with self.subTest(body=body):
                mock_post.return_value = _response(body)
                with self.assertRaises(UnexpectedResponseError) as ctx:
                    self.client.execute_action("tkn", 1, "flush_all")
                self.assertEqual(ctx.exception.body, body)

    @patch("provider_api.cloudways_client.requests.post")
    def test_invalid_server_id_fails_before_network(self, mock_post):
        for server_id in ("abc", "12abc", "", None, True, 1.5):
            with self.subTest(server_id=server_id):
                with self.assertRaises(InvalidRequestError):
                    self.client.execute_action("tkn", server_id, "flush_all")
        mock_post.assert_not_called()

    @patch("provider_api.cloudways_client.requests.post")
    def test_empty_action_fails_before_network(self, mock_post):
        with self.assertRaises(InvalidRequestError):
            self.client.execute_action("tkn", 1, "")
        mock_post.assert_not_called()

    @patch("provider_api.cloudways_client.requests.post")
    def test_non_json_body_is_unexpected(self, mock_post):
        mock_post.return_value = _invalid_json_response("Service Unavailable", 503)

        with self.assertRaises(UnexpectedResponseError) as ctx:
            self.client.execute_action("tkn", 1, "flush_all")
        self.assertIn("HTTP 503", str(ctx.exception))

    @patch("provider_api.cloudways_client.requests.post")
    def test_transport_errors_propagate(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(requests.ConnectionError):
            self.client.execute_action("tkn", 1, "flush_all")


class TestGetOperationStatus(unittest.TestCase):
    """The status read is a single GET returning the decoded body as-is."""

    @patch("provider_api.cloudways_client.requests.get")
    def test_returns_raw_body(self, mock_get):
        body = {"operation": {"is_completed": False, "message": "Queued"}, "extra": 1}
        mock_get.return_value = _response(body)
        client = CloudwaysClient(base_url=BASE_URL, timeout_s=3)

        self.assertEqual(client.get_operation_status("tkn", "987"), body)
        mock_get.assert_called_once_with(
            f"{BASE_URL}/operation/987",
            headers={"Authorization": "Bearer tkn", "Content-Type": "application/json"},
            timeout=3,
        )

    @patch("provider_api.cloudways_client.requests.get")
    def test_repeated_reads_of_completed_operation_are_stable(self, mock_get):
        mock_get.return_value = _response({"operation": {"is_completed": True}})
        client = CloudwaysClient(base_url=BASE_URL)

        first = client.get_operation_status("tkn", "987")
        second = client.get_operation_status("tkn", "987")

        self.assertEqual(first, second)
        self.assertTrue(second["operation"]["is_completed"])

    @patch("provider_api.cloudways_client.requests.get")
    def test_timeout_propagates(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(requests.Timeout):
            CloudwaysClient(base_url=BASE_URL).get_operation_status("tkn", "987")


class TestFromConfig(unittest.TestCase):
    def test_reads_cloudways_section(self):
        client = CloudwaysClient.from_config(
            {"cloudways": {"base_url": "https://staging.example/api/v1/", "request_timeout_s": 12}}
        )
        self.assertEqual(client.base_url, "https://staging.example/api/v1")
        self.assertEqual(client.timeout_s, 12.0)

    def test_falls_back_to_defaults(self):
        client = CloudwaysClient.from_config({})
        self.assertEqual(client.base_url, DEFAULT_BASE_URL)




class TestPublicMethodsAreDocumented(unittest.TestCase):
    def test_client_and_cli_entry_points_have_docstrings(self):
        from provider_api import cli

        for func in (CloudwaysClient.obtain_access_token, CloudwaysClient.execute_action,
                     CloudwaysClient.get_operation_status, cli.build_parser,
                     cli._add_polling_arguments, cli.main):
            with self.subTest(func=func.__qualname__):
                self.assertTrue((func.__doc__ or "").strip())


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3
"""
Test suite for DNS Records Client

This module provides testing for the session manager, the API boundary,
the list controllers and the command line.
"""

import json
import os
import tempfile
import time
import unittest
from unittest.mock import Mock, patch

import requests
from jose import jwt

from dns_records_client.api import AdminAPI, ApiClient, AuthAPI, DNSRecordsAPI
from dns_records_client.cli.main import main
from dns_records_client.core.errors import (
    ApiError,
    InvalidCredentials,
    RegistrationConflict,
    RegistrationFailed,
    SessionExpired,
    TransportError,
    ValidationError,
)
from dns_records_client.core.list_controller import (
    DIALOG_CREATE,
    DIALOG_DELETE,
    DIALOG_EDIT,
    RecordListController,
    ResourceListController,
    UserAdminController,
)
from dns_records_client.core.models import DNSRecord, ManagedUser, Page, TokenPair
from dns_records_client.core.routes import (
    ADMIN,
    DASHBOARD,
    LOADING,
    LOGIN,
    REGISTER,
    resolve_route,
)
from dns_records_client.core.session import SessionManager
from dns_records_client.core.token_store import TokenStore
from dns_records_client.utils.validators import (
    validate_ipv4,
    validate_login_form,
    validate_record_form,
    validate_registration_form,
)

NOW = 1_700_000_000


def make_token(username="alice", user_id=7, role="user", exp_offset=3600, **extra):
    claims = {"sub": username, "UserID": user_id, "Role": role, "iat": NOW}
    if exp_offset is not None:
        claims["exp"] = NOW + exp_offset
    claims.update(extra)
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def make_response(status=200, body=None, headers=None):
    response = requests.Response()
    response.status_code = status
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.headers.update(headers or {})
    return response


def make_html_response(status=200):
    response = make_response(status)
    response._content = b"<html>gateway</html>"
    response.headers["Content-Type"] = "text/html"
    return response


def make_record(record_id=1, domain="web.local", record_type="A", value="10.0.0.1", **kwargs):
    return DNSRecord(
        id=record_id,
        owner_user_id=kwargs.get("owner_user_id", 7),
        domain_name=domain,
        record_type=record_type,
        value=value,
        owner_username=kwargs.get("owner_username"),
    )


class TestValidators(unittest.TestCase):
    """Test the validation functions."""

    def test_validate_ipv4_valid(self):
        for ip in ["192.168.1.1", "10.0.0.0", "2.2.2.2", "255.255.255.255"]:
            with self.subTest(ip=ip):
                self.assertTrue(validate_ipv4(ip))

    def test_validate_ipv4_invalid(self):
        invalid_ips = [
            "",  # Empty
            "invalid-ip",
            "1.2.3",  # Too few octets
            "1.2.3.4.5",  # Too many octets
            "1.2.3.abc",  # Non-numeric
            "192.168.1.",  # Trailing dot
            "1234.1.1.1",  # Octet too long
        ]
        for ip in invalid_ips:
            with self.subTest(ip=ip):
                self.assertFalse(validate_ipv4(ip))

    def test_record_form_invalid_ip_for_a_record(self):
        errors = validate_record_form(
            {"DomainName": "test.local", "Type": "A", "Value": "invalid-ip"}
        )
        self.assertEqual(errors, {"Value": "Must be a valid IPv4 address for A record."})

    def test_record_form_required_fields(self):
        errors = validate_record_form({"DomainName": "", "Type": "CNAME", "Value": ""})
        self.assertEqual(errors["DomainName"], "Domain Name is required.")
        self.assertEqual(errors["Value"], "Value is required.")

    def test_record_form_cname_value_not_validated(self):
        errors = validate_record_form(
            {"DomainName": "alias.local", "Type": "CNAME", "Value": "not an address"}
        )
        self.assertEqual(errors, {})

    def test_record_form_unknown_type(self):
        errors = validate_record_form({"DomainName": "a.local", "Type": "MX", "Value": "x"})
        self.assertIn("Type", errors)

    def test_login_form(self):
        self.assertEqual(validate_login_form("alice", "pw"), {})
        errors = validate_login_form("", "")
        self.assertEqual(errors["username"], "Username is required")
        self.assertEqual(errors["password"], "Password is required")

    def test_registration_form(self):
        self.assertEqual(validate_registration_form("bob", "password1"), {})
        errors = validate_registration_form("bo", "short")
        self.assertEqual(errors["username"], "Username must be at least 3 characters long")
        self.assertEqual(errors["password"], "Password must be at least 8 characters long")


class TestTokenStore(unittest.TestCase):
    """Test persisted token storage."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store = TokenStore(os.path.join(self.tmpdir.name, "nested", "session.yaml"))

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_save_and_load(self):
        self.store.save(TokenPair("access", "refresh"))
        self.assertEqual(self.store.load(), TokenPair("access", "refresh"))

    def test_load_missing_file(self):
        self.assertIsNone(self.store.load())

    def test_half_written_pair_is_no_session(self):
        self.store.path.parent.mkdir(parents=True)
        self.store.path.write_text("accessToken: only-access\n")
        self.assertIsNone(self.store.load())

    def test_clear_is_idempotent(self):
        self.store.save(TokenPair("access", "refresh"))
        self.store.clear()
        self.store.clear()
        self.assertFalse(self.store.path.exists())

    def test_file_is_private(self):
        self.store.save(TokenPair("access", "refresh"))
        self.assertEqual(os.stat(self.store.path).st_mode & 0o777, 0o600)


class TestSessionManager(unittest.TestCase):
    """Test the session state machine."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store = TokenStore(os.path.join(self.tmpdir.name, "session.yaml"))
        self.auth_api = Mock()
        self.session = SessionManager(self.auth_api, self.store, clock=lambda: NOW)

    def tearDown(self):
        self.tmpdir.cleanup()

    @patch("dns_records_client.core.session.jwt.get_unverified_claims")
    def test_login_persists_tokens_and_sets_identity(self, mock_claims):
        self.auth_api.login.return_value = TokenPair("fake-access-token", "fake-refresh-token")
        mock_claims.return_value = {
            "sub": "testuser",
            "UserID": 1,
            "Role": "user",
            "iat": NOW,
            "exp": NOW + 3600,
        }

        identity = self.session.login("testuser", "password")

        self.auth_api.login.assert_called_once_with("testuser", "password")
        mock_claims.assert_called_once_with("fake-access-token")
        self.assertEqual(
            self.store.load(), TokenPair("fake-access-token", "fake-refresh-token")
        )
        self.assertEqual(identity.username, "testuser")
        self.assertEqual(self.session.identity.username, "testuser")
        self.assertTrue(self.session.identity.enabled)

    def test_login_rejected(self):
        self.auth_api.login.side_effect = InvalidCredentials(401, "Invalid username or password")

        with self.assertRaises(InvalidCredentials):
            self.session.login("testuser", "wrong")

        self.assertIsNone(self.session.identity)
        self.assertIsNone(self.store.load())

    def test_login_validation_sends_nothing(self):
        with self.assertRaises(ValidationError) as ctx:
            self.session.login("", "")
        self.assertIn("username", ctx.exception.errors)
        self.auth_api.login.assert_not_called()

    def test_logout_is_idempotent(self):
        self.store.save(TokenPair(make_token(), "refresh"))
        self.session.initialize()
        self.assertIsNotNone(self.session.identity)

        for _ in range(2):
            self.session.logout()
            self.assertIsNone(self.session.identity)
            self.assertIsNone(self.session.tokens)
            self.assertIsNone(self.store.load())

    def test_logout_without_session(self):
        self.session.logout()
        self.assertIsNone(self.session.identity)

    def test_initialize_restores_identity(self):
        self.store.save(TokenPair(make_token("admin", 1, "admin"), "refresh"))

        self.assertTrue(self.session.loading)
        identity = self.session.initialize()

        self.assertFalse(self.session.loading)
        self.assertEqual(identity.username, "admin")
        self.assertEqual(identity.id, 1)
        self.assertTrue(self.session.is_admin)

    def test_initialize_without_tokens(self):
        self.assertIsNone(self.session.initialize())
        self.assertFalse(self.session.loading)

    def test_expired_token_clears_session(self):
        self.store.save(TokenPair(make_token(exp_offset=-1), "refresh"))

        self.assertIsNone(self.session.initialize())
        self.assertIsNone(self.session.tokens)
        self.assertIsNone(self.store.load())

    def test_token_without_expiry_is_expired(self):
        self.store.save(TokenPair(make_token(exp_offset=None), "refresh"))
        self.assertIsNone(self.session.initialize())

    def test_undecodable_token_clears_session(self):
        self.store.save(TokenPair("not-a-jwt", "refresh"))

        self.assertIsNone(self.session.initialize())
        self.assertIsNone(self.store.load())

    def test_non_numeric_expiry_clears_session(self):
        for exp in ["1700003600", "soon", True]:
            with self.subTest(exp=exp):
                token = make_token(exp_offset=None, exp=exp)
                self.store.save(TokenPair(token, "refresh"))

                self.assertIsNone(self.session.initialize())
                self.assertIsNone(self.session.tokens)
                self.assertIsNone(self.store.load())

    def test_snake_case_claims(self):
        token = jwt.encode(
            {"sub": "carol", "user_id": 3, "role": "admin", "exp": NOW + 60},
            "test-secret",
            algorithm="HS256",
        )
        self.store.save(TokenPair(token, "refresh"))
        identity = self.session.initialize()
        self.assertEqual((identity.id, identity.role), (3, "admin"))

    def test_register_does_not_authenticate(self):
        self.session.register("newuser", "password123")

        self.auth_api.register.assert_called_once_with("newuser", "password123")
        self.assertIsNone(self.session.identity)
        self.assertIsNone(self.store.load())

    def test_register_conflict_propagates(self):
        self.auth_api.register.side_effect = RegistrationConflict(409, "Username already exists")
        with self.assertRaises(RegistrationConflict):
            self.session.register("taken", "password123")

    def test_register_validation(self):
        with self.assertRaises(ValidationError):
            self.session.register("ab", "short")
        self.auth_api.register.assert_not_called()


class TestRouteGating(unittest.TestCase):
    """Test view resolution for signed-in and anonymous users."""

    def session(self, role=None, loading=False):
        session = Mock()
        session.loading = loading
        if role is None:
            session.identity = None
        else:
            session.identity = Mock(is_admin=role == "admin")
        return session

    def test_non_admin_redirected_to_dashboard(self):
        self.assertEqual(resolve_route(self.session("user"), ADMIN), DASHBOARD)

    def test_admin_reaches_admin(self):
        self.assertEqual(resolve_route(self.session("admin"), ADMIN), ADMIN)

    def test_anonymous_redirected_to_login(self):
        self.assertEqual(resolve_route(self.session(), DASHBOARD), LOGIN)
        self.assertEqual(resolve_route(self.session(), ADMIN), LOGIN)

    def test_public_routes(self):
        self.assertEqual(resolve_route(self.session(), REGISTER), REGISTER)

    def test_loading(self):
        self.assertEqual(resolve_route(self.session(loading=True), DASHBOARD), LOADING)

    def test_unknown_route_goes_to_dashboard(self):
        self.assertEqual(resolve_route(self.session("user"), "/"), DASHBOARD)


class TestApiClient(unittest.TestCase):
    """Test the HTTP transport."""

    def setUp(self):
        self.http = Mock()
        self.http.headers = {}
        self.on_unauthorized = Mock()
        self.client = ApiClient(
            "http://dns.test/api/v1/",
            token_provider=lambda: "abc",
            on_unauthorized=self.on_unauthorized,
            session=self.http,
        )

    def test_bearer_header_attached(self):
        self.http.request.return_value = make_response(200, [])

        self.client.get("/dns-records", params={"page": 1})

        args, kwargs = self.http.request.call_args
        self.assertEqual(args, ("GET", "http://dns.test/api/v1/dns-records"))
        self.assertEqual(kwargs["headers"], {"Authorization": "Bearer abc"})
        self.assertEqual(kwargs["params"], {"page": 1})

    def test_401_forces_logout(self):
        self.http.request.return_value = make_response(401, {"error": "Invalid or expired token"})

        with self.assertRaises(SessionExpired):
            self.client.get("/dns-records")

        self.on_unauthorized.assert_called_once_with()

    def test_public_client_401_is_plain_error(self):
        client = ApiClient("http://dns.test", session=self.http)
        self.http.request.return_value = make_response(401, {"error": "nope"})

        with self.assertRaises(ApiError) as ctx:
            client.post("/auth/login", json={})

        self.assertNotIsInstance(ctx.exception, SessionExpired)
        self.assertEqual(ctx.exception.message, "nope")

    def test_message_preferred_over_error(self):
        self.http.request.return_value = make_response(
            409, {"message": "Domain taken", "error": "conflict"}
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.post("/dns-records", json={})
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.message, "Domain taken")

    def test_network_failure(self):
        self.http.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(TransportError):
            self.client.get("/dns-records")


class TestEndpoints(unittest.TestCase):
    """Test request shapes and response parsing."""

    def setUp(self):
        self.http = Mock()
        self.http.headers = {}
        self.client = ApiClient("http://dns.test", token_provider=lambda: "t", session=self.http)

    def test_login_request_and_response(self):
        self.http.request.return_value = make_response(
            200, {"AccessToken": "fake-access-token", "RefreshToken": "fake-refresh-token"}
        )

        pair = AuthAPI(self.client).login("testuser", "password")

        self.assertEqual(pair, TokenPair("fake-access-token", "fake-refresh-token"))
        kwargs = self.http.request.call_args[1]
        self.assertEqual(kwargs["json"], {"Username": "testuser", "Password": "password"})

    def test_login_accepts_camel_case(self):
        self.http.request.return_value = make_response(
            200, {"accessToken": "a", "refreshToken": "r"}
        )
        self.assertEqual(AuthAPI(self.client).login("u", "p"), TokenPair("a", "r"))

    def test_login_rejected(self):
        public = ApiClient("http://dns.test", session=self.http)
        self.http.request.return_value = make_response(401, {"error": "Invalid username or password"})
        with self.assertRaises(InvalidCredentials):
            AuthAPI(public).login("u", "bad")

    def test_register_errors(self):
        public = ApiClient("http://dns.test", session=self.http)
        self.http.request.return_value = make_response(409, {"error": "Username already exists"})
        with self.assertRaises(RegistrationConflict):
            AuthAPI(public).register("taken", "password1")

        self.http.request.return_value = make_response(500, None)
        with self.assertRaises(RegistrationFailed) as ctx:
            AuthAPI(public).register("new", "password1")
        self.assertNotIsInstance(ctx.exception, RegistrationConflict)

    def test_list_records_reads_total_header(self):
        self.http.request.return_value = make_response(
            200,
            [
                {"id": 1, "userId": 7, "domainName": "a.local", "type": "A", "value": "1.1.1.1"},
                {"ID": 2, "UserID": 8, "DomainName": "b.local", "Type": "CNAME",
                 "Value": "a.local", "Username": "bob"},
            ],
            {"x-total-count": "42"},
        )

        page = DNSRecordsAPI(self.client).list(page=3, page_size=2, search="local")

        self.assertEqual(page.total_count, 42)
        self.assertEqual([r.domain_name for r in page.items], ["a.local", "b.local"])
        self.assertEqual(page.items[1].owner_username, "bob")
        kwargs = self.http.request.call_args[1]
        self.assertEqual(kwargs["params"], {"page": 3, "pageSize": 2, "search": "local"})

    def test_list_records_missing_header(self):
        self.http.request.return_value = make_response(200, [])
        self.assertEqual(DNSRecordsAPI(self.client).list(1, 10).total_count, 0)

    def test_non_json_success_body(self):
        self.http.request.return_value = make_html_response(200)

        with self.assertRaises(ApiError) as ctx:
            DNSRecordsAPI(self.client).list(1, 10)
        self.assertEqual(ctx.exception.status_code, 200)
        self.assertEqual(ctx.exception.message, "Invalid response from server")

        with self.assertRaises(ApiError):
            AdminAPI(self.client).update_user_status(5, False)

    def test_unexpected_body_shape(self):
        self.http.request.return_value = make_response(200, {"records": []})
        with self.assertRaises(ApiError):
            DNSRecordsAPI(self.client).list(1, 10)

        self.http.request.return_value = make_response(200, ["not", "a", "record"])
        with self.assertRaises(ApiError):
            DNSRecordsAPI(self.client).get(1)

    def test_update_user_status(self):
        self.http.request.return_value = make_response(
            200, {"id": 5, "username": "eve", "role": "user", "isEnabled": False}
        )

        user = AdminAPI(self.client).update_user_status(5, False)

        args, kwargs = self.http.request.call_args
        self.assertEqual(args, ("PUT", "http://dns.test/admin/users/5/status"))
        self.assertEqual(kwargs["json"], {"isEnabled": False})
        self.assertFalse(user.enabled)


class TestRecordListController(unittest.TestCase):
    """Test the record list synchronization protocol."""

    def setUp(self):
        self.api = Mock()
        self.records = [make_record(1), make_record(2, "db.local", value="10.0.0.2")]
        self.api.list.return_value = Page(items=self.records, total_count=2)
        self.controller = RecordListController(self.api, page_size=10, search_debounce=0)

    def test_fetch_replaces_items(self):
        self.assertTrue(self.controller.fetch_page())

        self.api.list.assert_called_once_with(page=1, page_size=10, search="")
        self.assertEqual(self.controller.items, self.records)
        self.assertEqual(self.controller.total_count, 2)
        self.assertFalse(self.controller.loading)

    def test_change_page_beyond_last_is_noop(self):
        self.controller.fetch_page()
        self.api.list.reset_mock()

        self.assertFalse(self.controller.change_page(2))
        self.assertFalse(self.controller.change_page(5))
        self.assertFalse(self.controller.change_page(0))

        self.api.list.assert_not_called()
        self.assertEqual(self.controller.page, 1)

    def test_change_page_fetches_once(self):
        self.api.list.return_value = Page(items=self.records, total_count=25)
        self.controller.fetch_page()
        self.api.list.reset_mock()

        self.assertTrue(self.controller.change_page(3))

        self.api.list.assert_called_once_with(page=3, page_size=10, search="")
        self.assertEqual(self.controller.last_page, 3)

    def test_fetch_failure_keeps_items(self):
        self.controller.fetch_page()
        self.api.list.side_effect = ApiError(500, "boom")

        self.assertFalse(self.controller.fetch_page())

        self.assertEqual(self.controller.error, "Failed to fetch DNS records.")
        self.assertEqual(self.controller.items, self.records)

    def test_fetch_session_expired_propagates(self):
        self.api.list.side_effect = SessionExpired(401, "expired")
        with self.assertRaises(SessionExpired):
            self.controller.fetch_page()

    def test_invalid_ip_blocks_submission(self):
        self.controller.open_dialog(DIALOG_CREATE)

        ok = self.controller.submit_form(
            {"DomainName": "test.local", "Type": "A", "Value": "invalid-ip"}
        )

        self.assertFalse(ok)
        self.assertEqual(
            self.controller.dialog.field_errors["Value"],
            "Must be a valid IPv4 address for A record.",
        )
        self.api.create.assert_not_called()
        self.api.update.assert_not_called()

    def test_create_closes_dialog_and_refetches_once(self):
        self.controller.fetch_page()
        self.api.list.reset_mock()
        self.controller.open_dialog(DIALOG_CREATE)

        ok = self.controller.submit_form(
            {"DomainName": "new.local", "Type": "A", "Value": "2.2.2.2"}
        )

        self.assertTrue(ok)
        self.api.create.assert_called_once_with(
            {"DomainName": "new.local", "Type": "A", "Value": "2.2.2.2"}
        )
        self.assertIsNone(self.controller.dialog)
        self.assertEqual(self.api.list.call_count, 1)

    def test_mutation_failure_keeps_dialog_open(self):
        self.api.create.side_effect = ApiError(409, "Domain name already exists")
        self.controller.open_dialog(DIALOG_CREATE)

        ok = self.controller.submit_form(
            {"DomainName": "dup.local", "Type": "CNAME", "Value": "web.local"}
        )

        self.assertFalse(ok)
        self.assertEqual(self.controller.dialog.mode, DIALOG_CREATE)
        self.assertEqual(self.controller.dialog.server_error, "Domain name already exists")
        self.assertFalse(self.controller.dialog.submitting)
        self.api.list.assert_not_called()

    def test_mutation_failure_fallback_message(self):
        self.api.update.side_effect = ApiError(500)
        self.controller.open_dialog(DIALOG_EDIT, self.records[0])

        self.controller.submit_form(self.controller.dialog.form)

        self.assertEqual(self.controller.dialog.server_error, "Failed to edit record.")

    def test_edit_round_trip(self):
        self.controller.fetch_page()
        record = self.controller.items[0]
        dialog = self.controller.open_dialog(DIALOG_EDIT, record)

        self.assertTrue(self.controller.submit_form(dict(dialog.form)))

        self.api.update.assert_called_once_with(
            record.id,
            {"DomainName": record.domain_name, "Type": record.record_type, "Value": record.value},
        )

    def test_confirm_delete(self):
        self.controller.open_dialog(DIALOG_DELETE, self.records[1])

        self.assertTrue(self.controller.confirm_delete())

        self.api.delete.assert_called_once_with(2)
        self.assertIsNone(self.controller.dialog)
        self.api.list.assert_called_once()

    def test_delete_failure(self):
        self.api.delete.side_effect = TransportError("down")
        self.controller.open_dialog(DIALOG_DELETE, self.records[1])

        self.assertFalse(self.controller.confirm_delete())
        self.assertEqual(self.controller.dialog.server_error, "Failed to delete record.")

    def test_search_resets_page(self):
        self.api.list.return_value = Page(items=self.records, total_count=30)
        self.controller.fetch_page()
        self.controller.change_page(3)
        self.api.list.reset_mock()

        self.controller.set_search("web")

        self.assertEqual(self.controller.page, 1)
        self.api.list.assert_called_once_with(page=1, page_size=10, search="web")

    def test_search_keeps_page_when_configured(self):
        controller = RecordListController(
            self.api, search_debounce=0, reset_page_on_search=False
        )
        self.api.list.return_value = Page(items=self.records, total_count=30)
        controller.fetch_page()
        controller.change_page(2)

        controller.set_search("web")

        self.assertEqual(controller.page, 2)

    def test_same_search_does_not_refetch(self):
        self.controller.set_search("web")
        self.api.list.reset_mock()

        self.controller.set_search("web")

        self.api.list.assert_not_called()

    def test_search_is_debounced(self):
        controller = RecordListController(self.api, search_debounce=0.05)

        for term in ["w", "we", "web"]:
            controller.set_search(term)
        self.assertEqual(controller.search_term, "web")
        self.api.list.assert_not_called()

        time.sleep(0.3)

        self.api.list.assert_called_once_with(page=1, page_size=10, search="web")
        self.assertEqual(controller.debounced_search_term, "web")

    def test_flush_search(self):
        controller = RecordListController(self.api, search_debounce=60)
        controller.set_search("db")

        self.assertTrue(controller.flush_search())
        self.assertFalse(controller.flush_search())
        self.api.list.assert_called_once_with(page=1, page_size=10, search="db")
        controller.close()

    def test_stale_response_discarded(self):
        calls = []

        def fetcher(page, page_size, search):
            calls.append(page)
            if len(calls) == 1:
                # A newer request completes while this one is in flight.
                controller.fetch_page()
                return Page(items=["stale"], total_count=1)
            return Page(items=["fresh"], total_count=1)

        controller = ResourceListController(fetcher, search_debounce=0)

        self.assertFalse(controller.fetch_page())
        self.assertEqual(controller.items, ["fresh"])

    def _records_over_http(self, *responses):
        http = Mock()
        http.headers = {}
        http.request.side_effect = list(responses)
        client = ApiClient("http://dns.test", token_provider=lambda: "t", session=http)
        return http, RecordListController(DNSRecordsAPI(client), search_debounce=0)

    def test_non_json_list_body_sets_error(self):
        http, controller = self._records_over_http(make_html_response(200))

        self.assertFalse(controller.fetch_page())

        self.assertEqual(controller.error, "Failed to fetch DNS records.")
        self.assertFalse(controller.loading)
        self.assertEqual(controller.items, [])

    def test_non_json_create_body_still_refetches(self):
        http, controller = self._records_over_http(
            make_html_response(201),
            make_response(200, [], {"X-Total-Count": "0"}),
        )
        controller.open_dialog(DIALOG_CREATE)

        ok = controller.submit_form({"DomainName": "new.local", "Type": "A", "Value": "2.2.2.2"})

        self.assertTrue(ok)
        self.assertIsNone(controller.dialog)
        methods = [c[0][0] for c in http.request.call_args_list]
        self.assertEqual(methods, ["POST", "GET"])

    def test_timer_search_session_expired_is_recorded(self):
        self.api.list.side_effect = SessionExpired(401, "expired")
        controller = RecordListController(self.api, search_debounce=0.05)

        with patch("threading.excepthook") as excepthook:
            controller.set_search("web")
            time.sleep(0.3)

        excepthook.assert_not_called()
        self.assertTrue(controller.session_expired)
        self.assertEqual(controller.error, "Session expired, please log in again.")
        self.assertFalse(controller.loading)

    def test_flush_search_session_expired_propagates(self):
        self.api.list.side_effect = SessionExpired(401, "expired")
        controller = RecordListController(self.api, search_debounce=60)
        controller.set_search("web")

        with self.assertRaises(SessionExpired):
            controller.flush_search()

    def test_load_fetches_requested_page_once(self):
        self.api.list.return_value = Page(items=self.records, total_count=25)

        self.assertTrue(self.controller.load(page=2, search="web"))

        self.api.list.assert_called_once_with(page=2, page_size=10, search="web")
        self.assertEqual(self.controller.page, 2)
        self.assertEqual(self.controller.search_term, "web")

    def test_load_past_last_page(self):
        self.api.list.return_value = Page(items=self.records, total_count=25)

        self.assertFalse(self.controller.load(page=5))

        pages = [c[1]["page"] for c in self.api.list.call_args_list]
        self.assertEqual(pages, [5, 3])
        self.assertEqual(self.controller.page, 3)

    def test_admin_variant_shows_owner(self):
        controller = RecordListController(self.api, admin=True)
        headers = [column.header for column in controller.columns]
        self.assertIn("Owner", headers)
        self.assertNotIn("Owner", [c.header for c in self.controller.columns])


class TestUserAdminController(unittest.TestCase):
    """Test the user administration view."""

    def setUp(self):
        self.api = Mock()
        self.users = [
            ManagedUser(id=5, username="eve", role="user", enabled=True),
            ManagedUser(id=6, username="mallory", role="user", enabled=False),
        ]
        self.api.users_page.return_value = Page(items=self.users, total_count=2)
        self.controller = UserAdminController(self.api)

    def test_fetch_is_unpaginated(self):
        self.controller.fetch_page()
        self.api.users_page.assert_called_once_with()
        self.assertEqual(self.controller.last_page, 1)

    def test_toggle_disables_then_refetches_once(self):
        self.controller.fetch_page()
        self.api.users_page.reset_mock()

        self.assertTrue(self.controller.toggle_status(self.controller.find(5)))

        self.api.update_user_status.assert_called_once_with(5, False)
        self.assertEqual(self.api.users_page.call_count, 1)

    def test_toggle_failure(self):
        self.api.update_user_status.side_effect = ApiError(500)
        self.assertFalse(self.controller.toggle_status(self.users[1]))
        self.assertEqual(
            self.controller.status_error, "Failed to update status for user mallory."
        )
        self.api.users_page.assert_not_called()

    def test_fetch_failure_message(self):
        self.api.users_page.side_effect = TransportError("down")
        self.controller.fetch_page()
        self.assertEqual(self.controller.error, "Failed to fetch users.")


class TestCLI(unittest.TestCase):
    """Test command dispatch and view gating."""

    def setUp(self):
        patcher = patch("dns_records_client.cli.main.DNSRecordsClient")
        self.client_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = self.client_cls.return_value
        self.client.session.loading = False
        self.client.session.identity = Mock(username="alice", id=7, role="user", is_admin=False)
        self.records_api = Mock()
        self.records_api.list.return_value = Page(items=[make_record(1)], total_count=1)
        self.client.records_api = self.records_api
        self.client.record_list.side_effect = lambda admin=False: RecordListController(
            self.records_api, admin=admin, search_debounce=0
        )

    def test_non_admin_users_list_shows_dashboard(self):
        code = main(["users", "list"])

        self.assertEqual(code, 0)
        self.client.user_admin.assert_not_called()
        self.client.record_list.assert_called_once_with(admin=False)

    def test_records_list_requires_login(self):
        self.client.session.identity = None

        self.assertEqual(main(["records", "list"]), 1)
        self.records_api.list.assert_not_called()

    def test_records_list_page_is_one_request(self):
        self.records_api.list.return_value = Page(items=[make_record(11)], total_count=25)

        self.assertEqual(main(["records", "list", "--page", "2", "--search", "web"]), 0)

        self.records_api.list.assert_called_once_with(page=2, page_size=10, search="web")

    def test_start_failure_is_reported(self):
        self.client.start.side_effect = TransportError("down")
        self.assertEqual(main(["whoami"]), 1)

    def test_records_create_validation(self):
        code = main(["records", "create", "-d", "test.local", "-t", "A", "--value", "invalid-ip"])

        self.assertEqual(code, 1)
        self.records_api.create.assert_not_called()

    def test_records_create(self):
        code = main(["records", "create", "-d", "new.local", "--value", "2.2.2.2"])

        self.assertEqual(code, 0)
        self.records_api.create.assert_called_once_with(
            {"DomainName": "new.local", "Type": "A", "Value": "2.2.2.2"}
        )

    def test_records_update_keeps_unchanged_fields(self):
        self.records_api.get.return_value = make_record(3, "app.local", value="10.1.1.1")

        code = main(["records", "update", "3", "--value", "10.1.1.2"])

        self.assertEqual(code, 0)
        self.records_api.update.assert_called_once_with(
            3, {"DomainName": "app.local", "Type": "A", "Value": "10.1.1.2"}
        )

    def test_session_expired_reports_login(self):
        self.records_api.list.side_effect = SessionExpired(401, "expired")
        self.assertEqual(main(["records", "list"]), 1)

    def test_admin_user_disable(self):
        self.client.session.identity = Mock(username="root", id=1, role="admin", is_admin=True)
        admin_api = Mock()
        admin_api.users_page.return_value = Page(
            items=[ManagedUser(id=5, username="eve", role="user", enabled=True)],
            total_count=1,
        )
        self.client.user_admin.return_value = UserAdminController(admin_api)

        self.assertEqual(main(["users", "disable", "5"]), 0)
        admin_api.update_user_status.assert_called_once_with(5, False)

    def test_login_failure(self):
        self.client.session.login.side_effect = InvalidCredentials(401, "Invalid username or password")
        self.assertEqual(main(["login", "-u", "testuser", "-p", "wrong"]), 1)


if __name__ == "__main__":
    unittest.main()

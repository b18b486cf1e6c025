"""
Behave environment configuration for DNS Records Client scenarios.

Scenarios run against an in-memory backend that stands in for the
requests session, so no server is needed.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import urlparse

import requests

from dns_records_client.core.dns_records_client import API_URL_ENV, DNSRecordsClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_URL = "http://backend.test/api/v1"


class FakeBackend:
    """Answers the client's HTTP calls from in-memory users and records."""

    def __init__(self):
        self.headers = {}
        self.accounts = {}
        self.records = []
        self.users = []
        self.calls = []
        self.next_id = 100
        self.reject_tokens = False
        self.create_error = None

    def count(self, method, path):
        return sum(1 for call in self.calls if call[0] == method and call[1] == path)

    def last_call(self, method, path):
        for call in reversed(self.calls):
            if call[0] == method and call[1] == path:
                return call
        return None

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlparse(url).path[len(urlparse(BASE_URL).path):]
        self.calls.append((method, path, params, json, headers))
        logger.debug(f"{method} {path} params={params} json={json}")

        if self.reject_tokens and not path.startswith("/auth/"):
            return _response(401, {"error": "Invalid or expired token"})

        if path == "/auth/login":
            credentials = json or {}
            if self.accounts.get(credentials.get("Username")) != credentials.get("Password"):
                return _response(401, {"error": "Invalid username or password"})
            return _response(
                200,
                {"AccessToken": "fake-access-token", "RefreshToken": "fake-refresh-token"},
            )

        if path == "/auth/register":
            username = (json or {}).get("Username")
            if username in self.accounts:
                return _response(409, {"error": "Username already exists"})
            self.accounts[username] = json.get("Password")
            return _response(201)

        if path == "/dns-records" and method == "GET":
            page, page_size = params["page"], params["pageSize"]
            start = (page - 1) * page_size
            body = self.records[start:start + page_size]
            return _response(200, body, {"X-Total-Count": str(len(self.records))})

        if path == "/dns-records" and method == "POST":
            if self.create_error:
                return _response(409, {"error": self.create_error})
            record = {
                "id": self.next_id,
                "userId": 7,
                "domainName": json["DomainName"],
                "type": json["Type"],
                "value": json["Value"],
            }
            self.next_id += 1
            self.records.append(record)
            return _response(201, record)

        if path.startswith("/dns-records/") and method == "PUT":
            record = self._record(path)
            record.update(
                domainName=json["DomainName"], type=json["Type"], value=json["Value"]
            )
            return _response(200, record)

        if path == "/admin/users":
            return _response(200, self.users)

        if path.startswith("/admin/users/") and path.endswith("/status"):
            user_id = int(path.split("/")[3])
            user = next(u for u in self.users if u["id"] == user_id)
            user["isEnabled"] = json["isEnabled"]
            return _response(200, user)

        return _response(404, {"error": "not found"})

    def _record(self, path):
        record_id = int(path.rsplit("/", 1)[1])
        return next(r for r in self.records if r["id"] == record_id)


def _response(status, body=None, headers=None):
    response = requests.Response()
    response.status_code = status
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    response.headers.update(headers or {})
    return response


def before_scenario(context, scenario):
    """Set up each test scenario."""
    os.environ.pop(API_URL_ENV, None)
    context.tmpdir = tempfile.TemporaryDirectory()
    context.backend = FakeBackend()
    context.config_data = {
        "api": {"base_url": BASE_URL},
        "session": {"token_file": str(Path(context.tmpdir.name) / "session.yaml")},
        "records": {"page_size": 10, "search_debounce": 0},
    }
    context.client = DNSRecordsClient(context.config_data, http_session=context.backend)
    context.patches = []

    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Clean up after each test scenario."""
    for patcher in context.patches:
        patcher.stop()
    context.tmpdir.cleanup()

    logger.info(f"Completed scenario: {scenario.name}")

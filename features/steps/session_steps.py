"""
Step definitions for session and route gating scenarios.
"""

import time
from unittest.mock import patch

from behave import given, then, when
from jose import jwt

from dns_records_client.core.errors import (
    DNSRecordsClientError,
    InvalidCredentials,
    RegistrationConflict,
    SessionExpired,
)
from dns_records_client.core.models import TokenPair
from dns_records_client.core.routes import resolve_route


def issue_token(username, user_id, role, lifetime=3600):
    """Sign an access token shaped like the backend's."""
    now = int(time.time())
    claims = {
        "sub": username,
        "UserID": user_id,
        "Role": role,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, "behave-secret", algorithm="HS256")


@given('an account "{username}" with password "{password}"')
def step_impl(context, username, password):
    """Register an account directly on the backend."""
    context.backend.accounts[username] = password


@given('the backend issues tokens for "{username}" with role "{role}"')
def step_impl(context, username, role):
    """Make the opaque fake access token decode to the given user."""
    now = int(time.time())
    patcher = patch(
        "dns_records_client.core.session.jwt.get_unverified_claims",
        return_value={"sub": username, "UserID": 1, "Role": role, "iat": now, "exp": now + 3600},
    )
    patcher.start()
    context.patches.append(patcher)


@given('I am signed in as "{username}" with role "{role}"')
def step_impl(context, username, role):
    """Persist a valid session and start the client from it."""
    user_id = 1 if role == "admin" else 7
    context.client.store.save(
        TokenPair(issue_token(username, user_id, role), "refresh-token")
    )
    identity = context.client.start()
    assert identity is not None
    assert identity.username == username


@given('a stored session for "{username}" that has expired')
def step_impl(context, username):
    context.client.store.save(
        TokenPair(issue_token(username, 7, "user", lifetime=-60), "refresh-token")
    )


@given("the backend rejects my token")
def step_impl(context):
    context.backend.reject_tokens = True


@when('I log in as "{username}" with password "{password}"')
def step_impl(context, username, password):
    context.error = None
    try:
        context.identity = context.client.session.login(username, password)
    except DNSRecordsClientError as e:
        context.error = e


@when('I register as "{username}" with password "{password}"')
def step_impl(context, username, password):
    context.error = None
    try:
        context.client.session.register(username, password)
    except DNSRecordsClientError as e:
        context.error = e


@when("I log out")
def step_impl(context):
    context.client.session.logout()


@when("the client starts")
def step_impl(context):
    context.identity = context.client.start()


@when('I open the "{route}" view')
def step_impl(context, route):
    context.view = resolve_route(context.client.session, route)


@when("I view my records")
def step_impl(context):
    context.error = None
    context.controller = context.client.record_list()
    try:
        context.controller.fetch_page()
    except SessionExpired as e:
        context.error = e


@then('the token store holds "{access_token}" and "{refresh_token}"')
def step_impl(context, access_token, refresh_token):
    assert context.error is None, f"Login failed: {context.error}"
    assert context.client.store.load() == TokenPair(access_token, refresh_token)


@then("the token store is empty")
def step_impl(context):
    assert context.client.store.load() is None
    assert context.client.session.tokens is None


@then('the signed-in username is "{username}"')
def step_impl(context, username):
    assert context.client.session.identity is not None
    assert context.client.session.identity.username == username


@then("nobody is signed in")
def step_impl(context):
    assert context.client.session.identity is None


@then('the login fails with "{message}"')
def step_impl(context, message):
    assert isinstance(context.error, InvalidCredentials), f"Got {context.error!r}"
    assert context.error.message == message


@then('registration fails with "{message}"')
def step_impl(context, message):
    assert isinstance(context.error, RegistrationConflict), f"Got {context.error!r}"
    assert context.error.message == message


@then('I am shown the "{route}" view')
def step_impl(context, route):
    assert context.view == route, f"Expected {route}, got {context.view}"


@then("my session has expired")
def step_impl(context):
    assert isinstance(context.error, SessionExpired), f"Got {context.error!r}"

"""
Step definitions for user administration scenarios.
"""

from behave import given, then, when


def _user_fetches(context):
    return context.backend.count("GET", "/admin/users")


@given("the managed users:")
def step_impl(context):
    for row in context.table:
        context.backend.users.append(
            {
                "id": int(row["id"]),
                "username": row["username"],
                "role": "user",
                "isEnabled": row["enabled"] == "true",
            }
        )


@given("I am viewing the user list")
def step_impl(context):
    context.controller = context.client.user_admin()
    assert context.controller.fetch_page()
    context.fetches = _user_fetches(context)


@when('I toggle the status of "{username}"')
def step_impl(context, username):
    user = next(u for u in context.controller.items if u.username == username)
    assert context.controller.toggle_status(user), context.controller.status_error


@then('the status update for user {user_id:d} sent isEnabled "{enabled}"')
def step_impl(context, user_id, enabled):
    call = context.backend.last_call("PUT", f"/admin/users/{user_id}/status")
    assert call is not None
    assert call[3] == {"isEnabled": enabled == "true"}


@then("the user list was fetched {count:d} more time")
@then("the user list was fetched {count:d} more times")
def step_impl(context, count):
    actual = _user_fetches(context) - context.fetches
    assert actual == count, f"Expected {count} more fetches, got {actual}"


@then('"{username}" is shown as "{status}"')
def step_impl(context, username, status):
    user = next(u for u in context.controller.items if u.username == username)
    column = next(c for c in context.controller.columns if c.header == "Status")
    assert column.value(user) == status

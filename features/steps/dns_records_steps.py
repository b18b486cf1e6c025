"""
Step definitions for DNS record list scenarios.
"""

from behave import given, then, when

from dns_records_client.core.list_controller import DIALOG_CREATE, DIALOG_EDIT


def _add_record(context, domain, record_type, value):
    backend = context.backend
    backend.records.append(
        {
            "id": backend.next_id,
            "userId": 7,
            "domainName": domain,
            "type": record_type,
            "value": value,
        }
    )
    backend.next_id += 1


def _record_fetches(context):
    return context.backend.count("GET", "/dns-records")


@given("my records:")
def step_impl(context):
    for row in context.table:
        _add_record(context, row["domain"], row["type"], row["value"])


@given("{count:d} records exist")
def step_impl(context, count):
    for i in range(count):
        _add_record(context, f"host-{i}.local", "A", f"10.0.0.{i + 1}")


@given('the backend rejects new records with "{message}"')
def step_impl(context, message):
    context.backend.create_error = message


@given("I am viewing my records")
def step_impl(context):
    context.controller = context.client.record_list()
    assert context.controller.fetch_page()
    context.fetches = _record_fetches(context)


@when('I submit a new record "{domain}" of type "{record_type}" with value "{value}"')
def step_impl(context, domain, record_type, value):
    if not hasattr(context, "controller"):
        context.controller = context.client.record_list()
    context.controller.open_dialog(DIALOG_CREATE)
    context.submitted = context.controller.submit_form(
        {"DomainName": domain, "Type": record_type, "Value": value}
    )


@when('I edit "{domain}" and submit it unchanged')
def step_impl(context, domain):
    record = next(r for r in context.controller.items if r.domain_name == domain)
    dialog = context.controller.open_dialog(DIALOG_EDIT, record)
    context.edited = record
    context.submitted = context.controller.submit_form(dict(dialog.form))
    assert context.submitted


@when("I go to page {page:d}")
def step_impl(context, page):
    context.controller.change_page(page)


@when('I search for "{term}"')
def step_impl(context, term):
    context.controller.set_search(term)
    context.controller.flush_search()


@then('the form shows "{message}" for "{field_name}"')
def step_impl(context, message, field_name):
    assert not context.submitted
    assert context.controller.dialog.field_errors.get(field_name) == message


@then("no record was created or updated")
def step_impl(context):
    calls = context.backend.calls
    assert not [call for call in calls if call[0] in ("POST", "PUT")]


@then("the form is closed")
def step_impl(context):
    assert context.submitted
    assert context.controller.dialog is None


@then("the form stays open with \"{message}\"")
def step_impl(context, message):
    dialog = context.controller.dialog
    assert not context.submitted
    assert dialog is not None and dialog.mode == DIALOG_CREATE
    assert dialog.server_error == message


@then("the record list was fetched {count:d} more time")
@then("the record list was fetched {count:d} more times")
def step_impl(context, count):
    actual = _record_fetches(context) - context.fetches
    assert actual == count, f"Expected {count} more fetches, got {actual}"


@then('the list shows "{domain}"')
def step_impl(context, domain):
    assert domain in [r.domain_name for r in context.controller.items]


@then('the update for "{domain}" sent DomainName "{name}", Type "{record_type}" and Value "{value}"')
def step_impl(context, domain, name, record_type, value):
    assert context.edited.domain_name == domain
    call = context.backend.last_call("PUT", f"/dns-records/{context.edited.id}")
    assert call is not None
    assert call[3] == {"DomainName": name, "Type": record_type, "Value": value}


@then("I am on page {page:d}")
def step_impl(context, page):
    assert context.controller.page == page


@then('the last record request searched for "{term}"')
def step_impl(context, term):
    params = context.backend.last_call("GET", "/dns-records")[2]
    assert params.get("search") == term
    assert params["page"] == context.controller.page

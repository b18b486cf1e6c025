"""
Route gating for the client views.

Views are addressed by name. Public views are always reachable; the
dashboard needs a signed-in user and the admin console needs the admin
role, with non-admins sent to the dashboard instead.
"""

LOADING = "loading"
LOGIN = "login"
REGISTER = "register"
DASHBOARD = "dashboard"
ADMIN = "admin"

PUBLIC_ROUTES = (LOGIN, REGISTER)
ADMIN_ROUTES = (ADMIN,)


def resolve_route(session, route: str) -> str:
    """Return the view that should actually be shown for ``route``."""
    if route in PUBLIC_ROUTES:
        return route

    if session.loading:
        return LOADING

    if session.identity is None:
        return LOGIN

    if route in ADMIN_ROUTES:
        return ADMIN if session.identity.is_admin else DASHBOARD

    return DASHBOARD

"""Route guards: decide where a navigation lands, given the session.

Screens never redirect on their own; the navigator asks the guard before
entering a route and follows ``redirect_to`` when the route is refused.
"""

from dataclasses import dataclass

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"

PROTECTED_ROUTES = frozenset(
    {
        "/payment",
        "/profile",
        "/edit-profile",
        "/change-password",
        "/notification",
    }
)

# Only reachable while signed out
GUEST_ROUTES = frozenset({LOGIN_ROUTE, "/register"})

PROTECTED_ACTIONS = frozenset({"add_to_cart", "checkout"})


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_to: str | None = None


ALLOW = GuardDecision(allowed=True)


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0]
    return path.rstrip("/") or "/"


class RouteGuard:
    def __init__(self, store):
        self._store = store

    def check(self, path: str) -> GuardDecision:
        route = _normalize(path)
        signed_in = self._store.state.user is not None
        if route in PROTECTED_ROUTES and not signed_in:
            return GuardDecision(allowed=False, redirect_to=LOGIN_ROUTE)
        if route in GUEST_ROUTES and signed_in:
            return GuardDecision(allowed=False, redirect_to=HOME_ROUTE)
        return ALLOW

    def check_action(self, action: str) -> GuardDecision:
        if action in PROTECTED_ACTIONS and self._store.state.user is None:
            return GuardDecision(allowed=False, redirect_to=LOGIN_ROUTE)
        return ALLOW

"""Tests for the navigation guard."""

import asyncio

import pytest

from app.core.access import AccessDecision, FORBIDDEN_PATH, HOME_PATH, LOGIN_PATH, PENDING_APPROVAL_PATH
from app.core.guard import AnonymousSession, NavigationGuard
from app.core.permissions import Role


class StubSession:
    """Session state whose profile arrives when the test says so."""

    def __init__(self, *, role=Role.TEACHER, is_approved=True, loads=True):
        self.is_authenticated = True
        self.is_profile_loaded = False
        self.is_approved = False
        self.role = None
        self._profile_role = role
        self._profile_approved = is_approved
        self._loads = loads
        self.fetches = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def fetch_profile(self, force: bool = False):
        self.fetches += 1
        await self.gate.wait()
        if self._loads:
            self.is_profile_loaded = True
            self.is_approved = self._profile_approved
            self.role = self._profile_role


class TestNavigate:
    async def test_anonymous_redirected_to_login(self):
        guard = NavigationGuard(AnonymousSession())
        navigation = await guard.navigate("/students")

        assert navigation.decision is AccessDecision.REDIRECT_LOGIN
        assert navigation.redirect_to == LOGIN_PATH
        assert not navigation.allowed

    async def test_anonymous_allowed_on_login(self):
        navigation = await NavigationGuard(AnonymousSession()).navigate(LOGIN_PATH)
        assert navigation.allowed
        assert navigation.redirect_to is None

    async def test_defer_waits_for_profile_then_decides(self):
        session = StubSession(role=Role.SALES)
        navigation = await NavigationGuard(session).navigate("/students")

        assert session.fetches == 1
        assert navigation.decision is AccessDecision.REDIRECT_FORBIDDEN
        assert navigation.redirect_to == FORBIDDEN_PATH

    async def test_defer_then_pending_approval(self):
        session = StubSession(is_approved=False)
        navigation = await NavigationGuard(session).navigate(HOME_PATH)
        assert navigation.redirect_to == PENDING_APPROVAL_PATH

    async def test_profile_that_never_loads_stays_deferred(self):
        session = StubSession(loads=False)
        navigation = await NavigationGuard(session).navigate("/students")

        assert navigation.decision is AccessDecision.DEFER
        assert navigation.redirect_to is None
        assert not navigation.allowed

    async def test_loaded_profile_does_not_fetch(self):
        session = StubSession()
        guard = NavigationGuard(session)
        await guard.navigate(HOME_PATH)
        await guard.navigate("/lessons")
        assert session.fetches == 1


class TestLastNavigationWins:
    async def test_older_navigation_is_abandoned(self):
        session = StubSession(role=Role.TEACHER)
        session.gate.clear()
        guard = NavigationGuard(session)

        first = asyncio.create_task(guard.navigate("/leads"))
        await asyncio.sleep(0)
        second = asyncio.create_task(guard.navigate("/students"))
        await asyncio.sleep(0)
        session.gate.set()

        first_result, second_result = await asyncio.gather(first, second)

        assert first_result.superseded
        assert first_result.redirect_to is None
        assert not first_result.allowed
        assert not second_result.superseded
        assert second_result.allowed


class TestEvaluate:
    def test_evaluate_is_idempotent(self):
        session = StubSession()
        session.is_profile_loaded = True
        session.is_approved = True
        session.role = Role.SALES
        guard = NavigationGuard(session)

        results = {guard.evaluate("/students") for _ in range(3)}
        assert results == {AccessDecision.REDIRECT_FORBIDDEN}
        assert session.fetches == 0

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/users", AccessDecision.ALLOW),
            ("/sales/students", AccessDecision.ALLOW),
            (PENDING_APPROVAL_PATH, AccessDecision.REDIRECT_HOME),
            (LOGIN_PATH, AccessDecision.REDIRECT_HOME),
        ],
    )
    def test_superadmin(self, path, expected):
        session = StubSession()
        session.is_profile_loaded = True
        session.is_approved = True
        session.role = Role.SUPERADMIN
        assert NavigationGuard(session).evaluate(path) is expected

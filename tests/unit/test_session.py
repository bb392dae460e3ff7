# =============================================================================
# tests/unit/test_session.py
# Unit Tests for Session Role Switching
# =============================================================================

from types import SimpleNamespace

import pytest

from osca_core.models import UserRole
from osca_core.state import session


@pytest.fixture
def state(monkeypatch):
    """Plain dict standing in for st.session_state"""
    fake_st = SimpleNamespace(session_state={})
    monkeypatch.setattr(session, "st", fake_st)
    session.init_state()
    return fake_st.session_state


class TestSwitchSessionUser:

    def test_role_change_clears_filters(self, state):
        state.update(search_query="Reyes", status_filter="inactive", active_tab="offline")

        changed = session.switch_session_user(UserRole.BASCA, "Santiago", "Maria")

        assert changed
        assert state["search_query"] == ""
        assert state["status_filter"] == "all"
        assert state["active_tab"] == "online"
        assert state["barangay_filter"] == "Santiago"
        assert state["role"] == "basca"

    def test_same_scope_keeps_filters(self, state):
        state.update(search_query="Reyes", barangay_filter="Cadlan")

        changed = session.switch_session_user(UserRole.OSCA, None, "New name")

        assert not changed
        assert state["search_query"] == "Reyes"
        assert state["user_name"] == "New name"

    def test_barangay_change_counts_as_switch(self, state):
        session.switch_session_user(UserRole.BASCA, "Santiago")
        state["search_query"] = "Cruz"

        assert session.switch_session_user(UserRole.BASCA, "Cadlan")
        assert state["search_query"] == ""
        assert state["barangay_filter"] == "Cadlan"

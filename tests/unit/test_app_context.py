# =============================================================================
# tests/unit/test_app_context.py
# Unit Tests for Connectivity Notices on the Application Context
# =============================================================================

from osca_core.state import build_app_context


class TestConnectivityNotices:
    """Online/offline flips become notices the page shows once"""

    def test_first_check_is_silent(self, settings, fake_api, network):
        context = build_app_context(settings, api=fake_api, probe=network.probe)
        try:
            context.connection.check_connection()

            assert context.drain_notices() == []
        finally:
            context.close()

    def test_going_offline(self, app_context):
        app_context.connection.set_simulate_offline(True)

        notices = app_context.drain_notices()

        assert [n.level for n in notices] == ["warning"]
        assert notices[0].message == "You are offline. New records will be saved on this device."
        assert app_context.drain_notices() == []

    def test_back_online_counts_pending(self, app_context, network, senior_factory):
        network.online = False
        app_context.connection.check_connection()
        app_context.store.save(senior_factory())
        app_context.drain_notices()

        network.online = True
        app_context.connection.check_connection()

        notices = app_context.drain_notices()
        assert [n.message for n in notices] == ["Back online. 1 record(s) waiting for sync."]

    def test_back_online_without_pending(self, app_context):
        app_context.connection.set_simulate_offline(True)
        app_context.connection.set_simulate_offline(False)

        messages = [n.message for n in app_context.drain_notices()]

        assert messages[-1] == "Back online."

    def test_close_stops_notices(self, settings, fake_api, network):
        context = build_app_context(settings, api=fake_api, probe=network.probe)
        context.connection.check_connection()
        context.close()

        context.connection.set_simulate_offline(True)

        assert context.notices == []

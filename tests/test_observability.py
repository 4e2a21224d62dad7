# =============================================================================
# tests/test_observability.py - Observability Sink Tests
# =============================================================================
# Tests for the sinks and for the guarantee that a broken sink never changes
# a response.
# =============================================================================

import logging

from lib.observability import LoggingSink, ObservabilitySink, SafeSink


class ExplodingSink(ObservabilitySink):
    """Raises on every call."""

    def add_breadcrumb(self, *args, **kwargs):
        raise RuntimeError("sink down")

    def capture_exception(self, *args, **kwargs):
        raise RuntimeError("sink down")

    def capture_message(self, *args, **kwargs):
        raise RuntimeError("sink down")


class TestLoggingSink:
    """Tests for LoggingSink."""

    def test_breadcrumb_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="observability"):
            LoggingSink().add_breadcrumb("todo", "Todo created", data={"todo_id": "t1"})

        assert "[todo] Todo created" in caplog.text

    def test_level_mapping(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="observability"):
            LoggingSink().capture_message("careful", level="warning")

        assert caplog.records[-1].levelno == logging.WARNING

    def test_capture_exception_has_traceback(self, caplog):
        try:
            raise ValueError("bad")
        except ValueError as e:
            with caplog.at_level(logging.ERROR, logger="observability"):
                LoggingSink().capture_exception(e)

        assert caplog.records[-1].exc_info is not None


class TestSafeSink:
    """Tests for SafeSink."""

    def test_swallows_and_logs(self, caplog):
        sink = SafeSink(ExplodingSink())

        with caplog.at_level(logging.WARNING, logger="lib.observability"):
            sink.add_breadcrumb("auth", "x")
            sink.capture_exception(ValueError("x"))
            sink.capture_message("x")

        assert caplog.text.count("dropped") == 3

    def test_broken_sink_never_changes_response(self, app, client, alice):
        """Every endpoint behaves the same with a sink that raises."""
        app.state.sink = SafeSink(ExplodingSink())

        created = client.post("/api/todos", json={"title": "still works"}, headers=alice["headers"])
        listed = client.get("/api/todos", headers=alice["headers"])
        profile = client.get("/api/profile/me", headers=alice["headers"])
        unauthorized = client.get("/api/todos")

        assert created.status_code == 201
        assert [t["title"] for t in listed.json()["data"]] == ["still works"]
        assert profile.status_code == 200
        assert unauthorized.status_code == 401

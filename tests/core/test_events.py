"""Tests for the game event emitter."""

from core.game.events import EventEmitter, EventType, GameEvent, event


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_typed_listeners_run_before_catch_all(self):
        emitter = EventEmitter()
        calls = []
        emitter.subscribe(lambda e: calls.append("any"))
        emitter.subscribe(lambda e: calls.append("drawn"), EventType.CARD_DRAWN)

        emitter.emit_new(EventType.CARD_DRAWN, player="USER")

        assert calls == ["drawn", "any"]

    def test_typed_listener_ignores_other_types(self):
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append, EventType.PILE_CLEARED)

        emitter.emit_new(EventType.GO_AGAIN)

        assert seen == []

    def test_emit_new_returns_event(self):
        emitter = EventEmitter()

        created = emitter.emit_new(EventType.TURN_PASSED, to="COMPUTER")

        assert created.event_type == EventType.TURN_PASSED
        assert created.data == {"to": "COMPUTER"}
        assert emitter.history == [created]

    def test_emit_all_keeps_order(self):
        emitter = EventEmitter()
        batch = [event(EventType.CARDS_PLAYED), event(EventType.PILE_CLEARED), event(EventType.GO_AGAIN)]

        emitter.emit_all(batch)

        assert emitter.history == batch

    def test_unsubscribe(self):
        emitter = EventEmitter()
        seen = []
        emitter.subscribe(seen.append)
        emitter.unsubscribe(seen.append)
        # Unknown listeners are ignored
        emitter.unsubscribe(seen.append, EventType.GAME_OVER)

        emitter.emit_new(EventType.GAME_OVER)

        assert seen == []

    def test_listener_may_unsubscribe_itself(self):
        emitter = EventEmitter()
        seen = []

        def once(e):
            seen.append(e)
            emitter.unsubscribe(once)

        emitter.subscribe(once)
        emitter.emit_new(EventType.CARD_DRAWN)
        emitter.emit_new(EventType.CARD_DRAWN)

        assert len(seen) == 1

    def test_history_is_bounded(self):
        emitter = EventEmitter(history_limit=3)

        for n in range(5):
            emitter.emit_new(EventType.CARD_DRAWN, n=n)

        assert [e.data["n"] for e in emitter.history] == [2, 3, 4]

    def test_clear_history(self):
        emitter = EventEmitter()
        emitter.emit_new(EventType.GAME_STARTED)

        emitter.clear_history()

        assert emitter.history == []

    def test_event_str(self):
        assert str(GameEvent(EventType.GO_AGAIN, {"player": "USER"})) == "GO_AGAIN: {'player': 'USER'}"

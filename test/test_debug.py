import logging

import pytest

from event_nodes import EventNode, MailboxFull, NOTIFY, SILENT
from event_nodes.debug import (
    BufferEmitter,
    CallbackEmitter,
    DebugConfig,
    DebugEvent,
    DebugEventSeverity,
    DebugEventType,
    EmitterRegistry,
    LogEmitter,
)


def forward(node, event):
    return NOTIFY


def silent(node, event):
    return SILENT


class TestDebugConfig:

    def test_from_dict_converts_enums(self):
        config = DebugConfig.from_dict({
            "min_severity": "warn",
            "exclude_event_types": ["message_enqueued"],
            "include_nodes": ["a", "b"],
        })
        assert config.min_severity is DebugEventSeverity.WARN
        assert config.exclude_event_types == {DebugEventType.MESSAGE_ENQUEUED}
        assert config.include_nodes == {"a", "b"}

    def test_from_dict_empty(self):
        assert DebugConfig.from_dict(None) == DebugConfig()

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="Unknown debug config keys"):
            DebugConfig.from_dict({"verbosity": 3})

    def test_to_dict_round_trips_through_from_dict(self):
        config = DebugConfig(
            min_severity=DebugEventSeverity.DEBUG,
            include_event_types={DebugEventType.NODE_END},
            exclude_nodes={"x"},
        )
        assert DebugConfig.from_dict(config.to_dict()) == config

    def test_should_emit_filters(self):
        event = DebugEvent(event_type=DebugEventType.NODE_START, severity=DebugEventSeverity.DEBUG, node_id="a")

        assert DebugConfig().should_emit(event)
        assert not DebugConfig(enabled=False).should_emit(event)
        assert not DebugConfig(min_severity=DebugEventSeverity.WARN).should_emit(event)
        assert not DebugConfig(include_event_types={DebugEventType.NODE_END}).should_emit(event)
        assert not DebugConfig(exclude_event_types={DebugEventType.NODE_START}).should_emit(event)
        assert not DebugConfig(include_nodes={"b"}).should_emit(event)
        assert not DebugConfig(exclude_nodes={"a"}).should_emit(event)


class TestEmitterRegistry:

    def setup_method(self):
        self.buffer = BufferEmitter()
        self.registry = EmitterRegistry().register(self.buffer)

    def test_step_emits_lifecycle_events_in_order(self):
        source = EventNode(forward, node_id="source", emitters=self.registry)
        sink = EventNode(silent, node_id="sink", emitters=self.registry)
        sink.depends_on(source)
        self.buffer.clear()

        source.notify("go")
        source.act()

        types = [(e.event_type, e.node_id) for e in self.buffer.events]
        assert types == [
            (DebugEventType.MESSAGE_ENQUEUED, "source"),
            (DebugEventType.NODE_START, "source"),
            (DebugEventType.NODE_END, "source"),
            (DebugEventType.MESSAGE_ENQUEUED, "sink"),
            (DebugEventType.NOTIFICATION_SENT, "source"),
        ]
        sequence = [e.sequence_number for e in self.buffer.events]
        assert sequence == sorted(sequence)
        assert len(set(sequence)) == len(sequence)

        sent = self.buffer.of_type(DebugEventType.NOTIFICATION_SENT)[0]
        assert sent.payload == {"listener_ids": ["sink"], "count": 1}

    def test_edge_added_event(self):
        a = EventNode(silent, node_id="a", emitters=self.registry)
        b = EventNode(silent, node_id="b")
        b.depends_on(a)

        [event] = self.buffer.of_type(DebugEventType.EDGE_ADDED)
        assert event.node_id == "a"
        assert event.payload == {"listener_id": "b"}

    def test_empty_act_emits_nothing(self):
        node = EventNode(silent, node_id="n", emitters=self.registry)
        node.act()
        assert len(self.buffer) == 0

    def test_error_and_contract_events(self):
        def explode(node, event):
            raise KeyError("missing")

        failing = EventNode(explode, node_id="failing", emitters=self.registry)
        sloppy = EventNode(lambda node, event: "done", node_id="sloppy", emitters=self.registry)
        failing.notify("m")
        sloppy.notify("m")

        with pytest.raises(KeyError):
            failing.act()
        sloppy.act()

        [error] = self.buffer.of_type(DebugEventType.NODE_ERROR)
        assert error.is_error
        assert error.payload["error_type"] == "KeyError"
        [violation] = self.buffer.of_type(DebugEventType.CONTRACT_VIOLATION)
        assert violation.node_id == "sloppy"
        assert violation.payload["result_type"] == "str"

    def test_overflow_events(self):
        dropping = EventNode(silent, node_id="dropping", emitters=self.registry,
                             mailbox={"capacity": 1, "overflow": "drop_oldest"})
        rejecting = EventNode(silent, node_id="rejecting", emitters=self.registry,
                              mailbox={"capacity": 1})
        for node in (dropping, rejecting):
            node.notify(1)

        dropping.notify(2)
        with pytest.raises(MailboxFull):
            rejecting.notify(2)

        assert [e.node_id for e in self.buffer.of_type(DebugEventType.MESSAGE_DROPPED)] == ["dropping"]
        assert [e.node_id for e in self.buffer.of_type(DebugEventType.MESSAGE_REJECTED)] == ["rejecting"]

    def test_notification_sent_lists_only_delivered_listeners(self):
        source = EventNode(forward, node_id="source", emitters=self.registry)
        full = EventNode(silent, node_id="full", mailbox={"capacity": 1})
        roomy = EventNode(silent, node_id="roomy")
        full.depends_on(source)
        roomy.depends_on(source)
        full.notify("occupied")

        source.notify("go")
        with pytest.raises(MailboxFull):
            source.act()

        [sent] = self.buffer.of_type(DebugEventType.NOTIFICATION_SENT)
        assert sent.payload == {"listener_ids": ["roomy"], "count": 1}

    def test_config_filters_before_emitters(self):
        registry = EmitterRegistry(DebugConfig(min_severity=DebugEventSeverity.DEBUG))
        buffer = BufferEmitter()
        registry.register(buffer)
        node = EventNode(silent, node_id="n", emitters=registry)

        node.notify("m")
        node.act()

        assert DebugEventType.MESSAGE_ENQUEUED not in {e.event_type for e in buffer.events}
        assert [e.sequence_number for e in buffer.events] == [1, 2]

    def test_failing_emitter_does_not_break_others(self, caplog):
        class Broken:
            name = "broken"

            def emit(self, event):
                raise RuntimeError("sink down")

            def close(self):
                pass

        registry = EmitterRegistry().register(Broken()).register(self.buffer)

        with caplog.at_level(logging.WARNING, logger="event_nodes.debug.emitter"):
            registry.emit(DebugEvent(node_id="n"))

        assert len(self.buffer) == 1
        assert "Emitter broken failed" in caplog.text

    def test_unregister_and_get(self):
        assert self.registry.get("buffer") is self.buffer
        self.registry.unregister("buffer")
        assert self.registry.get("buffer") is None
        assert self.registry.emitters == []

    def test_close_all_stops_buffer(self):
        self.registry.close_all()
        self.registry.emit(DebugEvent())
        assert len(self.buffer) == 0


class TestEmitters:

    def test_buffer_is_bounded(self):
        buffer = BufferEmitter(max_events=3)
        for i in range(5):
            buffer.emit(DebugEvent(sequence_number=i))
        assert [e.sequence_number for e in buffer.events] == [2, 3, 4]

    def test_callback_emitter(self):
        received = []
        emitter = CallbackEmitter().add_callback(received.append)
        event = DebugEvent()
        emitter.emit(event)
        emitter.remove_callback(received.append)
        emitter.emit(DebugEvent())
        assert received == [event]

    def test_log_emitter_levels(self, caplog):
        emitter = LogEmitter(logger_name="event_nodes.test", level="INFO")
        with caplog.at_level(logging.DEBUG, logger="event_nodes.test"):
            emitter.emit(DebugEvent(event_type=DebugEventType.NODE_END, node_id="n",
                                    payload={"duration_ms": 1.5}))
            emitter.emit(DebugEvent(event_type=DebugEventType.CONTRACT_VIOLATION,
                                    severity=DebugEventSeverity.WARN, node_id="n"))

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.INFO, logging.WARNING]
        assert "[node_end]" in caplog.records[0].getMessage()
        assert "duration=1.50ms" in caplog.records[0].getMessage()

    def test_log_emitter_json(self, caplog):
        emitter = LogEmitter(logger_name="event_nodes.test", format_json=True)
        with caplog.at_level(logging.DEBUG, logger="event_nodes.test"):
            emitter.emit(DebugEvent(node_id="n"))
        assert '"node_id": "n"' in caplog.records[0].getMessage()

    def test_log_emitter_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            LogEmitter(level="LOUD")

    def test_emit_to_log_registers_log_emitter(self):
        registry = EmitterRegistry(DebugConfig(emit_to_log=True, log_level="INFO"))
        assert isinstance(registry.get("log"), LogEmitter)

    def test_event_to_dict(self):
        event = DebugEvent(event_type=DebugEventType.EDGE_ADDED, node_id="a", payload={"listener_id": "b"})
        data = event.to_dict()
        assert data["event_type"] == "edge_added"
        assert data["severity"] == "debug"
        assert data["payload"] == {"listener_id": "b"}
        assert data["timestamp"].endswith("+00:00")

"""
Created by Epic at 10/18/26
"""
import unittest

from shardlink import EventHandler, EventRegistry, HandlerFailure, Envelope, HandlerLoadError
from shardlink.dispatcher import Signals

from .helpers import settle


class RecordingShard:
    def __init__(self):
        self.failures = []

    def handler_failed(self, failure):
        self.failures.append(failure)


class GuildCreate(EventHandler):
    name = "GUILD_CREATE"

    def __init__(self):
        self.calls = []

    async def run(self, envelope, shard, client):
        self.calls.append(envelope.sequence)


class TestEventRegistry(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.registry = EventRegistry()
        self.shard = RecordingShard()

    async def test_names_are_case_insensitive(self):
        async def handler(envelope, shard, client):
            pass

        self.registry.register("message_create", handler)

        self.assertIs(self.registry.get("MESSAGE_CREATE"), handler)
        self.assertIn("Message_Create", self.registry)

    async def test_duplicate_registration_overwrites(self):
        async def first(envelope, shard, client):
            pass

        async def second(envelope, shard, client):
            pass

        self.registry.register("X", first)
        self.registry.register("X", second)

        self.assertIs(self.registry.get("X"), second)
        self.assertEqual(len(self.registry), 1)

    async def test_register_rejects_non_callables(self):
        with self.assertRaises(TypeError):
            self.registry.register("X", "not a function")
        with self.assertRaises(TypeError):
            self.registry.register(None, lambda *args: None)

    async def test_load_mapping(self):
        async def handler(envelope, shard, client):
            pass

        self.registry.load({"READY": handler, "GUILD_CREATE": handler})

        self.assertEqual(len(self.registry), 2)

    async def test_load_event_handlers(self):
        handler = GuildCreate()
        self.registry.load([handler])

        task = self.registry.dispatch(Envelope(0, {}, 4, "GUILD_CREATE"), self.shard, None)
        await task

        self.assertEqual(handler.calls, [4])

    async def test_load_rejects_invalid_entries(self):
        with self.assertRaises(HandlerLoadError):
            self.registry.load({"READY": 42})
        with self.assertRaises(HandlerLoadError):
            self.registry.load([object()])

    async def test_dispatch_without_handler(self):
        self.assertIsNone(self.registry.dispatch(Envelope(0, {}, 1, "NOTHING"), self.shard, None))

    async def test_dispatch_isolates_failures(self):
        async def broken(envelope, shard, client):
            raise ValueError("nope")

        self.registry.register("BROKEN", broken)
        envelope = Envelope(0, {}, 1, "BROKEN")

        result = await self.registry.dispatch(envelope, self.shard, None)

        self.assertIsInstance(result, HandlerFailure)
        self.assertIs(result.envelope, envelope)
        self.assertEqual(self.shard.failures, [result])
        self.assertIn("BROKEN", str(result))


class TestSignals(unittest.IsolatedAsyncioTestCase):
    async def test_emit_calls_sync_and_async_listeners(self):
        signals = Signals()
        received = []

        async def async_listener(message):
            received.append(("async", message))

        signals.register("debug", lambda message: received.append(("sync", message)))
        signals.register("debug", async_listener)
        signals.emit("debug", "hi")
        await settle()

        self.assertEqual(received, [("sync", "hi"), ("async", "hi")])

    async def test_failing_listener_does_not_stop_others(self):
        signals = Signals()
        received = []

        def broken(message):
            raise RuntimeError("listener failed")

        signals.register("debug", broken)
        signals.register("debug", received.append)
        with self.assertLogs("shardlink.dispatcher", level="ERROR"):
            signals.emit("debug", "hi")

        self.assertEqual(received, ["hi"])


if __name__ == '__main__':
    unittest.main()

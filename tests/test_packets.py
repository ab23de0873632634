"""
Created by Epic at 10/18/26
"""
import unittest

from shardlink import packets, Envelope, MalformedPayload, SessionNotResumable, Presence, Activity, ActivityType
from shardlink.opcodes import OpCode


class TestEnvelope(unittest.TestCase):
    def test_from_json(self):
        envelope = Envelope.from_json('{"op": 0, "d": {"id": "1"}, "s": 5, "t": "MESSAGE_CREATE"}')

        self.assertEqual(envelope.op, OpCode.DISPATCH)
        self.assertEqual(envelope.data, {"id": "1"})
        self.assertEqual(envelope.sequence, 5)
        self.assertEqual(envelope.event, "MESSAGE_CREATE")

    def test_optional_fields(self):
        envelope = Envelope.from_json('{"op": 11}')

        self.assertIsNone(envelope.data)
        self.assertIsNone(envelope.sequence)
        self.assertIsNone(envelope.event)

    def test_malformed(self):
        for raw in ("not json", "[]", '"op"', '{"d": 1}', '{"op": "10"}', '{"op": true}', '{"op": 0, "s": "1"}'):
            with self.subTest(raw=raw), self.assertRaises(MalformedPayload):
                Envelope.from_json(raw)

    def test_to_dict(self):
        envelope = Envelope(10, {"heartbeat_interval": 41250})
        self.assertEqual(envelope.to_dict(), {"op": 10, "d": {"heartbeat_interval": 41250}, "s": None, "t": None})


class TestRequests(unittest.TestCase):
    def test_identify(self):
        payload = packets.identify("token", 513, 1, 4)

        self.assertEqual(payload["op"], 2)
        data = payload["d"]
        self.assertEqual(data["token"], "token")
        self.assertEqual(data["intents"], 513)
        self.assertEqual(data["shard"], [1, 4])
        self.assertFalse(data["compress"])
        self.assertEqual(data["large_threshold"], 50)
        self.assertEqual(set(data["properties"]), {"os", "browser", "device"})
        self.assertNotIn("presence", data)

    def test_identify_with_presence(self):
        presence = Presence("dnd", [Activity("with shards", ActivityType.PLAYING)])
        payload = packets.identify("token", 0, 0, 1, presence=presence, large_threshold=250)

        self.assertEqual(payload["d"]["large_threshold"], 250)
        self.assertEqual(payload["d"]["presence"], {
            "since": None,
            "activities": [{"name": "with shards", "type": 0}],
            "status": "dnd",
            "afk": False
        })

    def test_resume(self):
        self.assertEqual(packets.resume("token", "abc", 42),
                         {"op": 6, "d": {"token": "token", "session_id": "abc", "seq": 42}})

    def test_resume_requires_session(self):
        with self.assertRaises(SessionNotResumable):
            packets.resume("token", None, 42)
        with self.assertRaises(SessionNotResumable):
            packets.resume("token", "abc", None)

    def test_resume_accepts_sequence_zero(self):
        self.assertEqual(packets.resume("token", "abc", 0)["d"]["seq"], 0)

    def test_heartbeat(self):
        self.assertEqual(packets.heartbeat(None), {"op": 1, "d": None})
        self.assertEqual(packets.heartbeat(12), {"op": 1, "d": 12})

    def test_presence_update(self):
        presence = Presence("idle", [Activity("live", ActivityType.STREAMING, url="https://twitch.tv/x")],
                            afk=True, since=1000)

        self.assertEqual(packets.presence_update(presence), {
            "op": 3,
            "d": {
                "since": 1000,
                "activities": [{"name": "live", "type": 1, "url": "https://twitch.tv/x"}],
                "status": "idle",
                "afk": True
            }
        })


if __name__ == '__main__':
    unittest.main()

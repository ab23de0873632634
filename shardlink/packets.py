"""
Created by Epic at 9/2/20
"""
from sys import platform

from ujson import loads

from .exceptions import MalformedPayload, SessionNotResumable
from .opcodes import OpCode

__all__ = ("Envelope", "identify", "resume", "heartbeat", "presence_update")


class Envelope:
    """
    A decoded gateway message.

    Parameters
    ----------
    op: int
        The opcode.
    data: Any
        The opcode dependent payload (``d``).
    sequence: Optional[int]
        The sequence number (``s``), only set on dispatches.
    event: Optional[str]
        The event name (``t``), only set on dispatches.
    """
    __slots__ = ("op", "data", "sequence", "event")

    def __init__(self, op, data=None, sequence=None, event=None):
        self.op = op
        self.data = data
        self.sequence = sequence
        self.event = event

    @classmethod
    def from_json(cls, raw):
        """
        Decodes a text frame received from the gateway.
        Raises MalformedPayload if it isn't a JSON object with an integer opcode.
        """
        try:
            data = loads(raw)
        except (ValueError, TypeError):
            raise MalformedPayload(raw) from None
        if not isinstance(data, dict):
            raise MalformedPayload(raw)
        op = data.get("op")
        if not isinstance(op, int) or isinstance(op, bool):
            raise MalformedPayload(raw)
        sequence = data.get("s")
        if sequence is not None and not isinstance(sequence, int):
            raise MalformedPayload(raw)
        return cls(op, data.get("d"), sequence, data.get("t"))

    def to_dict(self):
        return {
            "op": self.op,
            "d": self.data,
            "s": self.sequence,
            "t": self.event
        }

    def __repr__(self):
        return f"<Envelope op={self.op} t={self.event} s={self.sequence}>"


def identify(token, intents, shard_id, shard_count, *, presence=None, large_threshold=50):
    """
    The initial handshake.
    https://discord.com/developers/docs/topics/gateway-events#identify
    """
    data = {
        "token": token,
        "intents": intents,
        "properties": {
            "os": platform,
            "browser": "shardlink",
            "device": "shardlink"
        },
        "compress": False,
        "large_threshold": large_threshold,
        "shard": [shard_id, shard_count]
    }
    if presence is not None:
        data["presence"] = presence.to_dict()
    return {
        "op": OpCode.IDENTIFY.value,
        "d": data
    }


def resume(token, session_id, sequence):
    """
    Replays the events missed since `sequence` on the session `session_id`.
    https://discord.com/developers/docs/topics/gateway-events#resume
    """
    if session_id is None or sequence is None:
        raise SessionNotResumable()
    return {
        "op": OpCode.RESUME.value,
        "d": {
            "token": token,
            "session_id": session_id,
            "seq": sequence
        }
    }


def heartbeat(sequence):
    return {
        "op": OpCode.HEARTBEAT.value,
        "d": sequence
    }


def presence_update(presence):
    return {
        "op": OpCode.PRESENCE_UPDATE.value,
        "d": presence.to_dict()
    }

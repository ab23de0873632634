"""
Created by Epic at 10/18/26
"""
from enum import IntEnum

__all__ = ("OpCode", "CloseCode")


class OpCode(IntEnum):
    """
    Gateway opcode reference.
    https://discord.com/developers/docs/topics/opcodes-and-status-codes#gateway-gateway-opcodes
    """
    DISPATCH = 0
    HEARTBEAT = 1
    IDENTIFY = 2
    PRESENCE_UPDATE = 3
    RESUME = 6
    RECONNECT = 7
    INVALID_SESSION = 9
    HELLO = 10
    HEARTBEAT_ACK = 11


class CloseCode:
    NORMAL = 1000
    GOING_AWAY = 1001

    # Sent by us when we want the gateway to keep our session
    RECONNECT = 4000

    UNKNOWN_ERROR = 4000
    UNKNOWN_OPCODE = 4001
    DECODE_ERROR = 4002
    NOT_AUTHENTICATED = 4003
    AUTHENTICATION_FAILED = 4004
    ALREADY_AUTHENTICATED = 4005
    INVALID_SEQ = 4007
    RATE_LIMITED = 4008
    SESSION_TIMED_OUT = 4009
    INVALID_SHARD = 4010
    SHARDING_REQUIRED = 4011
    INVALID_API_VERSION = 4012
    INVALID_INTENTS = 4013
    DISALLOWED_INTENTS = 4014

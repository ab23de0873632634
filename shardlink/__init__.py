"""
Created by Epic at 9/1/20

Simple library to keep sharded connections to the discord gateway alive
"""
from .client import Client
from .shard import Shard, ShardState
from .dispatcher import EventHandler, EventRegistry, HandlerFailure
from .packets import Envelope
from .presence import Activity, ActivityType, Presence
from .exceptions import LoginException, InvalidToken, HandlerLoadError, GatewayException, GatewayClosed, \
    GatewayUnavailable, MalformedPayload, SessionNotResumable
from .values import version as __version__

__all__ = ("__version__", "Client", "Shard", "ShardState", "EventHandler", "EventRegistry", "HandlerFailure",
           "Envelope", "Activity", "ActivityType", "Presence", "LoginException", "InvalidToken",
           "HandlerLoadError", "GatewayException", "GatewayClosed", "GatewayUnavailable", "MalformedPayload",
           "SessionNotResumable"
           )

"""
Created by Epic at 9/1/20
"""


class LoginException(Exception):
    """
    Base exception thrown when an issue occurs during login attempts.
    """
    pass


class InvalidToken(LoginException):
    """
    Exception that's thrown when an attempt to login with invalid token is made.
    """

    def __init__(self):
        super().__init__("Invalid token provided.")


class HandlerLoadError(Exception):
    """
    Exception that's thrown when the event handler registry couldn't be populated.
    The client refuses to start with a partially loaded registry.
    """
    pass


class GatewayException(Exception):
    """
    Base exception that's thrown whenever a gateway error occurs.
    """
    pass


class GatewayClosed(GatewayException):
    """
    Exception that's thrown when the gateway is used while in a closed state.
    """
    def __init__(self):
        super().__init__("You can't do this as the gateway is closed.")


class GatewayUnavailable(GatewayException):
    """
    Exception that's thrown when the gateway is unreachable.
    """
    def __init__(self):
        super().__init__("Can't reach the discord gateway. Have you tried checking your internet?")


class MalformedPayload(GatewayException):
    """
    The gateway sent something that isn't a valid envelope.
    """
    def __init__(self, raw):
        self.raw = raw
        super().__init__(f"Received a malformed payload: {raw!r}")


class SessionNotResumable(GatewayException):
    """
    A resume was requested without both a session id and a sequence number.
    """
    def __init__(self):
        super().__init__("Can't resume without a session id and a sequence number.")


class GatewayClosedUnexpected(GatewayException):
    """
    The gateway closed unexpectedly.
    """
    pass


class GatewayNotAuthenticated(GatewayClosedUnexpected):
    """
    We sent a payload to the discord gateway before authenticating.
    """
    def __init__(self):
        super().__init__("We sent a payload to the discord gateway before authenticating.")


class InvalidShard(GatewayClosedUnexpected):
    """
    Invalid shard sent to discord. Please modify your shard_count.
    """
    def __init__(self):
        super().__init__("Invalid shard sent to discord. Please modify your shard_count.")


class ShardingRequired(GatewayClosedUnexpected):
    """
    The session would have handled too many guilds, you have to shard.
    """
    def __init__(self):
        super().__init__("Sharding is required for this bot. Please set a higher shard_count.")


class InvalidGatewayVersion(GatewayClosedUnexpected):
    """
    Invalid gateway version provided! This is likely the library being very out of date.
    """
    def __init__(self):
        super().__init__("Invalid gateway version provided!")


class IntentException(GatewayException):
    """
    Base exceptions for all intent exceptions
    """
    pass


class InvalidIntentNumber(IntentException):
    """
    The intent value you provided is invalid.
    """
    def __init__(self):
        super().__init__("The intent number you provided is not valid. "
                         "You can use https://ziad87.me/intents/ to calculate intents")


class IntentNotWhitelisted(IntentException):
    """
    You are not whitelisted for some of the intents you provided.
    """
    def __init__(self):
        super().__init__("You tried to launch with intents you are not whitelisted for.")

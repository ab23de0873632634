"""
Created by Epic at 9/5/20
"""
from .exceptions import GatewayUnavailable, GatewayNotAuthenticated, InvalidToken, GatewayClosed, \
    InvalidGatewayVersion, IntentNotWhitelisted, InvalidIntentNumber, InvalidShard, ShardingRequired, \
    MalformedPayload, SessionNotResumable
from .dispatcher import Signals
from .heartbeat import Heartbeat
from .opcodes import OpCode, CloseCode
from .packets import Envelope
from .ratelimiter import TimesPer
from .values import api_version
from . import packets

from asyncio import Event, TimeoutError, get_running_loop
from enum import Enum
from aiohttp import WSMsgType
from aiohttp.client_exceptions import ClientError
from logging import getLogger
from ujson import dumps

__all__ = ("ShardState", "Shard")


class ShardState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_HELLO = "awaiting_hello"
    IDENTIFYING = "identifying"
    RESUMING = "resuming"
    READY = "ready"


class Shard:
    def __init__(self, shard_id, client):
        """
        Handles all Discord Shard related events. For more information on what sharding is and how it works:
        https://discord.com/developers/docs/topics/gateway#sharding.
        The shard keeps its own session alive across reconnects and hands dispatched events to the client's
        event registry.
        :param shard_id: The id for the shard.
        :param client: A shardlink.Client object which will manage the shards.
        """
        self.id = shard_id
        self.client = client

        self.ws = None
        self.gateway_url = client.gateway_url
        self.logger = getLogger(f"shardlink.shard.{self.id}")
        self.connected = Event()  # Some bots might wanna know which shards is online at all times
        self.is_ready = Event()
        self.state = ShardState.DISCONNECTED
        self.signals = Signals()

        self.session_id = None
        self.sequence = None
        self.resume_gateway_url = None

        self.heartbeat = Heartbeat(self, client.clock)
        self.send_ratelimiter = TimesPer(120, 60)

        self.stopped = False
        self.requested_close_code = None
        self.hello_received = False
        self.hello_watchdog = None
        self.ready_task = None
        self.ready_emitted = False
        self.read_task = None
        self.reconnect_task = None
        self.handler_tasks = set()

        self.opcode_handlers = {
            OpCode.DISPATCH: self.handle_dispatch,
            OpCode.HEARTBEAT: self.handle_heartbeat_request,
            OpCode.RECONNECT: self.handle_reconnect,
            OpCode.INVALID_SESSION: self.handle_invalid_session,
            OpCode.HELLO: self.handle_hello,
            OpCode.HEARTBEAT_ACK: self.handle_heartbeat_ack
        }

        # close_code: (log level, message or exception describing the error, keep session)
        self.close_handlers = {
            CloseCode.NORMAL: ("WARN", "Gateway closed the session. ", False),
            CloseCode.GOING_AWAY: ("WARN", "Gateway is going away. ", False),
            CloseCode.UNKNOWN_ERROR: ("INFO", "Gateway closed due to an unknown error. ", True),
            CloseCode.UNKNOWN_OPCODE: ("WARN", "An invalid opcode was sent to the gateway. ", True),
            CloseCode.DECODE_ERROR: ("WARN", "A payload that couldn't be decoded by the gateway was sent. ", True),
            CloseCode.NOT_AUTHENTICATED: ("ERROR", GatewayNotAuthenticated, False),
            CloseCode.AUTHENTICATION_FAILED: ("ERROR", InvalidToken, False),
            CloseCode.ALREADY_AUTHENTICATED: ("WARN", "Already authenticated to the gateway. ", True),
            CloseCode.INVALID_SEQ: ("WARN", "Invalid seq number. ", False),
            CloseCode.RATE_LIMITED: ("WARN", "We are sending too many payloads to the gateway! ", True),
            CloseCode.SESSION_TIMED_OUT: ("WARN", "A session timed out! ", False),
            CloseCode.INVALID_SHARD: ("ERROR", InvalidShard, False),
            CloseCode.SHARDING_REQUIRED: ("ERROR", ShardingRequired, False),
            CloseCode.INVALID_API_VERSION: ("ERROR", InvalidGatewayVersion, False),
            CloseCode.INVALID_INTENTS: ("ERROR", InvalidIntentNumber, False),
            CloseCode.DISALLOWED_INTENTS: ("ERROR", IntentNotWhitelisted, False),
            None: ("WARN", "Unknown close code received. ", True)
        }

    @property
    def can_resume(self):
        return self.session_id is not None and self.sequence is not None

    @property
    def latency(self):
        return self.heartbeat.latency

    def debug(self, message):
        self.logger.debug(message)
        self.emit("debug", f"[Shard][{self.id}] -> {message}")

    def emit(self, name, *args):
        self.signals.emit(name, *args)
        self.client.signals.emit(name, self, *args)

    def clear_session(self):
        self.session_id = None
        self.sequence = None
        self.resume_gateway_url = None

    async def connect(self):
        """
        Opens a new websocket to the gateway. Usually done by the client.
        The gateway will greet us with a hello, which decides between identifying and resuming.
        """
        if self.ws is not None and not self.ws.closed:
            # Dropping the reference first keeps the old read loop from reconnecting
            old_ws, self.ws = self.ws, None
            self.cancel_timers()
            self.heartbeat.reset()
            await old_ws.close(code=CloseCode.RECONNECT, message=b"Reconnecting")
        self.state = ShardState.CONNECTING
        url = self.gateway_url
        if self.can_resume and self.resume_gateway_url is not None:
            url = self.resume_gateway_url
        self.debug("Connecting to Discord Gateway: " + url)
        try:
            ws = await self.client.http.create_ws(url, compression=0)
        except (ClientError, TimeoutError, OSError):
            self.state = ShardState.DISCONNECTED
            raise GatewayUnavailable() from None

        if self.stopped:
            await ws.close(code=CloseCode.NORMAL, message=b"Disconnecting")
            self.state = ShardState.DISCONNECTED
            return
        self.ws = ws
        self.requested_close_code = None
        self.hello_received = False
        self.state = ShardState.AWAITING_HELLO
        self.connected.set()
        loop = get_running_loop()
        self.read_task = loop.create_task(self.read_loop(ws))
        self.hello_watchdog = loop.create_task(self.wait_for_hello(ws))

    async def reconnect(self):
        """
        Connects again after the transport was lost, backing off while the gateway is unreachable.
        """
        delay = 1
        while not self.stopped:
            try:
                await self.connect()
                return
            except GatewayUnavailable:
                self.logger.warning(f"Gateway is unreachable, trying again in {delay}s")
                await self.client.clock.sleep(delay)
                delay = min(delay * 2, 60)

    async def close(self):
        """
        Permanently disconnects the shard. The session is dropped and no reconnect happens.
        """
        self.stopped = True
        self.cancel_timers()
        self.heartbeat.reset()
        if self.ws is not None and not self.ws.closed:
            self.debug("Disconnecting from Discord Gateway")
            await self.close_transport(CloseCode.NORMAL, b"Disconnecting")
        self.clear_session()
        self.connected.clear()
        self.is_ready.clear()
        self.state = ShardState.DISCONNECTED

    async def close_transport(self, code, message=b""):
        """
        Closes the current websocket with `code`. The read loop takes care of what happens next.
        """
        if self.ws is None or self.ws.closed:
            return
        self.requested_close_code = code
        await self.ws.close(code=code, message=message)

    def request_reconnect(self, reason):
        """
        Closes the current websocket with a resumable close code without waiting for it.
        """
        self.debug(f"Reconnecting: {reason}")
        self.reconnect_task = get_running_loop().create_task(self.close_transport(CloseCode.RECONNECT, b"Reconnecting"))

    def cancel_timers(self):
        for task in (self.hello_watchdog, self.ready_task):
            if task is not None and not task.done():
                task.cancel()
        self.hello_watchdog = None
        self.ready_task = None

    async def wait_for_hello(self, ws):
        await self.client.clock.sleep(self.client.hello_timeout)
        if ws is self.ws and not self.hello_received:
            self.logger.warning(f"No hello received within {self.client.hello_timeout}s")
            self.hello_watchdog = None
            await self.close_transport(CloseCode.RECONNECT, b"Hello timed out")

    async def read_loop(self, ws):
        """
        Receives data from the gateway and hands it to the opcode handlers in the order it arrived.
        """
        async for message in ws:
            if message.type == WSMsgType.TEXT:
                await self.on_message(message.data)
            elif message.type == WSMsgType.ERROR:
                self.debug(f"WebSocket error: {ws.exception()}")
            else:
                self.logger.debug(f"Ignoring websocket message of type {message.type}")
        if self.requested_close_code is not None:
            close_code = self.requested_close_code
        else:
            close_code = ws.close_code
            if not ws.closed:
                # Finish the closing handshake the gateway started
                await ws.close()
        if ws is not self.ws:
            return
        await self.on_disconnect(close_code)

    async def on_message(self, raw):
        try:
            envelope = Envelope.from_json(raw)
        except MalformedPayload as e:
            if self.client.development:
                self.debug(str(e))
            return
        self.emit("raw", envelope)
        handler = self.opcode_handlers.get(envelope.op)
        if handler is None:
            if self.client.development:
                self.debug(f"Received unknown Gateway with opcode {envelope.op}")
            return
        try:
            await handler(envelope)
        except (KeyError, TypeError, AttributeError) as e:
            # The payload didn't have the shape its opcode promises
            self.logger.debug(f"Malformed payload for opcode {envelope.op}: {e!r}")
            if self.client.development:
                self.debug(f"Malformed payload for opcode {envelope.op}: {e!r}")
        except GatewayClosed:
            self.logger.debug(f"Gateway closed while handling opcode {envelope.op}")

    async def on_disconnect(self, close_code):
        self.cancel_timers()
        self.heartbeat.reset()
        self.connected.clear()
        self.is_ready.clear()
        self.state = ShardState.DISCONNECTED
        self.debug(f"Disconnected from Discord Gateway with code {close_code}")
        if self.stopped:
            return

        action, action_data, keep_session = self.close_handlers.get(close_code, self.close_handlers[None])
        if action == "ERROR":
            # Reported loudly, the shard still reconnects
            error = action_data()
            self.debug(f"Gateway error {close_code}: {error}")
            log_string = f"{error} "
        else:
            log_string = action_data

        log_string += "Reconnecting "
        if keep_session and self.can_resume:
            log_string += "and resuming."
        else:
            self.clear_session()
            log_string += "with a new session."
        if action == "ERROR":
            self.logger.error(log_string)
        elif action == "INFO":
            self.logger.info(log_string)
        else:
            self.logger.warning(log_string)
        await self.reconnect()

    async def send(self, data: dict):
        """
        Attempts to send a message via the gateway. Checks for the gateway ratelimit before doing so.
        """
        if self.ws is None or self.ws.closed:
            raise GatewayClosed()
        await self.send_ratelimiter.trigger()
        if data["op"] in (OpCode.IDENTIFY, OpCode.RESUME):
            self.logger.debug(f"Data sent: opcode {data['op']} (payload hidden, it contains the token)")
        else:
            self.logger.debug("Data sent: " + str(data))
        await self.ws.send_json(data, dumps=dumps)

    async def identify(self):
        """
        Sends an identify message to the gateway, which is the initial handshake.
        https://discord.com/developers/docs/topics/gateway#identifying
        """
        self.state = ShardState.IDENTIFYING
        await self.client.identify_ratelimiter.trigger()
        self.debug("Identifying with Gateway")
        await self.send(packets.identify(self.client.token, self.client.intents, self.id,
                                         self.client.current_shard_count, presence=self.client.presence,
                                         large_threshold=self.client.large_threshold))

    async def resume(self):
        """
        Sends a resume message to the gateway, which replays any events missed while disconnected.
        https://discord.com/developers/docs/topics/gateway#resuming
        """
        if not self.can_resume:
            raise SessionNotResumable()
        self.state = ShardState.RESUMING
        self.debug("Resuming with Gateway")
        await self.send(packets.resume(self.client.token, self.session_id, self.sequence))

    async def set_presence(self, presence):
        self.debug(f"Setting presence to {presence.status}")
        await self.send(packets.presence_update(presence))

    def update_sequence(self, sequence):
        if self.sequence is None or sequence > self.sequence:
            self.sequence = sequence

    def schedule_ready(self):
        # Every dispatch of the initial burst pushes the ready signal back
        if self.ready_emitted:
            return
        if self.ready_task is not None and not self.ready_task.done():
            self.ready_task.cancel()
        self.ready_task = get_running_loop().create_task(self.emit_ready_later())

    async def emit_ready_later(self):
        await self.client.clock.sleep(self.client.ready_delay)
        self.ready_task = None
        self.ready_emitted = True
        self.debug("Shard is ready")
        self.emit("ready")

    def handler_failed(self, failure):
        self.logger.error(str(failure), exc_info=failure.exception)
        self.emit("handler_error", failure)
        self.debug(str(failure))

    # Opcode handlers
    async def handle_hello(self, envelope):
        self.hello_received = True
        if self.hello_watchdog is not None and not self.hello_watchdog.done():
            self.hello_watchdog.cancel()
        self.hello_watchdog = None
        self.heartbeat.start(envelope.data["heartbeat_interval"] / 1000)
        if self.can_resume:
            await self.resume()
        else:
            await self.identify()

    async def handle_heartbeat_request(self, envelope):
        self.debug("Gateway requested a heartbeat")
        await self.heartbeat.beat()

    async def handle_heartbeat_ack(self, envelope):
        latency = self.heartbeat.ack()
        self.debug(f"Received HeartbeatAck with latency {latency}")

    async def handle_reconnect(self, envelope):
        self.debug("Received Reconnect Gateway")
        await self.close_transport(CloseCode.RECONNECT, b"Reconnecting")

    async def handle_invalid_session(self, envelope):
        resumable = envelope.data is True
        self.debug(f"Received InvalidSession (resumable: {resumable})")
        if not resumable:
            # Session is no longer valid, create a new session
            self.clear_session()
        await self.close_transport(CloseCode.RECONNECT, b"Invalid session")

    async def handle_dispatch(self, envelope):
        session_id = None
        if envelope.event == "READY":
            # Read before anything is committed, the session id and sequence are only ever set together
            session_id = envelope.data["session_id"]
            if not isinstance(session_id, str):
                raise TypeError(f"READY carried session_id {session_id!r}")
        if envelope.sequence is not None:
            self.update_sequence(envelope.sequence)
        if envelope.event == "READY":
            self.session_id = session_id
            resume_url = envelope.data.get("resume_gateway_url")
            if resume_url is not None:
                self.resume_gateway_url = f"{resume_url}/?v={api_version}&encoding=json"
            self.mark_ready()
        elif envelope.event == "RESUMED":
            self.mark_ready()
        if self.state == ShardState.READY:
            self.schedule_ready()
        task = self.client.registry.dispatch(envelope, self, self.client)
        if task is not None:
            self.handler_tasks.add(task)
            task.add_done_callback(self.handler_tasks.discard)

    def mark_ready(self):
        self.state = ShardState.READY
        self.is_ready.set()
        self.debug(f"Session {self.session_id} is ready at sequence {self.sequence}")

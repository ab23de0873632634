"""
Created by Epic at 9/1/20
"""
from asyncio import Event, run
from logging import getLogger

from .exceptions import InvalidToken, HandlerLoadError
from .http import HttpClient
from .dispatcher import EventRegistry, Signals
from .heartbeat import Clock
from .shard import Shard
from .ratelimiter import TimesPer
from .values import gateway_url as default_gateway_url

__all__ = ("Client",)


class Client:
    def __init__(self, intents, token=None, *, shard_count=None, shard_ids=None, presence=None,
                 max_concurrency=1, large_threshold=50, hello_timeout=20, ready_delay=1.5, development=False,
                 gateway_url=default_gateway_url, handler_loader=None, clock=None):
        """
        The client to interact with the discord gateway
        :param intents: the intents to use
        :param token: the discord bot token to use
        :param shard_count: how many shards to use, defaults to 1
        :param shard_ids: A list of shard ids to spawn. Shard_count must be set for this to work
        :param presence: A shardlink.presence.Presence to identify with
        :param max_concurrency: how many shards may identify every 5 seconds
        :param large_threshold: member count after which discord stops sending offline members
        :param hello_timeout: seconds to wait for the gateway hello before reconnecting
        :param ready_delay: seconds without dispatches after READY before the ready signal fires
        :param development: report unknown opcodes and malformed payloads on the debug signal
        :param gateway_url: the websocket url to connect to
        :param handler_loader: a callable returning a mapping or iterable of handlers to load on start
        :param clock: a shardlink.heartbeat.Clock, used for every timer
        """
        # Configurable stuff
        self.intents = int(intents)
        self.token = token
        self.shard_count = shard_count
        self.shard_ids = shard_ids
        self.presence = presence
        self.large_threshold = large_threshold
        self.hello_timeout = hello_timeout
        self.ready_delay = ready_delay
        self.development = development
        self.gateway_url = gateway_url
        self.handler_loader = handler_loader

        # Things used by the lib, usually doesn't need to get changed but can if you want to.
        self.shards = []
        self.logger = getLogger("shardlink")
        self.http = None
        self.clock = clock or Clock()
        self.registry = EventRegistry()
        self.signals = Signals()
        self.connected = Event()
        self.exit_event = Event()
        self.identify_ratelimiter = TimesPer(max_concurrency, 5)
        self.current_shard_count = shard_count or 1
        self.heartbeats = {}

        # Check types
        if shard_count is None and shard_ids is not None:
            raise TypeError("You have to set shard_count if you use shard_ids")

    def run(self):
        """
        Starts the client
        """
        try:
            run(self.start())
        except KeyboardInterrupt:
            self.logger.info("Interrupted, shut down")

    def load_handlers(self):
        """
        Populates the event registry from the handler loader. A failure here is fatal.
        """
        if self.handler_loader is None:
            return
        try:
            source = self.handler_loader()
        except Exception as e:
            raise HandlerLoadError(f"Handler loader failed: {e}") from e
        self.registry.load(source)
        self.logger.debug(f"Loaded {len(self.registry)} event handlers")

    async def connect(self):
        """
        Spawns shards and connects them to discord. Start has to be called first!
        """
        if self.token is None:
            raise InvalidToken
        if self.http is None:
            self.http = HttpClient(self.token)
        await self.spawn_shards(self.shards, shard_ids=self.shard_ids)
        self.connected.set()
        self.logger.info("All shards connected!")

    async def start(self):
        """
        Loads the event handlers, sets up the http client, connects to discord and spawns shards.
        """
        if self.token is None:
            raise InvalidToken
        try:
            self.load_handlers()
        except HandlerLoadError:
            self.logger.critical("Couldn't load the event handlers, refusing to start.")
            raise

        try:
            await self.connect()
            await self.exit_event.wait()
        finally:
            await self.close()

    async def close(self):
        """
        Closes the http client and disconnects all shards
        """
        self.connected.clear()
        self.exit_event.set()
        for shard in self.shards:
            await shard.close()
        if self.http is not None:
            await self.http.close()

    async def spawn_shards(self, shard_list, *, shard_ids=None):
        if shard_ids is None:
            shard_ids = range(self.current_shard_count)
        for shard_id in shard_ids:
            self.logger.info(f"Launching shard {shard_id}")
            shard = Shard(shard_id, self)
            shard_list.append(shard)
            await shard.connect()

    async def set_presence(self, presence):
        """
        Updates the presence on every shard and uses it for future identifies.
        """
        self.presence = presence
        for shard in self.shards:
            if shard.connected.is_set():
                await shard.set_presence(presence)

    @property
    def latency(self):
        """
        The average heartbeat latency of all shards, in seconds.
        """
        latencies = [shard.latency for shard in self.shards if shard.latency is not None]
        if not latencies:
            return None
        return sum(latencies) / len(latencies)

    def heartbeat_started(self, shard_id, interval):
        self.heartbeats[shard_id] = interval

    def heartbeat_stopped(self, shard_id):
        self.heartbeats.pop(shard_id, None)

    def listen(self, event):
        """
        Listen to a event.
        :param event: a event name to listen to
        """

        def get_func(func):
            if isinstance(event, str):
                self.registry.register(event, func)
            else:
                raise TypeError("Invalid event type!")
            return func

        return get_func

    def on(self, signal):
        """
        Listen to a shard signal (debug, raw, ready or handler_error) on all shards.
        Listeners get the shard as their first argument.
        :param signal: the signal name
        """

        def get_func(func):
            self.signals.register(signal, func)
            return func

        return get_func

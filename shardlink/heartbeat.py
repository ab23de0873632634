"""
Created by Epic at 10/18/26
"""
from asyncio import sleep, get_running_loop
from logging import getLogger
from time import monotonic

from . import packets
from .exceptions import GatewayClosed

__all__ = ("Clock", "Heartbeat")


class Clock:
    """
    Time source used for every timer the library schedules.
    Swap it out to control time, for example in tests.
    """
    def time(self):
        return monotonic()

    async def sleep(self, delay):
        await sleep(delay)


class Heartbeat:
    def __init__(self, shard, clock):
        """
        Keeps a shard's gateway connection alive.
        https://discord.com/developers/docs/topics/gateway#sending-heartbeats
        :param shard: The Shard to send heartbeats on.
        :param clock: The Clock used for the interval and the latency.
        """
        self.shard = shard
        self.clock = clock
        self.logger = getLogger(f"shardlink.heartbeat.{shard.id}")

        self.task = None
        self.interval = None
        self.received_ack = True
        self.last_sent = None
        self.latency = None

    @property
    def running(self):
        return self.task is not None and not self.task.done()

    def start(self, interval):
        """
        Starts beating every `interval` seconds. A running loop is cancelled first.
        """
        self.stop()
        self.interval = interval
        self.received_ack = True
        self.task = get_running_loop().create_task(self.heartbeat_loop())
        self.shard.client.heartbeat_started(self.shard.id, interval)
        self.logger.debug(f"Started heartbeat loop with a interval of {interval}s")

    def stop(self):
        if self.task is None:
            return
        if not self.task.done():
            self.task.cancel()
        self.task = None
        self.shard.client.heartbeat_stopped(self.shard.id)
        self.logger.debug("Stopped heartbeat loop")

    def reset(self):
        """
        Stops the loop and forgets the health metrics of the old connection.
        """
        self.stop()
        self.received_ack = True
        self.last_sent = None
        self.latency = None

    async def heartbeat_loop(self):
        while True:
            await self.clock.sleep(self.interval)
            if not self.received_ack:
                self.logger.warning("Gateway stopped responding to heartbeats, reconnecting!")
                # The reconnect stops this loop, so it can't be awaited from here
                self.task = None
                self.shard.client.heartbeat_stopped(self.shard.id)
                self.shard.request_reconnect("Heartbeat was not acknowledged")
                return
            try:
                await self.beat()
            except GatewayClosed:
                self.logger.debug("Gateway closed while sending a heartbeat")
                return

    async def beat(self):
        """
        Sends a single heartbeat with the shard's current sequence number.
        """
        self.received_ack = False
        self.last_sent = self.clock.time()
        await self.shard.send(packets.heartbeat(self.shard.sequence))

    def ack(self):
        self.received_ack = True
        if self.last_sent is not None:
            self.latency = self.clock.time() - self.last_sent
        return self.latency

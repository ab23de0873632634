"""
Created by Epic at 10/18/26
"""
from asyncio import Queue, sleep, get_running_loop
from collections import namedtuple

from aiohttp import WSMsgType, ClientConnectionError
from ujson import dumps, loads

from shardlink import Client
from shardlink.heartbeat import Clock

Message = namedtuple("Message", ("type", "data", "extra"))


async def settle(rounds=50):
    """
    Lets every runnable task make progress.
    """
    for _ in range(rounds):
        await sleep(0)


class FakeClock(Clock):
    def __init__(self):
        self.now = 0.0
        self.sleepers = []

    def time(self):
        return self.now

    async def sleep(self, delay):
        entry = (self.now + delay, get_running_loop().create_future())
        self.sleepers.append(entry)
        try:
            await entry[1]
        finally:
            if entry in self.sleepers:
                self.sleepers.remove(entry)

    async def advance(self, seconds):
        target = self.now + seconds
        await settle()
        while True:
            due = [entry for entry in self.sleepers if entry[0] <= target]
            if not due:
                break
            deadline = min(entry[0] for entry in due)
            self.now = deadline
            for entry in due:
                if entry[0] == deadline:
                    self.sleepers.remove(entry)
                    if not entry[1].done():
                        entry[1].set_result(None)
            await settle()
        self.now = target
        await settle()


class FakeWebSocket:
    """
    Behaves like an aiohttp ClientWebSocketResponse opened with autoclose=False.
    """
    def __init__(self, url):
        self.url = url
        self.incoming = Queue()
        self.sent = []
        self.closed = False
        self.close_code = None
        self.close_message = None
        self.error = None

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed and self.incoming.empty():
            raise StopAsyncIteration
        message = await self.incoming.get()
        if message.type in (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED):
            raise StopAsyncIteration
        return message

    async def send_json(self, data, compress=None, *, dumps=dumps):
        self.sent.append(loads(dumps(data)))

    async def close(self, *, code=1000, message=b""):
        if self.closed:
            return False
        self.closed = True
        if self.close_code is None:
            self.close_code = code
        self.close_message = message
        self.incoming.put_nowait(Message(WSMsgType.CLOSED, None, None))
        return True

    def exception(self):
        return self.error

    # Things the "gateway" does
    def receive(self, payload):
        self.incoming.put_nowait(Message(WSMsgType.TEXT, dumps(payload), None))

    def receive_raw(self, text):
        self.incoming.put_nowait(Message(WSMsgType.TEXT, text, None))

    def server_close(self, code):
        self.close_code = code
        self.incoming.put_nowait(Message(WSMsgType.CLOSE, code, ""))

    def fail(self, error):
        self.error = error
        self.close_code = 1006
        self.incoming.put_nowait(Message(WSMsgType.ERROR, error, None))
        self.incoming.put_nowait(Message(WSMsgType.CLOSED, None, None))

    @property
    def opcodes(self):
        return [payload["op"] for payload in self.sent]

    def sent_with(self, op):
        return [payload for payload in self.sent if payload["op"] == op]


class FakeHttp:
    def __init__(self):
        self.sockets = []
        self.failures = 0
        self.closed = False

    async def create_ws(self, url, *, compression):
        if self.failures:
            self.failures -= 1
            raise ClientConnectionError("Connection refused")
        ws = FakeWebSocket(url)
        self.sockets.append(ws)
        return ws

    @property
    def latest(self):
        return self.sockets[-1]

    async def close(self):
        self.closed = True


def make_client(**kwargs):
    options = {
        "shard_count": 2,
        "max_concurrency": 100,
        "clock": FakeClock()
    }
    options.update(kwargs)
    client = Client(513, "token", **options)
    client.http = FakeHttp()
    return client


def hello(interval=45000):
    return {"op": 10, "d": {"heartbeat_interval": interval}, "s": None, "t": None}


def dispatch(event, sequence, data=None):
    return {"op": 0, "d": data if data is not None else {}, "s": sequence, "t": event}


def ready(session_id="abc", sequence=1, resume_gateway_url="wss://resume.example.com"):
    return dispatch("READY", sequence, {
        "v": 10,
        "session_id": session_id,
        "resume_gateway_url": resume_gateway_url,
        "user": {"id": "1", "username": "bot"},
        "guilds": []
    })

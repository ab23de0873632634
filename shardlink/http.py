"""
Created by Epic at 9/1/20
Inspiration taken from discord.py
"""

from aiohttp import ClientSession, ClientWSTimeout, __version__ as aiohttp_version, ClientWebSocketResponse
import logging
from sys import version_info as python_version

from .values import version as shardlink_version

__all__ = ("HttpClient",)


class HttpClient:
    """
    Owns the aiohttp session the gateway websockets are opened with.

    Parameters
    ----------
    token: str
        A Discord bot token.
    """
    def __init__(self, token):
        self.token = token
        self.session = None
        self.logger = logging.getLogger("shardlink.http")

        self.default_headers = {
            "User-Agent": f"DiscordBot (https://github.com/tag-epic/shardlink {shardlink_version}) "
                          f"Python/{python_version[0]}.{python_version[1]} "
                          f"aiohttp/{aiohttp_version}"
        }

    async def create_ws(self, url, *, compression) -> ClientWebSocketResponse:
        """
        Opens a websocket to the specified url.

        Parameters
        ----------
        url: str
            The URL that the websocket will connect to.
        compression: int
            Whether to enable compression.
        """
        if self.session is None or self.session.closed:
            self.session = ClientSession()
        options = {
            "max_msg_size": 0,
            "timeout": ClientWSTimeout(ws_close=60),
            "autoclose": False,
            "headers": {
                "User-Agent": self.default_headers["User-Agent"]
            },
            "compress": compression
        }
        self.logger.debug(f"Opening websocket to {url}")
        return await self.session.ws_connect(url, **options)

    async def close(self):
        if self.session is not None:
            await self.session.close()

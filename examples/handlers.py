"""
Created by Epic at 10/18/26

Instructions on using this example:
    - Create a discord app and bot and invite it to a server.
        - Full instructions can be found here - https://discordpy.readthedocs.io/en/latest/discord.html
    - Enable the message content intent for the bot.
    - Copy the token from the bot and set it as the TOKEN environment variable.
    - Run this script and write something in the chat.
"""

import shardlink
from shardlink import EventHandler, Presence, Activity, ActivityType
from os import environ as env
from logging import basicConfig, DEBUG, getLogger

logger = getLogger("example")


class MessageLogger(EventHandler):
    name = "MESSAGE_CREATE"

    async def run(self, envelope, shard, client):
        message = envelope.data
        logger.info(f"[shard {shard.id}] {message['author']['username']}: {message['content']}")


async def on_guild_create(envelope, shard, client):
    logger.info(f"[shard {shard.id}] Guild available: {envelope.data['name']}")


def load_handlers():
    handler = MessageLogger()
    return {
        handler.name: handler.run,
        "GUILD_CREATE": on_guild_create
    }


client = shardlink.Client(intents=33281, token=env["TOKEN"], shard_count=2, handler_loader=load_handlers,
                          presence=Presence("online", [Activity("the gateway", ActivityType.WATCHING)]))
basicConfig(level=DEBUG)  # Comment this out if you don't want to see what's going on behind the scenes


@client.on("ready")
def on_ready(shard):
    logger.info(f"Shard {shard.id} is ready")


@client.on("handler_error")
def on_handler_error(shard, failure):
    logger.error(f"Shard {shard.id}: {failure}")


client.run()

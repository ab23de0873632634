"""
Created by Epic at 10/18/26
"""
from enum import IntEnum

__all__ = ("ActivityType", "Activity", "Presence")


class ActivityType(IntEnum):
    PLAYING = 0
    STREAMING = 1
    LISTENING = 2
    WATCHING = 3
    CUSTOM = 4
    COMPETING = 5


class Activity:
    def __init__(self, name, type=ActivityType.PLAYING, url=None):
        """
        A single activity shown under the bot's name.
        :param name: The activity name.
        :param type: An ActivityType (or the raw integer).
        :param url: Stream url, only used by discord when type is STREAMING.
        """
        self.name = name
        self.type = ActivityType(type)
        self.url = url

    def to_dict(self):
        data = {
            "name": self.name,
            "type": int(self.type)
        }
        if self.url is not None:
            data["url"] = self.url
        return data


class Presence:
    def __init__(self, status="online", activities=(), *, afk=False, since=None):
        """
        Presence sent in identify and in presence updates.
        https://discord.com/developers/docs/topics/gateway-events#update-presence
        :param status: online, dnd, idle, invisible or offline.
        :param activities: An iterable of Activity objects.
        :param afk: Whether the client is afk.
        :param since: Unix time (in milliseconds) of when the client went idle.
        """
        self.status = status
        self.activities = list(activities)
        self.afk = afk
        self.since = since

    def to_dict(self):
        return {
            "since": self.since,
            "activities": [activity.to_dict() for activity in self.activities],
            "status": self.status,
            "afk": self.afk
        }

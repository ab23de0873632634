"""
Created by Epic at 9/1/20
"""

from asyncio import get_running_loop
from collections.abc import Mapping
from inspect import isawaitable
import logging

from .exceptions import HandlerLoadError

__all__ = ("EventHandler", "HandlerFailure", "EventRegistry", "Signals")


class EventHandler:
    """
    Base class for handlers that carry their own event name.

    Subclasses set ``name`` and implement ``run``.
    """
    name = None

    async def run(self, envelope, shard, client):
        raise NotImplementedError


class HandlerFailure:
    """
    The result of a handler that raised.

    Parameters
    ----------
    event_name: str
        The event the handler was registered to.
    envelope: Envelope
        The envelope the handler was invoked with.
    exception: Exception
        What the handler raised.
    """
    __slots__ = ("event_name", "envelope", "exception")

    def __init__(self, event_name, envelope, exception):
        self.event_name = event_name
        self.envelope = envelope
        self.exception = exception

    def __str__(self):
        return f"Handler for {self.event_name} failed: {self.exception!r}"

    def __repr__(self):
        return f"<HandlerFailure event_name={self.event_name} exception={self.exception!r}>"


class EventRegistry:
    """
    Maps event names to the handler that runs when the gateway dispatches them.
    There is one handler per event, registering a name twice replaces the old handler.
    """
    def __init__(self):
        self.logger = logging.getLogger("shardlink.dispatcher")

        # A dict of the event name and the coroutine function to execute once a event is sent
        self.event_handlers = {}

    def register(self, event_name, func):
        """
        Register a handler for a specific event.

        Parameters
        ----------
        event_name: str
            The event name from Discord to listen to.
        func: Callable[[Envelope, Shard, Client], Awaitable[Any]]
            The function that will be called when the event is dispatched.
        """
        if not isinstance(event_name, str) or not event_name:
            raise TypeError("Event names have to be non-empty strings")
        if not callable(func):
            raise TypeError(f"Handler for {event_name} is not callable")
        event_name = event_name.upper()
        if event_name in self.event_handlers:
            self.logger.debug(f"Replacing handler for {event_name}")
        self.event_handlers[event_name] = func

    def add(self, handler):
        """
        Registers an EventHandler under its own name.
        """
        self.register(handler.name, handler.run)

    def load(self, source):
        """
        Populates the registry from a mapping of event name to handler, or an iterable of EventHandlers.
        Raises HandlerLoadError on the first entry that can't be registered.
        """
        if isinstance(source, Mapping):
            entries = source.items()
        else:
            try:
                entries = [(handler.name, handler.run) for handler in source]
            except (AttributeError, TypeError) as e:
                raise HandlerLoadError(f"Can't load handlers from {source!r}") from e
        for event_name, func in entries:
            if not callable(func):
                raise HandlerLoadError(f"Handler for {event_name!r} is not callable")
            try:
                self.register(event_name, func)
            except TypeError as e:
                raise HandlerLoadError(str(e)) from e
            self.logger.debug(f"Loaded handler: {event_name}")

    def get(self, event_name):
        if event_name is None:
            return None
        return self.event_handlers.get(event_name.upper())

    def __contains__(self, event_name):
        return self.get(event_name) is not None

    def __len__(self):
        return len(self.event_handlers)

    def dispatch(self, envelope, shard, client):
        """
        Schedules the handler for the envelope's event. The caller doesn't wait for it to finish.

        Returns
        -------
        Optional[asyncio.Task]
            The task running the handler, or None if no handler is registered.
        """
        func = self.get(envelope.event)
        if func is None:
            return None
        self.logger.debug("Dispatching event with name: " + str(envelope.event))
        return get_running_loop().create_task(self.invoke(func, envelope, shard, client))

    async def invoke(self, func, envelope, shard, client):
        try:
            return await func(envelope, shard, client)
        except Exception as e:
            failure = HandlerFailure(envelope.event, envelope, e)
            shard.handler_failed(failure)
            return failure


class Signals:
    """
    Emits the observable signals of a shard (debug, raw, ready, handler_error) to their listeners.
    Coroutine listeners are scheduled on the running loop.
    """
    def __init__(self):
        self.logger = logging.getLogger("shardlink.dispatcher")
        self.listeners = {}

    def register(self, name, func):
        listeners = self.listeners.get(name, [])
        listeners.append(func)
        self.listeners[name] = listeners

    def emit(self, name, *args):
        for func in self.listeners.get(name, []):
            try:
                result = func(*args)
            except Exception:
                self.logger.exception(f"Listener for signal {name} failed")
                continue
            if isawaitable(result):
                get_running_loop().create_task(self.wait_for(name, result))

    async def wait_for(self, name, awaitable):
        try:
            await awaitable
        except Exception:
            self.logger.exception(f"Listener for signal {name} failed")

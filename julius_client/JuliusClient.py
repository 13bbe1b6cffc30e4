"""Asyncio client for a Julius speech recognition engine in module mode.

Opens a TCP stream to the engine, reads it line by line, frames records on
the ``.`` terminator line and publishes the decoded events through an
EventPublisher.  Commands are plain text lines written to the same stream.
"""

import asyncio
import logging
from typing import Any

from julius_client.ClientOptions import ClientOptions
from julius_client.errors import RecordParseError
from julius_client.EventPublisher import EventPublisher, Handler
from julius_client.protocol.codec import decode_record, normalize_tree, parse_record
from julius_client.protocol.RecordFramer import RecordFramer
from julius_client.protocol.types import (
    EngineInfo,
    EventKind,
    JuliusCommand,
    JuliusEvent,
    SystemInfo,
)

logger = logging.getLogger(__name__)

# GRAPHOUT and GRAMINFO lines can exceed the asyncio default of 64 KiB.
_STREAM_LIMIT = 1024 * 1024


class JuliusClient:
    """Client for one Julius module-mode connection.

    Inbound: socket lines → RecordFramer → parse_record → normalize_tree →
    decode_record → EventPublisher.publish, one record at a time inside the
    receive task.
    Outbound: send() writes a command line; engine_info()/system_info() send a
    query and wait for the matching reply event.

    Replies are matched by kind only.  Two concurrent engine_info() calls may
    each resolve with the other's reply, so same-kind requests must be
    serialized by the caller.

    Args:
        options: Connection options; defaults to localhost:10500, UTF-8.
        publisher: Event registry; a private one is created when omitted.
        verbose: Log subscription changes.
    """

    COMMANDS = JuliusCommand

    def __init__(
        self,
        options: ClientOptions | None = None,
        publisher: EventPublisher | None = None,
        verbose: bool = False,
    ) -> None:
        self._options = options or ClientOptions()
        self._publisher = publisher or EventPublisher(verbose=verbose)
        self._framer = RecordFramer()
        self._reader: asyncio.StreamReader | None = None
        self._writer: Any = None
        self._receive_task: asyncio.Task | None = None
        self._name = f"{self._options.host}:{self._options.port}"

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def publisher(self) -> EventPublisher:
        return self._publisher

    @property
    def connected(self) -> bool:
        """True while attached to a stream whose receive task is still running."""
        if self._writer is None:
            return False
        return self._receive_task is None or not self._receive_task.done()

    def on(self, kind: EventKind | str, handler: Handler) -> None:
        """Subscribe a handler to an event kind."""
        self._publisher.subscribe(kind, handler)

    def off(self, kind: EventKind | str, handler: Handler) -> None:
        """Unsubscribe a handler from an event kind."""
        self._publisher.unsubscribe(kind, handler)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the TCP connection and start receiving.

        Raises:
            OSError: If the engine is unreachable.
        """
        reader, writer = await asyncio.open_connection(
            self._options.host, self._options.port, limit=_STREAM_LIMIT
        )
        logger.info("JuliusClient[%s]: connected", self._name)
        await self.start(reader, writer)

    async def start(self, reader: Any, writer: Any) -> None:
        """Attach to already-open streams and start the receive task.

        Args:
            reader: Object with ``async readline() -> bytes``.
            writer: Object with ``write(bytes)``, ``async drain()``,
                    ``close()`` and ``async wait_closed()``.
        """
        self._reader = reader
        self._writer = writer
        self._framer.reset()
        self._receive_task = asyncio.get_running_loop().create_task(self._receive_loop())

    async def stop(self) -> None:
        """Cancel the receive task and close the connection."""
        task = self._receive_task
        self._receive_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        writer = self._writer
        self._writer = None
        self._reader = None
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as exc:
                logger.debug("JuliusClient[%s]: error while closing: %s", self._name, exc)
            logger.info("JuliusClient[%s]: disconnected", self._name)

    async def wait_closed(self) -> None:
        """Wait until the engine closes the connection or stop() is called."""
        if self._receive_task is not None:
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self) -> "JuliusClient":
        if self._options.auto_connect:
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send(self, command: JuliusCommand | str) -> None:
        """Write one command line to the engine.

        Args:
            command: A JuliusCommand or raw text ending with a line break.

        Raises:
            ConnectionError: If the client is not connected.
        """
        if self._writer is None:
            raise ConnectionError(f"JuliusClient[{self._name}]: not connected")
        text = command.value if isinstance(command, JuliusCommand) else command
        self._writer.write(text.encode(self._options.encoding))
        await self._writer.drain()
        logger.debug("JuliusClient[%s]: sent %r", self._name, text)

    async def pause(self) -> None:
        await self.send(JuliusCommand.PAUSE)

    async def resume(self) -> None:
        await self.send(JuliusCommand.RESUME)

    async def terminate(self) -> None:
        await self.send(JuliusCommand.TERMINATE)

    async def die(self) -> None:
        await self.send(JuliusCommand.DIE)

    async def _request(self, kind: EventKind, command: JuliusCommand) -> Any:
        """Register a wait for ``kind``, then send ``command``, then await the reply.

        No timeout; wrap the call in asyncio.wait_for() to bound it.
        """
        reply = self._publisher.wait_for(kind)
        try:
            await self.send(command)
        except Exception:
            reply.cancel()
            raise
        return await reply

    async def engine_info(self) -> EngineInfo:
        """Send VERSION and return the next ENGINEINFO payload."""
        return await self._request(EventKind.ENGINEINFO, JuliusCommand.VERSION)

    async def system_info(self) -> SystemInfo:
        """Send STATUS and return the next SYSINFO payload."""
        return await self._request(EventKind.SYSINFO, JuliusCommand.STATUS)

    # ------------------------------------------------------------------
    # Inbound pipeline
    # ------------------------------------------------------------------

    def feed_line(self, line: str) -> list[JuliusEvent]:
        """Feed one received line; process the record it completes, if any.

        Returns:
            Events published for the completed record, or [] when the record
            is still incomplete.

        Raises:
            RecordParseError: If the completed record is not well-formed XML.
        """
        record = self._framer.feed(line)
        if record is None:
            return []
        return self.process_record(record)

    def process_record(self, xml: str) -> list[JuliusEvent]:
        """Decode one framed record and publish its events in order.

        Raises:
            RecordParseError: If the record is not well-formed XML.
        """
        events = decode_record(normalize_tree(parse_record(xml)))
        for event in events:
            self._publisher.publish(event)
        return events

    async def _receive_loop(self) -> None:
        """Async task: read lines until EOF and feed them through the pipeline.

        Algorithm:
            1. await reader.readline(); empty bytes means the engine closed.
            2. Decode with the configured encoding and strip the line break.
            3. feed_line(); a malformed record is logged, published as
               PARSE_ERROR and dropped, and reading continues.
            4. A line longer than the reader's limit is handled the same way;
               the reader has already discarded it, so the partial record is
               dropped with it.
            5. On connection errors: log and end the task.
        """
        try:
            while True:
                try:
                    raw = await self._reader.readline()
                except ValueError as exc:
                    self._drop_overlong_line(exc)
                    continue
                if not raw:
                    logger.warning("JuliusClient[%s]: connection closed by engine", self._name)
                    break
                line = raw.decode(self._options.encoding, errors="replace").rstrip("\r\n")
                try:
                    self.feed_line(line)
                except RecordParseError as exc:
                    logger.warning("JuliusClient[%s]: dropping malformed record: %s", self._name, exc)
                    self._publisher.publish(JuliusEvent(EventKind.PARSE_ERROR, exc))
        except asyncio.CancelledError:
            raise
        except ConnectionError as exc:
            logger.warning("JuliusClient[%s]: receive loop stopped: %s", self._name, exc)

    def _drop_overlong_line(self, exc: ValueError) -> None:
        logger.warning("JuliusClient[%s]: dropping overlong line: %s", self._name, exc)
        error = RecordParseError(f"Line exceeds stream limit: {exc}", self._framer.pending)
        self._framer.reset()
        self._publisher.publish(JuliusEvent(EventKind.PARSE_ERROR, error))

"""Telegram user-client transport built on Telethon.

Reads the alert channel, sends direct messages and rings the recipient with
``phone.requestCall``. Calls are never connected to audio: ringing is the
signal, and the call is hung up as soon as it is answered or times out.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import random
from collections import OrderedDict
from pathlib import Path
from typing import Any

from loguru import logger
from telethon import TelegramClient, events, functions, types
from telethon.errors import RPCError, UserNotParticipantError

from raidwatch.core.models import CallOutcome, StreamItem
from raidwatch.errors import TransportError
from raidwatch.utils.helpers import ensure_dir

_PROTOCOL = types.PhoneCallProtocol(
    min_layer=65,
    max_layer=92,
    udp_p2p=True,
    udp_reflector=True,
    library_versions=["4.0.0"],
)

# Telethon raises ValueError for peers missing from the entity cache and
# ConnectionError/OSError when the link drops, besides RPC errors.
_CLIENT_ERRORS = (RPCError, ValueError, OSError)

_MAX_UNCLAIMED_UPDATES = 32


def _peer(value: str) -> int | str:
    text = value.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


class TelegramTransport:
    """StreamTransportPort implementation for a Telegram user account."""

    def __init__(
        self,
        *,
        api_id: int,
        api_hash: str,
        session_path: str,
        channel: str,
        fetch_limit: int = 20,
        connection_retries: int = 5,
        client: Any = None,
    ) -> None:
        self._channel = _peer(channel)
        self._fetch_limit = int(fetch_limit)
        if client is None:
            session = Path(session_path).expanduser()
            ensure_dir(session.parent)
            client = TelegramClient(
                str(session),
                api_id,
                api_hash,
                connection_retries=connection_retries,
            )
        self._client = client
        self._channel_entity: Any = None
        self._connected = False
        # call id -> future resolved with True (accepted) / False (discarded)
        self._pending_calls: dict[int, asyncio.Future[bool]] = {}
        # updates that arrived before their call id was registered
        self._unclaimed: OrderedDict[int, bool] = OrderedDict()

    async def connect(self) -> None:
        """Log in (prompting on first run) and make sure we follow the channel."""
        logger.info("connecting to Telegram...")
        try:
            await self._client.start()
        except _CLIENT_ERRORS as e:
            raise TransportError(f"Telegram login failed: {e}") from e
        self._client.add_event_handler(self._on_phone_call, events.Raw(types.UpdatePhoneCall))
        self._connected = True
        logger.info("connected to Telegram")
        await self._ensure_subscription()

    async def disconnect(self) -> None:
        if not self._connected:
            return
        self._client.remove_event_handler(self._on_phone_call)
        await self._client.disconnect()
        self._connected = False
        logger.info("disconnected from Telegram")

    async def fetch_since(self, last_seen_id: int | None) -> list[StreamItem]:
        """Latest channel posts newer than ``last_seen_id``, newest first."""
        self._require_connection()
        try:
            entity = await self._channel_handle()
            messages = await self._client.get_messages(
                entity,
                limit=self._fetch_limit,
                min_id=last_seen_id or 0,
            )
        except _CLIENT_ERRORS as e:
            raise TransportError(f"fetching channel posts failed: {e}") from e

        items: list[StreamItem] = []
        for msg in messages:
            if not isinstance(msg, types.Message) or not msg.id:
                continue
            items.append(StreamItem(id=int(msg.id), text=msg.message or "", observed_at=msg.date))
        return items

    async def send_direct_message(self, recipient: str, text: str) -> bool:
        self._require_connection()
        try:
            await self._client.send_message(_peer(recipient), text)
        except _CLIENT_ERRORS as e:
            logger.error("sending message to {} failed: {}", recipient, e)
            return False
        logger.info("message sent to {}", recipient)
        return True

    async def place_call(self, recipient: str, *, timeout_s: float) -> CallOutcome:
        """Ring ``recipient`` and wait up to ``timeout_s`` for pickup."""
        self._require_connection()
        try:
            user = await self._client.get_input_entity(_peer(recipient))
            g_a = os.urandom(256)
            result = await self._client(
                functions.phone.RequestCallRequest(
                    user_id=user,
                    random_id=random.randint(0, 0x7FFFFFFF),
                    g_a_hash=hashlib.sha256(g_a).digest(),
                    protocol=_PROTOCOL,
                    video=False,
                )
            )
        except _CLIENT_ERRORS as e:
            raise TransportError(f"requesting call failed: {e}") from e

        call = result.phone_call
        logger.info("call requested  state={}", type(call).__name__)

        if isinstance(call, types.PhoneCallAccepted):
            await self._discard(call)
            return CallOutcome.ANSWERED
        if isinstance(call, types.PhoneCallDiscarded):
            return CallOutcome.TIMED_OUT

        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._pending_calls[call.id] = future
        early = self._unclaimed.pop(call.id, None)
        if early is not None:
            future.set_result(early)

        declined = False
        try:
            answered = await asyncio.wait_for(future, timeout=timeout_s)
            declined = not answered
        except TimeoutError:
            logger.info("no pickup within {}s", timeout_s)
            answered = False
        finally:
            self._pending_calls.pop(call.id, None)
            # a declined call is already closed on the server side
            if not declined:
                await self._discard(call)

        return CallOutcome.ANSWERED if answered else CallOutcome.TIMED_OUT

    # ── Internals ────────────────────────────────────────────────────

    async def _on_phone_call(self, update: types.UpdatePhoneCall) -> None:
        call = update.phone_call
        if isinstance(call, types.PhoneCallAccepted):
            accepted = True
        elif isinstance(call, types.PhoneCallDiscarded):
            accepted = False
        else:
            return

        future = self._pending_calls.get(call.id)
        if future is None:
            self._unclaimed[call.id] = accepted
            while len(self._unclaimed) > _MAX_UNCLAIMED_UPDATES:
                self._unclaimed.popitem(last=False)
            return
        if future.done():
            return
        logger.info("call {}", "accepted" if accepted else "declined or dropped")
        future.set_result(accepted)

    async def _discard(self, call: Any) -> None:
        try:
            await self._client(
                functions.phone.DiscardCallRequest(
                    peer=types.InputPhoneCall(id=call.id, access_hash=call.access_hash),
                    duration=0,
                    reason=types.PhoneCallDiscardReasonHangup(),
                    connection_id=0,
                )
            )
            logger.debug("call {} hung up", call.id)
        except _CLIENT_ERRORS as e:
            logger.warning("hanging up call {} failed: {}", call.id, e)

    async def _channel_handle(self) -> Any:
        if self._channel_entity is None:
            self._channel_entity = await self._client.get_input_entity(self._channel)
        return self._channel_entity

    async def _ensure_subscription(self) -> None:
        try:
            entity = await self._channel_handle()
            await self._client(
                functions.channels.GetParticipantRequest(channel=entity, participant=types.InputPeerSelf())
            )
            logger.info("already subscribed to channel {}", self._channel)
        except UserNotParticipantError:
            logger.info("joining channel {}", self._channel)
            try:
                await self._client(functions.channels.JoinChannelRequest(channel=entity))
            except _CLIENT_ERRORS as e:
                logger.error("joining channel {} failed: {}", self._channel, e)
        except _CLIENT_ERRORS as e:
            logger.error("checking channel subscription failed: {}", e)

    def _require_connection(self) -> None:
        if not self._connected:
            raise TransportError("Telegram client is not connected")

from __future__ import annotations

import asyncio
import enum
import io
import re
from dataclasses import dataclass
from typing import Optional, Set

import discord

from .caption_core.errors import RenderError, TextTooLargeError, UnknownSlot
from .logger import get_logger
from .renderer import CaptionRenderer

logger = get_logger("bot")

AUTH_COMMAND = "auth"
QUIT_COMMAND = "quit"

MESSAGE_NO_SLOT = "No matching image is configured."
MESSAGE_TOO_LONG = "That text is too long for this image."
MESSAGE_FAILED = "Sorry, something went wrong! Maybe try again?"
MESSAGE_AUTHORIZED = "Successfully authorized."
MESSAGE_ALREADY_AUTHORIZED = "You are already authorized."

_DM_PATTERN = re.compile(r"(\S*)\s*(.*)", re.DOTALL)


@dataclass(frozen=True)
class Command:
    entire: str
    first_word: str
    rest: str
    private: bool = False


def parse_command(content: str, bot_id: int, private: bool = False) -> Optional[Command]:
    """Extract the command addressed to the bot, or ``None`` if it is not addressed.

    Guild messages must mention the bot (``<@id>`` or ``<@!id>``); the command
    is whatever follows the mention. Direct messages are commands as they stand.
    """
    mention = re.compile(rf"<@!?{bot_id}>\s*((\S*)\s*(.*))", re.DOTALL)
    match = mention.search(content)
    if match:
        return Command(
            entire=match.group(1),
            first_word=match.group(2),
            rest=match.group(3),
            private=private,
        )
    if not private:
        return None

    stripped = content.strip()
    match = _DM_PATTERN.match(stripped)
    return Command(entire=stripped, first_word=match.group(1), rest=match.group(2), private=True)


class AuthResult(enum.Enum):
    GRANTED = "granted"
    ALREADY = "already"
    DENIED = "denied"
    DISABLED = "disabled"


class AdminGate:
    """Process-lifetime admin list unlocked with a shared password."""

    def __init__(self, password: Optional[str]):
        self._password = (password or "").strip() or None
        self._admin_ids: Set[int] = set()

    @property
    def enabled(self) -> bool:
        return self._password is not None

    def is_admin(self, user_id: int) -> bool:
        return user_id in self._admin_ids

    def authorize(self, user_id: int, password: str) -> AuthResult:
        if user_id in self._admin_ids:
            return AuthResult.ALREADY
        if self._password is None:
            return AuthResult.DISABLED
        if password.strip() != self._password:
            return AuthResult.DENIED
        self._admin_ids.add(user_id)
        return AuthResult.GRANTED


def describe_error(exc: Exception) -> str:
    if isinstance(exc, UnknownSlot):
        return MESSAGE_NO_SLOT
    if isinstance(exc, TextTooLargeError):
        return MESSAGE_TOO_LONG
    return MESSAGE_FAILED


class CaptionBot(discord.Client):
    def __init__(self, renderer: CaptionRenderer, admin_gate: AdminGate, **options):
        intents = options.pop("intents", None)
        if intents is None:
            intents = discord.Intents.default()
            intents.message_content = True
        super().__init__(intents=intents, **options)
        self.renderer = renderer
        self.admin_gate = admin_gate

    async def on_ready(self) -> None:
        logger.info("Connected as %s", self.user)

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or self.user is None:
            return
        private = isinstance(message.channel, discord.DMChannel)
        command = parse_command(message.content, self.user.id, private)
        if command is None:
            return
        logger.debug('Received command; first word: "%s", rest: "%s"', command.first_word, command.rest)
        await self.handle_command(message, command)

    async def handle_command(self, message: discord.Message, command: Command) -> None:
        keyword = command.first_word.lower()
        if keyword == AUTH_COMMAND:
            await self._handle_auth(message, command)
        elif keyword == QUIT_COMMAND:
            if not self.admin_gate.is_admin(message.author.id):
                return
            logger.info("User requested quit: %s", message.author)
            await self.close()
        else:
            await self._handle_render(message, command)

    async def _handle_auth(self, message: discord.Message, command: Command) -> None:
        if not command.private:
            return
        result = self.admin_gate.authorize(message.author.id, command.rest)
        if result is AuthResult.ALREADY:
            await message.channel.send(MESSAGE_ALREADY_AUTHORIZED)
        elif result is AuthResult.GRANTED:
            logger.info("User successfully authorized as admin: %s", message.author)
            await message.channel.send(MESSAGE_AUTHORIZED)
        elif result is AuthResult.DENIED:
            logger.info("User failed attempt to authorize as admin: %s", message.author)

    async def _handle_render(self, message: discord.Message, command: Command) -> None:
        logger.info("Creating image for string %r", command.entire)
        try:
            image = await asyncio.to_thread(self.renderer.handle, command.entire)
        except (UnknownSlot, TextTooLargeError) as exc:
            logger.info("Not rendering %r: %s", command.entire, exc)
            await message.channel.send(describe_error(exc))
            return
        except RenderError:
            logger.exception("Failed to render %r", command.entire)
            await message.channel.send(MESSAGE_FAILED)
            return

        await message.channel.send(file=discord.File(io.BytesIO(image.data), filename=image.filename))

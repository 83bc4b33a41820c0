from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from .errors import (
    DuplicateCommand,
    InvalidBox,
    InvalidFontSize,
    MultipleDefaults,
    NoDefaultSlot,
    UnknownSlot,
)
from .models import SlotConfig


def normalize_command(token: Optional[str]) -> Optional[str]:
    if token is None:
        return None
    token = token.strip().lower()
    return token or None


class SlotRegistry:
    """Read-only set of slots, addressed by position, command or the default."""

    def __init__(self, slots: Tuple[SlotConfig, ...], commands: Dict[str, int], default_id: Optional[int]):
        self._slots = slots
        self._commands = commands
        self._default_id = default_id

    @classmethod
    def load(cls, configs: Iterable[SlotConfig]) -> "SlotRegistry":
        slots = tuple(configs)
        commands: Dict[str, int] = {}
        defaults = []

        for slot_id, slot in enumerate(slots):
            if slot.box.width <= 0 or slot.box.height <= 0:
                raise InvalidBox(slot.box, slot.label)
            if slot.font_size <= 0:
                raise InvalidFontSize(slot.font_size, slot.label)

            command = normalize_command(slot.command)
            if command:
                if command in commands:
                    raise DuplicateCommand(command)
                commands[command] = slot_id
            if slot.is_default:
                defaults.append(slot_id)

        if len(defaults) > 1:
            raise MultipleDefaults(len(defaults))

        return cls(slots, commands, defaults[0] if defaults else None)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[SlotConfig]:
        return iter(self._slots)

    @property
    def commands(self) -> Tuple[str, ...]:
        return tuple(self._commands)

    @property
    def default_id(self) -> Optional[int]:
        return self._default_id

    @property
    def default(self) -> Optional[SlotConfig]:
        if self._default_id is None:
            return None
        return self._slots[self._default_id]

    def get(self, slot_id: int) -> SlotConfig:
        if not isinstance(slot_id, int) or not 0 <= slot_id < len(self._slots):
            raise UnknownSlot(slot_id)
        return self._slots[slot_id]

    def match(self, token: Optional[str]) -> Optional[int]:
        """Return the slot id registered for ``token``, without any fallback."""
        command = normalize_command(token)
        if command is None:
            return None
        return self._commands.get(command)

    def resolve(self, token: Optional[str]) -> Tuple[int, bool]:
        """Return ``(slot_id, matched)``; unmatched tokens fall back to the default slot."""
        slot_id = self.match(token)
        if slot_id is not None:
            return slot_id, True
        if self._default_id is None:
            raise NoDefaultSlot()
        return self._default_id, False

    def lookup(self, token: Optional[str] = None) -> SlotConfig:
        slot_id, _ = self.resolve(token)
        return self._slots[slot_id]

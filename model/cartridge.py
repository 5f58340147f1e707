from __future__ import annotations
from model.voice import Voice

VOICE_COUNT = 32


class Cartridge:
    """An ordered bank of exactly 32 voices."""

    def __init__(self, voices) -> None:
        voices = tuple(voices)
        if len(voices) != VOICE_COUNT:
            raise ValueError(f"A cartridge holds {VOICE_COUNT} voices, got {len(voices)}")
        for slot, voice in enumerate(voices):
            if not isinstance(voice, Voice):
                raise TypeError(f"Slot {slot} must be a Voice, got {type(voice).__name__}")
        self._voices = voices

    @classmethod
    def filled(cls, voice: Voice) -> Cartridge:
        return cls([voice] * VOICE_COUNT)

    @property
    def voices(self) -> tuple[Voice, ...]:
        return self._voices

    def __len__(self) -> int:
        return VOICE_COUNT

    def __getitem__(self, slot: int) -> Voice:
        return self._voices[slot]

    def __iter__(self):
        return iter(self._voices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cartridge):
            return NotImplemented
        return self._voices == other._voices

    def __hash__(self) -> int:
        return hash(self._voices)

    def replace_voice(self, slot: int, voice: Voice) -> Cartridge:
        if not (0 <= slot < VOICE_COUNT):
            raise ValueError(f"Slot must be 0-{VOICE_COUNT - 1}, got {slot}")
        voices = list(self._voices)
        voices[slot] = voice
        return Cartridge(voices)

    def names(self) -> list[str]:
        return [str(v.name) for v in self._voices]

    def pack(self) -> bytes:
        from midi.packing import pack_cartridge
        return pack_cartridge(self)

    @classmethod
    def unpack(cls, data: bytes) -> Cartridge:
        from midi.packing import unpack_cartridge
        return unpack_cartridge(data)

    def to_dict(self) -> dict:
        return {"voices": [v.to_dict() for v in self._voices]}

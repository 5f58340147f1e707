"""Command verbs: generate voices and cartridges, convert and inspect bulk dumps.

Verbs return raw SysEx bytes or plain values.  Reading and writing files
and argument parsing belong to whatever front end calls them.
"""
from __future__ import annotations
from typing import Any, Callable
from core.config import AppConfig
from core.errors import FormatError, RangeError
from core.logger import AppLogger, hex_preview
from model.cartridge import VOICE_COUNT, Cartridge
from model.generate import CartridgeMode, RandomScope, cartridge_from, random_voice
from model.presets import default_voice
from model.ranged import Bound
from model.voice import Voice, VoiceName
from midi.sysex import (
    DumpFormat, build_cartridge_dump, build_voice_dump, parse_cartridge_dump, parse_dump,
)
from midi.packing import unpack_cartridge, unpack_voice, voice_from_bytes

Exporter = Callable[[dict[str, Any]], Any]

VOICE_NUMBERS = Bound(1, VOICE_COUNT)


def _voice_dump(voice: Voice, config: AppConfig) -> bytes:
    return build_voice_dump(voice, channel=config.midi_channel,
                            packed=config.packed_single_voice)


def _named(voice: Voice, name: str | None, config: AppConfig) -> Voice:
    if name is None:
        return voice
    return voice.replace(name=VoiceName(name, config.policy()))


def generate_default_voice(name: str | None = None, config: AppConfig | None = None,
                           logger: AppLogger | None = None) -> bytes:
    """Init voice dump.  ``name`` is checked against the configured range policy."""
    config = config or AppConfig()
    logger = logger or AppLogger()
    message = _voice_dump(_named(default_voice(), name, config), config)
    logger.generate(f"Default voice, {len(message)} byte dump on channel {config.midi_channel}")
    return message


def generate_random_voice(scope: RandomScope | None = None, base: Voice | None = None,
                          name: str | None = None, config: AppConfig | None = None,
                          logger: AppLogger | None = None) -> bytes:
    config = config or AppConfig()
    logger = logger or AppLogger()
    scope = config.scope() if scope is None else scope
    voice = _named(random_voice(scope, base=base, rng=config.rng()), name, config)
    logger.generate(f"Random voice '{voice.name}' (scope {scope.name or scope.value}, "
                    f"algorithm {voice.algorithm.value})")
    return _voice_dump(voice, config)


def generate_cartridge(mode: CartridgeMode | None = None, voice: Voice | None = None,
                       scope: RandomScope | None = None,
                       config: AppConfig | None = None,
                       logger: AppLogger | None = None) -> bytes:
    config = config or AppConfig()
    logger = logger or AppLogger()
    mode = config.mode() if mode is None else mode
    scope = config.scope() if scope is None else scope
    cartridge = cartridge_from(voice, mode=mode, scope=scope, rng=config.rng())
    logger.generate(f"Cartridge ({mode.value}) of {len(cartridge)} voices")
    return build_cartridge_dump(cartridge, channel=config.midi_channel)


def _read_cartridge(message: bytes, logger: AppLogger) -> Cartridge:
    try:
        return parse_cartridge_dump(message, logger=logger)
    except FormatError as exc:
        logger.sysex(f"Rejected bulk dump {hex_preview(message)}: {exc}")
        raise


def convert_bulk(message: bytes, exporter: Exporter,
                 logger: AppLogger | None = None) -> Any:
    """Decode a 32-voice dump and hand its plain-value view to ``exporter``."""
    logger = logger or AppLogger()
    cartridge = _read_cartridge(message, logger)
    logger.codec(f"Converted bulk dump: {', '.join(cartridge.names())}")
    return exporter(cartridge.to_dict())


def list_voice_names(message: bytes, logger: AppLogger | None = None) -> list[str]:
    """Voice names of a bulk dump.  A checksum mismatch is logged, not fatal."""
    logger = logger or AppLogger()
    dump = parse_dump(message, logger)
    if dump.format is not DumpFormat.CARTRIDGE:
        raise FormatError("expected a 32-voice cartridge dump")
    if not dump.checksum_ok:
        logger.sysex("Listing names from a dump with a bad checksum")
    try:
        cartridge = unpack_cartridge(dump.payload)
    except FormatError as exc:
        logger.codec(f"Cannot list names: {exc}")
        raise
    return cartridge.names()


def extract_voices(message: bytes, config: AppConfig | None = None,
                   logger: AppLogger | None = None) -> list[bytes]:
    """Split a bulk dump into 32 single-voice dumps."""
    config = config or AppConfig()
    logger = logger or AppLogger()
    cartridge = _read_cartridge(message, logger)
    dumps = [_voice_dump(voice, config) for voice in cartridge]
    logger.codec(f"Extracted {len(dumps)} voices")
    return dumps


def dump_voices(message: bytes, number: int | None = None,
                logger: AppLogger | None = None) -> str:
    """Readable listing of a single voice dump, or of one or all voices of a bulk dump.

    ``number`` is 1-based and ignored for single voice dumps.
    """
    logger = logger or AppLogger()
    dump = parse_dump(message, logger).verify()
    if dump.format is DumpFormat.VOICE:
        voice = unpack_voice(dump.payload) if dump.packed else voice_from_bytes(dump.payload)
        return str(voice)
    cartridge = unpack_cartridge(dump.payload)
    if number is None:
        return "\n\n".join(f"VOICE {n}: {voice}" for n, voice in enumerate(cartridge, start=1))
    if not VOICE_NUMBERS.contains(number):
        raise RangeError("voice_number", number, VOICE_NUMBERS)
    logger.codec(f"Dumping voice {number} '{cartridge[number - 1].name}'")
    return str(cartridge[number - 1])

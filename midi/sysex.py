from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from core.errors import FormatError, RangeError
from core.logger import AppLogger, hex_preview
from model.cartridge import Cartridge
from model.ranged import Bound
from model.voice import Voice
from midi.packing import (
    CARTRIDGE_SIZE, PACKED_VOICE_SIZE, UNPACKED_VOICE_SIZE,
    pack_cartridge, pack_voice, unpack_cartridge, unpack_voice,
    voice_from_bytes, voice_to_bytes,
)

SYSEX_START = 0xF0
SYSEX_END = 0xF7
YAMAHA_ID = 0x43

SUB_STATUS_DUMP = 0x00
SUB_STATUS_REQUEST = 0x20

MIDI_CHANNELS = Bound(1, 16)

# F0 43 0n ff bb bb
HEADER_SIZE = 6


class DumpFormat(IntEnum):
    VOICE = 0x00
    CARTRIDGE = 0x09


_PAYLOAD_SIZES = {
    DumpFormat.VOICE: (UNPACKED_VOICE_SIZE, PACKED_VOICE_SIZE),
    DumpFormat.CARTRIDGE: (CARTRIDGE_SIZE,),
}


def checksum(payload: bytes) -> int:
    """Two's complement of the 7-bit sum of the payload."""
    return -sum(payload) & 0x7F


def encode_byte_count(count: int) -> list[int]:
    """Byte count as two 7-bit bytes, MSB first (4096 -> 20 00)."""
    return [(count >> 7) & 0x7F, count & 0x7F]


def decode_byte_count(msb: int, lsb: int) -> int:
    return (msb << 7) | lsb


def _channel_nibble(channel: int) -> int:
    if not MIDI_CHANNELS.contains(channel):
        raise RangeError("midi_channel", channel, MIDI_CHANNELS)
    return channel - 1


def build_dump(fmt: DumpFormat, payload: bytes, channel: int = 1) -> bytes:
    if any(b & 0x80 for b in payload):
        raise ValueError("SysEx data bytes must all be <= 0x7F")
    return bytes(
        [SYSEX_START, YAMAHA_ID, SUB_STATUS_DUMP | _channel_nibble(channel), fmt,
         *encode_byte_count(len(payload))]
        + list(payload)
        + [checksum(payload), SYSEX_END]
    )


def build_cartridge_dump(cartridge: Cartridge, channel: int = 1) -> bytes:
    """F0 43 0n 09 20 00 [4096 bytes] cs F7"""
    return build_dump(DumpFormat.CARTRIDGE, pack_cartridge(cartridge), channel)


def build_voice_dump(voice: Voice, channel: int = 1, packed: bool = False) -> bytes:
    """Single voice: F0 43 0n 00 01 1B [155 bytes] cs F7, or 01 00 and 128 bytes packed."""
    data = pack_voice(voice) if packed else voice_to_bytes(voice)
    return build_dump(DumpFormat.VOICE, data, channel)


def build_dump_request(channel: int, fmt: DumpFormat) -> bytes:
    """Ask the device to transmit its edit buffer (VOICE) or all voices (CARTRIDGE)."""
    return bytes([SYSEX_START, YAMAHA_ID, SUB_STATUS_REQUEST | _channel_nibble(channel),
                  fmt, SYSEX_END])


@dataclass(frozen=True)
class SysExDump:
    channel: int
    format: DumpFormat
    payload: bytes
    checksum: int

    @property
    def byte_count(self) -> int:
        return len(self.payload)

    @property
    def expected_checksum(self) -> int:
        return checksum(self.payload)

    @property
    def checksum_ok(self) -> bool:
        return self.checksum == self.expected_checksum

    @property
    def packed(self) -> bool:
        return self.byte_count != UNPACKED_VOICE_SIZE

    def verify(self) -> SysExDump:
        if not self.checksum_ok:
            raise FormatError(
                f"checksum mismatch: message has 0x{self.checksum:02X}, "
                f"payload sums to 0x{self.expected_checksum:02X}",
                payload=self.payload,
            )
        return self


def parse_dump(message: bytes | list[int], logger: AppLogger | None = None) -> SysExDump:
    """Parse a voice or cartridge bulk dump.

    Framing errors raise FormatError.  The checksum is compared but never
    corrected; a mismatch is reported through ``SysExDump.checksum_ok`` so
    the caller can still inspect the raw payload.
    """
    message = bytes(message)
    if len(message) < HEADER_SIZE + 2:
        raise FormatError(f"message too short: {len(message)} bytes")
    if message[0] != SYSEX_START or message[-1] != SYSEX_END:
        raise FormatError("not a System Exclusive message (missing F0/F7)")
    if message[1] != YAMAHA_ID:
        raise FormatError(f"unexpected manufacturer ID 0x{message[1]:02X}")
    if message[2] & 0x70 != SUB_STATUS_DUMP:
        raise FormatError(f"not a bulk dump (sub-status 0x{message[2] & 0x70:02X})")
    try:
        fmt = DumpFormat(message[3])
    except ValueError as exc:
        raise FormatError(f"unsupported format number 0x{message[3]:02X}") from exc
    byte_count = decode_byte_count(message[4], message[5])
    if byte_count not in _PAYLOAD_SIZES[fmt]:
        raise FormatError(f"unexpected byte count {byte_count} for {fmt.name.lower()} dump")
    payload = message[HEADER_SIZE:-2]
    if len(payload) != byte_count:
        raise FormatError(f"header says {byte_count} data bytes, message has {len(payload)}")
    if any(b & 0x80 for b in message[1:-1]):
        raise FormatError("data bytes must all be <= 0x7F")
    dump = SysExDump(
        channel=(message[2] & 0x0F) + 1,
        format=fmt,
        payload=payload,
        checksum=message[-2],
    )
    if not dump.checksum_ok:
        (logger or AppLogger()).sysex(
            f"checksum mismatch in {fmt.name.lower()} dump {hex_preview(message)}: "
            f"0x{dump.checksum:02X} != 0x{dump.expected_checksum:02X}"
        )
    return dump


def parse_cartridge_dump(message: bytes | list[int], verify: bool = True,
                         logger: AppLogger | None = None) -> Cartridge:
    dump = parse_dump(message, logger)
    if dump.format != DumpFormat.CARTRIDGE:
        raise FormatError("expected a 32-voice cartridge dump")
    if verify:
        dump.verify()
    return unpack_cartridge(dump.payload)


def parse_voice_dump(message: bytes | list[int], verify: bool = True,
                     logger: AppLogger | None = None) -> Voice:
    dump = parse_dump(message, logger)
    if dump.format != DumpFormat.VOICE:
        raise FormatError("expected a single voice dump")
    if verify:
        dump.verify()
    if dump.packed:
        return unpack_voice(dump.payload)
    return voice_from_bytes(dump.payload)

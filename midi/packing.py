"""Voice data codecs.

Two layouts are supported:

Packed (128 bytes, bulk dump / cartridge):
  bytes   0-101  six operators, 17 bytes each, stored OP6 first
  bytes 102-109  pitch EG rates 1-4, levels 1-4
  byte  110      algorithm (0-31)
  byte  111      osc key sync bit 3 | feedback bits 0-2
  bytes 112-115  LFO speed, delay, PMD, AMD
  byte  116      PMS bits 4-6 | LFO wave bits 1-3 | LFO sync bit 0
  byte  117      transpose (0-48, 24 = C3)
  bytes 118-127  name

Unpacked (155 bytes, single voice edit buffer): one byte per parameter,
operators OP6 first at 21 bytes each, then the global block.

Every field is described by a ``BitField`` (offset, mask, shift) so the
packed and unpacked codecs share the same field lists.
"""
from __future__ import annotations
from dataclasses import dataclass
from core.errors import FormatError
from model.cartridge import VOICE_COUNT, Cartridge
from model.envelope import Envelope
from model.lfo import Lfo, LfoWaveform
from model.operator import KeyboardLevelScaling, Operator, OperatorMode, ScalingCurve
from model.params import (
    Algorithm, AmpModSensitivity, Breakpoint, CatalogValue, Coarse, Detune,
    Feedback, Fine, KeyVelocitySensitivity, Level, LfoDelay, LfoSpeed, ModDepth,
    OutputLevel, PitchModSensitivity, Rate, RateScaling, ScalingDepth, Transpose,
)
from model.voice import NAME_LENGTH, OPERATOR_COUNT, Voice, VoiceName

PACKED_OPERATOR_SIZE = 17
PACKED_VOICE_SIZE = 128
PACKED_GLOBAL_OFFSET = OPERATOR_COUNT * PACKED_OPERATOR_SIZE   # 102
PACKED_NAME_OFFSET = PACKED_VOICE_SIZE - NAME_LENGTH           # 118

UNPACKED_OPERATOR_SIZE = 21
UNPACKED_VOICE_SIZE = 155
UNPACKED_GLOBAL_OFFSET = OPERATOR_COUNT * UNPACKED_OPERATOR_SIZE  # 126
UNPACKED_NAME_OFFSET = UNPACKED_VOICE_SIZE - NAME_LENGTH         # 145

CARTRIDGE_SIZE = VOICE_COUNT * PACKED_VOICE_SIZE  # 4096


@dataclass(frozen=True)
class BitField:
    offset: int
    mask: int = 0x7F
    shift: int = 0

    def get(self, data: bytes, base: int = 0) -> int:
        return (data[base + self.offset] >> self.shift) & self.mask

    def put(self, data: bytearray, base: int, value: int) -> None:
        data[base + self.offset] |= (value & self.mask) << self.shift


# Field order is the unpacked byte order.
_OPERATOR_FIELDS: list[tuple[str, type]] = [
    ("rate1", Rate), ("rate2", Rate), ("rate3", Rate), ("rate4", Rate),
    ("level1", Level), ("level2", Level), ("level3", Level), ("level4", Level),
    ("breakpoint", Breakpoint),
    ("left_depth", ScalingDepth),
    ("right_depth", ScalingDepth),
    ("left_curve", ScalingCurve),
    ("right_curve", ScalingCurve),
    ("kbd_rate_scaling", RateScaling),
    ("amp_mod_sens", AmpModSensitivity),
    ("key_vel_sens", KeyVelocitySensitivity),
    ("output_level", OutputLevel),
    ("mode", OperatorMode),
    ("coarse", Coarse),
    ("fine", Fine),
    ("detune", Detune),
]

_VOICE_FIELDS: list[tuple[str, type]] = [
    ("peg_rate1", Rate), ("peg_rate2", Rate), ("peg_rate3", Rate), ("peg_rate4", Rate),
    ("peg_level1", Level), ("peg_level2", Level), ("peg_level3", Level), ("peg_level4", Level),
    ("algorithm", Algorithm),
    ("feedback", Feedback),
    ("osc_sync", bool),
    ("lfo_speed", LfoSpeed),
    ("lfo_delay", LfoDelay),
    ("lfo_pmd", ModDepth),
    ("lfo_amd", ModDepth),
    ("lfo_sync", bool),
    ("lfo_waveform", LfoWaveform),
    ("pitch_mod_sens", PitchModSensitivity),
    ("transpose", Transpose),
]

_OPERATOR_PACKED: dict[str, BitField] = {
    "rate1": BitField(0), "rate2": BitField(1), "rate3": BitField(2), "rate4": BitField(3),
    "level1": BitField(4), "level2": BitField(5), "level3": BitField(6), "level4": BitField(7),
    "breakpoint": BitField(8),
    "left_depth": BitField(9),
    "right_depth": BitField(10),
    "left_curve": BitField(11, 0x03, 0),
    "right_curve": BitField(11, 0x03, 2),
    "kbd_rate_scaling": BitField(12, 0x07, 0),
    "detune": BitField(12, 0x0F, 3),
    "amp_mod_sens": BitField(13, 0x03, 0),
    "key_vel_sens": BitField(13, 0x07, 2),
    "output_level": BitField(14),
    "mode": BitField(15, 0x01, 0),
    "coarse": BitField(15, 0x1F, 1),
    "fine": BitField(16),
}

# Offsets relative to PACKED_GLOBAL_OFFSET.
_VOICE_PACKED: dict[str, BitField] = {
    "peg_rate1": BitField(0), "peg_rate2": BitField(1),
    "peg_rate3": BitField(2), "peg_rate4": BitField(3),
    "peg_level1": BitField(4), "peg_level2": BitField(5),
    "peg_level3": BitField(6), "peg_level4": BitField(7),
    "algorithm": BitField(8, 0x1F, 0),
    "feedback": BitField(9, 0x07, 0),
    "osc_sync": BitField(9, 0x01, 3),
    "lfo_speed": BitField(10),
    "lfo_delay": BitField(11),
    "lfo_pmd": BitField(12),
    "lfo_amd": BitField(13),
    # Byte 116.  The published format chart puts PMS in bits 5-6 and the
    # waveform in bits 1-4, which is wrong: PMS needs three bits.  Factory
    # data (BRASS 1: sine, no sync, PMS 3 -> 0x38) confirms this layout.
    # Do not change it back to the chart.
    "lfo_sync": BitField(14, 0x01, 0),
    "lfo_waveform": BitField(14, 0x07, 1),
    "pitch_mod_sens": BitField(14, 0x07, 4),
    "transpose": BitField(15),
}

_OPERATOR_UNPACKED = {name: BitField(i) for i, (name, _) in enumerate(_OPERATOR_FIELDS)}
_VOICE_UNPACKED = {name: BitField(i) for i, (name, _) in enumerate(_VOICE_FIELDS)}


def _operator_fields(op: Operator) -> dict:
    eg, ks = op.eg, op.kbd_level_scaling
    return {
        "rate1": eg.rate1, "rate2": eg.rate2, "rate3": eg.rate3, "rate4": eg.rate4,
        "level1": eg.level1, "level2": eg.level2, "level3": eg.level3, "level4": eg.level4,
        "breakpoint": ks.breakpoint,
        "left_depth": ks.left_depth,
        "right_depth": ks.right_depth,
        "left_curve": ks.left_curve,
        "right_curve": ks.right_curve,
        "kbd_rate_scaling": op.kbd_rate_scaling,
        "amp_mod_sens": op.amp_mod_sens,
        "key_vel_sens": op.key_vel_sens,
        "output_level": op.output_level,
        "mode": op.mode,
        "coarse": op.coarse,
        "fine": op.fine,
        "detune": op.detune,
    }


def _build_operator(f: dict) -> Operator:
    return Operator(
        eg=Envelope(f["rate1"], f["rate2"], f["rate3"], f["rate4"],
                    f["level1"], f["level2"], f["level3"], f["level4"]),
        kbd_level_scaling=KeyboardLevelScaling(
            breakpoint=f["breakpoint"],
            left_depth=f["left_depth"],
            right_depth=f["right_depth"],
            left_curve=f["left_curve"],
            right_curve=f["right_curve"],
        ),
        kbd_rate_scaling=f["kbd_rate_scaling"],
        amp_mod_sens=f["amp_mod_sens"],
        key_vel_sens=f["key_vel_sens"],
        output_level=f["output_level"],
        mode=f["mode"],
        coarse=f["coarse"],
        fine=f["fine"],
        detune=f["detune"],
    )


def _voice_fields(voice: Voice) -> dict:
    peg, lfo = voice.peg, voice.lfo
    return {
        "peg_rate1": peg.rate1, "peg_rate2": peg.rate2,
        "peg_rate3": peg.rate3, "peg_rate4": peg.rate4,
        "peg_level1": peg.level1, "peg_level2": peg.level2,
        "peg_level3": peg.level3, "peg_level4": peg.level4,
        "algorithm": voice.algorithm,
        "feedback": voice.feedback,
        "osc_sync": voice.osc_sync,
        "lfo_speed": lfo.speed,
        "lfo_delay": lfo.delay,
        "lfo_pmd": lfo.pmd,
        "lfo_amd": lfo.amd,
        "lfo_sync": lfo.sync,
        "lfo_waveform": lfo.waveform,
        "pitch_mod_sens": lfo.pitch_mod_sens,
        "transpose": voice.transpose,
    }


def _build_voice(ops: list[Operator], f: dict, name: VoiceName) -> Voice:
    op6, op5, op4, op3, op2, op1 = ops
    return Voice(
        op1=op1, op2=op2, op3=op3, op4=op4, op5=op5, op6=op6,
        peg=Envelope(f["peg_rate1"], f["peg_rate2"], f["peg_rate3"], f["peg_rate4"],
                     f["peg_level1"], f["peg_level2"], f["peg_level3"], f["peg_level4"]),
        algorithm=f["algorithm"],
        feedback=f["feedback"],
        osc_sync=f["osc_sync"],
        lfo=Lfo(
            speed=f["lfo_speed"],
            delay=f["lfo_delay"],
            pmd=f["lfo_pmd"],
            amd=f["lfo_amd"],
            sync=f["lfo_sync"],
            waveform=f["lfo_waveform"],
            pitch_mod_sens=f["pitch_mod_sens"],
        ),
        transpose=f["transpose"],
        name=name,
    )


def _to_wire(value) -> int:
    if isinstance(value, CatalogValue):
        return value.to_wire()
    return int(value)  # bool and IntEnum


def _from_wire(kind: type, raw: int, where: str):
    try:
        if issubclass(kind, CatalogValue):
            return kind.from_wire(raw)
        if kind is bool:
            if raw not in (0, 1):
                raise ValueError(f"flag must be 0 or 1, got {raw}")
            return bool(raw)
        return kind(raw)
    except ValueError as exc:
        raise FormatError(f"{where}: {exc}") from exc


def _write(data: bytearray, base: int, layout: dict[str, BitField], fields: dict) -> None:
    for name, bitfield in layout.items():
        bitfield.put(data, base, _to_wire(fields[name]))


def _read(data: bytes, base: int, layout: dict[str, BitField],
          kinds: list[tuple[str, type]], label: str) -> dict:
    values = {}
    for name, kind in kinds:
        bitfield = layout[name]
        where = f"{label} {name} (byte {base + bitfield.offset})"
        values[name] = _from_wire(kind, bitfield.get(data, base), where)
    return values


def _read_name(data: bytes, offset: int) -> VoiceName:
    try:
        return VoiceName.from_bytes(data[offset:offset + NAME_LENGTH])
    except ValueError as exc:
        raise FormatError(f"name (byte {offset}): {exc}") from exc


def _check_buffer(data: bytes, size: int, what: str) -> None:
    if len(data) != size:
        raise FormatError(f"{what} must be {size} bytes, got {len(data)}")
    for offset, b in enumerate(data):
        if b & 0x80:
            raise FormatError(f"{what} byte {offset} is not 7-bit: 0x{b:02X}")


# ---------------------------------------------------------------------------
# Packed (128 bytes)
# ---------------------------------------------------------------------------

def pack_voice(voice: Voice) -> bytes:
    data = bytearray(PACKED_VOICE_SIZE)
    for index, op in enumerate(reversed(voice.operators())):
        _write(data, index * PACKED_OPERATOR_SIZE, _OPERATOR_PACKED, _operator_fields(op))
    _write(data, PACKED_GLOBAL_OFFSET, _VOICE_PACKED, _voice_fields(voice))
    data[PACKED_NAME_OFFSET:] = voice.name.to_bytes()
    return bytes(data)


def unpack_voice(data: bytes) -> Voice:
    """Decode a 128-byte packed voice.  Bits outside any field are ignored."""
    data = bytes(data)
    _check_buffer(data, PACKED_VOICE_SIZE, "packed voice")
    ops = [
        _build_operator(_read(data, index * PACKED_OPERATOR_SIZE, _OPERATOR_PACKED,
                              _OPERATOR_FIELDS, f"OP{OPERATOR_COUNT - index}"))
        for index in range(OPERATOR_COUNT)
    ]
    fields = _read(data, PACKED_GLOBAL_OFFSET, _VOICE_PACKED, _VOICE_FIELDS, "voice")
    return _build_voice(ops, fields, _read_name(data, PACKED_NAME_OFFSET))


# ---------------------------------------------------------------------------
# Unpacked (155 bytes)
# ---------------------------------------------------------------------------

def voice_to_bytes(voice: Voice) -> bytes:
    data = bytearray(UNPACKED_VOICE_SIZE)
    for index, op in enumerate(reversed(voice.operators())):
        _write(data, index * UNPACKED_OPERATOR_SIZE, _OPERATOR_UNPACKED, _operator_fields(op))
    _write(data, UNPACKED_GLOBAL_OFFSET, _VOICE_UNPACKED, _voice_fields(voice))
    data[UNPACKED_NAME_OFFSET:] = voice.name.to_bytes()
    return bytes(data)


def voice_from_bytes(data: bytes) -> Voice:
    data = bytes(data)
    _check_buffer(data, UNPACKED_VOICE_SIZE, "unpacked voice")
    ops = [
        _build_operator(_read(data, index * UNPACKED_OPERATOR_SIZE, _OPERATOR_UNPACKED,
                              _OPERATOR_FIELDS, f"OP{OPERATOR_COUNT - index}"))
        for index in range(OPERATOR_COUNT)
    ]
    fields = _read(data, UNPACKED_GLOBAL_OFFSET, _VOICE_UNPACKED, _VOICE_FIELDS, "voice")
    return _build_voice(ops, fields, _read_name(data, UNPACKED_NAME_OFFSET))


# ---------------------------------------------------------------------------
# Cartridge (32 x 128 bytes)
# ---------------------------------------------------------------------------

def pack_cartridge(cartridge: Cartridge) -> bytes:
    return b"".join(pack_voice(v) for v in cartridge.voices)


def unpack_cartridge(data: bytes) -> Cartridge:
    data = bytes(data)
    if len(data) != CARTRIDGE_SIZE:
        raise FormatError(f"cartridge must be {CARTRIDGE_SIZE} bytes, got {len(data)}")
    voices = []
    for slot in range(VOICE_COUNT):
        start = slot * PACKED_VOICE_SIZE
        try:
            voices.append(unpack_voice(data[start:start + PACKED_VOICE_SIZE]))
        except FormatError as exc:
            raise FormatError(str(exc), slot=slot) from exc
    return Cartridge(voices)

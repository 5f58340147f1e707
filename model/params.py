from __future__ import annotations
from dataclasses import dataclass
from model.ranged import Bound, Policy, RangedValue


@dataclass(frozen=True)
class ParamDef:
    name: str
    description: str
    min_val: int
    max_val: int
    wire_bias: int = 0     # added to the logical value when writing SysEx
    value_labels: dict[int, str] | None = None

    @property
    def bound(self) -> Bound:
        return Bound(self.min_val, self.max_val)

    @property
    def wire_bound(self) -> Bound:
        return Bound(self.min_val + self.wire_bias, self.max_val + self.wire_bias)

    def to_wire(self, value: int) -> int:
        return value + self.wire_bias

    def from_wire(self, byte: int) -> int:
        return byte - self.wire_bias

    def label(self, value: int) -> str:
        if self.value_labels and value in self.value_labels:
            return self.value_labels[value]
        return str(value)


# ---------------------------------------------------------------------------
# Parameter definitions
# ---------------------------------------------------------------------------

_PARAMS: list[ParamDef] = [
    # Envelope generators (operator and pitch)
    ParamDef("rate", "Envelope rate", 0, 99),
    ParamDef("level", "Envelope level", 0, 99),

    # Operator
    ParamDef("output_level", "Operator output level", 0, 99),
    ParamDef("breakpoint", "Keyboard level scaling break point (A-1..C8)", 0, 99),
    ParamDef("scaling_depth", "Keyboard level scaling depth", 0, 99),
    ParamDef("scaling_curve", "Keyboard level scaling curve", 0, 3,
             value_labels={0: "-LIN", 1: "-EXP", 2: "+EXP", 3: "+LIN"}),
    ParamDef("rate_scaling", "Keyboard rate scaling", 0, 7),
    ParamDef("amp_mod_sensitivity", "Amplitude modulation sensitivity", 0, 3),
    ParamDef("key_velocity_sensitivity", "Key velocity sensitivity", 0, 7),
    ParamDef("oscillator_mode", "Oscillator mode", 0, 1,
             value_labels={0: "Ratio", 1: "Fixed"}),
    ParamDef("coarse", "Oscillator frequency coarse", 0, 31),
    ParamDef("fine", "Oscillator frequency fine", 0, 99),
    ParamDef("detune", "Oscillator detune", -7, 7, wire_bias=7),

    # Voice
    ParamDef("algorithm", "Algorithm number", 1, 32, wire_bias=-1),
    ParamDef("feedback", "Operator feedback", 0, 7),
    ParamDef("transpose", "Key transpose in semitones (0 = C3)", -24, 24, wire_bias=24),

    # LFO
    ParamDef("lfo_speed", "LFO speed", 0, 99),
    ParamDef("lfo_delay", "LFO delay", 0, 99),
    ParamDef("mod_depth", "LFO pitch/amplitude modulation depth", 0, 99),
    ParamDef("lfo_waveform", "LFO waveform", 0, 5,
             value_labels={0: "Triangle", 1: "Saw Down", 2: "Saw Up",
                           3: "Square", 4: "Sine", 5: "Sample & Hold"}),
    ParamDef("pitch_mod_sensitivity", "Pitch modulation sensitivity", 0, 7),
]


class ParamMap:
    def __init__(self) -> None:
        self._params = {p.name: p for p in _PARAMS}

    def get(self, name: str) -> ParamDef | None:
        return self._params.get(name)

    def list_all(self) -> list[ParamDef]:
        return list(self._params.values())

    def names(self) -> list[str]:
        return list(self._params.keys())


CATALOG = ParamMap()


# ---------------------------------------------------------------------------
# One value type per parameter kind
# ---------------------------------------------------------------------------

class CatalogValue(RangedValue):
    """RangedValue whose bound and wire transform come from a catalog entry."""

    PARAM: ParamDef

    def __init_subclass__(cls, param: str | None = None, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if param is not None:
            cls.PARAM = CATALOG.get(param)
            cls.BOUND = cls.PARAM.bound
            cls.NAME = cls.PARAM.name

    def to_wire(self) -> int:
        return self.PARAM.to_wire(self.value)

    @classmethod
    def from_wire(cls, byte: int, policy: Policy = Policy.REJECT):
        return cls(cls.PARAM.from_wire(byte), policy)


class Rate(CatalogValue, param="rate"):
    pass


class Level(CatalogValue, param="level"):
    pass


class OutputLevel(CatalogValue, param="output_level"):
    pass


_NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


class Breakpoint(CatalogValue, param="breakpoint"):
    """0 is A-1 (MIDI note 21); 39 is C3, 99 is C8."""

    def note_name(self) -> str:
        note = self.value + 21
        return f"{_NOTE_NAMES[note % 12]}{note // 12 - 2}"


class ScalingDepth(CatalogValue, param="scaling_depth"):
    pass


class RateScaling(CatalogValue, param="rate_scaling"):
    pass


class AmpModSensitivity(CatalogValue, param="amp_mod_sensitivity"):
    pass


class KeyVelocitySensitivity(CatalogValue, param="key_velocity_sensitivity"):
    pass


class Coarse(CatalogValue, param="coarse"):
    pass


class Fine(CatalogValue, param="fine"):
    pass


class Detune(CatalogValue, param="detune"):
    """-7..+7, sent as 0..14."""


class Algorithm(CatalogValue, param="algorithm"):
    """1..32, sent as 0..31."""


class Feedback(CatalogValue, param="feedback"):
    pass


class Transpose(CatalogValue, param="transpose"):
    """Semitones relative to C3, sent as 0..48 (24 = C3)."""


class LfoSpeed(CatalogValue, param="lfo_speed"):
    pass


class LfoDelay(CatalogValue, param="lfo_delay"):
    pass


class ModDepth(CatalogValue, param="mod_depth"):
    pass


class PitchModSensitivity(CatalogValue, param="pitch_mod_sensitivity"):
    pass

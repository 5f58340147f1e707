from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum
from model.envelope import Envelope
from model.params import (
    CATALOG, AmpModSensitivity, Breakpoint, Coarse, Detune, Fine,
    KeyVelocitySensitivity, OutputLevel, RateScaling, ScalingDepth,
)
from model.ranged import check_field_types


class ScalingCurve(IntEnum):
    """Keyboard level scaling curve; the values are the SysEx codes."""
    NEG_LIN = 0
    NEG_EXP = 1
    POS_EXP = 2
    POS_LIN = 3

    def __str__(self) -> str:
        return CATALOG.get("scaling_curve").label(self.value)


class OperatorMode(IntEnum):
    RATIO = 0
    FIXED = 1

    def __str__(self) -> str:
        return CATALOG.get("oscillator_mode").label(self.value)


# Yamaha C3 (MIDI note 60) on the 0..99 break point scale that starts at A-1.
BREAKPOINT_C3 = 60 - 21


@dataclass(frozen=True)
class KeyboardLevelScaling:
    breakpoint: Breakpoint = field(default_factory=lambda: Breakpoint(BREAKPOINT_C3))
    left_depth: ScalingDepth = field(default_factory=lambda: ScalingDepth(0))
    right_depth: ScalingDepth = field(default_factory=lambda: ScalingDepth(0))
    left_curve: ScalingCurve = ScalingCurve.NEG_LIN
    right_curve: ScalingCurve = ScalingCurve.NEG_LIN

    def __post_init__(self) -> None:
        check_field_types(self)

    def replace(self, **changes) -> KeyboardLevelScaling:
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        return (f"breakpoint = {self.breakpoint.note_name()}, "
                f"left depth = {self.left_depth.value}, right depth = {self.right_depth.value}, "
                f"left curve = {self.left_curve!s}, right curve = {self.right_curve!s}")

    def to_dict(self) -> dict:
        return {
            "breakpoint": self.breakpoint.value,
            "left_depth": self.left_depth.value,
            "right_depth": self.right_depth.value,
            "left_curve": str(self.left_curve),
            "right_curve": str(self.right_curve),
        }


def _init_eg() -> Envelope:
    return Envelope.from_values((99, 99, 99, 99), (99, 99, 99, 0))


@dataclass(frozen=True)
class Operator:
    """One of the six FM operators.  Defaults are the init-voice values."""
    eg: Envelope = field(default_factory=_init_eg)
    kbd_level_scaling: KeyboardLevelScaling = field(default_factory=KeyboardLevelScaling)
    kbd_rate_scaling: RateScaling = field(default_factory=lambda: RateScaling(0))
    amp_mod_sens: AmpModSensitivity = field(default_factory=lambda: AmpModSensitivity(0))
    key_vel_sens: KeyVelocitySensitivity = field(
        default_factory=lambda: KeyVelocitySensitivity(0))
    output_level: OutputLevel = field(default_factory=lambda: OutputLevel(0))
    mode: OperatorMode = OperatorMode.RATIO
    coarse: Coarse = field(default_factory=lambda: Coarse(1))
    fine: Fine = field(default_factory=lambda: Fine(0))
    detune: Detune = field(default_factory=lambda: Detune(0))

    def __post_init__(self) -> None:
        check_field_types(self)

    def replace(self, **changes) -> Operator:
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        return (
            f"EG: {self.eg}\n"
            f"Kbd level scaling: {self.kbd_level_scaling}, "
            f"Kbd rate scaling: {self.kbd_rate_scaling.value}\n"
            f"Amp mod sens = {self.amp_mod_sens.value}, Key vel sens = {self.key_vel_sens.value}\n"
            f"Level = {self.output_level.value}, Mode = {self.mode!s}\n"
            f"Coarse = {self.coarse.value}, Fine = {self.fine.value}, Detune = {self.detune.value}"
        )

    def to_dict(self) -> dict:
        return {
            "eg": self.eg.to_dict(),
            "kbd_level_scaling": self.kbd_level_scaling.to_dict(),
            "kbd_rate_scaling": self.kbd_rate_scaling.value,
            "amp_mod_sens": self.amp_mod_sens.value,
            "key_vel_sens": self.key_vel_sens.value,
            "output_level": self.output_level.value,
            "mode": self.mode.name.lower(),
            "coarse": self.coarse.value,
            "fine": self.fine.value,
            "detune": self.detune.value,
        }

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum
import numpy as np
from model.params import CATALOG, LfoDelay, LfoSpeed, ModDepth, PitchModSensitivity
from model.ranged import check_field_types, default_rng


class LfoWaveform(IntEnum):
    TRIANGLE = 0
    SAW_DOWN = 1
    SAW_UP = 2
    SQUARE = 3
    SINE = 4
    SAMPLE_AND_HOLD = 5


@dataclass(frozen=True)
class Lfo:
    speed: LfoSpeed = field(default_factory=lambda: LfoSpeed(35))
    delay: LfoDelay = field(default_factory=lambda: LfoDelay(0))
    pmd: ModDepth = field(default_factory=lambda: ModDepth(0))
    amd: ModDepth = field(default_factory=lambda: ModDepth(0))
    sync: bool = True
    waveform: LfoWaveform = LfoWaveform.TRIANGLE
    pitch_mod_sens: PitchModSensitivity = field(
        default_factory=lambda: PitchModSensitivity(3))

    def __post_init__(self) -> None:
        check_field_types(self)

    @classmethod
    def random(cls, rng: np.random.Generator | None = None) -> Lfo:
        rng = rng or default_rng()
        return cls(
            speed=LfoSpeed.random(rng),
            delay=LfoDelay.random(rng),
            pmd=ModDepth.random(rng),
            amd=ModDepth.random(rng),
            sync=bool(rng.integers(0, 2)),
            waveform=LfoWaveform(int(rng.integers(0, len(LfoWaveform)))),
            pitch_mod_sens=PitchModSensitivity.random(rng),
        )

    def replace(self, **changes) -> Lfo:
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        wave = CATALOG.get("lfo_waveform").label(self.waveform.value)
        return (f"speed = {self.speed.value}, delay = {self.delay.value}, "
                f"PMD = {self.pmd.value}, AMD = {self.amd.value}, "
                f"sync = {'on' if self.sync else 'off'}, wave = {wave}, "
                f"pitch mod sens = {self.pitch_mod_sens.value}")

    def to_dict(self) -> dict:
        return {
            "speed": self.speed.value,
            "delay": self.delay.value,
            "pmd": self.pmd.value,
            "amd": self.amd.value,
            "sync": self.sync,
            "waveform": self.waveform.name.lower(),
            "pitch_mod_sens": self.pitch_mod_sens.value,
        }

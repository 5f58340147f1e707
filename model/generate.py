"""Default and randomised voice/cartridge construction.

Fully random voices are rarely musical, so randomisation is selective:
a ``RandomScope`` names the parameter groups that are redrawn and every
other parameter keeps the value of the base voice.
"""
from __future__ import annotations
from enum import Enum, Flag, auto
import numpy as np
from model.cartridge import VOICE_COUNT, Cartridge
from model.envelope import Envelope
from model.lfo import Lfo
from model.operator import KeyboardLevelScaling, OperatorMode, ScalingCurve
from model.params import (
    Algorithm, AmpModSensitivity, Breakpoint, Coarse, Detune, Feedback, Fine,
    KeyVelocitySensitivity, Level, OutputLevel, Rate, RateScaling, ScalingDepth, Transpose,
)
from model.presets import default_voice
from model.ranged import Bound, default_rng
from model.voice import Voice, VoiceName


class RandomScope(Flag):
    ENVELOPES = auto()
    LEVELS = auto()
    FREQUENCIES = auto()
    SCALING = auto()
    PITCH_EG = auto()
    LFO = auto()
    GLOBAL = auto()
    NAME = auto()
    METRIC = ENVELOPES | LEVELS | FREQUENCIES | SCALING | PITCH_EG | LFO | GLOBAL
    ALL = METRIC | NAME

    @classmethod
    def parse(cls, text: str) -> RandomScope:
        """'envelopes', 'metric', 'envelopes,lfo', ... -> RandomScope."""
        scope = cls(0)
        for part in text.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                scope |= cls[part.upper()]
            except KeyError:
                raise ValueError(f"Unknown random scope '{part}'") from None
        return scope


class CartridgeMode(Enum):
    REPEAT = "repeat"
    VARY = "vary"


# Operators that are carriers, per algorithm number.
CARRIERS: dict[int, tuple[int, ...]] = {
    1: (1, 3), 2: (1, 3), 3: (1, 4), 4: (1, 4),
    5: (1, 3, 5), 6: (1, 3, 5), 7: (1, 3), 8: (1, 3),
    9: (1, 3), 10: (1, 4), 11: (1, 4), 12: (1, 3),
    13: (1, 3), 14: (1, 3), 15: (1, 3), 16: (1,),
    17: (1,), 18: (1,), 19: (1, 4, 5), 20: (1, 2, 4),
    21: (1, 2, 4, 5), 22: (1, 3, 4, 5), 23: (1, 2, 4, 5), 24: (1, 2, 3, 4, 5),
    25: (1, 2, 3, 4, 5), 26: (1, 2, 4), 27: (1, 2, 4), 28: (1, 3, 6),
    29: (1, 2, 3, 5), 30: (1, 2, 3, 6), 31: (1, 2, 3, 4, 5), 32: (1, 2, 3, 4, 5, 6),
}

CARRIER_LEVELS = Bound(90, 99)
COARSE_RATIOS = Bound(0, 15)
PITCH_EG_LEVELS = Bound(35, 65)


def _random_scaling(rng: np.random.Generator) -> KeyboardLevelScaling:
    return KeyboardLevelScaling(
        breakpoint=Breakpoint.random(rng),
        left_depth=ScalingDepth.random(rng),
        right_depth=ScalingDepth.random(rng),
        left_curve=ScalingCurve(int(rng.integers(0, len(ScalingCurve)))),
        right_curve=ScalingCurve(int(rng.integers(0, len(ScalingCurve)))),
    )


def _random_pitch_eg(rng: np.random.Generator) -> Envelope:
    return Envelope(
        Rate.random(rng), Rate.random(rng), Rate.random(rng), Rate.random(rng),
        *(Level.random_within(PITCH_EG_LEVELS, rng) for _ in range(4)),
    )


def random_voice(scope: RandomScope = RandomScope.ENVELOPES, base: Voice | None = None,
                 rng: np.random.Generator | None = None) -> Voice:
    rng = rng or default_rng()
    voice = base or default_voice()
    algorithm = Algorithm.random(rng) if RandomScope.GLOBAL in scope else voice.algorithm
    carriers = CARRIERS[algorithm.value]

    ops = []
    for number, op in enumerate(voice.operators(), start=1):
        changes = {}
        if RandomScope.ENVELOPES in scope:
            changes["eg"] = Envelope.random(rng)
        if RandomScope.LEVELS in scope:
            # Keep carriers audible; modulators may take any level.
            if number in carriers:
                changes["output_level"] = OutputLevel.random_within(CARRIER_LEVELS, rng)
            else:
                changes["output_level"] = OutputLevel.random(rng)
        if RandomScope.FREQUENCIES in scope:
            changes["mode"] = OperatorMode(int(rng.integers(0, len(OperatorMode))))
            changes["coarse"] = Coarse.random_within(COARSE_RATIOS, rng)
            changes["fine"] = Fine.random(rng)
            changes["detune"] = Detune.random(rng)
        if RandomScope.SCALING in scope:
            changes["kbd_level_scaling"] = _random_scaling(rng)
            changes["kbd_rate_scaling"] = RateScaling.random(rng)
            changes["amp_mod_sens"] = AmpModSensitivity.random(rng)
            changes["key_vel_sens"] = KeyVelocitySensitivity.random(rng)
        ops.append(op.replace(**changes) if changes else op)

    changes = {"algorithm": algorithm}
    if RandomScope.PITCH_EG in scope:
        changes["peg"] = _random_pitch_eg(rng)
    if RandomScope.LFO in scope:
        changes["lfo"] = Lfo.random(rng)
    if RandomScope.GLOBAL in scope:
        changes["feedback"] = Feedback.random(rng)
        changes["osc_sync"] = bool(rng.integers(0, 2))
        changes["transpose"] = Transpose.random(rng)
    if RandomScope.NAME in scope:
        changes["name"] = VoiceName.random(rng)
    return voice.with_operators(ops).replace(**changes)


def cartridge_from(voice: Voice | None = None, mode: CartridgeMode = CartridgeMode.REPEAT,
                   scope: RandomScope = RandomScope.ENVELOPES,
                   rng: np.random.Generator | None = None) -> Cartridge:
    """Fill all 32 slots from one voice.

    REPEAT stores the same voice in every slot.  VARY draws a fresh
    ``random_voice`` per slot, using ``voice`` (or the init voice) as base.
    """
    if mode is CartridgeMode.REPEAT:
        return Cartridge.filled(voice or default_voice())
    rng = rng or default_rng()
    return Cartridge([random_voice(scope, base=voice, rng=rng) for _ in range(VOICE_COUNT)])

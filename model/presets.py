"""Fixed voices: the init voice and the BRASS 1 factory patch."""
from __future__ import annotations
from model.envelope import Envelope
from model.lfo import Lfo, LfoWaveform
from model.operator import BREAKPOINT_C3, KeyboardLevelScaling, Operator, ScalingCurve
from model.params import (
    Algorithm, Breakpoint, Coarse, Detune, Feedback, KeyVelocitySensitivity,
    LfoDelay, LfoSpeed, ModDepth, OutputLevel, PitchModSensitivity, RateScaling,
    ScalingDepth, Transpose,
)
from model.voice import Voice, VoiceName


def default_voice() -> Voice:
    """The synth's INIT VOICE: only OP1 sounds, everything else at rest.

    Values follow Howard Massey, "The Complete DX7", Appendix B.
    """
    rest = Operator()
    return Voice(
        op1=rest.replace(output_level=OutputLevel(99)),
        op2=rest, op3=rest, op4=rest, op5=rest, op6=rest,
        peg=Envelope.from_values((99, 99, 99, 99), (50, 50, 50, 50)),
        algorithm=Algorithm(1),
        feedback=Feedback(0),
        osc_sync=True,
        lfo=Lfo(),
        transpose=Transpose(0),
        name=VoiceName("INIT VOICE"),
    )


def brass1() -> Voice:
    """BRASS 1, the first voice of the ROM1A factory cartridge."""
    scaling = KeyboardLevelScaling(
        breakpoint=Breakpoint(BREAKPOINT_C3),
        left_curve=ScalingCurve.POS_LIN,
        right_curve=ScalingCurve.POS_LIN,
    )
    op = Operator(kbd_level_scaling=scaling, key_vel_sens=KeyVelocitySensitivity(2))

    op6 = op.replace(
        eg=Envelope.from_values((49, 99, 28, 68), (98, 98, 91, 0)),
        kbd_level_scaling=scaling.replace(
            left_depth=ScalingDepth(54),
            right_depth=ScalingDepth(50),
            left_curve=ScalingCurve.NEG_EXP,
            right_curve=ScalingCurve.NEG_EXP,
        ),
        kbd_rate_scaling=RateScaling(4),
        output_level=OutputLevel(82),
    )
    op5 = op.replace(
        eg=Envelope.from_values((77, 36, 41, 71), (99, 98, 98, 0)),
        output_level=OutputLevel(98),
        detune=Detune(1),
    )
    op4 = op.replace(eg=op5.eg, output_level=OutputLevel(99))
    op3 = op.replace(
        eg=Envelope.from_values((77, 76, 82, 71), (99, 98, 98, 0)),
        output_level=OutputLevel(99),
        detune=Detune(-2),
    )
    op2 = op.replace(
        eg=Envelope.from_values((62, 51, 29, 71), (82, 95, 96, 0)),
        kbd_level_scaling=KeyboardLevelScaling(
            breakpoint=Breakpoint(48 - 21),
            right_depth=ScalingDepth(7),
            left_curve=ScalingCurve.POS_LIN,
            right_curve=ScalingCurve.NEG_EXP,
        ),
        key_vel_sens=KeyVelocitySensitivity(0),
        output_level=OutputLevel(86),
        coarse=Coarse(0),
        detune=Detune(7),
    )
    op1 = op.replace(
        eg=Envelope.from_values((72, 76, 99, 71), (99, 88, 96, 0)),
        kbd_level_scaling=scaling.replace(right_depth=ScalingDepth(14)),
        key_vel_sens=KeyVelocitySensitivity(0),
        output_level=OutputLevel(98),
        coarse=Coarse(0),
        detune=Detune(7),
    )
    return Voice(
        op1=op1, op2=op2, op3=op3, op4=op4, op5=op5, op6=op6,
        peg=Envelope.from_values((84, 95, 95, 60), (50, 50, 50, 50)),
        algorithm=Algorithm(22),
        feedback=Feedback(7),
        osc_sync=True,
        lfo=Lfo(
            speed=LfoSpeed(37),
            delay=LfoDelay(0),
            pmd=ModDepth(5),
            amd=ModDepth(0),
            sync=False,
            waveform=LfoWaveform.SINE,
            pitch_mod_sens=PitchModSensitivity(3),
        ),
        transpose=Transpose(0),
        name=VoiceName("BRASS   1 "),
    )

import pytest
from model.lfo import Lfo, LfoWaveform
from model.operator import (
    BREAKPOINT_C3, KeyboardLevelScaling, Operator, OperatorMode, ScalingCurve,
)
from model.params import Breakpoint, Coarse, Detune, LfoSpeed, OutputLevel

def test_scaling_curve_wire_codes():
    assert [int(c) for c in ScalingCurve] == [0, 1, 2, 3]
    assert str(ScalingCurve.NEG_LIN) == "-LIN"
    assert str(ScalingCurve.NEG_EXP) == "-EXP"
    assert str(ScalingCurve.POS_EXP) == "+EXP"
    assert str(ScalingCurve.POS_LIN) == "+LIN"

def test_breakpoint_c3():
    assert BREAKPOINT_C3 == 39
    assert KeyboardLevelScaling().breakpoint == Breakpoint(39)

def test_operator_defaults():
    op = Operator()
    assert op.output_level == OutputLevel(0)
    assert op.coarse == Coarse(1)
    assert op.mode is OperatorMode.RATIO
    assert op.eg.to_dict() == {"rates": [99, 99, 99, 99], "levels": [99, 99, 99, 0]}

def test_operator_field_kinds_are_checked():
    with pytest.raises(TypeError):
        Operator(detune=Coarse(3))
    with pytest.raises(TypeError):
        Operator(output_level=99)
    with pytest.raises(TypeError):
        KeyboardLevelScaling(left_curve=3)

def test_operator_replace():
    op = Operator().replace(detune=Detune(-3), mode=OperatorMode.FIXED)
    assert op.detune == Detune(-3)
    assert op.to_dict()["mode"] == "fixed"
    assert op.to_dict()["detune"] == -3

def test_scaling_to_dict():
    ks = KeyboardLevelScaling(right_curve=ScalingCurve.POS_EXP)
    assert ks.to_dict()["right_curve"] == "+EXP"

def test_lfo_defaults_and_dict():
    lfo = Lfo()
    assert lfo.speed == LfoSpeed(35)
    assert lfo.sync is True
    assert lfo.to_dict()["waveform"] == "triangle"
    assert lfo.replace(waveform=LfoWaveform.SAMPLE_AND_HOLD).to_dict()["waveform"] == "sample_and_hold"

def test_operator_text():
    op = Operator(output_level=OutputLevel(82), detune=Detune(-2), mode=OperatorMode.FIXED)
    text = str(op)
    assert text.splitlines()[0] == "EG: R1=99 L1=99 R2=99 L2=99 R3=99 L3=99 R4=99 L4=0"
    assert "Kbd level scaling: breakpoint = C3, left depth = 0" in text
    assert "Level = 82, Mode = Fixed" in text
    assert text.endswith("Coarse = 1, Fine = 0, Detune = -2")

def test_scaling_text_uses_curve_labels():
    ks = KeyboardLevelScaling(left_curve=ScalingCurve.NEG_EXP, right_curve=ScalingCurve.POS_LIN)
    assert str(ks).endswith("left curve = -EXP, right curve = +LIN")

def test_lfo_text():
    lfo = Lfo(sync=False, waveform=LfoWaveform.SAW_DOWN)
    assert str(lfo) == ("speed = 35, delay = 0, PMD = 0, AMD = 0, sync = off, "
                        "wave = Saw Down, pitch mod sens = 3")

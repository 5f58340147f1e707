import numpy as np
import pytest
from core.errors import RangeError
from model.operator import Operator
from model.params import Algorithm, Level, OutputLevel, Transpose
from model.presets import default_voice
from model.ranged import Policy
from model.voice import NAME_LENGTH, Voice, VoiceName

def test_name_is_padded():
    assert VoiceName("PIANO").text == "PIANO     "
    assert len(VoiceName("").text) == NAME_LENGTH

def test_name_is_truncated():
    assert str(VoiceName("ELECTRIC PIANO")) == "ELECTRIC P"

def test_name_clamp_replaces_invalid_chars():
    assert VoiceName("A\x01B").text == "A B       "

def test_name_reject_raises():
    with pytest.raises(RangeError):
        VoiceName("A\x01B", Policy.REJECT)
    with pytest.raises(RangeError):
        VoiceName("Café", Policy.REJECT)

def test_name_excludes_del():
    assert VoiceName("~").to_bytes() == b"~         "
    assert VoiceName("A\x7fB").text == "A B       "
    with pytest.raises(RangeError):
        VoiceName("\x7f", Policy.REJECT)

def test_name_bytes():
    assert VoiceName("BRASS   1").to_bytes() == b"BRASS   1 "
    assert VoiceName.from_bytes(b"STRINGS  1") == VoiceName("STRINGS  1")

def test_random_name():
    name = VoiceName.random(np.random.default_rng(4))
    assert len(name.text) == NAME_LENGTH

def test_operators_are_ordered_op1_first():
    v = default_voice()
    assert v.operators()[0].output_level == OutputLevel(99)
    assert all(op.output_level == OutputLevel(0) for op in v.operators()[1:])
    assert v.operator(1) is v.op1

def test_with_operator():
    v = default_voice()
    loud = Operator(output_level=OutputLevel(80))
    v2 = v.with_operator(6, loud)
    assert v2.op6 == loud
    assert v.op6 != loud
    with pytest.raises(ValueError):
        v.with_operator(7, loud)
    with pytest.raises(ValueError):
        v.operator(0)

def test_with_operators_requires_six():
    with pytest.raises(ValueError):
        default_voice().with_operators([Operator()] * 5)

def test_voice_field_kinds_are_checked():
    with pytest.raises(TypeError):
        default_voice().replace(algorithm=Level(5))
    with pytest.raises(TypeError):
        default_voice().replace(name="PIANO")

def test_voice_requires_operators():
    with pytest.raises(TypeError):
        Voice()

def test_voice_to_dict():
    d = default_voice().replace(transpose=Transpose(-12), algorithm=Algorithm(5)).to_dict()
    assert d["transpose"] == -12
    assert d["algorithm"] == 5
    assert d["name"] == "INIT VOICE"
    assert len(d["operators"]) == 6
    assert d["peg"]["levels"] == [50, 50, 50, 50]

def test_voice_text():
    lines = str(default_voice().replace(transpose=Transpose(-12))).splitlines()
    assert lines[:3] == ["==========", "INIT VOICE", "=========="]
    assert lines[3].startswith("OP1: EG: R1=99")
    assert sum(line.startswith("OP") for line in lines) == 6
    assert "PEG: R1=99 L1=50 R2=99 L2=50 R3=99 L3=50 R4=99 L4=50" in lines
    assert "ALG: 1, feedback = 0, osc sync = on" in lines
    assert lines[-1] == "Transpose: -12"

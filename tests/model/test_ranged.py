import copy
import dataclasses
import pickle
import threading
import numpy as np
import pytest
from core.errors import ProgrammingError, RangeError
from model.cartridge import Cartridge
from model.params import Coarse, Detune, Level, Rate, Transpose
from model.presets import brass1
from model.ranged import Bound, Policy, RangedValue, default_rng

def test_bound_rejects_inverted_range():
    with pytest.raises(ProgrammingError):
        Bound(5, 4)

def test_bound_contains_and_clamp():
    b = Bound(-7, 7)
    assert b.contains(-7) and b.contains(7)
    assert not b.contains(8)
    assert b.clamp(100) == 7
    assert b.clamp(-100) == -7
    assert b.contains_bound(Bound(-1, 1))
    assert not b.contains_bound(Bound(0, 8))
    assert str(b) == "-7..7"

def test_clamp_policy_saturates():
    assert Detune(10).value == 7
    assert Detune(-10).value == -7
    assert Rate(150).value == 99

def test_reject_policy_raises_with_details():
    with pytest.raises(RangeError) as exc:
        Detune(8, Policy.REJECT)
    assert exc.value.name == "detune"
    assert exc.value.value == 8
    assert exc.value.bound == Bound(-7, 7)
    assert "detune must be -7-7, got 8" in str(exc.value)

def test_range_error_is_a_value_error():
    with pytest.raises(ValueError):
        Transpose(25, Policy.REJECT)

def test_generic_value_with_explicit_bound():
    v = RangedValue(12, bound=Bound(0, 10))
    assert v.value == 10
    assert v.bound == Bound(0, 10)

def test_kinds_never_compare_equal():
    assert Detune(3) != Coarse(3)
    assert Rate(50) != Level(50)
    assert Detune(3) == Detune(3)
    assert hash(Detune(3)) == hash(Detune(3))

def test_ordering_within_kind_only():
    assert Rate(10) < Rate(20)
    assert Rate(20) >= Rate(20)
    with pytest.raises(TypeError):
        Rate(10) < Level(20)

def test_values_are_immutable():
    r = Rate(10)
    with pytest.raises(AttributeError):
        r._value = 20
    with pytest.raises(AttributeError):
        r.value = 20

def test_random_stays_in_bound():
    rng = np.random.default_rng(0)
    values = {Detune.random(rng).value for _ in range(500)}
    assert values == set(range(-7, 8))

def test_random_within_sub_bound():
    rng = np.random.default_rng(1)
    for _ in range(200):
        assert 90 <= Level.random_within(Bound(90, 99), rng).value <= 99

def test_random_within_outside_bound_is_programming_error():
    with pytest.raises(ProgrammingError):
        Level.random_within(Bound(90, 100))

def test_generic_random_keeps_explicit_bound():
    v = RangedValue.random(np.random.default_rng(2), bound=Bound(3, 5))
    assert v.bound == Bound(3, 5)
    assert 3 <= v.value <= 5

def test_default_rng_is_per_thread():
    seen = []
    t = threading.Thread(target=lambda: seen.append(default_rng()))
    t.start()
    t.join()
    assert default_rng() is default_rng()
    assert seen[0] is not default_rng()

@pytest.mark.parametrize("bound", [Bound(0, 99), Bound(-7, 7), Bound(1, 32), Bound(5, 5)])
def test_clamp_law(bound):
    for x in range(bound.lo - 20, bound.hi + 21):
        v = RangedValue(x, bound=bound).value
        if x < bound.lo:
            assert v == bound.lo
        elif x > bound.hi:
            assert v == bound.hi
        else:
            assert v == x

def test_non_integer_input_is_type_error():
    with pytest.raises(TypeError):
        Rate(98.9, Policy.REJECT)
    with pytest.raises(TypeError):
        Rate(98.0)
    with pytest.raises(TypeError):
        Level("50")
    assert Rate(np.int64(42)) == Rate(42)

def test_values_copy_and_pickle():
    assert copy.copy(Rate(5)) == Rate(5)
    assert copy.deepcopy(Detune(-3)) == Detune(-3)
    assert pickle.loads(pickle.dumps(Transpose(12))) == Transpose(12)
    v = RangedValue(4, bound=Bound(3, 5))
    assert pickle.loads(pickle.dumps(v)).bound == Bound(3, 5)

def test_voice_and_cartridge_copy_and_pickle():
    voice = brass1()
    assert copy.copy(voice) == voice
    assert copy.deepcopy(voice) == voice
    assert pickle.loads(pickle.dumps(voice)) == voice
    cart = Cartridge.filled(voice)
    assert pickle.loads(pickle.dumps(cart)) == cart
    assert dataclasses.asdict(voice)["op1"]["output_level"] == voice.op1.output_level

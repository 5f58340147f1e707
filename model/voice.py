from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
import numpy as np
from core.errors import RangeError
from model.envelope import Envelope
from model.lfo import Lfo
from model.operator import Operator
from model.params import Algorithm, Feedback, Transpose
from model.ranged import Bound, Policy, check_field_types, default_rng

OPERATOR_COUNT = 6
NAME_LENGTH = 10
# Printable ASCII; DEL (0x7F) is not a name character.
NAME_CHARS = Bound(0x20, 0x7E)


@dataclass(frozen=True)
class VoiceName:
    """Exactly ten characters, right-padded with spaces or truncated."""
    text: str = "INIT VOICE"

    def __init__(self, text: str = "INIT VOICE", policy: Policy = Policy.CLAMP) -> None:
        chars = []
        for c in text[:NAME_LENGTH]:
            if not NAME_CHARS.contains(ord(c)):
                if policy is Policy.REJECT:
                    raise RangeError("voice_name", ord(c), NAME_CHARS)
                c = " "
            chars.append(c)
        object.__setattr__(self, "text", "".join(chars).ljust(NAME_LENGTH))

    @classmethod
    def random(cls, rng: np.random.Generator | None = None) -> VoiceName:
        rng = rng or default_rng()
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 "
        return cls("".join(alphabet[int(i)] for i in rng.integers(0, len(alphabet), NAME_LENGTH)))

    def to_bytes(self) -> bytes:
        return self.text.encode("ascii")

    @classmethod
    def from_bytes(cls, data: bytes, policy: Policy = Policy.REJECT) -> VoiceName:
        return cls("".join(chr(b) for b in data), policy)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Voice:
    """A complete patch.  Operators are modelled OP1..OP6; the reversed wire
    order is handled by ``midi.packing``."""
    op1: Operator
    op2: Operator
    op3: Operator
    op4: Operator
    op5: Operator
    op6: Operator
    peg: Envelope = field(
        default_factory=lambda: Envelope.from_values((99, 99, 99, 99), (50, 50, 50, 50)))
    algorithm: Algorithm = field(default_factory=lambda: Algorithm(1))
    feedback: Feedback = field(default_factory=lambda: Feedback(0))
    osc_sync: bool = True
    lfo: Lfo = field(default_factory=Lfo)
    transpose: Transpose = field(default_factory=lambda: Transpose(0))
    name: VoiceName = field(default_factory=VoiceName)

    def __post_init__(self) -> None:
        check_field_types(self)

    def operators(self) -> tuple[Operator, ...]:
        """OP1..OP6 in order."""
        return (self.op1, self.op2, self.op3, self.op4, self.op5, self.op6)

    def operator(self, number: int) -> Operator:
        if not (1 <= number <= OPERATOR_COUNT):
            raise ValueError(f"Operator number must be 1-{OPERATOR_COUNT}, got {number}")
        return getattr(self, f"op{number}")

    def with_operator(self, number: int, op: Operator) -> Voice:
        if not (1 <= number <= OPERATOR_COUNT):
            raise ValueError(f"Operator number must be 1-{OPERATOR_COUNT}, got {number}")
        return dataclasses.replace(self, **{f"op{number}": op})

    def with_operators(self, ops) -> Voice:
        ops = tuple(ops)
        if len(ops) != OPERATOR_COUNT:
            raise ValueError(f"Expected {OPERATOR_COUNT} operators, got {len(ops)}")
        return dataclasses.replace(
            self, **{f"op{n}": op for n, op in enumerate(ops, start=1)})

    def replace(self, **changes) -> Voice:
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        lines = ["=" * NAME_LENGTH, str(self.name), "=" * NAME_LENGTH]
        lines += [f"OP{n}: {op}" for n, op in enumerate(self.operators(), start=1)]
        lines += [
            f"PEG: {self.peg}",
            f"ALG: {self.algorithm.value}, feedback = {self.feedback.value}, "
            f"osc sync = {'on' if self.osc_sync else 'off'}",
            f"LFO: {self.lfo}",
            f"Transpose: {self.transpose.value:+d}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "name": str(self.name),
            "algorithm": self.algorithm.value,
            "feedback": self.feedback.value,
            "osc_sync": self.osc_sync,
            "transpose": self.transpose.value,
            "peg": self.peg.to_dict(),
            "lfo": self.lfo.to_dict(),
            "operators": [op.to_dict() for op in self.operators()],
        }

from __future__ import annotations
import dataclasses
from dataclasses import dataclass
import numpy as np
from model.params import Level, Rate
from model.ranged import Policy, check_field_types


@dataclass(frozen=True)
class Envelope:
    """Four rates and four levels, used per operator and once for pitch."""
    rate1: Rate
    rate2: Rate
    rate3: Rate
    rate4: Rate
    level1: Level
    level2: Level
    level3: Level
    level4: Level

    def __post_init__(self) -> None:
        check_field_types(self)

    @classmethod
    def from_values(cls, rates: tuple[int, int, int, int],
                    levels: tuple[int, int, int, int],
                    policy: Policy = Policy.CLAMP) -> Envelope:
        r1, r2, r3, r4 = rates
        l1, l2, l3, l4 = levels
        return cls(
            Rate(r1, policy), Rate(r2, policy), Rate(r3, policy), Rate(r4, policy),
            Level(l1, policy), Level(l2, policy), Level(l3, policy), Level(l4, policy),
        )

    @classmethod
    def adsr(cls, attack: int, decay: int, sustain: int, release: int) -> Envelope:
        """ADSR-style envelope: L1=L2=99, L4=0 and R2=99.

        R1 is then the attack time, R3 the decay, L3 the sustain level and
        R4 the release.
        """
        return cls.from_values((attack, 99, decay, release), (99, 99, sustain, 0))

    @classmethod
    def random(cls, rng: np.random.Generator | None = None) -> Envelope:
        return cls(
            Rate.random(rng), Rate.random(rng), Rate.random(rng), Rate.random(rng),
            Level.random(rng), Level.random(rng), Level.random(rng), Level.random(rng),
        )

    def rates(self) -> tuple[Rate, Rate, Rate, Rate]:
        return (self.rate1, self.rate2, self.rate3, self.rate4)

    def levels(self) -> tuple[Level, Level, Level, Level]:
        return (self.level1, self.level2, self.level3, self.level4)

    def replace(self, **changes) -> Envelope:
        return dataclasses.replace(self, **changes)

    def __str__(self) -> str:
        return " ".join(
            f"R{n}={r.value} L{n}={lv.value}"
            for n, (r, lv) in enumerate(zip(self.rates(), self.levels()), start=1)
        )

    def to_dict(self) -> dict:
        return {
            "rates": [r.value for r in self.rates()],
            "levels": [lv.value for lv in self.levels()],
        }

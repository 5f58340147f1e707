from __future__ import annotations
import json
from pathlib import Path
import numpy as np
from model.generate import CartridgeMode, RandomScope
from model.ranged import Policy

_DEFAULTS = {
    "midi_channel": 1,
    "range_policy": "clamp",
    "single_voice_format": "unpacked",
    "cartridge_mode": "vary",
    "random_scope": "envelopes",
    "random_seed": None,
}


class AppConfig:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "dxpatch" / "config.json"
        self.midi_channel: int = _DEFAULTS["midi_channel"]
        self.range_policy: str = _DEFAULTS["range_policy"]
        self.single_voice_format: str = _DEFAULTS["single_voice_format"]
        self.cartridge_mode: str = _DEFAULTS["cartridge_mode"]
        self.random_scope: str = _DEFAULTS["random_scope"]
        self.random_seed: int | None = _DEFAULTS["random_seed"]
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for key in _DEFAULTS:
                if key in data:
                    setattr(self, key, data[key])
        except (json.JSONDecodeError, OSError):
            pass

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _DEFAULTS}
        self._path.write_text(json.dumps(data, indent=2))

    # -- typed accessors --

    def policy(self) -> Policy:
        return Policy(self.range_policy)

    def scope(self) -> RandomScope:
        return RandomScope.parse(self.random_scope)

    def mode(self) -> CartridgeMode:
        return CartridgeMode(self.cartridge_mode)

    @property
    def packed_single_voice(self) -> bool:
        return self.single_voice_format == "packed"

    def rng(self) -> np.random.Generator:
        return np.random.default_rng(self.random_seed)

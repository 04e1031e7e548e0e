from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from .constants import SAVE_KEY

logger = logging.getLogger(__name__)


# ---- Record ----

@dataclass
class UpgradeStats:
    maxTimeLevel: int = 0
    coinGainLevel: int = 0
    penaltyLevel: int = 0


@dataclass
class Inventory:
    revive: int = 0
    headstart: int = 0
    emergency: int = 0


@dataclass
class SaveData:
    coins: int = 0
    maxReachedLevel: int = 1
    upgrades: UpgradeStats = field(default_factory=UpgradeStats)
    inventory: Inventory = field(default_factory=Inventory)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SaveData":
        def _ints(section: Any, target: Any) -> None:
            if not isinstance(section, dict):
                return
            for key in asdict(target):
                if key in section:
                    setattr(target, key, max(0, int(section[key])))

        data = cls()
        data.coins = max(0, int(raw.get("coins", data.coins)))
        data.maxReachedLevel = max(1, int(raw.get("maxReachedLevel", data.maxReachedLevel)))
        _ints(raw.get("upgrades"), data.upgrades)
        _ints(raw.get("inventory"), data.inventory)
        for kind, spec in UPGRADE_CONFIG.items():
            value = getattr(data.upgrades, kind)
            setattr(data.upgrades, kind, min(value, spec.max_level))
        return data


def serialize_save(data: SaveData) -> str:
    return json.dumps(data.to_dict(), separators=(",", ":"))


def deserialize_save(raw: Optional[str]) -> SaveData:
    if not raw:
        return SaveData()
    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("save record is not an object")
        return SaveData.from_dict(parsed)
    except (TypeError, ValueError, OverflowError) as exc:
        logger.warning("discarding corrupt save data: %s", exc)
        return SaveData()


# ---- Upgrades ----

@dataclass(frozen=True)
class UpgradeSpec:
    base_cost: int
    cost_scale: float
    base_value: float
    step: float
    max_level: int

    def cost(self, level: int) -> int:
        if level >= self.max_level:
            return -1
        return int(math.floor(self.base_cost * self.cost_scale ** level))

    def value(self, level: int) -> float:
        return self.base_value + level * self.step


UPGRADE_CONFIG: Dict[str, UpgradeSpec] = {
    "maxTimeLevel": UpgradeSpec(100, 1.5, 60, 10, 10),
    "coinGainLevel": UpgradeSpec(150, 2.0, 1.0, 0.2, 5),
    # 10s penalty shrinking to 5s
    "penaltyLevel": UpgradeSpec(200, 1.8, 10, -1, 5),
}


# ---- Key-value backends ----

class MemoryKV:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileKV:
    def __init__(self, path: str) -> None:
        self.path = path

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable save file %s: %s", self.path, exc)
            return {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)


# ---- Store ----

class SaveStore:
    def __init__(self, kv=None, key: str = SAVE_KEY) -> None:
        self.kv = kv if kv is not None else MemoryKV()
        self.key = key
        self.data = SaveData()
        self.load()

    def load(self) -> None:
        self.data = deserialize_save(self.kv.get(self.key))

    def save(self) -> None:
        self.kv.set(self.key, serialize_save(self.data))

    @property
    def coins(self) -> int:
        return self.data.coins

    @property
    def max_reached_level(self) -> int:
        return self.data.maxReachedLevel

    @property
    def upgrades(self) -> UpgradeStats:
        return self.data.upgrades

    @property
    def inventory(self) -> Inventory:
        return self.data.inventory

    def add_coins(self, amount: int) -> None:
        self.data.coins += int(amount)
        self.save()

    def spend_coins(self, amount: int) -> bool:
        if self.data.coins >= amount:
            self.data.coins -= int(amount)
            self.save()
            return True
        return False

    def update_max_level(self, level: int) -> bool:
        if level > self.data.maxReachedLevel:
            self.data.maxReachedLevel = int(level)
            self.save()
            return True
        return False

    # ---- Upgrades ----

    def get_upgrade_cost(self, kind: str) -> int:
        return UPGRADE_CONFIG[kind].cost(getattr(self.data.upgrades, kind))

    def buy_upgrade(self, kind: str) -> bool:
        cost = self.get_upgrade_cost(kind)
        if cost < 0:
            return False
        if not self.spend_coins(cost):
            return False
        setattr(self.data.upgrades, kind, getattr(self.data.upgrades, kind) + 1)
        self.save()
        return True

    def get_initial_time(self) -> float:
        return float(UPGRADE_CONFIG["maxTimeLevel"].value(self.data.upgrades.maxTimeLevel))

    def get_coin_multiplier(self) -> float:
        return float(UPGRADE_CONFIG["coinGainLevel"].value(self.data.upgrades.coinGainLevel))

    def get_penalty_time(self) -> float:
        return float(UPGRADE_CONFIG["penaltyLevel"].value(self.data.upgrades.penaltyLevel))

    # ---- Inventory ----

    def add_item(self, name: str, count: int = 1) -> None:
        setattr(self.data.inventory, name, getattr(self.data.inventory, name) + int(count))
        self.save()

    def use_item(self, name: str) -> bool:
        have = getattr(self.data.inventory, name)
        if have <= 0:
            return False
        setattr(self.data.inventory, name, have - 1)
        self.save()
        return True


__all__ = [
    "UpgradeStats",
    "Inventory",
    "SaveData",
    "serialize_save",
    "deserialize_save",
    "UpgradeSpec",
    "UPGRADE_CONFIG",
    "MemoryKV",
    "JsonFileKV",
    "SaveStore",
]

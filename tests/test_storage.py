import json

import pytest

from gridrush.constants import SAVE_KEY
from gridrush.storage import (
    JsonFileKV,
    MemoryKV,
    SaveData,
    SaveStore,
    deserialize_save,
    serialize_save,
)

DEFAULT_RECORD = {
    "coins": 0,
    "maxReachedLevel": 1,
    "upgrades": {"maxTimeLevel": 0, "coinGainLevel": 0, "penaltyLevel": 0},
    "inventory": {"revive": 0, "headstart": 0, "emergency": 0},
}


def test_default_record_round_trip() -> None:
    restored = deserialize_save(serialize_save(SaveData()))
    assert restored == SaveData()
    assert restored.to_dict() == DEFAULT_RECORD


def test_corrupt_records_fall_back_to_defaults() -> None:
    for raw in (None, "", "{not json", "[1, 2]", '{"coins": "lots"}'):
        assert deserialize_save(raw) == SaveData()

    for raw in ('{"coins": Infinity, "maxReachedLevel": 3}', '{"upgrades": {"maxTimeLevel": 1e999}}'):
        assert deserialize_save(raw) == SaveData()

    store = SaveStore(MemoryKV({SAVE_KEY: '{"inventory": {"revive": -Infinity}}'}))
    assert store.data == SaveData()


def test_partial_record_is_clamped() -> None:
    raw = json.dumps({"coins": -5, "maxReachedLevel": 0, "upgrades": {"penaltyLevel": 99}})
    data = deserialize_save(raw)
    assert data.coins == 0
    assert data.maxReachedLevel == 1
    assert data.upgrades.penaltyLevel == 5
    assert data.inventory.revive == 0


def test_defaults_without_upgrades(store: SaveStore) -> None:
    assert store.coins == 0
    assert store.max_reached_level == 1
    assert store.get_initial_time() == 60.0
    assert store.get_coin_multiplier() == 1.0
    assert store.get_penalty_time() == 10.0


def test_upgrade_costs_scale_and_cap(store: SaveStore) -> None:
    assert store.get_upgrade_cost("maxTimeLevel") == 100
    assert store.get_upgrade_cost("coinGainLevel") == 150
    assert store.get_upgrade_cost("penaltyLevel") == 200

    store.add_coins(1000)
    assert store.buy_upgrade("maxTimeLevel")
    assert store.coins == 900
    assert store.upgrades.maxTimeLevel == 1
    assert store.get_upgrade_cost("maxTimeLevel") == 150
    assert store.get_initial_time() == 70.0

    store.upgrades.penaltyLevel = 5
    assert store.get_upgrade_cost("penaltyLevel") == -1
    assert not store.buy_upgrade("penaltyLevel")
    assert store.get_penalty_time() == 5.0

    store.upgrades.coinGainLevel = 2
    assert store.get_coin_multiplier() == pytest.approx(1.4)


def test_spend_without_funds_changes_nothing(store: SaveStore) -> None:
    store.add_coins(50)
    assert not store.spend_coins(60)
    assert not store.buy_upgrade("maxTimeLevel")
    assert store.coins == 50
    assert store.upgrades.maxTimeLevel == 0


def test_max_level_only_rises(store: SaveStore) -> None:
    assert store.update_max_level(4)
    assert not store.update_max_level(2)
    assert store.max_reached_level == 4


def test_inventory(store: SaveStore) -> None:
    assert not store.use_item("revive")
    store.add_item("revive", 2)
    assert store.use_item("revive")
    assert store.inventory.revive == 1


def test_record_lives_under_fixed_key() -> None:
    kv = MemoryKV()
    store = SaveStore(kv)
    store.add_coins(12)
    assert list(kv.values) == [SAVE_KEY]
    assert json.loads(kv.values[SAVE_KEY])["coins"] == 12


def test_json_file_backend(tmp_path) -> None:
    path = str(tmp_path / "nested" / "save.json")
    store = SaveStore(JsonFileKV(path))
    store.add_coins(33)
    store.update_max_level(7)

    reloaded = SaveStore(JsonFileKV(path))
    assert reloaded.coins == 33
    assert reloaded.max_reached_level == 7


def test_json_file_backend_survives_garbage(tmp_path) -> None:
    path = tmp_path / "save.json"
    path.write_text("this is not json", encoding="utf-8")
    store = SaveStore(JsonFileKV(str(path)))
    assert store.data == SaveData()
    store.add_coins(5)
    assert json.loads(path.read_text(encoding="utf-8"))[SAVE_KEY]

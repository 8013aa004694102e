"""Tests for StoreLayout loading (files and packaged profiles) and store dumps."""

import json
from pathlib import Path

import pytest

from pyslave_modbus import ModbusTable, StoreLayout, build_store, dump_store, load_store
from pyslave_modbus.layout import RegionLayout, save_store


def test_layout_from_dict_with_mapping_and_list() -> None:
    layout = StoreLayout.from_dict(
        {
            "coil": {"size": 4, "values": {"1": 1}},
            "holding_register": {"size": 3, "values": [7, 8]},
        }
    )
    assert layout.regions[ModbusTable.COIL] == RegionLayout(size=4, values={1: True})
    assert layout.regions[ModbusTable.HOLDING_REGISTER].values == {0: 7, 1: 8}
    # Tables missing from the source are empty
    assert layout.regions[ModbusTable.INPUT_REGISTER].size == 0


def test_build_store_applies_initial_values() -> None:
    layout = StoreLayout.from_dict(
        {
            "coil": {"size": 4, "values": {"1": True}},
            "input_register": {"size": 3, "values": {"2": 500}},
        }
    )
    store = build_store(layout)
    assert store.read(ModbusTable.COIL, 0, 4) == [False, True, False, False]
    assert store.read(ModbusTable.INPUT_REGISTER, 0, 3) == [0, 0, 500]
    assert store.size(ModbusTable.DISCRETE_INPUT) == 0


def test_unknown_table_raises() -> None:
    with pytest.raises(ValueError, match="Unknown table"):
        StoreLayout.from_dict({"registers": {"size": 1}})


def test_initial_value_outside_region_raises() -> None:
    with pytest.raises(ValueError, match="outside region"):
        StoreLayout.from_dict({"coil": {"size": 2, "values": {"5": True}}})


def test_small_profile() -> None:
    layout = StoreLayout.from_profile("small")
    assert layout.sizes() == {
        "coil": 16,
        "discrete_input": 16,
        "input_register": 10,
        "holding_register": 10,
    }
    store = build_store(layout)
    assert store.read(ModbusTable.INPUT_REGISTER, 0, 2) == [100, 200]


def test_default_profile_spans_address_space() -> None:
    layout = StoreLayout.from_profile()
    assert all(size == 0xFFFF for size in layout.sizes().values())


def test_unknown_profile_raises() -> None:
    with pytest.raises(ValueError, match="Unknown profile"):
        StoreLayout.from_profile("fc6a")


def test_dump_and_reload_round_trip(tmp_path: Path) -> None:
    store = load_store(profile="small")
    store.write(ModbusTable.HOLDING_REGISTER, 4, [42])
    store.write(ModbusTable.COIL, 0, [True, False, True])

    path = tmp_path / "state.json"
    save_store(store, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["holding_register"]["size"] == 10
    assert data["holding_register"]["values"][4] == 42

    reloaded = load_store(path)
    assert reloaded.snapshot() == store.snapshot()
    assert dump_store(reloaded) == dump_store(store)

"""Tests for DataStore bounds-checked read/write over the four regions."""

import pytest

from pyslave_modbus import AddressRangeError, DataStore, ModbusTable, create_default_data_store


@pytest.fixture
def store() -> DataStore:
    return DataStore(
        coils=[False] * 16,
        discrete_inputs=[True, False, True, False],
        holding_registers=[0] * 10,
        input_registers=[100, 200, 300],
    )


def test_sizes_are_independent(store: DataStore) -> None:
    assert store.size(ModbusTable.COIL) == 16
    assert store.size(ModbusTable.DISCRETE_INPUT) == 4
    assert store.size(ModbusTable.HOLDING_REGISTER) == 10
    assert store.size(ModbusTable.INPUT_REGISTER) == 3


def test_read_returns_requested_range(store: DataStore) -> None:
    assert store.read(ModbusTable.DISCRETE_INPUT, 1, 3) == [False, True, False]
    assert store.read(ModbusTable.INPUT_REGISTER, 0, 3) == [100, 200, 300]


def test_read_is_idempotent(store: DataStore) -> None:
    first = store.read(ModbusTable.INPUT_REGISTER, 0, 2)
    assert store.read(ModbusTable.INPUT_REGISTER, 0, 2) == first


def test_read_returns_independent_copy(store: DataStore) -> None:
    values = store.read(ModbusTable.HOLDING_REGISTER, 0, 3)
    store.write(ModbusTable.HOLDING_REGISTER, 0, [7, 8, 9])
    assert values == [0, 0, 0]
    values[0] = 99
    assert store.read(ModbusTable.HOLDING_REGISTER, 0, 1) == [7]


def test_write_then_read(store: DataStore) -> None:
    store.write(ModbusTable.HOLDING_REGISTER, 7, [1, 2, 3])
    assert store.read(ModbusTable.HOLDING_REGISTER, 7, 3) == [1, 2, 3]
    # untouched neighbours
    assert store.read(ModbusTable.HOLDING_REGISTER, 6, 1) == [0]


def test_write_coerces_bits(store: DataStore) -> None:
    store.write(ModbusTable.COIL, 0, [1, 0, "x"])
    assert store.read(ModbusTable.COIL, 0, 3) == [True, False, True]


def test_accepts_table_value_strings(store: DataStore) -> None:
    store.write("coil", 2, [True])
    assert store.read("coil", 2, 1) == [True]


@pytest.mark.parametrize(
    ("start", "count"),
    [
        (8, 5),
        (10, 1),
        (0, 11),
        (0, 0),
        (3, -1),
        (-1, 2),
    ],
)
def test_read_out_of_range_raises(store: DataStore, start: int, count: int) -> None:
    with pytest.raises(AddressRangeError) as exc_info:
        store.read(ModbusTable.HOLDING_REGISTER, start, count)
    assert exc_info.value.table == "holding_register"
    assert exc_info.value.size == 10


@pytest.mark.parametrize(
    ("start", "values"),
    [
        (8, [1, 2, 3]),
        (10, [1]),
        (0, []),
    ],
)
def test_write_out_of_range_leaves_region_unmodified(store: DataStore, start: int, values: list[int]) -> None:
    before = store.snapshot()
    with pytest.raises(AddressRangeError):
        store.write(ModbusTable.HOLDING_REGISTER, start, values)
    assert store.snapshot() == before


def test_write_rejects_word_out_of_range(store: DataStore) -> None:
    with pytest.raises(ValueError, match="out of range"):
        store.write(ModbusTable.HOLDING_REGISTER, 0, [1, 0x10000])
    assert store.read(ModbusTable.HOLDING_REGISTER, 0, 2) == [0, 0]


def test_constructor_rejects_invalid_words() -> None:
    with pytest.raises(ValueError):
        DataStore(input_registers=[-1])


def test_snapshot_is_a_copy(store: DataStore) -> None:
    snap = store.snapshot()
    snap[ModbusTable.COIL][0] = True
    assert store.read(ModbusTable.COIL, 0, 1) == [False]


def test_default_store_spans_address_space() -> None:
    store = create_default_data_store()
    for table in ModbusTable:
        assert store.size(table) == 0xFFFF
    assert store.read(ModbusTable.HOLDING_REGISTER, 0xFFFE, 1) == [0]
    with pytest.raises(AddressRangeError):
        store.read(ModbusTable.HOLDING_REGISTER, 0xFFFF, 1)


def test_address_range_error_maps_to_illegal_data_address(store: DataStore) -> None:
    with pytest.raises(AddressRangeError) as exc_info:
        store.read(ModbusTable.COIL, 15, 2)
    assert exc_info.value.exception_code == 0x02
    assert exc_info.value.start_address == 15
    assert exc_info.value.count == 2

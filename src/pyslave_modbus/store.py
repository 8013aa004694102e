"""DataStore: four independent memory regions with bounds-checked bulk read/write."""

import logging
import threading
from typing import Iterable, Sequence

from .errors import AddressRangeError
from .types import MAX_REGISTER_VALUE, ModbusTable

logger = logging.getLogger(__name__)

# Full protocol address space per region
DEFAULT_REGION_SIZE = 0xFFFF


def _check_range(table: ModbusTable, start_address: int, count: int, size: int) -> None:
    if count <= 0 or start_address < 0 or start_address + count > size:
        raise AddressRangeError(table=table.value, start_address=start_address, count=count, size=size)


class DataStore:
    """
    Memory of one slave device: coils, discrete inputs, holding registers and input
    registers, each a separately sized region addressed from 0.

    Regions are only reachable through read/write, which validate the whole range
    before touching anything. `sync_root` is a re-entrant lock a host can take to
    serialize access when several dispatch calls share one store.
    """

    def __init__(
        self,
        coils: Iterable[bool] = (),
        discrete_inputs: Iterable[bool] = (),
        holding_registers: Iterable[int] = (),
        input_registers: Iterable[int] = (),
    ) -> None:
        self._regions: dict[ModbusTable, list[bool] | list[int]] = {
            ModbusTable.COIL: [bool(v) for v in coils],
            ModbusTable.DISCRETE_INPUT: [bool(v) for v in discrete_inputs],
            ModbusTable.HOLDING_REGISTER: [],
            ModbusTable.INPUT_REGISTER: [],
        }
        self._regions[ModbusTable.HOLDING_REGISTER] = self._words(ModbusTable.HOLDING_REGISTER, holding_registers)
        self._regions[ModbusTable.INPUT_REGISTER] = self._words(ModbusTable.INPUT_REGISTER, input_registers)
        self.sync_root = threading.RLock()

    @staticmethod
    def _words(table: ModbusTable, values: Iterable[int]) -> list[int]:
        words = [int(v) for v in values]
        for i, v in enumerate(words):
            if not (0 <= v <= MAX_REGISTER_VALUE):
                raise ValueError(f"{table.value} value out of range 0-{MAX_REGISTER_VALUE} at index {i}: {v}")
        return words

    def size(self, table: ModbusTable) -> int:
        """Number of addressable elements in the region."""
        return len(self._regions[ModbusTable(table)])

    def read(self, table: ModbusTable, start_address: int, count: int) -> list[bool] | list[int]:
        """
        Return a new list with `count` elements of `table` starting at `start_address`.
        Raises AddressRangeError when count <= 0 or the range exceeds the region.
        """
        table = ModbusTable(table)
        with self.sync_root:
            region = self._regions[table]
            _check_range(table, start_address, count, len(region))
            return region[start_address:start_address + count]

    def write(self, table: ModbusTable, start_address: int, values: Sequence[bool] | Sequence[int]) -> None:
        """
        Overwrite `table` from `start_address` with `values`, in index order.
        Nothing is modified unless the whole range and every value is valid.
        """
        table = ModbusTable(table)
        if table.is_bit:
            items: list[bool] | list[int] = [bool(v) for v in values]
        else:
            items = self._words(table, values)
        with self.sync_root:
            region = self._regions[table]
            _check_range(table, start_address, len(items), len(region))
            region[start_address:start_address + len(items)] = items
        logger.debug("Wrote %d %s value(s) at %d", len(items), table.value, start_address)

    def snapshot(self) -> dict[ModbusTable, list[bool] | list[int]]:
        """Independent copy of every region."""
        with self.sync_root:
            return {table: list(region) for table, region in self._regions.items()}

    def __repr__(self) -> str:
        sizes = ", ".join(f"{t.value}={len(r)}" for t, r in self._regions.items())
        return f"DataStore({sizes})"


def create_default_data_store(size: int = DEFAULT_REGION_SIZE) -> DataStore:
    """Store with every region spanning `size` addresses, all off / zero."""
    return DataStore(
        coils=[False] * size,
        discrete_inputs=[False] * size,
        holding_registers=[0] * size,
        input_registers=[0] * size,
    )

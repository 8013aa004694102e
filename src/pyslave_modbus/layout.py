"""StoreLayout: region sizes and initial values from JSON files or packaged profiles."""

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from .store import DataStore
from .types import ModbusTable

logger = logging.getLogger(__name__)

_PROFILE_RESOURCE: dict[str, str] = {
    "default": "pyslave_modbus.data.default_layout",
    "small": "pyslave_modbus.data.small_layout",
}


@dataclass(frozen=True)
class RegionLayout:
    """Size of one region plus the addresses that start with a non-default value."""

    size: int
    values: dict[int, bool | int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"size must be >= 0, got {self.size}")
        for addr in self.values:
            if not (0 <= addr < self.size):
                raise ValueError(f"initial value address {addr} outside region of size {self.size}")


def _parse_region(table: ModbusTable, raw: dict[str, Any]) -> RegionLayout:
    """Build RegionLayout from a JSON entry: {"size": N, "values": [...] or {"addr": value}}."""
    size = int(raw.get("size", 0))
    raw_values = raw.get("values") or {}
    if isinstance(raw_values, list):
        items = enumerate(raw_values)
    elif isinstance(raw_values, dict):
        items = ((int(k), v) for k, v in raw_values.items())
    else:
        raise ValueError(f"values for {table.value} must be a list or mapping")
    cast = bool if table.is_bit else int
    values = {addr: cast(v) for addr, v in items}
    return RegionLayout(size=size, values=values)


@dataclass(frozen=True)
class StoreLayout:
    """Layout of all four regions. Tables missing from the source are empty."""

    regions: dict[ModbusTable, RegionLayout]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoreLayout":
        regions = {table: RegionLayout(size=0) for table in ModbusTable}
        for name, raw in data.items():
            try:
                table = ModbusTable(name)
            except ValueError:
                raise ValueError(f"Unknown table {name!r} in layout") from None
            if not isinstance(raw, dict):
                raise ValueError(f"Layout entry for {name!r} must be an object")
            regions[table] = _parse_region(table, raw)
        return cls(regions=regions)

    @classmethod
    def from_file(cls, path: Path | str) -> "StoreLayout":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        layout = cls.from_dict(data)
        logger.debug("Layout loaded from %s: %s", path, layout.sizes())
        return layout

    @classmethod
    def from_profile(cls, profile: str = "default") -> "StoreLayout":
        """Load a packaged layout (e.g. pyslave_modbus/data/small_layout.json)."""
        resource_name = _PROFILE_RESOURCE.get(profile.lower())
        if not resource_name:
            raise ValueError(f"Unknown profile: {profile!r}")
        pkg, name = resource_name.rsplit(".", 1)
        json_name = f"{name}.json"
        try:
            with resources.files(pkg).joinpath(json_name).open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Layout resource not found: {pkg}/{json_name}") from None
        layout = cls.from_dict(data)
        logger.debug("Layout loaded for profile %s: %s", profile, layout.sizes())
        return layout

    def sizes(self) -> dict[str, int]:
        return {table.value: region.size for table, region in self.regions.items()}


def build_store(layout: StoreLayout) -> DataStore:
    """Create a DataStore sized and initialized according to `layout`."""
    contents: dict[ModbusTable, list[bool] | list[int]] = {}
    for table, region in layout.regions.items():
        default: bool | int = False if table.is_bit else 0
        values = [default] * region.size
        for addr, value in region.values.items():
            values[addr] = value
        contents[table] = values
    return DataStore(
        coils=contents[ModbusTable.COIL],
        discrete_inputs=contents[ModbusTable.DISCRETE_INPUT],
        holding_registers=contents[ModbusTable.HOLDING_REGISTER],
        input_registers=contents[ModbusTable.INPUT_REGISTER],
    )


def dump_store(store: DataStore) -> dict[str, dict[str, Any]]:
    """Serialize every region in the layout format (values as lists), so it can be reloaded."""
    return {
        table.value: {"size": len(values), "values": values}
        for table, values in store.snapshot().items()
    }


def save_store(store: DataStore, path: Path | str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dump_store(store), f)


def load_store(state: Path | str | None = None, profile: str = "default") -> DataStore:
    """Store from a state file when given, otherwise from the packaged profile."""
    if state is not None:
        return build_store(StoreLayout.from_file(state))
    return build_store(StoreLayout.from_profile(profile))

#!/usr/bin/env python3
"""CLI for pyslave-modbus using Typer: apply requests to a slave data store kept in a JSON state file."""

import json
import logging
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
from typing_extensions import Annotated

from . import __version__  # type: ignore
from .errors import PySlaveModbusError
from .layout import load_store, save_store
from .messages import (
    ModbusRequest,
    ReadCoilsRequest,
    ReadDiscreteInputsRequest,
    ReadHoldingRegistersRequest,
    ReadInputRegistersRequest,
    ReadWriteMultipleRegistersRequest,
    WriteMultipleCoilsRequest,
    WriteMultipleRegistersRequest,
    WriteSingleCoilRequest,
    WriteSingleRegisterRequest,
    exception_response,
)
from .slave import SUPPORTED_FUNCTION_CODES, ModbusSlave
from .store import DataStore
from .types import ModbusTable

app = typer.Typer(
    name="pyslave",
    help="Apply Modbus requests to a simulated slave device whose memory lives in a JSON state file.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared options and helpers
# ============================================================================

StateOption = Annotated[
    Optional[Path],
    typer.Option("--state", "-s", help="JSON state file (created on first write)", envvar="PYSLAVE_STATE"),
]
ProfileOption = Annotated[
    str,
    typer.Option("--profile", help="Packaged layout used when no state file exists", envvar="PYSLAVE_PROFILE"),
]
UnitIdOption = Annotated[
    int,
    typer.Option("--unit-id", "-u", help="Modbus unit ID", envvar="PYSLAVE_UNIT_ID"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]
SignedOption = Annotated[
    bool,
    typer.Option("--signed", help="Interpret register values as signed 16-bit integers"),
]

_READ_REQUESTS: dict[ModbusTable, type] = {
    ModbusTable.COIL: ReadCoilsRequest,
    ModbusTable.DISCRETE_INPUT: ReadDiscreteInputsRequest,
    ModbusTable.HOLDING_REGISTER: ReadHoldingRegistersRequest,
    ModbusTable.INPUT_REGISTER: ReadInputRegistersRequest,
}


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_table(value: str) -> ModbusTable:
    """Parse a table name (coil, discrete_input, holding_register, input_register)."""
    v = value.strip().lower().replace("-", "_")
    try:
        return ModbusTable(v)
    except ValueError:
        choices = ", ".join(t.value for t in ModbusTable)
        raise ValueError(f"Invalid table {value!r}; expected one of: {choices}") from None


def parse_bool(value: str) -> bool:
    """Parse boolean value from string."""
    v = value.lower().strip()
    if v in ("true", "1", "on", "yes"):
        return True
    if v in ("false", "0", "off", "no"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_int(value: str, signed: bool = False) -> int:
    """Parse integer value from string, supporting hex and validation."""
    v = value.strip()
    if v.lower().startswith("0x"):
        num = int(v, 16)
    else:
        num = int(v)

    if signed:
        if not (-32768 <= num <= 32767):
            raise ValueError(f"Signed 16-bit integer out of range: {num}")
    else:
        if not (0 <= num <= 65535):
            raise ValueError(f"Unsigned 16-bit integer out of range: {num}")

    return num


def to_signed(value: int) -> int:
    """Convert unsigned 16-bit to signed."""
    if value > 32767:
        return value - 65536
    return value


def from_signed(value: int) -> int:
    """Convert signed 16-bit to unsigned."""
    if value < 0:
        return value + 65536
    return value


def format_value(value: bool | int, signed: bool = False) -> str:
    """Format value for display."""
    if isinstance(value, bool):
        return str(value).lower()
    if signed:
        return str(to_signed(value))
    return str(value)


def parse_register_values(values: List[str], signed: bool) -> list[int]:
    return [from_signed(parse_int(v, signed)) for v in values]


def open_store(state: Optional[Path], profile: str) -> DataStore:
    """Load the state file when it exists, otherwise build a fresh store from the profile."""
    if state is not None and state.exists():
        return load_store(state)
    return load_store(None, profile)


def apply(slave: ModbusSlave, request: ModbusRequest, json_output: bool) -> Any:
    """Apply a request; protocol failures are reported with their exception code and exit 3."""
    try:
        return slave.apply_request(request)
    except PySlaveModbusError as e:
        exc = exception_response(request, e)
        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "error": str(e),
                        "exception_code": int(exc.exception_code),
                        "function_code": exc.function_code,
                    }
                )
            )
        typer.echo(f"Error: Modbus exception {exc.exception_code.name}: {e}", err=True)
        raise typer.Exit(3)


def fail(message: str, code: int, verbose: bool = False) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    if verbose and code == 4:
        import traceback
        traceback.print_exc()
    raise typer.Exit(code)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def info(
    json_output: JsonOption = False,
) -> None:
    """Show package version and the supported function codes."""
    info_data = {
        "version": __version__,
        "function_codes": {code.name.lower(): int(code) for code in SUPPORTED_FUNCTION_CODES},
    }
    if json_output:
        typer.echo(json.dumps(info_data, indent=2))
    else:
        typer.echo(f"pyslave-modbus version: {info_data['version']}")
        typer.echo("Function codes:")
        for name, code in info_data["function_codes"].items():
            typer.echo(f"  {code:#04x} {name}")


@app.command()
def read(
    table: Annotated[str, typer.Argument(help="coil, discrete_input, holding_register or input_register")],
    start: Annotated[int, typer.Argument(help="Start address (0-based)")],
    count: Annotated[int, typer.Argument(help="Number of points")] = 1,
    state: StateOption = None,
    profile: ProfileOption = "small",
    unit_id: UnitIdOption = 1,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
    signed: SignedOption = False,
) -> None:
    """
    Read COUNT points from TABLE starting at START.

    Issues the matching read function (01, 02, 03 or 04) against the slave.
    """
    setup_logging(verbose)

    try:
        parsed_table = parse_table(table)
        slave = ModbusSlave(unit_id=unit_id, data_store=open_store(state, profile))
    except (ValueError, FileNotFoundError) as e:
        fail(str(e), 2)
    except Exception as e:
        fail(f"Unexpected error: {e}", 4, verbose)

    request = _READ_REQUESTS[parsed_table](unit_id=unit_id, start_address=start, count=count)
    response = apply(slave, request, json_output)
    values = list(response.data)

    if json_output:
        if signed and not parsed_table.is_bit:
            values = [to_signed(v) for v in values]
        typer.echo(json.dumps({"table": parsed_table.value, "start": start, "values": values}))
    else:
        typer.echo(" ".join(format_value(v, signed) for v in values))


@app.command()
def write(
    table: Annotated[str, typer.Argument(help="coil or holding_register")],
    start: Annotated[int, typer.Argument(help="Start address (0-based)")],
    values: Annotated[List[str], typer.Argument(help="One value for a single write, several for a multiple write")],
    state: StateOption = None,
    profile: ProfileOption = "small",
    unit_id: UnitIdOption = 1,
    verbose: VerboseOption = False,
    signed: SignedOption = False,
) -> None:
    """
    Write VALUES to TABLE starting at START and save the state file.

    For coils: accepts true/false, 1/0, on/off, yes/no (case-insensitive).
    For holding registers: accepts integers (decimal or hex with 0x prefix).
    """
    setup_logging(verbose)

    request: ModbusRequest
    try:
        parsed_table = parse_table(table)
        if parsed_table == ModbusTable.COIL:
            bits = [parse_bool(v) for v in values]
            if len(bits) == 1:
                request = WriteSingleCoilRequest.from_bool(start, bits[0], unit_id=unit_id)
            else:
                request = WriteMultipleCoilsRequest(unit_id=unit_id, start_address=start, values=bits)
        elif parsed_table == ModbusTable.HOLDING_REGISTER:
            words = parse_register_values(values, signed)
            if len(words) == 1:
                request = WriteSingleRegisterRequest.from_value(start, words[0], unit_id=unit_id)
            else:
                request = WriteMultipleRegistersRequest(unit_id=unit_id, start_address=start, values=words)
        else:
            raise ValueError(f"Write not supported for table {parsed_table.value}")
        slave = ModbusSlave(unit_id=unit_id, data_store=open_store(state, profile))
    except (ValueError, FileNotFoundError) as e:
        fail(str(e), 2)
    except Exception as e:
        fail(f"Unexpected error: {e}", 4, verbose)

    response = apply(slave, request, json_output=False)
    if state is not None:
        save_store(slave.data_store, state)
    typer.echo(f"OK: {response}")


@app.command("read-write")
def read_write(
    read_start: Annotated[int, typer.Argument(help="Holding register to start reading at")],
    read_count: Annotated[int, typer.Argument(help="Number of registers to read")],
    write_start: Annotated[int, typer.Argument(help="Holding register to start writing at")],
    values: Annotated[List[str], typer.Argument(help="Register values to write")],
    state: StateOption = None,
    profile: ProfileOption = "small",
    unit_id: UnitIdOption = 1,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
    signed: SignedOption = False,
) -> None:
    """
    Read then write holding registers in one request (function 23).

    Prints the values read, which never include the effect of the write.
    """
    setup_logging(verbose)

    try:
        words = parse_register_values(values, signed)
        slave = ModbusSlave(unit_id=unit_id, data_store=open_store(state, profile))
    except (ValueError, FileNotFoundError) as e:
        fail(str(e), 2)
    except Exception as e:
        fail(f"Unexpected error: {e}", 4, verbose)

    request = ReadWriteMultipleRegistersRequest.build(read_start, read_count, write_start, words, unit_id=unit_id)
    response = apply(slave, request, json_output)
    if state is not None:
        save_store(slave.data_store, state)

    read_values = list(response.data)
    if json_output:
        if signed:
            read_values = [to_signed(v) for v in read_values]
        typer.echo(json.dumps({"start": read_start, "values": read_values}))
    else:
        typer.echo(" ".join(format_value(v, signed) for v in read_values))


@app.command()
def dump(
    table: Annotated[Optional[str], typer.Option("--table", "-t", help="Only dump this table")] = None,
    state: StateOption = None,
    profile: ProfileOption = "small",
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Print the contents of every region (or one with --table).

    Text output drops trailing off/zero values; JSON output is complete.
    """
    setup_logging(verbose)

    try:
        only = parse_table(table) if table else None
        store = open_store(state, profile)
    except (ValueError, FileNotFoundError) as e:
        fail(str(e), 2)
    except Exception as e:
        fail(f"Unexpected error: {e}", 4, verbose)

    snapshot = {t: v for t, v in store.snapshot().items() if only is None or t == only}
    if json_output:
        typer.echo(json.dumps({t.value: v for t, v in snapshot.items()}))
        return
    for t, region in snapshot.items():
        shown = list(region)
        while shown and not shown[-1]:
            shown.pop()
        typer.echo(f"{t.value} [{len(region)}]: " + " ".join(format_value(v) for v in shown))


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"pyslave-modbus {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """pyslave - apply Modbus requests to a simulated slave data store."""
    pass


if __name__ == "__main__":
    app()

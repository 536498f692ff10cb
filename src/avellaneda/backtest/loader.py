"""Loaders for historical market data files.

Supported formats:
- CSV with a header row naming the fields
- JSON: a list of objects, or an object with a "ticks" / "bars" list

Tick fields: timestamp, bid_price, bid_size, ask_price, ask_size and
optionally last_price, last_size. Bar fields: timestamp, open, high,
low, close, volume.
"""

from __future__ import annotations

import csv
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from avellaneda.domain.errors import InvalidMarketState
from avellaneda.domain.market_data import MarketTick, OHLCVBar

TICK_FIELDS = ("timestamp", "bid_price", "bid_size", "ask_price", "ask_size")
BAR_FIELDS = ("timestamp", "open", "high", "low", "close", "volume")


def load_ticks(file_path: str | Path) -> list[MarketTick]:
    """Load market ticks from a CSV or JSON file.

    Args:
        file_path: Path to the data file

    Returns:
        Ticks in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidMarketState: If the format is unsupported or a row is malformed
    """
    rows = _read_rows(Path(file_path), "ticks")
    return [_parse_tick(row, i) for i, row in enumerate(rows)]


def load_bars(file_path: str | Path) -> list[OHLCVBar]:
    """Load OHLCV bars from a CSV or JSON file.

    Args:
        file_path: Path to the data file

    Returns:
        Bars in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidMarketState: If the format is unsupported or a row is malformed
    """
    rows = _read_rows(Path(file_path), "bars")
    return [_parse_bar(row, i) for i, row in enumerate(rows)]


def _read_rows(path: Path, key: str) -> list[dict[str, Any]]:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        with open(path, newline="") as f:
            return list(csv.DictReader(f))

    if suffix == ".json":
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get(key, [])
        if not isinstance(data, list):
            raise InvalidMarketState(
                f"expected a list of {key}",
                field=key,
                context={"file": str(path)},
            )
        for i, row in enumerate(data):
            if not isinstance(row, dict):
                raise InvalidMarketState(
                    f"row {i} is not an object",
                    field=key,
                    context={"row": i, "file": str(path)},
                )
        return data

    raise InvalidMarketState(
        f"unsupported data file format: {suffix}",
        field="file_path",
        context={"file": str(path)},
    )


def _parse_tick(row: dict[str, Any], index: int) -> MarketTick:
    _require_fields(row, TICK_FIELDS, index)
    last_price = row.get("last_price")
    last_size = row.get("last_size")
    return MarketTick(
        timestamp=_to_int(row["timestamp"], "timestamp", index),
        bid_price=_to_decimal(row["bid_price"], "bid_price", index),
        bid_size=_to_decimal(row["bid_size"], "bid_size", index),
        ask_price=_to_decimal(row["ask_price"], "ask_price", index),
        ask_size=_to_decimal(row["ask_size"], "ask_size", index),
        # Empty CSV cells mean no trade
        last_price=_to_decimal(last_price, "last_price", index) if last_price not in (None, "") else None,
        last_size=_to_decimal(last_size, "last_size", index) if last_size not in (None, "") else None,
    )


def _parse_bar(row: dict[str, Any], index: int) -> OHLCVBar:
    _require_fields(row, BAR_FIELDS, index)
    return OHLCVBar(
        timestamp=_to_int(row["timestamp"], "timestamp", index),
        open=_to_decimal(row["open"], "open", index),
        high=_to_decimal(row["high"], "high", index),
        low=_to_decimal(row["low"], "low", index),
        close=_to_decimal(row["close"], "close", index),
        volume=_to_decimal(row["volume"], "volume", index),
    )


def _require_fields(row: dict[str, Any], fields: tuple[str, ...], index: int) -> None:
    missing = [name for name in fields if row.get(name) in (None, "")]
    if missing:
        raise InvalidMarketState(
            f"row {index} is missing fields: {', '.join(missing)}",
            field=missing[0],
            context={"row": index},
        )


def _to_decimal(value: Any, field: str, index: int) -> Decimal:
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidMarketState(
            f"row {index} has malformed {field}: {value!r}",
            field=field,
            context={"row": index},
        ) from e
    if not result.is_finite():
        raise InvalidMarketState(
            f"row {index} has non-finite {field}: {value!r}",
            field=field,
            context={"row": index},
        )
    return result


def _to_int(value: Any, field: str, index: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidMarketState(
            f"row {index} has malformed {field}: {value!r}",
            field=field,
            context={"row": index},
        ) from e

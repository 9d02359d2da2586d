"""Kubernetes resource quantity helpers."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

_GIB_DIVISORS: dict[str, Decimal] = {
    "Ki": Decimal(1024 * 1024),
    "Mi": Decimal(1024),
    "Gi": Decimal(1),
}

_MEMORY_MULTIPLIERS: dict[str, int] = {
    "Ki": 1024,
    "Mi": 1024 ** 2,
    "Gi": 1024 ** 3,
    "Ti": 1024 ** 4,
    "Pi": 1024 ** 5,
    "Ei": 1024 ** 6,
    "k": 1000,
    "K": 1000,
    "M": 1000 ** 2,
    "G": 1000 ** 3,
    "T": 1000 ** 4,
    "P": 1000 ** 5,
    "E": 1000 ** 6,
    "": 1,
}

# Divisor that turns a CPU quantity with this suffix into millicores.
_CPU_TO_MILLI: dict[str, Decimal] = {
    "n": Decimal(1_000_000),
    "u": Decimal(1_000),
    "m": Decimal(1),
    "": Decimal("0.001"),
}

_GIB_RE = re.compile(r"^(\d+)(Ki|Mi|Gi)$")
_QUANTITY_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?)([a-zA-Z]*)$")
_TWO_PLACES = Decimal("0.01")


def to_gib(quantity: str | None) -> str:
    """Convert a ``<digits><Ki|Mi|Gi>`` quantity into GiB with two decimals.

    Anything else (other suffixes, no suffix, fractional values) yields
    ``"0.00"`` rather than an error.
    """
    match = _GIB_RE.match((quantity or "").strip())
    if not match:
        return "0.00"
    number, unit = match.groups()
    value = Decimal(number) / _GIB_DIVISORS[unit]
    return str(value.quantize(_TWO_PLACES, rounding=ROUND_HALF_EVEN))


def _split(quantity: str | None) -> tuple[Decimal, str] | None:
    match = _QUANTITY_RE.match(str(quantity or "").strip())
    if not match:
        return None
    number, suffix = match.groups()
    try:
        return Decimal(number), suffix
    except InvalidOperation:
        return None


def memory_to_bytes(quantity: str | None) -> int:
    """Parse a memory quantity into bytes; unknown suffixes count as zero."""
    parts = _split(quantity)
    if parts is None:
        return 0
    number, suffix = parts
    multiplier = _MEMORY_MULTIPLIERS.get(suffix)
    if multiplier is None:
        return 0
    return int(number * multiplier)


def cpu_to_millicores(quantity: str | None) -> int:
    parts = _split(quantity)
    if parts is None:
        return 0
    number, suffix = parts
    divisor = _CPU_TO_MILLI.get(suffix)
    if divisor is None:
        return 0
    return int(number / divisor)


def format_cpu(quantity: str | None) -> str:
    """Render a CPU quantity the way ``kubectl top`` does, e.g. ``250m``."""
    if not quantity:
        return "N/A"
    return f"{cpu_to_millicores(quantity)}m"


def format_memory_mi(num_bytes: int) -> str:
    return f"{num_bytes // (1024 * 1024)}Mi"

"""Conversions between raw usage numbers and Kubernetes resource quantities."""

import math
import re
from typing import NamedTuple

MIB_PER_GIB = 1024
MILLICORES_PER_CORE = 1000

_QUANTITY_RE = re.compile(r"^\s*(?P<magnitude>[^A-Za-z\s]*)\s*(?P<unit>[A-Za-z]*)\s*$")


class InvalidQuantityError(ValueError):
    """Raised when a negative or non-finite value is formatted."""


class MalformedQuantityError(ValueError):
    """Raised when a quantity string cannot be parsed."""


class Quantity(NamedTuple):
    """Resource amount in a platform-native unit."""

    magnitude: int
    unit: str  # "m", "" (cores), "Mi" or "Gi"

    def __str__(self) -> str:
        return f"{self.magnitude}{self.unit}"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _check_magnitude(value: float, kind: str) -> None:
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidQuantityError(f"invalid {kind} value: {value!r}")


def cpu_quantity(cores: float) -> Quantity:
    """Return CPU usage in cores as millicores below one core, cores above."""
    _check_magnitude(cores, "cpu")
    if cores < 1:
        return Quantity(max(1, round_half_away(cores * MILLICORES_PER_CORE)), "m")
    return Quantity(round_half_away(cores), "")


def memory_quantity(mebibytes: float, *, round_up: bool = False) -> Quantity:
    """Return memory usage in MiB as Gi from 1024 MiB upwards, Mi below.

    With ``round_up`` the result is never smaller than the input.
    """
    _check_magnitude(mebibytes, "memory")
    to_int = math.ceil if round_up else round_half_away
    if mebibytes >= MIB_PER_GIB:
        return Quantity(int(to_int(mebibytes / MIB_PER_GIB)), "Gi")
    return Quantity(max(1, int(to_int(mebibytes))), "Mi")


def format_cpu(cores: float) -> str:
    """Format CPU cores as a Kubernetes quantity (``"250m"``, ``"2"``)."""
    return str(cpu_quantity(cores))


def format_memory(mebibytes: float, *, round_up: bool = False) -> str:
    """Format mebibytes as a Kubernetes quantity (``"600Mi"``, ``"2Gi"``)."""
    return str(memory_quantity(mebibytes, round_up=round_up))


def parse_memory(memory_str: str) -> float:
    """Parse a memory quantity and return mebibytes.

    ``Gi`` and ``Mi`` are recognised; any other or missing suffix is taken
    as already being mebibytes.
    """
    match = _QUANTITY_RE.match(str(memory_str))
    if match is None:
        raise MalformedQuantityError(f"malformed memory quantity: {memory_str!r}")
    try:
        magnitude = float(match.group("magnitude"))
    except ValueError as exc:
        raise MalformedQuantityError(
            f"malformed memory quantity: {memory_str!r}"
        ) from exc
    if magnitude < 0:
        raise MalformedQuantityError(f"negative memory quantity: {memory_str!r}")

    if match.group("unit") == "Gi":
        return magnitude * MIB_PER_GIB
    return magnitude

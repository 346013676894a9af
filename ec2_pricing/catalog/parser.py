"""Parsers for the string-encoded attributes of the EC2 pricing document.

The upstream document stores almost every attribute as free text with
inconsistent formatting. None of these parsers raise: input that cannot be
parsed degrades to a default or to an ``UNPARSEABLE`` sentinel, and the
returned ``Parsed.defaulted`` flag tells the caller that happened so it can
record an anomaly without failing the whole document.
"""

import math
import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from ec2_pricing.catalog.models import (
    UNPARSEABLE,
    InstanceProcessor,
    InstanceStorage,
    NetworkPerformance,
    Range,
)

T = TypeVar("T")

GBPS = "Gbps"

RECOGNIZED_PROCESSOR_MAKES = ("Intel", "AMD", "AWS")

# Descriptive network tiers in Gbps. "Low" is anywhere from 50 to 300 Mbit,
# "moderate" 300 to 900 Mbit and "high" 0.9 to 2.2 Gbit, based on public
# benchmarks of instances that only publish a tier name.
NETWORK_TIERS = {
    "very low": (0.0, 0.05),
    "low": (0.05, 0.3),
    "moderate": (0.3, 0.9),
    "low to moderate": (0.05, 0.9),
    "high": (0.9, 2.2),
}

MEGABIT_UNITS = ("megabit", "mbps")
GIGABIT_UNITS = ("gigabit", "gbps")

# Example strings & matches:
# - "2 x 1900 NVMe SSD"    -> multiplier: 2, size: 1900, unit: ,   type: NVMe SSD
# - "4 x 2000 HDD"         -> multiplier: 4, size: 2000, unit: ,   type: HDD
# - "225 GB NVMe SSD"      -> multiplier: ,  size: 225,  unit: GB, type: NVMe SSD
# - "2 x 3800 GB NVMe SSD" -> multiplier: 2, size: 3800, unit: GB, type: NVMe SSD
STORAGE_PATTERN = re.compile(
    r"^"
    r"(?:(?P<multiplier>\d+) x\s+)?"
    r"(?P<size>\d+)"
    r"\s+"
    r"(?:(?P<unit>[GgMm][Bb])\s+)?"
    r"(?P<type>.+)"
    r"$"
)


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A parsed value and whether a default stood in for the input."""

    value: T
    defaulted: bool = False


def parse_bool(value: str) -> Parsed[bool]:
    """Parse a "Yes"/"No" attribute. Anything but "yes" is False."""
    lowered = value.lower()
    return Parsed(lowered == "yes", defaulted=lowered not in ("yes", "no"))


def parse_int(value: str, default: int) -> Parsed[int]:
    """Parse a base-10 integer, falling back to ``default``.

    Only plain ASCII input is accepted. Surrounding whitespace and "_" digit
    separators are rejected.
    """
    if value == "" or _has_number_noise(value):
        return Parsed(default, defaulted=True)
    try:
        return Parsed(int(value))
    except ValueError:
        return Parsed(default, defaulted=True)


def parse_float(value: str, default: float) -> Parsed[float]:
    """Parse a float, falling back to ``default``. Same rules as parse_int."""
    if value == "" or _has_number_noise(value):
        return Parsed(default, defaulted=True)
    try:
        return Parsed(float(value))
    except ValueError:
        return Parsed(default, defaulted=True)


def parse_clock_speed(speed: str) -> Parsed[Range[float]]:
    """Parse clock speeds such as "2.5 GHz" or "Up to 3.5 GHz".

    Args:
        speed: Raw ``clockSpeed`` attribute

    Returns:
        Range with a lower-cased unit. "Up to" phrasing sets ``min`` to 0.
    """
    if speed == "":
        return Parsed(Range(), defaulted=True)

    parts = speed.lower().split(" ")
    if len(parts) < 2:
        return Parsed(Range(unit=parts[-1], min=UNPARSEABLE, max=UNPARSEABLE), True)

    unit = parts[-1]
    magnitude = parse_float(parts[-2], UNPARSEABLE)
    if magnitude.defaulted:
        return Parsed(Range(unit=unit, min=UNPARSEABLE, max=UNPARSEABLE), True)

    if parts[0] == "up" and parts[1] == "to":
        return Parsed(Range(unit=unit, min=0.0, max=magnitude.value))
    return Parsed(Range(unit=unit, min=magnitude.value, max=magnitude.value))


def parse_memory_mib(memory: str) -> Parsed[int]:
    """Parse "16 GiB" / "512 MiB" into MiB. Units other than MiB count as GiB."""
    if memory == "":
        return Parsed(0, defaulted=True)

    parts = memory.lower().split(" ")

    multiplier = 1024.0
    if parts[-1] == "mib":
        multiplier = 1.0

    amount = parse_float(parts[0], 0)
    if not math.isfinite(amount.value):
        return Parsed(0, defaulted=True)
    return Parsed(int(amount.value * multiplier), defaulted=amount.defaulted)


def parse_processor(processor: str) -> Parsed[InstanceProcessor]:
    """Split a ``physicalProcessor`` string into make and model.

    A recognized make at the start of the string is stripped from the model,
    e.g. "Intel Xeon Platinum 8259CL" -> ("Intel", "Xeon Platinum 8259CL").
    A make found elsewhere keeps the full string as model. Unknown makes leave
    ``make`` empty.
    """
    if processor == "":
        return Parsed(InstanceProcessor(), defaulted=True)

    for make in RECOGNIZED_PROCESSOR_MAKES:
        idx = processor.find(make)
        if idx == -1:
            continue
        if idx == 0:
            return Parsed(InstanceProcessor(make=make, model=processor[len(make):].strip()))
        return Parsed(InstanceProcessor(make=make, model=processor))

    return Parsed(InstanceProcessor(model=processor), defaulted=True)


def parse_processor_features(features: str) -> Parsed[tuple[str, ...]]:
    """Split "Intel AVX; Intel AVX2; Intel Turbo" into its features."""
    if features == "":
        return Parsed((), defaulted=True)
    return Parsed(tuple(features.split("; ")))


def parse_storage(storage: str) -> Parsed[InstanceStorage]:
    """Parse the ``storage`` attribute. See STORAGE_PATTERN for examples.

    Sizes given in GB are normalized to MB; sizes without a unit are kept
    as-is.
    """
    if storage == "":
        return Parsed(InstanceStorage(), defaulted=True)

    if storage == "EBS Only":
        return Parsed(InstanceStorage(type=storage))

    match = STORAGE_PATTERN.match(storage)
    if match is None:
        return Parsed(InstanceStorage(type=storage), defaulted=True)

    size_mb = int(match.group("size"))
    unit = match.group("unit") or ""
    if unit.lower() == "gb":
        size_mb *= 1000

    return Parsed(
        InstanceStorage(
            amount=parse_int(match.group("multiplier") or "", 1).value,
            size_mb=size_mb,
            type=match.group("type"),
        )
    )


def parse_network_performance(performance: str) -> Parsed[NetworkPerformance]:
    """Parse network or EBS throughput descriptions into a Gbps range.

    Handles descriptive tiers ("Low", "High", "Low to Moderate") and numeric
    forms ("10 Gigabit", "Up to 25 Gigabit", "750 Megabit"). Unrecognized
    units and malformed values produce an ``UNPARSEABLE`` range that keeps
    the description, flagged as defaulted.
    """
    description = performance.lower()

    if description in ("", "na"):
        return Parsed(NetworkPerformance(), defaulted=description == "")

    tier = NETWORK_TIERS.get(description)
    if tier is not None:
        return Parsed(
            NetworkPerformance(
                unit=GBPS, min=tier[0], max=tier[1], description=description
            )
        )

    unparseable = NetworkPerformance(
        min=UNPARSEABLE, max=UNPARSEABLE, description=description
    )

    parts = description.split(" ")
    if len(parts) < 2:
        return Parsed(unparseable, defaulted=True)

    magnitude = parse_float(parts[-2], UNPARSEABLE)
    if magnitude.defaulted:
        return Parsed(unparseable, defaulted=True)

    unit = parts[-1]
    if unit in MEGABIT_UNITS:
        scale = 1000.0
    elif unit in GIGABIT_UNITS:
        scale = 1.0
    else:
        return Parsed(unparseable, defaulted=True)

    maximum = magnitude.value / scale
    minimum = 0.0 if parts[0] == "up" and parts[1] == "to" else maximum
    return Parsed(
        NetworkPerformance(unit=GBPS, min=minimum, max=maximum, description=description)
    )


def _has_number_noise(value: str) -> bool:
    return not value.isascii() or value != value.strip() or "_" in value

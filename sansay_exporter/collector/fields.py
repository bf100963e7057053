# collector/fields.py
"""
By-name access to record attributes using the device's wire field names.

The wire vocabulary is upper-camel (`TrunkId`, `NumOrig`) but the device is
not consistent about the first letter, so a leading lowercase letter is
upper-cased before lookup (`numOrig` -> `NumOrig`). Each record dataclass
declares its wire name in the field metadata; the lookup table is built once
per class.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Tuple

from ..exceptions import FieldError, FieldErrorKind

GROUP_FQDN = "Group"


def _wire(name: str, default: str = "") -> Any:
    return field(default=default, metadata={"wire": name})


@dataclass
class TrunkRecord:
    """One row of XBResourceRealTimeStatList."""

    trunk_id: str = _wire("TrunkId")
    alias: str = _wire("Alias")
    fqdn: str = _wire("Fqdn")
    num_orig: str = _wire("NumOrig")
    num_term: str = _wire("NumTerm")
    cps: str = _wire("Cps")
    num_peak: str = _wire("NumPeak")
    total_clz: str = _wire("TotalCLZ")
    num_clz_cps: str = _wire("NumCLZCps")
    total_limit: str = _wire("TotalLimit")
    cps_limit: str = _wire("CpsLimit")

    @property
    def is_group(self) -> bool:
        return self.fqdn == GROUP_FQDN


# counters exported per trunk group, in emission order
TRUNK_COUNTERS: Tuple[str, ...] = (
    "NumOrig",
    "NumTerm",
    "Cps",
    "NumPeak",
    "TotalCLZ",
    "NumCLZCps",
    "TotalLimit",
    "CpsLimit",
)


@lru_cache(maxsize=None)
def _field_table(cls: type) -> Dict[str, dataclasses.Field]:
    """Wire name -> dataclass field, for every field that declares one."""
    return {f.metadata["wire"]: f for f in dataclasses.fields(cls) if "wire" in f.metadata}


def _lookup(record: Any, name: str) -> dataclasses.Field:
    wire = name[:1].upper() + name[1:]
    f = _field_table(type(record)).get(wire)
    if f is None:
        raise FieldError(FieldErrorKind.NOT_FOUND, wire)
    # annotations are strings under `from __future__ import annotations`
    if f.type not in (str, "str"):
        raise FieldError(FieldErrorKind.WRONG_TYPE, wire)
    return f


def set_field(record: Any, name: str, value: str) -> None:
    """Assign <value> to the attribute whose wire name matches <name>."""
    f = _lookup(record, name)
    try:
        setattr(record, f.name, value)
    except dataclasses.FrozenInstanceError as exc:
        raise FieldError(FieldErrorKind.NOT_SETTABLE, f.metadata["wire"]) from exc


def get_field(record: Any, name: str) -> str:
    """Current value of the attribute whose wire name matches <name>."""
    return getattr(record, _lookup(record, name).name)

"""Compiled-in severity weights for dangerous routines and pattern categories."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        "SetFunction": 40,
        "Supervisor": 20,
        "Forbid": 20,
        "Permit": 20,
        "AddIntServer": 30,
        "SetIntVector": 35,
        "SuperState": 40,
        "ExecBase": 25,
        "ChipMem": 30,
        "ROMRef": 25,
        "VectorPatch": 35,
        "TCBAccess": 30,
        "ListManip": 25,
        "IntLevel": 35,
        "VBRManip": 40,
        "SelfMod": 45,
    }
)
"""Name -> severity. Library calls only score when their resolved name is here."""


def weight_for(name: str) -> int | None:
    """Return the severity for ``name`` or ``None`` when it is not weighted."""

    return WEIGHTS.get(name)

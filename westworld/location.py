from __future__ import annotations

from enum import StrEnum


class Location(StrEnum):
    goldmine = "goldmine"
    bank = "bank"
    shack = "shack"
    saloon = "saloon"

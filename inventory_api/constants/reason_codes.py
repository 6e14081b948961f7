# inventory_api/constants/reason_codes.py

from enum import Enum


class ReasonCode(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"
    ADJUSTMENT = "adjustment"
    DAMAGE = "damage"


REASON_CODE_VALUES = tuple(code.value for code in ReasonCode)

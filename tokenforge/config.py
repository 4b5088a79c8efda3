"""
Protocol constants and chain settings.

Environment Variables:
    TOKENFORGE_GENESIS_TIME: Genesis block timestamp - default: 1700000000
    TOKENFORGE_ACCOUNT_COUNT: Number of funded accounts - default: 10
    TOKENFORGE_ACCOUNT_BALANCE: Native balance per account (wei) - default: 10000 ether
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

ETHER = 10**18
DAY = 86400
WEEK = 7 * DAY

# ReflectionToken
DECIMALS = 9
TOTAL_SUPPLY = 1_000_000_000 * 10**6 * 10**DECIMALS
MAX_UINT256 = 2**256 - 1
MAX_FEE_PERCENT = 15
LAUNCH_WINDOW = WEEK

# Timelock
MINIMUM_DELAY = DAY
MAXIMUM_DELAY = 30 * DAY
GRACE_PERIOD = 14 * DAY

# ReflectionTokenFactory
MIN_LIQUIDITY_TIMELOCK_DELAY = 15724800  # 26 weeks

# AMM
MINIMUM_LIQUIDITY = 1000
SWAP_FEE_NUMERATOR = 9975
SWAP_FEE_DENOMINATOR = 10000


class ChainSettings(BaseModel):
    """Genesis parameters for a simulated chain."""

    genesis_time: int = Field(default=1_700_000_000, ge=0)
    account_count: int = Field(default=10, ge=1)
    account_balance: int = Field(default=10_000 * ETHER, ge=0)

    @classmethod
    def from_env(cls) -> "ChainSettings":
        values = {}
        for field_name, key in (
            ("genesis_time", "TOKENFORGE_GENESIS_TIME"),
            ("account_count", "TOKENFORGE_ACCOUNT_COUNT"),
            ("account_balance", "TOKENFORGE_ACCOUNT_BALANCE"),
        ):
            raw = _env_int(key)
            if raw is not None:
                values[field_name] = raw
        return cls(**values)


def _env_int(key: str) -> Optional[int]:
    val = os.getenv(key)
    if not val:
        return None
    try:
        return int(val)
    except ValueError:
        return None

"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class EventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    RESOLVED = "RESOLVED"


class BetStatus(str, Enum):
    ACTIVE = "ACTIVE"
    WON = "WON"
    LOST = "LOST"


class LedgerEntryType(str, Enum):
    # Wagering
    BET_PLACED = "BET_PLACED"
    BET_WON = "BET_WON"
    # Manual adjustments from the admin surface
    ADMIN_GRANT = "ADMIN_GRANT"
    ADMIN_DEDUCT = "ADMIN_DEDUCT"


class ReferenceType(str, Enum):
    BET = "BET"
    ADMIN = "ADMIN"


class LeaderboardType(str, Enum):
    POINTS = "points"
    WINS = "wins"
    WINNINGS = "winnings"
    MONTHLY = "monthly"

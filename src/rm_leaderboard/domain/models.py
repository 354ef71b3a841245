"""Domain models for rm_leaderboard."""

from dataclasses import dataclass


@dataclass
class LeaderboardRow:
    user_id: str
    username: str
    points: int
    total_bets: int
    wins: int
    winnings: int   # sum of actual_winnings over won bets in scope
    wagered: int    # sum of stakes in scope

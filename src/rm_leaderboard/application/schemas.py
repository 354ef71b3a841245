"""Pydantic schemas for rm_leaderboard responses."""

from pydantic import BaseModel


class LeaderboardEntryOut(BaseModel):
    rank: int
    user_id: str
    username: str
    points: int
    formatted_points: str
    total_bets: int
    wins: int
    winnings: int
    formatted_winnings: str
    win_rate: float   # percent, one decimal
    wagered: int
    profit: int       # winnings - wagered


class LeaderboardResponse(BaseModel):
    type: str
    period: str | None = None   # e.g. "2026-10" for the monthly board
    items: list[LeaderboardEntryOut]

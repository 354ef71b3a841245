"""In-memory ledger fakes for service-level tests.

LedgerWorld stands in for the AsyncSession: services call commit() and
rollback() on it, and rollback restores the state captured at the last
commit. The fake repositories mirror the SQL semantics of the real ones
(conditional debit, partial unique index on ACTIVE bets, row-level data
only visible through the world).
"""

import copy
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from src.rm_account.domain.models import Account, LedgerEntry, Reconciliation
from src.rm_catalog.domain.models import Event, EventOption, EventSummary
from src.rm_common.enums import EventStatus
from src.rm_common.errors import AccountNotFoundError, InsufficientFundsError, InvalidAmountError
from src.rm_wager.domain.models import Bet, BetHistoryItem

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class LedgerWorld:
    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.ledger: list[LedgerEntry] = []
        self.events: dict[str, Event] = {}
        self.bets: dict[str, Bet] = {}
        self.commits = 0
        self.rollbacks = 0
        self._snapshot = self._capture()

    def _capture(self) -> tuple:
        return copy.deepcopy((self.accounts, self.ledger, self.events, self.bets))

    async def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._capture()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self.accounts, self.ledger, self.events, self.bets = copy.deepcopy(self._snapshot)

    # -- seeding helpers ---------------------------------------------------

    def add_account(self, user_id: str, balance: int) -> Account:
        account = Account(user_id=user_id, balance=balance, starting_balance=balance, version=0)
        self.accounts[user_id] = account
        self._snapshot = self._capture()
        return account

    def add_event(
        self,
        event_id: str = "EVT-1",
        odds: tuple[str, ...] = ("2.50", "1.50"),
        min_stake: int = 10,
        max_stake: int = 1000,
        status: str = EventStatus.ACTIVE.value,
        end_time: datetime | None = None,
    ) -> Event:
        event = Event(
            id=event_id,
            title="Kollegah vs. Farid Bang",
            description="Who wins the battle?",
            category="battle",
            start_time=NOW - timedelta(days=1),
            end_time=end_time or NOW + timedelta(days=6),
            min_stake=min_stake,
            max_stake=max_stake,
            status=status,
            options=[
                EventOption(
                    id=f"{event_id}-OPT-{i}",
                    event_id=event_id,
                    label=f"Option {i}",
                    odds=Decimal(o),
                    position=i,
                )
                for i, o in enumerate(odds)
            ],
        )
        self.events[event_id] = event
        self._snapshot = self._capture()
        return event

    # -- assertions helpers ------------------------------------------------

    def balance(self, user_id: str) -> int:
        return self.accounts[user_id].balance

    def entries_for(self, user_id: str) -> list[LedgerEntry]:
        return [e for e in self.ledger if e.user_id == user_id]

    def is_reconciled(self, user_id: str) -> bool:
        account = self.accounts[user_id]
        return account.starting_balance + sum(e.amount for e in self.entries_for(user_id)) == account.balance


class FakeAccountRepository:
    def __init__(self, world: LedgerWorld) -> None:
        self.world = world

    async def get_account(self, db, user_id):  # type: ignore[no-untyped-def]
        account = self.world.accounts.get(user_id)
        return copy.copy(account) if account else None

    async def get_account_for_update(self, db, user_id):  # type: ignore[no-untyped-def]
        return await self.get_account(db, user_id)

    async def create_account(self, db, user_id, starting_balance):  # type: ignore[no-untyped-def]
        account = Account(user_id, starting_balance, starting_balance, 0)
        self.world.accounts[user_id] = account
        return copy.copy(account)

    async def credit(self, db, user_id, amount, entry_type, description, reference_type=None, reference_id=None):  # type: ignore[no-untyped-def]
        return self._apply(user_id, amount, entry_type, description, reference_type, reference_id)

    async def debit(self, db, user_id, amount, entry_type, description, reference_type=None, reference_id=None):  # type: ignore[no-untyped-def]
        return self._apply(user_id, -amount, entry_type, description, reference_type, reference_id)

    def _apply(self, user_id, delta, entry_type, description, reference_type, reference_id):  # type: ignore[no-untyped-def]
        if delta == 0 or isinstance(delta, bool):
            raise InvalidAmountError(delta)
        account = self.world.accounts.get(user_id)
        if account is None:
            raise AccountNotFoundError(user_id)
        if account.balance + delta < 0:
            raise InsufficientFundsError(-delta, account.balance)
        account.balance += delta
        account.version += 1
        entry = LedgerEntry(
            id=len(self.world.ledger) + 1,
            user_id=user_id,
            entry_type=entry_type,
            amount=delta,
            balance_after=account.balance,
            reference_type=reference_type,
            reference_id=reference_id,
            description=description,
        )
        self.world.ledger.append(entry)
        return copy.copy(account), entry

    async def list_ledger_entries(self, db, user_id, cursor_id, limit, entry_type):  # type: ignore[no-untyped-def]
        entries = sorted(self.world.entries_for(user_id), key=lambda e: e.id, reverse=True)
        entries = [
            e for e in entries
            if (cursor_id is None or e.id < cursor_id) and (entry_type is None or e.entry_type == entry_type)
        ]
        return entries[:limit]

    async def get_reconciliation(self, db, user_id):  # type: ignore[no-untyped-def]
        account = self.world.accounts.get(user_id)
        if account is None:
            return None
        ledger_sum = sum(e.amount for e in self.world.entries_for(user_id))
        return Reconciliation(user_id, account.starting_balance, ledger_sum, account.balance)


class FakeEventRepository:
    def __init__(self, world: LedgerWorld) -> None:
        self.world = world
        self.locks: list[tuple[str, str | None]] = []

    async def insert_event(self, db, event):  # type: ignore[no-untyped-def]
        self.world.events[event.id] = copy.deepcopy(event)

    async def get_event(self, db, event_id, lock=None):  # type: ignore[no-untyped-def]
        self.locks.append((event_id, lock))
        event = self.world.events.get(event_id)
        return copy.deepcopy(event) if event else None

    async def list_events(self, db, status, category, limit):  # type: ignore[no-untyped-def]
        events = [
            e for e in self.world.events.values()
            if (status is None or e.status == status) and (category is None or e.category == category)
        ]
        events.sort(key=lambda e: e.start_time)
        return [
            EventSummary(copy.deepcopy(e), *self._stats(e.id)) for e in events[:limit]
        ]

    async def get_event_stats(self, db, event_id):  # type: ignore[no-untyped-def]
        return self._stats(event_id)

    def _stats(self, event_id: str) -> tuple[int, int]:
        bets = [b for b in self.world.bets.values() if b.event_id == event_id]
        return len(bets), sum(b.amount for b in bets)

    async def update_status(self, db, event_id, status):  # type: ignore[no-untyped-def]
        self.world.events[event_id].status = status

    async def count_bets(self, db, event_id):  # type: ignore[no-untyped-def]
        return self._stats(event_id)[0]

    async def delete_event(self, db, event_id):  # type: ignore[no-untyped-def]
        del self.world.events[event_id]

    async def mark_resolved(self, db, event_id, winning_option_id, resolved_at):  # type: ignore[no-untyped-def]
        event = self.world.events[event_id]
        event.status = EventStatus.RESOLVED.value
        event.winning_option_id = winning_option_id
        event.resolved_at = resolved_at
        for option in event.options:
            option.is_winning = option.id == winning_option_id


class FakeBetRepository:
    def __init__(self, world: LedgerWorld) -> None:
        self.world = world

    async def insert_bet(self, db, bet):  # type: ignore[no-untyped-def]
        for existing in self.world.bets.values():
            if existing.is_active and (existing.user_id, existing.event_id) == (bet.user_id, bet.event_id):
                raise IntegrityError("INSERT INTO bets", {}, Exception("uq_bets_active_user_event"))
        self.world.bets[bet.id] = copy.deepcopy(bet)
        return copy.deepcopy(bet)

    async def get_active_bet(self, db, user_id, event_id):  # type: ignore[no-untyped-def]
        for bet in self.world.bets.values():
            if bet.is_active and bet.user_id == user_id and bet.event_id == event_id:
                return copy.deepcopy(bet)
        return None

    async def list_user_bets(self, db, user_id, status, cursor_ts, cursor_id, limit):  # type: ignore[no-untyped-def]
        bets = [
            b for b in self.world.bets.values()
            if b.user_id == user_id and (status is None or b.status == status)
        ]
        bets.sort(key=lambda b: (b.placed_at, b.id), reverse=True)
        if cursor_ts is not None:
            bets = [b for b in bets if (b.placed_at, b.id) < (cursor_ts, cursor_id)]
        items = []
        for bet in bets[:limit]:
            event = self.world.events[bet.event_id]
            option = event.option(bet.option_id)
            items.append(BetHistoryItem(copy.deepcopy(bet), event.title, event.status, option.label))
        return items

    async def list_active_bets_for_update(self, db, event_id):  # type: ignore[no-untyped-def]
        return [
            copy.deepcopy(b) for b in self.world.bets.values()
            if b.event_id == event_id and b.is_active
        ]

    async def mark_won(self, db, bet_id, winnings, resolved_at):  # type: ignore[no-untyped-def]
        bet = self.world.bets[bet_id]
        bet.status, bet.actual_winnings, bet.resolved_at = "WON", winnings, resolved_at

    async def mark_lost(self, db, bet_id, resolved_at):  # type: ignore[no-untyped-def]
        bet = self.world.bets[bet_id]
        bet.status, bet.actual_winnings, bet.resolved_at = "LOST", 0, resolved_at


class Repos:
    def __init__(self, world: LedgerWorld) -> None:
        self.accounts = FakeAccountRepository(world)
        self.events = FakeEventRepository(world)
        self.bets = FakeBetRepository(world)


"""Personal betting ledger kept in a local JSON file."""

from __future__ import annotations

import json
import logging
import math
import os
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, List, Literal, Optional

from reftrends.shared.enums import BetResult
from reftrends.shared.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

RESULTS = tuple(r.value for r in BetResult)

MARKET_OPTIONS = (
    "Over 2.5 Cards",
    "Over 3.5 Cards",
    "Over 4.5 Cards",
    "Under 2.5 Cards",
    "Under 3.5 Cards",
    "Under 4.5 Cards",
    "Both Teams Carded",
    "Red Card in Match",
    "Home Team Over 1.5 Cards",
    "Away Team Over 1.5 Cards",
    "Other",
)
DEFAULT_MARKET = "Over 3.5 Cards"

# ledgers exported by the browser app use camelCase
CAMEL_KEYS = {"potentialWin": "potential_win", "actualWin": "actual_win"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Bet:
    id: str
    match: str
    market: str
    odds: float
    stake: float
    result: str = "pending"
    potential_win: float = 0.0
    actual_win: float = 0.0
    date: str = ""
    notes: Optional[str] = None

    @property
    def placed_at(self) -> datetime:
        return _parse_date(self.date)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Bet"]:
        """Build a bet from an imported mapping, or None if it is malformed."""
        if not isinstance(data, dict):
            return None
        data = {CAMEL_KEYS.get(k, k): v for k, v in data.items()}
        numbers = ("odds", "stake", "potential_win", "actual_win")
        strings = ("id", "match", "market", "date")
        if any(not isinstance(data.get(k), str) for k in strings):
            return None
        if any(isinstance(data.get(k), bool) or not isinstance(data.get(k), (int, float)) for k in numbers):
            return None
        if not all(math.isfinite(data[k]) for k in numbers):
            return None
        if data.get("result") not in RESULTS:
            return None
        try:
            _parse_date(data["date"])
        except ValueError:
            return None
        notes = data.get("notes")
        return cls(
            id=data["id"],
            match=data["match"],
            market=data["market"],
            odds=float(data["odds"]),
            stake=float(data["stake"]),
            result=data["result"],
            potential_win=float(data["potential_win"]),
            actual_win=float(data["actual_win"]),
            date=data["date"],
            notes=notes if isinstance(notes, str) else None,
        )


@dataclass
class CurrentStreak:
    type: Literal["win", "lose"] = "win"
    count: int = 0


@dataclass
class BetStats:
    total_bets: int = 0
    won_bets: int = 0
    lost_bets: int = 0
    pending_bets: int = 0
    void_bets: int = 0
    win_rate: float = 0.0
    total_staked: float = 0.0
    total_returns: float = 0.0
    profit: float = 0.0
    roi: float = 0.0
    avg_odds: float = 0.0
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    current_streak: CurrentStreak = field(default_factory=CurrentStreak)


class BetTracker:
    """
    Bets kept newest first in a JSON array on disk.

    Mutating calls change the in-memory list only; call save() to persist.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.bets: List[Bet] = []

    def load(self) -> List[Bet]:
        if not os.path.exists(self.path):
            self.bets = []
            return self.bets
        with open(self.path, "r", encoding="utf-8") as f:
            raw = f.read()
        self.bets = self._parse(raw) if raw.strip() else []
        return self.bets

    def save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(self.export_json())
        os.replace(tmp, self.path)

    def get(self, bet_id: str) -> Bet:
        for bet in self.bets:
            if bet.id == bet_id:
                return bet
        raise NotFoundError(f"bet {bet_id} not found")

    def add_bet(
        self,
        match: str,
        odds: float,
        stake: float,
        *,
        market: str = DEFAULT_MARKET,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Bet:
        match = (match or "").strip()
        if not match:
            raise ValidationError("Match name is required")
        if odds is None or not math.isfinite(odds) or odds <= 1:
            raise ValidationError("Odds must be greater than 1.00")
        if stake is None or not math.isfinite(stake) or stake <= 0:
            raise ValidationError("Stake must be greater than 0")
        notes = notes.strip() if notes else None
        bet = Bet(
            id=uuid.uuid4().hex,
            match=match,
            market=market,
            odds=float(odds),
            stake=float(stake),
            potential_win=float(stake) * float(odds),
            date=(now or _now()).isoformat(),
            notes=notes or None,
        )
        self.bets.insert(0, bet)
        return bet

    def settle(self, bet_id: str, result: str) -> Bet:
        if result not in RESULTS:
            raise ValidationError(f"unknown result {result!r}")
        bet = self.get(bet_id)
        bet.result = result
        if result == "won":
            bet.actual_win = bet.stake * bet.odds
        elif result == "void":
            bet.actual_win = bet.stake
        else:
            bet.actual_win = 0.0
        return bet

    def delete_bet(self, bet_id: str) -> None:
        bet = self.get(bet_id)
        self.bets.remove(bet)

    def filter(
        self,
        result: Optional[str] = None,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Bet]:
        """Bets matching the result and age filters, newest first."""
        selected = list(self.bets)
        if result:
            selected = [b for b in selected if b.result == result]
        if days:
            cutoff = (now or _now()) - timedelta(days=days)
            if cutoff.tzinfo is None:
                cutoff = cutoff.replace(tzinfo=timezone.utc)
            selected = [b for b in selected if b.placed_at >= cutoff]
        return sorted(selected, key=lambda b: b.placed_at, reverse=True)

    def stats(self) -> BetStats:
        won = [b for b in self.bets if b.result == "won"]
        lost = [b for b in self.bets if b.result == "lost"]
        void = [b for b in self.bets if b.result == "void"]
        pending = [b for b in self.bets if b.result == "pending"]
        completed = [b for b in self.bets if b.result in ("won", "lost", "void")]
        decided = len(won) + len(lost)

        total_staked = sum(b.stake for b in completed)
        total_returns = sum(b.actual_win for b in won) + sum(b.actual_win for b in void)
        profit = total_returns - total_staked

        out = BetStats(
            total_bets=len(self.bets),
            won_bets=len(won),
            lost_bets=len(lost),
            pending_bets=len(pending),
            void_bets=len(void),
            win_rate=len(won) / decided * 100 if decided else 0.0,
            total_staked=total_staked,
            total_returns=total_returns,
            profit=profit,
            roi=profit / total_staked * 100 if total_staked > 0 else 0.0,
            avg_odds=sum(b.odds for b in completed) / len(completed) if completed else 0.0,
        )

        win_run = lose_run = 0
        last: Optional[str] = None
        for bet in sorted((b for b in won + lost), key=lambda b: b.placed_at):
            if bet.result == "won":
                win_run += 1
                lose_run = 0
                out.longest_win_streak = max(out.longest_win_streak, win_run)
            else:
                lose_run += 1
                win_run = 0
                out.longest_lose_streak = max(out.longest_lose_streak, lose_run)
            last = bet.result
        if last == "won":
            out.current_streak = CurrentStreak("win", win_run)
        elif last == "lost":
            out.current_streak = CurrentStreak("lose", lose_run)
        return out

    def export_json(self) -> str:
        return json.dumps([asdict(b) for b in self.bets], indent=2)

    def import_json(self, text: str) -> int:
        """Replace the ledger with the valid bets in a JSON array.

        Returns the number imported. Malformed entries are skipped; a payload
        that is not an array, or that has no valid entry at all, is rejected.
        """
        bets = self._parse(text)
        self.bets = bets
        return len(bets)

    @staticmethod
    def _parse(text: str) -> List[Bet]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"invalid bet history: {exc}") from exc
        if not isinstance(data, list):
            raise ValidationError("invalid bet history: expected an array")
        bets = [bet for bet in (Bet.from_dict(item) for item in data) if bet is not None]
        if data and not bets:
            raise ValidationError("invalid bet history: no valid bets found")
        if len(bets) < len(data):
            logger.warning({"bet_import": {"imported": len(bets), "skipped": len(data) - len(bets)}})
        return bets


__all__ = [
    "Bet",
    "BetStats",
    "BetTracker",
    "CurrentStreak",
    "DEFAULT_MARKET",
    "MARKET_OPTIONS",
    "RESULTS",
]

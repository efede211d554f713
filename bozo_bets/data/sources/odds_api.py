"""
The Odds API client for NFL game lines.

Provides access to:
- Pre-game moneylines, spreads and totals
- A monthly request ledger kept in the ``api_usage`` table

The free tier allows 500 requests per month, so every fetch is counted
and refused once the month's allowance is spent.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import aiohttp
from sqlalchemy import select
from sqlalchemy.orm import Session

from bozo_bets.config.constants import ODDS_MARKET_LABELS
from bozo_bets.database.models import ApiUsage, utcnow
from bozo_bets.notifications.email import quota_warning_email, send_email
from bozo_bets.schedule.nfl_weeks import get_season_kickoff

from .base import (
    BaseDataSource,
    DataSourceError,
    DataSourceHealth,
    DataSourceStatus,
    InvalidApiKeyError,
    RateLimitError,
)


@dataclass
class UsageCheck:
    """Result of asking the ledger for permission to call the API."""

    allowed: bool
    reason: Optional[str] = None
    requests_used: int = 0


class OddsAPIClient(BaseDataSource):
    """
    Async client for The Odds API.

    Handles:
    - Async HTTP requests with connection pooling
    - Rate limiting between requests
    - Credit tracking via response headers
    - The monthly request ledger and the admin warning near the limit
    """

    BASE_URL = "https://api.the-odds-api.com/v4"
    SPORT_KEY = "americanfootball_nfl"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        enabled: bool = True,
        regions: list[str] | None = None,
        markets: list[str] | None = None,
        monthly_limit: int = 500,
        warning_threshold: int = 400,
        admin_email: str | None = None,
    ):
        super().__init__(source_name="odds_api", enabled=enabled and bool(api_key))

        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.regions = regions or ["us"]
        self.markets = markets or list(ODDS_MARKET_LABELS)
        self.monthly_limit = monthly_limit
        self.warning_threshold = warning_threshold
        self.admin_email = admin_email

        # Credits reported by the provider
        self._remaining_credits: int | None = None
        self._used_credits: int | None = None
        self._last_credit_check: datetime | None = None

        # Months for which the admin was already warned
        self._warned_months: set[str] = set()

        # Rate limiting
        self._request_semaphore = asyncio.Semaphore(5)
        self._last_request_time: datetime | None = None
        self._min_request_interval = 0.2

        self._session: aiohttp.ClientSession | None = None

        if not api_key:
            self.logger.warning("ODDS_API_KEY is empty, weekly props come from the database only")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=30)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def health_check(self) -> DataSourceHealth:
        """Probe the sports endpoint, which costs no credits."""
        if not self.enabled:
            return DataSourceHealth(
                self.source_name, DataSourceStatus.DISABLED, error_message="API key not configured"
            )

        try:
            session = await self._get_session()
            async with session.get(
                f"{self.base_url}/sports", params={"apiKey": self.api_key}
            ) as response:
                self._update_credits(response.headers)
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return DataSourceHealth(
                self.source_name, DataSourceStatus.UNHEALTHY, error_message=str(e)
            )

        if status == 200:
            return DataSourceHealth(
                self.source_name, DataSourceStatus.HEALTHY, last_success=datetime.now()
            )
        if status == 401:
            return DataSourceHealth(
                self.source_name, DataSourceStatus.UNHEALTHY, error_message="Invalid API key"
            )
        return DataSourceHealth(
            self.source_name, DataSourceStatus.DEGRADED, error_message=f"HTTP {status}"
        )


    def _update_credits(self, headers) -> None:
        """Update credit tracking from response headers."""
        if "x-requests-remaining" in headers:
            self._remaining_credits = int(float(headers["x-requests-remaining"]))
        if "x-requests-used" in headers:
            self._used_credits = int(float(headers["x-requests-used"]))
        self._last_credit_check = datetime.now()

        self.logger.debug(
            f"API credits - Remaining: {self._remaining_credits}, "
            f"Used: {self._used_credits}"
        )

    async def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        if self._last_request_time:
            elapsed = (datetime.now() - self._last_request_time).total_seconds()
            if elapsed < self._min_request_interval:
                await asyncio.sleep(self._min_request_interval - elapsed)
        self._last_request_time = datetime.now()

    async def _make_request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict | list:
        """
        GET ``endpoint`` with the API key attached.

        Raises:
            InvalidApiKeyError: The provider answered 401
            RateLimitError: The provider answered 429
            DataSourceError: Any other HTTP or connection failure. 422 means
                bad parameters and is not retried
        """
        if not self.enabled:
            raise DataSourceError(
                "Odds API not enabled", self.source_name, retry_allowed=False
            )

        query = {"apiKey": self.api_key, **(params or {})}

        async with self._request_semaphore:
            await self._rate_limit()
            session = await self._get_session()

            try:
                async with session.get(f"{self.base_url}/{endpoint}", params=query) as response:
                    self._update_credits(response.headers)
                    if response.status == 200:
                        return await response.json()
                    if response.status == 401:
                        raise InvalidApiKeyError(self.source_name)
                    if response.status == 429:
                        raise RateLimitError(
                            self.source_name,
                            retry_after_seconds=int(response.headers.get("Retry-After", "60")),
                        )
                    body = await response.text()
            except aiohttp.ClientError as e:
                raise DataSourceError(
                    f"Could not reach {self.source_name}: {e}", self.source_name, original_error=e
                )

        raise DataSourceError(
            f"{endpoint} answered {response.status}: {body}",
            self.source_name,
            retry_allowed=response.status != 422,
        )


    # =========================================================================
    # Monthly usage ledger
    # =========================================================================

    @staticmethod
    def _month(now: Optional[datetime] = None) -> str:
        return (now or utcnow()).strftime("%Y-%m")

    def _load_usage(self, db: Session, now: Optional[datetime] = None) -> ApiUsage:
        month = self._month(now)
        usage = db.scalar(select(ApiUsage).where(ApiUsage.month == month))
        if usage is None:
            usage = ApiUsage(month=month, requests_used=0, last_reset=now or utcnow())
            db.add(usage)
            db.commit()
        return usage

    def can_make_request(self, db: Session, now: Optional[datetime] = None) -> UsageCheck:
        """
        Check the month's request count against the limit.

        Crossing the warning threshold emails the admin once per month.
        """
        usage = self._load_usage(db, now)

        if usage.requests_used >= self.monthly_limit:
            return UsageCheck(
                allowed=False,
                reason=f"Monthly limit of {self.monthly_limit} requests reached",
                requests_used=usage.requests_used,
            )

        if usage.requests_used >= self.warning_threshold:
            self.logger.warning(
                f"Odds API usage at {usage.requests_used}/{self.monthly_limit} "
                f"for {usage.month}"
            )
            self._send_admin_warning(usage)

        return UsageCheck(allowed=True, requests_used=usage.requests_used)

    def _send_admin_warning(self, usage: ApiUsage) -> None:
        if not self.admin_email or usage.month in self._warned_months:
            return
        sent = send_email(
            quota_warning_email(
                self.admin_email,
                requests_used=usage.requests_used,
                monthly_limit=self.monthly_limit,
                warning_threshold=self.warning_threshold,
                month=usage.month,
            )
        )
        if sent:
            self._warned_months.add(usage.month)
            self.logger.info("Admin warning sent for API request limit")

    def increment_usage(self, db: Session, now: Optional[datetime] = None) -> int:
        usage = self._load_usage(db, now)
        usage.requests_used += 1
        db.commit()
        return usage.requests_used

    def get_usage_stats(self, db: Session, now: Optional[datetime] = None) -> dict:
        usage = self._load_usage(db, now)
        return {
            "current_month": usage.month,
            "requests_used": usage.requests_used,
            "requests_remaining": max(self.monthly_limit - usage.requests_used, 0),
            "warning_threshold": self.warning_threshold,
            "monthly_limit": self.monthly_limit,
        }

    def get_credit_status(self) -> dict:
        """Credits as last reported by the provider's response headers."""
        return {
            "remaining": self._remaining_credits,
            "used": self._used_credits,
            "last_check": self._last_credit_check,
        }

    # =========================================================================
    # Odds
    # =========================================================================

    async def get_nfl_odds(self, odds_format: str = "american") -> list[dict]:
        """Raw upcoming NFL games with bookmaker markets."""
        params = {
            "regions": ",".join(self.regions),
            "markets": ",".join(self.markets),
            "oddsFormat": odds_format,
        }

        self.logger.info(f"Fetching NFL odds for markets: {self.markets}")

        data = await self.call_with_retry(
            lambda: self._make_request(f"sports/{self.SPORT_KEY}/odds", params)
        )

        self.logger.info(f"Received odds for {len(data)} games")
        return data

    async def fetch_nfl_odds(
        self, db: Session, week: int, season: int, now: Optional[datetime] = None
    ) -> list[dict[str, Any]]:
        """
        Fetch the week's game lines as prop records.

        Raises:
            DataSourceError: Quota spent, or the request failed
        """
        check = self.can_make_request(db, now)
        if not check.allowed:
            raise DataSourceError(
                check.reason or "Cannot make API request",
                self.source_name,
                retry_allowed=False,
            )

        games = await self.get_nfl_odds()
        self.increment_usage(db, now)
        return self.process_odds_data(games, week, season)

    @staticmethod
    def _parse_commence_time(value: str) -> datetime:
        """ISO timestamp to naive UTC."""
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    @staticmethod
    def is_game_in_week(game_time: datetime, week: int, season: int) -> bool:
        kickoff = get_season_kickoff(season)
        week_start = datetime(kickoff.year, kickoff.month, kickoff.day) + timedelta(
            days=(week - 1) * 7
        )
        return week_start <= game_time < week_start + timedelta(days=7)

    @classmethod
    def process_odds_data(
        cls, games: list[dict], week: int, season: int
    ) -> list[dict[str, Any]]:
        """
        Flatten games into one record per bookmaker market.

        Only games starting in the week are kept, and markets with fewer
        than two outcomes or an unknown key are skipped.
        """
        records: list[dict[str, Any]] = []

        for game in games:
            game_time = cls._parse_commence_time(game["commence_time"])
            if not cls.is_game_in_week(game_time, week, season):
                continue

            home = game["home_team"]
            away = game["away_team"]

            for bookmaker in game.get("bookmakers", []):
                for market in bookmaker.get("markets", []):
                    label = ODDS_MARKET_LABELS.get(market.get("key"))
                    outcomes = market.get("outcomes", [])
                    if label is None or len(outcomes) < 2:
                        continue

                    first, second = outcomes[0], outcomes[1]
                    line = 0.0 if market["key"] == "h2h" else float(first.get("point") or 0)

                    records.append(
                        {
                            "fanduel_id": f"{bookmaker['title']}-{market['key']}-{home}-{away}",
                            "player": f"{home} vs {away}",
                            "team": home,
                            "prop": label,
                            "line": line,
                            "odds": int(first["price"]),
                            "over_odds": int(first["price"]),
                            "under_odds": int(second["price"]),
                            "bookmaker": bookmaker["title"],
                            "week": week,
                            "season": season,
                            "game_time": game_time,
                        }
                    )

        return records


class OddsAPIClientFactory:
    """Factory for creating OddsAPIClient instances."""

    @staticmethod
    def create_from_settings(settings) -> OddsAPIClient:
        return OddsAPIClient(
            api_key=settings.odds_api.api_key or "",
            base_url=settings.odds_api.base_url,
            enabled=bool(settings.odds_api.api_key),
            regions=settings.odds_api.regions,
            markets=settings.odds_api.markets,
            monthly_limit=settings.odds_api.monthly_limit,
            warning_threshold=settings.odds_api.warning_threshold,
            admin_email=settings.email.admin_address,
        )

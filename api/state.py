"""
Application state management for FastAPI.

Holds shared state across the application:
- Settings
- Database engine and session factory
- Auth manager
- Odds API client and props cache
- Notification service
- Scheduler orchestrator
- Live-update transport
"""

import logging
import traceback
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AppState:
    """
    Centralized application state.

    Initializes and manages lifecycle of all major components.
    """

    def __init__(self, settings: Any = None):
        self.settings = settings
        self.engine = None
        self.session_factory = None
        self.auth = None
        self.odds_client = None
        self.cache = None
        self.notifier = None
        self.scheduler = None
        self.transport = None
        self._initialized = False
        self._init_error: Optional[str] = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        if self._initialized:
            return

        try:
            from bozo_bets.auth import AuthManager
            from bozo_bets.config.settings import get_settings
            from bozo_bets.data.cache.cache_manager import CacheManager
            from bozo_bets.data.sources.odds_api import OddsAPIClientFactory
            from bozo_bets.database.models import init_db
            from bozo_bets.database.session import create_session_factory
            from bozo_bets.notifications import NotificationService

            if self.settings is None:
                self.settings = get_settings()
            logger.info("Settings loaded")

            self.engine = init_db(self.settings.database_url)
            self.session_factory = create_session_factory(self.engine)
            logger.info("Database initialized")

            self.auth = AuthManager(self.settings.auth)
            self.notifier = NotificationService()

            self.odds_client = OddsAPIClientFactory.create_from_settings(self.settings)
            self.cache = CacheManager.create_from_settings(self.settings)
            logger.info(f"Odds API client initialized (enabled: {self.odds_client.enabled})")

            if self.settings.scheduler.enabled:
                from bozo_bets.scheduler import SchedulerOrchestrator

                self.scheduler = SchedulerOrchestrator(
                    self.settings,
                    self.session_factory,
                    odds_client=self.odds_client,
                    cache=self.cache,
                    notifier=self.notifier,
                )
                self.scheduler.start()
                logger.info("Scheduler started")

            if self.settings.transport.enabled:
                await self.initialize_transport()

            self._initialized = True
            logger.info("All components initialized successfully")

        except Exception as e:
            self._init_error = f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
            logger.error(f"Failed to initialize components: {self._init_error}")

    async def initialize_transport(self) -> bool:
        """Start the TCP/UDP transport. Failures are logged, not raised."""
        from bozo_bets.transport import TransportError, get_transport_manager

        manager = get_transport_manager(self.settings.transport)
        try:
            await manager.initialize()
        except TransportError as e:
            logger.warning(f"Transport unavailable: {e}")
            return False

        self.transport = manager
        logger.info("Transport initialized")
        return True

    async def shutdown(self) -> None:
        """Cleanup all components."""
        if self.scheduler:
            try:
                self.scheduler.stop()
                logger.info("Scheduler stopped")
            except Exception as e:
                logger.error(f"Error stopping scheduler: {e}")

        if self.transport is not None:
            from bozo_bets.transport import shutdown_transport

            await shutdown_transport()
            self.transport = None

        if self.odds_client is not None:
            await self.odds_client.close()
        if self.cache is not None:
            await self.cache.close()
        if self.engine is not None:
            self.engine.dispose()

        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if state is fully initialized."""
        return self._initialized

    def get_health_status(self) -> dict:
        """Get health status of all components."""
        status = {
            "initialized": self._initialized,
            "settings": self.settings is not None,
            "database": self.session_factory is not None,
            "odds_api": bool(self.odds_client and self.odds_client.enabled),
            "cache": self.cache is not None,
            "scheduler": self.scheduler is not None,
            "scheduler_running": self.scheduler.is_running if self.scheduler else False,
            "transport": self.transport.status()["initialized"] if self.transport else False,
        }
        if self._init_error:
            status["init_error"] = self._init_error
        return status

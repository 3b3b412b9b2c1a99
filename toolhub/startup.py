"""Application startup validation and service wiring."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text

from toolhub.settings import Settings, settings as default_settings
from toolhub.db import SessionLocal, engine, init_db
from toolhub.services.catalog import CatalogStore
from toolhub.services.persistence import DatabaseBackend, InMemoryBackend, KeyValueBackend
from toolhub.services.preferences import PreferenceStore
from toolhub.services.recommendation import RecommendationEngine
from toolhub.services.similarity import SimilarityEngine
from toolhub.services.trending import CategorySelector, TrendingSelector

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Service objects shared by all requests of one application instance."""

    catalog: CatalogStore
    preferences: PreferenceStore
    recommendations: RecommendationEngine
    similarity: SimilarityEngine
    trending: TrendingSelector
    categories: CategorySelector
    preference_fallbacks: int = 0

    def record_preference_fallback(self, user_id: str, error: Exception) -> None:
        """Count unreadable preference records replaced by defaults."""
        self.preference_fallbacks += 1


def build_services(
    config: Settings,
    catalog: CatalogStore,
    backend: Optional[KeyValueBackend] = None,
) -> Services:
    """
    Wire the catalog, preference store and rankers together.

    Args:
        config: Settings providing limits and ranking weights
        catalog: Loaded catalog
        backend: Preference backend; chosen from PREFERENCES_BACKEND if omitted

    Returns:
        Services bundle
    """
    if backend is None:
        if config.PREFERENCES_BACKEND == "memory":
            backend = InMemoryBackend()
        else:
            backend = DatabaseBackend(SessionLocal)

    preferences = PreferenceStore(
        backend,
        key_prefix=config.PREFERENCES_KEY_PREFIX,
        max_viewed=config.MAX_VIEWED_TOOLS,
        max_searches=config.MAX_SEARCH_HISTORY,
    )
    services = Services(
        catalog=catalog,
        preferences=preferences,
        recommendations=RecommendationEngine(catalog, preferences, config.SCORING),
        similarity=SimilarityEngine(catalog, config.SIMILARITY),
        trending=TrendingSelector(catalog, config.SELECTORS),
        categories=CategorySelector(catalog, config.SELECTORS),
    )
    preferences.on_fallback = services.record_preference_fallback
    return services


def validate_settings(config: Settings) -> None:
    """
    Validate all required settings at startup.

    Raises:
        ValueError: If required settings are missing or invalid
    """
    logger.info(f"Validating settings for ENV={config.ENV}")
    config.validate_required_for_env()
    logger.info("✓ Settings validation passed")


def validate_database() -> None:
    """
    Validate database connection and create missing tables.

    Raises:
        Exception: If database is unreachable
    """
    logger.info("Validating database connection...")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✓ Database connection successful")

        init_db()
        logger.info("✓ Preference tables present")

    except Exception as e:
        logger.error(f"✗ Database validation failed: {e}")
        raise


def run_startup_validation(config: Optional[Settings] = None) -> Services:
    """
    Run all startup validations and build the services.

    Fails fast with clear error messages if any validation fails.

    Raises:
        Exception: If any validation fails
    """
    config = config or default_settings

    logger.info("=" * 60)
    logger.info("Starting application startup validation")
    logger.info("=" * 60)

    try:
        validate_settings(config)

        if config.PREFERENCES_BACKEND == "database":
            validate_database()

        catalog = CatalogStore.from_file(config.CATALOG_PATH)
        logger.info(f"✓ Catalog loaded: {len(catalog)} tools")

        services = build_services(config, catalog)

        logger.info("=" * 60)
        logger.info("✓ All startup validations passed")
        logger.info("=" * 60)
        return services

    except Exception as e:
        logger.error("=" * 60)
        logger.error("✗ Startup validation failed")
        logger.error("=" * 60)
        logger.error(f"Error: {e}")
        logger.error("")
        logger.error("Application will not start until this is resolved.")
        raise

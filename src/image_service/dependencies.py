"""Dependency wiring helpers."""

from fastapi import FastAPI

from .auth.auth_service import ServiceAuthClient
from .config import AppConfig
from .media.asset_cache import AssetCache
from .media.authorization import AuthorizationGuard
from .media.logo_api import router as logo_router
from .media.logo_service import LogoSlotManager
from .media.media_api import router as media_router
from .media.media_service import MediaService
from .media.metadata_aggregate import MetadataAggregateStore
from .media.slot_store import SlotStore
from .media.validation import UploadValidator
from .repositories.media_record_repository import MediaRecordRepository


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    service_auth: ServiceAuthClient | None = None,
) -> None:
    """Build services for one application instance and mount module routers."""
    cache = AssetCache(
        ttl_seconds=config.cache_policy.ttl_seconds,
        check_period_seconds=config.cache_policy.check_period_seconds,
    )
    validator = UploadValidator(config.upload_limits)
    upload_store = SlotStore(config.media_paths.uploads, chunk_size=config.upload_limits.chunk_size_bytes)
    logo_store = SlotStore(config.media_paths.logos, chunk_size=config.upload_limits.chunk_size_bytes)
    aggregates = MetadataAggregateStore(upload_store)
    guard = AuthorizationGuard(
        cache=cache,
        aggregates=aggregates,
        read_through=config.ownership_read_through,
    )
    records = (
        MediaRecordRepository(config.session_factory)
        if config.session_factory is not None
        else None
    )

    media_service = MediaService(
        store=upload_store,
        aggregates=aggregates,
        cache=cache,
        validator=validator,
        guard=guard,
        records=records,
        prune_metadata_on_delete=config.prune_metadata_on_delete,
    )
    logo_manager = LogoSlotManager(store=logo_store, cache=cache, validator=validator)

    app.state.config = config
    app.state.asset_cache = cache
    app.state.media_service = media_service
    app.state.logo_manager = logo_manager
    app.state.service_auth = service_auth or ServiceAuthClient(
        base_url=config.auth_service_url,
        target_service=config.service_name,
        timeout_seconds=config.auth_timeout_seconds,
    )

    app.include_router(media_router)
    app.include_router(logo_router)

import logging

from fastapi import APIRouter, Depends

from exchange_proxy.core.config import Settings
from exchange_proxy.core.errors import StorageError
from exchange_proxy.models import HealthOut
from exchange_proxy.services.rates import RateStore

from .deps import get_app_settings, get_rate_store

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthOut, summary="Liveness and cache status")
def health(
    settings: Settings = Depends(get_app_settings),
    store: RateStore = Depends(get_rate_store),
):
    # Report, don't fail: a broken store should still answer liveness probes.
    try:
        cached = store.read() is not None
    except StorageError as e:
        logger.warning("health check could not read rate store: %s", e.message)
        cached = None
    return HealthOut(version=settings.version, rates_cached=cached)

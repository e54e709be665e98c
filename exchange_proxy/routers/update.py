from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Path

from exchange_proxy.core.config import Settings
from exchange_proxy.core.errors import UnauthorizedError
from exchange_proxy.models import UpdateOut, UpstreamSnapshot
from exchange_proxy.services.rates import RateRefresher, RefreshFailure

from .deps import get_app_settings, get_refresher
from .rates import failure_to_error

"""Manual refresh route guarded by a shared secret.

    - GET /update/{password} -> force an upstream fetch and overwrite the cache

The password is the UPDATE_PASSWORD setting. An empty setting disables the
route (every call is rejected).
"""

router = APIRouter(tags=["update"])
logger = logging.getLogger(__name__)


def require_update_password(
    password: str = Path(..., min_length=1),
    settings: Settings = Depends(get_app_settings),
) -> bool:
    expected = settings.update_password
    if not expected or not hmac.compare_digest(password.encode(), expected.encode()):
        logger.warning("rejected manual update: bad password")
        raise UnauthorizedError()
    return True


@router.get("/update/{password}", response_model=UpdateOut, summary="Force a rate refresh")
def update_rates(
    _: bool = Depends(require_update_password),
    refresher: RateRefresher = Depends(get_refresher),
):
    result = refresher.force_refresh()
    if isinstance(result, RefreshFailure):
        raise failure_to_error(result)
    logger.info("manual update stored %d rates", len(result.table))
    return UpdateOut(data=UpstreamSnapshot(**result.as_envelope()))

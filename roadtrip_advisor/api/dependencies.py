from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Header, HTTPException

from roadtrip_advisor.api.advisor_service import AdvisorBundle
from roadtrip_advisor.core.config import ApiSettings


@lru_cache(maxsize=1)
def get_advisor_bundle() -> AdvisorBundle:
    settings = ApiSettings.from_env()
    return AdvisorBundle(settings)


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Caller identity forwarded by the gateway, if any."""

    return x_user_id or None


def require_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Non authentifié.")
    return x_user_id


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    try:
        yield
    finally:
        if get_advisor_bundle.cache_info().currsize:
            bundle = get_advisor_bundle()
            await bundle.close()

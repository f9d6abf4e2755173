"""Request Dependencies — requester identity and service construction.

Invariants:
    - Requester identity comes from X-User-Id, set by the upstream auth layer
    - Services receive the request-scoped AsyncSession from get_db

Design Decisions:
    - Header over token parsing: authentication is outside this service
"""

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import UserId
from app.infrastructure.database import get_db
from app.services.boost_service import BoostService
from app.services.discovery_service import DiscoveryService
from app.services.vote_service import VoteService


async def get_current_user_id(
    x_user_id: UUID = Header(..., alias="X-User-Id"),
) -> UserId:
    return UserId(x_user_id)


async def get_discovery_service(
    db: AsyncSession = Depends(get_db),
) -> DiscoveryService:
    return DiscoveryService(db)


async def get_boost_service(db: AsyncSession = Depends(get_db)) -> BoostService:
    return BoostService(db)


async def get_vote_service(db: AsyncSession = Depends(get_db)) -> VoteService:
    return VoteService(db)

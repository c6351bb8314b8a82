"""FastAPI dependencies for tenant resolution."""

from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.business import Business
from ..services import calendar_svc


async def get_current_business(
    business_id: uuid.UUID = Path(..., description="Business ID"),
    db: AsyncSession = Depends(get_db),
) -> Business:
    """Resolve the business in the path. Raises 404 if not found."""
    business = await calendar_svc.get_business(db, business_id)
    if not business:
        raise HTTPException(status_code=404, detail=f"Business '{business_id}' not found")
    return business

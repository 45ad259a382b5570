"""Public customer-site routes: news, pricing and the contact form."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.update import Update
from app.schemas import ContactRequest, GroundPricingOut, MessageOut, UpdateOut
from app.services.analytics import CONTACT_FORM, record_event
from app.services.grounds import GROUNDS
from app.services.pricing import PEAK_END, PEAK_START, price_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customer", tags=["customer"])

LATEST_UPDATES = 10


@router.get("/updates", response_model=list[UpdateOut])
async def latest_updates(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Update).order_by(Update.is_featured.desc(), Update.created_at.desc()).limit(LATEST_UPDATES)
    )
    return result.scalars().all()


@router.get("/pricing", response_model=list[GroundPricingOut])
async def pricing():
    prices = price_list()
    return [
        GroundPricingOut(
            number=ground.number,
            name=ground.name,
            format=ground.format,
            capacity=ground.capacity,
            facilities=list(ground.facilities),
            peak_hours=f"{PEAK_START:%H:%M}-{PEAK_END:%H:%M}",
            prices=prices[ground.number],
        )
        for ground in GROUNDS.values()
    ]


@router.post("/contact", response_model=MessageOut)
async def contact(body: ContactRequest, db: AsyncSession = Depends(get_db)):
    await record_event(db, CONTACT_FORM, {"name": body.name, "email": body.email, "message": body.message})
    logger.info("Contact form message from %s", body.email)
    return MessageOut(message="Thank you for your message. We will get back to you soon!")

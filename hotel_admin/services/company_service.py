from typing import Optional

from hotel_admin.core.logger import logger
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.models.company import CompanyProfile, CompanyProfileIn
from hotel_admin.services.db_service import DocumentStore, Query

COMPANY = "company_profile"


class CompanyService:
    """The company profile is a single document, created on first save."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self) -> Optional[CompanyProfile]:
        row = await self.store.find_one(COMPANY, Query().order("created_at"))
        return CompanyProfile.model_validate(row) if row else None

    async def save(self, data: CompanyProfileIn) -> CompanyProfile:
        current = await self.get()
        now = utcnow()
        if current is None:
            profile = CompanyProfile(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
            await self.store.insert(COMPANY, profile.to_doc())
            logger.info(f"🏨 Company profile created: {profile.name}")
            return profile

        profile = CompanyProfile(id=current.id, created_at=current.created_at, updated_at=now, **data.model_dump())
        doc = profile.to_doc()
        doc.pop("id")
        await self.store.update(COMPANY, current.id, doc)
        logger.info(f"🏨 Company profile updated: {profile.name}")
        return profile

"""
Company Service - company profile.
"""

import logging

from app.core.errors import NotFoundError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

PROTECTED_PROFILE_FIELDS = ("id", "uid", "email", "role", "status", "createdAt")


class CompanyService:

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_profile(self, company_id: str) -> dict:
        company = self.store.get(COLLECTIONS["companies"], company_id)
        if not company:
            raise NotFoundError("Company profile not found")

        jobs = self.store.query(COLLECTIONS["jobs"], companyId=company_id)
        return {**company, "jobsCount": len(jobs)}

    def update_profile(self, company_id: str, user: dict, data: dict) -> None:
        """Update the profile, creating it from the user account when missing."""
        changes = {k: v for k, v in data.items() if k not in PROTECTED_PROFILE_FIELDS}
        now = utcnow()

        if self.store.get(COLLECTIONS["companies"], company_id) is None:
            account = self.store.get(COLLECTIONS["users"], company_id) or {}
            self.store.set(COLLECTIONS["companies"], company_id, {
                "uid": company_id,
                "email": account.get("email") or user.get("email"),
                "name": account.get("name") or user.get("name") or "",
                "status": "approved",
                "createdAt": now,
                "updatedAt": now,
                **changes
            }, merge=True)
            logger.info("Company profile created: %s", company_id)
        else:
            changes["updatedAt"] = now
            self.store.update(COLLECTIONS["companies"], company_id, changes)
            logger.info("Company profile updated: %s", company_id)

        self.store.update(COLLECTIONS["users"], company_id, {"updatedAt": now})


def get_company_service(store: DocumentStore) -> CompanyService:
    return CompanyService(store)

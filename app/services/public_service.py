"""
Public Service - unauthenticated landing-page queries.
"""

from collections import Counter
from typing import List

from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore


class PublicService:

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_institutions(self) -> List[dict]:
        """Approved institutions, or every institution while none is approved yet."""
        approved = self.store.query(COLLECTIONS["institutions"], status="approved")
        return approved or self.store.query(COLLECTIONS["institutions"])

    def list_courses(self, institution_id: str) -> List[dict]:
        """Active courses of an institution, or all of its courses when none is active."""
        active = self.store.query(COLLECTIONS["courses"], institutionId=institution_id, status="active")
        return active or self.store.query(COLLECTIONS["courses"], institutionId=institution_id)

    def platform_stats(self) -> dict:
        institutions = self.store.query(COLLECTIONS["institutions"])
        companies = self.store.query(COLLECTIONS["companies"])
        institution_statuses = Counter(i.get("status") for i in institutions)
        company_statuses = Counter(c.get("status") for c in companies)

        companies_count = len(companies)
        if not companies_count:
            companies_count = len(self.store.query(COLLECTIONS["users"], role="company"))

        return {
            "students": len(self.store.query(COLLECTIONS["students"])),
            "institutions": len(institutions),
            "companies": companies_count,
            "jobs": len(self.store.query(COLLECTIONS["jobs"], status="active")),
            "approvedInstitutions": institution_statuses["approved"],
            "pendingInstitutions": institution_statuses["pending"],
            "approvedCompanies": company_statuses["approved"],
            "pendingCompanies": company_statuses["pending"],
        }


def get_public_service(store: DocumentStore) -> PublicService:
    return PublicService(store)

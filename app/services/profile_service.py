"""
Profile Aggregator

Builds the MatchProfile a qualification check runs against:

    gpa                    - stored GPA, or the grade-derived GPA when grades are given
    experience             - experience entries as stored
    total_experience_years - sum of numeric `years`
    skills_text            - lowercased skills + "<role> <description>" per entry
    certificates           - certificate/diploma documents
    certificate_names      - their lowercased file names

A MatchProfile is built fresh for every evaluation and never stored.
Missing fields degrade to zero / empty; building a profile never fails.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.utils.normalize import to_number, to_text

CERTIFICATE_TYPES = {"certificate", "diploma"}


@dataclass
class MatchProfile:
    gpa: float = 0.0
    experience: List[dict] = field(default_factory=list)
    total_experience_years: float = 0.0
    skills_text: str = ""
    certificates: List[dict] = field(default_factory=list)
    certificate_names: List[str] = field(default_factory=list)


# ============================================================
# GPA
# ============================================================

def grade_to_gpa(percentage) -> float:
    """Percentage grade (0-100) on the 4.0 scale."""
    return (to_number(percentage) / 100) * 4


def calculate_gpa(grades: Iterable[dict]) -> float:
    """
    Full-precision GPA: mean of (grade / 100) * 4 over all grade records.
    Returns 0.0 when there are no grades.
    """
    grades = list(grades or [])
    if not grades:
        return 0.0
    total = sum(grade_to_gpa(g.get("grade")) for g in grades)
    return total / len(grades)


def display_gpa(gpa: float) -> float:
    """GPA rounded to 2 places for responses and the stored `gpa` field."""
    return round(gpa, 2)


# ============================================================
# MATCH PROFILE
# ============================================================

def experience_entries(student: dict) -> List[dict]:
    experience = student.get("experience")
    if not isinstance(experience, list):
        return []
    return [exp for exp in experience if isinstance(exp, dict)]


def build_skills_text(student: dict, experience: List[dict]) -> str:
    parts = [to_text(student.get("skills"))]
    for exp in experience:
        parts.append(f"{to_text(exp.get('role'))} {to_text(exp.get('description'))}")
    return " ".join(parts).lower()


def extract_certificates(documents: Iterable[dict]) -> List[dict]:
    certificates = []
    for doc in documents or []:
        if to_text(doc.get("documentType")).lower() in CERTIFICATE_TYPES:
            certificates.append({
                "id": doc.get("id"),
                "fileName": to_text(doc.get("fileName")),
                "documentType": to_text(doc.get("documentType"))
            })
    return certificates


def build_match_profile(
    student: dict,
    documents: Iterable[dict] = (),
    grades: Optional[Iterable[dict]] = None
) -> MatchProfile:
    """
    Pure profile construction from already-loaded records.

    Args:
        student: raw StudentRecord (may be empty)
        documents: the student's DocumentRecords
        grades: the student's GradeRecords; when non-empty the GPA is derived
                from them instead of the stored `gpa` field
    """
    student = student or {}
    grades = list(grades or [])
    gpa = calculate_gpa(grades) if grades else to_number(student.get("gpa"))

    experience = experience_entries(student)
    total_years = sum(to_number(exp.get("years")) for exp in experience)
    certificates = extract_certificates(documents)

    return MatchProfile(
        gpa=gpa,
        experience=experience,
        total_experience_years=total_years,
        skills_text=build_skills_text(student, experience),
        certificates=certificates,
        certificate_names=[cert["fileName"].lower() for cert in certificates]
    )


class ProfileService:
    """Loads the records a MatchProfile needs from the document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def get_grades(self, student_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["grades"], studentId=student_id)

    def get_documents(self, student_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["documents"], studentId=student_id)

    def build(
        self,
        student_id: str,
        student: Optional[dict] = None,
        use_grades: bool = False
    ) -> MatchProfile:
        """
        Build a MatchProfile for a student.

        With use_grades=True the GPA comes from the student's grade records
        (falling back to the stored value when there are none).
        """
        if student is None:
            student = self.store.get(COLLECTIONS["students"], student_id) or {}
        grades = self.get_grades(student_id) if use_grades else None
        return build_match_profile(student, self.get_documents(student_id), grades)

"""
Career Guidance Platform
Backend connecting students, institutions, companies and administrators.

Architecture:
- MongoDB: every collection, behind the DocumentStore port (app.db.store)
- Services: profile aggregation, qualification, ranking, admissions, notifications
- FastAPI: role-scoped routes under /api
"""

__version__ = "1.0.0"

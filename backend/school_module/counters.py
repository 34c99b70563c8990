"""Read-only record counts used by the go-live checklist.

Every call opens its own session so the checklist can run the queries
concurrently from a thread pool.
"""
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from rbac_module.models import Institution

from .models import AcademicYear, FeeItem, SchoolClass, StaffMember, Student, Subject

COUNTED_MODELS = {
    "academic_years": AcademicYear,
    "classes": SchoolClass,
    "subjects": Subject,
    "fee_items": FeeItem,
    "students": Student,
    "staff": StaffMember,
}


class SqlDomainCounters:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def profile_email(self, institution_id: int) -> str | None:
        with self.session_factory() as db:
            return db.execute(
                select(Institution.email).where(Institution.id == institution_id)
            ).scalar_one_or_none()

    def count(self, kind: str, institution_id: int) -> int:
        model = COUNTED_MODELS.get(kind)
        if model is None:
            raise KeyError(f"No counter for {kind!r}")
        with self.session_factory() as db:
            return _count(db, model, institution_id)


def _count(db: Session, model, institution_id: int) -> int:
    return db.execute(
        select(func.count()).select_from(model).where(model.institution_id == institution_id)
    ).scalar_one()

import logging

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rbac_module.models import Institution
from rbac_module.services import _normalize_email

from .models import AcademicTerm, AcademicYear, FeeItem, SchoolClass
from .templates import academic_year_from_template, get_calendar_template, get_fee_template

logger = logging.getLogger(__name__)


def get_institution(db: Session, institution_id: int) -> Institution:
    institution = db.get(Institution, institution_id)
    if not institution:
        raise HTTPException(status_code=404, detail="Institution not found")
    return institution


def update_profile(db: Session, *, institution_id: int, changes: dict) -> Institution:
    institution = get_institution(db, institution_id)
    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"]) if changes["email"] else None
    for field, value in changes.items():
        setattr(institution, field, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(institution)
    return institution


def create_record(db: Session, model, *, institution_id: int, payload: BaseModel):
    data = payload.model_dump()
    class_id = data.get("class_id")
    if class_id is not None:
        school_class = db.get(SchoolClass, class_id)
        if not school_class or school_class.institution_id != institution_id:
            raise HTTPException(status_code=404, detail="Class not found")
    record = model(institution_id=institution_id, **data)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def list_records(db: Session, model, *, institution_id: int) -> list:
    return db.query(model).filter(model.institution_id == institution_id).order_by(model.id).all()


def create_year_from_template(
    db: Session, *, institution_id: int, template_id: str, year: int, is_current: bool = False
) -> tuple[AcademicYear, list[AcademicTerm]]:
    try:
        generated = academic_year_from_template(get_calendar_template(template_id), year)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Calendar template not found") from exc

    exists = (
        db.query(AcademicYear)
        .filter(AcademicYear.institution_id == institution_id, AcademicYear.name == generated.name)
        .first()
    )
    if exists:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{generated.name} already exists")

    academic_year = AcademicYear(
        institution_id=institution_id,
        name=generated.name,
        start_date=generated.start_date,
        end_date=generated.end_date,
        is_current=is_current,
    )
    db.add(academic_year)
    db.flush()
    terms = [
        AcademicTerm(
            institution_id=institution_id,
            academic_year_id=academic_year.id,
            name=term.name,
            start_date=term.start_date,
            end_date=term.end_date,
        )
        for term in generated.terms
    ]
    db.add_all(terms)
    db.commit()
    db.refresh(academic_year)
    for term in terms:
        db.refresh(term)
    logger.info(f"Institution {institution_id}: {generated.name} created from template {template_id}")
    return academic_year, terms


def apply_fee_template(db: Session, *, institution_id: int, template_id: str) -> list[FeeItem]:
    """Add the template's fee items, skipping names the institution already has."""
    try:
        template = get_fee_template(template_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Fee template not found") from exc

    existing = {
        name.lower()
        for (name,) in db.query(FeeItem.name).filter(FeeItem.institution_id == institution_id).all()
    }
    created = [
        FeeItem(
            institution_id=institution_id,
            name=item.name,
            amount=item.amount,
            category=item.category,
            is_mandatory=item.is_mandatory,
        )
        for item in template.items
        if item.name.lower() not in existing
    ]
    db.add_all(created)
    db.commit()
    for item in created:
        db.refresh(item)
    logger.info(f"Institution {institution_id}: {len(created)} fee items added from template {template_id}")
    return created

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rbac_module.database import get_db_session
from rbac_module.middleware import get_current_actor, require_roles
from rbac_module.roles import ACADEMIC_ROLES, ADMIN_ROLES, FINANCE_ROLES, HR_ROLES, Actor

from .models import AcademicYear, FeeItem, SchoolClass, StaffMember, Student, Subject
from .schemas import (
    AcademicTermOut,
    AcademicYearCreate,
    AcademicYearOut,
    AcademicYearWithTermsOut,
    CalendarTemplateOut,
    FeeItemCreate,
    FeeItemOut,
    FeeItemTemplateOut,
    FeeTemplateOut,
    FeeTemplateRequest,
    ProfileOut,
    ProfileUpdateRequest,
    SchoolClassCreate,
    SchoolClassOut,
    StaffMemberCreate,
    StaffMemberOut,
    StudentCreate,
    StudentOut,
    SubjectCreate,
    SubjectOut,
    TermTemplateOut,
    YearFromTemplateRequest,
)
from .services import (
    apply_fee_template,
    create_record,
    create_year_from_template,
    get_institution,
    list_records,
    update_profile,
)
from .templates import CALENDAR_TEMPLATES, FEE_TEMPLATES

router = APIRouter(prefix="/api/v1/school", tags=["School Records"])


def _profile_out(institution) -> ProfileOut:
    return ProfileOut(
        id=institution.id,
        name=institution.name,
        email=institution.email,
        phone=institution.phone,
        address=institution.address,
    )


@router.get("/profile", response_model=ProfileOut)
def read_profile(db: Session = Depends(get_db_session), actor: Actor = Depends(get_current_actor)):
    return _profile_out(get_institution(db, actor.institution_id))


@router.put("/profile", response_model=ProfileOut)
def write_profile(
    payload: ProfileUpdateRequest,
    db: Session = Depends(get_db_session),
    actor: Actor = Depends(require_roles(*ADMIN_ROLES)),
):
    institution = update_profile(db, institution_id=actor.institution_id, changes=payload.model_dump(exclude_unset=True))
    return _profile_out(institution)


def _register(path: str, model, create_schema, out_schema, writer_roles) -> None:
    @router.post(path, response_model=out_schema, status_code=status.HTTP_201_CREATED)
    def create(
        payload: create_schema,
        db: Session = Depends(get_db_session),
        actor: Actor = Depends(require_roles(*writer_roles)),
    ):
        return create_record(db, model, institution_id=actor.institution_id, payload=payload)

    @router.get(path, response_model=list[out_schema])
    def read_all(db: Session = Depends(get_db_session), actor: Actor = Depends(get_current_actor)):
        return list_records(db, model, institution_id=actor.institution_id)


_register("/academic-years", AcademicYear, AcademicYearCreate, AcademicYearOut, ADMIN_ROLES | ACADEMIC_ROLES)
_register("/classes", SchoolClass, SchoolClassCreate, SchoolClassOut, ADMIN_ROLES | ACADEMIC_ROLES)
_register("/subjects", Subject, SubjectCreate, SubjectOut, ADMIN_ROLES | ACADEMIC_ROLES)
_register("/fee-items", FeeItem, FeeItemCreate, FeeItemOut, ADMIN_ROLES | FINANCE_ROLES)
_register("/students", Student, StudentCreate, StudentOut, ADMIN_ROLES)
_register("/staff", StaffMember, StaffMemberCreate, StaffMemberOut, ADMIN_ROLES | HR_ROLES)


@router.get("/templates/calendars", response_model=list[CalendarTemplateOut])
def list_calendar_templates(actor: Actor = Depends(get_current_actor)):
    return [
        CalendarTemplateOut(
            id=template.id,
            name=template.name,
            description=template.description,
            terms=[
                TermTemplateOut(
                    name=term.name,
                    start_month=term.start[0],
                    start_day=term.start[1],
                    end_month=term.end[0],
                    end_day=term.end[1],
                )
                for term in template.terms
            ],
        )
        for template in CALENDAR_TEMPLATES
    ]


@router.get("/templates/fees", response_model=list[FeeTemplateOut])
def list_fee_templates(actor: Actor = Depends(get_current_actor)):
    return [
        FeeTemplateOut(
            id=template.id,
            name=template.name,
            description=template.description,
            school_type=template.school_type,
            items=[
                FeeItemTemplateOut(
                    name=item.name, amount=item.amount, category=item.category, is_mandatory=item.is_mandatory
                )
                for item in template.items
            ],
        )
        for template in FEE_TEMPLATES
    ]


@router.post(
    "/academic-years/from-template",
    response_model=AcademicYearWithTermsOut,
    status_code=status.HTTP_201_CREATED,
)
def create_academic_year_from_template(
    payload: YearFromTemplateRequest,
    db: Session = Depends(get_db_session),
    actor: Actor = Depends(require_roles(*(ADMIN_ROLES | ACADEMIC_ROLES))),
):
    academic_year, terms = create_year_from_template(
        db,
        institution_id=actor.institution_id,
        template_id=payload.template_id,
        year=payload.year,
        is_current=payload.is_current,
    )
    return AcademicYearWithTermsOut(
        **AcademicYearOut.model_validate(academic_year).model_dump(),
        terms=[AcademicTermOut.model_validate(term) for term in terms],
    )


@router.post("/fee-items/from-template", response_model=list[FeeItemOut], status_code=status.HTTP_201_CREATED)
def fee_items_from_template(
    payload: FeeTemplateRequest,
    db: Session = Depends(get_db_session),
    actor: Actor = Depends(require_roles(*(ADMIN_ROLES | FINANCE_ROLES))),
):
    return apply_fee_template(db, institution_id=actor.institution_id, template_id=payload.template_id)

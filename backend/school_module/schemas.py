from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProfileOut(BaseModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=255)


class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    institution_id: int


class AcademicYearCreate(BaseModel):
    name: str = Field(min_length=2, max_length=64)
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool = False


class AcademicYearOut(RecordOut):
    name: str
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    level: str | None = None
    stream: str | None = None
    capacity: int | None = Field(default=None, ge=0)


class SchoolClassOut(RecordOut):
    name: str
    level: str | None = None
    stream: str | None = None
    capacity: int | None = None


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    code: str | None = Field(default=None, max_length=32)
    category: str | None = None


class SubjectOut(RecordOut):
    name: str
    code: str | None = None
    category: str | None = None


class FeeItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    amount: Decimal = Field(ge=0)
    category: str | None = None
    is_mandatory: bool = True


class FeeItemOut(RecordOut):
    name: str
    amount: Decimal
    category: str | None = None
    is_mandatory: bool


class StudentCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=255)
    admission_number: str | None = None
    class_id: int | None = None


class StudentOut(RecordOut):
    full_name: str
    admission_number: str | None = None
    class_id: int | None = None


class StaffMemberCreate(BaseModel):
    full_name: str = Field(min_length=2, max_length=255)
    email: str | None = None
    position: str | None = None


class StaffMemberOut(RecordOut):
    full_name: str
    email: str | None = None
    position: str | None = None


class TermTemplateOut(BaseModel):
    name: str
    start_month: int
    start_day: int
    end_month: int
    end_day: int


class CalendarTemplateOut(BaseModel):
    id: str
    name: str
    description: str
    terms: list[TermTemplateOut]


class FeeItemTemplateOut(BaseModel):
    name: str
    amount: Decimal
    category: str
    is_mandatory: bool


class FeeTemplateOut(BaseModel):
    id: str
    name: str
    description: str
    school_type: str
    items: list[FeeItemTemplateOut]


class YearFromTemplateRequest(BaseModel):
    template_id: str
    year: int = Field(ge=2000, le=2100)
    is_current: bool = False


class FeeTemplateRequest(BaseModel):
    template_id: str


class AcademicTermOut(RecordOut):
    academic_year_id: int
    name: str
    start_date: date
    end_date: date


class AcademicYearWithTermsOut(AcademicYearOut):
    terms: list[AcademicTermOut]

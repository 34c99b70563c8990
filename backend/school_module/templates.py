"""Quick-setup templates for the academic calendar and fee structure steps.

Term dates are month/day pairs; ``academic_year_from_template`` pins them to a
concrete year.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class TermTemplate:
    name: str
    start: tuple[int, int]
    end: tuple[int, int]


@dataclass(frozen=True)
class CalendarTemplate:
    id: str
    name: str
    description: str
    terms: tuple[TermTemplate, ...]


@dataclass(frozen=True)
class FeeItemTemplate:
    name: str
    amount: Decimal
    category: str
    is_mandatory: bool = True


@dataclass(frozen=True)
class FeeTemplate:
    id: str
    name: str
    description: str
    school_type: str
    items: tuple[FeeItemTemplate, ...]


@dataclass(frozen=True)
class GeneratedTerm:
    name: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class GeneratedYear:
    name: str
    start_date: date
    end_date: date
    terms: tuple[GeneratedTerm, ...]


CALENDAR_TEMPLATES: tuple[CalendarTemplate, ...] = (
    CalendarTemplate(
        "3-term-kenya", "3-Term Calendar (Kenya)", "Standard Kenya school calendar with 3 terms",
        (
            TermTemplate("Term 1", (1, 6), (4, 5)),
            TermTemplate("Term 2", (5, 6), (8, 2)),
            TermTemplate("Term 3", (9, 2), (11, 22)),
        ),
    ),
    CalendarTemplate(
        "3-term-standard", "3-Term Calendar (Standard)", "Standard 3-term academic calendar",
        (
            TermTemplate("Term 1", (1, 8), (4, 12)),
            TermTemplate("Term 2", (5, 1), (8, 9)),
            TermTemplate("Term 3", (9, 1), (12, 6)),
        ),
    ),
    CalendarTemplate(
        "4-term", "4-Term Calendar", "Four term academic year with shorter breaks",
        (
            TermTemplate("Term 1", (1, 8), (3, 15)),
            TermTemplate("Term 2", (4, 1), (6, 7)),
            TermTemplate("Term 3", (7, 1), (9, 6)),
            TermTemplate("Term 4", (10, 1), (12, 6)),
        ),
    ),
    CalendarTemplate(
        "2-semester", "2-Semester Calendar", "Two semester system (college style)",
        (
            TermTemplate("Semester 1", (1, 8), (6, 15)),
            TermTemplate("Semester 2", (7, 15), (12, 6)),
        ),
    ),
)


def _fee(name: str, amount: int, category: str, is_mandatory: bool = True) -> FeeItemTemplate:
    return FeeItemTemplate(name, Decimal(amount), category, is_mandatory)


FEE_TEMPLATES: tuple[FeeTemplate, ...] = (
    FeeTemplate(
        "primary-basic", "Primary School (Basic)", "Essential fees for primary schools", "primary",
        (
            _fee("Tuition Fee", 15000, "tuition"),
            _fee("Activity Fee", 2000, "activity"),
            _fee("Examination Fee", 1500, "examination"),
            _fee("Learning Materials", 3000, "books"),
            _fee("Development Levy", 1000, "other", False),
        ),
    ),
    FeeTemplate(
        "secondary-day", "Secondary Day School", "Standard fees for day secondary schools", "secondary-day",
        (
            _fee("Tuition Fee", 25000, "tuition"),
            _fee("Laboratory Fee", 3000, "activity"),
            _fee("Library Fee", 1500, "books"),
            _fee("Examination Fee", 2500, "examination"),
            _fee("ICT Levy", 2000, "activity"),
            _fee("Co-curricular Activities", 1500, "activity", False),
        ),
    ),
    FeeTemplate(
        "secondary-boarding", "Secondary Boarding School", "Comprehensive fees for boarding schools",
        "secondary-boarding",
        (
            _fee("Tuition Fee", 30000, "tuition"),
            _fee("Boarding Fee", 25000, "boarding"),
            _fee("Laboratory Fee", 3500, "activity"),
            _fee("Library Fee", 2000, "books"),
            _fee("Examination Fee", 3000, "examination"),
            _fee("ICT Levy", 2500, "activity"),
            _fee("Medical Fee", 1500, "other"),
            _fee("Transport (Day Scholars)", 8000, "transport", False),
            _fee("Uniform Deposit", 5000, "uniform", False),
        ),
    ),
    FeeTemplate(
        "minimal", "Minimal Fee Structure", "Basic structure with just tuition and exam fees", "all",
        (
            _fee("Tuition Fee", 20000, "tuition"),
            _fee("Examination Fee", 2000, "examination"),
        ),
    ),
)

_CALENDARS = {template.id: template for template in CALENDAR_TEMPLATES}
_FEES = {template.id: template for template in FEE_TEMPLATES}


def get_calendar_template(template_id: str) -> CalendarTemplate:
    try:
        return _CALENDARS[template_id]
    except KeyError:
        raise KeyError(f"Unknown calendar template {template_id!r}") from None


def get_fee_template(template_id: str) -> FeeTemplate:
    try:
        return _FEES[template_id]
    except KeyError:
        raise KeyError(f"Unknown fee template {template_id!r}") from None


def academic_year_from_template(template: CalendarTemplate, year: int) -> GeneratedYear:
    terms = tuple(
        GeneratedTerm(term.name, date(year, *term.start), date(year, *term.end)) for term in template.terms
    )
    return GeneratedYear(
        name=f"{year} Academic Year",
        start_date=terms[0].start_date,
        end_date=terms[-1].end_date,
        terms=terms,
    )

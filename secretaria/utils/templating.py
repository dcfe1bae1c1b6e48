# secretaria/utils/templating.py
"""Contract template placeholder substitution.

Templates are plain HTML containing ``{{tokenName}}`` markers. Rendering is a
literal, single-pass find-and-replace: recognised tokens are swapped for their
value, anything else is left in place. Values are HTML-escaped and their
braces neutralised, so rendering an already rendered document is a no-op.
"""
import html
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytz

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

RECOGNIZED_TOKENS = frozenset({
    "studentName",
    "studentId",
    "studentCPF",
    "studentEmail",
    "studentPhone",
    "studentAddress",
    "studentBirthDate",
    "enrollmentId",
    "enrollmentNumber",
    "enrollmentDate",
    "courseId",
    "courseName",
    "courseDuration",
    "semester",
    "currentSemester",
    "year",
    "currentDate",
    "contractDate",
    "generatedAt",
    "institutionName",
})


def _escape_value(value: Any) -> str:
    if value is None:
        return ""
    return html.escape(str(value)).replace("{", "&#123;").replace("}", "&#125;")


def render_placeholders(content: str, data: Mapping[str, Any]) -> str:
    """Replace every recognised ``{{token}}`` present in ``data``."""
    values = {key: _escape_value(value) for key, value in data.items() if key in RECOGNIZED_TOKENS}

    def _substitute(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in values:
            return values[token]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_substitute, content)


def extract_placeholders(content: str) -> List[str]:
    """Distinct tokens used by a template, in order of first appearance."""
    seen = []
    for token in PLACEHOLDER_PATTERN.findall(content or ""):
        if token not in seen:
            seen.append(token)
    return seen


def local_now(tz_name: str, now: Optional[datetime] = None) -> datetime:
    """``now`` (default: the current instant) in the named IANA timezone."""
    return (now or datetime.now(timezone.utc)).astimezone(pytz.timezone(tz_name))


def current_period(today: Optional[date] = None) -> Tuple[int, int]:
    """(semester, year) for a calendar date: January-June is semester 1."""
    today = today or datetime.now(timezone.utc).date()
    return (1 if today.month <= 6 else 2), today.year


def _format_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def build_contract_data(
    enrollment,
    semester: int,
    year: int,
    institution_name: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Token values for an enrollment with its ``student`` and ``course`` loaded."""
    now = now or datetime.now(timezone.utc)
    student = enrollment.student
    course = enrollment.course
    duration = f"{course.duration_semesters} semestres" if course and course.duration_semesters else "conforme currículo"

    return {
        "studentName": student.name if student else "",
        "studentId": enrollment.student_id,
        "studentCPF": student.cpf if student else "",
        "studentEmail": student.email if student else "",
        "studentPhone": student.phone if student else "",
        "studentAddress": student.address if student else "",
        "studentBirthDate": student.birth_date if student else "",
        "enrollmentId": enrollment.id,
        "enrollmentNumber": student.registration_number if student and student.registration_number else enrollment.id,
        "enrollmentDate": _format_date(enrollment.enrollment_date),
        "courseId": enrollment.course_id,
        "courseName": course.name if course else "",
        "courseDuration": duration,
        "semester": semester,
        "currentSemester": enrollment.current_semester if enrollment.current_semester else semester,
        "year": year,
        "currentDate": _format_date(now.date()),
        "contractDate": _format_date(now.date()),
        "generatedAt": now.strftime("%d/%m/%Y %H:%M"),
        "institutionName": institution_name,
    }

"""Request schema validation."""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from workhub.schemas.application import ApplicationCreate, ApplicationStatusUpdate, InterviewSchedule
from workhub.schemas.auth import OtpSendRequest, OtpVerifyRequest
from workhub.schemas.job import JobCreate, JobSearchFilters, JobUpdate


def job_payload(**overrides):
    payload = {
        "title": "  Mason for boundary wall ",
        "description": "Build a 40 ft brick wall",
        "category": "construction",
        "job_type": "contract",
        "address": "Plot 7, Sector 3",
        "city": "Nashik",
        "state": "Maharashtra",
        "pincode": "422001",
        "salary_type": "daily",
        "salary_min": 700,
        "salary_max": 900,
    }
    payload.update(overrides)
    return payload


def error_fields(exc_info):
    return {error["loc"][0] for error in exc_info.value.errors()}

# =============================================
# JOBS
# =============================================

def test_job_create_normalizes_fields():
    job = JobCreate(**job_payload(skills=[" Masonry", "masonry", "", "Masonry "], currency="inr"))

    assert job.title == "Mason for boundary wall"
    assert job.skills == ["Masonry", "masonry"]
    assert job.currency == "INR"
    assert job.experience == "fresher"


@pytest.mark.parametrize("pincode", ["42200", "4220011", "42200a"])
def test_job_pincode_must_be_six_digits(pincode):
    with pytest.raises(ValidationError) as exc_info:
        JobCreate(**job_payload(pincode=pincode))
    assert error_fields(exc_info) == {"pincode"}


def test_job_salary_range():
    with pytest.raises(ValidationError) as exc_info:
        JobCreate(**job_payload(salary_min=1000, salary_max=900))
    assert error_fields(exc_info) == {"salary_max"}

    assert JobCreate(**job_payload(salary_min=900, salary_max=900)).salary_max == 900
    assert JobCreate(**job_payload(salary_max=None)).salary_max is None


def test_job_errors_are_reported_together():
    with pytest.raises(ValidationError) as exc_info:
        JobCreate(**job_payload(title="   ", pincode="1", category="astronaut"))
    assert error_fields(exc_info) == {"title", "pincode", "category"}


def test_job_deadline_must_be_in_future():
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    with pytest.raises(ValidationError):
        JobCreate(**job_payload(application_deadline=past))

    naive_future = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=2)
    job = JobCreate(**job_payload(application_deadline=naive_future))
    assert job.application_deadline.tzinfo == timezone.utc


def test_job_cap_must_be_positive():
    with pytest.raises(ValidationError):
        JobCreate(**job_payload(max_applications=0))


def test_job_update_is_partial():
    update = JobUpdate(city="Pune")
    assert update.model_dump(exclude_unset=True) == {"city": "Pune"}

    with pytest.raises(ValidationError):
        JobUpdate(pincode="12")


@pytest.mark.parametrize("field", ["title", "salary_min", "skills", "is_urgent"])
def test_job_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError) as exc_info:
        JobUpdate(**{field: None})
    assert error_fields(exc_info) == {field}


def test_job_update_allows_clearing_optional_columns():
    update = JobUpdate(salary_max=None, max_applications=None, application_deadline=None)
    assert update.model_dump(exclude_unset=True) == {
        "salary_max": None,
        "max_applications": None,
        "application_deadline": None,
    }


def test_job_update_rejects_blank_text():
    with pytest.raises(ValidationError) as exc_info:
        JobUpdate(title="   ", city="")
    assert error_fields(exc_info) == {"title", "city"}

    assert JobUpdate(title="  Senior mason ").title == "Senior mason"


def test_search_filters_lowercase_skills():
    filters = JobSearchFilters(skills=["Plumbing", " plumbing ", "Welding"])
    assert filters.skills == ["plumbing", "welding"]

# =============================================
# APPLICATIONS
# =============================================

def test_cover_letter_length_limit():
    ApplicationCreate(cover_letter="x" * 1000)
    with pytest.raises(ValidationError):
        ApplicationCreate(cover_letter="x" * 1001)


def test_blank_cover_letter_becomes_none():
    assert ApplicationCreate(cover_letter="   ").cover_letter is None


def test_availability_window_order():
    start = datetime(2030, 1, 10, tzinfo=timezone.utc)
    with pytest.raises(ValidationError) as exc_info:
        ApplicationCreate(available_from=start, available_until=start - timedelta(days=1))
    assert error_fields(exc_info) == {"available_until"}

    ApplicationCreate(available_from=start, available_until=start)


def test_employer_cannot_set_withdrawn():
    with pytest.raises(ValidationError):
        ApplicationStatusUpdate(status="withdrawn")

    assert ApplicationStatusUpdate(status="shortlisted").status == "shortlisted"


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        ApplicationStatusUpdate(status="hired")


def test_interview_must_be_in_future():
    with pytest.raises(ValidationError):
        InterviewSchedule(scheduled_at=datetime.now(timezone.utc) - timedelta(hours=1))

    interview = InterviewSchedule(scheduled_at=datetime.now(timezone.utc) + timedelta(days=1))
    assert interview.interview_type == "in-person"

# =============================================
# AUTH
# =============================================

@pytest.mark.parametrize("raw", ["9876543210", "+919876543210", "+91 98765 43210", "98765-43210"])
def test_phone_normalization(raw):
    assert OtpSendRequest(phone=raw).phone == "9876543210"


@pytest.mark.parametrize("raw", ["1234567890", "98765", "98765432101", "abcdefghij"])
def test_invalid_phone(raw):
    with pytest.raises(ValidationError):
        OtpSendRequest(phone=raw)


def test_admin_cannot_self_register():
    with pytest.raises(ValidationError) as exc_info:
        OtpVerifyRequest(phone="9876543210", otp="123456", name="Mallory", role="admin")
    assert error_fields(exc_info) == {"role"}


def test_verify_request_defaults_and_cleanup():
    request = OtpVerifyRequest(
        phone="+919876543210", otp="123456", name="Ravi", role="employer", skills=["Tiling", "Tiling", " "]
    )
    assert request.phone == "9876543210"
    assert request.role == "employer"
    assert request.skills == ["Tiling"]

    with pytest.raises(ValidationError):
        OtpVerifyRequest(phone="9876543210", otp="12ab56")

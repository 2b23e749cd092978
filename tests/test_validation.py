import pytest

from relight.config import MAX_UPLOAD_BYTES
from relight.errors import InvalidInputError
from relight.schema import Bearing, GenerateResponse
from relight.validation import parse_generate_form, validate_image_upload


def test_parse_valid_form():
    request = parse_generate_form("12 Main Street", "2024-06-15", "NE")

    assert request.address == "12 Main Street"
    assert request.date == "2024-06-15"
    assert request.bearing is Bearing.NE


@pytest.mark.parametrize("address", ["12345", "x" * 200])
def test_address_length_bounds_inclusive(address):
    assert parse_generate_form(address, "2024-06-15", "N").address == address


def test_parse_reports_each_field():
    with pytest.raises(InvalidInputError) as exc_info:
        parse_generate_form("1234", "2024-13-01", "Q")

    err = exc_info.value
    assert err.status_code == 400
    assert err.message == "Invalid input"
    assert sorted(d["field"] for d in err.details) == ["address", "bearing", "date"]
    assert all(d["message"] for d in err.details)


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png"])
def test_accepted_uploads(content_type):
    validate_image_upload(content_type, MAX_UPLOAD_BYTES)


def test_size_limit_is_thirty_megabytes():
    assert MAX_UPLOAD_BYTES == 30 * 1024 * 1024
    with pytest.raises(InvalidInputError, match="File too large"):
        validate_image_upload("image/jpeg", MAX_UPLOAD_BYTES + 1)


@pytest.mark.parametrize(
    "content_type,message",
    [(None, "valid image file"), ("", "valid image file"), ("video/mp4", "valid image file"),
     ("image/heic", "Only JPEG and PNG"), ("image/jpg", "Only JPEG and PNG")],
)
def test_rejected_upload_types(content_type, message):
    with pytest.raises(InvalidInputError, match=message):
        validate_image_upload(content_type, 10)


def test_response_serializes_camel_case():
    response = GenerateResponse(job_id="j", original_url="o", result_url="r")

    assert response.model_dump(by_alias=True) == {
        "success": True,
        "jobId": "j",
        "originalUrl": "o",
        "resultUrl": "r",
    }

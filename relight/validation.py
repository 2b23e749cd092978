from typing import Optional

from pydantic import ValidationError

from relight.config import ALLOWED_CONTENT_TYPES, MAX_UPLOAD_BYTES
from relight.errors import InvalidInputError
from relight.schema import GenerateRequest


def parse_generate_form(address: Optional[str], date: Optional[str], bearing: Optional[str]) -> GenerateRequest:
    """Validate the form metadata, reporting every failing field at once."""
    try:
        return GenerateRequest(address=address, date=date, bearing=bearing)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]) or "form", "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidInputError("Invalid input", details=details) from e


def validate_image_upload(content_type: Optional[str], size: Optional[int]) -> None:
    """
    Check the uploaded file by its declared type and size only.

    The bytes are never sniffed: a PNG declared as text/plain is rejected and
    anything declared image/jpeg or image/png is accepted as-is.
    """
    if not content_type or not content_type.startswith("image/"):
        raise InvalidInputError("Please upload a valid image file")

    if size is not None and size > MAX_UPLOAD_BYTES:
        raise InvalidInputError("File too large. Maximum size is 30MB.")

    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidInputError("Only JPEG and PNG images are supported")

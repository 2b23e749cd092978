import logging
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from relight import config
from relight.errors import ConfigurationError, RelightError
from relight.gateway import GatewayClient
from relight.generation import generate_golden_hour
from relight.logger import setup_logging
from relight.schema import Bearing, ErrorResponse, GenerateResponse
from relight.storage import LOCAL_URL_PREFIX
from relight.validation import parse_generate_form, validate_image_upload

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Duskly Golden Hour API")

# Locally stored blobs are served straight from disk.
app.mount(
    LOCAL_URL_PREFIX,
    StaticFiles(directory=str(config.LOCAL_BLOB_DIR), check_dir=False),
    name="blobs",
)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

GENERIC_FAILURE = "Generation failed. Please try again."


def get_gateway_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for gateway calls; None means a real network connection."""
    return None


def _error_body(error: str, details=None) -> dict:
    return ErrorResponse(error=error, details=details).model_dump(exclude_none=True)


@app.exception_handler(RelightError)
async def relight_error_handler(request: Request, exc: RelightError):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # e.g. `file` sent as a text field instead of an upload
    details = [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body") or "form", "message": err["msg"]}
        for err in exc.errors()
    ]
    if request.url.path == "/":
        return _render(request, status_code=400, error="Invalid input", details=details)
    return JSONResponse(status_code=400, content=_error_body("Invalid input", details))


async def _run_generation(
    file: Optional[UploadFile],
    address: Optional[str],
    date: Optional[str],
    bearing: Optional[str],
    transport: Optional[httpx.AsyncBaseTransport],
) -> GenerateResponse:
    api_key = config.gateway_api_key()
    if not api_key:
        logger.error("Missing AI_GATEWAY_API_KEY environment variable")
        raise ConfigurationError("API configuration error. Please check environment variables.")

    size = file.size if file is not None else None
    logger.info(
        "Generate request: file=%s address=%r date=%r bearing=%r",
        f"{file.filename} ({(size or 0) / 1024 / 1024:.2f}MB)" if file is not None else "No file",
        address,
        date,
        bearing,
    )

    generate_request = parse_generate_form(address, date, bearing)
    validate_image_upload(file.content_type if file is not None else None, size)

    content = await file.read()
    # size may be unknown before reading
    validate_image_upload(file.content_type, len(content))

    client = GatewayClient(api_key, transport=transport)
    try:
        return await generate_golden_hour(generate_request, content, file.content_type, client)
    except RelightError as e:
        logger.error("Generation failed (%s): %s", type(e).__name__, getattr(e, "raw_message", e.message))
        raise


# ---------- API endpoints ----------

@app.post("/api/generate", response_model=GenerateResponse)
async def generate(
    file: Optional[UploadFile] = File(None),
    address: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    bearing: Optional[str] = Form(None),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_gateway_transport),
):
    try:
        return await _run_generation(file, address, date, bearing, transport)
    except RelightError:
        raise
    except Exception as e:
        logger.exception("Unexpected generation error")
        return JSONResponse(status_code=500, content=_error_body(str(e) or GENERIC_FAILURE))


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


# ---------- Web UI endpoints ----------

def _render(request: Request, status_code: int = 200, **context):
    context.setdefault("result", None)
    context.setdefault("error", None)
    context.setdefault("form", {"address": "", "date": "", "bearing": Bearing.NW.value})
    return templates.TemplateResponse(
        request,
        "index.html",
        {"bearings": [b.value for b in Bearing], **context},
        status_code=status_code,
    )


@app.get("/", response_class=HTMLResponse)
def home(request: Request):
    return _render(request)


@app.post("/", response_class=HTMLResponse)
async def generate_page(
    request: Request,
    file: Optional[UploadFile] = File(None),
    address: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    bearing: Optional[str] = Form(None),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_gateway_transport),
):
    form = {"address": address or "", "date": date or "", "bearing": bearing or Bearing.NW.value}
    try:
        result = await _run_generation(file, address, date, bearing, transport)
    except RelightError as e:
        return _render(request, status_code=e.status_code, form=form, error=e.message, details=e.details)
    except Exception as e:
        logger.exception("Unexpected generation error")
        return _render(request, status_code=500, form=form, error=str(e) or GENERIC_FAILURE)
    return _render(request, form=form, result=result)

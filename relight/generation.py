"""
Golden-hour generation pipeline.

One request, one job: store the original, ask the gateway for a relit
version, find the image in the reply, store it, return both URLs. Steps run
strictly in sequence and any failure aborts the job; nothing already stored
is rolled back.
"""

import logging
import uuid

from fastapi.concurrency import run_in_threadpool

from relight.extraction import extract_generated_image
from relight.gateway import GatewayClient
from relight.prompt import generate_prompt
from relight.schema import GenerateRequest, GenerateResponse
from relight.storage import ORIGINAL_NAME, RESULT_NAME, job_blob_path, put_blob

logger = logging.getLogger(__name__)

RESULT_CONTENT_TYPE = "image/jpeg"


def new_job_id() -> str:
    return str(uuid.uuid4())


async def generate_golden_hour(
    request: GenerateRequest,
    image: bytes,
    content_type: str,
    client: GatewayClient,
) -> GenerateResponse:
    job_id = new_job_id()

    original_url = await run_in_threadpool(
        put_blob, job_blob_path(job_id, ORIGINAL_NAME), image, content_type
    )
    logger.info("Job %s: original image stored at %s", job_id, original_url)

    prompt = generate_prompt(request.address, request.date, request.bearing)
    response = await client.generate(prompt, image, content_type)
    if isinstance(response, dict):
        logger.info("Job %s: gateway response keys %s", job_id, sorted(response))

    generated = extract_generated_image(response)
    logger.info("Job %s: generated image size %.2fMB", job_id, len(generated) / 1024 / 1024)

    # stored as returned; the gateway may answer with PNG bytes
    result_url = await run_in_threadpool(
        put_blob, job_blob_path(job_id, RESULT_NAME), generated, RESULT_CONTENT_TYPE
    )
    logger.info("Job %s: generated image stored at %s", job_id, result_url)

    return GenerateResponse(job_id=job_id, original_url=original_url, result_url=result_url)

import logging
from typing import Optional

# config.STORAGE_BACKEND determines which logic branch (local/gcp/azure) runs.
from relight import config

# ------------------------------------------------------------------------------
# CONDITIONAL IMPORTS
# Only the SDK for the selected backend has to be installed; a missing one is
# reported when that backend is first used.
# ------------------------------------------------------------------------------

try:
    from google.api_core.exceptions import Conflict
    from google.cloud import storage as gcs
except ImportError:
    gcs = None
    Conflict = None

try:
    from azure.core.exceptions import ResourceExistsError
    from azure.storage.blob import BlobServiceClient, ContentSettings
except ImportError:
    BlobServiceClient = None
    ContentSettings = None
    ResourceExistsError = None

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# CONSTANTS
# One folder per job inside the bucket/container: jobs/{job_id}/original.jpg
# and jobs/{job_id}/result.jpg.
# ------------------------------------------------------------------------------
JOBS_PREFIX = "jobs/"
ORIGINAL_NAME = "original.jpg"
RESULT_NAME = "result.jpg"
LOCAL_URL_PREFIX = "/blobs"


def job_blob_path(job_id: str, name: str) -> str:
    return f"{JOBS_PREFIX}{job_id}/{name}"


# ------------------------------------------------------------------------------
# LOCAL FILESYSTEM
# Used when STORAGE_BACKEND="local". The API serves LOCAL_BLOB_DIR at /blobs.
# ------------------------------------------------------------------------------

def _put_local(path: str, data: bytes) -> str:
    dest = config.LOCAL_BLOB_DIR / path
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return f"{config.PUBLIC_BASE_URL}{LOCAL_URL_PREFIX}/{path}"


# ------------------------------------------------------------------------------
# GOOGLE CLOUD STORAGE (GCS)
# Used when STORAGE_BACKEND="gcp".
# ------------------------------------------------------------------------------

def _get_gcs_client():
    """Returns an authenticated GCS client."""
    if not gcs:
        raise RuntimeError("google-cloud-storage library is not installed.")
    return gcs.Client()


def _ensure_bucket_exists(bucket_name: str):
    """Returns the Bucket, creating it when it does not exist yet."""
    client = _get_gcs_client()
    bucket = client.bucket(bucket_name)
    if not bucket.exists():
        try:
            bucket = client.create_bucket(bucket_name)
        except Conflict:
            pass  # created by a concurrent request
    return bucket


def _put_gcs(path: str, data: bytes, content_type: str) -> str:
    if not config.GCS_BUCKET:
        raise ValueError("GCS_BUCKET env var is required for GCP backend")

    bucket = _ensure_bucket_exists(config.GCS_BUCKET)
    blob = bucket.blob(path)

    # Public read comes from the bucket policy unless an object ACL is configured
    # (buckets with uniform access reject per-object ACLs).
    if config.GCS_PREDEFINED_ACL:
        blob.upload_from_string(data, content_type=content_type, predefined_acl=config.GCS_PREDEFINED_ACL)
    else:
        blob.upload_from_string(data, content_type=content_type)
    return blob.public_url


# ------------------------------------------------------------------------------
# AZURE BLOB STORAGE
# Used when STORAGE_BACKEND="azure".
# ------------------------------------------------------------------------------

def _get_azure_client():
    """Creates a BlobServiceClient using the connection string."""
    if not BlobServiceClient:
        raise RuntimeError("azure-storage-blob library is not installed.")
    if not config.AZURE_CONN_STR:
        raise ValueError("AZURE_STORAGE_CONNECTION_STRING env var is missing.")
    return BlobServiceClient.from_connection_string(config.AZURE_CONN_STR)


def _ensure_container_exists(client, container_name: str):
    """Ensures the container exists, with anonymous read access to its blobs."""
    container_client = client.get_container_client(container_name)
    if not container_client.exists():
        try:
            container_client.create_container(public_access="blob")
        except ResourceExistsError:
            pass  # created by a concurrent request
    return container_client


def _put_azure(path: str, data: bytes, content_type: str) -> str:
    if not config.AZURE_CONTAINER:
        raise ValueError("AZURE_CONTAINER env var is required for Azure backend")

    client = _get_azure_client()
    container_client = _ensure_container_exists(client, config.AZURE_CONTAINER)
    blob_client = container_client.get_blob_client(path)
    blob_client.upload_blob(
        data,
        overwrite=True,
        content_settings=ContentSettings(content_type=content_type),
    )
    return blob_client.url


# ------------------------------------------------------------------------------
# PUBLIC API
# The generation pipeline calls this; it routes on STORAGE_BACKEND.
# ------------------------------------------------------------------------------

def put_blob(path: str, data: bytes, content_type: str, backend: Optional[str] = None) -> str:
    """
    Store ``data`` at ``path`` with public read access and return its URL.

    Existing blobs at the same path are overwritten.
    """
    backend = backend or config.STORAGE_BACKEND

    if backend == "local":
        url = _put_local(path, data)
    elif backend == "gcp":
        url = _put_gcs(path, data, content_type)
    elif backend == "azure":
        url = _put_azure(path, data, content_type)
    else:
        raise RuntimeError(f"Unsupported STORAGE_BACKEND: {backend}")

    logger.info("Stored %s (%d bytes, %s) at %s", path, len(data), content_type, url)
    return url

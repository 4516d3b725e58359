# storage.py
import base64
import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

R2_ACCOUNT_ID = (os.getenv("R2_ACCOUNT_ID") or "").strip()
R2_ACCESS_KEY_ID = (os.getenv("R2_ACCESS_KEY_ID") or "").strip()
R2_SECRET_ACCESS_KEY = (os.getenv("R2_SECRET_ACCESS_KEY") or "").strip()
R2_BUCKET = (os.getenv("R2_BUCKET") or "").strip()
R2_REGION = (os.getenv("R2_REGION") or "auto").strip()

R2_PREFIX = "r2:"
PHOTO_FOLDER = "maintenance-photos"


def _missing_settings() -> list[str]:
    settings = {
        "R2_ACCOUNT_ID": R2_ACCOUNT_ID,
        "R2_ACCESS_KEY_ID": R2_ACCESS_KEY_ID,
        "R2_SECRET_ACCESS_KEY": R2_SECRET_ACCESS_KEY,
        "R2_BUCKET": R2_BUCKET,
    }
    return [name for name, value in settings.items() if not value]


def r2_configured() -> bool:
    return not _missing_settings()


def _client():
    missing = _missing_settings()
    if missing:
        raise RuntimeError(f"Missing R2 env vars: {', '.join(missing)}")

    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        region_name=R2_REGION or "auto",
        config=Config(signature_version="s3v4"),
    )


def photo_key(event_id: str, filename: Optional[str] = None) -> str:
    event_part = (event_id or "unassigned").strip("/").replace("..", ".")
    suffix = uuid.uuid4().hex
    if filename:
        fn = filename.strip().replace("/", "_")
        return f"{PHOTO_FOLDER}/{event_part}/{suffix}_{fn}"
    return f"{PHOTO_FOLDER}/{event_part}/{suffix}"


def put_object_bytes(storage_key: str, data: bytes, content_type: str) -> None:
    s3 = _client()
    s3.put_object(
        Bucket=R2_BUCKET,
        Key=storage_key,
        Body=data,
        ContentType=content_type or "application/octet-stream",
    )


def delete_object(storage_key: str) -> None:
    if not storage_key:
        return
    s3 = _client()
    s3.delete_object(Bucket=R2_BUCKET, Key=storage_key)


def presign_get_url(storage_key: str, expires_seconds: int = 900) -> str:
    if not storage_key:
        return ""
    s3 = _client()
    return s3.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": R2_BUCKET, "Key": storage_key},
        ExpiresIn=max(60, int(expires_seconds or 900)),
    )


# --------------------
# Maintenance photos
# --------------------

def to_data_uri(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def store_photo(data: bytes, content_type: str, filename: Optional[str] = None, event_id: str = "") -> str:
    """
    Returns an opaque photo reference: "r2:<key>" when R2 is configured,
    otherwise the photo embedded as a data URI.
    """
    if not r2_configured():
        return to_data_uri(data, content_type)

    key = photo_key(event_id, filename)
    put_object_bytes(key, data, content_type)
    logger.info("Uploaded photo %s (%d bytes)", key, len(data))
    return f"{R2_PREFIX}{key}"


def photo_url(reference: Optional[str], expires_seconds: int = 900) -> str:
    if not reference:
        return ""
    if reference.startswith(R2_PREFIX):
        return presign_get_url(reference[len(R2_PREFIX):], expires_seconds)
    return reference


def discard_photo(reference: Optional[str]) -> None:
    if not reference or not reference.startswith(R2_PREFIX):
        return
    try:
        delete_object(reference[len(R2_PREFIX):])
    except (BotoCoreError, ClientError, RuntimeError):
        logger.exception("Could not delete photo %s", reference)

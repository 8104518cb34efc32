try:
    import boto3  # type: ignore
except ImportError:  # Optional; only needed for R2 upload/download
    boto3 = None

from venuecal import config
from venuecal.pipeline.io import write_bytes_atomic


def _r2_client():
    if not boto3:
        return None
    if not all([config.R2_ACCOUNT_ID, config.R2_ACCESS_KEY_ID, config.R2_SECRET_ACCESS_KEY]):
        return None
    return boto3.client(
        "s3",
        endpoint_url=f"https://{config.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=config.R2_ACCESS_KEY_ID,
        aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
    )


def r2_key(path):
    """Object key for a data file: its path relative to the data directory."""
    try:
        return path.relative_to(config.DATA_DIR).as_posix()
    except ValueError:
        return path.name


def download_from_r2(key, local_path):
    """
    Download a file from R2 if it exists.
    Returns True if downloaded, False if not found or error.
    """
    s3 = _r2_client()
    if s3 is None:
        return False

    try:
        response = s3.get_object(Bucket=config.R2_BUCKET_NAME, Key=key)
        write_bytes_atomic(local_path, response["Body"].read())
        return True
    except Exception:
        return False


def upload_to_r2(paths, log_func=None):
    """
    Upload data files to Cloudflare R2.
    Returns True if successful, False otherwise.
    log_func: optional logging function (defaults to print)
    """
    log = log_func or print

    if not boto3:
        log("R2 upload skipped: boto3 not installed")
        return False

    s3 = _r2_client()
    if s3 is None:
        log("R2 upload skipped: missing R2 credentials")
        return False

    try:
        uploaded = []
        for path in paths:
            if not path.exists():
                continue
            content_type = "application/json" if path.suffix == ".json" else "text/plain"
            with open(path, "rb") as f:
                s3.put_object(
                    Bucket=config.R2_BUCKET_NAME,
                    Key=r2_key(path),
                    Body=f.read(),
                    ContentType=content_type,
                )
            uploaded.append(r2_key(path))

        log(f"Uploaded to R2: {', '.join(uploaded)}")
        return True
    except Exception as e:
        log(f"R2 upload failed: {e}")
        return False

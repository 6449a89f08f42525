"""
S3 utility functions for proof attachments.
Generates presigned URLs for private bucket access.
"""
from typing import Any, Dict, List

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import config
from .logging import logger

PROOF_PREFIX = 'proofs/'

_s3_client = None


def get_s3_client():
    """Get or create S3 client with s3v4 signatures for presigned URLs."""
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client(
            's3',
            region_name=config.AWS_REGION,
            config=BotoConfig(signature_version='s3v4')
        )
    return _s3_client


def is_proof_key(url_or_key: str, bucket: str = None) -> bool:
    """
    Check if a reference points to a proof file in our bucket.

    Args:
        url_or_key: URL or S3 key to check
        bucket: Bucket name, defaults to config.MEDIA_BUCKET

    Returns:
        True if it should be signed
    """
    if not url_or_key:
        return False

    if url_or_key.startswith(PROOF_PREFIX):
        return True

    bucket = bucket or config.MEDIA_BUCKET
    return bool(bucket) and url_or_key.startswith(f"https://{bucket}.s3.amazonaws.com/{PROOF_PREFIX}")


def generate_presigned_url(s3_key: str, expiration: int = None, bucket_name: str = None) -> str:
    """
    Generate a presigned URL for S3 object download.

    Args:
        s3_key: Proof key (e.g., 'proofs/<taskId>/receipt.jpg') or bucket URL
        expiration: URL lifetime in seconds, defaults to config.PROOF_URL_EXPIRATION
        bucket_name: Optional bucket name, defaults to config.MEDIA_BUCKET

    Returns:
        Presigned URL, or the reference unchanged when it cannot be signed
    """
    bucket = bucket_name or config.MEDIA_BUCKET
    if not bucket:
        logger.warning("No MEDIA_BUCKET configured, returning original key")
        return s3_key

    if not is_proof_key(s3_key, bucket):
        # External URL or foreign key, return as-is
        return s3_key

    bucket_url = f"https://{bucket}.s3.amazonaws.com/"
    if s3_key.startswith(bucket_url):
        s3_key = s3_key[len(bucket_url):]

    try:
        return get_s3_client().generate_presigned_url(
            'get_object',
            Params={'Bucket': bucket, 'Key': s3_key},
            ExpiresIn=expiration or config.PROOF_URL_EXPIRATION
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Error generating presigned URL for {s3_key}: {e}")
        return s3_key


def sign_proof_files(submission: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a submission whose proofFiles are presigned download URLs."""
    files: List[str] = submission.get('proofFiles') or []
    return {**submission, 'proofFiles': [generate_presigned_url(f) for f in files]}

"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the task rewards backend.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    TASKS_TABLE = os.environ.get('TASKS_TABLE', '')
    USERS_TABLE = os.environ.get('USERS_TABLE', '')
    SUBMISSIONS_TABLE = os.environ.get('SUBMISSIONS_TABLE', '')
    TRANSACTIONS_TABLE = os.environ.get('TRANSACTIONS_TABLE', '')  # Payout records, optional

    # S3 Buckets (proof attachments)
    MEDIA_BUCKET = os.environ.get('MEDIA_BUCKET', '')
    PROOF_URL_EXPIRATION = int(os.environ.get('PROOF_URL_EXPIRATION', '3600'))

    # Presentation
    CURRENCY = os.environ.get('CURRENCY', 'NGN')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


config = Config()

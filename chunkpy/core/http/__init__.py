"""HTTP settings shared by the upload services."""
from .config import HTTPConfig, SSLConfig, TimeoutConfig

__all__ = [
    'HTTPConfig',
    'SSLConfig',
    'TimeoutConfig',
]

"""Encryption of wallet key material stored in user_addresses.private_key_encrypted."""
import base64
import hashlib
import json
import logging
from typing import Optional
from cryptography.fernet import Fernet
from storefront.config import settings

logger = logging.getLogger(__name__)

_fernet: Optional[Fernet] = None


def _get_fernet() -> Fernet:
    global _fernet
    if _fernet is None:
        key = settings.WALLET_ENCRYPTION_KEY
        if key:
            _fernet = Fernet(key.encode())
        else:
            logger.warning("WALLET_ENCRYPTION_KEY not set - deriving wallet key from JWT_SECRET")
            digest = hashlib.sha256(settings.JWT_SECRET.encode()).digest()
            _fernet = Fernet(base64.urlsafe_b64encode(digest))
    return _fernet


def encrypt_secret(data: dict) -> str:
    return _get_fernet().encrypt(json.dumps(data).encode()).decode()


def decrypt_secret(token: str) -> dict:
    return json.loads(_get_fernet().decrypt(token.encode()))

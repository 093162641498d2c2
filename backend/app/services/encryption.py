# app/services/encryption.py
"""
At-rest encryption for sensitive church fields (currently the tax id).

Values are Fernet tokens prefixed with ``enc:v1:``. Anything without the
prefix is treated as legacy plaintext and returned unchanged, so rows written
before a key was configured keep working.
"""
from __future__ import annotations

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from app import settings
from app.models.church import Church
from app.services.statements.types import ChurchInfo

logger = logging.getLogger(__name__)

PREFIX = "enc:v1:"


class EncryptionError(Exception):
    """Raised when a stored value cannot be decrypted."""


def _fernet() -> Optional[Fernet]:
    secret = settings.encryption_key()
    if not secret:
        return None
    key = base64.urlsafe_b64encode(hashlib.sha256(secret.encode("utf-8")).digest())
    return Fernet(key)


def encrypt(plaintext: Optional[str]) -> Optional[str]:
    if plaintext is None or plaintext == "":
        return plaintext
    f = _fernet()
    if f is None:
        logger.warning("ENCRYPTION_KEY is not set; storing sensitive value unencrypted")
        return plaintext
    return PREFIX + f.encrypt(plaintext.encode("utf-8")).decode("ascii")


def decrypt(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return value
    if not value.startswith(PREFIX):
        return value
    f = _fernet()
    if f is None:
        raise EncryptionError("ENCRYPTION_KEY is not set")
    try:
        return f.decrypt(value[len(PREFIX):].encode("ascii")).decode("utf-8")
    except InvalidToken as exc:
        raise EncryptionError("stored value could not be decrypted") from exc


def decrypt_church(church: Church) -> ChurchInfo:
    """Detached, decrypted snapshot of a Church row (tax id blank if undecryptable)."""
    try:
        tax_id = decrypt(church.tax_id)
    except EncryptionError:
        logger.error("could not decrypt tax id for church %s", church.id)
        tax_id = ""

    return ChurchInfo(
        name=church.name,
        address=church.address,
        city=church.city,
        state=church.state,
        zip=church.zip,
        phone=church.phone,
        email=church.email,
        tax_id=tax_id,
        is_501c3=church.is_501c3,
        tax_statement_disclaimer=church.tax_statement_disclaimer,
        goods_services_provided=church.goods_services_provided,
        goods_services_statement=church.goods_services_statement,
    )

import os
import base64
from typing import Optional

from dotenv import load_dotenv
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

load_dotenv()


class FieldCipher:
    """AES-256-GCM for individual draft fields. Payload: b"v1" + nonce + ciphertext, base64."""

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise RuntimeError(
                f"ENCRYPTION_KEY must decode to 32 bytes for AES-256. Got {len(key)} bytes."
            )
        self.key = key

    @classmethod
    def from_env(cls, var: str = "ENCRYPTION_KEY") -> "FieldCipher":
        key_b64: Optional[str] = os.getenv(var)
        if not key_b64:
            raise RuntimeError(f"{var} missing in .env")
        return cls(base64.b64decode(key_b64))

    @staticmethod
    def generate_key() -> str:
        return base64.b64encode(AESGCM.generate_key(bit_length=256)).decode("utf-8")

    def encrypt_bytes(self, plaintext: bytes, aad: bytes) -> str:
        nonce = os.urandom(12)
        ct = AESGCM(self.key).encrypt(nonce, plaintext, aad)
        return base64.b64encode(b"v1" + nonce + ct).decode("utf-8")

    def decrypt_bytes(self, payload_b64: str, aad: bytes) -> bytes:
        raw = base64.b64decode(payload_b64.encode("utf-8"))
        if raw[:2] != b"v1":
            raise ValueError("Not encrypted with expected format/version header")
        nonce = raw[2:14]
        ct = raw[14:]
        return AESGCM(self.key).decrypt(nonce, ct, aad)

    def encrypt_text(self, value: str, aad: bytes) -> str:
        return self.encrypt_bytes(value.encode("utf-8"), aad)

    def decrypt_text(self, payload_b64: str, aad: bytes) -> str:
        return self.decrypt_bytes(payload_b64, aad).decode("utf-8")

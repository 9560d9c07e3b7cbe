from .aead import decrypt_payload, encrypt_payload
from .asymmetric import RsaKeyPair

__all__ = ["RsaKeyPair", "decrypt_payload", "encrypt_payload"]

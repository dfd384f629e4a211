"""
Helpers for obtaining the claimed modulus from an issuer's key material.

Issuers usually publish their signing key as a PEM/DER public key or as
an X.509 certificate rather than as a bare integer.
"""

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_der_public_key, load_pem_public_key

from .exceptions import MalformedNumberError


def _load_key(data: bytes):
    is_pem = data.lstrip().startswith(b"-----BEGIN")
    if is_pem:
        if b"CERTIFICATE" in data:
            return x509.load_pem_x509_certificate(data).public_key()
        return load_pem_public_key(data)
    try:
        return load_der_public_key(data)
    except ValueError:
        return x509.load_der_x509_certificate(data).public_key()


def modulus_from_public_key(data: bytes) -> int:
    """
    Extract the RSA modulus from a public key or certificate.

    Args:
        data: PEM or DER encoded SubjectPublicKeyInfo or X.509 certificate.

    Returns:
        The RSA modulus n.

    Raises:
        MalformedNumberError: If the data cannot be parsed or is not an RSA key.
    """
    if not data:
        raise MalformedNumberError("Public key data cannot be empty")
    try:
        key = _load_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise MalformedNumberError(f"Failed to load public key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise MalformedNumberError(f"Expected an RSA public key, got {type(key).__name__}")
    return key.public_numbers().n

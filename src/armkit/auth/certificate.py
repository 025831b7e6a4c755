"""Loading service principal certificates and generating self-signed ones."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID


@dataclass(frozen=True)
class CertificateData:
    """Material msal needs to sign a client assertion.

    Attributes:
        private_key_pem: Unencrypted PKCS#8 private key.
        thumbprint: Hex SHA-1 thumbprint of the leaf certificate.
        public_certificate_pem: Leaf certificate followed by any chain certificates.
    """

    private_key_pem: bytes
    thumbprint: str
    public_certificate_pem: bytes

    def to_msal_credential(self, send_certificate_chain: bool = False) -> dict[str, str]:
        credential = {
            "private_key": self.private_key_pem.decode("utf-8"),
            "thumbprint": self.thumbprint,
        }
        if send_certificate_chain:
            credential["public_certificate"] = self.public_certificate_pem.decode("utf-8")
        return credential


def load_certificate(
    certificate_data: bytes, password: str | bytes | None = None
) -> CertificateData:
    """Parse a PEM bundle or PKCS#12 blob holding a private key and certificate(s).

    Args:
        certificate_data: File contents. PEM must contain both the private key
            and at least one certificate.
        password: Password for an encrypted key or PKCS#12 archive.

    Returns:
        The parsed :class:`CertificateData`.

    Raises:
        ValueError: If the data cannot be parsed, the password is wrong or
            missing, or a key or certificate is absent.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")

    try:
        if b"-----BEGIN" in certificate_data:
            key = serialization.load_pem_private_key(certificate_data, password=password)
            certs = x509.load_pem_x509_certificates(certificate_data)
        else:
            key, cert, extra = pkcs12.load_key_and_certificates(certificate_data, password)
            if key is None or cert is None:
                raise ValueError(
                    "The PKCS12 archive must contain a private key and a certificate"
                )
            certs = [cert, *extra]
    except TypeError as ex:
        # cryptography signals a missing or unexpected password with TypeError
        raise ValueError(f"Failed to load the certificate: {ex}") from ex

    private_key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    leaf = certs[0]
    return CertificateData(
        private_key_pem=private_key_pem,
        thumbprint=leaf.fingerprint(hashes.SHA1()).hex().upper(),
        public_certificate_pem=b"".join(
            c.public_bytes(serialization.Encoding.PEM) for c in certs
        ),
    )


def load_certificate_file(
    certificate_path: str | Path, password: str | bytes | None = None
) -> CertificateData:
    """Read ``certificate_path`` and parse it with :func:`load_certificate`.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file contents cannot be parsed.
    """
    path = Path(certificate_path)
    if not path.is_file():
        raise FileNotFoundError(f"Certificate file not found: {path}")
    return load_certificate(path.read_bytes(), password)


def generate_self_signed_certificate(
    common_name: str,
    organization_name: str | None = None,
    country_name: str | None = None,
    serial_number: int = 1,
    validity_days: int = 365,
    key_size: int = 2048,
    *,
    combined_pem_path: str | Path | None = None,
) -> tuple[bytes, bytes]:
    """Generate a self-signed X.509 certificate and private key.

    Upload the certificate to an app registration and point
    ``AZURE_CLIENT_CERTIFICATE_PATH`` at the combined PEM to authenticate as
    that service principal.

    Args:
        common_name: Common Name (CN) for the certificate subject.
        organization_name: Organization Name (O) for the certificate subject.
        country_name: Country Name (C) for the certificate subject.
        serial_number: Serial number for the certificate.
        validity_days: Offset in days from now for the certificate
            expiration time.
        key_size: RSA key size in bits.
        combined_pem_path: Optional path to write a combined PEM file containing
            both the certificate and private key.

    Returns:
        A tuple ``(certificate_pem, private_key_pem)``.
    """
    # Inspect the result with:
    #   openssl x509 -inform pem -in selfsigned.pem -noout -text

    key: rsa.RSAPrivateKey = rsa.generate_private_key(
        public_exponent=65537, key_size=key_size
    )

    name_parts: list[tuple[x509.ObjectIdentifier, str | None]] = [
        (NameOID.COUNTRY_NAME, country_name),
        (NameOID.ORGANIZATION_NAME, organization_name),
        (NameOID.COMMON_NAME, common_name),
    ]
    name = x509.Name(
        [x509.NameAttribute(oid, value) for oid, value in name_parts if value]
    )
    now = datetime.now(timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial_number)
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(private_key=key, algorithm=hashes.SHA256())
    )

    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,  # produces "PRIVATE KEY"
        encryption_algorithm=serialization.NoEncryption(),
    )

    if combined_pem_path is not None:
        Path(combined_pem_path).write_bytes(cert_pem + key_pem)

    return cert_pem, key_pem

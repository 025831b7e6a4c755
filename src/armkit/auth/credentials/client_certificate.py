from __future__ import annotations

from pathlib import Path
from typing import Any

from ..certificate import load_certificate, load_certificate_file
from .msal_base import MsalCredential


class CertificateCredential(MsalCredential):
    """Authenticates as a service principal using a certificate.

    The certificate must have an RSA private key. It is read and parsed at
    construction, so a missing file or wrong password fails immediately.

    Args:
        tenant_id: ID of the service principal's tenant.
        client_id: The service principal's client ID.
        certificate_path: Path to a PEM bundle (key and certificate) or a
            PKCS#12 archive. Required unless ``certificate_data`` is given.
        certificate_data: The bytes of such a file.
        password: Password of the private key or archive, if encrypted.
        send_certificate_chain: Send the public certificate chain with each
            request, enabling subject name/issuer based authentication.
        authority: Authority host. Defaults to the public cloud.

    Raises:
        ValueError: If neither or both certificate sources are given, or the
            certificate cannot be parsed.
        FileNotFoundError: If ``certificate_path`` does not exist.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        certificate_path: str | Path | None = None,
        *,
        certificate_data: bytes | None = None,
        password: str | bytes | None = None,
        send_certificate_chain: bool = False,
        **kwargs: Any,
    ) -> None:
        if not tenant_id:
            raise ValueError("tenant_id should be the id of a Microsoft Entra tenant")
        if (certificate_path is None) == (certificate_data is None):
            raise ValueError("Provide exactly one of certificate_path or certificate_data")

        if certificate_path is not None:
            cert = load_certificate_file(certificate_path, password)
        else:
            cert = load_certificate(certificate_data, password)

        super().__init__(
            client_id,
            tenant_id=tenant_id,
            client_credential=cert.to_msal_credential(send_certificate_chain),
            **kwargs,
        )
        self.thumbprint = cert.thumbprint

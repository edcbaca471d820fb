from __future__ import annotations

import datetime
import ipaddress
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat
from cryptography.x509.oid import NameOID

from .. import console
from ..shell import run
from .inputs import RegistrySettings

KEY_SIZE = 2048
VALIDITY_DAYS = 365
CERT_MODE = 0o644
KEY_MODE = 0o600


@dataclass
class TlsMaterial:
    cert_path: Path
    key_path: Path
    not_valid_after: datetime.datetime


def build_self_signed(address: str, *, days: int = VALIDITY_DAYS) -> tuple[rsa.RSAPrivateKey, x509.Certificate]:
    ip = ipaddress.ip_address(address)
    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, str(ip))])
    now = datetime.datetime.now(datetime.timezone.utc)
    public_key = key.public_key()
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=days))
        # Clients ignore CN matching, the IP SAN is what gets checked.
        .add_extension(x509.SubjectAlternativeName([x509.IPAddress(ip)]), critical=False)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key), critical=False)
        .sign(key, hashes.SHA256())
    )
    return key, cert


def generate_certificate(settings: RegistrySettings) -> TlsMaterial:
    console.info(f"Generating self-signed TLS certificate for IP {settings.address}...")
    key, cert = build_self_signed(settings.address)

    key_bytes = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    _write_private(settings.key_path, key_bytes)

    settings.cert_path.write_bytes(cert.public_bytes(Encoding.PEM))
    os.chmod(settings.cert_path, CERT_MODE)

    console.ok("TLS certificate created.")
    return TlsMaterial(
        cert_path=settings.cert_path,
        key_path=settings.key_path,
        not_valid_after=cert.not_valid_after_utc,
    )


def _write_private(path: Path, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_MODE)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    # O_CREAT mode does not apply to a pre-existing file.
    os.chmod(path, KEY_MODE)


def load_certificate(path: Path) -> x509.Certificate:
    return x509.load_pem_x509_certificate(path.read_bytes())


def certificate_ip_sans(cert: x509.Certificate) -> list[str]:
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return [str(ip) for ip in san.value.get_values_for_type(x509.IPAddress)]


def install_trust(settings: RegistrySettings, *, restart_daemon: bool = True) -> Path:
    """Make the local Docker daemon trust the registry certificate.

    Writes under /etc/docker/certs.d and restarts dockerd, which affects every
    user of the daemon on this host.
    """
    console.info("Adding registry CA to Docker daemon...")
    console.warn(
        f"Host-wide change: writing {settings.trust_anchor_path} and restarting the Docker daemon."
    )
    settings.trust_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(settings.cert_path, settings.trust_anchor_path)
    os.chmod(settings.trust_anchor_path, CERT_MODE)
    if restart_daemon:
        run(["systemctl", "restart", "docker"])
    console.ok("Docker daemon now trusts the registry CA.")
    return settings.trust_anchor_path

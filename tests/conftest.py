import os
import tempfile
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet

# Ambiente isolado antes de qualquer import de src
os.environ.setdefault("FERNET_KEY", Fernet.generate_key().decode())
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CERTIFICATES_DIR"] = tempfile.mkdtemp(prefix="certificados_teste_")

import pytest  # noqa: E402
from cryptography import x509  # noqa: E402
from cryptography.hazmat.primitives import hashes  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, pkcs12  # noqa: E402
from cryptography.x509.oid import NameOID  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.db.crud_empresa import criar_empresa  # noqa: E402
from src.db.crud_socio import criar_socio  # noqa: E402
from src.db.session import init_db  # noqa: E402
from src.infrastructure.storage import CertificateStorage  # noqa: E402
from src.repositories.titulares_repo import TitularRepository  # noqa: E402
from src.services.certificate_service import CertificateService  # noqa: E402

SENHA = "senha123"
VALIDADE_PADRAO = datetime(2027, 5, 10, 23, 30, tzinfo=timezone.utc)
OID_CNPJ = "2.16.76.1.3.3"
OID_CPF = "2.16.76.1.3.1"

_CHAVE = ec.generate_private_key(ec.SECP256R1())


def gerar_pfx(
    common_name=None,
    atributos=(),
    outros_nomes=(),
    senha=SENHA,
    valido_ate=VALIDADE_PADRAO,
    com_certificado=True,
    somente_cadeia=False,
):
    """
    Monta um .pfx autoassinado com os atributos de subject e otherNames informados.

    Com somente_cadeia, o certificado vai apenas na lista de certificados
    adicionais, sem chave privada.
    """
    nome = [x509.NameAttribute(NameOID.COUNTRY_NAME, "BR")]
    if common_name:
        nome.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    for oid, valor in atributos:
        nome.append(x509.NameAttribute(x509.ObjectIdentifier(oid), valor))

    builder = (
        x509.CertificateBuilder()
        .subject_name(x509.Name(nome))
        .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "AC Teste ICP-Brasil")]))
        .public_key(_CHAVE.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(valido_ate - timedelta(days=365))
        .not_valid_after(valido_ate)
    )
    if outros_nomes:
        san = [
            x509.OtherName(x509.ObjectIdentifier(oid), b"\x04" + bytes([len(valor)]) + valor.encode())
            for oid, valor in outros_nomes
        ]
        builder = builder.add_extension(x509.SubjectAlternativeName(san), critical=False)

    cert = builder.sign(_CHAVE, hashes.SHA256())
    if somente_cadeia:
        return pkcs12.serialize_key_and_certificates(
            None, None, None, [cert], BestAvailableEncryption(senha.encode())
        )
    return pkcs12.serialize_key_and_certificates(
        b"teste",
        _CHAVE,
        cert if com_certificado else None,
        None,
        BestAvailableEncryption(senha.encode()),
    )


@pytest.fixture
def fabrica_pfx():
    return gerar_pfx


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    sessao = session_factory()
    yield sessao
    sessao.close()


@pytest.fixture
def storage(tmp_path):
    return CertificateStorage(tmp_path / "certificados", fernet_key=Fernet.generate_key().decode())


@pytest.fixture
def service(storage, session_factory):
    return CertificateService(storage, TitularRepository(session_factory))


@pytest.fixture
def empresa(db):
    return criar_empresa(db, "11.222.333/0001-44", "Empresa Teste LTDA", "SIMPLES")


@pytest.fixture
def socio(db):
    return criar_socio(db, "123.456.789-00", "Maria Souza", "maria@example.com")


def arquivos_armazenados(storage):
    return sorted(p for p in storage.base_dir.rglob("*") if p.is_file())

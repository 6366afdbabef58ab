"""
Utilitários para manipulação de certificados digitais ICP-Brasil.

Decodificação do PKCS#12, extração do documento (CNPJ/CPF) e do nome do
titular, e leitura da data de validade.
"""

import re
from typing import List, Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from ..core.exceptions import (
    DecodeFailedError,
    NoCertificateInContainerError,
    NoIdentityFoundError,
)
from ..infrastructure.logger import get_logger
from ..models.certificado import CertificadoInfo, TipoTitular

logger = get_logger(__name__)

# OIDs da ICP-Brasil para o documento do titular
OID_CNPJ = x509.ObjectIdentifier("2.16.76.1.3.3")
OID_CPF = x509.ObjectIdentifier("2.16.76.1.3.1")

# Formatos legíveis usados no Common Name (pontuação opcional, sem dígitos colados)
PADRAO_CNPJ = re.compile(r"(?<!\d)\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2}(?!\d)")
PADRAO_CPF = re.compile(r"(?<!\d)\d{3}[.\s]?\d{3}[.\s]?\d{3}[-\s]?\d{2}(?!\d)")


def somente_digitos(valor) -> str:
    """Remove tudo que não for dígito."""
    if not valor:
        return ""
    return re.sub(r"\D", "", str(valor))


def formatar_cnpj(cnpj: str) -> str:
    """Formata como 00.000.000/0000-00; devolve o valor original se não tiver 14 dígitos."""
    digitos = somente_digitos(cnpj)
    if len(digitos) != 14:
        return cnpj
    return f"{digitos[:2]}.{digitos[2:5]}.{digitos[5:8]}/{digitos[8:12]}-{digitos[12:]}"


def formatar_cpf(cpf: str) -> str:
    """Formata como 000.000.000-00; devolve o valor original se não tiver 11 dígitos."""
    digitos = somente_digitos(cpf)
    if len(digitos) != 11:
        return cpf
    return f"{digitos[:3]}.{digitos[3:6]}.{digitos[6:9]}-{digitos[9:]}"


def carregar_pfx(conteudo_pfx: bytes, senha: str) -> x509.Certificate:
    """
    Abre o arquivo PKCS#12 e devolve o certificado do titular.

    Args:
        conteudo_pfx: Conteúdo do arquivo .pfx em bytes
        senha: Senha do certificado

    Returns:
        Certificado X.509 associado à chave privada (ou o primeiro do arquivo)

    Raises:
        DecodeFailedError: Senha incorreta, arquivo vazio ou corrompido
        NoCertificateInContainerError: O arquivo não contém certificado
    """
    if not conteudo_pfx:
        raise DecodeFailedError("Arquivo vazio ou não foi possível ler o conteúdo.")

    senha_bytes = senha.encode('utf-8') if senha else None

    try:
        _key, cert, additional_certs = pkcs12.load_key_and_certificates(
            conteudo_pfx,
            senha_bytes
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.warning(f"Falha ao decodificar PKCS#12: {e}")
        raise DecodeFailedError(
            "Não foi possível abrir o certificado. Verifique se o arquivo e a senha estão corretos. "
            "O arquivo pode estar corrompido ou a senha incorreta."
        ) from e

    if cert is None:
        if not additional_certs:
            raise NoCertificateInContainerError("Nenhum certificado encontrado no arquivo PFX.")
        cert = additional_certs[0]

    return cert


def _conteudo_der(valor: bytes) -> bytes:
    """Remove o cabeçalho (tag + tamanho) de um valor DER simples."""
    if len(valor) < 2:
        return valor

    tamanho = valor[1]
    inicio = 2
    if tamanho & 0x80:
        qtd_bytes = tamanho & 0x7F
        tamanho = int.from_bytes(valor[2:2 + qtd_bytes], "big")
        inicio = 2 + qtd_bytes

    return valor[inicio:inicio + tamanho]


def _valores_subject(cert: x509.Certificate, oid: x509.ObjectIdentifier) -> List[str]:
    # Valores ausentes ou que não são texto contam como não encontrados
    return [
        attr.value
        for attr in cert.subject.get_attributes_for_oid(oid)
        if isinstance(attr.value, str) and attr.value.strip()
    ]


def _valores_san(cert: x509.Certificate, oid: x509.ObjectIdentifier) -> List[str]:
    """Valores de otherName com o OID informado no Subject Alternative Name."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []

    valores = []
    for nome in san.get_values_for_type(x509.OtherName):
        if nome.type_id == oid:
            valores.append(_conteudo_der(nome.value).decode("latin-1"))
    return valores


def obter_common_name(cert: x509.Certificate) -> Optional[str]:
    """Obtém o Common Name (CN) do subject, se houver."""
    for attr in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME):
        if isinstance(attr.value, str) and attr.value.strip():
            return attr.value.strip()
    return None


def extrair_documento(cert: x509.Certificate, tipo: TipoTitular) -> str:
    """
    Extrai o CNPJ (empresa) ou CPF (sócio) do certificado, apenas dígitos.

    Ordem de busca:
        1. Atributo do subject com o OID ICP-Brasil do documento
        2. otherName com o mesmo OID no Subject Alternative Name
        3. Documento no formato legível dentro do Common Name

    Para CNPJ o valor do OID pode vir com prefixo, então ficam apenas os
    14 últimos dígitos. Para CPF o valor é usado como está.

    Raises:
        NoIdentityFoundError: Nenhuma das fontes tem o documento
    """
    oid = OID_CNPJ if tipo == TipoTitular.EMPRESA else OID_CPF

    candidatos = [somente_digitos(v) for v in _valores_subject(cert, oid)]
    candidatos = [c for c in candidatos if c]
    if not candidatos:
        candidatos = [c for c in (somente_digitos(v) for v in _valores_san(cert, oid)) if c]

    if candidatos:
        if tipo == TipoTitular.EMPRESA:
            candidatos = [c[-14:] for c in candidatos]
        if len(set(candidatos)) > 1:
            logger.warning(
                f"Certificado com {len(candidatos)} valores para o OID {oid.dotted_string}; "
                f"usando o primeiro ({candidatos[0]})"
            )
        return candidatos[0]

    nome_comum = obter_common_name(cert)
    if nome_comum:
        padrao = PADRAO_CNPJ if tipo == TipoTitular.EMPRESA else PADRAO_CPF
        match = padrao.search(nome_comum)
        if match:
            return somente_digitos(match.group(0))

    documento = "CNPJ" if tipo == TipoTitular.EMPRESA else "CPF"
    raise NoIdentityFoundError(f"Não foi possível extrair o {documento} do certificado.")


def extrair_nome_titular(cert: x509.Certificate) -> Optional[str]:
    """
    Nome do titular a partir do Common Name.

    Certificados ICP-Brasil usam o formato "NOME:DOCUMENTO"; o documento é descartado.
    """
    nome_comum = obter_common_name(cert)
    if not nome_comum:
        return None
    nome = nome_comum.split(":", 1)[0].strip()
    return nome or None


def extrair_validade(cert: x509.Certificate) -> str:
    """Data de vencimento (notAfter, UTC) no formato YYYY-MM-DD."""
    return cert.not_valid_after_utc.date().isoformat()


def extrair_informacoes_certificado(conteudo_pfx: bytes, senha: str) -> CertificadoInfo:
    """
    Extrai informações do certificado sem conferir titular nem gravar nada.

    Raises:
        DecodeFailedError, NoCertificateInContainerError
    """
    cert = carregar_pfx(conteudo_pfx, senha)

    documentos = {}
    for tipo in TipoTitular:
        try:
            documentos[tipo] = extrair_documento(cert, tipo)
        except NoIdentityFoundError:
            documentos[tipo] = None

    emissores = cert.issuer.get_attributes_for_oid(NameOID.COMMON_NAME)
    emissor = emissores[0].value if emissores else cert.issuer.rfc4514_string()

    cnpj = documentos[TipoTitular.EMPRESA]
    cpf = documentos[TipoTitular.SOCIO]
    return CertificadoInfo(
        nome_titular=extrair_nome_titular(cert),
        cnpj=formatar_cnpj(cnpj) if cnpj else None,
        cpf=formatar_cpf(cpf) if cpf else None,
        emissor=emissor or None,
        valido_ate=extrair_validade(cert),
    )

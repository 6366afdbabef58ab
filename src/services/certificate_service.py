"""
Service para ingestão de certificados digitais.

Este service centraliza o fluxo de envio de um certificado (.pfx) para uma
empresa (A1) ou sócio (e-CPF):
- Decodificação do PKCS#12 com a senha informada
- Extração e conferência do documento/nome do titular
- Leitura da data de validade
- Armazenamento do arquivo e gravação da validade no cadastro

Qualquer falha interrompe o fluxo sem gravar nada. A senha nunca é gravada.
"""

import hashlib
import threading
from contextlib import contextmanager
from typing import Callable, Optional, Set, Tuple

from ..core.exceptions import (
    IdentityMismatchError,
    IngestionError,
    IngestionInProgressError,
    PersistFailedError,
    StorageUploadFailedError,
)
from ..infrastructure.logger import get_logger
from ..infrastructure.storage import CertificateStorage, get_storage
from ..models.certificado import (
    EtapaIngestao,
    ResultadoIngestao,
    TipoTitular,
    TitularCertificado,
)
from ..repositories.titulares_repo import TitularRepository
from ..utils.certificado_utils import (
    carregar_pfx,
    extrair_documento,
    extrair_nome_titular,
    extrair_validade,
    formatar_cnpj,
    formatar_cpf,
    somente_digitos,
)

logger = get_logger(__name__)


def conferir_identidade(
    tipo: TipoTitular,
    documento_extraido: str,
    nome_extraido: Optional[str],
    documento_cadastrado: str,
    nome_cadastrado: Optional[str] = None,
) -> None:
    """
    Confere se o certificado pertence ao titular cadastrado.

    Empresa: o CNPJ precisa ser idêntico.
    Sócio: o CPF precisa ser idêntico ou um conter o outro (alguns emissores
    gravam o CPF junto de outros dados), e o nome precisa ser igual sem
    diferenciar maiúsculas. As duas conferências são obrigatórias.

    Raises:
        IdentityMismatchError: Com as conferências que falharam e os valores extraídos
    """
    extraido = somente_digitos(documento_extraido)
    cadastrado = somente_digitos(documento_cadastrado)

    if tipo == TipoTitular.EMPRESA:
        if not extraido or extraido != cadastrado:
            raise IdentityMismatchError(
                f"Este certificado pertence a outro CNPJ ({formatar_cnpj(extraido)}). "
                f"Você está tentando adicioná-lo para a empresa com CNPJ {formatar_cnpj(cadastrado)}.",
                falhas=["documento"],
                documento_extraido=extraido,
                nome_extraido=nome_extraido,
            )
        return

    falhas = []
    detalhes = []

    documento_confere = bool(extraido and cadastrado) and (
        extraido == cadastrado or cadastrado in extraido or extraido in cadastrado
    )
    if not documento_confere:
        falhas.append("documento")
        detalhes.append(
            f"o CPF do certificado ({formatar_cpf(extraido)}) não corresponde ao CPF cadastrado ({formatar_cpf(cadastrado)})"
        )

    nome_confere = bool(nome_extraido and nome_cadastrado) and (
        nome_extraido.strip().casefold() == nome_cadastrado.strip().casefold()
    )
    if not nome_confere:
        falhas.append("nome")
        detalhes.append(
            f"o nome do certificado ({nome_extraido or 'não informado'}) não corresponde ao nome cadastrado ({nome_cadastrado})"
        )

    if falhas:
        raise IdentityMismatchError(
            "Este certificado pertence a outro titular: " + "; ".join(detalhes) + ".",
            falhas=falhas,
            documento_extraido=extraido,
            nome_extraido=nome_extraido,
        )


class CertificateService:
    """Service de ingestão de certificados digitais."""

    def __init__(self, storage: CertificateStorage, repositorio: TitularRepository):
        self.storage = storage
        self.repositorio = repositorio
        # Titulares com ingestão em andamento, chave (tipo, id)
        self.lock = threading.Lock()
        self.em_andamento: Set[Tuple[TipoTitular, str]] = set()

    @contextmanager
    def _reservar_titular(self, titular: TitularCertificado):
        chave = (titular.tipo, titular.id)
        with self.lock:
            if chave in self.em_andamento:
                raise IngestionInProgressError(
                    "Já existe um certificado sendo processado para este titular. Aguarde a conclusão."
                )
            self.em_andamento.add(chave)
        try:
            yield
        finally:
            with self.lock:
                self.em_andamento.discard(chave)

    @staticmethod
    def referencia_arquivo(titular: TitularCertificado, conteudo_pfx: bytes) -> str:
        """Caminho do arquivo no armazenamento; o mesmo arquivo gera sempre a mesma referência."""
        digest = hashlib.sha256(conteudo_pfx).hexdigest()[:32]
        return f"{titular.tipo.value}/{titular.id}/{digest}.pfx.enc"

    def ingerir(
        self,
        conteudo_pfx: bytes,
        senha: str,
        titular: TitularCertificado,
        on_etapa: Optional[Callable[[EtapaIngestao], None]] = None,
    ) -> ResultadoIngestao:
        """
        Valida o certificado para o titular e grava validade e arquivo.

        Args:
            conteudo_pfx: Conteúdo do arquivo .pfx em bytes
            senha: Senha do certificado (usada só na decodificação)
            titular: Empresa ou sócio que deve ser o dono do certificado
            on_etapa: Chamado a cada mudança de etapa (inclusive FALHOU)

        Returns:
            ResultadoIngestao com a validade (YYYY-MM-DD) e a referência do arquivo

        Raises:
            IngestionError: Uma das falhas de src.core.exceptions; nada é gravado
        """
        etapa = EtapaIngestao.INICIO

        def avancar(proxima: EtapaIngestao):
            nonlocal etapa
            etapa = proxima
            if on_etapa:
                on_etapa(proxima)

        logger.info(f"Ingestão de certificado iniciada: {titular.tipo.value} {titular.id}")
        avancar(EtapaIngestao.INICIO)
        try:
            # Outra ingestão do mesmo titular falha aqui, ainda na etapa INICIO
            with self._reservar_titular(titular):
                avancar(EtapaIngestao.DECODIFICACAO)
                cert = carregar_pfx(conteudo_pfx, senha)

                avancar(EtapaIngestao.EXTRACAO_IDENTIDADE)
                documento = extrair_documento(cert, titular.tipo)
                nome = extrair_nome_titular(cert)

                avancar(EtapaIngestao.CONFERENCIA_IDENTIDADE)
                conferir_identidade(titular.tipo, documento, nome, titular.documento, titular.nome)

                avancar(EtapaIngestao.EXTRACAO_VALIDADE)
                valido_ate = extrair_validade(cert)

                avancar(EtapaIngestao.PERSISTENCIA)
                referencia = self._persistir(titular, conteudo_pfx, valido_ate)
        except IngestionError as e:
            e.etapa = etapa
            logger.warning(
                f"Ingestão falhou na etapa {etapa.value} para {titular.tipo.value} {titular.id}: "
                f"[{e.codigo}] {e.mensagem}",
                exc_info=e.__cause__,
            )
            avancar(EtapaIngestao.FALHOU)
            raise

        avancar(EtapaIngestao.CONCLUIDO)
        logger.info(
            f"Certificado gravado para {titular.tipo.value} {titular.id}: válido até {valido_ate}"
        )
        return ResultadoIngestao(valido_ate=valido_ate, referencia_arquivo=referencia)

    def _persistir(self, titular: TitularCertificado, conteudo_pfx: bytes, valido_ate: str) -> str:
        referencia = self.referencia_arquivo(titular, conteudo_pfx)

        try:
            anterior = self.repositorio.obter_referencia_atual(titular)
        except Exception as e:
            raise PersistFailedError("Não foi possível gravar a validade do certificado no cadastro.") from e

        try:
            self.storage.salvar(referencia, conteudo_pfx)
        except (OSError, ValueError) as e:
            raise StorageUploadFailedError("Não foi possível armazenar o arquivo do certificado.") from e

        try:
            self.repositorio.gravar_certificado(titular, valido_ate, referencia)
        except Exception as e:
            # Sem gravação parcial: descarta o arquivo novo, mas nunca o que o cadastro já referencia
            if referencia != anterior:
                self._remover_silenciosamente(referencia)
            raise PersistFailedError("Não foi possível gravar a validade do certificado no cadastro.") from e

        if anterior and anterior != referencia:
            self._remover_silenciosamente(anterior)

        return referencia

    def _remover_silenciosamente(self, referencia: str) -> None:
        try:
            self.storage.remover(referencia)
        except (OSError, ValueError) as e:
            logger.warning(f"Não foi possível remover o arquivo {referencia}: {e}")


_certificate_service: Optional[CertificateService] = None


def get_certificate_service() -> CertificateService:
    """
    Obtém a instância singleton do CertificateService.

    Returns:
        Instância do CertificateService com o armazenamento e o banco configurados
    """
    global _certificate_service
    if _certificate_service is None:
        _certificate_service = CertificateService(get_storage(), TitularRepository())
    return _certificate_service

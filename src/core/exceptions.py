"""
Erros da ingestão de certificados digitais.

Cada falha tem um código estável (usado pela API) e uma mensagem pronta
para ser exibida ao usuário. A exceção original, quando existe, fica em
``__cause__`` e vai apenas para o log.
"""

from typing import List, Optional


class IngestionError(Exception):
    """Base para todas as falhas de ingestão de certificado."""

    codigo = "falha_ingestao"
    status_code = 400

    def __init__(self, mensagem: str):
        super().__init__(mensagem)
        self.mensagem = mensagem


class DecodeFailedError(IngestionError):
    """Senha incorreta ou arquivo PKCS#12 corrompido."""

    codigo = "decodificacao_falhou"


class NoCertificateInContainerError(IngestionError):
    codigo = "certificado_ausente"


class NoIdentityFoundError(IngestionError):
    codigo = "documento_nao_encontrado"


class IdentityMismatchError(IngestionError):
    """
    O certificado pertence a outro titular.

    ``falhas`` lista as conferências que não passaram ("documento", "nome").
    """

    codigo = "titular_divergente"

    def __init__(
        self,
        mensagem: str,
        falhas: List[str],
        documento_extraido: Optional[str] = None,
        nome_extraido: Optional[str] = None,
    ):
        super().__init__(mensagem)
        self.falhas = falhas
        self.documento_extraido = documento_extraido
        self.nome_extraido = nome_extraido


class StorageUploadFailedError(IngestionError):
    codigo = "armazenamento_falhou"
    status_code = 500


class PersistFailedError(IngestionError):
    codigo = "gravacao_falhou"
    status_code = 500


class IngestionInProgressError(IngestionError):
    """Já existe uma ingestão em andamento para o mesmo titular."""

    codigo = "ingestao_em_andamento"
    status_code = 409

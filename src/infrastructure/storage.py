"""
Armazenamento dos arquivos de certificado enviados.

Os arquivos são criptografados com Fernet e gravados em disco, dentro de
CERTIFICATES_DIR. A referência devolvida é o caminho relativo (POSIX) do
arquivo, que é o valor gravado no cadastro do titular.
"""

import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken

from .config import CERTIFICATES_DIR, FERNET_KEY
from .logger import get_logger

logger = get_logger(__name__)


class CertificateStorage:
    """Guarda e recupera arquivos de certificado criptografados."""

    def __init__(self, base_dir: Union[str, Path] = CERTIFICATES_DIR, fernet_key: Optional[str] = None):
        key = fernet_key or FERNET_KEY
        if not key:
            raise ValueError("FERNET_KEY não configurada. Verifique o arquivo .env")

        try:
            key_bytes = key.encode() if isinstance(key, str) else key
            self.fernet = Fernet(key_bytes)
        except (ValueError, TypeError) as e:
            logger.error(f"Erro ao inicializar Fernet: {str(e)}")
            raise ValueError(f"FERNET_KEY inválida: {str(e)}")

        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _resolver(self, referencia: str) -> Path:
        relativo = PurePosixPath(referencia)
        if relativo.is_absolute() or ".." in relativo.parts or not relativo.parts:
            raise ValueError(f"Referência de arquivo inválida: {referencia}")
        return self.base_dir.joinpath(*relativo.parts)

    def salvar(self, referencia: str, conteudo: bytes) -> str:
        """
        Criptografa e grava o conteúdo no caminho relativo informado.

        Returns:
            A referência do arquivo gravado

        Raises:
            ValueError: Se a referência sair do diretório base
            OSError: Se houver erro ao gravar o arquivo
        """
        file_path = self._resolver(referencia)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            # Grava num temporário e substitui; o arquivo anterior fica intacto se a escrita falhar
            fd, temporario = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(self.fernet.encrypt(conteudo))
                os.replace(temporario, file_path)
            except BaseException:
                Path(temporario).unlink(missing_ok=True)
                raise
        except PermissionError as e:
            error_msg = f"Sem permissão para escrever em {file_path.parent}: {str(e)}"
            logger.error(error_msg)
            raise PermissionError(error_msg) from e
        except OSError as e:
            error_msg = f"Erro ao salvar arquivo em {file_path}: {str(e)}"
            logger.error(error_msg)
            raise OSError(error_msg) from e

        logger.info(f"Certificado armazenado em: {referencia}")
        return referencia

    def carregar(self, referencia: str) -> bytes:
        """
        Lê e descriptografa um arquivo armazenado.

        Raises:
            FileNotFoundError: Se o arquivo não existir
            ValueError: Se o conteúdo não puder ser descriptografado com a chave atual
        """
        file_path = self._resolver(referencia)
        if not file_path.exists():
            raise FileNotFoundError(f"Certificado não encontrado: {referencia}")

        with open(file_path, "rb") as f:
            encrypted = f.read()

        try:
            return self.fernet.decrypt(encrypted)
        except InvalidToken as e:
            raise ValueError(f"Não foi possível descriptografar {referencia}. A FERNET_KEY mudou?") from e

    def existe(self, referencia: str) -> bool:
        return self._resolver(referencia).exists()

    def remover(self, referencia: str) -> None:
        """Apaga o arquivo, se existir."""
        file_path = self._resolver(referencia)
        if file_path.exists():
            file_path.unlink()
            logger.info(f"Certificado removido: {referencia}")


_storage: Optional[CertificateStorage] = None


def get_storage() -> CertificateStorage:
    """Instância compartilhada do armazenamento configurado em CERTIFICATES_DIR."""
    global _storage
    if _storage is None:
        _storage = CertificateStorage()
    return _storage

"""
Acesso aos cadastros de empresas e sócios usado pela ingestão de certificados.
"""

from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..db.crud_empresa import atualizar_certificado_empresa, obter_empresa_por_id
from ..db.crud_socio import atualizar_ecpf_socio, obter_socio_por_id
from ..db.session import SessionLocal
from ..models.certificado import TipoTitular, TitularCertificado


class TitularRepository:
    """Lê e atualiza o cadastro do titular de um certificado."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def obter_titular(self, tipo: TipoTitular, titular_id: str) -> Optional[TitularCertificado]:
        db = self.session_factory()
        try:
            if tipo == TipoTitular.EMPRESA:
                empresa = obter_empresa_por_id(db, titular_id)
                if not empresa:
                    return None
                return TitularCertificado(tipo=tipo, id=empresa.id, documento=empresa.cnpj, nome=empresa.razao_social)

            socio = obter_socio_por_id(db, titular_id)
            if not socio:
                return None
            return TitularCertificado(tipo=tipo, id=socio.id, documento=socio.cpf, nome=socio.nome)
        finally:
            db.close()

    def obter_referencia_atual(self, titular: TitularCertificado) -> Optional[str]:
        """Referência do arquivo de certificado já gravada no titular."""
        db = self.session_factory()
        try:
            if titular.tipo == TipoTitular.EMPRESA:
                empresa = obter_empresa_por_id(db, titular.id)
                return empresa.certificado_arquivo if empresa else None
            socio = obter_socio_por_id(db, titular.id)
            return socio.ecpf_arquivo if socio else None
        finally:
            db.close()

    def gravar_certificado(self, titular: TitularCertificado, valido_ate: str, referencia: str) -> None:
        """
        Atualiza validade e referência do certificado do titular.

        Raises:
            LookupError: Se o titular não existir mais
        """
        db = self.session_factory()
        try:
            if titular.tipo == TipoTitular.EMPRESA:
                atualizado = atualizar_certificado_empresa(db, titular.id, valido_ate, referencia)
            else:
                atualizado = atualizar_ecpf_socio(db, titular.id, valido_ate, referencia)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        if atualizado is None:
            raise LookupError(f"{titular.tipo.value} {titular.id} não encontrado")

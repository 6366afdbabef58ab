from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Empresa
from ..utils.certificado_utils import somente_digitos


def criar_empresa(db: Session, cnpj: str, razao_social: str, regime: Optional[str] = None) -> Empresa:
    empresa = Empresa(cnpj=somente_digitos(cnpj), razao_social=razao_social.strip(), regime=regime)
    db.add(empresa)
    db.commit()
    db.refresh(empresa)
    return empresa


def listar_empresas(db: Session, skip: int = 0, limit: int = 100) -> List[Empresa]:
    stmt = select(Empresa).order_by(Empresa.razao_social).offset(skip).limit(limit)
    return list(db.scalars(stmt))


def obter_empresa_por_id(db: Session, empresa_id: str) -> Optional[Empresa]:
    return db.get(Empresa, empresa_id)


def obter_empresa_por_cnpj(db: Session, cnpj: str) -> Optional[Empresa]:
    return db.scalars(select(Empresa).where(Empresa.cnpj == somente_digitos(cnpj))).first()


def atualizar_certificado_empresa(db: Session, empresa_id: str, validade: str, arquivo: str) -> Optional[Empresa]:
    """Grava apenas validade e referência do certificado A1; os demais campos ficam intactos."""
    empresa = db.get(Empresa, empresa_id)
    if not empresa:
        return None

    empresa.certificado_validade = validade
    empresa.certificado_arquivo = arquivo
    db.commit()
    db.refresh(empresa)
    return empresa

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Socio
from ..utils.certificado_utils import somente_digitos


def criar_socio(db: Session, cpf: str, nome: str, email: Optional[str] = None) -> Socio:
    socio = Socio(cpf=somente_digitos(cpf), nome=nome.strip(), email=email)
    db.add(socio)
    db.commit()
    db.refresh(socio)
    return socio


def listar_socios(db: Session, skip: int = 0, limit: int = 100) -> List[Socio]:
    stmt = select(Socio).order_by(Socio.nome).offset(skip).limit(limit)
    return list(db.scalars(stmt))


def obter_socio_por_id(db: Session, socio_id: str) -> Optional[Socio]:
    return db.get(Socio, socio_id)


def obter_socio_por_cpf(db: Session, cpf: str) -> Optional[Socio]:
    return db.scalars(select(Socio).where(Socio.cpf == somente_digitos(cpf))).first()


def atualizar_ecpf_socio(db: Session, socio_id: str, validade: str, arquivo: str) -> Optional[Socio]:
    """Grava validade e referência do e-CPF e marca o sócio como possuidor de e-CPF."""
    socio = db.get(Socio, socio_id)
    if not socio:
        return None

    socio.ecpf_validade = validade
    socio.ecpf_arquivo = arquivo
    socio.possui_ecpf = True
    db.commit()
    db.refresh(socio)
    return socio

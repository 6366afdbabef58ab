"""
Modelos ORM das empresas e sócios atendidos pelo escritório.

As datas de validade dos certificados ficam como texto YYYY-MM-DD.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .session import Base


def _novo_id() -> str:
    return str(uuid.uuid4())


class Empresa(Base):
    __tablename__ = "empresas"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_novo_id)
    cnpj: Mapped[str] = mapped_column(String(14), unique=True, index=True)
    razao_social: Mapped[str] = mapped_column(String(255))
    regime: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    ativo: Mapped[bool] = mapped_column(Boolean, default=True)
    certificado_validade: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    certificado_arquivo: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class Socio(Base):
    __tablename__ = "socios"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_novo_id)
    cpf: Mapped[str] = mapped_column(String(11), unique=True, index=True)
    nome: Mapped[str] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    possui_ecpf: Mapped[bool] = mapped_column(Boolean, default=False)
    ecpf_validade: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    ecpf_arquivo: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

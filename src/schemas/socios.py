"""
Schemas Pydantic para o cadastro de sócios.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SocioCreate(BaseModel):
    """Schema para criação de sócio."""
    cpf: str = Field(..., description="CPF do sócio (com ou sem formatação)")
    nome: str = Field(..., min_length=1, description="Nome completo, como consta no e-CPF")
    email: Optional[str] = None

    @field_validator('cpf')
    @classmethod
    def validar_cpf(cls, v: str) -> str:
        """Valida e limpa o CPF."""
        cpf_limpo = v.replace(".", "").replace("-", "").strip()
        if len(cpf_limpo) != 11 or not cpf_limpo.isdigit():
            raise ValueError("CPF deve conter exatamente 11 dígitos")
        return cpf_limpo


class SocioOut(BaseModel):
    """Schema de resposta para sócio."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    cpf: str
    nome: str
    email: Optional[str] = None
    possui_ecpf: bool
    ecpf_validade: Optional[str] = Field(None, description="Validade do e-CPF (YYYY-MM-DD)")
    ecpf_arquivo: Optional[str] = Field(None, description="Referência do arquivo do e-CPF")
    created_at: Optional[datetime] = None


class SocioListResponse(BaseModel):
    socios: List[SocioOut]
    total: int

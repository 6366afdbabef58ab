"""
Schemas Pydantic para o cadastro de empresas.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

RegimeTipo = Literal["MEI", "SIMPLES", "PRESUMIDO", "REAL"]


class EmpresaCreate(BaseModel):
    """Schema para criação de empresa."""
    cnpj: str = Field(..., description="CNPJ da empresa (com ou sem formatação)")
    razao_social: str = Field(..., min_length=1, description="Razão social")
    regime: Optional[RegimeTipo] = Field(None, description="Regime tributário")

    @field_validator('cnpj')
    @classmethod
    def validar_cnpj(cls, v: str) -> str:
        """Valida e limpa o CNPJ."""
        cnpj_limpo = v.replace(".", "").replace("/", "").replace("-", "").strip()
        if len(cnpj_limpo) != 14 or not cnpj_limpo.isdigit():
            raise ValueError("CNPJ deve conter exatamente 14 dígitos")
        return cnpj_limpo


class EmpresaOut(BaseModel):
    """Schema de resposta para empresa."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    cnpj: str
    razao_social: str
    regime: Optional[str] = None
    ativo: bool
    certificado_validade: Optional[str] = Field(None, description="Validade do certificado A1 (YYYY-MM-DD)")
    certificado_arquivo: Optional[str] = Field(None, description="Referência do arquivo do certificado A1")
    created_at: Optional[datetime] = None


class EmpresaListResponse(BaseModel):
    empresas: List[EmpresaOut]
    total: int

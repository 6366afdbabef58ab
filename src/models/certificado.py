"""
Modelos relacionados a certificados digitais.
"""

from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class TipoTitular(str, Enum):
    """Tipo de titular de um certificado."""
    EMPRESA = "empresa"  # certificado A1 (CNPJ)
    SOCIO = "socio"  # e-CPF


class EtapaIngestao(str, Enum):
    """Etapas do fluxo de ingestão de um certificado."""
    INICIO = "inicio"
    DECODIFICACAO = "decodificacao"
    EXTRACAO_IDENTIDADE = "extracao_identidade"
    CONFERENCIA_IDENTIDADE = "conferencia_identidade"
    EXTRACAO_VALIDADE = "extracao_validade"
    PERSISTENCIA = "persistencia"
    CONCLUIDO = "concluido"
    FALHOU = "falhou"


class TitularCertificado(BaseModel):
    """Empresa ou sócio ao qual o certificado enviado deve pertencer."""
    tipo: TipoTitular
    id: str
    documento: str  # CNPJ ou CPF cadastrado, com ou sem formatação
    nome: str


class ResultadoIngestao(BaseModel):
    """Dados gravados no titular após uma ingestão bem-sucedida."""
    valido_ate: str  # YYYY-MM-DD
    referencia_arquivo: str


class IngestaoResponse(BaseModel):
    """Resposta dos endpoints de envio de certificado."""
    success: bool
    tipo: TipoTitular
    titular_id: str
    valido_ate: str
    referencia_arquivo: str
    message: Optional[str] = None


class CertificadoInfo(BaseModel):
    """Informações extraídas de um certificado digital sem gravar nada."""
    nome_titular: Optional[str] = None
    cnpj: Optional[str] = None
    cpf: Optional[str] = None
    emissor: Optional[str] = None
    valido_ate: str


class SeveridadeAlerta(str, Enum):
    MEDIA = "medium"
    ALTA = "high"
    CRITICA = "critical"


class TipoAlerta(str, Enum):
    CERTIFICADO_A_VENCER = "certificado_a_vencer"
    CERTIFICADO_VENCIDO = "certificado_vencido"


class AlertaCertificado(BaseModel):
    """Aviso de certificado vencido ou próximo do vencimento."""
    id: str
    tipo: TipoAlerta
    titulo: str
    mensagem: str
    data: date
    link: str
    severidade: SeveridadeAlerta


class AlertasResponse(BaseModel):
    alertas: List[AlertaCertificado]
    total: int
    a_vencer_30_dias: int

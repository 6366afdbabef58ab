"""
Endpoint de alertas de vencimento de certificados.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import Empresa, Socio
from ..db.session import get_db
from ..models.certificado import AlertasResponse
from ..services.alert_service import contar_certificados_a_vencer, gerar_alertas_certificados

router = APIRouter(prefix="/api/alertas", tags=["Alertas"])


@router.get("/certificados", response_model=AlertasResponse, summary="Certificados vencidos ou a vencer")
def get_alertas_certificados(db: Session = Depends(get_db)) -> AlertasResponse:
    """
    Certificados A1 e e-CPF vencidos ou que vencem nos próximos dias.

    Também informa quantos vencem nos próximos 30 dias (indicador do painel).
    """
    empresas = list(db.scalars(select(Empresa).where(Empresa.certificado_validade.is_not(None))))
    socios = list(db.scalars(select(Socio).where(Socio.ecpf_validade.is_not(None))))

    alertas = gerar_alertas_certificados(empresas, socios)
    return AlertasResponse(
        alertas=alertas,
        total=len(alertas),
        a_vencer_30_dias=contar_certificados_a_vencer(empresas, socios),
    )

"""
Endpoints FastAPI para o cadastro de empresas e o envio do certificado A1.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.crud_empresa import criar_empresa, listar_empresas, obter_empresa_por_cnpj, obter_empresa_por_id
from ..db.session import get_db
from ..infrastructure.logger import get_logger
from ..models.certificado import IngestaoResponse, TipoTitular
from ..schemas.empresas import EmpresaCreate, EmpresaListResponse, EmpresaOut
from ..services.certificate_service import CertificateService, get_certificate_service
from .certificado import processar_envio

logger = get_logger(__name__)

router = APIRouter(prefix="/api/empresas", tags=["Empresas"])


@router.get("", response_model=EmpresaListResponse, summary="Listar empresas")
def get_empresas(
    skip: int = Query(0, ge=0, description="Número de registros para pular"),
    limit: int = Query(100, ge=1, le=1000, description="Número máximo de registros"),
    db: Session = Depends(get_db),
) -> EmpresaListResponse:
    empresas = listar_empresas(db, skip=skip, limit=limit)
    return EmpresaListResponse(
        empresas=[EmpresaOut.model_validate(e) for e in empresas],
        total=len(empresas),
    )


@router.post("", response_model=EmpresaOut, status_code=status.HTTP_201_CREATED, summary="Criar empresa")
def post_empresa(body: EmpresaCreate, db: Session = Depends(get_db)) -> EmpresaOut:
    if obter_empresa_por_cnpj(db, body.cnpj):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Empresa com CNPJ {body.cnpj} já existe"
        )

    try:
        empresa = criar_empresa(db, body.cnpj, body.razao_social, body.regime)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Empresa com CNPJ {body.cnpj} já existe"
        )

    logger.info(f"Empresa criada: {empresa.razao_social} (CNPJ: {empresa.cnpj})")
    return EmpresaOut.model_validate(empresa)


@router.get("/{empresa_id}", response_model=EmpresaOut, summary="Buscar empresa por ID")
def get_empresa(empresa_id: str, db: Session = Depends(get_db)) -> EmpresaOut:
    empresa = obter_empresa_por_id(db, empresa_id)
    if not empresa:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Empresa {empresa_id} não encontrada"
        )
    return EmpresaOut.model_validate(empresa)


@router.post(
    "/{empresa_id}/certificado",
    response_model=IngestaoResponse,
    summary="Enviar certificado A1 da empresa"
)
async def post_certificado_empresa(
    empresa_id: str,
    certificado: UploadFile = File(...),
    senha: str = Form(...),
    service: CertificateService = Depends(get_certificate_service),
):
    """
    Valida o certificado A1 contra o CNPJ da empresa e grava a validade.

    O arquivo é armazenado criptografado; a senha não é armazenada.
    """
    logger.info(f"Endpoint /api/empresas/{empresa_id}/certificado chamado")
    return await processar_envio(TipoTitular.EMPRESA, empresa_id, certificado, senha, service)

"""
Endpoints FastAPI para o cadastro de sócios e o envio do e-CPF.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.crud_socio import criar_socio, listar_socios, obter_socio_por_cpf, obter_socio_por_id
from ..db.session import get_db
from ..infrastructure.logger import get_logger
from ..models.certificado import IngestaoResponse, TipoTitular
from ..schemas.socios import SocioCreate, SocioListResponse, SocioOut
from ..services.certificate_service import CertificateService, get_certificate_service
from .certificado import processar_envio

logger = get_logger(__name__)

router = APIRouter(prefix="/api/socios", tags=["Sócios"])


@router.get("", response_model=SocioListResponse, summary="Listar sócios")
def get_socios(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> SocioListResponse:
    socios = listar_socios(db, skip=skip, limit=limit)
    return SocioListResponse(socios=[SocioOut.model_validate(s) for s in socios], total=len(socios))


@router.post("", response_model=SocioOut, status_code=status.HTTP_201_CREATED, summary="Criar sócio")
def post_socio(body: SocioCreate, db: Session = Depends(get_db)) -> SocioOut:
    if obter_socio_por_cpf(db, body.cpf):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Sócio com CPF {body.cpf} já existe"
        )

    try:
        socio = criar_socio(db, body.cpf, body.nome, body.email)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Sócio com CPF {body.cpf} já existe"
        )

    logger.info(f"Sócio criado: {socio.nome}")
    return SocioOut.model_validate(socio)


@router.get("/{socio_id}", response_model=SocioOut, summary="Buscar sócio por ID")
def get_socio(socio_id: str, db: Session = Depends(get_db)) -> SocioOut:
    socio = obter_socio_por_id(db, socio_id)
    if not socio:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sócio {socio_id} não encontrado"
        )
    return SocioOut.model_validate(socio)


@router.post("/{socio_id}/ecpf", response_model=IngestaoResponse, summary="Enviar e-CPF do sócio")
async def post_ecpf_socio(
    socio_id: str,
    certificado: UploadFile = File(...),
    senha: str = Form(...),
    service: CertificateService = Depends(get_certificate_service),
):
    """
    Valida o e-CPF contra CPF e nome do sócio e grava a validade.

    CPF e nome precisam conferir; o arquivo é armazenado criptografado e a
    senha não é armazenada.
    """
    logger.info(f"Endpoint /api/socios/{socio_id}/ecpf chamado")
    return await processar_envio(TipoTitular.SOCIO, socio_id, certificado, senha, service)

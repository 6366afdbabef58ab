"""
Endpoints FastAPI para certificados digitais.

Este módulo concentra o tratamento comum dos envios de certificado
(A1 de empresas e e-CPF de sócios) e o endpoint de inspeção, que lê um
certificado sem gravar nada.
"""

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ..core.exceptions import IdentityMismatchError, IngestionError
from ..infrastructure.logger import get_logger
from ..models.certificado import CertificadoInfo, IngestaoResponse, TipoTitular
from ..services.certificate_service import CertificateService
from ..utils.certificado_utils import extrair_informacoes_certificado

logger = get_logger(__name__)

router = APIRouter(prefix="/api/certificados", tags=["Certificados"])


def resposta_erro_ingestao(e: IngestionError) -> JSONResponse:
    """Converte uma falha de ingestão na resposta JSON exibida ao usuário."""
    content = {
        "success": False,
        "erro": e.codigo,
        "message": e.mensagem,
    }
    if isinstance(e, IdentityMismatchError):
        content["falhas"] = e.falhas
    return JSONResponse(status_code=e.status_code, content=content)


async def ler_upload(certificado: UploadFile, senha: str) -> bytes:
    """
    Lê o arquivo enviado; a extensão (.pfx/.p12) não é exigida.

    Raises:
        HTTPException: Se a senha ou o arquivo estiverem vazios
    """
    if not senha:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Por favor, selecione um arquivo .pfx e digite a senha."
        )

    conteudo = await certificado.read()
    if not conteudo:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Arquivo vazio ou não foi possível ler o conteúdo"
        )

    logger.info(f"Arquivo {certificado.filename} lido. Tamanho: {len(conteudo)} bytes")
    return conteudo


async def processar_envio(
    tipo: TipoTitular,
    titular_id: str,
    certificado: UploadFile,
    senha: str,
    service: CertificateService,
):
    """Fluxo comum dos endpoints de envio de certificado de empresa e de sócio."""
    titular = await run_in_threadpool(service.repositorio.obter_titular, tipo, titular_id)
    if titular is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{'Empresa' if tipo == TipoTitular.EMPRESA else 'Sócio'} {titular_id} não encontrado"
        )

    conteudo = await ler_upload(certificado, senha)

    try:
        resultado = await run_in_threadpool(service.ingerir, conteudo, senha, titular)
    except IngestionError as e:
        return resposta_erro_ingestao(e)

    return IngestaoResponse(
        success=True,
        tipo=tipo,
        titular_id=titular.id,
        valido_ate=resultado.valido_ate,
        referencia_arquivo=resultado.referencia_arquivo,
        message=f"A data de validade ({resultado.valido_ate}) foi salva para {titular.nome}.",
    )


@router.post(
    "/inspecionar",
    response_model=CertificadoInfo,
    summary="Ler informações de um certificado sem gravar"
)
async def inspecionar_certificado(
    certificado: UploadFile = File(...),
    senha: str = Form(...),
):
    """
    Abre o certificado e devolve titular, CNPJ/CPF, emissor e validade.

    Nada é armazenado: nem o arquivo, nem a senha.
    """
    conteudo = await ler_upload(certificado, senha)

    try:
        return await run_in_threadpool(extrair_informacoes_certificado, conteudo, senha)
    except IngestionError as e:
        logger.warning(f"Falha ao inspecionar certificado: [{e.codigo}] {e.mensagem}")
        return resposta_erro_ingestao(e)

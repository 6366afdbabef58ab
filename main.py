"""
Ponto de entrada principal da aplicação FastAPI.

Este arquivo configura e inicializa o servidor FastAPI, registra os routers
e configura middlewares (CORS, tratamento de erros, etc.).

Execução: uvicorn main:app --reload
"""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

# IMPORTANTE: Carregar .env ANTES de importar qualquer módulo que use configurações
backend_dir = os.path.dirname(os.path.abspath(__file__))
load_dotenv(os.path.join(backend_dir, ".env"))
load_dotenv()  # Também tenta do diretório atual

from src.infrastructure.config import CORS_ORIGINS  # noqa: E402
from src.infrastructure.logger import get_logger  # noqa: E402
from src.db.session import init_db  # noqa: E402
from src.routers.alertas import router as alertas_router  # noqa: E402
from src.routers.certificado import router as certificado_router  # noqa: E402
from src.routers.empresas import router as empresas_router  # noqa: E402
from src.routers.socios import router as socios_router  # noqa: E402

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Escritório Contábil - Certificados API",
    version="1.0.0",
    description="""
    API do escritório contábil para cadastro de empresas e sócios e
    controle dos certificados digitais ICP-Brasil.
    - **Certificados**: validação do titular (CNPJ/CPF e nome) e da validade
    - **Segurança**: arquivos armazenados criptografados; senhas nunca são gravadas
    - **Alertas**: certificados vencidos ou a vencer
    """,
    lifespan=lifespan,
)


# Handler global para erros de validação do FastAPI
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Captura erros de validação do FastAPI e retorna mensagens mais claras.
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg"),
            "type": error.get("type")
        })

    logger.warning(f"Erro de validação: {error_details}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Erro de validação nos dados enviados",
            "errors": error_details
        }
    )


# Handler global para exceções não tratadas (HTTPException continua com o FastAPI)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Captura todas as exceções não tratadas e retorna uma resposta JSON apropriada.
    O detalhe técnico vai apenas para o log.
    """
    if isinstance(exc, HTTPException):
        raise exc

    logger.error(f"Erro não tratado em {request.method} {request.url.path}: {str(exc)}", exc_info=exc)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Erro interno do servidor",
            "type": type(exc).__name__
        }
    )


logger.info(f"Configurando CORS com origens: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(empresas_router)
app.include_router(socios_router)
app.include_router(certificado_router)
app.include_router(alertas_router)

logger.info("📋 Rotas registradas na aplicação:")
for route in app.routes:
    if hasattr(route, 'path') and hasattr(route, 'methods'):
        methods = ', '.join(route.methods) if route.methods else 'N/A'
        logger.info(f"   {methods} {route.path}")


# Endpoint de health check
@app.get("/", tags=["Health"])
def health():
    """Endpoint de health check."""
    return {"status": "ok", "message": "API do escritório está funcionando"}


# Endpoint de debug para listar todas as rotas
@app.get("/debug/routes", tags=["Debug"])
def list_routes():
    """Lista todas as rotas registradas na aplicação (apenas para debug)."""
    routes = []
    for route in app.routes:
        if hasattr(route, 'path') and hasattr(route, 'methods'):
            routes.append({
                "path": route.path,
                "methods": list(route.methods) if route.methods else [],
                "name": getattr(route, 'name', 'N/A')
            })
    return {"routes": routes, "total": len(routes)}

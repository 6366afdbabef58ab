"""
Schemas Pydantic para a aplicação.
"""

from .empresas import (
    EmpresaCreate,
    EmpresaOut,
    EmpresaListResponse,
)
from .socios import (
    SocioCreate,
    SocioOut,
    SocioListResponse,
)

__all__ = [
    "EmpresaCreate",
    "EmpresaOut",
    "EmpresaListResponse",
    "SocioCreate",
    "SocioOut",
    "SocioListResponse",
]

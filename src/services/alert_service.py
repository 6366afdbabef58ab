"""
Alertas de vencimento de certificados (A1 das empresas e e-CPF dos sócios).
"""

from datetime import date
from typing import Iterable, List, Optional

from ..db.models import Empresa, Socio
from ..infrastructure.config import ALERTA_DIAS_CRITICO, ALERTA_DIAS_VENCIMENTO
from ..infrastructure.logger import get_logger
from ..models.certificado import AlertaCertificado, SeveridadeAlerta, TipoAlerta

logger = get_logger(__name__)


def _ler_data(valor: Optional[str], descricao: str) -> Optional[date]:
    if not valor:
        return None
    try:
        return date.fromisoformat(valor)
    except ValueError:
        logger.warning(f"Data de validade inválida para {descricao}: {valor}")
        return None


def _prazo(dias: int) -> str:
    if dias == 0:
        return "vence hoje"
    return f"vence em {dias} dia" if dias == 1 else f"vence em {dias} dias"


def _alerta(
    prefixo: str,
    titular_id: str,
    validade: date,
    dias: int,
    descricao: str,
    rotulo: str,
    link: str,
    janela: int,
    critico: int,
) -> Optional[AlertaCertificado]:
    if dias < 0:
        return AlertaCertificado(
            id=f"{prefixo}-expired-{titular_id}",
            tipo=TipoAlerta.CERTIFICADO_VENCIDO,
            titulo=f"{rotulo} Vencido",
            mensagem=f"O {descricao} venceu.",
            data=validade,
            link=link,
            severidade=SeveridadeAlerta.CRITICA,
        )
    if dias <= janela:
        return AlertaCertificado(
            id=f"{prefixo}-expiring-{titular_id}",
            tipo=TipoAlerta.CERTIFICADO_A_VENCER,
            titulo=f"{rotulo} a Vencer",
            mensagem=f"O {descricao} {_prazo(dias)}.",
            data=validade,
            link=link,
            severidade=SeveridadeAlerta.ALTA if dias <= critico else SeveridadeAlerta.MEDIA,
        )
    return None


def gerar_alertas_certificados(
    empresas: Iterable[Empresa],
    socios: Iterable[Socio],
    hoje: Optional[date] = None,
    janela: int = ALERTA_DIAS_VENCIMENTO,
    critico: int = ALERTA_DIAS_CRITICO,
) -> List[AlertaCertificado]:
    """
    Lista certificados vencidos ou que vencem dentro da janela.

    Vencidos têm severidade crítica; a vencer em até ``critico`` dias, alta;
    os demais dentro da janela, média. Ordenados do vencimento mais distante
    para o mais próximo.
    """
    hoje = hoje or date.today()
    alertas: List[AlertaCertificado] = []

    for empresa in empresas:
        validade = _ler_data(empresa.certificado_validade, f"empresa {empresa.id}")
        if validade is None:
            continue
        alerta = _alerta(
            "cert", empresa.id, validade, (validade - hoje).days,
            f"certificado A1 da empresa {empresa.razao_social}", "Certificado", "/empresas",
            janela, critico,
        )
        if alerta:
            alertas.append(alerta)

    for socio in socios:
        validade = _ler_data(socio.ecpf_validade, f"sócio {socio.id}")
        if validade is None:
            continue
        alerta = _alerta(
            "ecpf", socio.id, validade, (validade - hoje).days,
            f"e-CPF do sócio {socio.nome}", "e-CPF", "/societario",
            janela, critico,
        )
        if alerta:
            alertas.append(alerta)

    return sorted(alertas, key=lambda a: a.data, reverse=True)


def contar_certificados_a_vencer(
    empresas: Iterable[Empresa],
    socios: Iterable[Socio],
    hoje: Optional[date] = None,
    dias: int = ALERTA_DIAS_CRITICO,
) -> int:
    """Quantidade de certificados que vencem entre hoje e os próximos ``dias`` dias."""
    hoje = hoje or date.today()
    validades = [(e.certificado_validade, f"empresa {e.id}") for e in empresas]
    validades += [(s.ecpf_validade, f"sócio {s.id}") for s in socios]

    total = 0
    for valor, descricao in validades:
        validade = _ler_data(valor, descricao)
        if validade is not None and 0 <= (validade - hoje).days <= dias:
            total += 1
    return total

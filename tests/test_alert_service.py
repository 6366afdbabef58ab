from datetime import date

from src.db.models import Empresa, Socio
from src.models.certificado import SeveridadeAlerta, TipoAlerta
from src.services.alert_service import contar_certificados_a_vencer, gerar_alertas_certificados

HOJE = date(2026, 1, 10)


def empresa(id, validade):
    return Empresa(id=id, cnpj="11222333000144", razao_social=f"Empresa {id}", certificado_validade=validade)


def socio(id, validade):
    return Socio(id=id, cpf="12345678900", nome=f"Sócio {id}", ecpf_validade=validade)


def test_certificado_vencido_e_critico():
    alertas = gerar_alertas_certificados([empresa("e1", "2026-01-09")], [], hoje=HOJE)

    assert len(alertas) == 1
    assert alertas[0].id == "cert-expired-e1"
    assert alertas[0].tipo == TipoAlerta.CERTIFICADO_VENCIDO
    assert alertas[0].severidade == SeveridadeAlerta.CRITICA
    assert alertas[0].link == "/empresas"


def test_severidade_conforme_dias_restantes():
    alertas = gerar_alertas_certificados(
        [empresa("e1", "2026-01-20"), empresa("e2", "2026-02-24"), empresa("e3", "2026-04-30")],
        [socio("s1", "2026-03-11")],
        hoje=HOJE,
    )
    por_id = {a.id: a for a in alertas}

    assert por_id["cert-expiring-e1"].severidade == SeveridadeAlerta.ALTA
    assert por_id["cert-expiring-e2"].severidade == SeveridadeAlerta.MEDIA
    # 60 dias ainda entra na janela
    assert por_id["ecpf-expiring-s1"].severidade == SeveridadeAlerta.MEDIA
    assert por_id["ecpf-expiring-s1"].link == "/societario"
    assert "e-CPF do sócio Sócio s1" in por_id["ecpf-expiring-s1"].mensagem
    # Fora da janela não gera alerta
    assert "cert-expiring-e3" not in por_id


def test_datas_invalidas_ou_ausentes_sao_ignoradas():
    alertas = gerar_alertas_certificados(
        [empresa("e1", "31/12/2025"), empresa("e2", None)],
        [socio("s1", "")],
        hoje=HOJE,
    )

    assert alertas == []


def test_alertas_ordenados_do_vencimento_mais_distante():
    alertas = gerar_alertas_certificados(
        [empresa("e1", "2026-01-01"), empresa("e2", "2026-02-01")],
        [socio("s1", "2026-01-15")],
        hoje=HOJE,
    )

    assert [a.id for a in alertas] == ["cert-expiring-e2", "ecpf-expiring-s1", "cert-expired-e1"]


def test_contagem_de_certificados_a_vencer_em_30_dias():
    empresas = [empresa("e1", "2026-01-10"), empresa("e2", "2026-02-09"), empresa("e3", "2026-02-10")]
    socios = [socio("s1", "2026-01-09"), socio("s2", "2026-01-25")]

    assert contar_certificados_a_vencer(empresas, socios, hoje=HOJE) == 3


def test_certificado_que_vence_hoje():
    alertas = gerar_alertas_certificados([empresa("e1", "2026-01-10")], [socio("s1", "2026-01-11")], hoje=HOJE)

    mensagens = {alerta.id: alerta.mensagem for alerta in alertas}
    assert mensagens["cert-expiring-e1"] == "O certificado A1 da empresa Empresa e1 vence hoje."
    assert mensagens["ecpf-expiring-s1"] == "O e-CPF do sócio Sócio s1 vence em 1 dia."

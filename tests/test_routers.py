from datetime import date, datetime, time, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import OID_CNPJ, SENHA
from main import app
from src.db.session import get_db
from src.services.certificate_service import get_certificate_service


@pytest.fixture
def client(session_factory, service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_certificate_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def enviar(client, url, pfx, senha=SENHA):
    return client.post(
        url,
        files={"certificado": ("certificado.pfx", pfx, "application/x-pkcs12")},
        data={"senha": senha},
    )


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_cadastro_de_empresa(client):
    response = client.post("/api/empresas", json={"cnpj": "11.222.333/0001-44", "razao_social": "Empresa Teste LTDA", "regime": "SIMPLES"})
    assert response.status_code == 201
    assert response.json()["cnpj"] == "11222333000144"

    duplicada = client.post("/api/empresas", json={"cnpj": "11222333000144", "razao_social": "Outra"})
    assert duplicada.status_code == 400

    invalida = client.post("/api/empresas", json={"cnpj": "123", "razao_social": "Invalida"})
    assert invalida.status_code == 400
    assert invalida.json()["detail"] == "Erro de validação nos dados enviados"

    listagem = client.get("/api/empresas").json()
    assert listagem["total"] == 1


def test_envio_de_certificado_a1(client, empresa, fabrica_pfx):
    pfx = fabrica_pfx(common_name="EMPRESA TESTE LTDA", atributos=[(OID_CNPJ, "21676122" + "11222333000144")])

    response = enviar(client, f"/api/empresas/{empresa.id}/certificado", pfx)

    assert response.status_code == 200
    corpo = response.json()
    assert corpo["success"] is True
    assert corpo["valido_ate"] == "2027-05-10"

    gravada = client.get(f"/api/empresas/{empresa.id}").json()
    assert gravada["certificado_validade"] == "2027-05-10"
    assert gravada["certificado_arquivo"] == corpo["referencia_arquivo"]


def test_envio_com_senha_incorreta(client, empresa, fabrica_pfx):
    pfx = fabrica_pfx(atributos=[(OID_CNPJ, "11222333000144")])

    response = enviar(client, f"/api/empresas/{empresa.id}/certificado", pfx, senha="errada")

    assert response.status_code == 400
    assert response.json()["erro"] == "decodificacao_falhou"
    assert client.get(f"/api/empresas/{empresa.id}").json()["certificado_validade"] is None


def test_envio_de_certificado_de_outra_empresa(client, empresa, fabrica_pfx):
    pfx = fabrica_pfx(atributos=[(OID_CNPJ, "99888777000166")])

    response = enviar(client, f"/api/empresas/{empresa.id}/certificado", pfx)

    assert response.status_code == 400
    corpo = response.json()
    assert corpo["erro"] == "titular_divergente"
    assert corpo["falhas"] == ["documento"]
    assert "99.888.777/0001-66" in corpo["message"]


def test_envio_para_empresa_inexistente(client, fabrica_pfx):
    response = enviar(client, "/api/empresas/nao-existe/certificado", fabrica_pfx(atributos=[(OID_CNPJ, "11222333000144")]))
    assert response.status_code == 404


def test_envio_sem_senha(client, empresa, fabrica_pfx):
    response = enviar(client, f"/api/empresas/{empresa.id}/certificado", fabrica_pfx(), senha="")
    assert response.status_code == 400


def test_envio_de_ecpf(client, socio, fabrica_pfx):
    response = enviar(client, f"/api/socios/{socio.id}/ecpf", fabrica_pfx(common_name="MARIA SOUZA:12345678900"))

    assert response.status_code == 200
    gravado = client.get(f"/api/socios/{socio.id}").json()
    assert gravado["possui_ecpf"] is True
    assert gravado["ecpf_validade"] == "2027-05-10"


def test_envio_de_ecpf_com_nome_diferente(client, socio, fabrica_pfx):
    response = enviar(client, f"/api/socios/{socio.id}/ecpf", fabrica_pfx(common_name="MARIA DE SOUZA:12345678900"))

    assert response.status_code == 400
    assert response.json()["falhas"] == ["nome"]
    assert client.get(f"/api/socios/{socio.id}").json()["possui_ecpf"] is False


def test_inspecionar_certificado(client, fabrica_pfx):
    pfx = fabrica_pfx(common_name="MARIA SOUZA:12345678900")

    response = enviar(client, "/api/certificados/inspecionar", pfx)

    assert response.status_code == 200
    corpo = response.json()
    assert corpo["cpf"] == "123.456.789-00"
    assert corpo["cnpj"] is None
    assert corpo["nome_titular"] == "MARIA SOUZA"


def test_alertas_de_certificados(client, empresa, fabrica_pfx):
    vencimento = datetime.combine(date.today() + timedelta(days=10), time(12, 0), tzinfo=timezone.utc)
    pfx = fabrica_pfx(atributos=[(OID_CNPJ, "11222333000144")], valido_ate=vencimento)
    assert enviar(client, f"/api/empresas/{empresa.id}/certificado", pfx).status_code == 200

    corpo = client.get("/api/alertas/certificados").json()

    assert corpo["total"] == 1
    assert corpo["a_vencer_30_dias"] == 1
    assert corpo["alertas"][0]["id"] == f"cert-expiring-{empresa.id}"
    assert corpo["alertas"][0]["severidade"] == "high"


def test_senha_so_com_espacos_e_aceita(client, fabrica_pfx):
    pfx = fabrica_pfx(common_name="MARIA SOUZA:12345678900", senha="   ")

    response = enviar(client, "/api/certificados/inspecionar", pfx, senha="   ")

    assert response.status_code == 200
    assert response.json()["cpf"] == "123.456.789-00"

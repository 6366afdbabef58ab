#!/usr/bin/env python3
"""
Importa um certificado (.pfx) para uma empresa ou sócio já cadastrado.

Uso:
    python -m src.importar_certificado --empresa EMPRESA_ID --arquivo certificado.pfx
    python -m src.importar_certificado --socio SOCIO_ID --arquivo ecpf.pfx --senha SENHA

Sem --senha, a senha é solicitada no terminal. Com -v, exibe os logs de depuração.
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.exceptions import IngestionError
from .db.session import init_db
from .infrastructure.logger import configure_logger, get_logger
from .models.certificado import TipoTitular
from .services.certificate_service import CertificateService, get_certificate_service

logger = get_logger(__name__)


def criar_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Importa um certificado digital para um titular cadastrado.")
    titular = parser.add_mutually_exclusive_group(required=True)
    titular.add_argument("--empresa", metavar="ID", help="ID da empresa (certificado A1)")
    titular.add_argument("--socio", metavar="ID", help="ID do sócio (e-CPF)")
    parser.add_argument("--arquivo", required=True, type=Path, help="Caminho do arquivo .pfx")
    parser.add_argument("--senha", help="Senha do certificado (solicitada se omitida)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Exibe os logs de depuração")
    return parser


def main(argv: Optional[List[str]] = None, service: Optional[CertificateService] = None) -> int:
    args = criar_parser().parse_args(argv)
    if args.verbose:
        configure_logger(logging.DEBUG)

    if service is None:
        init_db()
        service = get_certificate_service()

    tipo = TipoTitular.EMPRESA if args.empresa else TipoTitular.SOCIO
    titular_id = args.empresa or args.socio

    titular = service.repositorio.obter_titular(tipo, titular_id)
    if titular is None:
        print(f"❌ {tipo.value} {titular_id} não encontrado", file=sys.stderr)
        return 1

    try:
        conteudo_pfx = args.arquivo.read_bytes()
    except OSError as e:
        print(f"❌ Não foi possível ler {args.arquivo}: {e}", file=sys.stderr)
        return 1

    senha = args.senha if args.senha is not None else getpass.getpass("Senha do certificado: ")

    try:
        resultado = service.ingerir(conteudo_pfx, senha, titular)
    except IngestionError as e:
        print(f"❌ {e.mensagem}", file=sys.stderr)
        return 1

    print(f"✅ Certificado de {titular.nome} válido até {resultado.valido_ate}")
    print(f"   Arquivo: {resultado.referencia_arquivo}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

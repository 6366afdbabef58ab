"""
Configurações centralizadas da aplicação.

Este módulo centraliza todas as configurações da aplicação, incluindo
caminhos de arquivos, variáveis de ambiente e constantes.
"""

import os
from pathlib import Path
from dotenv import load_dotenv, set_key, find_dotenv
from cryptography.fernet import Fernet

# Carrega variáveis de ambiente
backend_dir = Path(__file__).parent.parent.parent
env_path = backend_dir / ".env"
load_dotenv(env_path)
load_dotenv()  # Também tenta do diretório atual

# ============================================================================
# Caminhos de arquivos e diretórios
# ============================================================================

# Diretório raiz do backend
BACKEND_DIR = backend_dir

# Diretório onde os certificados enviados são armazenados (criptografados)
CERTIFICATES_DIR = Path(os.getenv("CERTIFICATES_DIR", str(backend_dir / "certificados_armazenados")))

# ============================================================================
# Configurações de certificado
# ============================================================================

# Chave Fernet para criptografia dos arquivos de certificado
# Se não existir, gera uma chave e salva no .env para uso permanente
env_key = os.getenv("FERNET_KEY")

if env_key:
    FERNET_KEY = env_key
else:
    print("⚠️  FERNET_KEY não encontrada. Gerando chave permanente...")
    FERNET_KEY = Fernet.generate_key().decode()

    try:
        env_file = str(find_dotenv(str(env_path)) or env_path)

        if not os.path.exists(env_file):
            with open(env_file, 'w') as f:
                f.write("# Chave Fernet para criptografia de certificados\n")
                f.write("# Esta chave foi gerada automaticamente - NÃO altere ou perca esta chave!\n")
                f.write("# Se você perder esta chave, não conseguirá ler os certificados salvos.\n")
                f.write(f"FERNET_KEY={FERNET_KEY}\n")
        else:
            set_key(env_file, "FERNET_KEY", FERNET_KEY)

        print(f"✅ Chave FERNET_KEY gerada e salva permanentemente em: {env_file}")
        load_dotenv(env_file, override=True)

    except OSError as e:
        print(f"❌ ERRO ao salvar chave no .env: {str(e)}")
        print(f"   Usando chave temporária (NÃO RECOMENDADO)")
        print(f"   Para corrigir, adicione manualmente no arquivo {env_path}:")
        print(f"   FERNET_KEY=<chave gerada com Fernet.generate_key()>")

# ============================================================================
# Configurações de banco de dados
# ============================================================================

# Sem DATABASE_URL usa um arquivo SQLite local
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{backend_dir / 'db.sqlite'}"

# ============================================================================
# Configurações CORS
# ============================================================================

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:4200,http://127.0.0.1:4200").split(",")
    if origin.strip()
]

# ============================================================================
# Configurações de alertas
# ============================================================================

# Janela (em dias) para avisar sobre certificados a vencer
ALERTA_DIAS_VENCIMENTO = int(os.getenv("ALERTA_DIAS_VENCIMENTO", "60"))

# Abaixo deste número de dias o alerta passa a ter severidade alta
ALERTA_DIAS_CRITICO = int(os.getenv("ALERTA_DIAS_CRITICO", "30"))

# ============================================================================
# Configurações de log
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

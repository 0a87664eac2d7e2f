# run.py
# Servidor de desenvolvimento do Gestao-Backend.
# Em produção, sirva `gestao.app:create_app(load_config())` por um servidor WSGI.
import sys

from gestao.app import create_app
from gestao.api.errors import ConfigurationError
from gestao.config.settings import load_config
from gestao.utils.logger import logger

config = load_config()


def main() -> int:
    try:
        app = create_app(config)
    except ConfigurationError as e:
        logger.critical(f"Configuração inválida, servidor não iniciado: {e.message}")
        return 1

    logger.info(
        f"Servidor em {config.APP_HOST}:{config.APP_PORT} "
        f"(NF-e: {config.NFE_AMBIENTE}, sincronização: {'ligada' if config.NFE_SYNC_ENABLED else 'desligada'})"
    )
    try:
        # threaded: os streams SSE de cada cliente ocupam uma thread enquanto abertos
        app.run(host=config.APP_HOST, port=config.APP_PORT, debug=config.APP_DEBUG, threaded=True)
    except OSError as e:
        logger.critical(f"Não foi possível abrir {config.APP_HOST}:{config.APP_PORT}: {e}", exc_info=True)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

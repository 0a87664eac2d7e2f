# gestao/api/routes/sync.py
# Dispara a sincronização de NF-e sob demanda.

import time

from flask import Blueprint, jsonify

from gestao.api.decorators import get_service, admin_required
from gestao.services.nfe_sync_service import NfeSyncService
from gestao.utils.logger import logger

sync_bp = Blueprint('sync', __name__)


def _get_nfe_sync_service() -> NfeSyncService:
    return get_service('nfe_sync_service', 'sincronização de NF-e')


@sync_bp.route('/nfe', methods=['POST'])
@admin_required
def trigger_nfe_sync():
    """
    Consulta no provedor as NF-e ainda não finalizadas e atualiza as vendas.
    ---
    tags: [Synchronization]
    responses:
      200:
        description: Ciclo executado; retorna {verificadas, atualizadas, falhas}
      403:
        description: Usuário não é administrador
    """
    logger.info("Requisição recebida para disparar sincronização de NF-e.")
    start_time = time.time()
    stats = _get_nfe_sync_service().run_sync()
    duration = time.time() - start_time
    return jsonify({
        "message": "Sincronização de NF-e concluída.",
        "duration_seconds": round(duration, 2),
        "stats": stats,
    }), 200

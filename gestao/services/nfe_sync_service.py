# gestao/services/nfe_sync_service.py
import threading
import time
import os
import atexit
from typing import Optional, Dict, Any

from gestao.database import get_db_session
from gestao.database.venda_repository import VendaRepository
from gestao.domain import nfe as nfe_states
from gestao.utils.logger import logger
from gestao.api.errors import ApiError, FiscalProviderError

# --- Constantes ---
SYNC_INTERVAL_MINUTES = 10
INITIAL_DELAY_SECONDS = 30

# --- Variáveis de Controle do Agendador ---
_sync_thread: Optional[threading.Thread] = None
_stop_sync_event = threading.Event()
_scheduler_started = False
_scheduler_init_lock = threading.Lock()


class NfeSyncService:
    """
    Atualiza o sub-registro fiscal das vendas cuja NF-e ainda não chegou a um estado
    final, consultando o Focus NFe pela referência (ID) da venda.
    """
    _lock = threading.Lock()  # Lock intra-processo para run_sync
    _is_running = False

    def __init__(self, venda_repository: VendaRepository, nfe_service, venda_service):
        self.venda_repository = venda_repository
        self.nfe_service = nfe_service
        self.venda_service = venda_service
        logger.info("Serviço de sincronização de NF-e inicializado.")

    def run_sync(self) -> Dict[str, Any]:
        """
        Executa um ciclo. Falhas por venda são registradas e o ciclo continua.
        Retorna {verificadas, atualizadas, falhas}; se já houver um ciclo em execução
        neste processo, retorna `em_execucao=True` sem fazer nada.
        """
        resumo = {'verificadas': 0, 'atualizadas': 0, 'falhas': 0}
        acquired = NfeSyncService._lock.acquire(blocking=False)
        if not acquired:
            logger.warning("Sincronização de NF-e já está em execução neste processo (lock ocupado). Ignorando esta chamada.")
            return {**resumo, 'em_execucao': True}

        start_time = time.monotonic()
        try:
            NfeSyncService._is_running = True
            with get_db_session() as db:
                pendentes = [(venda.id, dict(venda.nfe or {})) for venda in self.venda_repository.find_pending_nfe(db)]
            logger.info(f"[CICLO INÍCIO] Sincronização de NF-e: {len(pendentes)} venda(s) pendente(s).")

            for venda_id, registro_atual in pendentes:
                resumo['verificadas'] += 1
                try:
                    if self._sincronizar_venda(venda_id, registro_atual):
                        resumo['atualizadas'] += 1
                except ApiError as e:
                    resumo['falhas'] += 1
                    logger.error(f"Falha ao sincronizar a NF-e da venda {venda_id}: {e}")

            logger.info(f"[CICLO FIM] Sincronização de NF-e concluída em {time.monotonic() - start_time:.2f}s: {resumo}")
            return resumo
        finally:
            NfeSyncService._is_running = False
            NfeSyncService._lock.release()
            logger.debug("Lock intra-processo de sincronização de NF-e liberado.")

    def _sincronizar_venda(self, venda_id: int, registro_atual: Dict[str, Any]) -> bool:
        ref = str(registro_atual.get('id') or venda_id)
        try:
            consulta = self.nfe_service.consultar(ref)
        except FiscalProviderError as e:
            if e.status_code == 404:
                logger.debug(f"Venda {venda_id}: nenhuma NF-e encontrada no provedor para a referência {ref}.")
                return False
            raise

        novo = nfe_states.sub_registro_from_consulta(consulta)
        campos = ('status', 'situacao', 'url_xml', 'chave', 'protocolo', 'mensagem_sefaz')
        if all(registro_atual.get(campo) == novo.get(campo) for campo in campos):
            logger.debug(f"Venda {venda_id}: NF-e sem alterações ({novo['status']}).")
            return False

        self.venda_service.registrar_nfe(venda_id, novo, do_provedor=True)
        logger.info(f"Venda {venda_id}: NF-e atualizada para '{novo['status']}' ({novo.get('situacao')}).")
        return True


# --- Controle do Agendador em Background ---

def _nfe_sync_task(sync_service: NfeSyncService, initial_delay_sec: int, interval_min: int):
    """A função executada pela thread em background."""
    logger.info(f"Tarefa de sincronização de NF-e iniciada. Atraso inicial: {initial_delay_sec}s, Intervalo: {interval_min}min.")
    wait_time = initial_delay_sec
    while not _stop_sync_event.wait(timeout=wait_time):
        try:
            sync_service.run_sync()
        except Exception as e:
            logger.error(f"Erro não tratado durante ciclo de sincronização de NF-e agendado: {e}", exc_info=True)
        wait_time = interval_min * 60
    logger.info("Tarefa de sincronização de NF-e em background finalizada.")


def start_nfe_sync_scheduler(sync_service: NfeSyncService, interval_min: int = SYNC_INTERVAL_MINUTES,
                             initial_delay_sec: int = INITIAL_DELAY_SECONDS, debug: bool = False):
    """Inicia a thread de sincronização se ainda não estiver rodando neste processo."""
    global _sync_thread, _scheduler_started

    with _scheduler_init_lock:
        if _scheduler_started or (_sync_thread and _sync_thread.is_alive()):
            logger.info("Scheduler de sincronização de NF-e já foi iniciado. Não iniciar novamente.")
            return

        # Com o reloader do Werkzeug, só o processo filho executa o agendador
        if debug and os.environ.get('WERKZEUG_RUN_MAIN') != 'true':
            logger.info(f"Modo Debug: Processo {os.getpid()} não é o principal (WERKZEUG_RUN_MAIN != 'true'). Não iniciando scheduler.")
            return

        _stop_sync_event.clear()
        _sync_thread = threading.Thread(
            target=_nfe_sync_task,
            args=(sync_service, initial_delay_sec, interval_min),
            daemon=True,
            name="nfe-sync",
        )
        _sync_thread.start()
        _scheduler_started = True
        logger.info(f"Thread do agendador de sincronização de NF-e iniciada pelo PID {os.getpid()}.")
        atexit.register(stop_nfe_sync_scheduler)


def stop_nfe_sync_scheduler():
    """Para a thread de sincronização de NF-e."""
    global _sync_thread, _scheduler_started

    _stop_sync_event.set()
    if _sync_thread and _sync_thread.is_alive():
        logger.info("Aguardando a thread do agendador de sincronização de NF-e terminar...")
        _sync_thread.join(timeout=15)
        if _sync_thread.is_alive():
            logger.warning("Thread do agendador de sincronização de NF-e não parou em 15s.")
        else:
            logger.info("Thread do agendador de sincronização de NF-e parada com sucesso.")
    _sync_thread = None
    _scheduler_started = False

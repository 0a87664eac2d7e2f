# gestao/services/subscriptions.py
# Feed de alterações em processo: callbacks registrados recebem o conjunto completo
# e ordenado de uma entidade na inscrição e depois de cada escrita confirmada.

import threading
from typing import Any, Callable, Dict, List

from gestao.utils.logger import logger

Snapshot = List[Dict[str, Any]]
Callback = Callable[[Snapshot], None]
Loader = Callable[[bool], Snapshot]


class Subscription:
    """Handle devolvido por ChangeFeed.subscribe. `unsubscribe()` pode ser chamado mais de uma vez."""

    def __init__(self, feed: 'ChangeFeed', callback: Callback, include_inactive: bool):
        self._feed = feed
        self.callback = callback
        self.include_inactive = include_inactive
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._detach(self)

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class ChangeFeed:
    def __init__(self, name: str, loader: Loader):
        self.name = name
        self._loader = loader
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, callback: Callback, include_inactive: bool = False) -> Subscription:
        subscription = Subscription(self, callback, include_inactive)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug(f"Feed '{self.name}': nova inscrição (include_inactive={include_inactive}).")
        try:
            snapshot = self._loader(include_inactive)
        except Exception:
            # sem o conjunto inicial a inscrição não chega ao chamador; não pode ficar presa no feed
            subscription.unsubscribe()
            raise
        self._deliver(subscription, snapshot)
        return subscription

    def publish(self) -> None:
        """Reenvia o conjunto atual para todos os inscritos. Chamar somente após o commit."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        if not subscriptions:
            return
        snapshots: Dict[bool, Snapshot] = {}
        for subscription in subscriptions:
            if subscription.include_inactive not in snapshots:
                try:
                    snapshots[subscription.include_inactive] = self._loader(subscription.include_inactive)
                except Exception as e:
                    logger.error(f"Feed '{self.name}': falha ao carregar dados para os inscritos: {e}", exc_info=True)
                    return
            self._deliver(subscription, snapshots[subscription.include_inactive])

    def _deliver(self, subscription: Subscription, snapshot: Snapshot) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(snapshot)
        except Exception as e:
            logger.error(f"Feed '{self.name}': callback de inscrito falhou: {e}", exc_info=True)

    def _detach(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        logger.debug(f"Feed '{self.name}': inscrição removida.")

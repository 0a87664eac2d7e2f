# gestao/api/streaming.py
# Server-Sent Events sobre o ChangeFeed: cada conexão é uma inscrição, removida ao desconectar.

import json
import queue
from typing import Callable

from flask import Response, stream_with_context

from gestao.services.subscriptions import Subscription, Callback
from gestao.utils.logger import logger

KEEPALIVE_SECONDS = 15


def sse_response(subscribe: Callable[[Callback], Subscription], keepalive: int = KEEPALIVE_SECONDS) -> Response:
    events: "queue.Queue" = queue.Queue()
    subscription = subscribe(events.put)

    def generate():
        try:
            while True:
                try:
                    snapshot = events.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield f"data: {json.dumps(snapshot, ensure_ascii=False, default=str)}\n\n"
        finally:
            subscription.unsubscribe()
            logger.debug("Cliente SSE desconectado; inscrição encerrada.")

    return Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )

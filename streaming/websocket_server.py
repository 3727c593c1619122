"""
WebSocket server for /ws/chant.

- The client runs speech recognition (e.g. the browser Web Speech API) and
  sends each result as JSON: {"type": "transcript", "text": ..., "is_final": ...}.
- {"type": "tap"} is a manual increment; {"type": "recognizer_error", "message": ...}
  reports an upstream failure (answered with a warning, engine untouched).
- Every fragment gets an ingest_result reply with the current state.
- Every confirmed chant, from any channel sharing the engine, is pushed as a
  milestone message.
- Text "stop" / "end" closes the session; idle sockets close after a timeout.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from core.counter import ChantEvent
from streaming.chant_engine import ChantEngine, TranscriptFragment

logger = logging.getLogger(__name__)

STOP_MESSAGES = ("end", "stop", "final")


def build_ws_chant_handler(
    get_engine: Callable[[], ChantEngine],
    idle_timeout_seconds: float = 300.0,
    get_metrics: Optional[Any] = None,
) -> Callable:
    """
    Build the async WebSocket handler for /ws/chant.

    Args:
        get_engine: Callable that returns the shared ChantEngine.
        idle_timeout_seconds: Close the socket after this long without a message.
        get_metrics: Optional module with record_connection_open/close.

    Returns:
        Async function (websocket: WebSocket) -> None for use with FastAPI.
    """
    metrics = get_metrics

    async def handle_ws_chant(websocket: WebSocket) -> None:
        engine = get_engine()
        await websocket.accept()
        if metrics and hasattr(metrics, "record_connection_open"):
            metrics.record_connection_open()

        loop = asyncio.get_running_loop()
        outbox: asyncio.Queue = asyncio.Queue()

        def on_event(event: ChantEvent) -> None:
            payload = {"type": "milestone", **event.to_dict()}
            try:
                same_loop = asyncio.get_running_loop() is loop
            except RuntimeError:
                same_loop = False
            if same_loop:
                outbox.put_nowait(payload)
            else:
                # Confirmation came from the HTTP thread pool
                loop.call_soon_threadsafe(outbox.put_nowait, payload)

        unsubscribe = engine.subscribe(on_event)

        async def send(payload: Dict[str, Any]) -> bool:
            try:
                await websocket.send_json(payload)
                return True
            except (WebSocketDisconnect, RuntimeError, OSError):
                return False

        async def pump_outbox() -> None:
            while True:
                payload = await outbox.get()
                if payload is None or not await send(payload):
                    return

        pump = asyncio.create_task(pump_outbox())

        async def handle_message(raw: str) -> Optional[Dict[str, Any]]:
            try:
                msg = json.loads(raw)
            except ValueError:
                return {"type": "error", "message": "Expected a JSON object"}
            if not isinstance(msg, dict):
                return {"type": "error", "message": "Expected a JSON object"}

            kind = msg.get("type", "transcript")
            if kind == "transcript":
                fragment = TranscriptFragment.from_payload(msg)

                def do_ingest():
                    return engine.ingest(fragment), engine.snapshot()

                # Engine lock and store writes stay off the event loop
                confirmed, snapshot = await loop.run_in_executor(None, do_ingest)
                return {
                    "type": "ingest_result",
                    "confirmed": confirmed,
                    "is_final": fragment.is_final,
                    **snapshot,
                }
            if kind == "tap":
                source = str(msg.get("source") or "touch")
                await loop.run_in_executor(None, lambda: engine.tap(source=source))
                return None  # the milestone push is the reply
            if kind == "recognizer_error":
                message = str(msg.get("message") or "unknown error")
                engine.report_recognizer_error(message)
                return {"type": "warning", "message": message}
            return {"type": "error", "message": f"Unknown message type: {kind}"}

        try:
            while True:
                try:
                    data = await asyncio.wait_for(websocket.receive(), timeout=idle_timeout_seconds)
                except asyncio.TimeoutError:
                    logger.info("Closing idle /ws/chant connection")
                    break
                if data.get("type") == "websocket.disconnect":
                    break
                text = data.get("text")
                if text is None:
                    if data.get("bytes") is not None:
                        await outbox.put({"type": "error", "message": "Binary frames are not supported"})
                    continue
                if text.strip().lower() in STOP_MESSAGES:
                    break
                reply = await handle_message(text)
                if reply is not None:
                    await outbox.put(reply)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.exception("/ws/chant handler failed")
            await send({"type": "error", "message": str(e)})
        finally:
            unsubscribe()
            if metrics and hasattr(metrics, "record_connection_close"):
                metrics.record_connection_close()

        # Flush replies queued before the stop message
        await outbox.put(None)
        await pump
        try:
            await websocket.close()
        except (WebSocketDisconnect, RuntimeError, OSError):
            # Client already gone
            pass

    return handle_ws_chant

"""
Chant counter API.

The client captures speech and runs recognition; this service recognizes the
16-word Maha-mantra in the transcript stream, counts chants and rounds
(108 chants = 1 round), persists progress and pushes milestone events
(tick / quarter_round / round_complete) for haptic and audio feedback.
"""
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import config
import metrics.chant_metrics as chant_metrics
from storage.state_store import ChantStateStore
from streaming.chant_engine import MODES, ChantEngine, TranscriptFragment
from streaming.websocket_server import build_ws_chant_handler

logger = logging.getLogger(__name__)


class TranscriptIn(BaseModel):
    text: str = ""
    is_final: bool = True


class TapIn(BaseModel):
    source: str = "touch"


def create_app(
    engine: Optional[ChantEngine] = None,
    store: Optional[ChantStateStore] = None,
) -> FastAPI:
    """
    Build the app around one engine and its store.
    With no arguments both are built from config (state resumed from CHANT_STATE_PATH).
    """
    if store is None:
        store = ChantStateStore(config.CHANT_STATE_PATH)
    if engine is None:
        engine = ChantEngine(
            config=config.get_engine_config(),
            initial_state=store.load(),
            clear_buffer_on_mode_change=config.CLEAR_BUFFER_ON_MODE_CHANGE,
            metrics=chant_metrics,
        )
    engine.subscribe_state(store.save)
    engine.subscribe(store.record_event)

    app = FastAPI(title="Chant Counter API")
    app.state.engine = engine
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def health_check():
        return {
            "status": "ok",
            "message": "Chant Counter API is running",
            **engine.snapshot(),
        }

    @app.get("/state")
    def get_state():
        return engine.state.to_dict()

    @app.post("/transcript")
    def post_transcript(body: TranscriptIn):
        """Ingest one recognizer result (non-final results are ignored)."""
        confirmed = engine.ingest(TranscriptFragment(text=body.text, is_final=body.is_final))
        return {"confirmed": confirmed, **engine.snapshot()}

    @app.post("/tap")
    def post_tap(body: Optional[TapIn] = None):
        """Manual increment (tap mode): one call = one chant."""
        event = engine.tap(source=(body.source if body else "touch"))
        return event.to_dict()

    @app.post("/reset")
    def post_reset():
        return engine.reset().to_dict()

    @app.post("/mode/{mode}")
    def post_mode(mode: str):
        if mode not in MODES:
            raise HTTPException(status_code=400, detail=f"Unknown mode '{mode}'; expected one of {list(MODES)}")
        engine.set_mode(mode)
        return engine.snapshot()

    @app.get("/stats")
    def get_stats():
        return store.stats()

    @app.get("/stats/week")
    def get_week():
        return {"days": store.this_week()}

    @app.get("/stats/milestones")
    def get_milestones():
        return {"milestones": store.milestones()}

    @app.get("/metrics/chant", include_in_schema=False)
    def metrics_chant():
        """JSON snapshot of engine metrics: fragments, confirmations, taps, overflows, latency."""
        return chant_metrics.get_snapshot()

    app.websocket("/ws/chant")(
        build_ws_chant_handler(
            get_engine=lambda: engine,
            idle_timeout_seconds=config.WS_IDLE_TIMEOUT_SECONDS,
            get_metrics=chant_metrics,
        )
    )
    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Resuming chant state from %s", config.CHANT_STATE_PATH)
    uvicorn.run(create_app(), host=config.HOST, port=config.PORT)

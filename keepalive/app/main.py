import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from keepalive import __version__
from .config import Settings, settings as default_settings
from .history import HistoryStore
from .jobs import keep_alive
from .runner import SOURCE_MANUAL, KeepAliveRunner
from .store import open_kv
from .ui import render_dashboard

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def create_app(cfg: Optional[Settings] = None,
               history: Optional[HistoryStore] = None,
               runner: Optional[KeepAliveRunner] = None) -> FastAPI:
    cfg = cfg or default_settings
    if history is None:
        history = HistoryStore.open(open_kv(cfg), cfg.LOG_LIMIT)
    if runner is None:
        runner = KeepAliveRunner(cfg)

    # every unmatched GET path serves the dashboard, so no docs routes
    app = FastAPI(title="Koyeb Keep-Alive", version=__version__,
                  docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = cfg
    app.state.history = history
    app.state.runner = runner

    @app.get("/api/trigger", response_class=JSONResponse)
    async def trigger(request: Request):
        """Run the keep-alive checks now and record the result"""
        st = request.app.state
        result = await keep_alive(st.runner, st.history, SOURCE_MANUAL)
        return JSONResponse(result.to_dict(), headers=NO_STORE)

    @app.get("/api/logs", response_class=JSONResponse)
    def logs(request: Request):
        """Recorded runs, newest first"""
        records = request.app.state.history.list()
        return JSONResponse([r.to_dict() for r in records], headers=NO_STORE)

    @app.get("/{path:path}", response_class=HTMLResponse)
    async def dashboard(request: Request, path: str):
        st = request.app.state
        return HTMLResponse(render_dashboard(st.settings.has_token, st.history.configured))

    logger.info(f"Keep-alive app ready (token={'set' if cfg.has_token else 'missing'}, "
                f"history={'bound' if history.configured else 'unbound'})")
    return app


app = create_app()

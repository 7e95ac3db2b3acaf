import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import Settings, load_settings
from backend.demo import create_demo_data
from backend.llm import CompletionProxy
from backend.routes import router
from endless_tale.counter import Counter
from endless_tale.service import AdventureService
from endless_tale.session import AnonymousVerifier, NewgroundsVerifier, SessionVerifier
from endless_tale.store import JsonlNodeStore, NodeStore

logger = logging.getLogger(__name__)


def _default_verifier(settings: Settings) -> SessionVerifier:
    if not settings.ng_app_id:
        logger.info("NG_APP_ID not set; all contributions will be anonymous")
        return AnonymousVerifier()
    return NewgroundsVerifier(
        app_id=settings.ng_app_id,
        gateway_url=settings.ng_gateway_url,
        timeout=settings.session_timeout,
    )


def create_app(
    settings: Settings | None = None,
    *,
    store: NodeStore | None = None,
    verifier: SessionVerifier | None = None,
    llm_proxy: CompletionProxy | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    store = store if store is not None else JsonlNodeStore(settings.data_dir)

    if settings.seed_data:
        added = create_demo_data(store)
        logger.info("Seeded %d demo adventure nodes", added)

    app = FastAPI(title="Endless Tale")
    app.state.settings = settings
    app.state.service = AdventureService(
        store,
        verifier=verifier or _default_verifier(settings),
        privileged_user=settings.privileged_user,
        session_timeout=settings.session_timeout,
    )
    app.state.counter = Counter()
    app.state.llm_proxy = llm_proxy or CompletionProxy(timeout=settings.llm_timeout)
    logger.info("Loaded %d adventure nodes", len(app.state.service.graph))

    # Allow all origins; the reader UI is served from elsewhere
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    return app

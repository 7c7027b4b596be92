"""
FastAPI application — HTTP front for the policy evaluation engine.
Runs on http://127.0.0.1:8780 by default.

Per-app objects (engine, policy store, stats) live on app.state so that each
call to create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import config
from ..policy.engine import PolicyEngine
from ..policy.store import PolicyStore
from ..reporting import EvaluationStats


def create_app(policy_file: Optional[Path] = None) -> FastAPI:
    policy_file = config.policy_file if policy_file is None else policy_file

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = PolicyStore.from_file(policy_file)
        app.state.stats = EvaluationStats()
        app.state.engine = PolicyEngine(reporter=app.state.stats)
        yield

    app = FastAPI(
        title="FinOps Idle Enforcer",
        description="Policy-driven scale-to-zero decisions for idle workloads",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import evaluate, policies, stats

    app.include_router(policies.router)
    app.include_router(evaluate.router)
    app.include_router(stats.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": "0.1.0"}

    return app


app = create_app()

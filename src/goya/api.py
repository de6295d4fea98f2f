from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional, Union
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from .config import AnalyzerConfig
from .errors import NotReadyError
from .runtime import Analyzer
from .types import WordIdentifier


class WordOut(BaseModel):
    word_id: int
    surface_form: str
    start_offset: int
    end_offset: int
    is_known: bool
    left_context_id: int
    right_context_id: int
    cost: int


class ParseRequest(BaseModel):
    text: str
    include_dot: bool = True


class ParseResponse(BaseModel):
    wakachi: List[str]
    best: List[WordOut]
    total_cost: int
    dot: Optional[str] = None


class WordIdIn(BaseModel):
    kind: str = "known"
    id: int
    surface: str = ""


class FeaturesRequest(BaseModel):
    word_ids: List[Union[int, WordIdIn]]


class FeaturesResponse(BaseModel):
    features: List[Optional[List[str]]]


def create_app(dicdir: Path, config: AnalyzerConfig = AnalyzerConfig(), autoload: bool = True) -> FastAPI:
    analyzer = Analyzer(dicdir, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if autoload:
            analyzer.start()
            analyzer.start_features()
        yield
        analyzer.close()

    app = FastAPI(title="goya", version="0.1.0", lifespan=lifespan)
    app.state.analyzer = analyzer

    @app.exception_handler(NotReadyError)
    async def not_ready(request: Request, exc: NotReadyError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)}, headers={"Retry-After": "1"})

    @app.get("/")
    def root() -> dict:
        return {
            "name": "goya morphological analyzer",
            "docs": "/docs",
            "health": "/health",
            "parse": "/parse",
            "features": "/features",
        }

    @app.get("/health")
    def health() -> dict:
        return {"ok": True, "ready": analyzer.ready, "features_ready": analyzer.features_ready}

    @app.post("/parse", response_model=ParseResponse)
    async def parse(req: ParseRequest) -> ParseResponse:
        lattice = await run_in_threadpool(analyzer.parse, req.text)
        return ParseResponse(
            wakachi=lattice.wakachi(),
            best=[WordOut(**w.to_dict()) for w in lattice.best_words()],
            total_cost=lattice.total_cost,
            dot=lattice.as_dot() if req.include_dot else None,
        )

    @app.post("/features", response_model=FeaturesResponse)
    def get_features(req: FeaturesRequest) -> FeaturesResponse:
        ids: List[Union[int, WordIdentifier]] = []
        for wid in req.word_ids:
            if isinstance(wid, WordIdIn):
                ids.append(WordIdentifier.from_dict(wid.model_dump()))
            else:
                ids.append(wid)
        records = analyzer.features(ids)
        return FeaturesResponse(features=[list(r.fields) if r is not None else None for r in records])

    return app

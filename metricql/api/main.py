from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from metricql import __version__
from metricql.api.routes import router
from metricql.core.config import MetricQLConfig
from metricql.nlq.pipeline import QueryPipeline


def create_app(
    config: Optional[MetricQLConfig] = None,
    pipeline: Optional[QueryPipeline] = None,
) -> FastAPI:
    """Build the API around one pipeline (and so one ontology snapshot)."""
    app = FastAPI(title="metricql API", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.pipeline = pipeline or QueryPipeline(config or MetricQLConfig.from_env())
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

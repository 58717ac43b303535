from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import configurations_router, simulation_router


def create_app() -> FastAPI:
    """
    Instantiate the FastAPI application and register routers.

    Registers the domain routers:
    - simulation: baseline-vs-smart comparison, live hour records, run history
    - configurations: saved scenario management and execution

    Returns:
        FastAPI: Configured application instance ready to serve.

    Example:
        ```python
        app = create_app()
        uvicorn.run(app, host="0.0.0.0", port=8000)
        ```
    """
    app = FastAPI(
        title="Microgrid Dispatch Simulator API",
        version="0.1.0",
        description="API comparing baseline and smart battery dispatch over a simulated day.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(simulation_router)
    app.include_router(configurations_router)

    return app


app = create_app()

"""
API package.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .routes import intersections, streaming, recorder, location
from ...application.builder import SignalApplicationBuilder
from ....common.logging import setup_logger

logger = setup_logger(__name__)

# Initialize main app
app = FastAPI(title="Traffic Light Scheduler API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(intersections.app.router, tags=["intersections"])
app.include_router(streaming.app.router, tags=["streaming"])
app.include_router(recorder.app.router, tags=["recorder"])
app.include_router(location.app.router, tags=["location"])

_builder: SignalApplicationBuilder = None

def configure(builder: SignalApplicationBuilder):
    """
    Injects the built components into the route modules.
    Must be called before the server starts.
    """
    global _builder
    _builder = builder
    components = builder.get_components()
    streaming.init_broadcaster(components['broadcaster'])
    intersections.init_intersections(components['registry'], components['scheduler_manager'])
    recorder.init_recorder(components['recorder_service'])
    location.init_resolver(components['location_resolver'])

@app.on_event("startup")
async def startup_event():
    if _builder is None:
        logger.warning("API started without configure(); endpoints will report 500")
        return
    registry = _builder.registry
    await _builder.scheduler_manager.sync(registry.list())
    logger.info(f"Scheduling {len(registry)} intersections")

@app.on_event("shutdown")
async def shutdown_event():
    if _builder is None:
        return
    await _builder.scheduler_manager.stop_all()
    await _builder.recorder_service.close_all()
    logger.info("All timers stopped")

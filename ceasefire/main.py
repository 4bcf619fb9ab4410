import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ceasefire.config import settings
from ceasefire.db.database import init_db
from ceasefire.routes import fights, mediator_requests, personas, profiles

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await init_db()
    yield


app = FastAPI(
    title='Ceasefire API',
    description='Backend API for the Ceasefire conflict mediation app',
    version='0.1.0',
    lifespan=lifespan,
)

# CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

# Routes
app.include_router(profiles.router, prefix='/api/profiles', tags=['profiles'])
app.include_router(personas.router, prefix='/api/personas', tags=['personas'])
app.include_router(fights.router, prefix='/api/fights', tags=['fights'])
app.include_router(
    mediator_requests.router, prefix='/api/mediator-requests', tags=['mediator-requests'],
)


@app.get('/health')
async def health_check():
    """Health check endpoint."""
    return {'status': 'ok', 'service': 'ceasefire-api'}

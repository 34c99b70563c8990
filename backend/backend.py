import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Force load .env from the script's directory before any module reads settings
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(dotenv_path=env_path, override=False)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from onboarding_module import init_onboarding_module, router as onboarding_router
from rbac_module import init_rbac_module, router as rbac_router
from rbac_module.database import DATABASE_URL, engine
from school_module import init_school_module, router as school_router

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

IS_PRODUCTION = os.getenv("RENDER") == "true" or "postgres" in DATABASE_URL.lower()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        logger.info("Initializing RBAC module...")
        init_rbac_module()
        logger.info("RBAC module initialized.")
        init_school_module()
        init_onboarding_module()
        logger.info("Onboarding module initialized.")
    except Exception as e:
        logger.error(f"Startup DB Error: {e}")
        raise
    yield
    logger.info("Shutting down...")


app = FastAPI(title="ClassBridge Onboarding API", lifespan=lifespan)

# --- CORS Configuration ---
origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_origin_regex=r"https://.*\.(vercel\.app|onrender\.com)" if IS_PRODUCTION else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rbac_router)
app.include_router(school_router)
app.include_router(onboarding_router)


# Health check endpoint for debugging connection issues
@app.get("/api/health")
def health_check():
    """Health check endpoint to verify backend is running and configured correctly"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Health check DB error: {e}")
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy",
        "message": "ClassBridge Onboarding Backend is running",
        "environment": "production" if IS_PRODUCTION else "development",
        "database": db_status,
    }


if __name__ == "__main__":
    import uvicorn
    # Keep reload OFF by default; set BACKEND_RELOAD=true explicitly if hot reload is needed.
    reload_enabled = os.getenv("BACKEND_RELOAD", "false").lower() == "true"
    backend_host = os.getenv("BACKEND_HOST", "127.0.0.1")
    backend_port = int(os.getenv("BACKEND_PORT", "8000"))
    try:
        uvicorn.run(app, host=backend_host, port=backend_port, reload=reload_enabled)
    except OSError as e:
        if "address already in use" in str(e).lower():
            print(f"[Startup Error] Port {backend_port} is already in use. Stop the old process or set BACKEND_PORT to another port.")
        raise

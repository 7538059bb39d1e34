from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
import logging
import os

from cineverse.config import settings
from cineverse.database import engine, Base
from cineverse.errors import ActionError
from cineverse.routers import auth, api

# Logging Setup
handlers = [logging.StreamHandler()]
if settings.LOG_FILE:
    handlers.append(logging.FileHandler(settings.LOG_FILE))
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=handlers
)
logger = logging.getLogger("cineverse")

# Create database tables
Base.metadata.create_all(bind=engine)

# Create upload directories
os.makedirs(os.path.join(settings.UPLOAD_DIR, "posts"), exist_ok=True)
os.makedirs(os.path.join(settings.UPLOAD_DIR, "subtitles"), exist_ok=True)

app = FastAPI(title="CineVerse", version="1.0.0")

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    https_only=settings.SESSION_HTTPS_ONLY,
    same_site="lax"
)

# Mount uploaded posters and subtitles
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include routers
app.include_router(auth.router)
app.include_router(api.router)

@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)

@app.get("/health")
async def health():
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8080, reload=True)

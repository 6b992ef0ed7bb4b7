from dotenv import load_dotenv
load_dotenv()  # must be first — loads .env before modules read their settings

from fastapi import FastAPI, Depends, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from pathlib import Path
from typing import Optional
import logging
import os

import usage_api
from analyzer import (run_analysis, get_text_extractor, get_completion_client,
                      TextExtractor, ClaudeCompletionClient)
from analyzer.extractor import ensure_supported
from auth_api import router as auth_router
from database import check_db_connection, init_db
from errors import (AppError, AuthenticationRequiredError, NoFileError,
                    QuotaExceededError)
from models import AnalysisResponse
from sessions import (SessionData, SessionStore, get_session, get_session_store,
                      session_cookie_middleware)

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PORT       = int(os.getenv("PORT", "3000"))
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", Path(__file__).parent / "public"))

app = FastAPI(title="Resume ATS Analyzer API", version="1.0")
app.include_router(auth_router)
app.include_router(usage_api.router)
app.middleware("http")(session_cookie_middleware)


# Check database connection and service keys on startup
@app.on_event("startup")
async def startup_event():
    if check_db_connection():
        init_db()
        logger.info("✅ Database connected successfully")
    else:
        logger.warning("⚠️  Database connection failed - check DATABASE_URL")
    if not os.getenv("ANTHROPIC_API_KEY"):
        logger.warning("⚠️  ANTHROPIC_API_KEY not set - analyses will fail")


# CORS configuration
ALLOWED_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning("%s on %s: %s (%s)", type(exc).__name__, request.url.path,
                   exc.message, exc.detail or "-")
    body = {"success": False, "message": exc.message}
    if isinstance(exc, (QuotaExceededError, AuthenticationRequiredError)):
        body["requireLogin"] = True
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request on %s: %s", request.url.path, exc.errors())
    fields = {str(part) for error in exc.errors() for part in error.get("loc", ())}
    message = NoFileError.message if "resume" in fields else "Invalid request"
    return JSONResponse(status_code=422, content={"success": False, "message": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTP %d on %s: %s", exc.status_code, request.url.path, exc.detail)
    message = exc.detail if isinstance(exc.detail, str) else "Invalid request"
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Analysis failed"})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/")
async def root():
    return RedirectResponse("/login.html" if usage_api.REQUIRE_LOGIN else "/index.html")


@app.get("/health")
async def health():
    return {"status": "online", "version": app.version}


@app.get("/index.html")
async def index_page(session: SessionData = Depends(get_session)):
    if usage_api.REQUIRE_LOGIN and not session.is_authenticated:
        return RedirectResponse("/login.html")
    return FileResponse(PUBLIC_DIR / "index.html")


@app.post("/upload", response_model=AnalysisResponse)
async def upload_resume(
    resume:            Optional[UploadFile] = File(None),
    jobdesc:           str = Form(""),
    session:           SessionData = Depends(get_session),
    store:             SessionStore = Depends(get_session_store),
    extractor:         TextExtractor = Depends(get_text_extractor),
    completion_client: ClaudeCompletionClient = Depends(get_completion_client),
):

    # ── Access gate: counts the demo use before anything can fail ───────────
    remaining = usage_api.admit_analysis(session, store)

    # ── Input validation ────────────────────────────────────────────────────
    if resume is None or not resume.filename:
        raise NoFileError()
    ensure_supported(resume.content_type)

    # ── Run analysis ────────────────────────────────────────────────────────
    data = await resume.read()
    analysis = await run_in_threadpool(
        run_analysis, data, resume.content_type, jobdesc, extractor, completion_client,
    )
    logger.info(
        "Analysis completed — mode: %s, ats_score: %s, user: %s",
        analysis.get("mode"),
        analysis.get("ats_score"),
        session.user.username if session.user else "demo",
    )
    return AnalysisResponse(analysis=analysis, remainingTries=remaining)


# Static pages (login.html, assets); index.html stays behind the route above
if PUBLIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="public")


if __name__ == "__main__":
    import uvicorn
    logger.info("🚀 Server running on http://localhost:%d", PORT)
    uvicorn.run(app, host="0.0.0.0", port=PORT)

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.utils.content import get_questions, get_report_config
from app.utils.errors import StorageError
from app.utils.logger import init_logging, logger

# Routers
from app.routers import admin, auth, member, questions, result, share


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_logging(app_name="api")
    settings = get_settings()

    # Fail fast on inconsistent content
    get_questions(settings.CONTENT_DIR)
    get_report_config(settings.CONTENT_DIR)

    logger.info(f"Starting API server (env={settings.APP_ENV}, storage={settings.STORAGE_BACKEND})")
    yield
    logger.info("Shutting down API server")


app = FastAPI(title="Parenting Anxiety Assessment API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content={"detail": "데이터 처리 중 오류가 발생했습니다."})


# Register routers
app.include_router(questions.router, tags=["Content"])
app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(member.router, prefix="/member", tags=["Member"])
app.include_router(result.router, prefix="/result", tags=["Result"])
app.include_router(share.router, prefix="/share", tags=["Share"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/")
def root():
    return {"message": "Parenting anxiety assessment backend running successfully!"}

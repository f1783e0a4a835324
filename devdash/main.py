import logging

import uvicorn

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

load_dotenv()

from devdash import __version__  # noqa: E402
from devdash.config.settings import settings  # noqa: E402
from devdash.core.db_sqlalchemy import init_metadata  # noqa: E402
from devdash.core.persistence_models import utcnow  # noqa: E402
from devdash.routes import docker, github, infrastructure  # noqa: E402

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="DevDash API", version=__version__)

# CORS 설정 (대시보드 프론트엔드 연동)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": utcnow().isoformat()}


@app.get("/")
def root() -> dict:
    return {
        "name": "DevDash API",
        "version": __version__,
        "endpoints": ["/api/infrastructure", "/api/docker", "/api/github"],
    }


app.include_router(infrastructure.router, prefix="/api/infrastructure", tags=["infrastructure"])
app.include_router(docker.router, prefix="/api/docker", tags=["docker"])
app.include_router(github.router, prefix="/api/github", tags=["github"])


@app.on_event("startup")
def _create_tables() -> None:
    """테이블이 없으면 생성한다 (운영 MySQL은 미리 만들어 두는 것을 권장)."""
    init_metadata()
    logger.info("DevDash API started: env=%s", settings.ENV)


@app.exception_handler(Exception)
async def unhandled_ex(request: Request, exc: Exception):
    # 전역 예외 처리: JSON 형태로 에러를 반환
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)

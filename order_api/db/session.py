import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from order_api.core.config import settings

def _int_env(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default

# 서버리스 환경에서 DB 커넥션 폭주를 막기 위해 보수적인 풀 기본값 사용
POOL_SIZE = _int_env("DB_POOL_SIZE", 5)
MAX_OVERFLOW = _int_env("DB_MAX_OVERFLOW", 2)
POOL_RECYCLE = _int_env("DB_POOL_RECYCLE", 1800)  # seconds

def _engine_kwargs(url: str) -> dict:
    # sqlite(로컬/테스트)는 QueuePool 옵션을 받지 않음
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": POOL_SIZE,
        "max_overflow": MAX_OVERFLOW,
        "pool_recycle": POOL_RECYCLE,
    }

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

from __future__ import annotations
import logging
from loguru import logger

# ---- stdlib logging → loguru 인터셉트 ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # uvicorn 접근 로그 등은 loguru 한 곳으로 모음
    for noisy in ("uvicorn", "uvicorn.access", "uvicorn.error", "aiosqlite", "asyncio"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# ---- 개발 콘솔 포맷(사람 친화, extra 미노출) ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging_dev(log_level: str = "INFO", service_name: str = "disasterlens") -> None:
    """
    개발 콘솔 전용 loguru 초기화.
    - 콘솔 컬러 출력
    - stdlib logging 흡수
    - get_logger로 바인딩하지 않은 레코드는 service_name으로 표시
    """
    logger.remove()  # 기본 sink 제거
    # {extra[name]}은 get_logger가 바인딩한 이름
    logger.configure(extra={"name": service_name})
    logger.add(
        sink=lambda m: print(m, end=""),
        format=DEV_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=False,
        level=log_level.upper(),
        enqueue=False,
    )
    _hook_stdlib_logging()

def get_logger(name: str = "disasterlens", **ctx):
    """선택적으로 컨텍스트를 바인딩한 logger 반환."""
    return logger.bind(name=name, **ctx)


# disasterlens/main.py
import os, asyncio, signal
import uvicorn
from disasterlens.settings import Settings
from disasterlens.api import create_app
from disasterlens.observability.logging_setup import setup_logging_dev, get_logger

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # 저장소
    s.storage.sqlite_path = os.getenv("SQLITE_PATH", s.storage.sqlite_path)
    s.storage.sqlite_enabled = _b("SQLITE_ENABLED", s.storage.sqlite_enabled)
    s.storage.memory_fallback = _b("MEMORY_FALLBACK", s.storage.memory_fallback)
    s.storage.seed_sample_data = _b("SEED_SAMPLE_DATA", s.storage.seed_sample_data)
    s.storage.alerts_limit = int(os.getenv("ALERTS_LIMIT", s.storage.alerts_limit))
    s.storage.reports_limit = int(os.getenv("REPORTS_LIMIT", s.storage.reports_limit))

    # Supabase
    s.supabase.url = os.getenv("SUPABASE_URL", s.supabase.url)
    s.supabase.key = os.getenv("SUPABASE_KEY", s.supabase.key)
    s.supabase.timeout_sec = int(os.getenv("SUPABASE_TIMEOUT_SEC", s.supabase.timeout_sec))
    s.supabase.max_retries = int(os.getenv("SUPABASE_MAX_RETRIES", s.supabase.max_retries))

    # 실시간
    s.realtime.heartbeat_interval_sec = float(os.getenv("HEARTBEAT_INTERVAL_SEC", s.realtime.heartbeat_interval_sec))
    s.realtime.subscriber_queue_maxsize = int(os.getenv("SUBSCRIBER_QUEUE_MAXSIZE", s.realtime.subscriber_queue_maxsize))

    # 기본 위치
    s.defaults.location_lat = float(os.getenv("DEFAULT_LAT", s.defaults.location_lat))
    s.defaults.location_lng = float(os.getenv("DEFAULT_LNG", s.defaults.location_lng))
    s.defaults.location_text = os.getenv("DEFAULT_LOCATION_TEXT", s.defaults.location_text)

    # HTTP
    s.http.host = os.getenv("HTTP_HOST", s.http.host)
    s.http.port = int(os.getenv("HTTP_PORT", s.http.port))
    cors = os.getenv("CORS_ORIGINS")
    if cors:
        s.http.cors_origins = [o.strip() for o in cors.split(",") if o.strip()]

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.build_version = os.getenv("BUILD_VERSION", s.observability.build_version)

    return s

async def main():
    s = build_settings()
    setup_logging_dev(s.observability.log_level, s.observability.service_name)
    log = get_logger()
    log.info("설정 로드 완료")

    app = create_app(s)
    server = uvicorn.Server(
        uvicorn.Config(app, host=s.http.host, port=s.http.port, log_level=s.observability.log_level.lower())
    )
    http_task = asyncio.create_task(server.serve())
    log.info(f"HTTP 서버 시작됨 host:{s.http.host} port:{s.http.port}")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    done, _ = await asyncio.wait({stop, http_task}, return_when=asyncio.FIRST_COMPLETED)
    if http_task not in done:
        server.should_exit = True
        await http_task
    log.info("종료")

if __name__ == "__main__":
    asyncio.run(main())

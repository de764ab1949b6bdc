from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # DB
    DATABASE_URL: str

    # Identity provider (bearer token -> user)
    AUTH_BASE_URL: str | None = None        # 예: https://<project>.supabase.co
    AUTH_API_KEY: str | None = None         # provider anon key (apikey 헤더)
    AUTH_TIMEOUT_S: float = 5.0

    # Chat ordering integration (X-CHAT-KEY)
    CHAT_ORDER_KEY: str | None = None

    # Restaurant / order defaults
    RESTAURANT_ID: str | None = None        # 없으면 restaurants 첫 행 사용
    CURRENCY: str = "EUR"
    DEFAULT_PAYMENT_METHOD: str = "cash"
    MAX_CART_ITEMS: int = 30
    MAX_LINE_QUANTITY: int = 99

    # Rate limit (per caller, rolling window)
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    LOG_LEVEL: str = "INFO"

    # Demo convenience
    CREATE_TABLES: int = 0  # 1이면 startup에서 create_all

settings = Settings()

"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from pydantic import model_validator


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="STBL Gateway Connect")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3030)

    # Business platform: callback relay target and callback signing key
    BUSINESS_URL: str = Field(..., description="Platform base URL, callbacks go to {BUSINESS_URL}/callbacks/v2/...")
    SIGN_KEY: str = Field(..., description="Server sign key: AES-256 key for the secure block and HS512 secret")
    CALLBACK_URL: str = Field(default="", description="Public URL of this service; registered with the provider out of band, not read at runtime")
    CALLBACK_CURRENCY: str = Field(default="ARS")

    # Provider endpoints, picked per request by settings.sandbox
    BASE_URL: str = Field(..., description="Production provider base URL")
    SANDBOX_BASE_URL: str = Field(..., description="Sandbox provider base URL")

    # Outbound HTTP (provider and platform)
    HTTP_TIMEOUT: float = Field(default=30.0)

    # Provider access token lifetime
    TOKEN_TTL_SECONDS: int = Field(default=15 * 60)
    TOKEN_REFRESH_MARGIN_SECONDS: int = Field(default=60)

    # 数据库（SQLite 文件路径）
    DATABASE_PATH: str = Field(default="stbl.db")

    # 日志/请求体记录配置
    LOG_REQUEST_BODY_ENABLE_BY_DEFAULT: bool = Field(default=True)
    LOG_REQUEST_BODY_MAX_BYTES: int = Field(default=2048)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
    )

    @field_validator("BUSINESS_URL", "BASE_URL", "SANDBOX_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("URL must not be empty")
        return v.rstrip("/")

    @model_validator(mode="after")
    def _validate_sign_key(self):
        # AES-256 密钥长度为 32 字节
        if len(self.SIGN_KEY.encode("utf-8")) != 32:
            raise ValueError("SIGN_KEY must be exactly 32 bytes (AES-256 key)")
        return self

    @property
    def DATABASE_URL(self) -> str:
        return f"sqlite+aiosqlite:///{self.DATABASE_PATH}"

    def provider_base_url(self, sandbox: bool) -> str:
        return self.SANDBOX_BASE_URL if sandbox else self.BASE_URL


settings = Settings()

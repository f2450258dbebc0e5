"""
Pydantic models for global configuration structure.
This module defines all the nested configuration models used by the Config class.
Each model corresponds to a section in the global_config.yaml file and provides
type validation and structure for the configuration data.
"""

from pydantic import BaseModel


class DefaultLlm(BaseModel):
    """Default LLM configuration."""

    default_model: str
    default_temperature: float
    default_max_tokens: int


class RetryConfig(BaseModel):
    """Retry configuration for LLM requests."""

    max_attempts: int


class TimeoutConfig(BaseModel):
    """Timeout configuration for LLM API requests."""

    api_timeout_seconds: int


class LlmConfig(BaseModel):
    """LLM configuration including caching and retry settings."""

    cache_enabled: bool
    retry: RetryConfig
    timeout: TimeoutConfig


class LoggingLocationConfig(BaseModel):
    """Location information display configuration for logging."""

    enabled: bool
    show_file: bool
    show_function: bool
    show_line: bool
    show_for_info: bool
    show_for_debug: bool
    show_for_warning: bool
    show_for_error: bool


class LoggingFormatConfig(BaseModel):
    """Logging format configuration."""

    show_time: bool
    show_session_id: bool
    location: LoggingLocationConfig


class LoggingLevelsConfig(BaseModel):
    """Logging level configuration."""

    debug: bool
    info: bool
    warning: bool
    error: bool
    critical: bool


class LoggingConfig(BaseModel):
    """Complete logging configuration."""

    verbose: bool
    format: LoggingFormatConfig
    levels: LoggingLevelsConfig


class ServerConfig(BaseModel):
    """Server configuration."""

    allowed_origins: list[str]
    generated_url_prefix: str


class LlmProviderConfig(BaseModel):
    """One chat-completion provider tried by the caption generators, in order."""

    name: str
    model: str
    api_base: str | None = None


class MemeGeneratorConfig(BaseModel):
    """Meme generator configuration."""

    templates_file: str
    max_caption_length: int
    max_prompt_length: int
    max_feedback_length: int
    num_mutations: int
    caption_temperature: float
    mutation_temperature: float
    idea_temperature: float
    providers: list[LlmProviderConfig]


class RenderConfig(BaseModel):
    """Text overlay rendering configuration."""

    templates_dir: str
    output_dir: str
    jpeg_quality: int
    strict_zone_bounds: bool
    font_candidates: list[str]
    fill_color: str
    stroke_color: str


class RateLimitConfig(BaseModel):
    """Per-client request limits for the generation endpoints."""

    enabled: bool
    max_requests: int
    window_seconds: int

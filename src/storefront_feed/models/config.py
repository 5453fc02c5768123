"""Configuration management for the catalog pipeline."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import httpx
import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator

from storefront_feed.models.data_models import CanonicalField, FeedFormat
from storefront_feed.models.errors import ConfigurationError


SHEETS_BASE_URL = "https://docs.google.com/spreadsheets/d"

_PUBLISHED_SHEET_RE = re.compile(r"/spreadsheets/d/e/([\w-]+)")
_SHEET_ID_RE = re.compile(r"/spreadsheets/d/([\w-]+)")
_GID_RE = re.compile(r"gid=([0-9]+)")
_SHEET_KEY_RE = re.compile(r"[\w-]+")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SourceDescriptor(BaseModel):
    """Where to fetch raw tabular data from."""
    kind: Literal["csv_url", "sheet", "feed"] = Field(description="Source type")
    url: Optional[str] = Field(default=None, description="Direct CSV export or feed URL")
    sheet_id: Optional[str] = Field(default=None, description="Spreadsheet identifier")
    gid: str = Field(default="0", description="Sheet tab identifier")
    feed_format: Optional[FeedFormat] = Field(
        default=None,
        description="Feed shape; detected from the payload when unset"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate URL format."""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError(f"URL must start with http:// or https://, got: {v}")
        try:
            httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid URL {v!r}: {e}") from e
        return v

    @field_validator('sheet_id')
    @classmethod
    def validate_sheet_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _SHEET_KEY_RE.fullmatch(v):
            raise ValueError(f"sheet_id may only contain letters, digits, '_' and '-', got: {v!r}")
        return v

    @field_validator('gid')
    @classmethod
    def validate_gid(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError(f"gid must be numeric, got: {v!r}")
        return v

    @model_validator(mode='after')
    def check_required_fields(self) -> "SourceDescriptor":
        if self.kind == "sheet":
            if not self.sheet_id:
                raise ValueError("sheet source requires sheet_id")
        elif not self.url:
            raise ValueError(f"{self.kind} source requires url")
        return self

    def export_url(self) -> str:
        """URL the raw payload is fetched from."""
        if self.kind == "sheet":
            return f"{SHEETS_BASE_URL}/{self.sheet_id}/export?format=csv&gid={self.gid}"
        return self.url

    @property
    def expected_format(self) -> Optional[FeedFormat]:
        if self.kind == "feed":
            return self.feed_format
        return FeedFormat.CSV

    def describe(self) -> str:
        if self.kind == "sheet":
            return f"sheet:{self.sheet_id}#gid={self.gid}"
        return f"{self.kind}:{self.url}"

    @classmethod
    def from_sheet_url(cls, url: str) -> "SourceDescriptor":
        """
        Build a descriptor from a spreadsheet URL as copied from the browser.

        Published links (``/d/e/<id>/pubhtml``) become their CSV output URL,
        edit/share links (``/d/<id>/edit#gid=N``) become a sheet descriptor,
        anything else is used as a direct CSV URL.

        Raises:
            ConfigurationError: If the value is not an http(s) URL
        """
        url = (url or "").strip()
        if not url.startswith(('http://', 'https://')):
            raise ConfigurationError(f"Not a spreadsheet URL: {url!r}")

        gid_match = _GID_RE.search(url)
        gid = gid_match.group(1) if gid_match else "0"

        published = _PUBLISHED_SHEET_RE.search(url)
        if published:
            if "output=csv" in url:
                return cls(kind="csv_url", url=url)
            csv_url = f"{SHEETS_BASE_URL}/e/{published.group(1)}/pub?output=csv"
            if gid_match:
                csv_url += f"&gid={gid}"
            return cls(kind="csv_url", url=csv_url)

        if "format=csv" not in url:
            sheet = _SHEET_ID_RE.search(url)
            if sheet:
                return cls(kind="sheet", sheet_id=sheet.group(1), gid=gid)

        return cls(kind="csv_url", url=url)


class PipelineConfig(BaseModel):
    """Catalog pipeline configuration."""

    # Normalization defaults
    default_currency: str = Field(default="$", description="Currency when the row has none")
    default_category: str = Field(default="uncategorized", description="Category sentinel")
    placeholder_image: str = Field(default="images/placeholder.jpg", description="Image sentinel")
    image_directory: str = Field(default="images/", description="Local image asset prefix")
    image_proxy_template: str = Field(
        default="https://images.weserv.nl/?url=drive.google.com/uc?export=view%26id={file_id}",
        description="Proxy URL for Google Drive images, {file_id} is substituted"
    )

    # Row handling policies
    trim_fields: bool = Field(default=True, description="Strip whitespace around CSV fields")
    missing_name_policy: Literal["synthesize", "reject"] = Field(
        default="synthesize",
        description="What to do with a row whose name is missing or blank"
    )
    name_prefix: str = Field(default="Product", description="Prefix for synthesized names")
    derive_external_image2: bool = Field(
        default=True,
        description="Reuse an external primary image as the secondary image"
    )
    name_image_fallback: bool = Field(
        default=False,
        description="Guess images/<slug>.jpg from the name instead of the placeholder"
    )
    enforce_unique_columns: bool = Field(
        default=False,
        description="Never map two canonical fields to the same column"
    )
    extra_aliases: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Additional header spellings per canonical field"
    )

    # Fetch configuration
    fetch_timeout: float = Field(default=10.0, description="Timeout per fetch attempt in seconds")
    max_retries: int = Field(default=1, description="Proxy fallback attempts per fetch")
    retry_base_delay: float = Field(default=0.25, description="Base delay before a fallback attempt")
    proxy_templates: List[str] = Field(
        default=["https://corsproxy.io/?{url}"],
        description="Proxy URL templates, {url} is the percent-encoded source URL"
    )
    proxy_status_codes: List[int] = Field(
        default=[401, 403, 429, 502, 503, 504],
        description="HTTP status codes that trigger a proxy fallback"
    )

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")
    structured_logging: bool = Field(default=True, description="Enable structured logging")

    # Output configuration
    output_directory: str = Field(default="out", description="Output directory for results")
    output_filename: str = Field(default="products.json", description="Output JSON filename")

    source: Optional[SourceDescriptor] = Field(default=None, description="Default data source")

    @field_validator('fetch_timeout')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError(f"fetch_timeout must be positive, got: {v}")
        return v

    @field_validator('max_retries')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_retries must not be negative, got: {v}")
        return v

    @field_validator('image_proxy_template')
    @classmethod
    def validate_image_proxy(cls, v: str) -> str:
        if "{file_id}" not in v:
            raise ValueError("image_proxy_template must contain {file_id}")
        return v

    @field_validator('proxy_templates')
    @classmethod
    def validate_proxy_templates(cls, v: List[str]) -> List[str]:
        for template in v:
            if "{url}" not in template:
                raise ValueError(f"proxy template must contain {{url}}, got: {template}")
        return v

    @field_validator('extra_aliases')
    @classmethod
    def validate_alias_fields(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        known = {f.value for f in CanonicalField}
        unknown = sorted(set(v) - known)
        if unknown:
            raise ValueError(f"extra_aliases has unknown fields: {', '.join(unknown)}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got: {v}")
        return level

    @field_validator('image_directory')
    @classmethod
    def validate_image_directory(cls, v: str) -> str:
        if v and not v.endswith('/'):
            v += '/'
        return v

    @property
    def output_path(self) -> Path:
        """Get full output file path."""
        return Path(self.output_directory) / self.output_filename

    @classmethod
    def env_overrides(cls) -> Dict[str, Any]:
        """Collect settings from STOREFRONT_* environment variables."""
        env_mappings = {
            "STOREFRONT_FETCH_TIMEOUT": "fetch_timeout",
            "STOREFRONT_MAX_RETRIES": "max_retries",
            "STOREFRONT_LOG_LEVEL": "log_level",
            "STOREFRONT_DEFAULT_CURRENCY": "default_currency",
            "STOREFRONT_DEFAULT_CATEGORY": "default_category",
            "STOREFRONT_PLACEHOLDER_IMAGE": "placeholder_image",
            "STOREFRONT_IMAGE_DIRECTORY": "image_directory",
            "STOREFRONT_MISSING_NAME_POLICY": "missing_name_policy",
            "STOREFRONT_TRIM_FIELDS": "trim_fields",
        }

        overrides: Dict[str, Any] = {}
        for env_var, field_name in env_mappings.items():
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]
            annotation = cls.model_fields[field_name].annotation
            if annotation is bool:
                overrides[field_name] = value.strip().lower() in ("1", "true", "yes", "on")
            elif annotation is int:
                overrides[field_name] = int(value)
            elif annotation is float:
                overrides[field_name] = float(value)
            else:
                overrides[field_name] = value
        return overrides

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create configuration with environment variable overrides."""
        return cls(**cls.env_overrides())


class ConfigManager:
    """Manages configuration loading with override precedence."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path("config/config.yaml")
        self._config: Optional[PipelineConfig] = None

    def load_config(self, cli_overrides: Optional[Dict] = None) -> PipelineConfig:
        """
        Load configuration with override precedence: CLI > ENV > YAML.

        Args:
            cli_overrides: Optional dictionary of CLI flag overrides

        Returns:
            Fully merged PipelineConfig instance

        Raises:
            ConfigurationError: If the file cannot be read or validation fails
        """
        config_dict: Dict[str, Any] = {}

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    yaml_config = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Cannot read config file {self.config_file}: {e}") from e
            if yaml_config:
                if not isinstance(yaml_config, dict):
                    raise ConfigurationError(
                        f"Config file {self.config_file} must contain a mapping"
                    )
                config_dict.update(yaml_config)

        try:
            config_dict.update(PipelineConfig.env_overrides())
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment override: {e}") from e

        if cli_overrides:
            config_dict.update({k: v for k, v in cli_overrides.items() if v is not None})

        try:
            self._config = PipelineConfig(**config_dict)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        return self._config

    @property
    def config(self) -> PipelineConfig:
        """Get the loaded configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

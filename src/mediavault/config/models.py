"""Configuration models describing mediavault settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXTENSION_ALIASES: dict[str, str] = {
    "jpeg": "jpg",
    "tiff": "tif",
    "mpeg": "mpg",
}


class VaultBaseModel(BaseModel):
    """Shared configuration for mediavault Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class UploadOptions(VaultBaseModel):
    """Options governing how candidate uploads are screened.

    Attributes:
        enforce_extension: Whether the filename extension must agree with the sniffed type.
        extension_aliases: Alternate extensions mapped onto their canonical form.
        max_file_size_mb: Largest accepted upload; zero disables the limit.
    """

    enforce_extension: bool = True
    extension_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_EXTENSION_ALIASES)
    )
    max_file_size_mb: int = Field(default=0, ge=0)


class UrlOptions(VaultBaseModel):
    """Settings for URL validation and rendering.

    Attributes:
        public_prefix: Prefix used when rendering retrieval URLs for stored files.
        tld_whitelist: Allowed top-level-domain suffixes; ``None`` disables the whitelist.
    """

    public_prefix: str = "sec.upload"
    tld_whitelist: list[str] | None = None


class LoggingSettings(VaultBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(VaultBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class MediaVaultConfig(VaultBaseModel):
    """Top-level configuration struct for mediavault.

    Attributes:
        upload: Upload screening options.
        urls: URL validation and rendering options.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    upload: UploadOptions = Field(default_factory=UploadOptions)
    urls: UrlOptions = Field(default_factory=UrlOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_EXTENSION_ALIASES",
    "VaultBaseModel",
    "UploadOptions",
    "UrlOptions",
    "LoggingSettings",
    "CLIOptions",
    "MediaVaultConfig",
]

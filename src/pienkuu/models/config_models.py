"""
Pydantic models for folder configuration files and tool settings.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ActionSpec(BaseModel):
    """A declared post-processing step: ``[name, options]``."""

    name: str = Field(..., min_length=1, description="Registered action name")
    options: Dict[str, Any] = Field(
        default_factory=dict, description="Action specific options"
    )

    @model_validator(mode="before")
    @classmethod
    def parse_pair(cls, value: Any) -> Any:
        """Accept the ``[name, options]`` array form used in config files."""
        if isinstance(value, (list, tuple)):
            if not 1 <= len(value) <= 2:
                raise ValueError(
                    "action must be a [name, options] array, "
                    f"got {len(value)} elements"
                )
            name = value[0]
            options = value[1] if len(value) == 2 else None
            # A null options value means "no options"
            return {"name": name, "options": options if options is not None else {}}
        return value


class FolderConfig(BaseModel):
    """Parsed contents of one folder's ``pienkuu.json``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    dependencies: List[str] = Field(
        default_factory=list, description="Folders composed before this one"
    )
    ignore: List[str] = Field(
        default_factory=list, description="Folder-relative exclusion globs"
    )
    minify: List[str] = Field(
        default_factory=list, description="Folder-relative minification globs"
    )
    actions: List[ActionSpec] = Field(
        default_factory=list, description="Actions run after files are written"
    )

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v: List[str]) -> List[str]:
        """Strip trailing separators so archive paths stay canonical."""
        cleaned = []
        for name in v:
            stripped = name.rstrip("/")
            if not stripped:
                raise ValueError("dependency folder name cannot be empty")
            cleaned.append(stripped)
        return cleaned


class PrintOptions(BaseModel):
    """Options for the ``print`` action."""

    text: str = ""


class DownloadOptions(BaseModel):
    """Options for the ``download`` action."""

    url: str = Field(..., min_length=1, description="Remote file to fetch")
    target: str = Field(
        default="", description="Folder-relative file name, or directory if ending in '/'"
    )


class PackagerSettings(BaseModel):
    """Tool-level settings loaded from the optional settings file."""

    max_redirects: int = Field(
        default=3, ge=0, le=20, description="Redirects followed by downloads"
    )
    download_timeout: float = Field(
        default=30.0, gt=0, description="Download timeout in seconds"
    )
    archive_extension: str = Field(
        default=".zip", description="Extension appended to the output archive"
    )
    compression_level: int = Field(
        default=6, ge=0, le=9, description="Deflate compression level"
    )
    log_level: str = Field(default="WARNING", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in valid_levels:
            raise ValueError(f"log_level must be one of {sorted(valid_levels)}")
        return level

    @field_validator("archive_extension")
    @classmethod
    def validate_archive_extension(cls, v: str) -> str:
        """Extensions are stored with their leading dot."""
        if not v or "/" in v:
            raise ValueError("archive_extension must be a non-empty file suffix")
        return v if v.startswith(".") else f".{v}"

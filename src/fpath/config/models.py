"""Settings schema for fpath."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from fpath.runtime_logging import parse_level


class LoggingSettings(BaseModel):
    level: str = Field(default="warning", description="off, error, warning, info or debug")
    file: str | None = Field(default=None, description="JSONL sink; defaults to the state directory")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        return parse_level(value)


class FilteringSettings(BaseModel):
    follow_symlinks: bool = Field(default=True)
    respect_gitignore: bool = Field(default=False)


class AppSettings(BaseModel):
    schema_version: int = Field(default=1)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    filtering: FilteringSettings = Field(default_factory=FilteringSettings)

    def setting_items(self) -> list[tuple[str, str]]:
        """Flatten to dotted key/value pairs."""

        result: list[tuple[str, str]] = []

        def walk(prefix: str, value: object) -> None:
            if isinstance(value, dict):
                for key, nested in value.items():
                    walk(f"{prefix}.{key}" if prefix else key, nested)
            else:
                result.append((prefix, str(value)))

        walk("", self.model_dump())
        return result

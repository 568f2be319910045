"""Plugin options.

Options are validated once, when the plugin is registered. Every problem is
reported in a single :class:`OptionsError` so a misconfigured deployment
shows all of its missing fields at startup.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cube.common.config import DEFAULT_BASE_URL


class OptionsError(ValueError):
    """Raised when plugin options are missing or invalid."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("Invalid cube options: " + "; ".join(problems))


class ConnectionOptions(BaseModel):
    """Credentials and target of the object storage service."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    access: str = Field(min_length=1)
    secret: str = Field(min_length=1)
    bucket: str = Field(min_length=1)
    region: str = Field(min_length=1)
    endpoint: str | None = None


class LocationOptions(BaseModel):
    """How public object paths are rendered."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base: str = DEFAULT_BASE_URL
    path: bool = False


class CubeOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    connection: ConnectionOptions
    location: LocationOptions = Field(default_factory=LocationOptions)


def _describe(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg')}"


def validate_options(options: CubeOptions | Mapping[str, Any] | None) -> CubeOptions:
    if isinstance(options, CubeOptions):
        return options
    try:
        payload = dict(options) if isinstance(options, Mapping) else options
        return CubeOptions.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        raise OptionsError([_describe(err) for err in exc.errors()]) from exc


__all__ = [
    "ConnectionOptions",
    "CubeOptions",
    "LocationOptions",
    "OptionsError",
    "validate_options",
]

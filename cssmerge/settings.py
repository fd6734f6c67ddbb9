"""Process-wide toggles, read once at startup."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_HIDE_COMMENTS = "HIDE_COMMENTS"
ENV_DRY_RUN = "DRY_RUN"
ENV_MAX_ATTEMPTS = "CSSMERGE_MAX_ATTEMPTS"
ENV_RETRY_DELAY = "CSSMERGE_RETRY_DELAY"
ENV_REQUEST_TIMEOUT = "CSSMERGE_REQUEST_TIMEOUT"


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() == "true"


class Settings(BaseModel):
    """Immutable run settings."""

    model_config = ConfigDict(frozen=True)

    hide_comments: bool = False
    dry_run: bool = False
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.5, ge=0, description="Fixed wait between attempts, in seconds")
    request_timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Boolean toggles are enabled only by the literal string ``true``.
        Numeric values that fail validation raise ``pydantic.ValidationError``.
        """
        environ = os.environ if environ is None else environ
        values = {
            "hide_comments": _env_flag(environ, ENV_HIDE_COMMENTS),
            "dry_run": _env_flag(environ, ENV_DRY_RUN),
        }
        if environ.get(ENV_MAX_ATTEMPTS):
            values["max_attempts"] = environ[ENV_MAX_ATTEMPTS]
        if environ.get(ENV_RETRY_DELAY):
            values["retry_delay"] = environ[ENV_RETRY_DELAY]
        if environ.get(ENV_REQUEST_TIMEOUT):
            values["request_timeout"] = environ[ENV_REQUEST_TIMEOUT]
        return cls.model_validate(values)

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied and validated."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return type(self).model_validate({**self.model_dump(), **updates})

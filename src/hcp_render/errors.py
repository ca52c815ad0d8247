"""
Exceptions raised while rendering hosted control plane manifests.

Every error is fatal for the render pass it occurs in. Callers receive the first error and no manifests.
"""

from dataclasses import dataclass


class RenderError(Exception):
    """
    Base class for all errors that abort a render pass.
    """


@dataclass
class AssetNotFoundError(RenderError):
    path: str

    def __str__(self) -> str:
        return f"Asset not found: {self.path!r}"


@dataclass
class TemplateError(RenderError):
    asset: str
    message: str
    lineno: int | None = None

    def __str__(self) -> str:
        location = self.asset if self.lineno is None else f"{self.asset}:{self.lineno}"
        return f"Failed to render template '{location}': {self.message}"


@dataclass
class ReleaseLookupError(RenderError, LookupError):
    table: str
    key: str

    def __str__(self) -> str:
        return f"No {self.table} found for {self.key!r} in the release payload"


@dataclass
class InvalidCIDR(RenderError, ValueError):
    cidr: str
    reason: str

    def __str__(self) -> str:
        return f"Invalid CIDR {self.cidr!r}: {self.reason}"


@dataclass
class PatchTargetMissing(RenderError):
    base_name: str
    patch: str

    def __str__(self) -> str:
        return f"Cannot apply patch '{self.patch}': manifest '{self.base_name}' has not been rendered"


@dataclass
class ReleaseResolutionError(RenderError):
    release_image: str
    reason: str

    def __str__(self) -> str:
        return f"Failed to resolve release '{self.release_image}': {self.reason}"


@dataclass
class ConfigError(RenderError):
    file: str
    reason: str

    def __str__(self) -> str:
        return f"Invalid configuration in '{self.file}': {self.reason}"

"""Exception types raised at the edges of the sandbox."""

from typing import Any, Optional


class SandboxError(Exception):
    """Base class for strategy sandbox errors."""


class InvalidParameters(SandboxError, ValueError):
    """Simulation parameters failed validation."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        if not self.errors:
            return self.args[0]
        fields = ", ".join(
            ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            for err in self.errors
        )
        return f"{self.args[0]} ({fields})"

"""Logical path handling and derivation descriptor parsing.

A logical path looks like ``dropbox://<prefix>/<target>``. The target is the
coordinate understood by Dropbox; its remote path is ``/<target>``.

Targets of the form ``styles/<style>/<scheme>/<path>`` name an image style
derivative of ``<scheme>://<path>``. The parser is intentionally narrow: it
prefers missing a derivable path over treating an arbitrary nested path as one.
"""

from dataclasses import dataclass

from .base import SecurityException

STYLES_SEGMENT = "styles"


@dataclass(frozen=True)
class DerivationDescriptor:
    """A target naming a derived artifact."""

    style_name: str
    scheme: str
    inner_path: str

    @property
    def source_uri(self) -> str:
        """URI of the original file the derivative is built from."""
        return f"{self.scheme}://{self.inner_path}"


def target(logical_path: str, scheme: str | None = None, prefix: str = "") -> str:
    """Strip the scheme and the configured prefix from a logical path.

    Raises:
        SecurityException: If the result is empty or escapes the root
    """
    path = logical_path
    if "://" in path:
        path_scheme, path = path.split("://", 1)
        if scheme is not None and path_scheme != scheme:
            raise SecurityException(f"Unexpected scheme in path: {logical_path}")

    path = path.strip("/")
    prefix = prefix.strip("/")
    if prefix:
        if path == prefix:
            path = ""
        elif path.startswith(prefix + "/"):
            path = path[len(prefix) + 1 :]

    if not path:
        raise SecurityException(f"Empty target for path: {logical_path}")
    if ".." in path.split("/") or "\\" in path:
        raise SecurityException(f"Invalid target: {path}")

    return path


def remote_path(target_path: str) -> str:
    """Dropbox API path for a target."""
    return "/" + target_path.lstrip("/")


def parse_derivation(target_path: str) -> DerivationDescriptor | None:
    """Parse ``styles/<style>/<scheme>/<rest>`` into a descriptor.

    ``<rest>`` may itself contain slashes. Fewer than four segments, a
    different leading segment or an empty component yields None.
    """
    parts = target_path.split("/", 3)
    if len(parts) < 4 or parts[0] != STYLES_SEGMENT:
        return None

    _, style_name, scheme, inner_path = parts
    if not style_name or not scheme or not inner_path:
        return None

    return DerivationDescriptor(style_name=style_name, scheme=scheme, inner_path=inner_path)

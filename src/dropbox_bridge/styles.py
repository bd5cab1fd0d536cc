"""Image style registry.

Styles are loaded from YAML::

    image_styles:
      thumbnail:
        label: Thumbnail (100x100)
        effects:
          - {id: image_scale, width: 100, height: 100}
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .logging import get_logger

logger = get_logger(__name__)

PATH_TOKEN_LENGTH = 8


@dataclass
class ImageStyle:
    """A named derivative recipe."""

    name: str
    label: str = ""
    effects: list[dict[str, Any]] = field(default_factory=list)
    private_key: str = field(default="", repr=False)
    hash_salt: str = field(default="", repr=False)

    def path_token(self, source_uri: str) -> str:
        """Return the access token authorizing derivation of ``source_uri``.

        HMAC-SHA256 over ``"<style>:<uri>"``, URL-safe base64, truncated.
        """
        key = (self.private_key + self.hash_salt).encode("utf-8")
        data = f"{self.name}:{source_uri}".encode("utf-8")
        digest = hmac.new(key, data, hashlib.sha256).digest()
        encoded = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
        return encoded[:PATH_TOKEN_LENGTH]


class StyleRegistry:
    """Lookup of image styles by machine name."""

    def __init__(self, styles: list[ImageStyle] | None = None):
        self._styles: dict[str, ImageStyle] = {}
        for style in styles or []:
            self.register(style)

    def register(self, style: ImageStyle) -> None:
        self._styles[style.name] = style

    def load(self, name: str) -> ImageStyle | None:
        """Return the style called ``name``, or None if it is not registered."""
        return self._styles.get(name)

    def names(self) -> list[str]:
        return sorted(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    @classmethod
    def from_yaml(
        cls, config_path: Path, private_key: str = "", hash_salt: str = ""
    ) -> "StyleRegistry":
        """Build a registry from the ``image_styles`` mapping of a YAML file.

        Raises:
            ValueError: If the file cannot be read or parsed
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load image styles from {config_path}: {e}") from e

        registry = cls()
        for name, definition in (data.get("image_styles") or {}).items():
            definition = definition or {}
            registry.register(
                ImageStyle(
                    name=name,
                    label=definition.get("label", name),
                    effects=definition.get("effects", []),
                    private_key=private_key,
                    hash_salt=hash_salt,
                )
            )

        logger.info("Loaded image styles", path=str(config_path), styles=registry.names())
        return registry

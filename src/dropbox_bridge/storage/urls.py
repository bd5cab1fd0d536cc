"""Non-public download URLs served by the site itself."""

from urllib.parse import quote


class DownloadUrlBuilder:
    """Builds ``<base>/_flysystem/<scheme>/<target>`` URLs.

    The site serves (and for image styles, generates) the file behind these URLs.
    """

    def __init__(self, base_url: str, scheme: str):
        self.base_url = base_url.rstrip("/")
        self.scheme = scheme

    def build(self, target: str) -> str:
        encoded_target = quote(target, safe="/")
        return f"{self.base_url}/_flysystem/{self.scheme}/{encoded_target}"

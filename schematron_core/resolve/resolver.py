"""
Stylesheet Resolver
===================

Maps stylesheet references to files under one resource root, and binds
that lookup into lxml so that ``xsl:import``, ``xsl:include`` and
``document()`` calls made by the pipeline stylesheets are served from the
root instead of the current working directory.
"""

import logging
from pathlib import Path
from typing import BinaryIO, List, Union
from urllib.parse import unquote, urlparse

from lxml import etree
import lxml.isoschematron

from schematron_core.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


def bundled_stylesheet_root() -> Path:
    """Return the ISO Schematron XSLT 1.0 directory shipped with lxml."""
    return (
        Path(lxml.isoschematron.__file__).parent
        / "resources" / "xsl" / "iso-schematron-xslt1"
    )


class StylesheetResolver:
    """
    Read-only lookup of stylesheets below a single root directory.

    References may be relative to the root, absolute filesystem paths or
    ``file:`` URLs. Anything that normalizes to a location outside the root,
    or that does not exist, raises ResourceNotFoundError.

    Example:
        resolver = StylesheetResolver(Path("xsl"))
        with resolver.open("iso_dsdl_include.xsl") as stream:
            doc = etree.parse(stream)
    """

    def __init__(self, root: Union[str, Path]):
        self._root = Path(root).resolve()

    @classmethod
    def default(cls) -> 'StylesheetResolver':
        """Resolver over the stylesheets bundled with lxml."""
        return cls(bundled_stylesheet_root())

    @property
    def root(self) -> Path:
        return self._root

    def locate(self, reference: str) -> Path:
        """
        Resolve a reference to an existing file inside the root.

        Raises:
            ResourceNotFoundError: If the reference points outside the root
                or nothing exists there
        """
        path = self._to_path(reference)
        if path is None:
            raise ResourceNotFoundError(reference, str(self._root))

        candidate = path if path.is_absolute() else self._root / path
        # Symlinks are followed so a link cannot lead out of the root
        candidate = candidate.resolve()

        try:
            candidate.relative_to(self._root)
        except ValueError:
            raise ResourceNotFoundError(reference, str(self._root)) from None

        if not candidate.is_file():
            raise ResourceNotFoundError(reference, str(self._root))

        logger.debug(f"Resolved {reference} -> {candidate}")
        return candidate

    def open(self, reference: str) -> BinaryIO:
        """Open a resolved resource for binary reading."""
        return open(self.locate(reference), 'rb')

    def exists(self, reference: str) -> bool:
        try:
            self.locate(reference)
        except ResourceNotFoundError:
            return False
        return True

    @staticmethod
    def _to_path(reference: str):
        if not reference:
            return None
        parsed = urlparse(reference)
        if parsed.scheme == 'file':
            return Path(unquote(parsed.path))
        # Anything else with a scheme (http:, urn:, ...) is never local.
        # Single-letter schemes are Windows drive letters.
        if parsed.scheme and len(parsed.scheme) > 1:
            return None
        return Path(reference)

    def __repr__(self) -> str:
        return f"StylesheetResolver(root={str(self._root)!r})"


class ResolverHook(etree.Resolver):
    """
    lxml resolver that serves every external load from a StylesheetResolver.

    One hook is created per compile call. Misses are recorded as well as
    raised, because libxslt reports a failed ``document()`` load only as a
    warning; the engine checks ``misses`` after each stage.
    """

    def __init__(self, resolver: StylesheetResolver):
        super().__init__()
        self.resolver = resolver
        self.misses: List[ResourceNotFoundError] = []

    def resolve(self, system_url, public_id, context):
        try:
            path = self.resolver.locate(system_url)
        except ResourceNotFoundError as exc:
            logger.debug(f"Unresolvable reference: {system_url}")
            self.misses.append(exc)
            raise
        return self.resolve_filename(str(path), context)

    def raise_if_missed(self) -> None:
        """Re-raise the first recorded miss, if any."""
        if self.misses:
            raise self.misses[0]

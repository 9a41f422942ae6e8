"""Document loading and URL resolution."""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from structdata.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)


@dataclass
class PageDocument:
    """A parsed HTML page plus the base URL its relative links resolve against."""

    soup: BeautifulSoup
    base_url: Optional[str] = None

    def resolve_url(self, value: Optional[str]) -> Optional[str]:
        """Resolve a relative reference against the document base URL.

        Args:
            value: Attribute value as written in the markup

        Returns:
            Absolute URL, or the value unchanged when no base is known
        """
        if value is None:
            return None
        value = value.strip()
        if not self.base_url or not value:
            return value
        return urljoin(self.base_url, value)

    def find_all(self, *args, **kwargs):
        return self.soup.find_all(*args, **kwargs)


def load_document(
    source: Union[str, bytes, BeautifulSoup, PageDocument],
    base_url: Optional[str] = None,
) -> PageDocument:
    """Turn raw HTML or an existing tree into a PageDocument.

    A ``<base href>`` in the document takes precedence and is itself
    resolved against ``base_url``.

    Args:
        source: HTML text, HTML bytes, a BeautifulSoup tree or a PageDocument
        base_url: URL the page was retrieved from, if known

    Returns:
        PageDocument wrapping the tree

    Raises:
        DocumentLoadError: If the input is not a supported document type
    """
    if isinstance(source, PageDocument):
        if base_url and not source.base_url:
            return PageDocument(soup=source.soup, base_url=base_url)
        return source

    if isinstance(source, BeautifulSoup):
        soup = source
    elif isinstance(source, (str, bytes)):
        try:
            soup = BeautifulSoup(source, 'lxml')
        except Exception as e:
            raise DocumentLoadError(f"Could not parse HTML: {e}") from e
    else:
        raise DocumentLoadError(
            f"Unsupported document type: {type(source).__name__}"
        )

    base_tag = soup.find('base', href=True)
    if base_tag:
        href = base_tag['href'].strip()
        base_url = urljoin(base_url, href) if base_url else href
        logger.debug(f"Using <base href> {base_url}")

    return PageDocument(soup=soup, base_url=base_url or None)

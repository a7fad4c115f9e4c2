"""Blog export parser and item selection."""

import logging
from typing import BinaryIO, Iterator, List, Optional, Tuple

from lxml import etree

from .types import ErrorType, ExportItem, HANDLE_KEY, HandleGeneratorError


def _local(name: str) -> str:
    # WordPress exports put postmeta in the "wp" namespace; match on local name.
    return f"*[local-name()='{name}']"


ITEM_XPATH = (
    f"//{_local('channel')}/{_local('item')}"
    f"[{_local('link')} and {_local('guid')}"
    f" and {_local('postmeta')}[{_local('meta_key')}/text()='{HANDLE_KEY}']]"
)
POSTMETA_XPATH = _local("postmeta")
LINK_XPATH = f"string({_local('link')})"
GUID_XPATH = f"string({_local('guid')})"
META_KEY_XPATH = f"string({_local('meta_key')})"
META_VALUE_XPATH = f"string({_local('meta_value')})"


class ExportParser:
    """
    Parser for blog export documents.

    The whole document is read and parsed before any item is selected.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the export parser.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def read(self, input_stream: BinaryIO, max_bytes: Optional[int] = None) -> bytes:
        """
        Read the whole input stream.

        The document is read as bytes so that lxml decodes it with the
        encoding named in its XML declaration. Text wrappers such as
        ``sys.stdin`` are read through their ``buffer``.

        Args:
            input_stream: Binary stream holding the export
            max_bytes: Optional ceiling on the number of bytes accepted

        Returns:
            The raw document

        Raises:
            HandleGeneratorError: If the input exceeds ``max_bytes`` or the
                stream yields text instead of bytes
            OSError: If the stream cannot be read
        """
        if input_stream is None:
            raise HandleGeneratorError("No input stream given", ErrorType.PARSE)
        input_stream = getattr(input_stream, "buffer", input_stream)

        if max_bytes is None:
            data = input_stream.read()
        else:
            data = input_stream.read(max_bytes + 1)
            if len(data) > max_bytes:
                raise HandleGeneratorError(
                    f"Input exceeds the limit of {max_bytes} bytes",
                    ErrorType.LIMIT,
                    context={"max_input_bytes": max_bytes}
                )

        if not isinstance(data, bytes):
            raise HandleGeneratorError(
                "Input must be a binary stream; decoded text may not match "
                "the encoding declared by the document",
                ErrorType.PARSE
            )
        self.logger.debug(f"Read {len(data)} bytes of input")
        return data

    def parse(self, data: bytes) -> etree._Element:
        """
        Parse an export document.

        Raises:
            etree.XMLSyntaxError: If the document is not well-formed XML
        """
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        return etree.fromstring(data, parser)

    def select_items(self, root: etree._Element) -> Iterator[ExportItem]:
        """
        Yield, in document order, the items eligible for a handle.

        An item is eligible when it is a child of a ``channel`` and has a
        ``link``, a ``guid`` and a ``postmeta`` whose ``meta_key`` is
        ``handle``. Other items are skipped silently.
        """
        for node in root.xpath(ITEM_XPATH):
            yield ExportItem(
                link=str(node.xpath(LINK_XPATH)),
                guid=str(node.xpath(GUID_XPATH)),
                metadata=self._metadata(node)
            )

    def parse_items(self, input_stream: BinaryIO,
                    max_bytes: Optional[int] = None) -> List[ExportItem]:
        """Read, parse and select the eligible items of an export."""
        root = self.parse(self.read(input_stream, max_bytes))
        return list(self.select_items(root))

    @staticmethod
    def _metadata(node: etree._Element) -> List[Tuple[str, str]]:
        return [(str(meta.xpath(META_KEY_XPATH)), str(meta.xpath(META_VALUE_XPATH)))
                for meta in node.xpath(POSTMETA_XPATH)]

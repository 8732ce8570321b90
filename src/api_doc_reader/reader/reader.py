"""Reader — scans candidate resource classes into one accumulated Document."""

import logging
from collections.abc import Iterable, Mapping, Sequence

from api_doc_reader.model.document import Document, Parameter, Tag
from api_doc_reader.reader.scanner import ResourceScanner

logger = logging.getLogger(__name__)


class Reader:
    """Folds scanned resources into a Document.

    The document passed in (or created on the first ``read``) is kept and
    returned by every call, so repeated reads accumulate into it.
    """

    def __init__(self, document: Document | None = None):
        self.document = document

    def read(
        self,
        candidates: type | Iterable[type],
        *,
        include_hidden: bool = False,
        default_consumes: Sequence[str] = (),
        default_produces: Sequence[str] = (),
        seed_tags: Mapping[str, Tag] | None = None,
        seed_parameters: Sequence[Parameter] | None = None,
    ) -> Document:
        """Scan every candidate class and merge the results into the document."""
        if self.document is None:
            self.document = Document()
        if isinstance(candidates, type):
            candidates = [candidates]

        included = 0
        for resource in candidates:
            scanner = ResourceScanner(
                include_hidden=include_hidden,
                default_consumes=default_consumes,
                default_produces=default_produces,
                seed_tags=seed_tags,
                seed_parameters=seed_parameters,
                known_definitions=(self.document.definitions or {}).keys(),
            )
            result = scanner.scan(resource)
            if result.is_empty:
                continue
            self.document.merge(result)
            included += 1

        logger.info(f"Read {included} resource(s) into the document")
        return self.document

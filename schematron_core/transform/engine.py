"""
XSLT Engine Adapter
===================

Thin layer over lxml's XSLT support used by the template compiler.
Each compile call gets its own TransformerFactory, so nothing here is
shared between concurrent calls except the read-only resolver.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from lxml import etree

from schematron_core.config.settings import CompilerConfig, PIPELINE_STAGES
from schematron_core.exceptions import (
    ResourceNotFoundError,
    StylesheetCompilationError,
    TemplateCompilationError,
    TransformationError,
)
from schematron_core.resolve.resolver import ResolverHook, StylesheetResolver

logger = logging.getLogger(__name__)

SOURCE_NS = "urn:schematron-core:source"
SOURCE_LINE = f"{{{SOURCE_NS}}}line"


def annotate_source_lines(tree: etree._ElementTree) -> etree._ElementTree:
    """
    Copy each element's parser line number into a ``src:line`` attribute.

    XSLT result trees do not keep the line numbers of the nodes they were
    copied from, so the attribute carries them through the pipeline.

    lxml cannot add a namespace declaration to an existing element, so when
    the document element does not already declare the source namespace it
    is rebuilt with the author's declarations plus ``src``.

    Returns:
        The annotated tree (a new tree when the document element was rebuilt)
    """
    tree = _declare_source_namespace(tree)
    for element in tree.iter(etree.Element):
        if element.sourceline is not None:
            element.set(SOURCE_LINE, str(element.sourceline))
    return tree


def _declare_source_namespace(tree: etree._ElementTree) -> etree._ElementTree:
    root = tree.getroot()
    if SOURCE_NS in root.nsmap.values():
        return tree

    prefix, n = 'src', 0
    while prefix in root.nsmap:
        n += 1
        prefix = f'src{n}'

    nsmap = dict(root.nsmap)
    nsmap[prefix] = SOURCE_NS
    new_root = etree.Element(root.tag, attrib=dict(root.attrib), nsmap=nsmap)
    if root.sourceline is not None:
        new_root.set(SOURCE_LINE, str(root.sourceline))
    new_root.text = root.text
    new_root.extend(list(root))

    new_tree = etree.ElementTree(new_root)
    if tree.docinfo.URL:
        new_tree.docinfo.URL = tree.docinfo.URL
    return new_tree


def source_line(element: Any) -> Optional[int]:
    """Return the recorded source line of an element, if annotated."""
    value = element.get(SOURCE_LINE)
    return int(value) if value is not None else None


def _string_params(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: etree.XSLT.strparam(str(v)) for k, v in params.items()}


def _log_warnings(context: str, error_log) -> None:
    if error_log:
        logger.warning(f"{context} completed with warnings:")
        for entry in error_log:
            logger.warning(f"  {entry}")


class CompiledTemplate:
    """
    Compiled Schematron validation stylesheet.

    Immutable: the generated stylesheet is held in serialized form and each
    thread compiles its own lxml XSLT object from it on first use.

    Example:
        template = compile_rules(Path("rules.sch"))
        report = template.apply(etree.parse("invoice.xml"))
    """

    def __init__(self, stylesheet: etree._ElementTree):
        self._source = etree.tostring(stylesheet)
        self._local = threading.local()
        # Compile once up front so a broken stylesheet fails here
        self._local.transform = self._compile()

    def _compile(self) -> etree.XSLT:
        return etree.XSLT(etree.fromstring(self._source))

    def _transform(self) -> etree.XSLT:
        transform = getattr(self._local, 'transform', None)
        if transform is None:
            transform = self._local.transform = self._compile()
        return transform

    @property
    def stylesheet(self) -> etree._ElementTree:
        """A fresh copy of the generated validation stylesheet."""
        return etree.ElementTree(etree.fromstring(self._source))

    def apply(self, document: Any, **params) -> etree._ElementTree:
        """
        Run the template against a document and return the SVRL report.

        Args:
            document: lxml Element or ElementTree, XML bytes, or Path
            **params: String parameters for the validation stylesheet
        """
        if isinstance(document, Path):
            document = etree.parse(str(document))
        elif isinstance(document, bytes):
            document = etree.ElementTree(etree.fromstring(document))
        elif isinstance(document, etree._Element):
            document = etree.ElementTree(document)
        elif not isinstance(document, etree._ElementTree):
            raise TypeError("document must be Path, bytes, lxml Element, or ElementTree")

        transform = self._transform()
        report = transform(document, **_string_params(params))
        _log_warnings("Schematron validation", transform.error_log)
        return report

    __call__ = apply


class TransformerFactory:
    """
    Per-call XSLT engine state: parser, resolver hook and configuration.

    Every stylesheet is parsed with the same parser, so lxml routes their
    imports and ``document()`` lookups through the resolver hook.
    """

    def __init__(self, resolver: StylesheetResolver, config: CompilerConfig):
        self._config = config
        self._hook = ResolverHook(resolver)
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)
        self._parser.resolvers.add(self._hook)
        # Decoded text is re-encoded as UTF-8, so the declared encoding
        # must be ignored
        self._text_parser = etree.XMLParser(
            encoding="utf-8", resolve_entities=False, no_network=True
        )
        self._text_parser.resolvers.add(self._hook)

    @property
    def resolver(self) -> StylesheetResolver:
        return self._hook.resolver

    def parse_rules(self, rules: Any) -> etree._ElementTree:
        """
        Parse the Schematron rules document.

        Args:
            rules: Binary or text stream, bytes, XML string, or Path

        Raises:
            TransformationError: If the rules are not well-formed XML
        """
        stage = PIPELINE_STAGES[0]
        try:
            if isinstance(rules, Path):
                with open(rules, 'rb') as stream:
                    tree = etree.parse(stream, self._parser, base_url=str(rules))
            elif isinstance(rules, (bytes, str)):
                tree = self._parse_content(rules)
            elif hasattr(rules, 'read'):
                tree = self._parse_content(rules.read())
            else:
                raise TypeError("rules must be a stream, bytes, str, or Path")
        except etree.XMLSyntaxError as exc:
            raise TransformationError(
                f"Rules document is not well-formed XML: {exc}", stage
            ) from exc
        except OSError as exc:
            raise TransformationError(f"Cannot read rules document: {exc}", stage) from exc

        if self._config.source_line_numbering:
            tree = annotate_source_lines(tree)
            logger.debug("Annotated rule elements with source lines")
        return tree

    def _parse_content(self, content: Any) -> etree._ElementTree:
        if isinstance(content, str):
            root = etree.fromstring(content.encode("utf-8"), self._text_parser)
        elif isinstance(content, bytes):
            root = etree.fromstring(content, self._parser)
        else:
            raise TypeError("rules stream must yield bytes or str")
        return etree.ElementTree(root)

    def new_transformer(self, stage: str) -> etree.XSLT:
        """
        Load and compile the stylesheet of a pipeline stage.

        Raises:
            ResourceNotFoundError: If the stylesheet or one of its imports is missing
            StylesheetCompilationError: If the stylesheet cannot be compiled
        """
        name = self._config.stylesheet_for(stage)
        logger.info(f"Loading {stage} stylesheet: {name}")
        try:
            with self.resolver.open(name) as stream:
                xslt_doc = etree.parse(stream, self._parser, base_url=stream.name)
            return etree.XSLT(xslt_doc)
        except (etree.XMLSyntaxError, etree.XSLTParseError) as exc:
            self._hook.raise_if_missed()
            raise StylesheetCompilationError(
                f"Cannot compile stylesheet {name}: {exc}", stage
            ) from exc

    def transform(self, stage: str, transformer: etree.XSLT,
                  source: etree._ElementTree, **params) -> etree._ElementTree:
        """
        Apply a stage transformer to the current source tree.

        Raises:
            ResourceNotFoundError: If the stage loaded a missing document
            TransformationError: If the transformation fails or yields nothing
        """
        try:
            result = transformer(source, **_string_params(params))
        except ResourceNotFoundError:
            raise
        except etree.XSLTError as exc:
            self._hook.raise_if_missed()
            details = "; ".join(str(entry) for entry in transformer.error_log)
            raise TransformationError(
                f"Transformation failed: {exc}" + (f" ({details})" if details else ""),
                stage,
            ) from exc

        self._hook.raise_if_missed()
        _log_warnings(f"Stage {stage}", transformer.error_log)

        if result.getroot() is None:
            raise TransformationError("Transformation produced an empty document", stage)

        logger.info(f"Stage {stage} completed")
        return result

    def new_templates(self, tree: etree._ElementTree) -> CompiledTemplate:
        """
        Compile the final pipeline result into a CompiledTemplate.

        Raises:
            TemplateCompilationError: If the generated stylesheet is rejected
        """
        try:
            return CompiledTemplate(tree)
        except (etree.XSLTParseError, etree.XMLSyntaxError) as exc:
            raise TemplateCompilationError(
                f"Cannot compile generated validation stylesheet: {exc}"
            ) from exc

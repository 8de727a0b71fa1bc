"""
Schematron Template Compiler
============================

Runs Schematron rules through the ISO pipeline

    include-expand -> abstract-expand -> svrl-generate

and compiles the generated SVRL stylesheet into a CompiledTemplate.
Intermediate results stay in memory as lxml trees between stages.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lxml import etree

from schematron_core.config.settings import CompilerConfig, PIPELINE_STAGES
from schematron_core.exceptions import (
    COMPILE_TEMPLATE_STAGE,
    SchematronConfigurationError,
)
from schematron_core.resolve.resolver import StylesheetResolver
from schematron_core.transform.engine import CompiledTemplate, TransformerFactory

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    """
    Intermediate trees of one pipeline run, keyed by stage in run order.

    Only produced by TemplateCompiler.run_pipeline, for diagnostics.
    """

    intermediates: Dict[str, etree._ElementTree] = field(default_factory=dict)

    @property
    def stages(self) -> List[str]:
        return list(self.intermediates)

    @property
    def result(self) -> Optional[etree._ElementTree]:
        """Output of the last stage that ran."""
        if not self.intermediates:
            return None
        return self.intermediates[self.stages[-1]]


class TemplateCompiler:
    """
    Compiles Schematron rule documents into validation templates.

    A compiler holds only its resolver and configuration, both read-only,
    so one instance can serve any number of threads.

    Example:
        compiler = TemplateCompiler()
        template = compiler.compile(Path("rules.sch"))
        report = template.apply(etree.parse("document.xml"))
    """

    def __init__(self,
                 resolver: Optional[StylesheetResolver] = None,
                 config: Optional[CompilerConfig] = None):
        self._config = config or CompilerConfig()
        if resolver is None:
            if self._config.resource_root:
                resolver = StylesheetResolver(self._config.resource_root)
            else:
                resolver = StylesheetResolver.default()
        self._resolver = resolver

    @classmethod
    def from_config(cls, config: CompilerConfig) -> 'TemplateCompiler':
        return cls(config=config)

    @property
    def config(self) -> CompilerConfig:
        return self._config

    @property
    def resolver(self) -> StylesheetResolver:
        return self._resolver

    def compile(self, rules: Any) -> CompiledTemplate:
        """
        Compile a Schematron rules document.

        Args:
            rules: Binary or text stream, bytes, XML string, or Path

        Returns:
            CompiledTemplate producing SVRL reports

        Raises:
            SchematronConfigurationError: If any pipeline step fails
        """
        factory = TransformerFactory(self._resolver, self._config)
        source = self._run(factory, rules)
        try:
            template = factory.new_templates(source)
        except Exception as exc:
            raise self._failure(exc, COMPILE_TEMPLATE_STAGE) from exc
        logger.info("Schematron rules compiled successfully")
        return template

    def run_pipeline(self, rules: Any) -> PipelineRun:
        """
        Run the pipeline stages without compiling the final result.

        Raises:
            SchematronConfigurationError: If any pipeline stage fails
        """
        run = PipelineRun()
        self._run(TransformerFactory(self._resolver, self._config), rules, run)
        return run

    def _run(self, factory: TransformerFactory, rules: Any,
             run: Optional[PipelineRun] = None) -> etree._ElementTree:
        stage = PIPELINE_STAGES[0]
        try:
            source = factory.parse_rules(rules)
            for stage in PIPELINE_STAGES:
                transformer = factory.new_transformer(stage)
                source = factory.transform(
                    stage, transformer, source, **self._params_for(stage)
                )
                if run is not None:
                    run.intermediates[stage] = source
        except Exception as exc:
            raise self._failure(exc, stage) from exc
        return source

    def _params_for(self, stage: str) -> Dict[str, str]:
        if stage == "svrl-generate":
            return self._config.svrl_params
        return {}

    @staticmethod
    def _failure(exc: Exception, stage: str) -> SchematronConfigurationError:
        logger.error(f"Schematron compilation failed at stage '{stage}': {exc}",
                     exc_info=exc)
        return SchematronConfigurationError(exc, stage=stage)


_default_compiler: Optional[TemplateCompiler] = None
_default_lock = threading.Lock()


def get_compiler() -> TemplateCompiler:
    """Return the process-wide default compiler, creating it on first use."""
    global _default_compiler
    with _default_lock:
        if _default_compiler is None:
            _default_compiler = TemplateCompiler()
        return _default_compiler


def compile_rules(rules: Any, config: Optional[CompilerConfig] = None) -> CompiledTemplate:
    """
    Compile Schematron rules with the default compiler or a given config.

    Raises:
        SchematronConfigurationError: If compilation fails
    """
    compiler = get_compiler() if config is None else TemplateCompiler.from_config(config)
    return compiler.compile(rules)

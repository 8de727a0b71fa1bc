"""
Transformation Framework
========================

lxml-based Schematron compilation pipeline.

Components:
- TemplateCompiler: runs the ISO pipeline and compiles the result
- CompiledTemplate: reusable, thread-safe validation stylesheet
- TransformerFactory: per-call XSLT engine state
- compile_rules / get_compiler: module-level entry points
"""

from schematron_core.transform.engine import (
    CompiledTemplate,
    TransformerFactory,
    annotate_source_lines,
    source_line,
    SOURCE_NS,
    SOURCE_LINE,
)

from schematron_core.transform.compiler import (
    TemplateCompiler,
    PipelineRun,
    get_compiler,
    compile_rules,
)

__all__ = [
    "CompiledTemplate",
    "TransformerFactory",
    "annotate_source_lines",
    "source_line",
    "SOURCE_NS",
    "SOURCE_LINE",
    "TemplateCompiler",
    "PipelineRun",
    "get_compiler",
    "compile_rules",
]

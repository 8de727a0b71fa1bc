"""
Schematron Core Library
=======================

Compiles Schematron rule documents into reusable validation templates by
running them through the ISO Schematron XSLT pipeline:

- include expansion (iso_dsdl_include.xsl)
- abstract pattern expansion (iso_abstract_expand.xsl)
- SVRL stylesheet generation (iso_svrl_for_xslt1.xsl)

Architecture
------------

    schematron_core/
    ├── exceptions.py  - Error taxonomy
    ├── config/        - Compiler configuration
    ├── resolve/       - Root-scoped stylesheet resolution
    └── transform/     - lxml engine adapter and template compiler

Usage
-----

    from schematron_core import compile_rules

    template = compile_rules(Path("rules.sch"))
    report = template.apply(etree.parse("document.xml"))

Any failure while compiling raises SchematronConfigurationError; its
``stage`` attribute and ``__cause__`` tell which step failed and why.
"""

__version__ = "1.0.0"

from schematron_core.exceptions import (
    SchematronError,
    ResourceNotFoundError,
    StylesheetCompilationError,
    TransformationError,
    TemplateCompilationError,
    SchematronConfigurationError,
)

from schematron_core.config.settings import (
    CompilerConfig,
    PIPELINE_STAGES,
    load_config,
    save_config,
    configure_logging,
)

from schematron_core.resolve.resolver import (
    StylesheetResolver,
    bundled_stylesheet_root,
)

from schematron_core.transform.engine import (
    CompiledTemplate,
    source_line,
)

from schematron_core.transform.compiler import (
    TemplateCompiler,
    PipelineRun,
    get_compiler,
    compile_rules,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "SchematronError",
    "ResourceNotFoundError",
    "StylesheetCompilationError",
    "TransformationError",
    "TemplateCompilationError",
    "SchematronConfigurationError",
    # Config
    "CompilerConfig",
    "PIPELINE_STAGES",
    "load_config",
    "save_config",
    "configure_logging",
    # Resolution
    "StylesheetResolver",
    "bundled_stylesheet_root",
    # Compilation
    "CompiledTemplate",
    "source_line",
    "TemplateCompiler",
    "PipelineRun",
    "get_compiler",
    "compile_rules",
]

"""
Configuration and error taxonomy tests.
"""

import logging

import pytest
import yaml

from schematron_core import (
    CompilerConfig,
    ResourceNotFoundError,
    SchematronConfigurationError,
    SchematronError,
    StylesheetCompilationError,
    TemplateCompilationError,
    TransformationError,
    configure_logging,
    load_config,
    save_config,
)
from schematron_core.config import DEFAULT_STAGE_FILES, get_default_config


class TestCompilerConfig:

    def test_defaults(self):
        config = get_default_config()
        assert config.source_line_numbering is True
        assert config.resource_root == ""
        assert config.stage_files == DEFAULT_STAGE_FILES
        assert config.svrl_params == {}

    def test_stage_files_not_shared(self):
        first = CompilerConfig()
        first.stage_files["include-expand"] = "other.xsl"
        assert CompilerConfig().stage_files["include-expand"] == "iso_dsdl_include.xsl"

    def test_stylesheet_for(self):
        assert CompilerConfig().stylesheet_for("svrl-generate") == "iso_svrl_for_xslt1.xsl"

    def test_missing_stage_rejected(self):
        with pytest.raises(ValueError, match="abstract-expand"):
            CompilerConfig(stage_files={
                "include-expand": "a.xsl",
                "svrl-generate": "c.xsl",
            })

    def test_unknown_stage_rejected(self):
        stage_files = dict(DEFAULT_STAGE_FILES, validate="v.xsl")
        with pytest.raises(ValueError, match="validate"):
            CompilerConfig(stage_files=stage_files)

    def test_from_dict_partial(self):
        config = CompilerConfig.from_dict({
            "source_line_numbering": False,
            "stage_files": {"svrl-generate": "custom.xsl"},
            "svrl_params": {"phase": "strict"},
        })
        assert config.source_line_numbering is False
        assert config.stage_files["svrl-generate"] == "custom.xsl"
        assert config.stage_files["include-expand"] == "iso_dsdl_include.xsl"
        assert config.svrl_params == {"phase": "strict"}

    def test_dict_round_trip(self):
        config = CompilerConfig(resource_root="/srv/xsl", log_level="DEBUG")
        assert CompilerConfig.from_dict(config.to_dict()) == config


class TestConfigFiles:

    @pytest.mark.parametrize("name", ["compiler.yaml", "compiler.yml", "compiler.json"])
    def test_save_and_load(self, tmp_path, name):
        config = CompilerConfig(source_line_numbering=False,
                                svrl_params={"phase": "#ALL"})
        path = tmp_path / "conf" / name
        save_config(config, path)
        assert load_config(path) == config

    def test_load_handwritten_yaml(self, tmp_path):
        path = tmp_path / "compiler.yaml"
        path.write_text(yaml.safe_dump({"resource_root": "xsl", "log_level": "WARNING"}),
                        encoding="utf-8")
        config = load_config(path)
        assert config.resource_root == "xsl"
        assert config.log_level == "WARNING"
        assert config.source_line_numbering is True

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CompilerConfig()

    @pytest.mark.parametrize("content", ["just a string\n", "- a\n- b\n"])
    def test_yaml_must_be_mapping(self, tmp_path, content):
        path = tmp_path / "compiler.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_nested_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "compiler.json"
        path.write_text('{"svrl_params": ["phase"]}', encoding="utf-8")
        with pytest.raises(ValueError, match="svrl_params"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "compiler.toml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)
        with pytest.raises(ValueError):
            save_config(CompilerConfig(), tmp_path / "out.ini")


class TestConfigureLogging:

    def test_sets_package_level(self):
        logger = logging.getLogger("schematron_core")
        previous = logger.level
        try:
            configure_logging(CompilerConfig(log_level="debug"))
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging(CompilerConfig(log_level="LOUD"))


class TestErrors:

    def test_taxonomy(self):
        for error_type in (ResourceNotFoundError, StylesheetCompilationError,
                           TransformationError, TemplateCompilationError,
                           SchematronConfigurationError):
            assert issubclass(error_type, SchematronError)

    def test_stage_carried(self):
        assert TransformationError("boom", "abstract-expand").stage == "abstract-expand"
        assert TemplateCompilationError("boom").stage == "compile-template"

    def test_configuration_error_keeps_cause(self):
        cause = ResourceNotFoundError("x.xsl", "/srv/xsl")
        error = SchematronConfigurationError(cause, stage="include-expand")
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.stage == "include-expand"
        assert "include-expand" in str(error)
        assert "x.xsl" in str(error)

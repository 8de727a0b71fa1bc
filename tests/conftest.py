"""
Shared fixtures for schematron_core tests.
"""

from pathlib import Path

import pytest

SCH_NS = "http://purl.oclc.org/dsdl/schematron"
SVRL_NS = "http://purl.oclc.org/dsdl/svrl"


EMPTY_RULES = f"""<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="{SCH_NS}"/>
""".encode("utf-8")


def assert_rules(message: str, test: str = "item") -> bytes:
    """Rules with one assertion on /doc."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="{SCH_NS}">
  <sch:pattern id="items">
    <sch:rule context="/doc">
      <sch:assert test="{test}">{message}</sch:assert>
    </sch:rule>
  </sch:pattern>
</sch:schema>
""".encode("utf-8")


# Stub stylesheets: each stage appends a <stage> marker to the document
# element. The abstract-expand stub refuses to run before include-expand,
# and the svrl-generate stub emits a stylesheet that outputs the markers.

INCLUDE_STUB = """<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:template match="/*">
    <xsl:copy>
      <xsl:copy-of select="@*|node()"/>
      <stage name="include-expand"/>
    </xsl:copy>
  </xsl:template>
</xsl:stylesheet>
"""

ABSTRACT_STUB = """<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:template match="/*">
    <xsl:if test="not(stage[@name='include-expand'])">
      <xsl:message terminate="yes">abstract-expand ran before include-expand</xsl:message>
    </xsl:if>
    <xsl:copy>
      <xsl:copy-of select="@*|node()"/>
      <stage name="abstract-expand"/>
    </xsl:copy>
  </xsl:template>
</xsl:stylesheet>
"""

SVRL_STUB = """<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform"
    xmlns:out="urn:schematron-core:test-alias">
  <xsl:namespace-alias stylesheet-prefix="out" result-prefix="xsl"/>
  <xsl:template match="/*">
    <xsl:if test="not(stage[@name='abstract-expand'])">
      <xsl:message terminate="yes">svrl-generate ran before abstract-expand</xsl:message>
    </xsl:if>
    <out:stylesheet version="1.0">
      <out:template match="/">
        <trace>
          <xsl:for-each select="stage">
            <stage name="{@name}"/>
          </xsl:for-each>
          <stage name="svrl-generate"/>
        </trace>
      </out:template>
    </out:stylesheet>
  </xsl:template>
</xsl:stylesheet>
"""

NOT_A_STYLESHEET_STUB = """<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:template match="/">
    <plain-document/>
  </xsl:template>
</xsl:stylesheet>
"""

STUB_FILES = {
    "include-expand": "include_stub.xsl",
    "abstract-expand": "abstract_stub.xsl",
    "svrl-generate": "svrl_stub.xsl",
}


@pytest.fixture
def stub_root(tmp_path) -> Path:
    """Resource root holding the instrumented stage stubs."""
    root = tmp_path / "stubs"
    root.mkdir()
    (root / "include_stub.xsl").write_text(INCLUDE_STUB, encoding="utf-8")
    (root / "abstract_stub.xsl").write_text(ABSTRACT_STUB, encoding="utf-8")
    (root / "svrl_stub.xsl").write_text(SVRL_STUB, encoding="utf-8")
    (root / "not_a_stylesheet.xsl").write_text(NOT_A_STYLESHEET_STUB, encoding="utf-8")
    (root / "broken.xsl").write_text("<xsl:stylesheet", encoding="utf-8")
    return root


@pytest.fixture
def empty_rules() -> bytes:
    return EMPTY_RULES

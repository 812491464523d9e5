"""Tests for the Java layout pass."""

import pytest

from entity_generator.codegen.core.config import FormatOptions
from entity_generator.codegen.core.errors import FormatError
from entity_generator.codegen.languages.java import JavaFormatter

RAW_ENTITY = """
package com.example;
import lombok.Setter;
import jakarta.persistence.Id;
import lombok.Setter;
/**
 * @author Someone
 */
@Entity
public class Users extends BaseEntity
{
private static final long serialVersionUID = 1L;
@Id
@Column(name = "user_id_")
private String userId;
private Integer age;
@Override
public String getId()
{
return userId;
}
}
"""


def test_layout_of_class():
    formatted = JavaFormatter().format(RAW_ENTITY)

    assert formatted == (
        "package com.example;\n"
        "\n"
        "import jakarta.persistence.Id;\n"
        "import lombok.Setter;\n"
        "\n"
        "/**\n"
        " * @author Someone\n"
        " */\n"
        "@Entity\n"
        "public class Users extends BaseEntity {\n"
        "\n"
        "    private static final long serialVersionUID = 1L;\n"
        "\n"
        "    @Id\n"
        '    @Column(name = "user_id_")\n'
        "    private String userId;\n"
        "\n"
        "    private Integer age;\n"
        "\n"
        "    @Override\n"
        "    public String getId() {\n"
        "        return userId;\n"
        "    }\n"
        "}\n"
    )


def test_imports_kept_in_place_when_sorting_disabled():
    options = FormatOptions(sort_imports=False)
    raw = "package a;\nimport b.Z;\nimport b.A;\npublic class X\n{\n}\n"

    formatted = JavaFormatter(options).format(raw)

    assert formatted.splitlines()[2:4] == ["import b.Z;", "import b.A;"]


def test_tab_width():
    raw = "package a;\npublic class X\n{\nprivate int y;\n}\n"

    formatted = JavaFormatter(FormatOptions(tab_width=2)).format(raw)

    assert "  private int y;" in formatted.splitlines()


def test_long_builder_chain_is_broken():
    statement = (
        "return SalesOrderVO.builder().salesOrderId(Ids.worker().nextId())"
        ".dealerPartition(PartitionContext.current());"
    )
    raw = (
        "package a;\npublic class SalesOrderVO\n{\n"
        "public static SalesOrderVOBuilder builderWithDefault()\n{\n"
        f"{statement}\n}}\n}}\n"
    )

    lines = JavaFormatter(FormatOptions(print_width=60)).format(raw).splitlines()

    start = lines.index("        return SalesOrderVO.builder()")
    assert lines[start + 1 : start + 3] == [
        "            .salesOrderId(Ids.worker().nextId())",
        "            .dealerPartition(PartitionContext.current());",
    ]


def test_braces_inside_literals_are_ignored():
    raw = 'package a;\npublic class X\n{\nprivate String s = "{(";\n}\n'

    assert '    private String s = "{(";' in JavaFormatter().format(raw).splitlines()


def test_plugins_run_after_layout():
    options = FormatOptions(plugins=(str.upper,))

    formatted = JavaFormatter(options).format("package a;\npublic class X\n{\n}\n")

    assert formatted == "PACKAGE A;\n\nPUBLIC CLASS X {}\n"


@pytest.mark.parametrize(
    "raw",
    [
        "package a;\npublic class X\n{\n",
        "package a;\npublic class X\n{\n}\n}\n",
        "package a;\npublic class X\n{\nprivate int y\n}\n",
        "package a;\npublic class X\n{\nprivate int y = f(1;\n}\n",
        'package a;\npublic class X\n{\nprivate String s = "open;\n}\n',
    ],
)
def test_malformed_source_raises(raw):
    with pytest.raises(FormatError):
        JavaFormatter().format(raw)


def test_empty_input():
    assert JavaFormatter().format("\n\n") == ""

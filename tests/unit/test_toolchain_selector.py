"""
Unit tests for JDK toolchain selection.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from autobuilder.config.models import ToolchainConfig
from autobuilder.resolver.errors import BuildFailed, ToolchainExhausted
from autobuilder.toolchain.selector import JavaToolchain, ToolchainSelector, find_default_java_home


@pytest.fixture
def three_jdks():
    return ToolchainConfig(
        java_home=Path("/jdk/override"),
        java_17_home=Path("/jdk/17"),
        java_11_home=Path("/jdk/11"),
    )


def test_candidates_end_with_default_jdk(three_jdks):
    selector = ToolchainSelector(three_jdks)

    assert [t.java_home for t in selector.candidates] == [
        Path("/jdk/override"),
        Path("/jdk/17"),
        Path("/jdk/11"),
        None,
    ]
    assert selector.candidates[-1].is_default


def test_no_overrides_leaves_only_default():
    selector = ToolchainSelector(ToolchainConfig())
    assert selector.candidates == [JavaToolchain()]


def test_first_successful_candidate_is_selected(three_jdks):
    """Test that candidates are tried in order and the first success wins."""
    tried = []

    def probe(toolchain):
        tried.append(toolchain.java_home)
        return 0 if toolchain.java_home == Path("/jdk/17") else 1

    selected = ToolchainSelector(three_jdks).select(probe)

    assert selected == JavaToolchain(Path("/jdk/17"))
    assert tried == [Path("/jdk/override"), Path("/jdk/17")]


def test_try_select_returns_none_when_all_fail(three_jdks):
    tried = []

    def probe(toolchain):
        tried.append(toolchain)
        return 1

    assert ToolchainSelector(three_jdks).try_select(probe) is None
    assert len(tried) == 4


def test_select_raises_when_all_fail():
    selector = ToolchainSelector(ToolchainConfig())

    with pytest.raises(ToolchainExhausted) as exc_info:
        selector.select(lambda toolchain: 2)

    assert isinstance(exc_info.value, BuildFailed)


def test_explicit_toolchain_environment():
    toolchain = JavaToolchain(Path("/jdk/17"))
    env = toolchain.environment({"PATH": "/usr/bin", "HOME": "/home/user"})

    assert env["JAVA_HOME"] == "/jdk/17"
    assert env["PATH"] == os.pathsep.join(["/jdk/17/bin", "/usr/bin"])
    assert env["HOME"] == "/home/user"


def test_default_toolchain_inherits_environment():
    base = {"PATH": "/usr/bin", "JAVA_HOME": "/usr/lib/jvm/default"}
    assert JavaToolchain().environment(base) == base


def test_default_java_home_from_path(temp_dir):
    java = temp_dir / "jdk" / "bin" / "java"
    java.parent.mkdir(parents=True)
    java.write_text("")

    with patch("autobuilder.toolchain.selector.shutil.which", return_value=str(java)):
        assert find_default_java_home() == temp_dir / "jdk"
        assert JavaToolchain().path() == temp_dir / "jdk"


def test_default_java_home_missing():
    with patch("autobuilder.toolchain.selector.shutil.which", return_value=None):
        assert find_default_java_home() is None


def test_toolchain_str():
    assert str(JavaToolchain(Path("/jdk/17"))) == "/jdk/17"
    assert str(JavaToolchain()) == "<default JDK>"

"""
Unit tests for configuration loading.
"""

from pathlib import Path

import pytest

from autobuilder.config.loader import (
    ConfigurationError,
    create_default_config,
    generate_default_config,
    load_config_from_yaml,
)
from autobuilder.config.models import ToolchainConfig


def test_toolchain_from_env_reads_known_variables():
    """Test that toolchain homes are taken from the JAVA_*_HOME variables."""
    config = ToolchainConfig.from_env({
        "JAVA_HOME": "/jdk/default",
        "JAVA_11_HOME": "/jdk/11",
        "JAVA_17_HOME": "",
        "UNRELATED": "/nope",
    })

    assert config.java_home == Path("/jdk/default")
    assert config.java_11_home == Path("/jdk/11")
    assert config.java_17_home is None


def test_candidate_homes_fixed_order():
    """Test the candidate order: JAVA_HOME, 8, latest, 17, 11."""
    config = ToolchainConfig.from_env({
        "JAVA_11_HOME": "/jdk/11",
        "JAVA_17_HOME": "/jdk/17",
        "JAVA_LATEST_HOME": "/jdk/21",
        "JAVA_8_HOME": "/jdk/8",
        "JAVA_HOME": "/jdk/default",
    })

    assert config.candidate_homes() == [
        Path("/jdk/default"),
        Path("/jdk/8"),
        Path("/jdk/21"),
        Path("/jdk/17"),
        Path("/jdk/11"),
    ]


def test_candidate_homes_skip_repeats():
    config = ToolchainConfig(java_home=Path("/jdk/17"), java_17_home=Path("/jdk/17"))
    assert config.candidate_homes() == [Path("/jdk/17")]


def test_toolchain_config_is_immutable():
    config = ToolchainConfig()
    with pytest.raises(Exception):
        config.java_home = Path("/jdk")


def test_load_config_merges_environment(temp_dir):
    """Test that toolchain homes missing from the file come from the environment."""
    config_file = temp_dir / "autobuilder.yaml"
    config_file.write_text(
        "toolchain:\n"
        "  java_17_home: /opt/jdk17\n"
        "maven:\n"
        "  executable: /usr/local/bin/mvn\n"
    )

    config = load_config_from_yaml(config_file, environ={"JAVA_HOME": "/opt/default"})

    assert config.toolchain.java_home == Path("/opt/default")
    assert config.toolchain.java_17_home == Path("/opt/jdk17")
    assert config.maven.executable == "/usr/local/bin/mvn"
    assert config.gradle.build_target == "classes"


def test_load_config_missing_file(temp_dir):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config_from_yaml(temp_dir / "missing.yaml")


def test_load_config_empty_file(temp_dir):
    config_file = temp_dir / "empty.yaml"
    config_file.write_text("")

    with pytest.raises(ConfigurationError, match="empty"):
        load_config_from_yaml(config_file)


def test_load_config_invalid_yaml(temp_dir):
    config_file = temp_dir / "broken.yaml"
    config_file.write_text("toolchain: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_config_from_yaml(config_file)


def test_load_config_validation_error(temp_dir):
    config_file = temp_dir / "bad.yaml"
    config_file.write_text("gradle:\n  build_target: [1, 2]\n")

    with pytest.raises(ConfigurationError, match="validation failed"):
        load_config_from_yaml(config_file, environ={})


def test_generated_config_loads_back(temp_dir):
    """Test that the generated default file is a valid configuration."""
    config_file = temp_dir / "conf" / "autobuilder.yaml"
    generate_default_config(config_file)

    config = load_config_from_yaml(config_file, environ={})
    default = create_default_config(environ={})

    assert config.gradle == default.gradle
    assert config.maven == default.maven
    assert config.toolchain.candidate_homes() == []

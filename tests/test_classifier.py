"""Tests for the path classifier."""

from __future__ import annotations

from pathlib import Path

import pytest

from codecrawler.config import CrawlerConfig
from codecrawler.crawl.classifier import accepts


@pytest.fixture
def config() -> CrawlerConfig:
    return CrawlerConfig(
        directories_to_exclude={".svn", "target"},
        files_to_exclude={".classpath"},
        files_to_include={"pom.xml"},
        extensions_to_exclude={"c", "jar"},
        extensions_to_read={"java"},
    )


class TestAccepts:
    """Test accepts() precedence and matching rules."""

    def test_plain_file_accepted(self, config: CrawlerConfig) -> None:
        assert accepts(Path("/repo/proj/trunk/Main.java"), config)

    def test_excluded_directory_token(self, config: CrawlerConfig) -> None:
        assert not accepts(Path("/repo/proj/target/Main.java"), config)

    def test_directory_token_is_a_substring_match(self, config: CrawlerConfig) -> None:
        """Tokens match anywhere in the path string, not just whole segments."""
        assert not accepts(Path("/repo/mytargets/Main.java"), config)

    def test_excluded_file_name(self, config: CrawlerConfig) -> None:
        assert not accepts(Path("/repo/proj/.classpath"), config)

    def test_excluded_file_name_is_exact(self, config: CrawlerConfig) -> None:
        assert accepts(Path("/repo/proj/.classpath.bak"), config)

    def test_backup_files_rejected(self, config: CrawlerConfig) -> None:
        assert not accepts(Path("/repo/proj/Main.java~"), config)

    def test_excluded_extension(self, config: CrawlerConfig) -> None:
        assert not accepts(Path("/repo/lib/dep.jar"), config)

    def test_excluded_extension_is_case_insensitive(self, config: CrawlerConfig) -> None:
        assert not accepts(Path("/repo/src/main.C"), config)
        assert not accepts(Path("/repo/src/main.c"), config)

    def test_config_extensions_are_normalised(self) -> None:
        config = CrawlerConfig(extensions_to_exclude={".C"})

        assert not accepts(Path("/repo/src/main.c"), config)

    def test_included_file_overrides_directory_exclusion(self, config: CrawlerConfig) -> None:
        assert accepts(Path("/repo/proj/target/pom.xml"), config)

    def test_included_file_overrides_extension_exclusion(self) -> None:
        config = CrawlerConfig(files_to_include={"tool.jar"}, extensions_to_exclude={"jar"})

        assert accepts(Path("/repo/.svn/tool.jar"), config)

    def test_file_without_extension(self, config: CrawlerConfig) -> None:
        assert accepts(Path("/repo/proj/Makefile"), config)

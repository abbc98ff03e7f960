"""Tests for package identifier resolution."""

from certin_mapper._enrichment.identifiers import (
    UNKNOWN_ECOSYSTEM,
    ResolvedIdentifier,
    parse_purl,
    resolve_identifier,
)


class TestParsePurl:
    """Test package URL parsing."""

    def test_maven_purl(self):
        """Test that a maven purl yields group, name and version."""
        result = resolve_identifier("pkg:maven/org.apache.commons/commons-lang3@3.12.0")
        assert result == ResolvedIdentifier(
            ecosystem="maven", group="org.apache.commons", name="commons-lang3", version="3.12.0"
        )

    def test_npm_purl(self):
        """Test that an npm purl has no group."""
        result = resolve_identifier("pkg:npm/lodash@4.17.21")
        assert result.ecosystem == "npm"
        assert result.name == "lodash"
        assert result.version == "4.17.21"
        assert result.group is None

    def test_scoped_npm_purl_keeps_scope_in_name(self):
        """Test that the npm scope is folded into the package name."""
        result = resolve_identifier("pkg:npm/%40angular/core@17.0.0")
        assert result.ecosystem == "npm"
        assert result.name == "@angular/core"
        assert result.group is None

    def test_qualifiers_and_subpath_are_dropped_from_version(self):
        """Test that the version stops before qualifiers and subpath."""
        result = resolve_identifier("pkg:pypi/requests@2.31.0?extension=whl#src")
        assert result.ecosystem == "pypi"
        assert result.name == "requests"
        assert result.version == "2.31.0"

    def test_purl_without_version(self):
        """Test that a missing version resolves to None."""
        result = resolve_identifier("pkg:pypi/django")
        assert result.version is None

    def test_type_is_lowercased(self):
        """Test that the ecosystem tag is lowercase."""
        result = resolve_identifier("pkg:PyPI/flask@3.0.0")
        assert result.ecosystem == "pypi"

    def test_maven_purl_without_group_is_parse_failure(self):
        """Test that maven purls must have a namespace."""
        assert parse_purl("pkg:maven/commons-lang3@3.12.0") is None

    def test_garbage_is_parse_failure(self):
        """Test that a non-purl string does not parse."""
        assert parse_purl("not a purl") is None
        assert parse_purl("") is None
        assert parse_purl(None) is None


class TestResolveFallback:
    """Test fallback to component fields when the purl is unusable."""

    def test_group_and_name_fall_back_to_maven(self):
        """Test that group + name are treated as a maven artifact."""
        result = resolve_identifier(None, name="guava", version="32.1.2-jre", group="com.google.guava")
        assert result == ResolvedIdentifier(
            ecosystem="maven", group="com.google.guava", name="guava", version="32.1.2-jre"
        )

    def test_malformed_purl_with_group_falls_back_to_maven(self):
        """Test that a malformed purl still uses component group/name."""
        result = resolve_identifier("garbage", name="guava", version="1.0", group="com.google.guava")
        assert result.ecosystem == "maven"

    def test_name_only_is_unknown(self):
        """Test that a bare name resolves to the unknown ecosystem."""
        result = resolve_identifier(None, name="openssl", version="3.0.13")
        assert result.ecosystem == UNKNOWN_ECOSYSTEM
        assert result.name == "openssl"
        assert result.version == "3.0.13"

    def test_nothing_at_all_is_unknown(self):
        """Test that ecosystem is never empty."""
        result = resolve_identifier(None)
        assert result.ecosystem == UNKNOWN_ECOSYSTEM
        assert result.name == ""
        assert result.version is None


class TestQualifiedName:
    """Test ResolvedIdentifier.qualified_name."""

    def test_grouped(self):
        identifier = ResolvedIdentifier(ecosystem="maven", group="org.slf4j", name="slf4j-api")
        assert identifier.qualified_name == "org.slf4j:slf4j-api"

    def test_ungrouped(self):
        identifier = ResolvedIdentifier(ecosystem="npm", name="express")
        assert identifier.qualified_name == "express"

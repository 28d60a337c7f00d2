"""
Tests for cache key derivation and segment normalization.
"""

import pytest

from locator_iq.core.keys import (
    FIELD_TRAITS,
    CacheKey,
    FieldType,
    KeyNamespace,
    build_key,
    normalize_key_path,
    normalize_segment,
    parse_key_path,
)
from locator_iq.exceptions import UnsupportedFieldTypeError


class TestNormalizeSegment:
    """Test camelCase normalization of key segments."""

    @pytest.mark.parametrize("raw, expected", [
        ("SearchPage", "searchPage"),
        ("PROCEED", "proceed"),
        ("FIRST_NAME", "firstName"),
        ("first-name", "firstName"),
        ("First Name", "firstName"),
        ("firstName", "firstName"),
        ("Address[2]", "address2"),
        ("HTMLParser", "htmlParser"),
        ("  Save   and  Continue ", "saveAndContinue"),
    ])
    def test_normalization(self, raw, expected):
        """Test representative inputs."""
        assert normalize_segment(raw) == expected

    @pytest.mark.parametrize("raw", ["First Name", "FIRST_NAME", "Address[2]", "{Login Form} User", "x"])
    def test_idempotent(self, raw):
        """Test normalizing twice equals normalizing once."""
        once = normalize_segment(raw)
        assert normalize_segment(once) == once

    def test_empty(self):
        """Test separator-only input normalizes to empty."""
        assert normalize_segment("") == ""
        assert normalize_segment(" -_ ") == ""


class TestFieldType:
    """Test field type parsing."""

    def test_parse_string(self):
        """Test identifiers are case-insensitive."""
        assert FieldType.parse("Button") is FieldType.BUTTON
        assert FieldType.parse(" textarea ") is FieldType.TEXTAREA

    def test_parse_enum_passthrough(self):
        """Test an enum member parses to itself."""
        assert FieldType.parse(FieldType.RADIO) is FieldType.RADIO

    def test_unsupported(self):
        """Test unknown identifiers raise."""
        with pytest.raises(UnsupportedFieldTypeError) as exc_info:
            FieldType.parse("slider")

        assert exc_info.value.field_type == "slider"
        assert "button" in exc_info.value.supported

    def test_every_type_has_traits(self):
        """Test the traits table covers every field type."""
        assert set(FIELD_TRAITS) == set(FieldType)

    def test_value_bearing_types(self):
        """Test which types carry a field value."""
        bearing = {ft for ft, traits in FIELD_TRAITS.items() if traits.value_bearing}
        assert bearing == {FieldType.SELECT, FieldType.CHECKBOX, FieldType.RADIO}


class TestBuildKey:
    """Test build_key."""

    def test_proceed_button(self):
        """Test the canonical search page example."""
        key = build_key("SearchPage", "button", "PROCEED", pattern_code="searchPage")

        assert str(key) == "loc.searchPage.searchPage.button.proceed"
        assert key.namespace is KeyNamespace.STATIC

    def test_spelling_variants_share_a_key(self):
        """Test differently written names land on the same key."""
        keys = {
            build_key("Checkout", "input", name, pattern_code="shop")
            for name in ("First Name", "first-name", "FIRST_NAME", "firstName")
        }
        assert len(keys) == 1

    def test_custom_prefix(self):
        """Test the first segment comes from the prefix."""
        key = build_key("Home", FieldType.LINK, "About Us", pattern_code="site", prefix="ui")
        assert key.path == "ui.site.home.link.aboutUs"

    def test_deterministic(self):
        """Test equal inputs give equal keys."""
        a = build_key("Home", "link", "About", pattern_code="site")
        b = build_key("Home", "link", "About", pattern_code="site")
        assert a == b
        assert hash(a) == hash(b)

    def test_unsupported_type(self):
        """Test an unsupported type fails before any key is built."""
        with pytest.raises(UnsupportedFieldTypeError):
            build_key("Home", "slider", "Volume", pattern_code="site")

    @pytest.mark.parametrize("name, path", [
        ("Address[2]", "loc.shop.checkout.input.address.i2"),
        ("Address2", "loc.shop.checkout.input.address2"),
        ("{Login Form} Username", "loc.shop.checkout.input.username.inLoginForm"),
        ("Login Form Username", "loc.shop.checkout.input.loginFormUsername"),
        ("{form::login} Email", "loc.shop.checkout.input.email.inFormLogin"),
        ("{{Main}} {Login Form} Username[3]", "loc.shop.checkout.input.username.atMain.inLoginForm.i3"),
    ])
    def test_descriptor_parts_are_segments(self, name, path):
        """Test instance and scope get their own segments."""
        assert build_key("Checkout", "input", name, pattern_code="shop").path == path

    def test_value_segment_for_value_bearing_types(self):
        """Test radio values are part of the key."""
        male = build_key("Signup", "radio", "Gender", pattern_code="p", field_value="Male")
        female = build_key("Signup", "radio", "Gender", pattern_code="p", field_value="Female")

        assert male.path == "loc.p.signup.radio.gender.vMale"
        assert female.path == "loc.p.signup.radio.gender.vFemale"

    @pytest.mark.parametrize("field_type, value", [
        ("link", "ignored"),
        ("radio", None),
        ("radio", " "),
    ])
    def test_no_value_segment(self, field_type, value):
        """Test values are left out for other types and for blank values."""
        key = build_key("Home", field_type, "About", pattern_code="p", field_value=value)
        assert key.path == f"loc.p.home.{field_type}.about"


class TestCacheKey:
    """Test CacheKey namespaces and rendering."""

    def test_generated_rendering(self):
        """Test generated keys render with the marker after the prefix."""
        key = CacheKey("loc.search.searchPage.button.proceed").generated()

        assert key.is_generated
        assert str(key) == "loc.auto.search.searchPage.button.proceed"
        assert key.path == "loc.search.searchPage.button.proceed"

    def test_namespace_round_trip(self):
        """Test static() undoes generated()."""
        key = CacheKey("loc.a.b.button.c")
        assert key.generated().static() == key
        assert key.generated() != key

    def test_parse_static_reference(self):
        """Test parsing a plain key reference."""
        key = parse_key_path("loc.search.searchPage.button.proceed")
        assert key == CacheKey("loc.search.searchPage.button.proceed")

    def test_parse_generated_reference(self):
        """Test parsing a reference carrying the generated marker."""
        key = parse_key_path("loc.auto.search.searchPage.button.proceed")
        assert key == CacheKey("loc.search.searchPage.button.proceed", KeyNamespace.GENERATED)

    def test_parse_normalizes_reference(self):
        """Test a reference in any casing names the canonical key."""
        key = parse_key_path("loc.search.SearchPage.button.PROCEED")
        assert key == CacheKey("loc.search.searchPage.button.proceed")

    def test_parse_keeps_short_reference(self):
        """Test a reference that is not a full key is kept as written."""
        assert parse_key_path("loc.good") == CacheKey("loc.good")


class TestNormalizeKeyPath:
    """Test normalization of hand-written key paths."""

    def test_normalizes_each_segment(self):
        """Test page and name segments are camelCased, the type lowercased."""
        assert normalize_key_path("loc.searchPage.Search Page.BUTTON.PROCEED") == (
            "loc.searchPage.searchPage.button.proceed"
        )

    def test_built_keys_unchanged(self):
        """Test normalizing a built key is a no-op."""
        key = build_key("Checkout", "radio", "{Login Form} Plan[2]", pattern_code="shop", field_value="Gold")
        assert normalize_key_path(key.path) == key.path

    @pytest.mark.parametrize("path", [
        "loc.good",
        "loc.shop.cart.slider.volume",
        "loc.shop..button.pay",
    ])
    def test_malformed(self, path):
        """Test paths that are not full keys."""
        assert normalize_key_path(path) is None

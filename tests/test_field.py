"""Tests for field boundary resolution and rewriting.

These tests cover the invariants every field rewrite must keep:
1. The image size never changes
2. Bytes outside the reserved area are untouched
3. The reserved area holds the replacement followed by zeros only
4. A replacement that does not fit leaves the image untouched
"""

import pytest

from qmake_patch import FIELD_RESERVED_AREA_LIMIT, Image, RetCode
from qmake_patch.field import resolve_field, rewrite_field, resolve_and_rewrite
from qmake_patch.types import FieldLocation

from image_test_utils import assert_outside_unchanged, build_image, make_field


class TestResolveField:
    """Tests for resolve_field()."""

    def test_resolves_padded_area(self):
        data = b"HEAD" + make_field(b"abc", 10) + b"TAIL"
        result = resolve_field(data, "abc", 4, 4)

        assert result.success
        assert result.location == FieldLocation(
            area_start=4, value_start=4, value_end=7, area_end=14
        )
        assert result.location.reserved_size == 10
        assert result.location.value_size == 3

    def test_area_may_start_before_value(self):
        """Leader-anchored fields count the leader as part of the area."""
        data = b"HEAD" + make_field(b"name=value", 32) + b"TAIL"
        result = resolve_field(data, "name", 4, 9)

        assert result.success
        assert result.location.area_start == 4
        assert result.location.value_start == 9
        assert result.location.value_end == 14
        assert result.location.area_end == 36

    def test_no_terminator_fails(self):
        data = b"HEADname=value-without-terminator"
        result = resolve_field(data, "name", 4, 9)

        assert not result.success
        assert result.location is None
        assert "end of 'name' value" in result.error

    def test_terminator_beyond_end_bound_fails(self):
        data = b"name=value\x00\x00\x00TAIL"
        result = resolve_field(data, "name", 0, 5, end=8)

        assert not result.success
        assert "end of 'name' value" in result.error

    def test_unbounded_padding_fails(self):
        """Padding running to the end of the image is treated as malformed."""
        data = b"HEAD" + make_field(b"name=value", 32)
        result = resolve_field(data, "name", 4, 9)

        assert not result.success
        assert "end of 'name' reserved area" in result.error

    def test_value_beyond_sanity_limit_fails(self):
        value = b"x" * (FIELD_RESERVED_AREA_LIMIT + 1)
        data = b"HEAD" + value + b"\x00\x00TAIL"
        result = resolve_field(data, "blob", 4, 4)

        assert not result.success
        assert "beyond sanity limit" in result.error
        assert "value" in result.error

    def test_padding_beyond_sanity_limit_fails(self):
        data = b"HEAD" + make_field(b"abc", FIELD_RESERVED_AREA_LIMIT + 1) + b"TAIL"
        result = resolve_field(data, "abc", 4, 4)

        assert not result.success
        assert "reserved area" in result.error
        assert "beyond sanity limit" in result.error

    def test_area_exactly_at_sanity_limit_succeeds(self):
        data = b"HEAD" + make_field(b"abc", FIELD_RESERVED_AREA_LIMIT) + b"TAIL"
        result = resolve_field(data, "abc", 4, 4)

        assert result.success
        assert result.location.reserved_size == FIELD_RESERVED_AREA_LIMIT

    def test_does_not_modify_data(self):
        data = bytearray(b"HEAD" + make_field(b"abc", 10) + b"TAIL")
        before = bytes(data)
        resolve_field(data, "abc", 4, 4)
        assert bytes(data) == before


class TestRewriteField:
    """Tests for rewrite_field()."""

    def test_writes_replacement_and_zero_fills(self):
        before = build_image(make_field(b"a-much-longer-value", 32))
        image = Image(data=bytearray(before))
        location = resolve_field(image.data, "f", 4, 4).location

        result = rewrite_field(image, "f", location, b"short\x00")

        assert result.success
        assert result.code == RetCode.SUCCESS
        assert image.size == len(before)
        area = image.data[location.area_start : location.area_end]
        assert area == b"short" + b"\x00" * 27
        assert_outside_unchanged(
            before, image.data, location.area_start, location.area_end
        )

    def test_exact_fit_succeeds(self):
        before = build_image(make_field(b"abc", 8))
        image = Image(data=bytearray(before))
        location = resolve_field(image.data, "f", 4, 4).location

        result = rewrite_field(image, "f", location, b"1234567\x00")

        assert result.success
        assert image.data[4:12] == b"1234567\x00"
        assert_outside_unchanged(before, image.data, 4, 12)

    def test_oversize_replacement_fails_unmodified(self):
        before = build_image(make_field(b"abc", 8))
        image = Image(data=bytearray(before))
        location = resolve_field(image.data, "f", 4, 4).location

        result = rewrite_field(image, "f", location, b"12345678\x00")

        assert not result.success
        assert result.code == RetCode.DATA_FAILURE
        assert "requires 9 bytes" in result.error
        assert bytes(image.data) == before
        assert image.modifications == []

    def test_records_modification(self):
        before = build_image(make_field(b"abc", 8))
        image = Image(data=bytearray(before))
        location = resolve_field(image.data, "f", 4, 4).location

        rewrite_field(image, "f", location, b"xyz\x00")

        assert len(image.modifications) == 1
        mod = image.modifications[0]
        assert mod.file_offset == 4
        assert mod.size == 8
        assert mod.original == make_field(b"abc", 8)
        assert mod.replacement == b"xyz" + b"\x00" * 5


class TestResolveAndRewrite:
    """Tests for resolve_and_rewrite()."""

    @pytest.mark.parametrize(
        "replacement",
        [b"\x00", b"v\x00", b"/opt/qt4\x00", b"/opt/qt4/very/long/path\x00"],
    )
    def test_layout_preserved(self, replacement):
        before = build_image(
            make_field(b"/usr/local/Trolltech/Qt-4.8.1", 48),
            make_field(b"next", 16),
        )
        image = Image(data=bytearray(before))

        result = resolve_and_rewrite(image, "f", 4, 4, replacement)

        assert result.success
        loc = result.location
        assert loc.reserved_size == 48
        assert image.data[loc.area_start : loc.area_start + len(replacement)] == replacement
        assert not any(image.data[loc.area_start + len(replacement) : loc.area_end])
        assert_outside_unchanged(before, image.data, loc.area_start, loc.area_end)

    def test_resolve_failure_is_data_failure(self):
        image = Image(data=bytearray(b"HEADno-terminator"))
        result = resolve_and_rewrite(image, "f", 4, 4, b"x\x00")

        assert not result.success
        assert result.code == RetCode.DATA_FAILURE
        assert result.field == "f"

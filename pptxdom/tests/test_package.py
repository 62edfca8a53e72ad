"""Tests for package access and relationship tables."""

import pytest

from factories import build_package, corrupt_part, rels_xml
from pptxdom.errors import PackageCorruptError, PackageTooLargeError, PartNotFoundError
from pptxdom.parser.package import PPTXPackage, part_number
from pptxdom.parser.relationships import (
    RT,
    load_relationships,
    parse_relationships,
    rels_path_for,
    resolve_target,
)


@pytest.fixture
def package() -> PPTXPackage:
    """Package whose slide parts are stored out of numeric order."""
    data = build_package(
        {
            "ppt/slides/slide10.xml": "<x/>",
            "ppt/slides/slide2.xml": "<x/>",
            "ppt/slides/slide1.xml": "<x/>",
            "ppt/slides/_rels/slide1.xml.rels": rels_xml(
                ("rId1", "slideLayout", "../slideLayouts/slideLayout1.xml"),
            ),
            "ppt/media/image1.png": b"\x89PNG",
            "ppt/media/nested/image2.png": b"\x89PNG",
        }
    )
    return PPTXPackage.from_bytes(data)


class TestOpening:
    """Tests for opening packages."""

    def test_not_a_zip(self) -> None:
        with pytest.raises(PackageCorruptError):
            PPTXPackage.from_bytes(b"definitely not a zip archive")

    def test_empty_bytes(self) -> None:
        with pytest.raises(PackageCorruptError):
            PPTXPackage.from_bytes(b"")

    def test_size_limit(self) -> None:
        data = build_package({"ppt/presentation.xml": "<x/>"})

        with pytest.raises(PackageTooLargeError) as excinfo:
            PPTXPackage.from_bytes(data, max_size=10)

        assert excinfo.value.limit == 10
        assert excinfo.value.size == len(data)


class TestParts:
    """Tests for listing and reading parts."""

    def test_numbered_parts_sort_numerically(self, package: PPTXPackage) -> None:
        """slide10 comes after slide2 regardless of archive order."""
        assert package.numbered_parts("ppt/slides", "slide") == [
            "ppt/slides/slide1.xml",
            "ppt/slides/slide2.xml",
            "ppt/slides/slide10.xml",
        ]

    def test_read_missing_part(self, package: PPTXPackage) -> None:
        with pytest.raises(PartNotFoundError) as excinfo:
            package.read("ppt/slides/slide99.xml")

        assert isinstance(excinfo.value, KeyError)
        assert "slide99" in str(excinfo.value)

    def test_read_and_size(self, package: PPTXPackage) -> None:
        assert package.read("ppt/media/image1.png") == b"\x89PNG"
        assert package.size_of("ppt/media/image1.png") == 4
        assert package.has("/ppt/media/image1.png")

    def test_entries(self, package: PPTXPackage) -> None:
        entries = package.list_entries()

        assert len(entries) == 6
        assert not any(entry.is_dir for entry in entries)
        assert [entry.path for entry in package.entries_under("ppt/media/nested")] == [
            "ppt/media/nested/image2.png",
        ]
        assert package.entries_under("ppt/media")[0].size == 4

    def test_damaged_part_fails_only_on_read(self) -> None:
        data = build_package({"ppt/media/image1.png": b"\x89PNG", "ppt/media/image2.png": b"\x89PNG"})
        package = PPTXPackage.from_bytes(corrupt_part(data, "ppt/media/image2.png"))

        assert package.read("ppt/media/image1.png") == b"\x89PNG"
        with pytest.raises(PackageCorruptError, match="image2"):
            package.read("ppt/media/image2.png")

    def test_files_under(self, package: PPTXPackage) -> None:
        assert package.files_under("ppt/media") == [
            "ppt/media/image1.png",
            "ppt/media/nested/image2.png",
        ]

    @pytest.mark.parametrize(
        "part,expected",
        [("ppt/slides/slide12.xml", 12), ("ppt/theme/theme1.xml", 1), ("ppt/presentation.xml", None)],
    )
    def test_part_number(self, part: str, expected) -> None:
        assert part_number(part) == expected


class TestRelationships:
    """Tests for relationship parsing."""

    def test_rels_path(self) -> None:
        assert rels_path_for("ppt/slides/slide1.xml") == "ppt/slides/_rels/slide1.xml.rels"

    def test_resolve_relative_and_absolute(self) -> None:
        assert resolve_target("ppt/slides/slide1.xml", "../media/image1.png") == "ppt/media/image1.png"
        assert resolve_target("ppt/slides/slide1.xml", "/ppt/media/image1.png") == "ppt/media/image1.png"

    def test_internal_and_external_targets(self) -> None:
        table = parse_relationships(
            "ppt/slides/slide1.xml",
            rels_xml(
                ("rId1", "slideLayout", "../slideLayouts/slideLayout1.xml"),
                ("rId2", "hyperlink", "https://example.com", True),
            ).encode("utf-8"),
        )

        assert len(table) == 2
        assert table.target_part("rId1") == "ppt/slideLayouts/slideLayout1.xml"
        assert table.first_of_type(RT.SLIDE_LAYOUT).id == "rId1"

        link = table.get("rId2")
        assert link.external
        assert link.part_name is None
        assert table.url("rId2") == "https://example.com"

    def test_unknown_id(self) -> None:
        table = parse_relationships("ppt/slides/slide1.xml", rels_xml().encode("utf-8"))
        assert table.get("rId9") is None
        assert table.target_part(None) is None

    def test_load_missing_rels_is_empty(self, package: PPTXPackage) -> None:
        assert len(load_relationships(package, "ppt/slides/slide2.xml")) == 0
        assert "rId1" in load_relationships(package, "ppt/slides/slide1.xml")

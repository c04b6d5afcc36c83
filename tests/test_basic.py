"""Basic tests to verify the package is importable and functional."""

import domscraper


def test_version():
    """Test that version is defined."""
    assert domscraper.__version__ == "0.1.0"


def test_exports():
    """Test that main exports are available."""
    assert hasattr(domscraper, "BrowserSession")
    assert hasattr(domscraper, "DomConverter")
    assert hasattr(domscraper, "ScrapeService")
    assert hasattr(domscraper, "MetadataService")
    assert hasattr(domscraper, "ScrapeRequest")


def test_converter_usage_example():
    """The usage shown in the package docstring works."""
    items = domscraper.DomConverter().convert("<ul><li>a</li></ul>", "ul", deep=True)
    assert items == [{"ul": {"li": "a"}}]

"""Tests for output formatting."""

from bashbrew_source.tool.format import PrintFormatter, YamlListFormatter


def test_print_formatter() -> None:
    """Test formatting rows as columns."""
    formatter = PrintFormatter(["image", "revision"])
    assert list(
        formatter.format(
            [
                {"image": "library/alpine:3.18", "revision": "abc123"},
                {"image": "library/debian:12", "revision": "bbb222"},
            ]
        )
    ) == [
        "IMAGE                  REVISION",
        "library/alpine:3.18    abc123",
        "library/debian:12      bbb222",
    ]


def test_print_formatter_empty() -> None:
    """Test that nothing is printed without data."""
    assert list(PrintFormatter(["image"]).format([])) == []


def test_yaml_list_formatter() -> None:
    """Test formatting rows as a yaml list."""
    assert list(YamlListFormatter().format([{"image": "alpine", "tag": "3.18"}])) == [
        "---",
        "- image: alpine",
        "  tag: '3.18'",
        "",
    ]

"""Verify package imports work correctly."""


def test_import_inkwell() -> None:
    """Test that inkwell can be imported and version matches pyproject."""
    import tomllib
    from pathlib import Path

    import inkwell

    with (Path(__file__).resolve().parent.parent / "pyproject.toml").open("rb") as f:
        expected = tomllib.load(f)["project"]["version"]
    assert inkwell.__version__ == expected


def test_version_format() -> None:
    """Test version string format."""
    from inkwell import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_names_resolve() -> None:
    """Every name in __all__ is importable from the top-level package."""
    import inkwell

    missing = [name for name in inkwell.__all__ if not hasattr(inkwell, name)]
    assert missing == []

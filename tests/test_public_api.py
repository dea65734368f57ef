"""Tests for public API surface."""

from pathlib import Path

import pytest

import canadapost_pws


def test_version_is_set():
    """Package exposes __version__."""
    assert hasattr(canadapost_pws, "__version__")
    assert canadapost_pws.__version__ == "0.1.0"


def test_py_typed_marker_exists():
    """PEP 561 py.typed marker file exists."""
    marker = (
        Path(__file__).resolve().parents[1]
        / "src"
        / "canadapost_pws"
        / "py.typed"
    )
    assert marker.exists()


def test_all_exports_are_importable():
    """Every name in __all__ is importable."""
    for name in canadapost_pws.__all__:
        attr = getattr(canadapost_pws, name)
        assert attr is not None, f"{name} resolved to None"


def test_lazy_import_client():
    """CanadaPostClient is lazily importable."""
    cls = canadapost_pws.CanadaPostClient
    assert cls.__name__ == "CanadaPostClient"


def test_lazy_import_poller():
    """poll_manifest is importable from the package."""
    fn = canadapost_pws.poll_manifest
    assert callable(fn)


def test_lazy_import_exceptions():
    """Exception classes are lazily importable."""
    assert issubclass(
        canadapost_pws.NoTrackingInfoFound, canadapost_pws.CarrierError
    )
    assert issubclass(
        canadapost_pws.CarrierError, canadapost_pws.CanadaPostError
    )


def test_getattr_raises_for_unknown():
    """Unknown attribute raises AttributeError."""
    with pytest.raises(AttributeError, match="no_such_attribute"):
        canadapost_pws.no_such_attribute  # noqa: B018

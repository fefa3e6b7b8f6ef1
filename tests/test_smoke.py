"""Smoke test to verify the toolchain works."""


def test_import_track_lrs():
    """Verify the track_lrs package can be imported."""
    import track_lrs

    assert track_lrs.__version__ == "0.1.0"


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import track_lrs.codec
    import track_lrs.geometry
    import track_lrs.lrs
    import track_lrs.scale

    assert track_lrs.codec is not None
    assert track_lrs.geometry is not None
    assert track_lrs.lrs is not None
    assert track_lrs.scale is not None

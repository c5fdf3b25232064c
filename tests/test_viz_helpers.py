"""
Unit tests for small helper functions in the viz module.
"""

import pytest


class TestGetSpeedLabelFromFrames:
    def test_exact_mapping(self):
        pytest.importorskip("streamlit")
        from viz.app_streamlit import get_speed_label_from_frames  # noqa: WPS433
        assert get_speed_label_from_frames(15) == "Slow"
        assert get_speed_label_from_frames(30) == "Normal"
        assert get_speed_label_from_frames(90) == "Fast"

    def test_fallback_logic(self):
        pytest.importorskip("streamlit")
        from viz.app_streamlit import get_speed_label_from_frames  # noqa: WPS433
        assert get_speed_label_from_frames(20) == "Slow"   # < 30
        assert get_speed_label_from_frames(60) == "Fast"   # > 30

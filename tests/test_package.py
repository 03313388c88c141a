#!/usr/bin/env python3
"""
Tests for the top-level package exports and metadata.

Run with: python -m pytest tests/test_package.py -v
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import crs_transform


class TestPackage:
    """Test what `import crs_transform` exposes."""

    def test_public_names_resolve(self) -> None:
        for name in crs_transform.__all__:
            assert getattr(crs_transform, name) is not None

    def test_metadata(self) -> None:
        assert crs_transform.__version__ == "0.1.0"
        assert crs_transform.__description__.startswith("Coordinate reference system")
        assert not hasattr(crs_transform, "__author__")

"""Tests for cache fingerprints and the binary cache codec."""

import struct

import numpy as np
import pytest

from klfield import (
    CacheFormatError,
    EigenPairs,
    SpectralTruncation,
    cache_filename,
    cache_relpath,
    load_cache,
    make_domain,
    save_cache,
)
from klfield.cache import OutputDirectory, header_size, record_size


def random_eigenpairs(rng, M, k):
    vals = np.sort(rng.uniform(0.0, 5.0, k))[::-1].copy()
    vecs = rng.standard_normal((M, k))
    return EigenPairs(vals, vecs)


class TestCacheFilename:
    """Tests for the parameter fingerprint."""

    def test_reference_example_2d(self):
        """Test the documented 2D file name."""
        domain = make_domain([0, 0], [1, 1], [3, 3], [False, False])
        name = cache_filename(domain, SpectralTruncation(4, 0.5))
        assert name == "xy_0.000_0.000_1.000_1.000_3_3_0_0_4_0.500.rfg"

    def test_relpath(self):
        """Test that the relative path lives in the cache directory."""
        domain = make_domain([0, 0], [1, 1], [3, 3], [False, False])
        relpath = cache_relpath(domain, SpectralTruncation(4, 0.5))
        assert relpath == "CachedRandomFields/xy_0.000_0.000_1.000_1.000_3_3_0_0_4_0.500.rfg"

    def test_prefix_1d(self):
        """Test the 1D dimension tag and periodicity flag."""
        domain = make_domain([-0.5], [2.25], [17], [True])
        name = cache_filename(domain, SpectralTruncation(5, 0.125))
        assert name == "x_-0.500_2.250_17_1_5_0.125.rfg"

    def test_prefix_3d(self):
        """Test the 3D dimension tag and field order."""
        domain = make_domain([0, 1, 2], [3, 4, 5], [2, 3, 4], [True, False, True])
        name = cache_filename(domain, SpectralTruncation(7, 1.0))
        assert name == "xyz_0.000_1.000_2.000_3.000_4.000_5.000_2_3_4_1_0_1_7_1.000.rfg"

    def test_determinism(self):
        """Test that identical parameters give identical names."""
        d1 = make_domain([0.1, 0.2], [1.3, 1.4], [5, 6], [True, False])
        d2 = make_domain([0.1, 0.2], [1.3, 1.4], [5, 6], [True, False])
        t = SpectralTruncation(10, 0.3)
        assert cache_filename(d1, t) == cache_filename(d2, t)

    def test_collision_beyond_third_decimal(self):
        """Test that parameters differing after the 3rd decimal collide."""
        d1 = make_domain([0.0], [1.0], [8], [False])
        d2 = make_domain([0.0001], [1.0004], [8], [False])
        assert cache_filename(d1, SpectralTruncation(3, 0.5)) == cache_filename(
            d2, SpectralTruncation(3, 0.5004)
        )

    def test_no_collision_at_third_decimal(self):
        """Test that a difference in the 3rd decimal changes the name."""
        domain = make_domain([0.0], [1.0], [8], [False])
        assert cache_filename(domain, SpectralTruncation(3, 0.5)) != cache_filename(
            domain, SpectralTruncation(3, 0.501)
        )


class TestCacheCodec:
    """Tests for saving and loading cache records."""

    @pytest.mark.parametrize(
        "lower, upper, grid_pts, periodicity",
        [
            ([0.0], [1.0], [7], [True]),
            ([-1.5, 0.25], [2.0, 3.75], [4, 5], [False, True]),
            ([0.0, 1.0, 2.0], [1.0, 2.5, 4.0], [3, 2, 4], [True, False, True]),
        ],
    )
    def test_roundtrip(self, tmp_path, lower, upper, grid_pts, periodicity):
        """Test that load(save(x)) reproduces x bit for bit."""
        rng = np.random.default_rng(42)
        domain = make_domain(lower, upper, grid_pts, periodicity)
        truncation = SpectralTruncation(3, 0.123456789)
        pairs = random_eigenpairs(rng, domain.total_grid_pts, 3)

        path = tmp_path / "record.rfg"
        save_cache(path, domain, truncation, pairs)
        loaded_domain, loaded_truncation, loaded_pairs = load_cache(path, domain.dim)

        assert loaded_domain == domain
        assert loaded_truncation == truncation
        np.testing.assert_array_equal(loaded_pairs.eigenvalues, pairs.eigenvalues)
        np.testing.assert_array_equal(loaded_pairs.eigenvectors, pairs.eigenvectors)

    def test_file_size(self, tmp_path):
        """Test that the file holds exactly header + eigenvalues + eigenvectors."""
        rng = np.random.default_rng(0)
        domain = make_domain([0.0, 0.0], [1.0, 1.0], [3, 4])
        pairs = random_eigenpairs(rng, 12, 5)
        path = tmp_path / "record.rfg"
        save_cache(path, domain, SpectralTruncation(5, 0.5), pairs)
        assert path.stat().st_size == record_size(2, 12, 5)
        assert record_size(2, 12, 5) == header_size(2) + 8 * (5 + 60)

    def test_header_size(self):
        """Test the packed header size per dimension."""
        # 2 x float64 corners, uint32 grid, uint8 flags, uint32 k, float64 length
        assert header_size(1) == 8 + 8 + 4 + 1 + 4 + 8
        assert header_size(2) == 16 + 16 + 8 + 2 + 4 + 8
        assert header_size(3) == 24 + 24 + 12 + 3 + 4 + 8

    def test_eigenvectors_column_major(self, tmp_path):
        """Test that eigenvectors are stored mode by mode."""
        domain = make_domain([0.0], [1.0], [3])
        vals = np.array([2.0, 1.0])
        vecs = np.array([[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]])
        path = tmp_path / "record.rfg"
        save_cache(path, domain, SpectralTruncation(2, 0.5), EigenPairs(vals, vecs))

        payload = np.frombuffer(path.read_bytes()[header_size(1):], dtype="<f8")
        np.testing.assert_array_equal(payload, [2.0, 1.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0])

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        with pytest.raises(OSError):
            load_cache(tmp_path / "missing.rfg", 2)

    def test_save_unwritable_path(self, tmp_path):
        """Test that an unopenable destination raises OSError."""
        rng = np.random.default_rng(0)
        domain = make_domain([0.0], [1.0], [4])
        pairs = random_eigenpairs(rng, 4, 2)
        with pytest.raises(OSError):
            save_cache(tmp_path / "no_such_dir" / "record.rfg", domain, SpectralTruncation(2, 0.5), pairs)

    def test_save_shape_mismatch(self, tmp_path):
        """Test that eigenpairs must match the header."""
        rng = np.random.default_rng(0)
        domain = make_domain([0.0], [1.0], [4])
        pairs = random_eigenpairs(rng, 5, 2)
        with pytest.raises(ValueError):
            save_cache(tmp_path / "record.rfg", domain, SpectralTruncation(2, 0.5), pairs)

    def test_truncated_payload(self, tmp_path):
        """Test that a short file raises CacheFormatError."""
        rng = np.random.default_rng(0)
        domain = make_domain([0.0, 0.0], [1.0, 1.0], [3, 3])
        pairs = random_eigenpairs(rng, 9, 4)
        path = tmp_path / "record.rfg"
        save_cache(path, domain, SpectralTruncation(4, 0.5), pairs)
        path.write_bytes(path.read_bytes()[:-8])
        with pytest.raises(CacheFormatError):
            load_cache(path, 2)

    def test_truncated_header(self, tmp_path):
        """Test that a file shorter than the header raises CacheFormatError."""
        path = tmp_path / "record.rfg"
        path.write_bytes(b"\x00" * 10)
        with pytest.raises(CacheFormatError):
            load_cache(path, 1)

    def test_short_file_with_huge_counts_1d(self, tmp_path):
        """Test that a header announcing a huge payload raises CacheFormatError."""
        header = struct.pack("<ddIBId", 0.0, 1.0, 1_000_000, 0, 1_000_000, 0.5)
        path = tmp_path / "record.rfg"
        path.write_bytes(header + b"\x00" * 16)
        with pytest.raises(CacheFormatError):
            load_cache(path, 1)

    def test_short_file_with_huge_counts_2d(self, tmp_path):
        """Test that counts near the uint32 limit raise CacheFormatError."""
        n = 4_000_000_000
        header = struct.pack("<2d2d2I2BId", 0.0, 0.0, 1.0, 1.0, n, n, 0, 0, n, 0.5)
        path = tmp_path / "record.rfg"
        path.write_bytes(header + b"\x00" * 16)
        with pytest.raises(CacheFormatError):
            load_cache(path, 2)

    def test_unsorted_eigenvalues(self, tmp_path):
        """Test that a record with increasing eigenvalues raises CacheFormatError."""
        header = struct.pack("<ddIBId", 0.0, 1.0, 2, 0, 2, 0.5)
        payload = np.array([1.0, 2.0, 1.0, 0.0, 0.0, 1.0], dtype="<f8").tobytes()
        path = tmp_path / "record.rfg"
        path.write_bytes(header + payload)
        with pytest.raises(CacheFormatError):
            load_cache(path, 1)


class TestOutputDirectory:
    """Tests for the default path resolver."""

    def test_resolve_absolute(self, tmp_path):
        """Test that relative paths resolve under the root."""
        resolver = OutputDirectory(tmp_path)
        path = resolver.resolve("CachedRandomFields/a.rfg")
        assert path.is_absolute()
        assert path == tmp_path / "CachedRandomFields" / "a.rfg"

    def test_exists(self, tmp_path):
        """Test that exists() reports files only."""
        resolver = OutputDirectory(tmp_path)
        assert not resolver.exists("a.rfg")
        (tmp_path / "a.rfg").write_bytes(b"")
        assert resolver.exists("a.rfg")

    def test_environment_root(self, tmp_path, monkeypatch):
        """Test that KLFIELD_OUTPUT sets the default root."""
        monkeypatch.setenv("KLFIELD_OUTPUT", str(tmp_path))
        assert OutputDirectory().root.resolve() == tmp_path.resolve()

    def test_cwd_fallback(self, tmp_path, monkeypatch):
        """Test that the working directory is used without KLFIELD_OUTPUT."""
        monkeypatch.delenv("KLFIELD_OUTPUT", raising=False)
        monkeypatch.chdir(tmp_path)
        assert OutputDirectory().root.resolve() == tmp_path.resolve()

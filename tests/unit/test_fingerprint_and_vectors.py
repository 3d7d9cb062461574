"""Unit tests for ContentFingerprinter and the vector helpers."""

from __future__ import annotations

import hashlib
import math

import pytest

from mindmarks.services.fingerprint import ContentFingerprinter
from mindmarks.utils.vectors import cosine_similarity, normalize, text_to_vector


# ======================================================================
# ContentFingerprinter
# ======================================================================


class TestContentFingerprinter:
    @pytest.fixture()
    def fingerprinter(self) -> ContentFingerprinter:
        return ContentFingerprinter()

    def test_is_sha256_of_full_text(self, fingerprinter: ContentFingerprinter) -> None:
        text = "Event sourcing keeps every change."
        assert fingerprinter.fingerprint(text) == hashlib.sha256(text.encode("utf-8")).hexdigest()

    def test_same_text_same_fingerprint(self, fingerprinter: ContentFingerprinter) -> None:
        assert fingerprinter.fingerprint("abc") == fingerprinter.fingerprint("abc")

    def test_texts_sharing_a_prefix_differ(self, fingerprinter: ContentFingerprinter) -> None:
        prefix = "x" * 500
        assert fingerprinter.fingerprint(prefix + "a") != fingerprinter.fingerprint(prefix + "b")

    def test_exact_mode_is_case_and_whitespace_sensitive(
        self, fingerprinter: ContentFingerprinter
    ) -> None:
        assert fingerprinter.fingerprint("Python") != fingerprinter.fingerprint("python")
        assert fingerprinter.fingerprint("python ") != fingerprinter.fingerprint("python")

    def test_normalized_mode_trims_and_lowercases(self, fingerprinter: ContentFingerprinter) -> None:
        assert fingerprinter.fingerprint("  Python ", normalize=True) == fingerprinter.fingerprint(
            "python", normalize=True
        )

    def test_scope_is_prefixed(self, fingerprinter: ContentFingerprinter) -> None:
        key = fingerprinter.fingerprint("hello", scope="emb")
        assert key.startswith("emb:")
        assert key.split(":", 1)[1] == fingerprinter.fingerprint("hello")

    def test_handles_unicode(self, fingerprinter: ContentFingerprinter) -> None:
        assert len(fingerprinter.fingerprint("café ☃")) == 64


# ======================================================================
# Vector helpers
# ======================================================================


class TestTextToVector:
    def test_has_requested_dimension(self) -> None:
        assert len(text_to_vector("hello world", 32)) == 32

    def test_is_unit_length(self) -> None:
        vector = text_to_vector("some longer text to fold", 8)
        assert math.isclose(math.sqrt(sum(v * v for v in vector)), 1.0, rel_tol=1e-9)

    def test_is_deterministic(self) -> None:
        assert text_to_vector("same", 16) == text_to_vector("same", 16)

    def test_empty_text_is_zero_vector(self) -> None:
        assert text_to_vector("", 4) == [0.0, 0.0, 0.0, 0.0]

    def test_rejects_non_positive_dimension(self) -> None:
        with pytest.raises(ValueError):
            text_to_vector("x", 0)


class TestCosineSimilarity:
    def test_identical_vectors(self) -> None:
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self) -> None:
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_mismatched_lengths_return_zero(self) -> None:
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0

    def test_zero_vector_returns_zero(self) -> None:
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_normalize_leaves_zero_vector(self) -> None:
        import numpy as np

        zero = np.zeros(3)
        assert normalize(zero).tolist() == [0.0, 0.0, 0.0]

"""Content fingerprinting for cache keys."""

from __future__ import annotations

import hashlib


class ContentFingerprinter:
    """Derives stable, collision-resistant cache keys from text.

    The fingerprint is the SHA-256 hex digest of the *full* text.  Two
    modes exist:

    - ``normalize=False`` (analysis cache): the text is hashed exactly as
      given, so edits to case or whitespace produce a new analysis.
    - ``normalize=True`` (search-query and embedding keys): the text is
      trimmed and lower-cased first, so ``" Python "`` and ``"python"``
      share one cached vector.

    An optional *scope* is prefixed to the digest to keep unrelated key
    families apart (``"emb:3f2a..."``).
    """

    def fingerprint(self, text: str, scope: str | None = None, normalize: bool = False) -> str:
        material = text.strip().lower() if normalize else text
        digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
        return f"{scope}:{digest}" if scope else digest

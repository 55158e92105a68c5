"""
Reference-image matching.

The pipeline keeps one cached reference raster and answers, for any image
source, whether it is a near-identical copy of that reference. Failures are
never raised to the caller: they come back as a ``DetectionResult`` with an
error kind so the engine can log them and move on.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from stickerguard.datatypes.action_datatypes import ErrorKind
from stickerguard.datatypes.image_datatypes import CanonicalRaster, ImageReference
from stickerguard.datatypes.moderation_datatypes import DetectionResult
from stickerguard.detection.similarity import score
from stickerguard.util.errors import ConfigurationMissing, DecodeError, FetchError
from stickerguard.util.image_utils import load_canonical_raster
from stickerguard.util.logger import get_logger

logger = get_logger("detection_pipeline")

RasterLoader = Callable[[ImageReference, float], Awaitable[CanonicalRaster]]


class DetectionPipeline:
    """Match images against a single cached reference raster.

    Args:
        threshold: Inclusive similarity threshold in [0, 1].
        fetch_timeout: Seconds allowed for fetching and decoding one image.
        loader: Coroutine turning an image source into a raster; defaults to
            :func:`stickerguard.util.image_utils.load_canonical_raster`.
    """

    def __init__(
        self,
        threshold: float,
        fetch_timeout: float,
        loader: Optional[RasterLoader] = None,
    ) -> None:
        self.threshold = threshold
        self.fetch_timeout = fetch_timeout
        self._loader: RasterLoader = loader or load_canonical_raster
        self.reference: Optional[CanonicalRaster] = None
        self.reference_source: Optional[ImageReference] = None

    @property
    def has_reference(self) -> bool:
        return self.reference is not None

    def configure(self, threshold: float, fetch_timeout: float) -> None:
        self.threshold = threshold
        self.fetch_timeout = fetch_timeout

    async def load_reference(self, base_images: Sequence[str]) -> bool:
        """Load the first entry of ``base_images`` as the reference raster.

        Returns True on success. On an empty list or any failure the reference
        is left unset and a warning is logged.
        """
        self.reference = None
        self.reference_source = None

        if not base_images:
            logger.warning("[DETECT] No base images configured; detection is disabled")
            return False

        try:
            source = ImageReference(base_images[0])
        except ValueError as exc:
            logger.warning(f"[DETECT] Invalid base image entry {base_images[0]!r}: {exc}")
            return False

        if len(base_images) > 1:
            logger.info(f"[DETECT] {len(base_images)} base images configured; only {source} is used")

        try:
            raster = await self._loader(source, self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[DETECT] Timed out loading base image {source} after {self.fetch_timeout}s")
            return False
        except (FetchError, DecodeError) as exc:
            logger.warning(f"[DETECT] Failed to load base image {source}: {exc}")
            return False

        self.reference = raster
        self.reference_source = source
        logger.info(f"[DETECT] Base image loaded from {source}")
        return True

    async def detect(self, image_source: ImageReference | str) -> DetectionResult:
        """Compare ``image_source`` against the reference raster.

        Returns a matched result when the similarity reaches the threshold.
        Without a reference, or when the image cannot be fetched or decoded in
        time, an unmatched result carrying the error kind is returned.
        """
        reference = self.reference
        if reference is None:
            exc = ConfigurationMissing("base image not loaded")
            logger.warning(f"[DETECT] Skipping detection: {exc}")
            return DetectionResult.failed(ErrorKind.CONFIGURATION_MISSING, str(exc))

        try:
            source = ImageReference(image_source)
            candidate = await self._loader(source, self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[DETECT] Timed out loading {image_source} after {self.fetch_timeout}s")
            return DetectionResult.failed(ErrorKind.TIMEOUT, f"timed out after {self.fetch_timeout}s")
        except (FetchError, ValueError) as exc:
            logger.warning(f"[DETECT] Failed to fetch {image_source}: {exc}")
            return DetectionResult.failed(ErrorKind.FETCH, str(exc))
        except DecodeError as exc:
            logger.warning(f"[DETECT] Failed to decode {image_source}: {exc}")
            return DetectionResult.failed(ErrorKind.DECODE, str(exc))

        similarity = score(reference, candidate)
        logger.info(f"[DETECT] Similarity {similarity:.3f}, threshold {self.threshold}")
        return DetectionResult(matched=similarity >= self.threshold, similarity=similarity)

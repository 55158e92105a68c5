"""
Decision loop of the sticker filter.

For each inbound message the engine checks, in order: guild enablement, the
author's cooldown, the probability gate, and the presence of images. It then
walks the images in message order, skips the ones that do not look like
stickers, and runs detection on the rest until one matches. A match marks the
author's cooldown and executes the guild's graduated response; at most one
response is sent per message.

The cooldown check and the later cooldown update are not atomic. Two messages
from the same author handled concurrently may both pass the gate; this is
accepted in exchange for not holding a lock across image downloads.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Optional

from stickerguard.configuration.filter_settings import FilterSettings
from stickerguard.datatypes.moderation_datatypes import DetectionResult, Gate, ModerationDecision, StickerMessage
from stickerguard.detection.detection_pipeline import DetectionPipeline, RasterLoader
from stickerguard.detection.sticker_classifier import is_emoticon
from stickerguard.moderation.cooldown_tracker import CooldownTracker
from stickerguard.moderation.guild_policy_resolver import GuildPolicyResolver
from stickerguard.moderation.platform import ModerationPlatform
from stickerguard.moderation.response_executor import ResponseExecutor
from stickerguard.util.logger import get_logger

logger = get_logger("moderation_engine")


class ModerationEngine:
    """Stateful sticker filter bound to one platform adapter.

    Args:
        settings: Filter configuration snapshot.
        platform: Adapter used to reply, delete and mute.
        random_source: Returns a uniform float in [0, 1) for the probability gate.
        clock: Wall-clock source for the cooldown tracker.
        loader: Image loader passed to the detection pipeline.
    """

    def __init__(
        self,
        settings: FilterSettings,
        platform: ModerationPlatform,
        *,
        random_source: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.time,
        loader: Optional[RasterLoader] = None,
    ) -> None:
        self.settings = settings
        self.platform = platform
        self._random = random_source
        self.cooldowns = CooldownTracker(settings.cooldown_seconds, clock=clock)
        self.pipeline = DetectionPipeline(settings.similarity, settings.fetch_timeout, loader=loader)
        self.policies = self._build_resolver(settings)
        self.responder = ResponseExecutor(platform, settings.reply_text, settings.warning_text)

    @staticmethod
    def _build_resolver(settings: FilterSettings) -> GuildPolicyResolver:
        return GuildPolicyResolver(
            settings.guilds,
            default_level=settings.default_level,
            default_mute_seconds=settings.default_mute_seconds,
        )

    # --------------------------
    # Lifecycle
    # --------------------------
    async def initialize(self) -> bool:
        """Load the reference image. Returns True if it is available."""
        loaded = await self.pipeline.load_reference(self.settings.base_images)
        logger.info(
            f"[ENGINE] Initialized for {len(self.settings.guilds)} guild(s); reference {'loaded' if loaded else 'missing'}"
        )
        return loaded

    async def reload(self, settings: Optional[FilterSettings] = None) -> bool:
        """Apply new settings (if given) and reload the reference image.

        Cooldown timestamps survive the reload; only the window length changes.
        """
        if settings is not None:
            self.settings = settings
            self.cooldowns.window_seconds = settings.cooldown_seconds
            self.pipeline.configure(settings.similarity, settings.fetch_timeout)
            self.policies = self._build_resolver(settings)
            self.responder = ResponseExecutor(self.platform, settings.reply_text, settings.warning_text)
            logger.info("[ENGINE] Settings reloaded")
        return await self.initialize()

    # --------------------------
    # Message handling
    # --------------------------
    def should_respond(self) -> bool:
        return self._random() < self.settings.probability

    async def handle_message(self, message: StickerMessage) -> ModerationDecision:
        """Run the gate sequence and, on a match, the graduated response.

        Never raises: detection and response failures are reported in the
        returned decision and logged.
        """
        if not self.policies.is_enabled(message.guild_id):
            return ModerationDecision(Gate.GUILD_DISABLED)

        if self.cooldowns.in_cooldown(message.user_id):
            logger.debug(f"[ENGINE] User {message.user_id} is in cooldown")
            return ModerationDecision(Gate.COOLDOWN)

        if not self.should_respond():
            return ModerationDecision(Gate.PROBABILITY)

        if not message.images:
            return ModerationDecision(Gate.NO_IMAGES)

        detections: list[DetectionResult] = []
        for image in message.images:
            if not is_emoticon(image.src, self.settings.sticker_hosts):
                continue

            detection = await self.pipeline.detect(image)
            detections.append(detection)
            if not detection.matched:
                continue

            self.cooldowns.mark_triggered(message.user_id)
            policy = self.policies.resolve(message.guild_id)
            logger.info(
                f"[ENGINE] Match in message {message.message_id} from user {message.user_id}; "
                f"applying level {int(policy.level)} in guild {message.guild_id}"
            )
            response = await self.responder.execute(message, policy)
            if not response.ok:
                logger.warning(
                    f"[ENGINE] Response for message {message.message_id} completed partially: "
                    f"{[str(action) for action in response.completed]} succeeded, "
                    f"{[str(failure.action) for failure in response.failures]} failed"
                )
            return ModerationDecision(
                Gate.RESPONDED,
                matched_image=image,
                response=response,
                detections=detections,
            )

        return ModerationDecision(Gate.NO_MATCH, detections=detections)

    # --------------------------
    # Introspection
    # --------------------------
    @property
    def reference_loaded(self) -> bool:
        return self.pipeline.has_reference

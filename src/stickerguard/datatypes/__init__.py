"""Value types shared across the detection and moderation packages."""

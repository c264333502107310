"""Sample data generators."""

from visa_intake.generators.profile import ProfileGenerator

__all__ = ["ProfileGenerator"]

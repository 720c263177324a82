"""Studio — design document model for a visual website builder."""

from studio.kernel import Document, Interaction, MutationEngine

__all__ = ["Document", "Interaction", "MutationEngine"]

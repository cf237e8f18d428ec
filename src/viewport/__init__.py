from .tracker import ViewportTracker

__all__ = ["ViewportTracker"]

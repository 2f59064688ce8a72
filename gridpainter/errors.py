class GridPainterError(Exception):
    """Base class for gridpainter errors."""


class SnapshotError(GridPainterError):
    """Snapshot JSON is missing the expected shape; nothing was installed."""

from dataclasses import dataclass, field


@dataclass
class VenueMetrics:
    """Track scraping and reconciliation metrics for each venue."""
    name: str
    row_count: int = 0
    show_count: int = 0
    unchanged: int = 0
    updated: int = 0
    added: int = 0
    removed: int = 0
    written: bool = False
    errors: int = 0
    error_messages: list = field(default_factory=list)
    duration_ms: float = 0.0

    def record_counts(self, counts):
        self.unchanged = counts["unchanged"]
        self.updated = counts["updated"]
        self.added = counts["added"]
        self.removed = counts["removed"]

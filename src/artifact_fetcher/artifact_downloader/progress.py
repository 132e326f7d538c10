"""
Progress tracking for a single phase of a fetch run.
"""

from artifact_fetcher.host import ProgressReporter


class PhaseProgress:
    """
    Forwards the progress of one phase to the host reporter.

    Reported fractions are clamped to [0.0, 1.0] and never go backwards. With
    `throttle` set, an update is forwarded only when the whole percent changes.
    Once cleared, further updates are ignored.
    """

    def __init__(self, reporter: ProgressReporter, title: str, throttle: bool = True):
        self.reporter = reporter
        self.title = title
        self.throttle = throttle
        self.fraction = 0.0
        self._last_percent = -1
        self._cleared = False

    def update(self, fraction: float, message: str) -> None:
        if self._cleared:
            return

        fraction = max(self.fraction, min(max(fraction, 0.0), 1.0))
        percent = int(fraction * 100)
        if self.throttle and percent == self._last_percent:
            return

        self.fraction = fraction
        self._last_percent = percent
        self.reporter.show_progress(self.title, message, fraction)

    def clear(self) -> None:
        if self._cleared:
            return
        self._cleared = True
        self.reporter.clear_progress()

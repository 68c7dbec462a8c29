"""Reduce a time series to the single value reported for a scrape."""

from scaleway_exporter.collectors.model import TimeSeries


def latest_value(series: TimeSeries) -> float | None:
    """Return the value of the most recent point, or None for an empty series.

    Points are not guaranteed to arrive in time order. ``sorted`` is stable, so
    when several points share the newest timestamp the one appearing last in
    the input wins.
    """
    if not series.points:
        return None

    ordered = sorted(series.points, key=lambda point: point.timestamp)
    return float(ordered[-1].value)

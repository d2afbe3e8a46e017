"""Subject lines and HTML bodies for alert and daily-summary emails."""

from html import escape

from aurora_go.schemas.space_weather import SpaceWeatherReading
from aurora_go.schemas.summary import DailySummary, MetricStats

VERDICT_EMOJI: dict[str, str] = {
    "EXCELLENT": "🌟",
    "GOOD": "✨",
    "MODERATE": "🌙",
    "QUIET": "😴",
}


def render_alert(reading: SpaceWeatherReading) -> tuple[str, str]:
    subject = f"🌌 AURORA ALERT: GO Conditions Detected! ({reading.similarity}% storm match)"
    body = f"""
<h1>🌌 Aurora GO Alert!</h1>
<p>Current conditions indicate <strong>GO</strong> for aurora viewing!</p>
<h2>Key Metrics:</h2>
<ul>
  <li><strong>G4 Similarity:</strong> {reading.similarity}%</li>
  <li><strong>Bz Field:</strong> {reading.bz:.1f} nT (southward)</li>
  <li><strong>Solar Wind:</strong> {reading.speed:.0f} km/s</li>
  <li><strong>Dynamic Pressure:</strong> {reading.pressure:.2f} nPa</li>
  <li><strong>Southward Duration:</strong> {reading.bz_south_minutes} min</li>
</ul>
<p>Check your local cloud conditions and head to a dark location!</p>
"""
    return subject, body


def render_daily_summary(summary: DailySummary, timezone_name: str) -> tuple[str, str]:
    emoji = VERDICT_EMOJI.get(summary.verdict, "")
    stats = summary.stats
    subject = f"{emoji} Aurora Daily Summary: {summary.verdict} conditions on {stats.date.isoformat()}"
    peak_at = f" (at {summary.peak_time:%H:%M} UTC)" if summary.peak_time else ""

    rows = "".join(
        _stats_row(label, metric)
        for label, metric in (
            ("Solar Wind Speed (km/s)", stats.speed),
            ("Density (p/cm³)", stats.density),
            ("Bz Field (nT)", stats.bz),
            ("Bt Total Field (nT)", stats.bt),
        )
    )

    body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1>{emoji} Yesterday's Aurora Summary</h1>
  <p><strong>Date:</strong> {stats.date.isoformat()}</p>
  <div style="background: #1a1a2e; color: white; padding: 20px; border-radius: 10px;">
    <h2 style="margin-top: 0; color: #00d4aa;">{summary.verdict}</h2>
    <p>{escape(summary.description)}</p>
  </div>
  <h2>📊 Key Statistics</h2>
  <table style="width: 100%; border-collapse: collapse;">
    <tr><th align="left">Metric</th><th>Min</th><th>Max</th><th>Avg</th></tr>
    {rows}
  </table>
  <h2>🎯 Aurora Metrics</h2>
  <ul>
    <li><strong>Peak G4 Similarity:</strong> {summary.peak_similarity}%{peak_at}</li>
    <li><strong>Good Bz (&lt;-5 nT):</strong> {summary.good_bz_minutes} min (~{summary.good_bz_hours:g} hours)</li>
    <li><strong>Data Points Analyzed:</strong> {stats.data_points}</li>
  </ul>
  <p style="font-size: 13px; color: #666;">Generated daily at 08:00 {escape(timezone_name)}.</p>
</div>
"""
    return subject, body


def _stats_row(label: str, metric: MetricStats | None) -> str:
    if metric is None:
        return f"<tr><td>{label}</td><td colspan=\"3\">no data</td></tr>"
    return (
        f"<tr><td>{label}</td><td align=\"center\">{metric.min:g}</td>"
        f"<td align=\"center\">{metric.max:g}</td><td align=\"center\">{metric.avg:g}</td></tr>"
    )

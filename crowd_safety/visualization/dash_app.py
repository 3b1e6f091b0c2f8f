"""Interactive Dash dashboard for the district crowd-safety monitor.

Run with:
    python crowd_safety/visualization/dash_app.py

Opens at http://127.0.0.1:7860
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd
import plotly.graph_objects as go

import dash
from dash import dcc, html, ctx, dash_table, Input, Output, State, ALL, no_update

# ── Imports from the package ────────────────────────────────────────────
import sys, os

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
)

from crowd_safety.config import Settings, settings, configure_logging
from crowd_safety.core.location import default_registry
from crowd_safety.core.record import LocationRecord, Scenario
from crowd_safety.services.assistant import Assistant, build_assistant, compose_alert
from crowd_safety.simulation.engine import MonitorEngine
from crowd_safety.simulation.generator import SyntheticGenerator
from crowd_safety.simulation.snapshot import ALL_SCENARIOS, Snapshot

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Dark plotly theme
# ═══════════════════════════════════════════════════════════════════════

_LAYOUT_DEFAULTS = dict(
    template="plotly_dark",
    paper_bgcolor="#0a0a0f",
    plot_bgcolor="#0a0a0f",
    font=dict(family="Inter, -apple-system, sans-serif", color="#e8eaed"),
    margin=dict(l=20, r=20, t=50, b=20),
    height=520,
    uirevision="stable",
)

_SCENARIO_COLORS = {
    "Normal": "#34d399",
    "Festival": "#a78bfa",
    "Weekend": "#fbbf24",
    "Emergency": "#f87171",
}

_SEVERITY_COLORS = {"critical": "#f87171", "high": "#fb923c"}


def _risk_color(risk: int) -> str:
    if risk > 75:
        return "#ef4444"
    if risk > 50:
        return "#f97316"
    return "#22c55e"


# ═══════════════════════════════════════════════════════════════════════
#  Engine state
# ═══════════════════════════════════════════════════════════════════════

_engine = MonitorEngine(
    default_registry(),
    SyntheticGenerator(
        seed=settings.RANDOM_SEED,
        clamp_confidence=settings.CLAMP_CONFIDENCE,
        electricity_model=settings.ELECTRICITY_MODEL,
    ),
    history_size=settings.HISTORY_SIZE,
)
_engine.step()

# No generative client ships with the dashboard; a configured handle needs
# a completion callable injected by the deployment.
_assistant = build_assistant(settings.API_KEY)


# ═══════════════════════════════════════════════════════════════════════
#  Figure builders
# ═══════════════════════════════════════════════════════════════════════


def _empty_figure(title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=dict(text=title, font=dict(size=16)), **_LAYOUT_DEFAULTS)
    fig.add_annotation(text="No locations match the current filter",
                       showarrow=False, font=dict(color="#9aa0a6"))
    return fig


def _risk_map_figure(records: list[LocationRecord], size_by: str = "risk_score") -> go.Figure:
    """Lon/lat scatter coloured by risk band and sized by *size_by*."""
    if not records:
        return _empty_figure("Live Risk Heatmap")

    sizes = np.array([float(getattr(r, size_by)) for r in records])
    peak = sizes.max() if sizes.max() > 0 else 1.0
    marker_sizes = 12 + 38 * sizes / peak

    hover_text = [
        f"<b>{r.name}</b><br>"
        f"Scenario: {r.scenario.value}<br>"
        f"Crowd: {r.current_crowd:,} / {r.base_capacity:,}<br>"
        f"Risk: <b>{r.risk_score}</b><br>"
        f"Road: {r.road_condition.value} · Power: {r.electricity_status.value}"
        for r in records
    ]

    fig = go.Figure(
        go.Scatter(
            x=[r.lon for r in records],
            y=[r.lat for r in records],
            mode="markers+text",
            text=[r.name if (r.risk_score > 50 or r.current_crowd > 4000) else "" for r in records],
            textposition="top center",
            textfont=dict(size=10, color="#9aa0a6"),
            marker=dict(
                size=marker_sizes,
                color=[_risk_color(r.risk_score) for r in records],
                opacity=0.8,
                line=dict(width=1, color="rgba(255,255,255,0.3)"),
            ),
            hovertext=hover_text,
            hoverinfo="text",
            showlegend=False,
        )
    )
    fig.update_layout(
        title=dict(text="Live Risk Heatmap", font=dict(size=16)),
        xaxis=dict(title="Longitude", showgrid=False),
        yaxis=dict(title="Latitude", scaleanchor="x", showgrid=False),
        **_LAYOUT_DEFAULTS,
    )
    return fig


def _crowd_bar_figure(snapshot: Snapshot) -> go.Figure:
    top = snapshot.top_congested(10)
    if not top:
        return _empty_figure("Top Congested Locations")
    top = list(reversed(top))
    fig = go.Figure(
        go.Bar(
            x=[r.current_crowd for r in top],
            y=[r.name for r in top],
            orientation="h",
            marker_color="#FF6B35",
            name="People Count",
        )
    )
    fig.update_layout(title=dict(text="Top Congested Locations", font=dict(size=16)),
                      **{**_LAYOUT_DEFAULTS, "height": 420})
    return fig


def _flow_figure(records: list[LocationRecord]) -> go.Figure:
    if not records:
        return _empty_figure("Traffic Flow Dynamics")
    sample = records[:8]
    names = [r.name for r in sample]
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=names, y=[r.inflow_rate for r in sample],
                             fill="tozeroy", name="Inflow", line=dict(color="#4f46e5")))
    fig.add_trace(go.Scatter(x=names, y=[r.outflow_rate for r in sample],
                             fill="tozeroy", name="Outflow", line=dict(color="#059669")))
    fig.update_layout(title=dict(text="Traffic Flow Dynamics (people/min)", font=dict(size=16)),
                      **{**_LAYOUT_DEFAULTS, "height": 420})
    return fig


def _risk_aqi_figure(records: list[LocationRecord]) -> go.Figure:
    """Risk score on the left axis against air quality on a secondary axis."""
    if not records:
        return _empty_figure("Risk Score vs AQI")
    names = [r.name for r in records]
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=names, y=[r.risk_score for r in records],
                             mode="lines+markers", name="Risk Score",
                             line=dict(color="#ff4b4b")))
    fig.add_trace(go.Scatter(x=names, y=[r.aqi for r in records],
                             mode="lines+markers", name="AQI", yaxis="y2",
                             line=dict(color="#00d4ff", dash="dot")))
    fig.update_layout(
        title=dict(text="Risk Score vs AQI", font=dict(size=16)),
        yaxis=dict(title="Risk Score", range=[0, 100]),
        yaxis2=dict(title="AQI", overlaying="y", side="right", showgrid=False),
        **{**_LAYOUT_DEFAULTS, "height": 420},
    )
    return fig


def _risk_trend_figure(timeline: pd.DataFrame, names: list[str] | None = None) -> go.Figure:
    """Risk score per location over the retained refresh rounds."""
    if timeline.empty:
        return _empty_figure("Risk Trend")
    columns = [c for c in timeline.columns if names is None or c in names]
    fig = go.Figure()
    for name in columns:
        fig.add_trace(go.Scatter(x=list(timeline.index), y=timeline[name],
                                 mode="lines", name=name, line=dict(width=1.5)))
    fig.update_layout(
        title=dict(text="Risk Trend", font=dict(size=16)),
        xaxis=dict(title="Round"),
        yaxis=dict(title="Risk Score (0-100)", range=[0, 100]),
        **{**_LAYOUT_DEFAULTS, "height": 420},
    )
    return fig


def _scenario_mix_figure(snapshot: Snapshot) -> go.Figure:
    counts = snapshot.summary()["scenarios"]
    fig = go.Figure(
        go.Pie(
            labels=list(counts),
            values=list(counts.values()),
            hole=0.5,
            marker=dict(colors=[_SCENARIO_COLORS[s] for s in counts]),
        )
    )
    fig.update_layout(title=dict(text="Scenario Mix", font=dict(size=16)),
                      **{**_LAYOUT_DEFAULTS, "height": 420})
    return fig


# ═══════════════════════════════════════════════════════════════════════
#  Panel builders
# ═══════════════════════════════════════════════════════════════════════


def _metric(label: str, value: str) -> html.Div:
    return html.Div([
        html.Span(label, className="metric-label"),
        html.Span(value, className="metric-value"),
    ], className="metric")


def _place_card(record: LocationRecord, tone: str) -> html.Div:
    return html.Div([
        html.B(record.name),
        html.Div(f"Risk {record.risk_score} · Crowd {record.current_crowd:,} · "
                 f"Road {record.road_condition.value}", className="card-sub"),
    ], className=f"place-card {tone}")


def _safe_routes_panel(snapshot: Snapshot) -> html.Div:
    safe = snapshot.safe_places()
    avoid = snapshot.avoid_places()
    return html.Div([
        html.Div([
            html.H3("Recommended Zones"),
            *([_place_card(r, "safe") for r in safe]
              or [html.P("No zone currently meets the safe-route criteria.")]),
        ], className="panel-column"),
        html.Div([
            html.H3("Avoid"),
            *([_place_card(r, "avoid") for r in avoid]
              or [html.P("No congested or blocked zones.")]),
        ], className="panel-column"),
    ], className="two-column")


def _alerts_panel(snapshot: Snapshot, threshold: int, alerts: list[dict[str, Any]]) -> html.Div:
    candidates = snapshot.high_risk(threshold)
    feed = [
        html.Div([
            html.Span(a["severity"].upper(), className="severity",
                      style={"color": _SEVERITY_COLORS.get(a["severity"], "#9aa0a6")}),
            html.B(a["location_name"]),
            html.Span(a["timestamp"], className="card-sub"),
            html.P(a["message"]),
        ], className="alert-card")
        for a in alerts
    ]
    return html.Div([
        html.Div([
            html.H3(f"High-Risk Locations (> {threshold})"),
            html.Button("Generate Hindi Alerts", id="btn-alerts", className="primary", n_clicks=0),
            *([_place_card(r, "avoid") for r in candidates]
              or [html.P("No location above the risk threshold.")]),
        ], className="panel-column"),
        html.Div([html.H3("Broadcast Feed"), *(feed or [html.P("No alerts generated yet.")])],
                 className="panel-column"),
    ], className="two-column")


def _analytics_panel(snapshot: Snapshot) -> html.Div:
    names = [r.name for r in snapshot]
    return html.Div([
        dcc.Graph(figure=_crowd_bar_figure(snapshot)),
        dcc.Graph(figure=_flow_figure(list(snapshot))),
        dcc.Graph(figure=_risk_aqi_figure(list(snapshot))),
        dcc.Graph(figure=_risk_trend_figure(_engine.timeline("risk_score"), names)),
        dcc.Graph(figure=_scenario_mix_figure(snapshot)),
    ], className="chart-grid")


def _data_panel(snapshot: Snapshot) -> dash_table.DataTable:
    frame = snapshot.to_frame()
    return dash_table.DataTable(
        data=frame.to_dict("records"),
        columns=[{"name": c.replace("_", " ").title(), "id": c} for c in frame.columns],
        page_size=20,
        sort_action="native",
        style_table={"overflowX": "auto"},
        style_header={"backgroundColor": "#19192d", "fontWeight": "bold"},
        style_cell={"backgroundColor": "#0f0f19", "color": "#e8eaed",
                    "border": "1px solid #222", "fontSize": "0.85em"},
        style_data_conditional=[
            {"if": {"filter_query": "{risk_score} > 75", "column_id": "risk_score"},
             "color": "#f87171", "fontWeight": "bold"},
        ],
    )


def _review_panel(snapshot: Snapshot, threshold: float, reviewed: list[str]) -> html.Div:
    pending = snapshot.needs_review(threshold, reviewed)
    if not pending:
        return html.Div([
            html.H3("All Clear!"),
            html.P("No predictions require manual review at this time."),
        ], className="all-clear")
    return html.Div([
        html.Div([
            html.B(r.name),
            html.Div(f"Confidence {r.confidence:.0%} · Risk {r.risk_score}/100 · "
                     f"{r.scenario.value}", className="card-sub"),
            html.Button("Approve", id={"type": "review-btn", "index": r.id}, n_clicks=0),
        ], className="place-card review")
        for r in pending
    ], className="card-list")


# ═══════════════════════════════════════════════════════════════════════
#  App
# ═══════════════════════════════════════════════════════════════════════

app = dash.Dash(
    __name__,
    title="Varanasi Crowd Command",
    suppress_callback_exceptions=True,
)

app.index_string = """<!DOCTYPE html>
<html>
<head>
    {%metas%}
    <title>{%title%}</title>
    {%favicon%}
    {%css%}
    <style>
        :root {
            --bg-base: #0a0a0f;
            --bg-surface: rgba(15, 15, 25, 0.8);
            --glass-border: rgba(255, 255, 255, 0.08);
            --text-primary: #e8eaed;
            --text-secondary: #9aa0a6;
            --accent: #FF6B35;
            --accent-green: #34d399;
            --accent-red: #f87171;
            --radius-md: 12px;
        }
        body { background: var(--bg-base); color: var(--text-primary);
               font-family: Inter, -apple-system, sans-serif; margin: 0; }
        .shell { display: flex; min-height: 100vh; }
        .sidebar { width: 280px; padding: 20px; background: var(--bg-surface);
                   border-right: 1px solid var(--glass-border); }
        .main { flex: 1; padding: 20px 28px; overflow: auto; }
        .metric { display: inline-block; margin-right: 24px; }
        .metric-label { display: block; color: var(--text-secondary); font-size: 0.85em; }
        .metric-value { font-size: 1.3em; font-weight: bold; }
        .badge-missing { color: var(--accent-red); border: 1px solid var(--accent-red);
                         border-radius: 999px; padding: 2px 10px; font-size: 0.8em; }
        .two-column, .chart-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; }
        .place-card, .alert-card { border: 1px solid var(--glass-border);
                                   border-radius: var(--radius-md); padding: 10px 14px; margin: 8px 0; }
        .place-card.safe { border-left: 4px solid var(--accent-green); }
        .place-card.avoid { border-left: 4px solid var(--accent-red); }
        .place-card.review { border-left: 4px solid #fbbf24; }
        .card-sub { color: var(--text-secondary); font-size: 0.85em; margin-left: 6px; }
        .severity { font-weight: bold; margin-right: 8px; }
        button.primary { background: var(--accent); color: white; border: none;
                         border-radius: 8px; padding: 6px 14px; cursor: pointer; }
    </style>
</head>
<body>
    {%app_entry%}
    <footer>
        {%config%}
        {%scripts%}
        {%renderer%}
    </footer>
</body>
</html>"""

_TABS = [
    ("map", "Live Risk Map"),
    ("safe-routes", "Safe Routes"),
    ("alerts", "Hindi Alerts"),
    ("analytics", "Analytics"),
    ("data", "Sensor Data"),
    ("review", "Review Queue"),
]


def _sidebar():
    return html.Div([
        html.H2("Varanasi Crowd Command"),

        html.Label("Scenario"),
        dcc.Dropdown(
            id="scenario-filter",
            options=[{"label": s, "value": s}
                     for s in [ALL_SCENARIOS] + [sc.value for sc in Scenario]],
            value=ALL_SCENARIOS,
            clearable=False,
            style={"color": "#0a0a0f"},
        ),
        html.Label("Risk Threshold"),
        dcc.Slider(id="risk-slider", min=0, max=100, step=5,
                   value=settings.RISK_THRESHOLD,
                   marks={0: "0", 50: "50", 100: "100"}),
        html.Label("Review Below Confidence"),
        dcc.Slider(id="confidence-slider", min=0.5, max=1.0, step=0.01,
                   value=settings.CONFIDENCE_THRESHOLD,
                   marks={0.5: "50%", 0.75: "75%", 1.0: "100%"}),
        html.Label("Map Bubble Size"),
        dcc.RadioItems(
            id="map-size",
            options=[{"label": " Risk", "value": "risk_score"},
                     {"label": " Inflow", "value": "inflow_rate"}],
            value="risk_score",
            inline=True,
        ),

        html.Hr(),
        html.Label("Simulate Scenario"),
        dcc.Dropdown(
            id="force-scenario",
            options=[{"label": sc.value, "value": sc.value} for sc in Scenario],
            value=Scenario.FESTIVAL.value,
            clearable=False,
            style={"color": "#0a0a0f"},
        ),
        html.Button("Simulate", id="btn-simulate", className="primary", n_clicks=0),
        html.Button("Refresh Now", id="btn-refresh", n_clicks=0),
        html.Div(id="sidebar-metrics"),
    ], className="sidebar")


def _assistant_badge(cfg: Settings, assistant: Assistant) -> list[html.Span]:
    if assistant.configured:
        return []
    if not cfg.assistant_configured:
        return [html.Span("API Key Missing", className="badge-missing")]
    return [html.Span(f"AI Client Unavailable: {assistant.reason}", className="badge-missing")]


app.layout = html.Div([
    _sidebar(),
    html.Div([
        html.Div([
            html.H1(id="page-title"),
            html.P(id="page-subtitle"),
            *_assistant_badge(settings, _assistant),
        ]),
        dcc.Tabs(id="tabs", value="map",
                 children=[dcc.Tab(label=label, value=key) for key, label in _TABS]),
        html.Div(id="tab-content"),
    ], className="main"),
    dcc.Interval(id="refresh-interval", interval=settings.refresh_interval_ms, n_intervals=0),
    dcc.Store(id="snapshot-seq", data=_engine.current().sequence),
    dcc.Store(id="alerts-store", data=[]),
    dcc.Store(id="reviewed-store", data=[]),
], className="shell")


# ═══════════════════════════════════════════════════════════════════════
#  Callbacks
# ═══════════════════════════════════════════════════════════════════════

# ── CB1: Refresh -> regenerate the snapshot ──────────────────────────

def _refresh_scenario(triggered_id, forced: str | None) -> str | None:
    """Only the Simulate button forces a scenario; ticks and Refresh Now draw freely."""
    return forced if triggered_id == "btn-simulate" else None


@app.callback(
    Output("snapshot-seq", "data"),
    Input("refresh-interval", "n_intervals"),
    Input("btn-refresh", "n_clicks"),
    Input("btn-simulate", "n_clicks"),
    State("force-scenario", "value"),
    prevent_initial_call=True,
)
def refresh_snapshot(_ticks, _refresh_clicks, _simulate_clicks, forced):
    scenario = _refresh_scenario(ctx.triggered_id, forced)
    if scenario is not None:
        logger.info("Simulating %s scenario across all locations", scenario)
    return _engine.step(scenario=scenario).sequence


# ── CB2: Render the active tab ───────────────────────────────────────

@app.callback(
    Output("tab-content", "children"),
    Output("page-title", "children"),
    Output("page-subtitle", "children"),
    Output("sidebar-metrics", "children"),
    Input("snapshot-seq", "data"),
    Input("tabs", "value"),
    Input("scenario-filter", "value"),
    Input("risk-slider", "value"),
    Input("confidence-slider", "value"),
    Input("map-size", "value"),
    Input("alerts-store", "data"),
    Input("reviewed-store", "data"),
)
def render_tab(_seq, tab, scenario, risk_threshold, confidence_threshold,
               size_by, alerts, reviewed):
    full = _engine.current()
    view = full.by_scenario(scenario or ALL_SCENARIOS)
    risk_threshold = settings.RISK_THRESHOLD if risk_threshold is None else risk_threshold

    if tab == "safe-routes":
        content = _safe_routes_panel(view)
    elif tab == "alerts":
        content = _alerts_panel(view, risk_threshold, alerts or [])
    elif tab == "analytics":
        content = _analytics_panel(view)
    elif tab == "data":
        content = _data_panel(view)
    elif tab == "review":
        content = _review_panel(view, confidence_threshold, reviewed or [])
    else:
        content = dcc.Graph(figure=_risk_map_figure(list(view), size_by or "risk_score"))

    title = dict(_TABS).get(tab, "Live Risk Map")
    subtitle = (f"Monitoring {len(view)} active zones • "
                f"Last Sync: {full.generated_at.strftime('%H:%M:%S')}")
    summary = full.summary(risk_threshold)
    metrics = html.Div([
        _metric("High-Risk Zones", str(summary["high_risk"])),
        _metric("Total Crowd", f"{summary['total_crowd']:,}"),
        _metric("Mean Risk", f"{summary['mean_risk']:.1f}"),
    ])
    return content, title, subtitle, metrics


# ── CB3: Alert generation ────────────────────────────────────────────

ALERT_BATCH_SIZE = 5


def _fresh_alerts(snapshot: Snapshot, assistant: Assistant, threshold: int,
                  existing: list[dict[str, Any]] | None,
                  now: datetime | None = None) -> list[dict[str, Any]]:
    """Compose alerts for the riskiest locations and put them ahead of *existing*."""
    now = now or datetime.now()
    fresh = [
        asdict(compose_alert(r, assistant, emergency=r.scenario is Scenario.EMERGENCY, now=now))
        for r in snapshot.high_risk(threshold)[:ALERT_BATCH_SIZE]
    ]
    return fresh + list(existing or [])


@app.callback(
    Output("alerts-store", "data"),
    Input("btn-alerts", "n_clicks"),
    State("scenario-filter", "value"),
    State("risk-slider", "value"),
    State("alerts-store", "data"),
    prevent_initial_call=True,
)
def generate_alerts(n_clicks, scenario, risk_threshold, alerts):
    if not n_clicks:
        return no_update
    view = _engine.current().by_scenario(scenario or ALL_SCENARIOS)
    if risk_threshold is None:
        risk_threshold = settings.RISK_THRESHOLD
    return _fresh_alerts(view, _assistant, risk_threshold, alerts)


# ── CB4: Human-in-the-loop review ────────────────────────────────────

def _add_reviewed(clicks, triggered_id, reviewed: list[str] | None):
    if not clicks or not any(clicks) or not isinstance(triggered_id, dict):
        return no_update
    record_id = triggered_id["index"]
    reviewed = list(reviewed or [])
    if record_id not in reviewed:
        reviewed.append(record_id)
    return reviewed


@app.callback(
    Output("reviewed-store", "data"),
    Input({"type": "review-btn", "index": ALL}, "n_clicks"),
    State("reviewed-store", "data"),
    prevent_initial_call=True,
)
def mark_reviewed(clicks, reviewed):
    return _add_reviewed(clicks, ctx.triggered_id, reviewed)


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    configure_logging()
    app.run(host=settings.HOST, debug=settings.DEBUG, port=settings.PORT)

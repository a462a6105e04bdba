from __future__ import annotations

import time

import plotly.graph_objects as go
import streamlit as st

from slosim.analysis import (
    burn_rate_status,
    error_budget_status,
    fast_burn_windows,
    format_burn_rate,
    format_pct,
)
from slosim.config import SimulationConfig, SliMetricConfig, SpeedMultiplier, default_config, validate_config
from slosim.config import editing
from slosim.engine import ManualTicker, SimulationEngine
from slosim.metrics import EngineStatus, MetricSnapshot, SimulationSnapshot, series_frame, snapshot_frame

st.set_page_config(page_title="SLO Burn Simulator", layout="wide")

STATUS_COLORS = {
    "green": "#2e7d32",
    "yellow": "#f9a825",
    "red": "#c62828",
    "exhausted": "#6a1b9a",
    "na": "#757575",
}
BURN_WINDOW_PRESETS = {"Short (5s)": 5, "Medium (10s)": 10, "Long (30s)": 30}
CUSTOM_BURN_WINDOW = "Custom"
EDITOR_KEY_PREFIXES = ("pct-", "lat-", "name-", "thr-", "win-", "slo-", "burn-window")


def _session() -> tuple[SimulationEngine, ManualTicker]:
    if "engine" not in st.session_state:
        ticker = ManualTicker()
        st.session_state.ticker = ticker
        st.session_state.engine = SimulationEngine(default_config(), ticker=ticker)
        st.session_state.last_wall = time.monotonic()
    return st.session_state.engine, st.session_state.ticker


def _apply(engine: SimulationEngine, config: SimulationConfig) -> None:
    if config == engine.config:
        return
    engine.update_config(config)
    # Widgets re-read their values from the new config on the next run.
    for key in [k for k in st.session_state if str(k).startswith(EDITOR_KEY_PREFIXES)]:
        del st.session_state[key]
    st.rerun()


def _render_header() -> None:
    st.title("SLO Burn Simulator")
    st.caption("Watch SLIs, error budgets and burn rates evolve for a synthetic service.")


def _render_traffic(engine: SimulationEngine) -> None:
    config = engine.config
    with st.sidebar:
        st.header("Traffic")
        rps = st.slider("Arrival rate (rps)", 1, 1000, int(config.rps))
        speed = st.selectbox(
            "Speed",
            [s.value for s in SpeedMultiplier],
            index=[s.value for s in SpeedMultiplier].index(int(config.speed_multiplier)),
            format_func=lambda v: f"{v}x",
        )
    config = editing.set_speed(editing.set_rps(config, rps), speed)
    _apply(engine, config)


def _render_buckets(engine: SimulationEngine) -> None:
    config = engine.config
    with st.sidebar:
        st.header("Latency distribution")
        for bucket in config.buckets:
            col1, col2, col3 = st.columns([3, 2, 1])
            pct = col1.slider("Traffic %", 0, 100, int(bucket.percentage), key=f"pct-{bucket.id}")
            latency = col2.number_input(
                "Latency (ms)", min_value=1, max_value=10_000, value=int(bucket.latency_ms), key=f"lat-{bucket.id}"
            )
            if pct != bucket.percentage:
                _apply(engine, editing.set_bucket_percentage(config, bucket.id, pct))
            if latency != bucket.latency_ms:
                _apply(engine, editing.set_bucket_latency(config, bucket.id, latency))
            if col3.button("✕", key=f"rm-{bucket.id}", disabled=len(config.buckets) <= 1):
                _apply(engine, editing.remove_bucket(config, bucket.id))
        if st.button("Add bucket"):
            _apply(engine, editing.add_bucket(config))


def _render_metric_editor(engine: SimulationEngine, metric: SliMetricConfig, count: int) -> None:
    config = engine.config
    with st.sidebar.expander(metric.name):
        name = st.text_input("Name", metric.name, key=f"name-{metric.id}")
        threshold = st.number_input(
            "Threshold (ms)", 1, 5000, int(metric.threshold_ms), key=f"thr-{metric.id}"
        )
        window = st.number_input("SLI window (s)", 10, 3600, int(metric.window_sec), key=f"win-{metric.id}")
        target = st.number_input(
            "SLO target (%)", 90.0, 99.99, float(metric.slo_target_pct), step=0.1, key=f"slo-{metric.id}"
        )
        up, down, remove = st.columns(3)
        if up.button("Up", key=f"up-{metric.id}"):
            _apply(engine, editing.move_metric(config, metric.id, -1))
        if down.button("Down", key=f"down-{metric.id}"):
            _apply(engine, editing.move_metric(config, metric.id, 1))
        if remove.button("Remove", key=f"rmm-{metric.id}", disabled=count <= 1):
            _apply(engine, editing.remove_metric(config, metric.id))
    _apply(
        engine,
        editing.update_metric(
            config,
            metric.id,
            name=name,
            threshold_ms=threshold,
            window_sec=int(window),
            slo_target_pct=target,
        ),
    )


def _render_metrics_editor(engine: SimulationEngine) -> None:
    config = engine.config
    with st.sidebar:
        st.header("SLI metrics")
        windows = {m.burn_window_sec for m in config.metrics}
        current = next((k for k, v in BURN_WINDOW_PRESETS.items() if windows == {v}), CUSTOM_BURN_WINDOW)
        labels = [*BURN_WINDOW_PRESETS, CUSTOM_BURN_WINDOW]
        choice = st.selectbox("Burn window", labels, index=labels.index(current), key="burn-window")
        if choice != current and choice in BURN_WINDOW_PRESETS:
            _apply(engine, editing.set_burn_window_for_all(config, BURN_WINDOW_PRESETS[choice]))
        if st.button("Add metric"):
            _apply(engine, editing.add_metric(config))
    for metric in config.metrics:
        _render_metric_editor(engine, metric, len(config.metrics))


def _render_controls(engine: SimulationEngine) -> None:
    errors = validate_config(engine.config).errors
    for error in errors:
        st.sidebar.error(error)
    col1, col2, col3 = st.columns(3)
    if col1.button("Start", disabled=bool(errors) or engine.status is EngineStatus.RUNNING):
        engine.start()
        st.session_state.last_wall = time.monotonic()
    if col2.button("Pause", disabled=engine.status is not EngineStatus.RUNNING):
        engine.pause()
    if col3.button("Reset"):
        engine.reset()


def _metric_card(metric: SliMetricConfig, snap: MetricSnapshot) -> None:
    budget_status = error_budget_status(snap.error_budget_remaining_pct).value
    burn_status = burn_rate_status(snap.burn_rate).value
    st.markdown(f"**{metric.name}**")
    st.markdown(
        f"<span style='color:{STATUS_COLORS[budget_status]}'>Budget {budget_status.upper()}</span> · "
        f"<span style='color:{STATUS_COLORS[burn_status]}'>Burn {burn_status.upper()}</span>",
        unsafe_allow_html=True,
    )
    c1, c2, c3 = st.columns(3)
    c1.metric("SLI", format_pct(snap.sli_pct), help=f"{snap.good_count}/{snap.total_count} good")
    c2.metric("Budget left", format_pct(snap.error_budget_remaining_pct))
    c3.metric(
        "Burn rate",
        format_burn_rate(snap.burn_rate),
        help=f"{snap.burn_good_count}/{snap.burn_total_count} good in {metric.burn_window_sec}s",
    )


def _plot_series(metric: SliMetricConfig, snapshot: SimulationSnapshot) -> go.Figure:
    frame = series_frame(snapshot.chart_series.get(metric.id, []))
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=frame["sim_time_sec"], y=frame["sli_pct"], name="SLI %", mode="lines"))
    fig.add_trace(
        go.Scatter(
            x=frame["sim_time_sec"],
            y=frame["error_budget_remaining_pct"],
            name="Budget left %",
            mode="lines",
        )
    )
    fig.add_trace(
        go.Scatter(x=frame["sim_time_sec"], y=frame["burn_rate"], name="Burn rate", mode="lines", yaxis="y2")
    )
    fig.add_hline(y=metric.slo_target_pct, line_dash="dot", annotation_text="SLO")
    for signal in fast_burn_windows(frame):
        fig.add_vrect(x0=signal.start_sec, x1=signal.end_sec, fillcolor="red", opacity=0.1, line_width=0)
    fig.update_layout(
        height=300,
        margin=dict(l=10, r=10, t=30, b=10),
        yaxis=dict(title="%", range=[0, 100]),
        yaxis2=dict(title="burn", overlaying="y", side="right", rangemode="tozero"),
        xaxis=dict(title="simulated seconds"),
    )
    return fig


def _render_dashboard(engine: SimulationEngine) -> None:
    snapshot = engine.get_snapshot()
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Simulated time", f"{snapshot.sim_time_ms / 1000:.1f}s")
    c2.metric("Started", snapshot.total_started)
    c3.metric("Completed", snapshot.total_completed)
    c4.metric("In flight", snapshot.in_flight)
    with st.expander("Window counts"):
        names = {m.id: m.name for m in engine.config.metrics}
        st.dataframe(snapshot_frame(snapshot, names), use_container_width=True)
    for metric in engine.config.metrics:
        snap = snapshot.metrics.get(metric.id)
        if snap is None:
            continue
        left, right = st.columns([1, 2])
        with left:
            _metric_card(metric, snap)
        with right:
            st.plotly_chart(_plot_series(metric, snapshot), use_container_width=True, key=f"chart-{metric.id}")


def _advance(engine: SimulationEngine, ticker: ManualTicker) -> None:
    if engine.status is not EngineStatus.RUNNING:
        return
    now = time.monotonic()
    elapsed_ms = (now - st.session_state.last_wall) * 1000
    due = int(elapsed_ms // engine.config.tick_ms)
    if due > 0:
        ticker.fire(due)
        st.session_state.last_wall += due * engine.config.tick_ms / 1000


def main() -> None:
    engine, ticker = _session()
    _render_header()
    _render_traffic(engine)
    _render_buckets(engine)
    _render_metrics_editor(engine)
    _render_controls(engine)
    _advance(engine, ticker)
    _render_dashboard(engine)
    if engine.status is EngineStatus.RUNNING:
        time.sleep(engine.config.tick_ms / 1000)
        st.rerun()


if __name__ == "__main__":
    main()

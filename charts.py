# charts.py – figures Plotly
import pandas as pd
import plotly.graph_objects as go

_LAYOUT = dict(
    paper_bgcolor="#11162d",
    plot_bgcolor="#11162d",
    font=dict(color="#e8eefc", size=13, family="Inter, 'Segoe UI', sans-serif"),
)


def feature_usage_frame(stats):
    cols = [
        "feature_name",
        "feature_category",
        "total_visits",
        "unique_users",
        "unique_organizations",
        "visits_last_24h",
        "visits_last_7d",
        "visits_last_30d",
        "last_used_at",
    ]
    df = pd.DataFrame(list(stats or []))
    for col in cols:
        if col not in df.columns:
            df[col] = None
    df = df[cols]
    for col in cols[2:8]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).astype(int)
    return df.sort_values("total_visits", ascending=False).reset_index(drop=True)


def category_totals(df):
    if df.empty:
        return pd.DataFrame(columns=["feature_category", "total_visits"])
    return (
        df.groupby("feature_category", dropna=False)["total_visits"]
        .sum()
        .reset_index()
        .sort_values("total_visits", ascending=False)
        .reset_index(drop=True)
    )


def feature_usage_bar(df):
    fig = go.Figure()
    fig.add_bar(
        x=df["total_visits"],
        y=df["feature_name"],
        orientation="h",
        name="Total visits",
        marker_color="#4b6ff4",
        customdata=df[["feature_category", "unique_users"]].values if not df.empty else None,
        hovertemplate="%{y}<br>%{customdata[0]}<br>Visits: %{x}<br>Users: %{customdata[1]}<extra></extra>",
    )
    fig.add_bar(
        x=df["visits_last_7d"],
        y=df["feature_name"],
        orientation="h",
        name="Last 7 days",
        marker_color="#2fc192",
        opacity=0.8,
        hovertemplate="%{y}<br>Last 7 days: %{x}<extra></extra>",
    )
    fig.update_layout(
        height=max(260, 28 * len(df) + 80),
        barmode="overlay",
        margin=dict(l=12, r=20, t=10, b=30),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        **_LAYOUT,
    )
    fig.update_yaxes(autorange="reversed", tickfont=dict(size=12))
    fig.update_xaxes(gridcolor="rgba(255,255,255,0.08)", rangemode="tozero")
    return fig


def storage_gauge(title: str, value: float):
    v = max(0, min(100, float(value or 0)))
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=v,
        number={"font": {"size": 32}, "suffix": "%"},
        title={"text": title, "font": {"size": 14}},
        gauge={
            "axis": {"range": [0, 100], "tickwidth": 1},
            "bar": {"color": "#f97070" if v >= 90 else "#2fc192", "thickness": 0.35},
            "bgcolor": "rgba(255,255,255,0.02)",
            "borderwidth": 0,
            "steps": [
                {"range": [0, 70], "color": "rgba(47,193,146,.12)"},
                {"range": [70, 90], "color": "rgba(233,199,95,.12)"},
                {"range": [90, 100], "color": "rgba(249,112,112,.15)"},
            ],
            "shape": "angular",
        },
    ))
    fig.update_layout(height=220, margin=dict(l=10, r=10, t=30, b=10), **_LAYOUT)
    return fig

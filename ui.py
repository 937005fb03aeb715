# ui.py - theming + reusable UI kit
import html

import streamlit as st

from ui_state import use_sparkle

def inject_theme():
    css = """
    <style>
      :root{
        --bg:#0d1330;
        --card:#161d3a;
        --border:rgba(255,255,255,0.08);
        --text:#e8eefc;
        --muted:#9da8c6;
        --accent:#e9c75f;
        --accent-2:#2fc192;
        --accent-3:#4b6ff4;
        --warn:#f5a524;
        --danger:#f97070;
        --radius:14px;
        --shadow:0 16px 40px rgba(0,0,0,0.45);
      }
      @import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;600;700&family=Space+Grotesk:wght@500;600;700&display=swap');

      body, [data-testid="stAppViewContainer"], .main{
        background:var(--bg);
        color:var(--text);
        font-family: 'DM Sans','Segoe UI',sans-serif;
        font-size:15px;
      }
      .block-container{ padding:18px 24px 40px 24px; }
      header,[data-testid="stToolbar"]{ background:transparent !important; }
      [data-testid="stSidebar"]{ background:var(--bg) !important; }

      .card{
        position: relative;
        background: linear-gradient(180deg, rgba(22,29,58,.96), rgba(13,19,48,.92));
        border:1px solid var(--border);
        border-radius:var(--radius);
        box-shadow:var(--shadow);
        padding:10px 12px;
        margin-bottom:10px;
        overflow: hidden;
      }
      .title{ font-weight:700; font-family:'Space Grotesk','DM Sans',sans-serif; }
      .muted{ color:var(--muted); font-size:13px; }
      .stat .val{ font-size:26px; font-weight:700; }
      .badge{
        display:inline-flex; align-items:center; gap:6px;
        padding:2px 10px; border-radius:999px;
        border:1px solid var(--border); font-size:12px; color:var(--text);
      }
      .chip-row{ display:flex; flex-wrap:wrap; gap:10px; margin:6px 0 12px 0; }
      .chip{ background:var(--card); border:1px solid var(--border); border-radius:12px; padding:8px 12px; min-width:120px; }
      .chip .val{ font-size:20px; font-weight:700; }
      .chip .lab{ color:var(--muted); font-size:12px; }
      .chip .sub{ color:var(--muted); font-size:11px; }

      .storage-bar{ height:8px; border-radius:999px; background:rgba(255,255,255,0.08); overflow:hidden; }
      .storage-bar > div{ height:100%; background:var(--accent-2); }
      .storage-bar.high > div{ background:var(--danger); }

      .task-done{ color:var(--muted); text-decoration:line-through; }

      .sparkle{ font-size:28px; text-align:center; animation: sparkle-pop 1.2s ease-out forwards; }
      @keyframes sparkle-pop{
        0%{ transform:scale(.4); opacity:0; }
        40%{ transform:scale(1.2); opacity:1; }
        100%{ transform:scale(1); opacity:0; }
      }

      .crash-panel{ border:1px solid var(--danger); border-radius:var(--radius); padding:16px; margin:16px 0; }
      .crash-title{ font-size:18px; font-weight:700; color:var(--danger); margin-bottom:8px; }
      .crash-error{ white-space:pre-wrap; color:var(--text); background:rgba(0,0,0,.25); padding:10px; border-radius:8px; }

      .st-key-auth_card{ border:1px solid var(--border); border-radius:var(--radius); padding:10px; }
      .auth-title{ font-size:12px; color:var(--muted); text-transform:uppercase; letter-spacing:.08em; }
      .auth-row{ display:flex; gap:10px; align-items:center; margin-top:6px; }
      .auth-avatar{ width:32px; height:32px; border-radius:999px; display:flex; align-items:center; justify-content:center; background:var(--accent-3); font-weight:700; }
      .auth-email{ font-size:13px; }
      .auth-org{ font-size:12px; color:var(--muted); }
    </style>
    """
    st.markdown(css, unsafe_allow_html=True)


def page_header(title:str, right=None):
    st.markdown(f"""
      <div class="card">
        <div style="display:flex; align-items:center; justify-content:space-between; gap:12px;">
          <div class="title" style="font-size:22px;">{html.escape(title)}</div>
          <div class="toolbar">{right or ""}</div>
        </div>
      </div>
    """, unsafe_allow_html=True)

def badge(text:str, color:str="accent"):
    dot = {"accent":"var(--accent)","success":"var(--accent-2)",
           "warn":"var(--warn)","danger":"var(--danger)","muted":"var(--muted)"}[color]
    return f'<span class="badge"><span style="width:8px;height:8px;border-radius:999px;background:{dot};display:inline-block"></span>{html.escape(text)}</span>'

def stat(label:str, value:str, sub:str=""):
    st.markdown(f"""
      <div class="card">
        <div class="stat"><div class="val">{html.escape(value)}</div><div class="muted">{html.escape(label)}</div></div>
        <div class="muted" style="margin-top:6px">{html.escape(sub)}</div>
      </div>
    """, unsafe_allow_html=True)

def kpi_chip(label:str, value:str, sub:str=""):
    return f"""
      <div class="chip">
        <div class="val">{html.escape(value)}</div>
        <div class="lab">{html.escape(label)}</div>
        <div class="sub">{html.escape(sub)}</div>
      </div>
    """

def kpi_chip_row(items):
    # items: list of dicts {label, value, sub}
    row = '<div class="chip-row">'
    for it in items:
        row += kpi_chip(it["label"], str(it["value"]), it.get("sub",""))
    row += "</div>"
    st.markdown(row, unsafe_allow_html=True)

def storage_bar(label:str, percent:float, detail:str=""):
    pct = max(0.0, min(100.0, float(percent or 0)))
    level = " high" if pct >= 90 else ""
    st.markdown(f"""
      <div class="card">
        <div style="display:flex; justify-content:space-between;">
          <div class="title" style="font-size:15px">{html.escape(label)}</div>
          <div class="muted">{pct:.0f}%</div>
        </div>
        <div class="storage-bar{level}" style="margin-top:8px"><div style="width:{pct:.1f}%"></div></div>
        <div class="muted" style="margin-top:6px">{html.escape(detail)}</div>
      </div>
    """, unsafe_allow_html=True)

def render_sparkle(container:str|None=None):
    """Play the completion sparkle once if it was triggered for `container`."""
    sparkle = use_sparkle()
    if not sparkle.is_active:
        return
    if container is not None and sparkle.container not in (None, container):
        return
    st.markdown('<div class="sparkle">✨ ✨ ✨</div>', unsafe_allow_html=True)
    sparkle.complete()

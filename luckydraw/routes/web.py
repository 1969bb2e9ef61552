"""Web page routes."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, render_template


web_bp = Blueprint("web", __name__)


@web_bp.get("/")
def index():
    return render_template(
        "index.html",
        reveal_delay_ms=int(current_app.config.get("REVEAL_DELAY_MS", 1000)),
    )


@web_bp.get("/favicon.ico")
def favicon() -> Response:
    svg = """<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 64 64'>
    <defs>
        <linearGradient id='g' x1='0' y1='0' x2='1' y2='1'>
            <stop offset='0%' stop-color='#667eea'/>
            <stop offset='100%' stop-color='#764ba2'/>
        </linearGradient>
    </defs>
    <rect x='6' y='6' width='52' height='52' rx='12' fill='url(#g)'/>
    <text x='32' y='42' text-anchor='middle' font-size='28'>🎰</text>
</svg>"""

    return Response(svg, mimetype="image/svg+xml")

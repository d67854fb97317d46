"""
=============================================================================
NBA 3PM CHECK - RESULTS DASHBOARD
=============================================================================
A small web page over the shared results ledger. Refresh it while workers
are running to watch results come in.

    python dashboard.py
    open http://localhost:5000            (add ?expected=17 to show progress)
    curl http://localhost:5000/api/results
"""

import os

from flask import Flask, jsonify, render_template_string, request

from scrapers.nba.config import DEFAULT_MIN_RATIO, DEFAULT_RESULTS_FILE, DEFAULT_TEAM, team_name
from scrapers.nba.ledger import read_ledger
from scrapers.nba.reporter import build_summary

app = Flask(__name__)

TEAM_COLOR = '#0053BC'


def ledger_path():
    """Ledger location: app config first, then RESULTS_FILE."""
    return app.config.get('RESULTS_FILE') or os.getenv('RESULTS_FILE', DEFAULT_RESULTS_FILE)


def load_summary():
    """Summary of the ledger; ?expected=N sets the expected player count."""
    ledger = read_ledger(ledger_path())
    recorded = len(ledger['passed']) + len(ledger['failed'])
    expected = request.args.get('expected', type=int) or recorded
    return build_summary(ledger, expected, min_ratio=DEFAULT_MIN_RATIO)


def get_styles(team_color='#333'):
    """Return CSS styles with the given team color."""
    return f"""
        * {{ box-sizing: border-box; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 1000px;
            margin: 0 auto;
            padding: 20px;
            background: #f5f5f5;
        }}
        h1 {{
            color: {team_color};
            margin: 0 0 10px 0;
        }}
        .last-updated {{
            color: #666;
            font-size: 0.85em;
            margin-bottom: 20px;
        }}
        .cards {{
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(200px, 1fr));
            gap: 20px;
            margin-bottom: 20px;
        }}
        .card {{
            background: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }}
        .card .count {{ font-size: 2em; font-weight: bold; }}
        .card.pass .count {{ color: #28a745; }}
        .card.fail .count {{ color: #dc3545; }}
        .warning {{
            background: #fff3cd;
            color: #856404;
            padding: 12px;
            border-radius: 8px;
            margin-bottom: 20px;
        }}
        table {{
            width: 100%;
            background: white;
            border-collapse: collapse;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            margin-bottom: 20px;
        }}
        th {{
            background: {team_color};
            color: white;
            padding: 12px 8px;
            text-align: left;
            font-size: 0.85em;
        }}
        td {{
            padding: 10px 8px;
            border-bottom: 1px solid #eee;
            font-size: 0.9em;
        }}
        .badge {{
            display: inline-block;
            padding: 2px 8px;
            border-radius: 4px;
            font-size: 0.85em;
            color: white;
        }}
        .badge.win {{ background: #28a745; }}
        .badge.loss {{ background: #dc3545; }}
    """


RESULTS_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>{{ team }} - 3PM Check</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>{{ styles|safe }}</style>
</head>
<body>
<h1>{{ team }} - Last 5 Games 3PM Check</h1>
<div class="last-updated">Ledger started: {{ summary.timestamp or 'No data available' }}</div>

<div class="cards">
    <div class="card"><div>Recorded</div><div class="count">{{ summary.recorded }} / {{ summary.expected }}</div></div>
    <div class="card pass"><div>Passed</div><div class="count">{{ summary.passed_count }}</div></div>
    <div class="card fail"><div>Failed</div><div class="count">{{ summary.failed_count }}</div></div>
</div>

{% if not summary.healthy %}
<div class="warning">Only {{ summary.recorded }} of {{ summary.expected }} results recorded so far.</div>
{% endif %}

<table>
    <thead>
        <tr><th>#</th><th>Player</th><th>Result</th></tr>
    </thead>
    <tbody>
        {% for name in summary.passed %}
        <tr><td>{{ loop.index }}</td><td>{{ name }}</td><td><span class="badge win">PASS</span></td></tr>
        {% endfor %}
        {% for name in summary.failed %}
        <tr><td>{{ summary.passed_count + loop.index }}</td><td>{{ name }}</td><td><span class="badge loss">FAIL</span></td></tr>
        {% endfor %}
        {% if not summary.recorded %}
        <tr><td colspan="3">No results recorded yet.</td></tr>
        {% endif %}
    </tbody>
</table>
</body>
</html>
"""


@app.route('/')
def home():
    """Pass/fail table for the current ledger."""
    summary = load_summary()
    return render_template_string(
        RESULTS_TEMPLATE,
        summary=summary,
        team=team_name(os.getenv('NBA_TEAM', DEFAULT_TEAM).strip().upper() or DEFAULT_TEAM),
        styles=get_styles(TEAM_COLOR)
    )


@app.route('/api/results')
def api_results():
    """Same summary as JSON."""
    return jsonify(load_summary())


if __name__ == '__main__':
    print("=" * 60)
    print("NBA 3PM CHECK - RESULTS DASHBOARD")
    print("=" * 60)
    print(f"\nLedger: {ledger_path()}")
    print("Open your browser to: http://localhost:5000")
    print("\nPress Ctrl+C to stop the server\n")

    app.run(debug=True, host='0.0.0.0', port=5000)

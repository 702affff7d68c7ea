"""HTML pages for the tracker and sign-in forms."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def tracker_page() -> HTMLResponse:
    """Tracker page that consumes the entries and residual API."""
    return HTMLResponse(_TRACKER_HTML)


@router.get("/auth", response_class=HTMLResponse)
async def auth_page() -> HTMLResponse:
    """Sign-in and sign-up form."""
    return HTMLResponse(_AUTH_HTML)


_STYLE = """
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem auto;
             max-width: 28rem; }
      section { margin-bottom: 1.5rem; padding: 1rem; border: 1px solid #ddd;
                border-radius: 8px; text-align: center; }
      label { display: block; text-align: left; margin-top: 0.5rem; }
      input { padding: 0.4rem 0.6rem; width: 100%; box-sizing: border-box; }
      button { padding: 0.4rem 0.8rem; margin-top: 0.75rem; }
      .mono { font-family: ui-monospace, monospace; }
      .level { font-size: 2rem; font-weight: bold; }
      .badge { display: inline-block; padding: 0.1rem 0.6rem; border-radius: 999px;
               border: 1px solid #999; }
      .badge.destructive { background: #e5484d; color: #fff; }
      .badge.secondary { background: #eee; }
      .badge.default { background: #222; color: #fff; }
      #error { color: #c00; min-height: 1.2rem; }
"""

_TRACKER_HTML = f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Caffeine Tracker</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <section>
      <div id="date" class="mono"></div>
      <div id="clock" class="mono level"></div>
      <button id="mode" onclick="toggleMode()">Switch to 12h format</button>
    </section>
    <section>
      <h2>Current Caffeine Level</h2>
      <div id="residual" class="level">0.0 mg</div>
      <span id="badge" class="badge outline">Minimal</span>
    </section>
    <section>
      <h3>Add Caffeine Entry</h3>
      <label for="entry-date">Date (MM/DD)</label>
      <input id="entry-date" class="mono" placeholder="MM/DD" />
      <label for="entry-time" id="time-label">Time (24:00)</label>
      <input id="entry-time" class="mono" placeholder="HH:MM" />
      <label for="entry-amount">Caffeine Amount (mg)</label>
      <input id="entry-amount" type="number" placeholder="mg" />
      <button onclick="addEntry()">Add Entry</button>
      <div id="error"></div>
    </section>
    <section>
      <h3>Recent Entries</h3>
      <div id="recent"></div>
      <button onclick="signOut()">Sign out</button>
    </section>
    <script>
      const token = localStorage.getItem('caffeine_token');
      if (!token) {{ window.location = '/auth'; }}
      let timeMode = '24h';
      let controller = null;

      function headers() {{
        return {{ 'Authorization': 'Bearer ' + token,
                  'Content-Type': 'application/json' }};
      }}

      function handleUnauthorized(res) {{
        if (res.status === 401) {{
          localStorage.removeItem('caffeine_token');
          window.location = '/auth';
          return true;
        }}
        return false;
      }}

      function render(reading) {{
        document.getElementById('date').textContent = reading.date;
        document.getElementById('clock').textContent = reading.time;
        document.getElementById('residual').textContent = reading.display;
        const badge = document.getElementById('badge');
        badge.textContent = reading.level;
        badge.className = 'badge ' + reading.badge;
      }}

      async function stream() {{
        if (controller) {{ controller.abort(); }}
        controller = new AbortController();
        const res = await fetch('/residual/stream?time_mode=' + timeMode, {{
          headers: headers(), signal: controller.signal
        }});
        if (handleUnauthorized(res)) {{ return; }}
        const reader = res.body.getReader();
        const decoder = new TextDecoder();
        let buffer = '';
        while (true) {{
          const {{ value, done }} = await reader.read();
          if (done) {{ break; }}
          buffer += decoder.decode(value, {{ stream: true }});
          let index;
          while ((index = buffer.indexOf('\\n\\n')) >= 0) {{
            const chunk = buffer.slice(0, index).replace(/^data: /, '');
            buffer = buffer.slice(index + 2);
            render(JSON.parse(chunk));
          }}
        }}
      }}

      async function loadRecent() {{
        const res = await fetch('/entries/recent', {{ headers: headers() }});
        if (handleUnauthorized(res)) {{ return; }}
        const data = await res.json();
        const recent = document.getElementById('recent');
        recent.innerHTML = '';
        for (const entry of data.entries) {{
          const row = document.createElement('div');
          row.className = 'mono';
          row.textContent =
            entry.date + ' ' + entry.time + ' ' + entry.amount_mg + 'mg';
          recent.appendChild(row);
        }}
      }}

      async function addEntry() {{
        const error = document.getElementById('error');
        const body = {{
          date: document.getElementById('entry-date').value,
          time: document.getElementById('entry-time').value,
          amount: document.getElementById('entry-amount').value
        }};
        if (!body.date || !body.time || !body.amount) {{ return; }}
        const res = await fetch('/entries', {{
          method: 'POST', headers: headers(), body: JSON.stringify(body)
        }});
        if (handleUnauthorized(res)) {{ return; }}
        if (!res.ok) {{
          const data = await res.json();
          error.textContent = typeof data.detail === 'string'
            ? data.detail : 'Please check the entry.';
          return;
        }}
        error.textContent = '';
        for (const id of ['entry-date', 'entry-time', 'entry-amount']) {{
          document.getElementById(id).value = '';
        }}
        await loadRecent();
      }}

      function toggleMode() {{
        timeMode = timeMode === '24h' ? 'ampm' : '24h';
        document.getElementById('mode').textContent =
          'Switch to ' + (timeMode === '24h' ? '12h' : '24h') + ' format';
        document.getElementById('time-label').textContent =
          'Time (' + (timeMode === '24h' ? '24:00' : 'AM/PM') + ')';
        document.getElementById('entry-time').placeholder =
          timeMode === '24h' ? 'HH:MM' : 'HH:MM AM/PM';
        stream();
      }}

      async function signOut() {{
        await fetch('/auth/sign-out', {{ method: 'POST', headers: headers() }});
        localStorage.removeItem('caffeine_token');
        window.location = '/auth';
      }}

      if (token) {{ loadRecent(); stream(); }}
    </script>
  </body>
</html>
"""

_AUTH_HTML = f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Caffeine Tracker Sign In</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <section>
      <h2>Caffeine Tracker</h2>
      <label for="email">Email</label>
      <input id="email" type="email" />
      <label for="password">Password</label>
      <input id="password" type="password" />
      <button onclick="submit('/auth/sign-in')">Sign in</button>
      <button onclick="submit('/auth/sign-up')">Sign up</button>
      <div id="error"></div>
    </section>
    <script>
      async function submit(path) {{
        const error = document.getElementById('error');
        const res = await fetch(path, {{
          method: 'POST',
          headers: {{ 'Content-Type': 'application/json' }},
          body: JSON.stringify({{
            email: document.getElementById('email').value,
            password: document.getElementById('password').value
          }})
        }});
        const data = await res.json();
        if (!res.ok) {{
          error.textContent = typeof data.detail === 'string'
            ? data.detail : 'Please check your details.';
          return;
        }}
        if (data.access_token) {{
          localStorage.setItem('caffeine_token', data.access_token);
          window.location = '/';
        }} else {{
          error.textContent = 'Account created. Check your email, then sign in.';
        }}
      }}
    </script>
  </body>
</html>
"""

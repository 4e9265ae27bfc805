from keepalive import __version__

HTML = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Koyeb Keep-Alive Dashboard</title>
<style>
:root{--ok:#10b981;--warn:#f59e0b;--err:#ef4444;--muted:#94a3b8;--card:#1e293b;--bg:#0f172a;--radius:8px}
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,sans-serif;background:var(--bg);color:#e2e8f0;padding:32px 16px}
.wrap{max-width:960px;margin:0 auto}
.header{display:flex;justify-content:space-between;align-items:center;margin-bottom:24px}
.header h1{font-size:1.5rem}
.meta{color:var(--muted);font-size:.875rem}
.grid{display:grid;grid-template-columns:1fr 2fr;gap:20px}
.card{background:var(--card);border:1px solid rgba(255,255,255,.08);border-radius:var(--radius);padding:20px}
.card h2{font-size:.75rem;text-transform:uppercase;letter-spacing:.05em;color:var(--muted);margin-bottom:12px}
.row{display:flex;justify-content:space-between;align-items:center;margin-bottom:10px}
.badge{padding:2px 10px;border-radius:999px;font-size:.75rem;font-weight:600}
.badge-ok{background:rgba(16,185,129,.15);color:var(--ok)}
.badge-warn{background:rgba(245,158,11,.15);color:var(--warn)}
.badge-err{background:rgba(239,68,68,.15);color:var(--err)}
.btn{width:100%;padding:10px 16px;border:none;border-radius:var(--radius);background:#2563eb;color:#fff;font-weight:600;cursor:pointer}
.btn:disabled{opacity:.6;cursor:wait}
.link{background:none;border:none;color:#60a5fa;cursor:pointer;font-size:.8rem}
#logs{font-family:ui-monospace,Menlo,monospace;font-size:.8rem;max-height:560px;overflow-y:auto}
.entry{background:rgba(15,23,42,.6);border-left:4px solid var(--ok);border-radius:4px;padding:10px;margin-bottom:10px}
.entry.error{border-left-color:var(--err)}
.entry .ts{color:var(--muted);font-size:.75rem;margin-bottom:4px}
.entry .msg{word-break:break-all}
.empty{color:var(--muted);text-align:center;padding:40px}
footer{margin-top:32px;text-align:center;color:#475569;font-size:.8rem}
@media (max-width:768px){.grid{grid-template-columns:1fr}}
</style>
</head>
<body>
<div class="wrap">
  <div class="header">
    <div>
      <h1>Koyeb Keep-Alive</h1>
      <p class="meta">v__VERSION__</p>
    </div>
  </div>

  <div class="grid">
    <div>
      <div class="card" style="margin-bottom:20px">
        <h2>Status</h2>
        <div class="row"><span>API token</span>__TOKEN_BADGE__</div>
        <div class="row"><span>History store</span>__KV_BADGE__</div>
      </div>
      <div class="card">
        <h2>Actions</h2>
        <button id="runBtn" class="btn" onclick="triggerKeepAlive()">Run keep-alive now</button>
        <p class="meta" style="margin-top:10px;text-align:center">Scheduled runs are driven by the platform cron.</p>
      </div>
    </div>

    <div class="card">
      <div class="row">
        <h2 style="margin:0">Run log</h2>
        <button class="link" onclick="loadLogs()">Refresh</button>
      </div>
      <div id="logs"><div class="empty" id="emptyState">Waiting for data...</div></div>
    </div>
  </div>

  <footer>Served by FastAPI</footer>
</div>

<script>
const HAS_KV = __HAS_KV__;
const logs = document.getElementById('logs');
const runBtn = document.getElementById('runBtn');

function esc(s){
  return String(s).replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]));
}

function formatTime(iso){
  const d = new Date(iso);
  return isNaN(d) ? iso : d.toLocaleString();
}

function entryHtml(entry){
  const cls = entry.status === 'success' ? 'entry' : 'entry error';
  const msgs = (entry.messages || []).map(m => `<div class="msg">${esc(m)}</div>`).join('');
  return `<div class="${cls}"><div class="ts">${formatTime(entry.timestamp)}</div>${msgs}</div>`;
}

function showEmpty(text){
  logs.innerHTML = `<div class="empty">${esc(text)}</div>`;
}

async function loadLogs(){
  try {
    const r = await fetch('/api/logs', {cache:'no-store'});
    const data = await r.json();
    if (data && data.length) {
      logs.innerHTML = data.map(entryHtml).join('');
    } else {
      showEmpty(HAS_KV ? 'No runs recorded yet' : 'History store not bound; only live runs are shown');
    }
  } catch (e) {
    console.error(e);
  }
}

async function triggerKeepAlive(){
  const label = runBtn.textContent;
  runBtn.disabled = true;
  runBtn.textContent = 'Running...';
  try {
    const r = await fetch('/api/trigger', {cache:'no-store'});
    const data = await r.json();
    const entry = {
      timestamp: new Date().toISOString(),
      status: data.success ? 'success' : 'error',
      messages: data.messages
    };
    const empty = logs.querySelector('.empty');
    if (empty) empty.remove();
    logs.insertAdjacentHTML('afterbegin', entryHtml(entry));
  } catch (e) {
    alert('Trigger failed: ' + e.message);
  } finally {
    runBtn.disabled = false;
    runBtn.textContent = label;
  }
}

if (HAS_KV) loadLogs();
</script>
</body>
</html>
"""

_BADGES = {
    "ok": '<span class="badge badge-ok">{}</span>',
    "warn": '<span class="badge badge-warn">{}</span>',
    "err": '<span class="badge badge-err">{}</span>',
}


def render_dashboard(has_token: bool, has_kv: bool) -> str:
    token_badge = _BADGES["ok"].format("Configured") if has_token else _BADGES["err"].format("Missing token")
    kv_badge = _BADGES["ok"].format("Connected") if has_kv else _BADGES["warn"].format("Not bound")
    return (HTML
            .replace("__VERSION__", __version__)
            .replace("__TOKEN_BADGE__", token_badge)
            .replace("__KV_BADGE__", kv_badge)
            .replace("__HAS_KV__", "true" if has_kv else "false"))

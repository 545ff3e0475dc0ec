"""Mock tuPoint web app for exercising the suite's own helpers.

Serves one page whose DOM carries the same visible text, ARIA roles and
labels as the Flutter build (root ``flt-glass-pane``, auth form with mode
toggle, progressbar spinner, bottom snackbar with role=alert, profile form
with inline username validation, feed with a "Create Point" button), backed
by a small in-memory JSON API:

- POST /auth/v1/signup   {email, password}      -> {token}
- POST /auth/v1/token    {email, password}      -> {token}
- GET  /rest/v1/profile  (Bearer token)         -> {profile: {...} | null}
- POST /rest/v1/profile  {username, bio}        -> {profile}
- POST /__reset                                  -> clears all state

Error bodies are ``{"error": "<message>"}`` using the texts the real backend
returns, so the same expected-error fixtures apply.
"""
from __future__ import annotations

import logging
import re
import secrets
import threading
import time
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.serving import make_server

from tupoint_e2e.fixtures import EXPECTED_ERRORS, THEME_COLORS

logger = logging.getLogger(__name__)

# Mock data storage
USERS: Dict[str, Dict[str, Any]] = {}      # email -> {password, user_id}
PROFILES: Dict[str, Dict[str, Any]] = {}   # user_id -> {username, bio}
SESSIONS: Dict[str, str] = {}              # token -> user_id
_state_lock = threading.Lock()

# Seconds each API call is held back so the loading spinner is observable.
RESPONSE_DELAY = 0.4

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+$")
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
MIN_PASSWORD_LENGTH = 6
SNACKBAR_MS = 4000


def reset_mock_state() -> None:
    with _state_lock:
        USERS.clear()
        PROFILES.clear()
        SESSIONS.clear()


def validate_username(username: str) -> Optional[str]:
    """Same rules as the profile form: required, 3-20 chars, letters/digits/underscore."""
    if not username:
        return EXPECTED_ERRORS["username_required"]
    if len(username) < 3:
        return EXPECTED_ERRORS["username_too_short"]
    if len(username) > 20:
        return EXPECTED_ERRORS["username_too_long"]
    if not USERNAME_RE.match(username):
        return EXPECTED_ERRORS["username_invalid_chars"]
    return None


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _issue_token(user_id: str) -> str:
    token = secrets.token_hex(16)
    SESSIONS[token] = user_id
    return token


def _session_user() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return SESSIONS.get(header[len("Bearer "):])


def create_mock_app(response_delay: float = RESPONSE_DELAY) -> Flask:
    """Create and configure the mock tuPoint Flask app."""
    app = Flask(__name__)
    app.config["TESTING"] = True

    @app.before_request
    def _delay():
        if request.path.startswith(("/auth/", "/rest/")) and response_delay:
            time.sleep(response_delay)

    @app.route("/")
    def index():
        return render_page(), 200, {"Content-Type": "text/html; charset=utf-8"}

    @app.route("/auth/v1/signup", methods=["POST"])
    def signup():
        data = request.get_json(silent=True) or {}
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""

        if not EMAIL_RE.match(email):
            return _error(f"{EXPECTED_ERRORS['invalid_email']} address", 400)
        if len(password) < MIN_PASSWORD_LENGTH:
            return _error(EXPECTED_ERRORS["weak_password"], 422)

        with _state_lock:
            if email.lower() in USERS:
                return _error(EXPECTED_ERRORS["user_already_exists"], 422)
            user_id = secrets.token_hex(8)
            USERS[email.lower()] = {"password": password, "user_id": user_id}
            token = _issue_token(user_id)
        logger.debug("Mock sign-up: %s", email)
        return jsonify({"token": token})

    @app.route("/auth/v1/token", methods=["POST"])
    def sign_in():
        data = request.get_json(silent=True) or {}
        email = (data.get("email") or "").strip().lower()
        password = data.get("password") or ""

        with _state_lock:
            user = USERS.get(email)
            if user is None or user["password"] != password:
                return _error(EXPECTED_ERRORS["invalid_credentials"], 400)
            token = _issue_token(user["user_id"])
        return jsonify({"token": token})

    @app.route("/rest/v1/profile", methods=["GET"])
    def read_profile():
        user_id = _session_user()
        if user_id is None:
            return _error("Not authenticated", 401)
        return jsonify({"profile": PROFILES.get(user_id)})

    @app.route("/rest/v1/profile", methods=["POST"])
    def create_profile():
        user_id = _session_user()
        if user_id is None:
            return _error("Not authenticated", 401)

        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        bio = data.get("bio") or None

        problem = validate_username(username)
        if problem:
            return _error(problem, 400)
        if bio and len(bio) > 280:
            return _error("Bio must be 280 characters or less", 400)

        with _state_lock:
            taken = any(
                p["username"].lower() == username.lower()
                for uid, p in PROFILES.items()
                if uid != user_id
            )
            if taken:
                return _error(EXPECTED_ERRORS["username_taken"], 409)
            PROFILES[user_id] = {"username": username, "bio": bio}
        return jsonify({"profile": PROFILES[user_id]})

    @app.route("/__reset", methods=["POST"])
    def reset():
        reset_mock_state()
        return jsonify({"status": "ok"})

    return app


class MockServer:
    """Runs the mock app on a free loopback port in a daemon thread."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0, response_delay: float = RESPONSE_DELAY):
        self.host = host
        self.app = create_mock_app(response_delay)
        self.server = make_server(host, port, self.app, threaded=True)
        self.port = self.server.server_port
        self.thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> "MockServer":
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        logger.info("Mock tuPoint app listening on %s", self.url)
        return self

    def stop(self) -> None:
        self.server.shutdown()
        if self.thread:
            self.thread.join(timeout=5)
        self.server.server_close()


# ---- page --------------------------------------------------------------------

def render_page() -> str:
    light = THEME_COLORS["light"]
    dark = THEME_COLORS["dark"]
    replacements = {
        "__LIGHT_START__": light.background_start,
        "__LIGHT_END__": light.background_end,
        "__LIGHT_CARD__": light.card_background,
        "__LIGHT_PRIMARY__": light.location_blue,
        "__DARK_START__": dark.background_start,
        "__DARK_END__": dark.background_end,
        "__DARK_CARD__": dark.card_background,
        "__DARK_PRIMARY__": dark.location_blue,
        "__SNACKBAR_MS__": str(SNACKBAR_MS),
        "__MIN_PASSWORD__": str(MIN_PASSWORD_LENGTH),
    }
    page = PAGE_TEMPLATE
    for key, value in replacements.items():
        page = page.replace(key, value)
    return page


PAGE_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Mock app</title>
<style>
  :root {
    --bg-start: __LIGHT_START__; --bg-end: __LIGHT_END__;
    --card: __LIGHT_CARD__; --primary: __LIGHT_PRIMARY__; --text: #10202f;
  }
  @media (prefers-color-scheme: dark) {
    :root {
      --bg-start: __DARK_START__; --bg-end: __DARK_END__;
      --card: __DARK_CARD__; --primary: __DARK_PRIMARY__; --text: #e8f2ff;
    }
  }
  html, body { margin: 0; padding: 0; font-family: sans-serif; color: var(--text); }
  flt-glass-pane {
    display: block; min-height: 100vh; box-sizing: border-box; padding: 32px;
    background-image: linear-gradient(180deg, var(--bg-start), var(--bg-end));
  }
  .card { max-width: 420px; margin: 0 auto; padding: 24px; border-radius: 16px; background: var(--card); }
  .field { display: flex; flex-direction: column; margin: 12px 0; }
  .field input, .field textarea { padding: 8px; font-size: 16px; }
  .helper { font-size: 12px; margin: 4px 0 0; }
  .error { font-size: 12px; margin: 4px 0 0; color: #c62828; }
  button { padding: 10px 16px; font-size: 16px; border: 0; border-radius: 8px;
           background-color: var(--primary); color: #ffffff; cursor: pointer; }
  .spinner { display: inline-block; width: 20px; height: 20px; border-radius: 50%;
             border: 3px solid var(--primary); border-top-color: transparent;
             animation: spin 0.8s linear infinite; }
  @keyframes spin { to { transform: rotate(360deg); } }
  .fab { position: fixed; right: 32px; bottom: 32px; border-radius: 28px;
         box-shadow: 0 0 16px var(--primary); }
  .snackbar { position: fixed; left: 50%; bottom: 24px; transform: translateX(-50%);
              min-width: 280px; padding: 14px 20px; border-radius: 6px;
              background-color: #323232; color: #ffffff; }
</style>
</head>
<body>
<script>
(function () {
  const TOKEN_KEY = 'tupoint.session';
  const state = { mode: 'sign_in', loading: false, usernameError: '' };
  let pane = null;
  let snackTimer = null;

  function el(html) {
    const wrap = document.createElement('div');
    wrap.innerHTML = html.trim();
    return wrap.firstChild;
  }

  function showSnackbar(message) {
    const old = document.querySelector('.snackbar');
    if (old) old.remove();
    if (snackTimer) clearTimeout(snackTimer);
    const bar = document.createElement('div');
    bar.className = 'snackbar';
    bar.setAttribute('role', 'alert');
    bar.textContent = message;
    document.body.appendChild(bar);
    snackTimer = setTimeout(function () { bar.remove(); }, __SNACKBAR_MS__);
  }

  async function api(method, path, body) {
    const headers = { 'Content-Type': 'application/json' };
    const token = localStorage.getItem(TOKEN_KEY);
    if (token) headers['Authorization'] = 'Bearer ' + token;
    const response = await fetch(path, {
      method: method, headers: headers, body: body ? JSON.stringify(body) : undefined,
    });
    let data = {};
    try { data = await response.json(); } catch (e) { data = {}; }
    return { ok: response.ok, status: response.status, data: data };
  }

  function spinner() { return '<div class="spinner" role="progressbar" aria-label="Loading"></div>'; }

  function renderLoading() {
    pane.innerHTML = '<div class="card">' + spinner() + '</div>';
  }

  function renderLogin() {
    const signUp = state.mode === 'sign_up';
    pane.innerHTML = '';
    const card = el(
      '<div class="card" data-screen="login" data-mode="' + state.mode + '">' +
      '<h1>tuPoint</h1>' +
      '<p class="tagline">what\'s your point?</p>' +
      '<h2>' + (signUp ? 'Create Account' : 'Welcome back') + '</h2>' +
      '<div class="field"><label for="email">Email</label><input id="email" type="text" autocomplete="off"></div>' +
      '<div class="field"><label for="password">Password</label><input id="password" type="password">' +
      (signUp ? '<p class="helper">Min __MIN_PASSWORD__ chars with uppercase, lowercase, and digit</p>' : '') +
      '</div>' +
      '<div class="actions"></div>' +
      '<p><a href="#" class="toggle">' +
      (signUp ? 'Already have an account? Sign In' : 'Need an account? Sign Up') + '</a></p>' +
      (signUp ? '<p class="info">After signing up, you\'ll choose your username</p>' : '') +
      '</div>'
    );
    pane.appendChild(card);
    renderAuthActions();
    card.querySelector('.toggle').addEventListener('click', function (event) {
      event.preventDefault();
      state.mode = signUp ? 'sign_in' : 'sign_up';
      renderLogin();
    });
  }

  function renderAuthActions() {
    const actions = pane.querySelector('.actions');
    if (!actions) return;
    if (state.loading) {
      actions.innerHTML = spinner();
      return;
    }
    const label = state.mode === 'sign_up' ? 'Sign Up' : 'Sign In';
    actions.innerHTML = '<button type="button" class="submit">' + label + '</button>';
    actions.querySelector('.submit').addEventListener('click', submitAuth);
  }

  async function submitAuth() {
    const email = pane.querySelector('#email').value.trim();
    const password = pane.querySelector('#password').value;
    if (!email || !password) {
      showSnackbar('Please enter email and password');
      return;
    }
    state.loading = true;
    renderAuthActions();
    const path = state.mode === 'sign_up' ? '/auth/v1/signup' : '/auth/v1/token';
    let result;
    try {
      result = await api('POST', path, { email: email, password: password });
    } catch (e) {
      result = { ok: false, data: { error: 'Network request failed' } };
    }
    state.loading = false;
    if (!result.ok) {
      renderAuthActions();
      showSnackbar(result.data.error || 'Request failed');
      return;
    }
    localStorage.setItem(TOKEN_KEY, result.data.token);
    await route();
  }

  function renderProfile() {
    pane.innerHTML = '';
    const card = el(
      '<div class="card" data-screen="profile">' +
      '<h1>Create Profile</h1>' +
      '<h2>Welcome to tuPoint!</h2>' +
      '<p>Pick a username to get started</p>' +
      '<div class="field"><label for="username">Username</label>' +
      '<input id="username" type="text" placeholder="@CoolMapMaker_99" autocomplete="off">' +
      '<p class="helper">3-20 characters, letters, numbers, underscores only</p>' +
      '<p class="error" id="username-error"></p></div>' +
      '<div class="field"><label for="bio">Bio (Optional)</label>' +
      '<textarea id="bio" maxlength="280" placeholder="Tell others about yourself..."></textarea>' +
      '<p class="helper">Max 280 characters</p></div>' +
      '<div class="actions"></div>' +
      '</div>'
    );
    pane.appendChild(card);
    renderProfileActions();
  }

  function renderProfileActions() {
    const actions = pane.querySelector('.actions');
    if (!actions) return;
    if (state.loading) {
      actions.innerHTML = spinner();
      return;
    }
    actions.innerHTML = '<button type="button" class="submit">Done</button>';
    actions.querySelector('.submit').addEventListener('click', submitProfile);
  }

  function usernameProblem(username) {
    if (!username) return 'Username is required';
    if (username.length < 3) return 'Username must be at least 3 characters';
    if (username.length > 20) return 'Username must be 20 characters or less';
    if (!/^[A-Za-z0-9_]+$/.test(username)) return 'Username can only contain letters, numbers, and underscores';
    return '';
  }

  async function submitProfile() {
    const username = pane.querySelector('#username').value.trim();
    const bio = pane.querySelector('#bio').value;
    const problem = usernameProblem(username);
    pane.querySelector('#username-error').textContent = problem;
    if (problem) return;

    state.loading = true;
    renderProfileActions();
    let result;
    try {
      result = await api('POST', '/rest/v1/profile', { username: username, bio: bio || null });
    } catch (e) {
      result = { ok: false, data: { error: 'Network request failed' } };
    }
    state.loading = false;
    if (!result.ok) {
      renderProfileActions();
      showSnackbar(result.data.error || 'Request failed');
      return;
    }
    renderFeed();
  }

  function renderFeed() {
    pane.innerHTML = '';
    pane.appendChild(el(
      '<div class="card" data-screen="feed">' +
      '<header><h1>tuPoint</h1></header>' +
      '<section class="empty"><p>No points nearby</p><p>Be the first to drop a point!</p></section>' +
      '<button type="button" class="fab">Create Point</button>' +
      '</div>'
    ));
  }

  async function route() {
    if (!localStorage.getItem(TOKEN_KEY)) {
      renderLogin();
      return;
    }
    renderLoading();
    let result;
    try {
      result = await api('GET', '/rest/v1/profile');
    } catch (e) {
      result = { ok: false, status: 0, data: {} };
    }
    if (!result.ok) {
      localStorage.removeItem(TOKEN_KEY);
      renderLogin();
      return;
    }
    if (result.data.profile) {
      renderFeed();
    } else {
      renderProfile();
    }
  }

  pane = document.createElement('flt-glass-pane');
  document.body.appendChild(pane);
  route();
})();
</script>
</body>
</html>
"""

import json
from html import escape

_PAGE_STYLE = "font-family:system-ui,Segoe UI,Roboto,Arial;margin:32px;color:#111"


def missing_service_key_page() -> str:
    return (
        f'<html><body style="{_PAGE_STYLE}">'
        "<h2>Server misconfiguration</h2>"
        "<p>Missing <code>SUPABASE_SERVICE_ROLE_KEY</code>. The server must be able to persist "
        "the OAuth state so the callback can verify it.</p>"
        "<p>Add <code>SUPABASE_SERVICE_ROLE_KEY</code> to your <code>.env</code> and restart the server.</p>"
        "</body></html>"
    )


def missing_client_id_page(redirect_uri: str) -> str:
    return (
        f'<html><body style="{_PAGE_STYLE}">'
        "<h2>Google OAuth misconfiguration</h2>"
        "<p>Missing <code>GOOGLE_CLIENT_ID</code>. Set it in your <code>.env</code> "
        "or deployment and restart the server.</p>"
        f"<pre>GOOGLE_CLIENT_ID=...apps.googleusercontent.com\nGOOGLE_REDIRECT_URI={escape(redirect_uri)}</pre>"
        "</body></html>"
    )


def invalid_state_page(state: str) -> str:
    return (
        f'<html><body style="{_PAGE_STYLE}">'
        "<h2>Invalid state</h2>"
        "<p>The <code>state</code> parameter returned by Google could not be found on the server. Possible causes:</p>"
        "<ul>"
        "<li>The server did not persist the state (missing <code>SUPABASE_SERVICE_ROLE_KEY</code> or store error).</li>"
        "<li>The consent request started on a different deployment that does not share the store.</li>"
        "<li>The <code>state</code> parameter was modified.</li>"
        "</ul>"
        f"<p>State value: <code>{escape(state)}</code></p>"
        "</body></html>"
    )


def connected_page(user_id: str) -> str:
    """Popup page that tells the opener window the account is connected, then closes itself."""
    user_id_literal = json.dumps(user_id).replace("</", "<\\/")
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>Connected</title>
  </head>
  <body style="font-family:system-ui,Segoe UI,Roboto,Arial;margin:24px;">
    <p>Successfully connected. You can close this window.</p>
    <script>
      try {{
        if (window.opener && !window.opener.closed) {{
          window.opener.postMessage({{ type: 'google_connected', user_id: {user_id_literal} }}, '*')
        }}
      }} catch (e) {{ }}
      setTimeout(() => {{
        try {{ window.close() }} catch (e) {{}}
      }}, 600)
    </script>
  </body>
</html>
"""

"""Development-only donation test form.

Serves a small HTML page that posts to the webhook endpoint. Answers 404
when the environment is production.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

TEST_FORM_PATH = "/api/test-donation"

_TEST_FORM_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Test Donation</title>
  <style>
    body { font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px; }
    label { display: block; margin-top: 12px; font-weight: bold; }
    input, textarea { width: 100%; padding: 8px; box-sizing: border-box; }
    button { margin-top: 16px; padding: 10px 20px; }
    pre { background: #f5f5f5; padding: 12px; display: none; }
  </style>
</head>
<body>
  <h1>Test Donation</h1>
  <form id="donationForm">
    <label for="donor_name">Donor name</label>
    <input type="text" id="donor_name" value="TestUser123" maxlength="50" required>
    <label for="amount">Amount</label>
    <input type="number" id="amount" value="10000" min="1" required>
    <label for="message">Message (optional)</label>
    <textarea id="message" rows="3" maxlength="200"></textarea>
    <button type="submit">Send test donation</button>
  </form>
  <pre id="response"></pre>
  <script>
    document.getElementById('donationForm').addEventListener('submit', async (e) => {
      e.preventDefault();
      const out = document.getElementById('response');
      const data = {
        donor_name: document.getElementById('donor_name').value,
        amount: parseInt(document.getElementById('amount').value, 10),
        message: document.getElementById('message').value
      };
      try {
        const resp = await fetch('/api/webhook', {
          method: 'POST',
          headers: {'Content-Type': 'application/json'},
          body: JSON.stringify(data)
        });
        out.textContent = resp.status + ' ' + JSON.stringify(await resp.json(), null, 2);
        if (resp.ok) { document.getElementById('message').value = ''; }
      } catch (err) {
        out.textContent = 'Error: ' + err.message;
      }
      out.style.display = 'block';
    });
  </script>
</body>
</html>
"""


def register_dev_routes(app: FastAPI) -> None:
    """Register the test form route."""

    @app.get(TEST_FORM_PATH)
    async def test_donation_form(request: Request):
        if request.app.state.bridge.settings.is_production:
            return JSONResponse({"error": "Not found"}, status_code=404)
        return HTMLResponse(_TEST_FORM_HTML)
